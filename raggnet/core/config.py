import os

from dotenv import load_dotenv


load_dotenv()


APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./raggnet.db")

TOKEN_SECRET_KEY = os.getenv("TOKEN_SECRET_KEY", "change-me")
TOKEN_ALGORITHM = os.getenv("TOKEN_ALGORITHM", "HS256")
TOKEN_EXPIRES_MINUTES = int(os.getenv("TOKEN_EXPIRES_MINUTES", "1440"))

SUPER_ADMIN_EMAIL = os.getenv("SUPER_ADMIN_EMAIL", "")
SUPER_ADMIN_PASSWORD = os.getenv("SUPER_ADMIN_PASSWORD", "")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:4200").split(",")
    if origin.strip()
]

RELATED_RESOURCES_LIMIT = int(os.getenv("RELATED_RESOURCES_LIMIT", "10"))


def is_production() -> bool:
    return APP_ENV.strip().lower() == "production"


def validate_runtime_config() -> None:
    if is_production() and TOKEN_SECRET_KEY == "change-me":
        raise RuntimeError("TOKEN_SECRET_KEY must be set in production.")
