import re

from raggnet.core.errors import ValidationError

ID_PATTERN = re.compile(r'[0-9a-fA-F]{24}')
PHONE_LENGTH = 10
EMAIL_PATTERN = re.compile(
    r'(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r'@'
    r'((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))'
)
URL_SCHEME_PATTERN = re.compile(r'^((https?)|(ftp))://.+')


def is_valid_id(value: str | None) -> bool:
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: str | None) -> bool:
    if not isinstance(value, str) or len(value) != PHONE_LENGTH:
        return False
    if not value.isascii() or not value.isdigit():
        return False
    return int(value) != 0


def is_valid_email(value: str | None) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


def normalize_url(value: str) -> str:
    """Prefix ``http://`` unless the URL already names an http(s) or ftp scheme."""
    if URL_SCHEME_PATTERN.match(value):
        return value
    return f'http://{value}'


def valid_id(id: str) -> str:
    """Path dependency for ``{id}`` segments; runs before any guard."""
    if not is_valid_id(id):
        raise ValidationError('Invalid ID')
    return id
