from enum import Enum


class Role(str, Enum):
    """Account roles, declared from least to most privileged."""

    USER = 'user'
    ADMIN = 'admin'
    SUPER_ADMIN = 'super-admin'

    @property
    def rank(self) -> int:
        return list(Role).index(self)

    def meets(self, minimum: 'Role') -> bool:
        return self.rank >= minimum.rank
