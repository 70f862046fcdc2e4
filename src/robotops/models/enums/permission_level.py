import enum
from typing import Iterable


class PermissionLevel(enum.Enum):
    """
    Capability a user holds on an asset. ``none`` is a valid resolved level, never stored on a grant.
    """

    none = "none"
    usage = "usage"
    admin = "admin"

    @property
    def rank(self) -> int:
        return _PRECEDENCE[self]

    def at_least(self, other: "PermissionLevel") -> bool:
        return self.rank >= other.rank

    @classmethod
    def highest(cls, levels: Iterable["PermissionLevel"]) -> "PermissionLevel":
        return max(levels, key=lambda level: level.rank, default=cls.none)


_PRECEDENCE = {
    PermissionLevel.none: 0,
    PermissionLevel.usage: 1,
    PermissionLevel.admin: 2,
}
