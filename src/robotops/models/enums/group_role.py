import enum


class GroupRole(enum.Enum):
    member = "member"
    admin = "admin"
