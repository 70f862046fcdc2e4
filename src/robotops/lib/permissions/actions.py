from enum import Enum


class Action(Enum):
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    SET_PERMISSION = "set_permission"
    MANAGE_SETTINGS = "manage_settings"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    ADD_ASSET = "add_asset"
    CHANGE_ROLE = "change_role"
