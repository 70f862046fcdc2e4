"""Tests for core permissions functionality."""

from unittest.mock import Mock, patch

import pytest

from robotops.lib.exceptions import ForbiddenError
from robotops.lib.permissions import asset, assert_permission, group, user
from robotops.lib.permissions.actions import Action
from robotops.lib.permissions.core import has_permission as core_has_permission
from robotops.lib.permissions.models import PermissionResponse
from robotops.models.asset import Asset
from robotops.models.group import Group
from robotops.models.user import User

SUPPORTED_ENTITY_TYPES = {
    Asset: asset.has_permission,
    Group: group.has_permission,
    User: user.has_permission,
}


class TestCoreDispatcher:
    """Test the core permission dispatcher functionality."""

    @pytest.mark.parametrize("entity, handler", SUPPORTED_ENTITY_TYPES.items())
    def test_dispatcher_routes_to_correct_entity_handler(self, entity, handler):
        db = Mock()
        acting_user = Mock(spec=User)

        with (
            patch("robotops.lib.permissions.core.type", return_value=entity, create=True),
            patch(
                f"robotops.lib.permissions.core.{handler.__module__.split('.')[-1]}.{handler.__name__}",
                return_value=PermissionResponse(True),
            ) as mocked_handler,
        ):
            core_has_permission(db, acting_user, entity, Action.READ)
            mocked_handler.assert_called_once_with(db, acting_user, entity, Action.READ)

    def test_dispatcher_raises_for_unsupported_entity_type(self):
        unsupported_entity = Mock()

        with pytest.raises(NotImplementedError) as exc_info:
            core_has_permission(Mock(), Mock(spec=User), unsupported_entity, Action.READ)

        error_msg = str(exc_info.value)
        assert "not implemented" in error_msg.lower()
        assert "Mock" in error_msg
        assert "Supported entity types" in error_msg


class TestAssertPermission:
    """Test the assert_permission function."""

    def test_assert_permission_returns_result_when_permitted(self):
        with patch("robotops.lib.permissions.core.has_permission", return_value=PermissionResponse(True)):
            result = assert_permission(Mock(), Mock(spec=User), Mock(), Action.READ)

        assert result.permitted

    def test_assert_permission_raises_forbidden_when_denied(self):
        denied = PermissionResponse(False, "insufficient permissions to update asset 'RB-0001'")

        with patch("robotops.lib.permissions.core.has_permission", return_value=denied):
            with pytest.raises(ForbiddenError) as exc_info:
                assert_permission(Mock(), Mock(spec=User), Mock(), Action.UPDATE)

        assert exc_info.value.message == "insufficient permissions to update asset 'RB-0001'"

    def test_assert_permission_uses_default_message_when_none_provided(self):
        denied = Mock(permitted=False, message=None)

        with patch("robotops.lib.permissions.core.has_permission", return_value=denied):
            with pytest.raises(ForbiddenError) as exc_info:
                assert_permission(Mock(), Mock(spec=User), Mock(), Action.DELETE)

        assert exc_info.value.message == "Permission denied"
