from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError

from robotops.db.transaction import atomic, is_unique_violation
from robotops.db.upsert import dialect_insert, upsert
from robotops.lib.exceptions import ConflictError
from robotops.models.enums.group_role import GroupRole
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User
from tests.helpers.constants import EXTRA_USER, TEST_USER
from tests.helpers.util import count_rows


def _integrity_error(orig):
    return IntegrityError("INSERT ...", {}, orig)


class TestUniqueViolation:
    def test_postgresql_unique_violation(self):
        assert is_unique_violation(_integrity_error(Mock(pgcode="23505")))

    def test_postgresql_foreign_key_violation(self):
        assert not is_unique_violation(_integrity_error(Mock(pgcode="23503")))

    def test_sqlite_unique_violation(self):
        assert is_unique_violation(_integrity_error(Exception("UNIQUE constraint failed: users.email")))

    def test_sqlite_check_violation(self):
        assert not is_unique_violation(_integrity_error(Exception("CHECK constraint failed: asset_owner_xor")))


def test_atomic_commits_on_success(database, session):
    with atomic(session):
        session.add(User(**TEST_USER))

    with database.session() as other_session:
        assert count_rows(other_session, User) == 1


def test_atomic_rolls_back_on_error(session):
    with pytest.raises(RuntimeError):
        with atomic(session):
            session.add(User(**TEST_USER))
            session.flush()
            raise RuntimeError("boom")

    assert count_rows(session, User) == 0


def test_atomic_maps_unique_violations_to_conflicts(session):
    session.add(User(**TEST_USER))
    session.commit()

    with pytest.raises(ConflictError):
        with atomic(session):
            session.add(User(**{**EXTRA_USER, "email": TEST_USER["email"]}))

    assert count_rows(session, User) == 1


def test_atomic_reraises_other_integrity_errors(session):
    with pytest.raises(IntegrityError):
        with atomic(session):
            session.add(Group(name="orphan", owner_id=12345))

    assert count_rows(session, Group) == 0


def test_dialect_insert_rejects_unsupported_dialects():
    db = Mock()
    db.get_bind.return_value.dialect.name = "mssql"

    with pytest.raises(NotImplementedError):
        dialect_insert(db, User)


def test_upsert_inserts_then_updates(session, test_user):
    group = Group(name="fleet", owner_id=test_user.id)
    session.add(group)
    session.commit()

    for role in (GroupRole.member, GroupRole.admin):
        upsert(
            session,
            GroupMembership,
            {"group_id": group.id, "user_id": test_user.id, "role": role},
            conflict_columns=("group_id", "user_id"),
            update_columns=("role",),
        )
        session.commit()

    memberships = session.query(GroupMembership).all()
    assert [(m.user_id, m.role) for m in memberships] == [(test_user.id, GroupRole.admin)]
