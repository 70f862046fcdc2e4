import logging  # noqa: F401

import pytest

from robotops.db.session import Database
from robotops.models import *  # noqa: F403
from robotops.models.enums.user_role import UserRole
from robotops.models.user import User

from tests.helpers.constants import ADMIN_USER, EXTRA_USER, STAFF_USER, TEST_USER, THIRD_USER


@pytest.fixture()
def database(tmp_path):
    # Un-comment this line to log all database queries:
    # logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    database = Database(f"sqlite:///{tmp_path}/robotops.db").open()
    database.create_schema()

    try:
        yield database
    finally:
        database.drop_schema()
        database.close()


@pytest.fixture()
def session(database):
    session = database.session()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def setup_lib_db(session):
    """
    Sets up the lib test db with a handful of users. Groups and assets are created through the library
    operations in each test, since those operations are what the tests exercise.
    """
    db = session
    db.add(User(**TEST_USER))
    db.add(User(**EXTRA_USER))
    db.add(User(**THIRD_USER))
    db.add(User(**ADMIN_USER, role=UserRole.admin))
    db.add(User(**STAFF_USER))
    db.commit()


def _user(db, username):
    return db.query(User).filter(User.username == username).one()


@pytest.fixture
def test_user(session, setup_lib_db):
    return _user(session, TEST_USER["username"])


@pytest.fixture
def extra_user(session, setup_lib_db):
    return _user(session, EXTRA_USER["username"])


@pytest.fixture
def third_user(session, setup_lib_db):
    return _user(session, THIRD_USER["username"])


@pytest.fixture
def admin_user(session, setup_lib_db):
    return _user(session, ADMIN_USER["username"])


@pytest.fixture
def staff_user(session, setup_lib_db):
    return _user(session, STAFF_USER["username"])
