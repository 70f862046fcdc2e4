from typing import Any, Generator

from sqlalchemy.orm import Session

from robotops.db.session import Database


def get_db(database: Database) -> Generator[Session, Any, None]:
    db = database.session()
    try:
        yield db
    finally:
        db.close()
