from typing import Any, Iterable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def dialect_insert(db: Session, model: Any):
    """
    Return an INSERT construct for *model* which supports ``ON CONFLICT`` clauses on the session's dialect.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)

    raise NotImplementedError(f"Upserts are not supported for the '{dialect}' dialect.")


def upsert(
    db: Session,
    model: Any,
    values: dict[str, Any],
    conflict_columns: Iterable[str],
    update_columns: Iterable[str],
) -> None:
    """
    Insert a row, or update *update_columns* of the row already holding the same *conflict_columns* values.

    Concurrent writers on the same key resolve at the database; whichever commits last wins.
    """
    statement = dialect_insert(db, model).values(**values)
    statement = statement.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={column: statement.excluded[column] for column in update_columns},
    )
    db.execute(statement)
