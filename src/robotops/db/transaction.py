import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from robotops.lib.exceptions import ConflictError
from robotops.lib.logging.context import format_raised_exception_info_as_dict, logging_context, save_to_logging_context

logger = logging.getLogger(__name__)

POSTGRESQL_UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """
    Tell a unique-constraint violation apart from other integrity failures (foreign keys, checks, not-null).
    """
    original = error.orig
    if getattr(original, "pgcode", None) == POSTGRESQL_UNIQUE_VIOLATION:
        return True

    # sqlite3 reports every integrity failure with the same exception type, only the message differs.
    message = str(original)
    return message.startswith("UNIQUE constraint failed")


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run the enclosed block as one all-or-nothing unit of work.

    The session is committed when the block finishes and rolled back if anything is raised. Unique
    constraint violations surface as :class:`ConflictError`; every other exception is re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        save_to_logging_context(format_raised_exception_info_as_dict(e))

        if is_unique_violation(e):
            logger.info(msg="Rolled back a write which violated a uniqueness constraint.", extra=logging_context())
            raise ConflictError("The requested change conflicts with an existing record.") from e

        logger.warning(msg="Rolled back a write which violated an integrity constraint.", extra=logging_context())
        raise
    except BaseException:
        db.rollback()
        raise
