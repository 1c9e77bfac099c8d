"""Shared utilities for service layer."""
from sqlalchemy.orm import Session


def dialect_insert(db: Session, model):
    """
    Return an ``INSERT`` construct that supports ``on_conflict_do_update``.

    PostgreSQL and SQLite both implement ``INSERT ... ON CONFLICT``; the
    construct has to come from the dialect the session is bound to.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise ValueError(f"Upsert is not supported on the '{dialect}' dialect")
    return insert(model)
