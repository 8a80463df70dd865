"""Database query utility functions."""
from typing import Optional, TypeVar, Type, Any
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

T = TypeVar("T")


def get_by_field(
    db: Session,
    model: Type[T],
    field_name: str,
    field_value: Any,
) -> Optional[T]:
    """
    Get a model instance by a specific field.

    Args:
        db: Database session
        model: SQLAlchemy model class
        field_name: Name of the field to filter by
        field_value: Value to filter by

    Returns:
        Model instance or None
    """
    field = getattr(model, field_name)
    return db.query(model).filter(field == field_value).first()


def upsert_insert(db: Session, model: Type[Any]):
    """
    Return a dialect-specific INSERT construct supporting ON CONFLICT.

    PostgreSQL and SQLite both expose ``on_conflict_do_nothing`` and
    ``on_conflict_do_update`` on their own ``insert``; the generic
    ``sqlalchemy.insert`` does not.

    Args:
        db: Database session (its bind decides the dialect)
        model: SQLAlchemy model class to insert into

    Returns:
        Insert construct for ``model``'s table

    Raises:
        ValueError: If the configured dialect has no native upsert support
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise ValueError(f"Upsert not supported for dialect: {dialect}")
