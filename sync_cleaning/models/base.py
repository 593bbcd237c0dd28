from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Properties, feeds, reservations, task types and cleaning tasks all share this
    metadata so Alembic can autogenerate migrations for the whole schema.
    """

    pass
