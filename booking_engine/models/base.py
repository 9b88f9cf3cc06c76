from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Tables are declared through the ORM but read and written with Core
    statements over an Engine/Connection, so every model here is a table
    definition first.
    """

    pass
