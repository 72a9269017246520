"""
Declarative base - every ORM model inherits from Base.

Importing nowcal.models registers the tables on Base.metadata.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
