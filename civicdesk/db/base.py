"""Declarative base shared by every civicdesk table."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
