"""Declarative base shared by all ORM models"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# ORM model classes live in infrastructure/orm/; nothing is imported here
# to avoid circular imports.
