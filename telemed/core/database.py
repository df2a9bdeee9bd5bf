"""Declarative base for the hosted database schema.

The tables live in the managed backend; nothing here opens a connection.
The models only describe the schema so that queries can be checked against
it before they are sent.
"""
import uuid

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# text[] and jsonb on the backend; plain JSON anywhere else (e.g. SQLite)
TextArray = ARRAY(Text).with_variant(JSON(), "sqlite")
JsonValue = JSONB().with_variant(JSON(), "sqlite")


def new_uuid() -> str:
    return str(uuid.uuid4())
