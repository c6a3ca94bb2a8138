import uuid

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from pgvector.sqlalchemy import Vector

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# pgvector column on PostgreSQL, JSON list elsewhere
EmbeddingVector = JSON().with_variant(Vector(), "postgresql")


def new_id() -> str:
    return str(uuid.uuid4())
