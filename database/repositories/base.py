from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def insert(self, model):
        """Dialect-specific INSERT supporting ON CONFLICT (PostgreSQL or SQLite)."""
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite.insert(model)
        return postgresql.insert(model)
