from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, tuple_

from database.models import MatchingTextEmbedding
from database.repositories.base import BaseRepository

EmbeddingKey = Tuple[str, str, str]  # (entity_type, entity_id, content_hash)


class EmbeddingRepository(BaseRepository):
    def get_cached(self, keys: Iterable[EmbeddingKey]) -> List[Tuple[EmbeddingKey, List[float]]]:
        """Cached vectors whose stored content hash still matches the requested one."""
        wanted = {(entity_type, entity_id): digest for entity_type, entity_id, digest in keys}
        if not wanted:
            return []

        stmt = select(MatchingTextEmbedding).where(
            tuple_(MatchingTextEmbedding.entity_type, MatchingTextEmbedding.entity_id).in_(list(wanted))
        )
        hits = []
        for row in self.db.execute(stmt).scalars().all():
            digest = wanted.get((row.entity_type, row.entity_id))
            if digest == row.content_hash:
                hits.append(((row.entity_type, row.entity_id, row.content_hash), [float(v) for v in row.embedding]))
        return hits

    def upsert_embedding(
        self,
        key: EmbeddingKey,
        vector: List[float],
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        entity_type, entity_id, digest = key
        values = dict(
            content_hash=digest,
            embedding=list(vector),
            dimensions=len(vector),
            provider=provider,
            model=model,
        )
        stmt = self.insert(MatchingTextEmbedding).values(entity_type=entity_type, entity_id=entity_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=['entity_type', 'entity_id'], set_=values)
        self.db.execute(stmt)
