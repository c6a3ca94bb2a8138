from sqlalchemy import Column, Text, TIMESTAMP, Integer, UniqueConstraint, func

from .base import Base, EmbeddingVector, new_id


class MatchingTextEmbedding(Base):
    """
    Cached embedding of an entity's text block.

    A cached vector is reused only while ``content_hash`` matches the hash of
    the entity's current text.
    """
    __tablename__ = 'matching_text_embeddings'

    id = Column(Text, primary_key=True, default=new_id)
    entity_type = Column(Text, nullable=False)  # driver_profile|job|application|lead
    entity_id = Column(Text, nullable=False)
    content_hash = Column(Text, nullable=False)
    embedding = Column(EmbeddingVector, nullable=False)
    dimensions = Column(Integer)
    provider = Column(Text)
    model = Column(Text)

    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('entity_type', 'entity_id', name='uq_matching_text_embedding_entity'),
    )
