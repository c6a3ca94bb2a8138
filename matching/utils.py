import hashlib
import re
from typing import List, Optional, Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two vectors; 0.0 for empty, mismatched or zero vectors."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.size == 0 or va.shape != vb.shape:
        return 0.0
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)


def content_hash(text: str) -> str:
    """Stable hash of a text block, used as the embedding cache key."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


_WORD_RE = re.compile(r"[a-z][a-z0-9+\-]*")

STOPWORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has",
    "have", "i", "in", "is", "it", "its", "my", "of", "on", "or", "our",
    "that", "the", "this", "to", "we", "with", "you", "your", "will", "can",
    "driver", "type", "job", "experience", "state", "location", "pay",
    "prefers", "route", "preferences", "freight", "license", "class", "team",
    "hauler", "endorsements",
})


def salient_terms(text: Optional[str]) -> List[str]:
    """Lowercased content words of a text block in first-seen order."""
    if not text:
        return []
    seen = []
    for word in _WORD_RE.findall(text.lower()):
        if len(word) < 3 or word in STOPWORDS or word in seen:
            continue
        seen.append(word)
    return seen


def shared_terms(left: Optional[str], right: Optional[str], limit: int = 5) -> List[str]:
    """Salient terms present in both texts, ordered as they appear in ``left``."""
    right_terms = set(salient_terms(right))
    return [t for t in salient_terms(left) if t in right_terms][:limit]


def truthy_keys(flags: Optional[dict]) -> List[str]:
    """Keys of a {name: bool} mapping whose value is truthy."""
    if not flags:
        return []
    return [k for k, v in flags.items() if v]


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def first_present(*values):
    """Return the first value that is not None or empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None
