import math
from typing import List, Sequence

EMBEDDING_DIMENSIONS = 512


def fit_dimensions(vector: Sequence[float], size: int = EMBEDDING_DIMENSIONS) -> List[float]:
    """Pads with zeros or truncates to a fixed length."""
    values = [float(v) for v in vector[:size]]
    if len(values) < size:
        values.extend([0.0] * (size - len(values)))
    return values


def serialize_embedding(vector: Sequence[float]) -> str:
    return ",".join(repr(float(v)) for v in vector)


def parse_embedding(raw: str) -> List[float]:
    if not raw:
        return []
    return [float(part) for part in raw.split(",") if part.strip()]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise ValueError(f"Embedding dimensions differ: {len(a)} != {len(b)}")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def match_label(score: float) -> str:
    return f"{round(max(score, 0.0) * 100)}% match"
