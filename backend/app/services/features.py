"""Audio feature vectors and their in-memory aggregation.

Aggregate vectors (artist, album, listening history) are the per-dimension
arithmetic mean over the member songs that have a feature row. A dimension
that is NULL on some rows is averaged over the rows that carry it, the same
way SQL ``AVG`` treats NULLs. An empty set has no aggregate at all: callers
get ``None`` and must treat it as "no data", never as a zero vector.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

FEATURE_DIMENSIONS: Tuple[str, ...] = (
    "energy",
    "danceability",
    "valence",
    "tempo",
    "acousticness",
    "speechiness",
    "instrumentalness",
    "liveness",
)


@dataclass(frozen=True, slots=True)
class FeatureVector:
    energy: Optional[float] = None
    danceability: Optional[float] = None
    valence: Optional[float] = None
    tempo: Optional[float] = None
    acousticness: Optional[float] = None
    speechiness: Optional[float] = None
    instrumentalness: Optional[float] = None
    liveness: Optional[float] = None

    @classmethod
    def from_row(cls, row: Any) -> "FeatureVector":
        values: Dict[str, Optional[float]] = {}
        for dim in FEATURE_DIMENSIONS:
            value = getattr(row, dim, None)
            values[dim] = float(value) if value is not None else None
        return cls(**values)

    def get(self, dim: str) -> Optional[float]:
        return getattr(self, dim)

    def has(self, *dims: str) -> bool:
        return all(getattr(self, dim) is not None for dim in dims)

    def as_dict(self, prefix: str = "") -> Dict[str, Optional[float]]:
        return {f"{prefix}{key}": value for key, value in asdict(self).items()}



def mean_vector(vectors: Iterable[FeatureVector]) -> Optional[FeatureVector]:
    rows = [[np.nan if v.get(dim) is None else v.get(dim) for dim in FEATURE_DIMENSIONS] for v in vectors]
    if not rows:
        return None
    matrix = np.asarray(rows, dtype=np.float64)
    present = ~np.isnan(matrix)
    counts = present.sum(axis=0)
    totals = np.where(present, matrix, 0.0).sum(axis=0)
    means = np.divide(totals, counts, out=np.full(len(FEATURE_DIMENSIONS), np.nan), where=counts > 0)
    return FeatureVector(
        **{dim: (float(value) if counts[i] else None) for i, (dim, value) in enumerate(zip(FEATURE_DIMENSIONS, means))}
    )


async def extract_song_vector(store, song_id: int) -> Optional[FeatureVector]:
    return await store.get_feature_vector(song_id)


async def extract_set_vector(store, song_ids: Iterable[int]) -> Optional[FeatureVector]:
    ids = set(song_ids)
    if not ids:
        return None
    return mean_vector(await store.get_feature_vectors(ids))
