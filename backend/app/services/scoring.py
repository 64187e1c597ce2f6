from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, TypeVar

from .features import FeatureVector

T = TypeVar("T")

# Tempo is in BPM while the other dimensions sit in [0, 1].
DIMENSION_DIVISORS: Dict[str, float] = {"tempo": 100.0}


@dataclass(frozen=True, slots=True)
class DistanceProfile:
    """Dimension subset compared by one similarity context.

    ``required`` dimensions must be present on both vectors for the pair to be
    comparable; ``optional`` ones contribute only when both vectors carry them.
    """

    name: str
    required: Tuple[str, ...]
    optional: Tuple[str, ...] = ()

    def accepts(self, vector: FeatureVector | None) -> bool:
        return vector is not None and vector.has(*self.required)


# Song-to-song "similar songs".
SONG_SIMILARITY = DistanceProfile(
    "song_similarity",
    required=("energy", "danceability", "valence", "tempo"),
    optional=("acousticness",),
)
# Catalog songs against a user's averaged listening history.
LISTENING_PREFERENCE = DistanceProfile(
    "listening_preference",
    required=("energy", "danceability", "valence", "tempo"),
)
# Artist-to-artist and album-to-album on averaged vectors.
AGGREGATE_SIMILARITY = DistanceProfile(
    "aggregate_similarity",
    required=("energy", "danceability", "valence"),
)


def _term(a: FeatureVector, b: FeatureVector, dim: str) -> float:
    return abs(a.get(dim) - b.get(dim)) / DIMENSION_DIVISORS.get(dim, 1.0)


def distance(a: FeatureVector, b: FeatureVector, profile: DistanceProfile) -> float:
    if not (profile.accepts(a) and profile.accepts(b)):
        raise ValueError(f"vectors are not comparable under {profile.name}")
    total = sum(_term(a, b, dim) for dim in profile.required)
    for dim in profile.optional:
        if a.get(dim) is not None and b.get(dim) is not None:
            total += _term(a, b, dim)
    return total


def rank_by_distance(
    subject: FeatureVector,
    candidates: Sequence[Tuple[T, FeatureVector]],
    profile: DistanceProfile,
    *,
    limit: int | None = None,
) -> List[Tuple[T, float]]:
    scored = [(item, distance(subject, vector, profile)) for item, vector in candidates if profile.accepts(vector)]
    # sorted() is stable, so equal distances keep the candidates' incoming order
    scored.sort(key=lambda pair: pair[1])
    if limit is not None:
        scored = scored[:limit]
    return scored
