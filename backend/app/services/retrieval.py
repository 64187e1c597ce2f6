"""Candidate generation strategies for personalized recommendations.

Every strategy returns an empty list when its prerequisite data is missing
(no listened artists, no feature rows, no partially heard albums). Store
failures are not caught here.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from ..db.store import CatalogStore, SongRecord
from ..schemas.recommend import RecommendationItem, RecommendationReason
from .features import extract_set_vector
from .scoring import LISTENING_PREFERENCE, rank_by_distance

logger = logging.getLogger("recommendations")

ARTIST_SIMILARITY: RecommendationReason = "artist_similarity"
AUDIO_FEATURE_MATCH: RecommendationReason = "audio_feature_match"
ALBUM_EXPLORATION: RecommendationReason = "album_exploration"
POPULAR_RECOMMENDATION: RecommendationReason = "popular_recommendation"

Strategy = Callable[..., Awaitable[List[RecommendationItem]]]


def _to_item(song: SongRecord, reason: RecommendationReason, *, feature_distance: Optional[float] = None) -> RecommendationItem:
    return RecommendationItem(**asdict(song), recommendation_reason=reason, feature_distance=feature_distance)


async def artist_based(store: CatalogStore, user_id: int, exclude: Set[int], *, cap: int) -> List[RecommendationItem]:
    artist_ids = await store.get_artist_ids_listened_by(user_id)
    if not artist_ids:
        logger.debug("No listened artists for user %s", user_id)
        return []
    songs = await store.get_songs_by_artists(artist_ids, exclude, limit=cap)
    return [_to_item(song, ARTIST_SIMILARITY) for song in songs]


async def feature_based(store: CatalogStore, user_id: int, exclude: Set[int], *, cap: int) -> List[RecommendationItem]:
    preference = await extract_set_vector(store, await store.get_listened_song_ids(user_id))
    if not LISTENING_PREFERENCE.accepts(preference):
        logger.debug("No audio features in listening history of user %s", user_id)
        return []
    candidates = await store.get_all_songs_with_features(exclude)
    ranked = rank_by_distance(preference, candidates, LISTENING_PREFERENCE, limit=cap)
    return [_to_item(song, AUDIO_FEATURE_MATCH, feature_distance=score) for song, score in ranked]


async def album_based(store: CatalogStore, user_id: int, exclude: Set[int], *, cap: int) -> List[RecommendationItem]:
    album_ids = await store.get_album_ids_partially_explored(user_id)
    if not album_ids:
        logger.debug("No partially explored albums for user %s", user_id)
        return []
    songs = await store.get_songs_by_albums(album_ids, exclude, limit=cap)
    return [_to_item(song, ALBUM_EXPLORATION) for song in songs]


async def popular(store: CatalogStore, *, limit: int) -> List[RecommendationItem]:
    songs = await store.get_popular_songs(limit)
    return [_to_item(song, POPULAR_RECOMMENDATION) for song in songs]


# Merge order: earlier strategies win when the same song shows up twice.
STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("artist_based", artist_based),
    ("feature_based", feature_based),
    ("album_based", album_based),
)
