from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from ..core.config import Settings
from ..db.store import CatalogStore
from ..schemas.recommend import (
    ColdStartRecommendations,
    PersonalizedRecommendations,
    RecommendationItem,
    StrategyBreakdown,
)
from .errors import NotFoundError
from .retrieval import STRATEGIES, popular

logger = logging.getLogger("recommendations")

COLD_START_MESSAGE = "No listening history found. Returning popular songs."


def merge_strategy_results(
    results: Sequence[Tuple[str, Sequence[RecommendationItem]]],
    *,
    limit: int,
) -> Tuple[List[RecommendationItem], StrategyBreakdown]:
    """Concatenate strategy output in order, keep the first item per song, truncate.

    The breakdown counts what each strategy produced before deduplication;
    ``total_unique`` is the size of the returned list.
    """
    unique: Dict[int, RecommendationItem] = {}
    for _name, items in results:
        for item in items:
            unique.setdefault(item.song_id, item)
    merged = list(unique.values())[:limit]
    counts = {name: len(items) for name, items in results}
    breakdown = StrategyBreakdown(**counts, total_unique=len(merged))
    return merged, breakdown


async def recommend_for_user(
    user_id: int,
    *,
    store: CatalogStore,
    settings: Settings,
    limit: int,
) -> PersonalizedRecommendations | ColdStartRecommendations:
    if not await store.user_exists(user_id):
        raise NotFoundError("user", user_id)

    listened = await store.get_listened_song_ids(user_id)
    if not listened:
        recommendations = await popular(store, limit=limit)
        logger.info("Cold-start recommendations for user %s: %s popular songs", user_id, len(recommendations))
        return ColdStartRecommendations(message=COLD_START_MESSAGE, recommendations=recommendations)

    # One session cannot run queries concurrently, so strategies run in turn.
    results: List[Tuple[str, List[RecommendationItem]]] = []
    for name, strategy in STRATEGIES:
        results.append((name, await strategy(store, user_id, listened, cap=settings.strategy_cap)))

    recommendations, breakdown = merge_strategy_results(results, limit=limit)
    logger.info(
        "Personalized recommendations for user %s",
        user_id,
        extra={"strategy_breakdown": breakdown.model_dump(), "listened": len(listened)},
    )
    return PersonalizedRecommendations(
        user_id=user_id,
        recommendations=recommendations,
        strategy_breakdown=breakdown,
    )
