from __future__ import annotations

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.config import Settings
from ...core.security import verify_service_token
from ...db.store import CatalogStore
from ...schemas.recommend import (
    ColdStartRecommendations,
    PersonalizedRecommendations,
    SimilarSong,
    TrendingSong,
)
from ...services.errors import CatalogStoreError, NotFoundError
from ...services.profiles import trending_songs
from ...services.recommendations import recommend_for_user
from ...services.similarity import similar_songs
from ..deps import clamp_limit, get_catalog_store, get_settings_dep

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"], dependencies=[Depends(verify_service_token)])


@router.get("/user/{user_id}", response_model=Union[PersonalizedRecommendations, ColdStartRecommendations])
async def get_recommendations_for_user(
    user_id: int,
    limit: Optional[int] = Query(None, ge=1),
    *,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings_dep),
) -> Union[PersonalizedRecommendations, ColdStartRecommendations]:
    limit = clamp_limit(limit, default=settings.recommendation_default_limit, maximum=settings.recommendation_max_limit)
    try:
        return await recommend_for_user(user_id, store=store, settings=settings, limit=limit)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/similar-songs/{song_id}", response_model=List[SimilarSong])
async def get_similar_songs(
    song_id: int,
    limit: Optional[int] = Query(None, ge=1),
    *,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings_dep),
) -> List[SimilarSong]:
    limit = clamp_limit(limit, default=settings.similar_default_limit, maximum=settings.similar_max_limit)
    try:
        return await similar_songs(song_id, store=store, limit=limit)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/trending", response_model=List[TrendingSong])
async def get_trending_songs(
    limit: Optional[int] = Query(None, ge=1),
    days: Optional[int] = Query(None, ge=1),
    *,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings_dep),
) -> List[TrendingSong]:
    limit = clamp_limit(limit, default=settings.trending_default_limit, maximum=settings.recommendation_max_limit)
    try:
        return await trending_songs(store=store, days=days or settings.trending_default_days, limit=limit)
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
