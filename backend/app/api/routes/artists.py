from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.config import Settings
from ...core.security import verify_service_token
from ...db.store import CatalogStore
from ...schemas.recommend import AudioProfile, SimilarArtist
from ...services.errors import CatalogStoreError, NotFoundError
from ...services.profiles import artist_audio_profile
from ...services.similarity import similar_artists
from ..deps import clamp_limit, get_catalog_store, get_settings_dep

router = APIRouter(prefix="/api/artists", tags=["artists"], dependencies=[Depends(verify_service_token)])


@router.get("/{artist_id}/similar", response_model=List[SimilarArtist])
async def get_similar_artists(
    artist_id: int,
    limit: Optional[int] = Query(None, ge=1),
    *,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings_dep),
) -> List[SimilarArtist]:
    limit = clamp_limit(limit, default=settings.similar_default_limit, maximum=settings.similar_max_limit)
    try:
        return await similar_artists(artist_id, store=store, limit=limit)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/{artist_id}/audio-patterns", response_model=AudioProfile)
async def get_artist_audio_patterns(
    artist_id: int,
    *,
    store: CatalogStore = Depends(get_catalog_store),
) -> AudioProfile:
    try:
        return await artist_audio_profile(artist_id, store=store)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
