from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.config import Settings
from ...core.security import verify_service_token
from ...db.store import CatalogStore
from ...schemas.recommend import AlbumAudioProfile, SimilarAlbum
from ...services.errors import CatalogStoreError, NotFoundError
from ...services.profiles import album_audio_profile
from ...services.similarity import similar_albums
from ..deps import clamp_limit, get_catalog_store, get_settings_dep

router = APIRouter(prefix="/api/albums", tags=["albums"], dependencies=[Depends(verify_service_token)])


@router.get("/{album_id}/similar", response_model=List[SimilarAlbum])
async def get_similar_albums(
    album_id: int,
    limit: Optional[int] = Query(None, ge=1),
    *,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings_dep),
) -> List[SimilarAlbum]:
    limit = clamp_limit(limit, default=settings.similar_default_limit, maximum=settings.similar_max_limit)
    try:
        return await similar_albums(album_id, store=store, limit=limit)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/{album_id}/audio-features", response_model=AlbumAudioProfile)
async def get_album_audio_features(
    album_id: int,
    *,
    store: CatalogStore = Depends(get_catalog_store),
) -> AlbumAudioProfile:
    try:
        return await album_audio_profile(album_id, store=store)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CatalogStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
