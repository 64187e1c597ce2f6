from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from ..db.store import CatalogStore
from ..schemas.recommend import AlbumAudioProfile, AudioProfile, TrendingSong
from .errors import NotFoundError
from .features import FeatureVector, mean_vector


def _bounds(vectors: List[FeatureVector], dim: str) -> tuple[Optional[float], Optional[float]]:
    values = [v.get(dim) for v in vectors if v.get(dim) is not None]
    if not values:
        return None, None
    return min(values), max(values)


async def artist_audio_profile(artist_id: int, *, store: CatalogStore) -> AudioProfile:
    if not await store.artist_exists(artist_id):
        raise NotFoundError("artist", artist_id)
    vectors = await store.get_feature_vectors(await store.get_artist_song_ids(artist_id))
    mean = mean_vector(vectors)
    if mean is None:
        return AudioProfile()
    return AudioProfile(**mean.as_dict("avg_"))


async def album_audio_profile(album_id: int, *, store: CatalogStore) -> AlbumAudioProfile:
    if not await store.album_exists(album_id):
        raise NotFoundError("album", album_id)
    vectors = await store.get_feature_vectors(await store.get_album_song_ids(album_id))
    mean = mean_vector(vectors)
    if mean is None:
        return AlbumAudioProfile()
    min_energy, max_energy = _bounds(vectors, "energy")
    min_tempo, max_tempo = _bounds(vectors, "tempo")
    return AlbumAudioProfile(
        **mean.as_dict("avg_"),
        min_energy=min_energy,
        max_energy=max_energy,
        min_tempo=min_tempo,
        max_tempo=max_tempo,
    )


async def trending_songs(*, store: CatalogStore, days: int, limit: int) -> List[TrendingSong]:
    rows = await store.get_trending_songs(days=days, limit=limit)
    return [TrendingSong(**asdict(song), recent_play_count=plays) for song, plays in rows]
