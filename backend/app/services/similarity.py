from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Dict, List, Sequence, Tuple, TypeVar

from ..db.store import AlbumRecord, ArtistRecord, CatalogStore
from ..schemas.recommend import SimilarAlbum, SimilarArtist, SimilarSong
from .errors import NotFoundError
from .features import FeatureVector, mean_vector
from .scoring import AGGREGATE_SIMILARITY, SONG_SIMILARITY, rank_by_distance

logger = logging.getLogger("similarity")

R = TypeVar("R", ArtistRecord, AlbumRecord)


def aggregate_by_entity(rows: Sequence[Tuple[R, FeatureVector]], key: str) -> Dict[int, Tuple[R, FeatureVector]]:
    """Collapse (entity, song vector) rows into one mean vector per entity, keeping row order."""
    grouped: Dict[int, Tuple[R, List[FeatureVector]]] = {}
    for record, vector in rows:
        entity_id = getattr(record, key)
        if entity_id not in grouped:
            grouped[entity_id] = (record, [])
        grouped[entity_id][1].append(vector)
    aggregated: Dict[int, Tuple[R, FeatureVector]] = {}
    for entity_id, (record, vectors) in grouped.items():
        mean = mean_vector(vectors)
        if mean is not None:
            aggregated[entity_id] = (record, mean)
    return aggregated


async def similar_songs(song_id: int, *, store: CatalogStore, limit: int) -> List[SimilarSong]:
    if not await store.song_exists(song_id):
        raise NotFoundError("song", song_id)
    target = await store.get_feature_vector(song_id)
    if not SONG_SIMILARITY.accepts(target):
        logger.debug("Song %s has no usable audio features", song_id)
        return []
    candidates = await store.get_all_songs_with_features(excluding={song_id})
    ranked = rank_by_distance(target, candidates, SONG_SIMILARITY, limit=limit)
    return [SimilarSong(**asdict(song), similarity_score=score) for song, score in ranked]


async def similar_artists(artist_id: int, *, store: CatalogStore, limit: int) -> List[SimilarArtist]:
    if not await store.artist_exists(artist_id):
        raise NotFoundError("artist", artist_id)
    profiles = aggregate_by_entity(await store.get_artist_feature_rows(), "artist_id")
    subject = profiles.pop(artist_id, None)
    if subject is None or not AGGREGATE_SIMILARITY.accepts(subject[1]):
        logger.debug("Artist %s has no usable audio features", artist_id)
        return []
    ranked = rank_by_distance(subject[1], list(profiles.values()), AGGREGATE_SIMILARITY, limit=limit)
    results: List[SimilarArtist] = []
    for record, score in ranked:
        vector = profiles[record.artist_id][1]
        results.append(
            SimilarArtist(
                artist_id=record.artist_id,
                artist_name=record.artist_name,
                avg_energy=vector.energy,
                avg_danceability=vector.danceability,
                avg_valence=vector.valence,
                similarity_score=score,
            )
        )
    return results


async def similar_albums(album_id: int, *, store: CatalogStore, limit: int) -> List[SimilarAlbum]:
    if not await store.album_exists(album_id):
        raise NotFoundError("album", album_id)
    profiles = aggregate_by_entity(await store.get_album_feature_rows(), "album_id")
    subject = profiles.pop(album_id, None)
    if subject is None or not AGGREGATE_SIMILARITY.accepts(subject[1]):
        logger.debug("Album %s has no usable audio features", album_id)
        return []
    ranked = rank_by_distance(subject[1], list(profiles.values()), AGGREGATE_SIMILARITY, limit=limit)
    results: List[SimilarAlbum] = []
    for record, score in ranked:
        vector = profiles[record.album_id][1]
        results.append(
            SimilarAlbum(
                album_id=record.album_id,
                album_name=record.album_name,
                release_date=record.release_date,
                artists=record.artists,
                avg_energy=vector.energy,
                avg_danceability=vector.danceability,
                avg_valence=vector.valence,
                similarity_score=score,
            )
        )
    return results
