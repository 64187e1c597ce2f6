from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..services.errors import CatalogStoreError
from ..services.features import FeatureVector
from . import models

logger = logging.getLogger("catalog_store")


@dataclass(slots=True)
class SongRecord:
    song_id: int
    track_name: str
    duration: Optional[int] = None
    popularity: Optional[int] = None
    genre: Optional[str] = None
    album_name: Optional[str] = None
    artists: Optional[str] = None


@dataclass(slots=True)
class ArtistRecord:
    artist_id: int
    artist_name: str


@dataclass(slots=True)
class AlbumRecord:
    album_id: int
    album_name: str
    release_date: Optional[date] = None
    artists: Optional[str] = None


def _song_record(song: models.Song) -> SongRecord:
    names = [artist.artist_name for artist in song.artists]
    return SongRecord(
        song_id=song.song_id,
        track_name=song.track_name,
        duration=song.duration,
        popularity=song.popularity,
        genre=song.genre,
        album_name=song.album.album_name if song.album is not None else None,
        artists=", ".join(names) if names else None,
    )


_BY_POPULARITY = (models.Song.popularity.desc().nulls_last(), models.Song.song_id.asc())


@dataclass(slots=True)
class CatalogStore:
    """Read-only query surface over the catalog database."""

    session: AsyncSession

    async def _rows(self, stmt: Any) -> List[Any]:
        try:
            result = await self.session.execute(stmt)
            return list(result.all())
        except SQLAlchemyError as exc:
            logger.error("Catalog query failed: %s", exc)
            raise CatalogStoreError(str(exc)) from exc

    async def _scalars(self, stmt: Any) -> List[Any]:
        try:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Catalog query failed: %s", exc)
            raise CatalogStoreError(str(exc)) from exc

    async def _exists(self, column: Any, value: int) -> bool:
        return bool(await self._scalars(select(column).where(column == value).limit(1)))

    async def user_exists(self, user_id: int) -> bool:
        return await self._exists(models.User.user_id, user_id)

    async def song_exists(self, song_id: int) -> bool:
        return await self._exists(models.Song.song_id, song_id)

    async def artist_exists(self, artist_id: int) -> bool:
        return await self._exists(models.Artist.artist_id, artist_id)

    async def album_exists(self, album_id: int) -> bool:
        return await self._exists(models.Album.album_id, album_id)

    async def get_listened_song_ids(self, user_id: int) -> Set[int]:
        stmt = select(models.ListeningHistory.song_id).where(models.ListeningHistory.user_id == user_id).distinct()
        return set(await self._scalars(stmt))

    async def get_feature_vector(self, song_id: int) -> Optional[FeatureVector]:
        rows = await self._scalars(select(models.AudioFeatures).where(models.AudioFeatures.song_id == song_id))
        if not rows:
            return None
        return FeatureVector.from_row(rows[0])

    async def get_feature_vectors(self, song_ids: Iterable[int]) -> List[FeatureVector]:
        ids = set(song_ids)
        if not ids:
            return []
        stmt = (
            select(models.AudioFeatures)
            .where(models.AudioFeatures.song_id.in_(sorted(ids)))
            .order_by(models.AudioFeatures.song_id)
        )
        return [FeatureVector.from_row(row) for row in await self._scalars(stmt)]

    async def get_artist_song_ids(self, artist_id: int) -> Set[int]:
        stmt = select(models.song_artists.c.song_id).where(models.song_artists.c.artist_id == artist_id)
        return set(await self._scalars(stmt))

    async def get_album_song_ids(self, album_id: int) -> Set[int]:
        stmt = select(models.Song.song_id).where(models.Song.album_id == album_id)
        return set(await self._scalars(stmt))

    async def get_songs_by_artists(
        self,
        artist_ids: Iterable[int],
        excluding: Iterable[int] = (),
        *,
        limit: int | None = None,
    ) -> List[SongRecord]:
        ids = set(artist_ids)
        if not ids:
            return []
        performed = select(models.song_artists.c.song_id).where(models.song_artists.c.artist_id.in_(sorted(ids)))
        stmt = select(models.Song).where(models.Song.song_id.in_(performed))
        return await self._songs(stmt, excluding, limit)

    async def get_songs_by_albums(
        self,
        album_ids: Iterable[int],
        excluding: Iterable[int] = (),
        *,
        limit: int | None = None,
    ) -> List[SongRecord]:
        ids = set(album_ids)
        if not ids:
            return []
        stmt = select(models.Song).where(models.Song.album_id.in_(sorted(ids)))
        return await self._songs(stmt, excluding, limit)

    async def get_popular_songs(self, limit: int) -> List[SongRecord]:
        return await self._songs(select(models.Song), (), limit)

    async def _songs(self, stmt: Any, excluding: Iterable[int], limit: int | None) -> List[SongRecord]:
        excluded = set(excluding)
        if excluded:
            stmt = stmt.where(models.Song.song_id.not_in(sorted(excluded)))
        stmt = stmt.order_by(*_BY_POPULARITY)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [_song_record(song) for song in await self._scalars(stmt)]

    async def get_all_songs_with_features(self, excluding: Iterable[int] = ()) -> List[Tuple[SongRecord, FeatureVector]]:
        stmt = select(models.Song, models.AudioFeatures).join(
            models.AudioFeatures, models.AudioFeatures.song_id == models.Song.song_id
        )
        excluded = set(excluding)
        if excluded:
            stmt = stmt.where(models.Song.song_id.not_in(sorted(excluded)))
        stmt = stmt.order_by(models.Song.song_id)
        return [(_song_record(song), FeatureVector.from_row(features)) for song, features in await self._rows(stmt)]

    async def get_artist_ids_listened_by(self, user_id: int) -> Set[int]:
        stmt = (
            select(models.song_artists.c.artist_id)
            .join(models.ListeningHistory, models.ListeningHistory.song_id == models.song_artists.c.song_id)
            .where(models.ListeningHistory.user_id == user_id)
            .distinct()
        )
        return set(await self._scalars(stmt))

    async def get_album_ids_partially_explored(self, user_id: int) -> Set[int]:
        heard = (
            select(models.ListeningHistory.song_id)
            .where(models.ListeningHistory.user_id == user_id)
            .distinct()
            .subquery()
        )
        heard_count = func.count(heard.c.song_id)
        stmt = (
            select(models.Song.album_id)
            .outerjoin(heard, heard.c.song_id == models.Song.song_id)
            .where(models.Song.album_id.is_not(None))
            .group_by(models.Song.album_id)
            .having(heard_count >= 1)
            .having(heard_count < func.count(models.Song.song_id))
        )
        return set(await self._scalars(stmt))

    async def get_artist_feature_rows(self) -> List[Tuple[ArtistRecord, FeatureVector]]:
        stmt = (
            select(models.Artist.artist_id, models.Artist.artist_name, models.AudioFeatures)
            .join(models.song_artists, models.song_artists.c.artist_id == models.Artist.artist_id)
            .join(models.AudioFeatures, models.AudioFeatures.song_id == models.song_artists.c.song_id)
            .order_by(models.Artist.artist_id, models.AudioFeatures.song_id)
        )
        return [
            (ArtistRecord(artist_id=artist_id, artist_name=name), FeatureVector.from_row(features))
            for artist_id, name, features in await self._rows(stmt)
        ]

    async def get_album_feature_rows(self) -> List[Tuple[AlbumRecord, FeatureVector]]:
        stmt = (
            select(models.Album.album_id, models.Album.album_name, models.Album.release_date, models.AudioFeatures)
            .join(models.Song, models.Song.album_id == models.Album.album_id)
            .join(models.AudioFeatures, models.AudioFeatures.song_id == models.Song.song_id)
            .order_by(models.Album.album_id, models.AudioFeatures.song_id)
        )
        rows = await self._rows(stmt)
        artists = await self._album_artist_names({album_id for album_id, *_ in rows})
        return [
            (
                AlbumRecord(album_id=album_id, album_name=name, release_date=released, artists=artists.get(album_id)),
                FeatureVector.from_row(features),
            )
            for album_id, name, released, features in rows
        ]

    async def _album_artist_names(self, album_ids: Set[int]) -> Dict[int, str]:
        if not album_ids:
            return {}
        stmt = (
            select(models.Song.album_id, models.Artist.artist_name)
            .join(models.song_artists, models.song_artists.c.song_id == models.Song.song_id)
            .join(models.Artist, models.Artist.artist_id == models.song_artists.c.artist_id)
            .where(models.Song.album_id.in_(sorted(album_ids)))
            .distinct()
            .order_by(models.Song.album_id, models.Artist.artist_name)
        )
        names: Dict[int, List[str]] = {}
        for album_id, artist_name in await self._rows(stmt):
            names.setdefault(album_id, []).append(artist_name)
        return {album_id: ", ".join(values) for album_id, values in names.items()}

    async def get_trending_songs(self, *, days: int, limit: int) -> List[Tuple[SongRecord, int]]:
        today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        since = today - timedelta(days=days)
        plays = func.count(models.ListeningHistory.history_id).label("play_count")
        stmt = (
            select(models.Song, plays)
            .join(models.ListeningHistory, models.ListeningHistory.song_id == models.Song.song_id)
            .where(models.ListeningHistory.played_at >= since)
            .group_by(models.Song.song_id)
            .order_by(plays.desc(), *_BY_POPULARITY)
            .limit(limit)
        )
        return [(_song_record(song), int(count)) for song, count in await self._rows(stmt)]
