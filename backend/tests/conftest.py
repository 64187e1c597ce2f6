from __future__ import annotations

import asyncio
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.db import models  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.store import CatalogStore  # noqa: E402

# song_id: (artist_ids, album_id, popularity, features or None)
SONGS: Dict[int, tuple] = {
    1: ([1], 10, 80, dict(energy=0.8, danceability=0.6, valence=0.5, tempo=120.0, acousticness=0.1)),
    2: ([1], 10, 60, dict(energy=0.7, danceability=0.6, valence=0.5, tempo=118.0, acousticness=0.2)),
    3: ([1], 10, 90, dict(energy=0.3, danceability=0.2, valence=0.1, tempo=80.0, acousticness=0.9)),
    4: ([1], 10, 40, dict(energy=0.8, danceability=0.6, valence=0.5, tempo=120.0, acousticness=0.1)),
    5: ([2], 20, 95, dict(energy=0.2, danceability=0.3, valence=0.2, tempo=90.0, acousticness=0.7)),
    6: ([2], 20, 50, dict(energy=0.25, danceability=0.35, valence=0.2, tempo=95.0, acousticness=0.6)),
    7: ([3], 30, 70, None),
    8: ([2], 30, 30, dict(energy=0.9, danceability=0.9, valence=0.9, tempo=150.0, acousticness=0.0)),
    9: ([1, 2], None, 85, dict(energy=0.5, danceability=0.5, valence=0.5, tempo=100.0, acousticness=0.5)),
}

ARTISTS = {1: "Aurora Lane", 2: "Basalt", 3: "Cinder Choir", 4: "Delta Noise"}
ALBUMS = {10: ("First Light", date(2019, 5, 1)), 20: ("Stone Age", date(2015, 3, 9)), 30: ("Quiet Room", None)}
USERS = {1: "ana", 2: "ben", 3: "cy", 4: "dee"}


def _history(now: datetime):
    recent = now - timedelta(hours=1)
    return [
        (1, 1, recent),
        (1, 1, recent),
        (1, 2, recent),
        (3, 7, now - timedelta(days=30)),
        (4, 5, now - timedelta(days=30)),
        (4, 6, now - timedelta(days=30)),
    ]


async def _seed(session) -> None:
    artists = {artist_id: models.Artist(artist_id=artist_id, artist_name=name) for artist_id, name in ARTISTS.items()}
    albums = {
        album_id: models.Album(album_id=album_id, album_name=name, release_date=released)
        for album_id, (name, released) in ALBUMS.items()
    }
    session.add_all(list(artists.values()) + list(albums.values()))
    session.add_all([models.User(user_id=user_id, username=name, email=f"{name}@example.com") for user_id, name in USERS.items()])
    for song_id, (artist_ids, album_id, popularity, features) in SONGS.items():
        song = models.Song(
            song_id=song_id,
            track_name=f"Track {song_id}",
            duration=200 + song_id,
            popularity=popularity,
            genre="indie",
            album=albums.get(album_id),
            artists=[artists[artist_id] for artist_id in artist_ids],
        )
        session.add(song)
        if features is not None:
            session.add(models.AudioFeatures(song_id=song_id, **features))
    now = datetime.now(timezone.utc)
    session.add_all(
        [models.ListeningHistory(user_id=user_id, song_id=song_id, played_at=played_at) for user_id, song_id, played_at in _history(now)]
    )
    await session.commit()


async def _with_catalog(fn: Callable[[CatalogStore], Awaitable[Any]], prepare: Optional[Callable] = None) -> Any:
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with maker() as session:
            await _seed(session)
            if prepare is not None:
                await prepare(session)
            return await fn(CatalogStore(session))
    finally:
        await engine.dispose()


@pytest.fixture
def run_catalog():
    pytest.importorskip("aiosqlite")

    def _run(fn: Callable[[CatalogStore], Awaitable[Any]], *, prepare: Optional[Callable] = None) -> Any:
        return asyncio.run(_with_catalog(fn, prepare))

    return _run
