from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base


# Table names follow the existing catalog database.
song_artists = Table(
    "SongArtist",
    Base.metadata,
    Column("song_id", Integer, ForeignKey("Song.song_id", ondelete="CASCADE"), primary_key=True),
    Column("artist_id", Integer, ForeignKey("Artist.artist_id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "User"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))

    history: Mapped[list["ListeningHistory"]] = relationship(back_populates="user")


class Artist(Base):
    __tablename__ = "Artist"

    artist_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    artist_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    songs: Mapped[list["Song"]] = relationship(back_populates="artists", secondary=song_artists)


class Album(Base):
    __tablename__ = "Album"

    album_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    album_name: Mapped[str] = mapped_column(String(255), nullable=False)
    release_date: Mapped[date | None] = mapped_column(Date)

    songs: Mapped[list["Song"]] = relationship(back_populates="album")


class Song(Base):
    __tablename__ = "Song"

    song_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    track_name: Mapped[str] = mapped_column(String(255), nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer)
    popularity: Mapped[int | None] = mapped_column(Integer)
    genre: Mapped[str | None] = mapped_column(String(128))
    spotify_track_id: Mapped[str | None] = mapped_column(String(64))
    album_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("Album.album_id", ondelete="SET NULL"))

    album: Mapped[Album | None] = relationship(back_populates="songs", lazy="selectin")
    artists: Mapped[list[Artist]] = relationship(
        back_populates="songs",
        secondary=song_artists,
        lazy="selectin",
        order_by="Artist.artist_id",
    )
    features: Mapped[AudioFeatures | None] = relationship(back_populates="song", uselist=False)


class AudioFeatures(Base):
    __tablename__ = "Audio_Features"

    song_id: Mapped[int] = mapped_column(Integer, ForeignKey("Song.song_id", ondelete="CASCADE"), primary_key=True)
    energy: Mapped[float | None] = mapped_column(Float)
    danceability: Mapped[float | None] = mapped_column(Float)
    tempo: Mapped[float | None] = mapped_column(Float)
    speechiness: Mapped[float | None] = mapped_column(Float)
    acousticness: Mapped[float | None] = mapped_column(Float)
    instrumentalness: Mapped[float | None] = mapped_column(Float)
    liveness: Mapped[float | None] = mapped_column(Float)
    valence: Mapped[float | None] = mapped_column(Float)

    song: Mapped[Song] = relationship(back_populates="features")


class ListeningHistory(Base):
    __tablename__ = "Listening_History"

    history_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("User.user_id", ondelete="CASCADE"), nullable=False, index=True)
    song_id: Mapped[int] = mapped_column(Integer, ForeignKey("Song.song_id", ondelete="CASCADE"), nullable=False, index=True)
    played_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[User] = relationship(back_populates="history")
    song: Mapped[Song] = relationship()
