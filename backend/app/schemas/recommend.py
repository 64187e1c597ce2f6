from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

RecommendationReason = Literal[
    "artist_similarity",
    "audio_feature_match",
    "album_exploration",
    "popular_recommendation",
]


class SongOut(BaseModel):
    song_id: int
    track_name: str
    duration: Optional[int] = None
    popularity: Optional[int] = None
    genre: Optional[str] = None
    album_name: Optional[str] = None
    artists: Optional[str] = None


class RecommendationItem(SongOut):
    recommendation_reason: RecommendationReason
    feature_distance: Optional[float] = Field(default=None, ge=0.0)


class StrategyBreakdown(BaseModel):
    artist_based: int = 0
    feature_based: int = 0
    album_based: int = 0
    total_unique: int = 0


class PersonalizedRecommendations(BaseModel):
    user_id: int
    recommendations: List[RecommendationItem] = []
    strategy_breakdown: StrategyBreakdown


class ColdStartRecommendations(BaseModel):
    message: str
    recommendations: List[RecommendationItem] = []


class SimilarSong(SongOut):
    similarity_score: float = Field(..., ge=0.0)


class SimilarArtist(BaseModel):
    artist_id: int
    artist_name: str
    avg_energy: Optional[float] = None
    avg_danceability: Optional[float] = None
    avg_valence: Optional[float] = None
    similarity_score: float = Field(..., ge=0.0)


class SimilarAlbum(BaseModel):
    album_id: int
    album_name: str
    release_date: Optional[date] = None
    artists: Optional[str] = None
    avg_energy: Optional[float] = None
    avg_danceability: Optional[float] = None
    avg_valence: Optional[float] = None
    similarity_score: float = Field(..., ge=0.0)


class TrendingSong(SongOut):
    recent_play_count: int = 0


class AudioProfile(BaseModel):
    avg_energy: Optional[float] = None
    avg_danceability: Optional[float] = None
    avg_valence: Optional[float] = None
    avg_tempo: Optional[float] = None
    avg_acousticness: Optional[float] = None
    avg_speechiness: Optional[float] = None
    avg_instrumentalness: Optional[float] = None
    avg_liveness: Optional[float] = None


class AlbumAudioProfile(AudioProfile):
    min_energy: Optional[float] = None
    max_energy: Optional[float] = None
    min_tempo: Optional[float] = None
    max_tempo: Optional[float] = None


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Music catalog API is running"
