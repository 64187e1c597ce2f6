from __future__ import annotations

import pytest

from app.services.features import FeatureVector
from app.services.scoring import (
    AGGREGATE_SIMILARITY,
    LISTENING_PREFERENCE,
    SONG_SIMILARITY,
    distance,
    rank_by_distance,
)

SEED = FeatureVector(energy=0.8, danceability=0.6, valence=0.5, tempo=120.0, acousticness=0.1)
OTHER = FeatureVector(energy=0.5, danceability=0.9, valence=0.2, tempo=90.0, acousticness=0.6)


@pytest.mark.parametrize("profile", [SONG_SIMILARITY, LISTENING_PREFERENCE, AGGREGATE_SIMILARITY])
def test_distance_to_self_is_zero_and_symmetric(profile) -> None:
    assert distance(SEED, SEED, profile) == 0.0
    assert distance(SEED, OTHER, profile) == pytest.approx(distance(OTHER, SEED, profile))


def test_profiles_compare_their_own_dimensions() -> None:
    # 0.3 + 0.3 + 0.3 from energy/danceability/valence, 30 BPM / 100, 0.5 acousticness
    assert distance(SEED, OTHER, AGGREGATE_SIMILARITY) == pytest.approx(0.9)
    assert distance(SEED, OTHER, LISTENING_PREFERENCE) == pytest.approx(1.2)
    assert distance(SEED, OTHER, SONG_SIMILARITY) == pytest.approx(1.7)


def test_song_similarity_skips_acousticness_when_missing() -> None:
    bare = FeatureVector(energy=0.8, danceability=0.6, valence=0.5, tempo=140.0)
    assert distance(SEED, bare, SONG_SIMILARITY) == pytest.approx(0.2)


def test_distance_rejects_vectors_missing_required_dimensions() -> None:
    with pytest.raises(ValueError):
        distance(SEED, FeatureVector(energy=0.5), AGGREGATE_SIMILARITY)


def test_identical_candidate_ranks_first() -> None:
    candidates = [
        ("far", OTHER),
        ("near", FeatureVector(energy=0.75, danceability=0.6, valence=0.5, tempo=121.0, acousticness=0.1)),
        ("same", FeatureVector(energy=0.8, danceability=0.6, valence=0.5, tempo=120.0, acousticness=0.1)),
    ]
    ranked = rank_by_distance(SEED, candidates, SONG_SIMILARITY)
    assert [name for name, _ in ranked] == ["same", "near", "far"]
    assert ranked[0][1] == 0.0


def test_rank_keeps_incoming_order_on_ties_and_drops_incomparable() -> None:
    twin = FeatureVector(energy=0.7, danceability=0.6, valence=0.5, tempo=120.0)
    candidates = [
        (3, twin),
        (1, FeatureVector(energy=0.8)),
        (2, twin),
        (4, OTHER),
    ]
    ranked = rank_by_distance(SEED, candidates, LISTENING_PREFERENCE, limit=2)
    assert [song_id for song_id, _ in ranked] == [3, 2]
