import random

import pytest

from models import db
from services import select_pair, InsufficientCatalog
from tests.conftest import ScriptedRandom


def test_empty_catalog_is_insufficient(app):
    with pytest.raises(InsufficientCatalog):
        select_pair(db.session)


def test_single_song_is_insufficient(make_song):
    make_song("a")
    with pytest.raises(InsufficientCatalog):
        select_pair(db.session)


def test_never_returns_same_song_twice(songs):
    rng = random.Random(1234)
    for _ in range(50):
        selection = select_pair(db.session, rng=rng)
        assert selection.first.id != selection.second.id


def test_same_position_is_redrawn(songs):
    rng = ScriptedRandom([1, 1, 1, 0])
    selection = select_pair(db.session, rng=rng)

    assert (selection.first.id, selection.second.id) == ("b", "a")
    assert rng.calls == 4


def test_two_song_catalog_always_returns_both(make_song):
    make_song("a")
    make_song("b")
    rng = random.Random(7)
    for _ in range(20):
        selection = select_pair(db.session, rng=rng)
        assert {selection.first.id, selection.second.id} == {"a", "b"}


def test_rated_pair_is_resampled_for_session(songs, make_rating):
    make_rating("r1", "a", "b", 5, session_id="s1")
    rng = ScriptedRandom([1, 0, 1, 2])

    selection = select_pair(db.session, session_id="s1", rng=rng)

    assert (selection.first.id, selection.second.id) == ("b", "c")
    assert selection.retries == 1


def test_rated_pair_kept_without_session(songs, make_rating):
    make_rating("r1", "a", "b", 5, session_id="s1")
    rng = ScriptedRandom([0, 1])

    selection = select_pair(db.session, rng=rng)

    assert (selection.first.id, selection.second.id) == ("a", "b")
    assert selection.retries == 0


def test_other_sessions_ratings_are_ignored(songs, make_rating):
    make_rating("r1", "a", "b", 5, session_id="someone-else")
    selection = select_pair(db.session, session_id="s1", rng=ScriptedRandom([0, 1]))
    assert selection.retries == 0


def test_retry_is_bounded_when_every_pair_is_rated(make_song, make_rating):
    make_song("a")
    make_song("b")
    make_rating("r1", "a", "b", 8, session_id="s1")

    selection = select_pair(db.session, session_id="s1", rng=random.Random(3))

    assert {selection.first.id, selection.second.id} == {"a", "b"}
    assert selection.retries == 3


def test_retry_limit_is_configurable(make_song, make_rating):
    make_song("a")
    make_song("b")
    make_rating("r1", "b", "a", 8, session_id="s1")

    selection = select_pair(db.session, session_id="s1", rng=random.Random(3), max_retries=0)
    assert selection.retries == 0
