"""
Shared fixtures: an app backed by in-memory SQLite and a small song catalog.
"""

from datetime import datetime, timedelta

import pytest

from app import create_app
from models import db, Song, Rating


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "CORPUS_PATH": str(tmp_path / "data" / "human_ratings.json"),
        "SYNC_LOG_PATH": str(tmp_path / "data" / "sync_log.json"),
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_song(app):
    def _make_song(song_id, name=None, artist="Test Artist", **kwargs):
        song = Song(
            id=song_id,
            spotify_id=f"spotify-{song_id}",
            name=name or f"Song {song_id}",
            artist=artist,
            **kwargs
        )
        db.session.add(song)
        db.session.commit()
        return song
    return _make_song


@pytest.fixture
def songs(make_song):
    """Three songs with ids a, b, c (positions 0, 1, 2 in id order)."""
    return [make_song("a", album="First Album"), make_song("b"), make_song("c")]


@pytest.fixture
def make_rating(app):
    base = datetime(2024, 6, 1, 12, 0, 0)

    def _make_rating(rating_id, first, second, score, session_id=None, minutes=0):
        rating = Rating(
            id=rating_id,
            first_song_id=first,
            second_song_id=second,
            score=score,
            session_id=session_id,
            created_at=base + timedelta(minutes=minutes),
        )
        db.session.add(rating)
        db.session.commit()
        return rating
    return _make_rating


class ScriptedRandom:
    """Stand-in for random.Random that replays fixed positions."""

    def __init__(self, positions):
        self.positions = list(positions)
        self.calls = 0

    def randrange(self, stop):
        value = self.positions[self.calls]
        self.calls += 1
        assert 0 <= value < stop
        return value
