import uuid
from models import db, iso_timestamp, utc_now

class Rating(db.Model):
    __tablename__ = 'ratings'
    __table_args__ = (
        db.CheckConstraint('first_song_id != second_song_id', name='ck_ratings_distinct_songs'),
        db.CheckConstraint('score >= 1 AND score <= 10', name='ck_ratings_score_range'),
        db.UniqueConstraint('first_song_id', 'second_song_id', 'session_id', name='uq_ratings_pair_session'),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_song_id = db.Column(db.String(64), db.ForeignKey('songs.id'), nullable=False)
    second_song_id = db.Column(db.String(64), db.ForeignKey('songs.id'), nullable=False)
    score = db.Column(db.Integer, nullable=False)

    # Client-generated, only used to avoid repeat pairs
    session_id = db.Column(db.String(128), index=True)
    user_agent = db.Column(db.Text)
    ip_address = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False, index=True)

    # Relationships
    first_song = db.relationship('Song', foreign_keys=[first_song_id])
    second_song = db.relationship('Song', foreign_keys=[second_song_id])

    def to_dict(self):
        return {
            "id": self.id,
            "first": self.first_song_id,
            "second": self.second_song_id,
            "score": self.score,
            "sessionId": self.session_id,
            "createdAt": iso_timestamp(self.created_at),
            "firstSong": {"name": self.first_song.name, "artist": self.first_song.artist},
            "secondSong": {"name": self.second_song.name, "artist": self.second_song.artist},
        }

    def to_corpus_entry(self):
        """Flatten the rating and its two songs into the corpus file shape."""
        return {
            "id": self.id,
            "track1_spotify_id": self.first_song.spotify_id,
            "track1_name": self.first_song.name,
            "track1_artist": self.first_song.artist,
            "track2_spotify_id": self.second_song.spotify_id,
            "track2_name": self.second_song.name,
            "track2_artist": self.second_song.artist,
            "human_rating": self.score,
            "rating_scale": "1-10",
            "source": "public_web_interface",
            "session_id": self.session_id or None,
            "created_at": iso_timestamp(self.created_at),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }
