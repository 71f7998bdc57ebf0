import uuid
from models import db

class Song(db.Model):
    __tablename__ = 'songs'

    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    spotify_id = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    artist = db.Column(db.String(255), nullable=False)
    album = db.Column(db.String(255))
    preview_url = db.Column(db.Text)
    popularity = db.Column(db.Integer)
    duration_ms = db.Column(db.Integer)

    def to_dict(self):
        return {
            "id": self.id,
            "spotifyId": self.spotify_id,
            "name": self.name,
            "artist": self.artist,
            "album": self.album,
            "previewUrl": self.preview_url,
        }
