"""
Rating submission: validate, check the catalog, persist.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import Song, Rating
from .errors import InvalidInput, NotFound, Conflict, StorageError
from .pairs import already_rated

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10
IP_ADDRESS_MAX_LENGTH = 50
USER_AGENT_MAX_LENGTH = 512
SESSION_ID_MAX_LENGTH = 128


def normalize_client_meta(client_meta):
    """Trim client metadata to what the ratings table stores."""
    client_meta = client_meta or {}
    user_agent = (client_meta.get('user_agent') or '').strip()
    ip_address = (client_meta.get('ip_address') or '').strip()
    return {
        'user_agent': user_agent[:USER_AGENT_MAX_LENGTH] or None,
        'ip_address': ip_address[:IP_ADDRESS_MAX_LENGTH] or None,
    }


def _validate(first, second, score, session_id):
    if not first or not second or not isinstance(first, str) or not isinstance(second, str):
        raise InvalidInput("Missing required fields")
    # bool is a subclass of int
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidInput("Score must be an integer between 1 and 10")
    if not (MIN_SCORE <= score <= MAX_SCORE):
        raise InvalidInput("Score must be an integer between 1 and 10")
    if first == second:
        raise InvalidInput("Cannot rate the same song with itself")
    if session_id is not None and not isinstance(session_id, str):
        raise InvalidInput("Session id must be a string")
    if session_id and len(session_id) > SESSION_ID_MAX_LENGTH:
        raise InvalidInput(f"Session id must be at most {SESSION_ID_MAX_LENGTH} characters")


def submit_rating(session, first, second, score, session_id=None, client_meta=None):
    _validate(first, second, score, session_id)
    session_id = session_id or None

    try:
        first_song = session.get(Song, first)
        second_song = session.get(Song, second)
        if not first_song or not second_song:
            raise NotFound("One or both songs not found")

        if session_id and already_rated(session, first, second, session_id):
            raise Conflict("Rating already exists for this song pair")

        rating = Rating(
            first_song_id=first,
            second_song_id=second,
            score=score,
            session_id=session_id,
            **normalize_client_meta(client_meta)
        )
        session.add(rating)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Duplicate rating for {first}/{second} in session {session_id}")
        raise Conflict("Rating already exists for this song pair") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to store rating: {e}")
        raise StorageError("Failed to store rating") from e

    logger.info(f"Stored rating {rating.id}: {first}/{second} = {score}")
    return rating
