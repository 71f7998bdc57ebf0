"""
Random pair selection over the song catalog.
"""

import logging
import random
from collections import namedtuple

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from models import Song, Rating
from .errors import InsufficientCatalog, StorageError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_LIMIT = 3

PairSelection = namedtuple('PairSelection', ['first', 'second', 'retries'])


def _song_at(session, position):
    return session.query(Song).order_by(Song.id).offset(position).limit(1).one()


def _draw_positions(rng, count):
    first = rng.randrange(count)
    second = rng.randrange(count)
    while second == first:
        second = rng.randrange(count)
    return first, second


def already_rated(session, first_id, second_id, session_id):
    """True if this session has rated the unordered pair in either orientation."""
    match = session.query(Rating.id).filter(
        Rating.session_id == session_id,
        or_(
            and_(Rating.first_song_id == first_id, Rating.second_song_id == second_id),
            and_(Rating.first_song_id == second_id, Rating.second_song_id == first_id),
        ),
    ).first()
    return match is not None


def select_pair(session, session_id=None, rng=None, max_retries=DEFAULT_RETRY_LIMIT):
    """
    Pick two distinct songs uniformly at random.

    With a session id, pairs the session already rated are resampled up to
    max_retries times; after that the last draw is returned regardless.
    """
    rng = rng or random
    try:
        count = session.query(Song).count()
        if count < 2:
            raise InsufficientCatalog("Not enough songs in database")

        retries = 0
        while True:
            first_pos, second_pos = _draw_positions(rng, count)
            first = _song_at(session, first_pos)
            second = _song_at(session, second_pos)

            if not session_id or retries >= max_retries:
                break
            if not already_rated(session, first.id, second.id, session_id):
                break
            retries += 1
            logger.debug(f"Pair {first.id}/{second.id} already rated by {session_id}, resampling ({retries}/{max_retries})")
    except SQLAlchemyError as e:
        logger.error(f"Failed to select song pair: {e}")
        raise StorageError("Failed to fetch songs") from e

    return PairSelection(first, second, retries)
