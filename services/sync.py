"""
Export and sync of collected ratings.

The corpus is a JSON array of flattened ratings consumed by the model
training pipeline. Syncing merges new ratings into it by rating id and
appends a summary of the run to a separate JSON array log.
"""

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from models import Rating, iso_timestamp, utc_now
from .errors import ExternalIOError, StorageError

logger = logging.getLogger(__name__)

SCORE_RANGE = range(1, 11)


@dataclass
class SyncSummary:
    sync_timestamp: str
    ratings_scanned: int
    new_ratings_synced: int
    total_ratings_in_corpus: int
    rating_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)


def score_histogram(scores) -> Dict[str, int]:
    """Count scores into buckets "1".."10"."""
    histogram = {str(score): 0 for score in SCORE_RANGE}
    for score in scores:
        histogram[str(score)] += 1
    return histogram


def _load_ratings(session, newest_first=False) -> List[Rating]:
    order = (Rating.created_at.desc(), Rating.id.desc()) if newest_first else (Rating.created_at.asc(), Rating.id.asc())
    try:
        return (
            session.query(Rating)
            .options(joinedload(Rating.first_song), joinedload(Rating.second_song))
            .order_by(*order)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to read ratings: {e}")
        raise StorageError("Failed to read ratings") from e


def _read_json_array(path: str, recover: bool) -> Optional[List]:
    """
    Read a JSON array from path.

    Returns [] for a missing file. An unparsable file returns None when
    recover is set, otherwise raises ExternalIOError.
    """
    if not os.path.exists(path):
        return []

    try:
        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise ExternalIOError(f"Could not read {path}: {e}") from e

    # Invalid UTF-8 raises UnicodeDecodeError, a ValueError
    try:
        data = json.loads(content)
    except ValueError as e:
        if recover:
            return None
        raise ExternalIOError(f"Could not parse {path}: {e}") from e

    if not isinstance(data, list):
        if recover:
            return None
        raise ExternalIOError(f"Expected a JSON array in {path}")
    return data


def _current_umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _write_json_atomic(path: str, data) -> None:
    """Write data next to path under a temp name, then rename over path."""
    directory = os.path.dirname(os.path.abspath(path))
    temp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=directory,
                                         suffix='.tmp', delete=False) as f:
            temp_path = f.name
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        if os.path.exists(path):
            shutil.copymode(path, temp_path)
        else:
            os.chmod(temp_path, 0o666 & ~_current_umask())
        os.replace(temp_path, path)
    except OSError as e:
        if temp_path and os.path.exists(temp_path):
            os.remove(temp_path)
        raise ExternalIOError(f"Could not write {path}: {e}") from e


def sync_ratings(session, corpus_path: str, log_path: str, now: Optional[datetime] = None) -> SyncSummary:
    """
    Merge every stored rating into the corpus file and log a summary.

    Entries already in the corpus (by id) are left as they are. The corpus
    is only rewritten when something changed, and always via temp file and
    rename so a crash never leaves it truncated. Re-running is safe.

    The corpus is replaced before the log is written. If the log write
    fails the merge is kept but its summary is lost, and the next run
    reports the entries as already synced.
    """
    ratings = _load_ratings(session)
    sync_log = _read_json_array(log_path, recover=False)
    entries = [rating.to_corpus_entry() for rating in ratings]
    logger.info(f"Scanned {len(entries)} ratings")

    existing = _read_json_array(corpus_path, recover=True)
    reset = existing is None
    if reset:
        logger.warning(f"Could not parse existing corpus {corpus_path}, starting fresh")
        existing = []
    else:
        logger.info(f"Found {len(existing)} existing entries in {corpus_path}")

    existing_ids = {entry.get('id') for entry in existing if isinstance(entry, dict)}
    new_entries = [entry for entry in entries if entry['id'] not in existing_ids]
    merged = existing + new_entries

    if new_entries or reset:
        _write_json_atomic(corpus_path, merged)
        logger.info(f"Added {len(new_entries)} new ratings, corpus now holds {len(merged)}")
    else:
        logger.info("No new ratings to sync")

    summary = SyncSummary(
        sync_timestamp=iso_timestamp(now or utc_now()),
        ratings_scanned=len(entries),
        new_ratings_synced=len(new_entries),
        total_ratings_in_corpus=len(merged),
        rating_distribution=score_histogram(rating.score for rating in ratings),
    )

    sync_log.append(summary.to_dict())
    _write_json_atomic(log_path, sync_log)

    return summary


def export_ratings(session, now: Optional[datetime] = None) -> Dict:
    ratings = _load_ratings(session, newest_first=True)

    sessions = {rating.session_id for rating in ratings if rating.session_id}
    pairs = {frozenset((rating.first_song_id, rating.second_song_id)) for rating in ratings}

    return {
        "metadata": {
            "total": len(ratings),
            "uniqueSessions": len(sessions),
            "uniquePairs": len(pairs),
            "scoreHistogram": score_histogram(rating.score for rating in ratings),
            "generatedAt": iso_timestamp(now or utc_now()),
        },
        "ratings": [rating.to_corpus_entry() for rating in ratings],
    }
