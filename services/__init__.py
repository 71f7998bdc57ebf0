from .errors import (
    RatingsError,
    InvalidInput,
    NotFound,
    Conflict,
    InsufficientCatalog,
    StorageError,
    ExternalIOError,
)
from .pairs import PairSelection, select_pair
from .ratings import submit_rating, normalize_client_meta
from .sync import SyncSummary, sync_ratings, export_ratings, score_histogram
