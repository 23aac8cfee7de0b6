"""Core service layer for the return tracker.

Updates:
  v0.3.0 - 2026-06-02 - Export RecordEdit helpers and the tracker service.
  v0.2.0 - 2026-03-11 - Export summary, view, and CSV helpers.
  v0.1.0 - 2026-02-04 - Surface the persistence gateway and deadline helpers.
"""

from models.return_record import RecordEdit, RecordStatus, ReturnRecord, normalize_record

from .csv_codec import (
    CSV_COLUMNS,
    DEFAULT_EXPORT_FILENAME,
    decode_records,
    encode_records,
    import_records,
    parse_line,
    split_rows,
)
from .deadlines import (
    Deadline,
    DeadlineState,
    classify_deadline,
    compute_deadline,
    describe_days_remaining,
    today,
)
from .exceptions import (
    RecordNotFoundError,
    RecordStorageError,
    RecordValidationError,
    RemoteStoreError,
    ReturnTrackerError,
)
from .factory import build_gateway, build_tracker
from .persistence import (
    LocalBlobStore,
    LocalRecordStore,
    PersistenceGateway,
    RecordStore,
    RemoteRecordStore,
)
from .record_view import ComputedRecord, SortMode, ViewOptions, apply_view
from .summary import ReturnSummary, summarize
from .tracker import RecordForm, ReturnTracker, validate_form

__all__ = [
    "CSV_COLUMNS",
    "DEFAULT_EXPORT_FILENAME",
    "ComputedRecord",
    "Deadline",
    "DeadlineState",
    "LocalBlobStore",
    "LocalRecordStore",
    "PersistenceGateway",
    "RecordEdit",
    "RecordForm",
    "RecordNotFoundError",
    "RecordStatus",
    "RecordStorageError",
    "RecordStore",
    "RecordValidationError",
    "RemoteRecordStore",
    "RemoteStoreError",
    "ReturnRecord",
    "ReturnSummary",
    "ReturnTracker",
    "ReturnTrackerError",
    "SortMode",
    "ViewOptions",
    "apply_view",
    "build_gateway",
    "build_tracker",
    "classify_deadline",
    "compute_deadline",
    "decode_records",
    "describe_days_remaining",
    "encode_records",
    "import_records",
    "normalize_record",
    "parse_line",
    "split_rows",
    "summarize",
    "today",
    "validate_form",
]
