"""Data models for the return tracker.

Updates: v0.2.0 - 2026-06-02 - Export RecordEdit and transition helpers.
Updates: v0.1.0 - 2026-02-04 - Export ReturnRecord dataclass.
"""

from .return_record import (
    DEFAULT_WINDOW_DAYS,
    RecordEdit,
    RecordStatus,
    ReturnRecord,
    apply_edit,
    normalize_record,
    transition_status,
)

__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "RecordEdit",
    "RecordStatus",
    "ReturnRecord",
    "apply_edit",
    "normalize_record",
    "transition_status",
]
