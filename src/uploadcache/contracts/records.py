# src/uploadcache/contracts/records.py
"""The single persisted entity of the upload cache."""

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UploadRecord:
    """One cached payload awaiting upload.

    Identified by the composite key ``(id, type)``. Only ``data`` and
    ``attempt_count`` change after insertion; ``date`` is the creation
    time and is never rewritten by updates.

    Attributes:
        id: Caller-supplied identifier
        type: Payload category (an UploadType value or any small int)
        data: Opaque serialized payload, never interpreted by the cache
        attempt_count: Upload attempts made so far by the pipeline
        date: Creation time (UTC)
    """

    id: str
    type: int
    data: bytes
    attempt_count: int
    date: datetime

    def __post_init__(self) -> None:
        if self.attempt_count < 0:
            raise ValueError(f"attempt_count must be >= 0, got {self.attempt_count}")
        if self.date.tzinfo is None:
            raise ValueError("UploadRecord.date must be timezone-aware (UTC)")

    @property
    def key(self) -> tuple[str, int]:
        """Composite primary key ``(id, type)``."""
        return (self.id, int(self.type))

    @property
    def size(self) -> int:
        return len(self.data)

    def with_attempt_count(self, attempt_count: int) -> "UploadRecord":
        """Return a copy carrying a new attempt count."""
        return replace(self, attempt_count=attempt_count)
