"""Enumerations shared across the upload cache."""

from enum import IntEnum


class UploadType(IntEnum):
    """Payload category of a cached upload.

    Stored as a small integer in the ``type`` column. The column itself
    accepts any integer so that categories added by newer writers survive
    a round trip through an older reader.
    """

    SPANS = 0
    LOGS = 1
    SESSION = 2
