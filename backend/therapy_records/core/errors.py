"""
Error taxonomy shared by the record gateway and the attachment store.
Services raise these; the API layer maps them to HTTP responses.
"""


class RecordsError(Exception):
    """Base class for all record store failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RecordsError):
    """Malformed or missing identifier / field."""

    status_code = 422


class NotFoundError(RecordsError):
    """Referenced id or file does not exist."""

    status_code = 404


class StorageError(RecordsError):
    """The underlying datastore rejected or failed an operation."""


class AttachmentIOError(RecordsError):
    """Copying, reading or removing an attachment file failed."""
