"""Exceptions raised by the IPCRAE vault bridge.

Absent files and policy denials are values, not exceptions. Everything
here is raised before a file is touched, except ``PartialCommitError``.
"""


class IPCRAEError(Exception):
    """Base class for IPCRAE errors."""

    pass


class ConfigError(IPCRAEError):
    """Raised when a configuration file is invalid."""

    pass


class VaultValidationError(IPCRAEError, ValueError):
    """Raised when input to a vault writer fails validation."""

    pass


class InvalidDomainError(VaultValidationError):
    """Knowledge domain is empty after normalization."""

    pass


class InvalidTagsError(VaultValidationError):
    """No knowledge tag survives normalization."""

    pass


class InvalidSourcesError(VaultValidationError):
    """Strict knowledge write without any source path."""

    pass


class EmptyNoteError(VaultValidationError):
    """Note text is empty (capture, local note, or promoted note)."""

    pass


class MissingNotePathError(VaultValidationError):
    """Promotion was requested without a local note path."""

    pass


class PartialCommitError(IPCRAEError):
    """A multi-file commit failed after some files were written."""

    def __init__(self, message: str, written: list[str], failed: str):
        super().__init__(message)
        self.written = written
        self.failed = failed
