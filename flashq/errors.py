"""Error types raised by the queue, its storage layer and the HTTP layer."""

from __future__ import annotations

import errno
import enum
from dataclasses import dataclass
from typing import Optional


class SourceKind(enum.Enum):
    """What kind of failure lies underneath a storage error."""

    IO = "IO"
    SERIALIZATION = "Serialization"
    NETWORK = "Network"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class ErrorSource:
    """The underlying cause of a read or write failure."""

    kind: SourceKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value} error: {self.message}"


class FlashQError(Exception):
    """Base class of every error the queue raises."""

    def is_not_found(self) -> bool:
        """True when the error means a requested item does not exist."""
        return isinstance(
            self, (TopicNotFoundError, ConsumerGroupNotFoundError, InvalidOffsetError)
        )

    def is_client_error(self) -> bool:
        """True when the error was caused by the caller's request."""
        return isinstance(
            self,
            (
                TopicNotFoundError,
                ConsumerGroupNotFoundError,
                ConsumerGroupAlreadyExistsError,
                InvalidOffsetError,
            ),
        )


class TopicNotFoundError(FlashQError):
    def __init__(self, topic: str) -> None:
        self.topic = topic
        super().__init__(f"Topic '{topic}' not found")


class ConsumerGroupNotFoundError(FlashQError):
    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Consumer group '{group_id}' not found")


class ConsumerGroupAlreadyExistsError(FlashQError):
    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Consumer group '{group_id}' already exists")


class InvalidOffsetError(FlashQError):
    def __init__(self, offset: int, topic: str, max_offset: int) -> None:
        self.offset = offset
        self.topic = topic
        self.max_offset = max_offset
        super().__init__(
            f"Invalid offset {offset} for topic '{topic}', max offset is {max_offset}"
        )


class StorageError(FlashQError):
    """Base class of failures in the storage layer."""

    def __init__(self, message: str) -> None:
        self._message = message
        super().__init__(message)

    def describe(self) -> str:
        """Human-readable description of the storage failure."""
        return self._message

    def __str__(self) -> str:
        return self.describe()


class ReadFailedError(StorageError):
    def __init__(self, context: str, source: ErrorSource) -> None:
        self.context = context
        self.source = source
        super().__init__(f"Read failed in {context}: {source}")


class WriteFailedError(StorageError):
    def __init__(self, context: str, source: ErrorSource) -> None:
        self.context = context
        self.source = source
        super().__init__(f"Write failed in {context}: {source}")


class InsufficientSpaceError(StorageError):
    def __init__(self, context: str) -> None:
        self.context = context
        super().__init__(f"Insufficient space in {context}")


class PermissionDeniedError(StorageError):
    def __init__(self, context: str) -> None:
        self.context = context
        super().__init__(f"Permission denied in {context}")


class DataCorruptionError(StorageError):
    def __init__(self, context: str, details: str) -> None:
        self.context = context
        self.details = details
        super().__init__(f"Data corruption in {context}: {details}")


class StorageUnavailableError(StorageError):
    def __init__(self, context: str) -> None:
        self.context = context
        super().__init__(f"Storage unavailable in {context}")


class DirectoryLockedError(StorageError):
    def __init__(self, context: str, pid: Optional[int] = None) -> None:
        self.context = context
        self.pid = pid
        if pid is None:
            message = f"Directory locked in {context}"
        else:
            message = f"Directory locked in {context} (PID: {pid})"
        super().__init__(message)


class LockAcquisitionFailedError(StorageError):
    def __init__(self) -> None:
        super().__init__("Failed to acquire exclusive lock on file")


class HttpError(Exception):
    """Base class of errors raised while serving HTTP requests."""


class HttpValidationError(HttpError):
    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"Validation error in field '{field}': {message}")


class HttpDomainError(HttpError):
    def __init__(self, error: FlashQError) -> None:
        self.error = error
        super().__init__(str(error))


class HttpInternalError(HttpError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Internal error: {message}")


def storage_error_from_os_error(error: OSError, context: str) -> StorageError:
    """Map an operating-system error onto the matching storage error."""
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return PermissionDeniedError(context)
    if error.errno == errno.ENOMEM:
        return InsufficientSpaceError(context)
    return WriteFailedError(context, ErrorSource(SourceKind.IO, str(error)))


def storage_error_from_serialization_error(error: object, context: str) -> StorageError:
    """Wrap a decoding or encoding failure as data corruption."""
    return DataCorruptionError(context, str(error))