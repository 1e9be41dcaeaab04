import errno
import json

import pytest

from flashq.errors import (
    ConsumerGroupAlreadyExistsError,
    ConsumerGroupNotFoundError,
    DataCorruptionError,
    DirectoryLockedError,
    ErrorSource,
    FlashQError,
    HttpDomainError,
    HttpInternalError,
    HttpValidationError,
    InsufficientSpaceError,
    InvalidOffsetError,
    LockAcquisitionFailedError,
    PermissionDeniedError,
    ReadFailedError,
    SourceKind,
    StorageError,
    StorageUnavailableError,
    TopicNotFoundError,
    WriteFailedError,
    storage_error_from_os_error,
    storage_error_from_serialization_error,
)


def test_error_display():
    assert str(TopicNotFoundError("test")) == "Topic 'test' not found"
    assert str(InsufficientSpaceError("disk")) == "Insufficient space in disk"


def test_error_conversions():
    error = InsufficientSpaceError("disk")
    assert isinstance(error, FlashQError)
    assert isinstance(error, StorageError)
    assert error.context == "disk"


def test_io_error_conversion():
    storage_error = storage_error_from_os_error(
        PermissionError("access denied"), "file write"
    )
    assert isinstance(storage_error, PermissionDeniedError)
    assert storage_error.context == "file write"


def test_storage_error_source_conversion():
    storage_error = storage_error_from_os_error(
        OSError(errno.EACCES, "access denied"), "test operation"
    )
    assert isinstance(storage_error, PermissionDeniedError)
    assert storage_error.context == "test operation"


def test_out_of_memory_maps_to_insufficient_space():
    storage_error = storage_error_from_os_error(OSError(errno.ENOMEM, "no mem"), "alloc")
    assert isinstance(storage_error, InsufficientSpaceError)
    assert storage_error.context == "alloc"


def test_other_os_error_maps_to_write_failed():
    storage_error = storage_error_from_os_error(OSError("boom"), "ctx")
    assert isinstance(storage_error, WriteFailedError)
    assert storage_error.source.kind is SourceKind.IO
    assert str(storage_error) == "Write failed in ctx: IO error: boom"


def test_serialization_error_conversion():
    with pytest.raises(json.JSONDecodeError) as info:
        json.loads("{ invalid: json }")
    storage_error = storage_error_from_serialization_error(
        info.value, "test serialization"
    )
    assert isinstance(storage_error, DataCorruptionError)
    assert storage_error.context == "test serialization"
    assert storage_error.details != ""
    assert storage_error.details == str(info.value)


@pytest.mark.parametrize(
    "error, expected",
    [
        (ConsumerGroupNotFoundError("g"), "Consumer group 'g' not found"),
        (ConsumerGroupAlreadyExistsError("g"), "Consumer group 'g' already exists"),
        (
            InvalidOffsetError(5, "t", 3),
            "Invalid offset 5 for topic 't', max offset is 3",
        ),
        (
            ReadFailedError("reader", ErrorSource(SourceKind.NETWORK, "down")),
            "Read failed in reader: Network error: down",
        ),
        (
            WriteFailedError("w", ErrorSource(SourceKind.SERIALIZATION, "bad")),
            "Write failed in w: Serialization error: bad",
        ),
        (PermissionDeniedError("dir"), "Permission denied in dir"),
        (DataCorruptionError("log", "bad bytes"), "Data corruption in log: bad bytes"),
        (StorageUnavailableError("s3"), "Storage unavailable in s3"),
        (DirectoryLockedError("data", 42), "Directory locked in data (PID: 42)"),
        (DirectoryLockedError("data"), "Directory locked in data"),
        (LockAcquisitionFailedError(), "Failed to acquire exclusive lock on file"),
    ],
)
def test_display_messages(error, expected):
    assert str(error) == expected


def test_describe_matches_str():
    error = StorageUnavailableError("remote")
    assert error.describe() == "Storage unavailable in remote"
    assert error.describe() == str(error)


def test_error_source_display():
    assert str(ErrorSource(SourceKind.CUSTOM, "x")) == "Custom error: x"
    assert str(ErrorSource(SourceKind.IO, "y")) == "IO error: y"


@pytest.mark.parametrize(
    "error, not_found, client",
    [
        (TopicNotFoundError("t"), True, True),
        (ConsumerGroupNotFoundError("g"), True, True),
        (ConsumerGroupAlreadyExistsError("g"), False, True),
        (InvalidOffsetError(1, "t", 0), True, True),
        (InsufficientSpaceError("disk"), False, False),
        (LockAcquisitionFailedError(), False, False),
    ],
)
def test_classification(error, not_found, client):
    assert error.is_not_found() is not_found
    assert error.is_client_error() is client


def test_http_errors():
    assert (
        str(HttpValidationError("topic", "too long"))
        == "Validation error in field 'topic': too long"
    )
    domain = HttpDomainError(TopicNotFoundError("t"))
    assert str(domain) == "Topic 't' not found"
    assert isinstance(domain.error, TopicNotFoundError)
    assert str(HttpInternalError("oops")) == "Internal error: oops"


def test_errors_can_be_raised_and_caught_as_base():
    error = DirectoryLockedError("already in use", 7)
    assert error.pid == 7
    assert error.context == "already in use"
    assert str(error) == "Directory locked in already in use (PID: 7)"
    with pytest.raises(FlashQError, match=r"\(PID: 7\)") as info:
        raise error
    assert info.value is error
    assert info.value.is_client_error() is False