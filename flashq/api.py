"""Request and response types of the HTTP API, with their validation rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from flashq.errors import (
    ConsumerGroupAlreadyExistsError,
    ConsumerGroupNotFoundError,
    FlashQError,
    InvalidOffsetError,
    StorageError,
    TopicNotFoundError,
)

logger = logging.getLogger(__name__)

# Validation limits. Only header value sizes are limited, not the header count.
MAX_KEY_SIZE = 1024
MAX_VALUE_SIZE = 1_048_576
MAX_HEADER_VALUE_SIZE = 1024
MAX_BATCH_SIZE = 1000
MAX_POLL_RECORDS = 10000
MAX_NAME_LENGTH = 255

_MISSING = object()


def _field(data: Mapping[str, Any], name: str, default: Any = _MISSING) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    if name in data:
        return data[name]
    if default is _MISSING:
        raise ValueError(f"missing field '{name}'")
    return default


def _str(data: Mapping[str, Any], name: str) -> str:
    value = _field(data, name)
    if not isinstance(value, str):
        raise ValueError(f"field '{name}' must be a string")
    return value


def _optional_str(data: Mapping[str, Any], name: str) -> Optional[str]:
    value = _field(data, name, None)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field '{name}' must be a string or null")
    return value


def _uint(data: Mapping[str, Any], name: str) -> int:
    value = _field(data, name)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field '{name}' must be a non-negative integer")
    return value


def _optional_uint(data: Mapping[str, Any], name: str) -> Optional[int]:
    if _field(data, name, None) is None:
        return None
    return _uint(data, name)


def _list(data: Mapping[str, Any], name: str) -> list:
    value = _field(data, name)
    if not isinstance(value, list):
        raise ValueError(f"field '{name}' must be a list")
    return value


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


@dataclass
class Record:
    """A message with an optional key and optional string headers."""

    value: str
    key: Optional[str] = None
    headers: Optional[dict[str, str]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "headers": None if self.headers is None else dict(self.headers),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Record":
        headers = _field(data, "headers", None)
        if headers is not None:
            if not isinstance(headers, Mapping) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
            ):
                raise ValueError("field 'headers' must map strings to strings")
            headers = dict(headers)
        return cls(
            value=_str(data, "value"),
            key=_optional_str(data, "key"),
            headers=headers,
        )


@dataclass
class RecordWithOffset:
    """A stored record together with its offset and timestamp."""

    record: Record
    offset: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "offset": self.offset,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RecordWithOffset":
        return cls(
            record=Record.from_dict(_field(data, "record")),
            offset=_uint(data, "offset"),
            timestamp=_str(data, "timestamp"),
        )


@dataclass
class ProduceRequest:
    records: list[Record] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"records": [record.to_dict() for record in self.records]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProduceRequest":
        return cls(records=[Record.from_dict(item) for item in _list(data, "records")])


@dataclass
class OffsetInfo:
    offset: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {"offset": self.offset, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OffsetInfo":
        return cls(offset=_uint(data, "offset"), timestamp=_str(data, "timestamp"))


@dataclass
class ProduceResponse:
    offsets: list[OffsetInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"offsets": [info.to_dict() for info in self.offsets]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProduceResponse":
        return cls(offsets=[OffsetInfo.from_dict(item) for item in _list(data, "offsets")])


def _parse_query_uint(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"query parameter '{name}' must be a non-negative integer")
    if isinstance(value, str):
        if not value.isdigit():
            raise ValueError(f"query parameter '{name}' must be a non-negative integer")
        return int(value)
    if isinstance(value, int) and value >= 0:
        return value
    raise ValueError(f"query parameter '{name}' must be a non-negative integer")


def _parse_query_bool(value: Any, name: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError(f"query parameter '{name}' must be 'true' or 'false'")


@dataclass
class PollQuery:
    """Query parameters of a fetch request."""

    from_offset: Optional[int] = None
    max_records: Optional[int] = None
    include_headers: Optional[bool] = None

    def effective_limit(self) -> Optional[int]:
        return self.max_records

    def should_include_headers(self) -> bool:
        return True if self.include_headers is None else self.include_headers

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PollQuery":
        """Build from query parameters, given as strings or as native values."""
        return cls(
            from_offset=_parse_query_uint(data.get("from_offset"), "from_offset"),
            max_records=_parse_query_uint(data.get("max_records"), "max_records"),
            include_headers=_parse_query_bool(data.get("include_headers"), "include_headers"),
        )


@dataclass
class FetchResponse:
    records: list[RecordWithOffset]
    next_offset: int
    high_water_mark: int
    lag: Optional[int] = None

    @classmethod
    def build(
        cls, records: Iterable[RecordWithOffset], next_offset: int, high_water_mark: int
    ) -> "FetchResponse":
        """Create a response, computing lag when the high-water mark is not behind."""
        lag = high_water_mark - next_offset if high_water_mark >= next_offset else None
        return cls(list(records), next_offset, high_water_mark, lag)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "records": [record.to_dict() for record in self.records],
            "next_offset": self.next_offset,
            "high_water_mark": self.high_water_mark,
        }
        if self.lag is not None:
            result["lag"] = self.lag
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FetchResponse":
        return cls(
            records=[RecordWithOffset.from_dict(item) for item in _list(data, "records")],
            next_offset=_uint(data, "next_offset"),
            high_water_mark=_uint(data, "high_water_mark"),
            lag=_optional_uint(data, "lag"),
        )


@dataclass
class ConsumerGroupResponse:
    group_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"group_id": self.group_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsumerGroupResponse":
        return cls(group_id=_str(data, "group_id"))


@dataclass
class UpdateConsumerGroupOffsetRequest:
    offset: int

    def to_dict(self) -> dict[str, Any]:
        return {"offset": self.offset}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UpdateConsumerGroupOffsetRequest":
        return cls(offset=_uint(data, "offset"))


@dataclass
class GetConsumerGroupOffsetResponse:
    group_id: str
    topic: str
    offset: int

    def to_dict(self) -> dict[str, Any]:
        return {"group_id": self.group_id, "topic": self.topic, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GetConsumerGroupOffsetResponse":
        return cls(
            group_id=_str(data, "group_id"),
            topic=_str(data, "topic"),
            offset=_uint(data, "offset"),
        )


@dataclass
class OffsetResponse:
    topic: str
    committed_offset: int
    high_water_mark: int
    lag: int
    last_commit_time: Optional[str] = None

    @classmethod
    def build(
        cls,
        topic: str,
        committed_offset: int,
        high_water_mark: int,
        last_commit_time: Optional[str],
    ) -> "OffsetResponse":
        """Create a response; lag never goes below zero."""
        lag = max(high_water_mark - committed_offset, 0)
        return cls(topic, committed_offset, high_water_mark, lag, last_commit_time)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "topic": self.topic,
            "committed_offset": self.committed_offset,
            "high_water_mark": self.high_water_mark,
            "lag": self.lag,
        }
        if self.last_commit_time is not None:
            result["last_commit_time"] = self.last_commit_time
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OffsetResponse":
        return cls(
            topic=_str(data, "topic"),
            committed_offset=_uint(data, "committed_offset"),
            high_water_mark=_uint(data, "high_water_mark"),
            lag=_uint(data, "lag"),
            last_commit_time=_optional_str(data, "last_commit_time"),
        )


@dataclass
class HealthCheckResponse:
    status: str
    service: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "service": self.service, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HealthCheckResponse":
        return cls(
            status=_str(data, "status"),
            service=_str(data, "service"),
            timestamp=_uint(data, "timestamp"),
        )


@dataclass
class ErrorResponse:
    """The JSON body the server sends with every failed request."""

    error: str
    message: str
    details: Optional[Any] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details is not None:
            result["details"] = self.details
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ErrorResponse":
        return cls(
            error=_str(data, "error"),
            message=_str(data, "message"),
            details=_field(data, "details", None),
        )

    @classmethod
    def validation_error(cls, message: str) -> "ErrorResponse":
        return cls("validation_error", message)

    @classmethod
    def invalid_parameter(cls, param_name: str, message: str) -> "ErrorResponse":
        return cls("invalid_parameter", message, {"parameter": param_name})

    @classmethod
    def topic_not_found(cls, topic: str) -> "ErrorResponse":
        return cls("topic_not_found", f"Topic '{topic}' not found", {"topic": topic})

    @classmethod
    def group_not_found(cls, group_id: str) -> "ErrorResponse":
        return cls(
            "group_not_found",
            f"Consumer group '{group_id}' not found",
            {"group_id": group_id},
        )

    @classmethod
    def internal_error(cls, message: str) -> "ErrorResponse":
        return cls("internal_error", message)

    @classmethod
    def record_size_error(cls, field: str, max_size: int, actual_size: int) -> "ErrorResponse":
        return cls(
            "validation_error",
            f"{field} exceeds maximum length of {max_size} (got {actual_size})",
            {"field": field, "max_size": max_size, "actual_size": actual_size},
        )

    @classmethod
    def invalid_topic_name(cls, topic: str) -> "ErrorResponse":
        return cls(
            "invalid_parameter",
            "Topic name must contain only alphanumeric characters, dots, underscores, and hyphens",
            {"parameter": "topic", "value": topic},
        )

    @classmethod
    def invalid_consumer_group_id(cls, group_id: str) -> "ErrorResponse":
        return cls(
            "invalid_parameter",
            "Consumer group ID must contain only alphanumeric characters, dots, "
            "underscores, and hyphens",
            {"parameter": "group_id", "value": group_id},
        )

    @classmethod
    def from_error(cls, error: FlashQError) -> "ErrorResponse":
        """Translate a queue error into the response the server sends for it."""
        if isinstance(error, TopicNotFoundError):
            return cls.topic_not_found(error.topic)
        if isinstance(error, ConsumerGroupNotFoundError):
            return cls.group_not_found(error.group_id)
        if isinstance(error, ConsumerGroupAlreadyExistsError):
            return cls(
                "conflict",
                f"Consumer group '{error.group_id}' already exists",
                {"group_id": error.group_id},
            )
        if isinstance(error, InvalidOffsetError):
            return cls(
                "invalid_offset",
                f"Invalid offset {error.offset} for topic '{error.topic}', "
                f"max offset is {error.max_offset}",
                {"offset": error.offset, "topic": error.topic, "max_offset": error.max_offset},
            )
        if isinstance(error, StorageError):
            return cls.internal_error(f"Storage error: {error}")
        return cls.internal_error(str(error))


class ApiError(Exception):
    """Raised when a request fails validation; carries the error response."""

    def __init__(self, response: ErrorResponse) -> None:
        self.response = response
        super().__init__(response.message)


def parse_headers(header_strings: Optional[Iterable[str]]) -> Optional[dict[str, str]]:
    """Turn KEY=VALUE strings into a dict, skipping malformed entries."""
    if header_strings is None:
        return None
    headers: dict[str, str] = {}
    for entry in header_strings:
        key, sep, value = entry.partition("=")
        if not sep:
            logger.warning("Invalid header format '%s', expected KEY=VALUE", entry)
            continue
        headers[key] = value
    return headers


def validate_record(record: Record, index: int) -> None:
    """Raise ApiError if the record's key, value or a header value is too long."""
    if record.key is not None:
        size = _byte_len(record.key)
        if size > MAX_KEY_SIZE:
            raise ApiError(
                ErrorResponse(
                    "validation_error",
                    f"Record at index {index} key exceeds maximum length of "
                    f"{MAX_KEY_SIZE} characters (got {size})",
                    {
                        "field": f"records[{index}].key",
                        "max_size": MAX_KEY_SIZE,
                        "actual_size": size,
                    },
                )
            )

    size = _byte_len(record.value)
    if size > MAX_VALUE_SIZE:
        raise ApiError(
            ErrorResponse(
                "validation_error",
                f"Record at index {index} value exceeds maximum length of "
                f"{MAX_VALUE_SIZE} characters (got {size})",
                {
                    "field": f"records[{index}].value",
                    "max_size": MAX_VALUE_SIZE,
                    "actual_size": size,
                },
            )
        )

    for header_key, header_value in (record.headers or {}).items():
        size = _byte_len(header_value)
        if size > MAX_HEADER_VALUE_SIZE:
            raise ApiError(
                ErrorResponse(
                    "validation_error",
                    f"Record at index {index} header '{header_key}' value exceeds maximum "
                    f"length of {MAX_HEADER_VALUE_SIZE} characters (got {size})",
                    {
                        "field": f"records[{index}].headers.{header_key}",
                        "max_size": MAX_HEADER_VALUE_SIZE,
                        "actual_size": size,
                    },
                )
            )


def validate_produce_request(request: ProduceRequest) -> None:
    """Raise ApiError unless the batch holds 1 to MAX_BATCH_SIZE valid records."""
    count = len(request.records)
    if count == 0:
        raise ApiError(
            ErrorResponse.invalid_parameter("records", "At least one record must be provided")
        )
    if count > MAX_BATCH_SIZE:
        raise ApiError(
            ErrorResponse(
                "validation_error",
                f"Batch size exceeds maximum of {MAX_BATCH_SIZE} records (got {count})",
                {"field": "records", "max_size": MAX_BATCH_SIZE, "actual_size": count},
            )
        )
    for index, record in enumerate(request.records):
        validate_record(record, index)


def _name_is_well_formed(name: str) -> bool:
    first, rest = name[0], name[1:]
    if not (first.isalnum() or first in "._"):
        return False
    return all(ch.isalnum() or ch in "._-" for ch in rest)


def validate_topic_name(topic: str) -> None:
    """Raise ApiError unless the topic name is 1-255 bytes of [alnum . _ -], not starting with -."""
    if not topic or _byte_len(topic) > MAX_NAME_LENGTH:
        raise ApiError(
            ErrorResponse.invalid_parameter(
                "topic", "Topic name must be between 1 and 255 characters"
            )
        )
    if not _name_is_well_formed(topic):
        raise ApiError(ErrorResponse.invalid_topic_name(topic))


def validate_consumer_group_id(group_id: str) -> None:
    """Raise ApiError unless the group id follows the same rules as topic names."""
    if not group_id or _byte_len(group_id) > MAX_NAME_LENGTH:
        raise ApiError(
            ErrorResponse.invalid_parameter(
                "group_id", "Consumer group ID must be between 1 and 255 characters"
            )
        )
    if not _name_is_well_formed(group_id):
        raise ApiError(ErrorResponse.invalid_consumer_group_id(group_id))


def validate_poll_query(query: PollQuery) -> None:
    """Raise ApiError if max_records is outside 1..MAX_POLL_RECORDS."""
    if query.max_records is not None and not 1 <= query.max_records <= MAX_POLL_RECORDS:
        raise ApiError(
            ErrorResponse.invalid_parameter(
                "max_records", f"max_records must be between 1 and {MAX_POLL_RECORDS}"
            )
        )