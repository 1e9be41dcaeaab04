"""HTTP operations behind the command-line client.

Each command talks to the server, prints a human-readable report to stdout
and returns what it parsed from the server's reply (``None`` on failure).
"""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Any, Optional, Union

import requests

from flashq.api import (
    ErrorResponse,
    FetchResponse,
    GetConsumerGroupOffsetResponse,
    HealthCheckResponse,
    ProduceRequest,
    ProduceResponse,
    Record,
    RecordWithOffset,
    UpdateConsumerGroupOffsetRequest,
)

PathLike = Union[str, Path]


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def _status_text(response: requests.Response) -> str:
    try:
        phrase = HTTPStatus(response.status_code).phrase
    except ValueError:
        phrase = response.reason or ""
    return f"{response.status_code} {phrase}".rstrip()


def _send(
    session: requests.Session, method: str, url: str, **kwargs: Any
) -> Optional[requests.Response]:
    try:
        return session.request(method, url, **kwargs)
    except requests.RequestException as exc:
        print(f"Failed to connect to server: {exc}")
        return None


def _parse(response: requests.Response, model: Any) -> Any:
    return model.from_dict(response.json())


def handle_health_command(
    session: requests.Session, server_url: str
) -> Optional[HealthCheckResponse]:
    """Query the server's health endpoint and print its status."""
    response = _send(session, "GET", f"{server_url}/health")
    if response is None:
        return None
    if not _is_success(response):
        handle_error_response(response, "check server health")
        return None
    try:
        health = _parse(response, HealthCheckResponse)
    except (ValueError, TypeError):
        print("Server is healthy (response parsing failed)")
        return None
    print(f"Server Status: {health.status}")
    print(f"Service: {health.service}")
    print(f"Timestamp: {health.timestamp}")
    return health


def _load_batch(batch_file: PathLike) -> list[Record]:
    try:
        content = Path(batch_file).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Failed to read file '{batch_file}': {exc}")
        raise SystemExit(1) from exc
    try:
        data = json.loads(content)
        if not isinstance(data, list):
            raise ValueError("expected a JSON array of records")
        return [Record.from_dict(item) for item in data]
    except (ValueError, TypeError) as exc:
        print(f"Failed to parse JSON file '{batch_file}': {exc}")
        raise SystemExit(1) from exc


def handle_batch_post(
    session: requests.Session, server_url: str, topic: str, batch_file: PathLike
) -> Optional[ProduceResponse]:
    """Post every record in a JSON file to a topic.

    Exits with status 1 when the file cannot be read or parsed.
    """
    records = _load_batch(batch_file)
    request = ProduceRequest(records=records)
    response = _send(
        session, "POST", f"{server_url}/topics/{topic}/records", json=request.to_dict()
    )
    if response is None:
        return None
    if not _is_success(response):
        handle_error_response(response, f"post batch to topic '{topic}'")
        return None
    try:
        produced = _parse(response, ProduceResponse)
    except (ValueError, TypeError) as exc:
        print(f"Failed to parse response: {exc}")
        return None
    first = str(produced.offsets[0].offset) if produced.offsets else "unknown"
    print(
        f"Posted {len(produced.offsets)} records to topic '{topic}' "
        f"starting at offset: {first}"
    )
    return produced


def post_records(
    session: requests.Session,
    server_url: str,
    topic: str,
    key: Optional[str],
    message: str,
    headers: Optional[dict[str, str]],
) -> Optional[ProduceResponse]:
    """Post a single record to a topic."""
    request = ProduceRequest(records=[Record(value=message, key=key, headers=headers)])
    response = _send(
        session, "POST", f"{server_url}/topics/{topic}/records", json=request.to_dict()
    )
    if response is None:
        return None
    if not _is_success(response):
        handle_error_response(response, f"post to topic '{topic}'")
        return None
    try:
        produced = _parse(response, ProduceResponse)
    except (ValueError, TypeError) as exc:
        print(f"Failed to parse response: {exc}")
        return None
    if produced.offsets:
        print(f"Posted record to topic '{topic}' with offset: {produced.offsets[0].offset}")
    else:
        print(f"Posted record to topic '{topic}' (no offset returned)")
    return produced


def create_consumer_group_command(
    session: requests.Session, server_url: str, group_id: str
) -> bool:
    """Create a consumer group; return whether the server accepted it."""
    response = _send(session, "POST", f"{server_url}/consumer/{group_id}")
    if response is None:
        return False
    if not _is_success(response):
        handle_error_response(response, f"create consumer group '{group_id}'")
        return False
    print(f"Created consumer group '{group_id}'")
    return True


def leave_consumer_group_command(
    session: requests.Session, server_url: str, group_id: str
) -> bool:
    """Delete a consumer group; return whether the server accepted it."""
    response = _send(session, "DELETE", f"{server_url}/consumer/{group_id}")
    if response is None:
        return False
    if not _is_success(response):
        handle_error_response(response, f"leave consumer group '{group_id}'")
        return False
    print(f"Left consumer group '{group_id}'")
    return True


def fetch_consumer_records_command(
    session: requests.Session,
    server_url: str,
    group_id: str,
    topic: str,
    max_records: Optional[int],
    from_offset: Optional[int],
    include_headers: Optional[bool],
) -> Optional[FetchResponse]:
    """Fetch records for a consumer group from a topic and print them."""
    params = []
    if max_records is not None:
        params.append(f"max_records={max_records}")
    if from_offset is not None:
        params.append(f"from_offset={from_offset}")
    if include_headers is not None:
        params.append(f"include_headers={str(include_headers).lower()}")

    url = f"{server_url}/consumer/{group_id}/topics/{topic}"
    if params:
        url += "?" + "&".join(params)

    response = _send(session, "GET", url)
    if response is None:
        return None
    if not _is_success(response):
        handle_error_response(
            response,
            f"fetch records for consumer group '{group_id}' from topic '{topic}'",
        )
        return None
    try:
        fetched = _parse(response, FetchResponse)
    except (ValueError, TypeError) as exc:
        print(f"Failed to parse response: {exc}")
        return None
    print(
        f"Got {len(fetched.records)} records for consumer group '{group_id}' "
        f"from topic '{topic}'"
    )
    for record in fetched.records:
        print_record(record)
    print(f"Next offset: {fetched.next_offset}")
    if fetched.lag is not None:
        print(f"Consumer lag: {fetched.lag}")
    return fetched


def commit_offset_command(
    session: requests.Session, server_url: str, group_id: str, topic: str, offset: int
) -> bool:
    """Commit an offset for a consumer group on a topic."""
    request = UpdateConsumerGroupOffsetRequest(offset=offset)
    response = _send(
        session,
        "POST",
        f"{server_url}/consumer/{group_id}/topics/{topic}/offset",
        json=request.to_dict(),
    )
    if response is None:
        return False
    if not _is_success(response):
        handle_error_response(
            response, f"commit offset for consumer group '{group_id}' and topic '{topic}'"
        )
        return False
    print(f"Committed offset {offset} for consumer group '{group_id}' and topic '{topic}'")
    return True


def get_offset_command(
    session: requests.Session, server_url: str, group_id: str, topic: str
) -> Optional[GetConsumerGroupOffsetResponse]:
    """Print the committed offset of a consumer group on a topic."""
    response = _send(
        session, "GET", f"{server_url}/consumer/{group_id}/topics/{topic}/offset"
    )
    if response is None:
        return None
    if not _is_success(response):
        handle_error_response(
            response, f"get offset for consumer group '{group_id}' and topic '{topic}'"
        )
        return None
    try:
        result = _parse(response, GetConsumerGroupOffsetResponse)
    except (ValueError, TypeError) as exc:
        print(f"Failed to parse response: {exc}")
        return None
    print(f"Consumer group '{group_id}' offset for topic '{topic}': {result.offset}")
    return result


def handle_error_response(
    response: requests.Response, operation: str
) -> Optional[ErrorResponse]:
    """Report a failed request; return the server's error body if it could be parsed."""
    status = _status_text(response)
    try:
        body = response.text
    except requests.RequestException as exc:
        print(f"Server error: {status} (failed to read response body: {exc})")
        return None
    try:
        error_response = ErrorResponse.from_dict(json.loads(body))
    except (ValueError, TypeError) as exc:
        print(f"Server error: {status} (failed to parse error response: {exc})")
        if body:
            print(f"   Raw response: {body.strip()}")
        return None
    print(f"Failed to {operation}: {error_response.error}")
    return error_response


def format_record(record: RecordWithOffset) -> str:
    """One-line description of a fetched record."""
    line = f"{record.timestamp} [{record.offset}] {record.record.value}"
    if record.record.key is not None:
        line += f" (key: {record.record.key})"
    if record.record.headers:
        rendered = json.dumps(record.record.headers, ensure_ascii=False)
        line += f" (headers: {rendered})"
    return line


def print_record(record: RecordWithOffset) -> None:
    """Print a fetched record on one line."""
    print(format_record(record))