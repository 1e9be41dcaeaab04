# flashq

A command-line client for a FlashQ server, together with the request and
response types, validation rules and error classes of the FlashQ HTTP API.

FlashQ organises records into topics. Producers post records (a value, an
optional key and optional string headers) to a topic; consumer groups fetch
records from a topic and commit the offset they have reached.

## What this package does not do

This package contains no server and no record storage. The client needs a
FlashQ server already running on `127.0.0.1`; the API types, validation
functions and error classes describe that server's interface but do not
serve it.

## Installation

```
pip install .
```

## Command line

The `flashq-client` command talks to a server on `127.0.0.1`. The port
defaults to 8080 and is set with `--port`/`-p`. `--version` prints the
client version.

Check the server:

```
flashq-client health
flashq-client --port 9090 health
```

Post a record, with an optional key (`--key`/`-k`) and headers
(`--header KEY=VALUE`, repeatable; entries without `=` are skipped with a
warning):

```
flashq-client producer records orders "first order"
flashq-client producer records orders "second order" --key customer-1 --header source=web --header priority=high
```

Post a batch of records from a JSON file holding a list of records
(`[{"value": "a"}, {"key": "k", "value": "b", "headers": {"h": "v"}}]`):

```
flashq-client producer records orders --batch records.json
```

Either a message or `--batch`/`-b` must be given. If the batch file cannot
be read or parsed, the command prints the reason and exits with status 1.

Work with consumer groups:

```
flashq-client consumer create analytics
flashq-client consumer fetch analytics orders --max-records 10
flashq-client consumer fetch analytics orders --from-offset 5 --include-headers false
flashq-client consumer offset commit analytics orders 3
flashq-client consumer offset get analytics orders
flashq-client consumer leave analytics
```

`--include-headers` takes `true` or `false`. `offset commit` also accepts
`--metadata`, which is not sent to the server.

Fetched records are printed one per line as
`<timestamp> [<offset>] <value>`, followed by ` (key: ...)` and
` (headers: {...})` when present, then the next offset and, when the server
reports it, the consumer lag. When the server answers with an error, the
error code from its JSON body is printed; if the body is not a valid error
response, the status and the raw body are printed instead.

## Library

`flashq.api` holds the API types (`Record`, `RecordWithOffset`,
`ProduceRequest`, `ProduceResponse`, `OffsetInfo`, `PollQuery`,
`FetchResponse`, `ConsumerGroupResponse`, `UpdateConsumerGroupOffsetRequest`,
`GetConsumerGroupOffsetResponse`, `OffsetResponse`, `HealthCheckResponse`,
`ErrorResponse`) with `to_dict` and `from_dict` for JSON; `from_dict` raises
`ValueError` on missing or mistyped fields. It also has `parse_headers` and
the validation functions `validate_topic_name`, `validate_consumer_group_id`,
`validate_record`, `validate_produce_request` and `validate_poll_query`.
These raise `ApiError`, which carries the `ErrorResponse` the server would
send back.

```python
from flashq.api import ApiError, ProduceRequest, Record, validate_produce_request

request = ProduceRequest(records=[Record(value="hello", key="greeting")])
validate_produce_request(request)

try:
    validate_produce_request(ProduceRequest(records=[]))
except ApiError as exc:
    print(exc.response.error, exc.response.message)
```

Limits enforced by validation: keys and header values up to 1024 bytes,
values up to 1 MiB, 1 to 1000 records per batch, `max_records` from 1 to
10000, and topic names and group ids of 1 to 255 characters from letters,
digits, `.`, `_` and `-`, not starting with `-`.

`flashq.client` holds the functions behind each command
(`handle_health_command`, `post_records`, `handle_batch_post`,
`create_consumer_group_command`, `leave_consumer_group_command`,
`fetch_consumer_records_command`, `commit_offset_command`,
`get_offset_command`), each taking a `requests.Session` and the server URL,
printing its report and returning what it parsed from the reply.
`format_record` renders a fetched record as one line.

`flashq.status.error_to_status_code` maps an error code such as
`"topic_not_found"` to its `http.HTTPStatus`; unknown codes map to 500.

`flashq.errors` defines the domain and storage error hierarchy, rooted at
`FlashQError` and `StorageError`, the HTTP-layer errors under `HttpError`,
and `storage_error_from_os_error` and
`storage_error_from_serialization_error` for mapping lower-level failures.
`ErrorResponse.from_error` turns a `FlashQError` into the matching response.

## Tests

```
pip install ".[test]"
pytest
```