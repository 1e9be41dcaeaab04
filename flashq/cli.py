"""Command-line client for the queue's HTTP server."""

from __future__ import annotations

import argparse
import logging
from typing import Callable, Optional, Sequence

import requests

from flashq.api import parse_headers
from flashq.client import (
    commit_offset_command,
    create_consumer_group_command,
    fetch_consumer_records_command,
    get_offset_command,
    handle_batch_post,
    handle_health_command,
    leave_consumer_group_command,
    post_records,
)

_VERSION = "0.1.0"
_U16_MAX = 2**16 - 1
_U64_MAX = 2**64 - 1


def _unsigned(maximum: Optional[int]) -> Callable[[str], int]:
    def parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid value '{text}'") from None
        if value < 0 or (maximum is not None and value > maximum):
            raise argparse.ArgumentTypeError(f"value '{text}' is out of range")
        return value

    return parse


def _boolean(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise argparse.ArgumentTypeError(f"invalid value '{text}', expected true or false")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the client command."""
    parser = argparse.ArgumentParser(prog="client", description="FlashQ Client")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    parser.add_argument("-p", "--port", type=_unsigned(_U16_MAX), default=8080)
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("health")

    producer = commands.add_parser("producer")
    producer_commands = producer.add_subparsers(dest="producer_command", required=True)
    records = producer_commands.add_parser("records")
    records.add_argument("topic")
    records.add_argument("message", nargs="?")
    records.add_argument("-k", "--key")
    records.add_argument("--header", action="append", metavar="KEY=VALUE")
    records.add_argument("-b", "--batch")

    consumer = commands.add_parser("consumer")
    consumer_commands = consumer.add_subparsers(dest="consumer_command", required=True)
    create = consumer_commands.add_parser("create")
    create.add_argument("group_id")
    leave = consumer_commands.add_parser("leave")
    leave.add_argument("group_id")
    fetch = consumer_commands.add_parser("fetch")
    fetch.add_argument("group_id")
    fetch.add_argument("topic")
    fetch.add_argument("--max-records", dest="max_records", type=_unsigned(_U64_MAX))
    fetch.add_argument("--from-offset", dest="from_offset", type=_unsigned(_U64_MAX))
    fetch.add_argument("--include-headers", dest="include_headers", type=_boolean)

    offset = consumer_commands.add_parser("offset")
    offset_commands = offset.add_subparsers(dest="offset_command", required=True)
    commit = offset_commands.add_parser("commit")
    commit.add_argument("group_id")
    commit.add_argument("topic")
    commit.add_argument("offset", type=_unsigned(_U64_MAX))
    commit.add_argument("--metadata")
    get = offset_commands.add_parser("get")
    get.add_argument("group_id")
    get.add_argument("topic")

    return parser


def handle_cli_command(
    session: requests.Session, server_url: str, args: argparse.Namespace
) -> None:
    """Run the command described by parsed arguments."""
    if args.command == "health":
        handle_health_command(session, server_url)
    elif args.command == "producer":
        handle_producer_command(session, server_url, args)
    elif args.command == "consumer":
        handle_consumer_command(session, server_url, args)
    else:
        raise ValueError(f"unknown command '{args.command}'")


def handle_producer_command(
    session: requests.Session, server_url: str, args: argparse.Namespace
) -> None:
    """Run a producer subcommand."""
    if args.producer_command != "records":
        raise ValueError(f"unknown producer command '{args.producer_command}'")
    if args.batch is not None:
        handle_batch_post(session, server_url, args.topic, args.batch)
    elif args.message is not None:
        headers = parse_headers(args.header)
        post_records(session, server_url, args.topic, args.key, args.message, headers)
    else:
        print("Error: Either provide a message or use --batch with a JSON file")
        raise SystemExit(1)


def handle_consumer_command(
    session: requests.Session, server_url: str, args: argparse.Namespace
) -> None:
    """Run a consumer subcommand."""
    command = args.consumer_command
    if command == "create":
        create_consumer_group_command(session, server_url, args.group_id)
    elif command == "leave":
        leave_consumer_group_command(session, server_url, args.group_id)
    elif command == "fetch":
        fetch_consumer_records_command(
            session,
            server_url,
            args.group_id,
            args.topic,
            args.max_records,
            args.from_offset,
            args.include_headers,
        )
    elif command == "offset":
        handle_offset_command(session, server_url, args)
    else:
        raise ValueError(f"unknown consumer command '{command}'")


def handle_offset_command(
    session: requests.Session, server_url: str, args: argparse.Namespace
) -> None:
    """Run an offset subcommand; commit metadata is accepted but not sent."""
    command = args.offset_command
    if command == "commit":
        commit_offset_command(session, server_url, args.group_id, args.topic, args.offset)
    elif command == "get":
        get_offset_command(session, server_url, args.group_id, args.topic)
    else:
        raise ValueError(f"unknown offset command '{command}'")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the client command."""
    logging.basicConfig(level=logging.ERROR)
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "producer" and args.message is None and args.batch is None:
        parser.error("the following arguments are required: message")
    server_url = f"http://127.0.0.1:{args.port}"
    with requests.Session() as session:
        handle_cli_command(session, server_url, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())