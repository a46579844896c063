import argparse
import logging
import os
import shlex
import sys
from typing import List, Optional

from simpleredis.client.redis_client import RedisClient
from simpleredis.exceptions import ConnectionClosedError, ProtocolFormatError, RedisError
from simpleredis.reply import ReplyKind, ReplyValue
from simpleredis.utils.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    EMPTY_ARRAY_DISPLAY,
    ERROR_DISPLAY,
    INTEGER_DISPLAY,
    NIL_DISPLAY,
)


def format_reply(reply: ReplyValue, indent: int = 0) -> str:
    """Render a reply the way redis-cli prints it."""
    if reply.kind is ReplyKind.ERROR:
        return f"{ERROR_DISPLAY} {reply.error_message}"
    if reply.is_absent:
        return NIL_DISPLAY
    if reply.kind is ReplyKind.STATUS:
        return str(reply)
    if reply.kind is ReplyKind.INTEGER:
        return f"{INTEGER_DISPLAY} {reply}"
    if reply.kind is ReplyKind.BULK:
        return '"' + reply.payload.decode('utf-8', errors='backslashreplace') + '"'

    items = reply.as_list()
    if not items:
        return EMPTY_ARRAY_DISPLAY
    width = len(str(len(items)))
    lines = []
    for number, item in enumerate(items, start=1):
        prefix = f"{number:>{width}}) "
        rendered = format_reply(item, indent + len(prefix))
        if lines:
            prefix = " " * indent + prefix
        lines.append(prefix + rendered)
    return "\n".join(lines)


def run_command(client: RedisClient, words: List[str]) -> str:
    reply = client.execute(words[0], *words[1:])
    return format_reply(reply)


def repl_shell(client: RedisClient) -> None:
    while True:
        try:
            line = input('simpleredis> ')
        except EOFError:
            break
        if line.strip().lower() in ('quit', 'exit'):
            break
        try:
            words = shlex.split(line)
        except ValueError as e:
            print(f"Invalid input: {e}")
            continue
        if not words:
            continue
        print(run_command(client, words))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='SimpleRedis CLI')
    parser.add_argument('command', nargs='*', help='Command and its arguments')
    parser.add_argument('--host', help='Server host')
    parser.add_argument('--port', type=int, help='Server port')
    parser.add_argument('--timeout', type=float, default=None, help='Socket timeout in seconds')
    parser.add_argument('--verbose', action='store_true', help='Log connection activity')
    return parser.parse_args(argv)


def create_client(args: argparse.Namespace) -> RedisClient:
    host = args.host or os.environ.get('SIMPLEREDIS_HOST') or DEFAULT_HOST
    port = args.port or int(os.environ.get('SIMPLEREDIS_PORT') or DEFAULT_PORT)
    return RedisClient(host, port, timeout=args.timeout)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        client = create_client(args)
    except OSError as e:
        print(f"Could not connect: {e}", file=sys.stderr)
        return 1

    with client:
        try:
            if not args.command:
                repl_shell(client)
            else:
                print(run_command(client, args.command))
        except (ConnectionClosedError, ProtocolFormatError, OSError) as e:
            print(f"Connection lost: {e}", file=sys.stderr)
            return 1
        except RedisError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
