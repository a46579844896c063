import asyncio
import socket
from io import BytesIO
from typing import List, Optional, Tuple

import pytest

from simpleredis.client.redis_client import RedisClient
from simpleredis.exceptions import ConnectionClosedError
from simpleredis.reply import ReplyValue
from simpleredis.utils.reply_parser import read_reply


class RecordingStream(BytesIO):
    """Outbound stream that remembers each write and flush."""

    def __init__(self):
        super().__init__()
        self.writes: List[bytes] = []
        self.flushes = 0

    def write(self, data) -> int:
        self.writes.append(bytes(data))
        return super().write(data)

    def flush(self) -> None:
        super().flush()
        self.flushes += 1

    @property
    def sent(self) -> bytes:
        return b"".join(self.writes)


class FakeSocket:
    def __init__(self):
        self.inbound = BytesIO()
        self.outbound = RecordingStream()
        self.options = {}
        self.address = None
        self.timeout = None
        self.closed = False

    def connect(self, address, timeout=None) -> 'FakeSocket':
        self.address = address
        self.timeout = timeout
        return self

    def feed(self, data: bytes) -> None:
        position = self.inbound.tell()
        self.inbound.seek(0, 2)
        self.inbound.write(data)
        self.inbound.seek(position)

    def setsockopt(self, level, option, value) -> None:
        self.options[(level, option)] = value

    def makefile(self, mode, buffering=None):
        return self.inbound if 'r' in mode else self.outbound

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_socket(monkeypatch):
    fake = FakeSocket()
    monkeypatch.setattr(socket, "create_connection", fake.connect)
    return fake


class FakeServer:
    """
    In-process server that answers each received command with the next canned reply.

    Once the canned replies run out it hangs up on the next command.
    """

    def __init__(self, replies: List[bytes]):
        self.replies = list(replies)
        self.commands: List[List[bytes]] = []
        self.server: Optional[asyncio.AbstractServer] = None

    @classmethod
    async def start(cls, replies: List[bytes]) -> 'FakeServer':
        fake = cls(replies)
        fake.server = await asyncio.start_server(fake.handle, '127.0.0.1', 0)
        return fake

    @property
    def port(self) -> int:
        return self.server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        self.server.close()
        await self.server.wait_closed()

    async def handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        buffer = b""
        while True:
            command, buffer = take_command(buffer)
            if command is None:
                data = await reader.read(1024)
                if not data:
                    break
                buffer += data
                continue
            self.commands.append(command)
            if not self.replies:
                break
            writer.write(self.replies.pop(0))
            await writer.drain()
        writer.close()
        await writer.wait_closed()


def take_command(buffer: bytes) -> Tuple[Optional[List[bytes]], bytes]:
    """Split one complete command off the front of buffer, if there is one."""
    stream = BytesIO(buffer)
    try:
        request = read_reply(stream)
    except ConnectionClosedError:
        return None, buffer
    return [item.as_bytes() for item in request.as_list()], buffer[stream.tell():]


def send_one(port: int, name, *args) -> ReplyValue:
    with RedisClient('127.0.0.1', port) as client:
        return client.execute(name, *args)
