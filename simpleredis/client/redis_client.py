import logging
import socket
import threading
from typing import Optional, Union

from simpleredis.exceptions import ClientClosedError, ConnectionClosedError, ProtocolFormatError
from simpleredis.reply import ReplyValue
from simpleredis.utils.constants import DEFAULT_HOST, DEFAULT_PORT, WRITE_BUFFER_SIZE
from simpleredis.utils.encoding_utils import Argument, write_command
from simpleredis.utils.reply_parser import read_reply


class RedisClient:
    """
    A single blocking connection speaking the Redis request/reply protocol.

    One command is in flight at a time: execute() sends the whole command,
    then reads exactly one reply before the next command may be sent.
    A malformed reply, a dropped connection or a transport error closes
    the client; later calls raise ClientClosedError instead of reconnecting.
    """

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, timeout: Optional[float] = None):
        self.host = host
        self.port = port
        self._lock = threading.Lock()
        self.sock = None
        self.reader = None
        self.writer = None
        logging.info(f"Connecting to {host}:{port}")
        try:
            self.sock = socket.create_connection((host, port), timeout=timeout)
            self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            self.reader = self.sock.makefile('rb')
            self.writer = self.sock.makefile('wb', buffering=WRITE_BUFFER_SIZE)
        except BaseException:
            self.close()
            raise

    def __enter__(self) -> 'RedisClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self.sock is None

    def execute(self, name: Union[str, bytes], *args: Argument) -> ReplyValue:
        """
        Send one command and return its reply.

        Error replies come back as a ReplyValue; they raise ServerError when
        the caller converts them. Protocol and transport failures close the
        client before propagating.
        """
        with self._lock:
            if self.closed:
                raise ClientClosedError("Client is closed")
            logging.debug(f"Sending command {name!r} with {len(args)} argument(s)")
            try:
                write_command(self.writer, name, args)
                reply = read_reply(self.reader)
            except (ProtocolFormatError, ConnectionClosedError, OSError) as e:
                logging.warning(f"Closing connection to {self.host}:{self.port} after {type(e).__name__}: {e}")
                self._close()
                raise
            logging.debug(f"Received {reply.kind.value} reply")
            return reply

    def close(self) -> None:
        with self._lock:
            self._close()

    def _close(self) -> None:
        if self.sock is None and self.reader is None and self.writer is None:
            return
        for stream in (self.writer, self.reader):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as e:
                # unsent bytes are discarded on close
                logging.debug(f"Ignoring error while closing stream: {e}")
        if self.sock is not None:
            self.sock.close()
            logging.info(f"Closed connection to {self.host}:{self.port}")
        self.sock = None
        self.reader = None
        self.writer = None
