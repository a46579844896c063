class RedisError(Exception):
    """Base class for every error raised by simpleredis."""


class ProtocolFormatError(RedisError):
    """The reply stream is malformed; the connection can no longer be trusted."""


class ConnectionClosedError(RedisError):
    """The server closed the stream while a reply was expected."""


class ClientClosedError(RedisError):
    """The client was closed and cannot send further commands."""


class ServerError(RedisError):
    """An error reply sent by the server."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConversionError(RedisError):
    """A reply cannot be converted to the requested type."""
