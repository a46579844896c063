from typing import Any, BinaryIO, Iterable, Union

from simpleredis.utils.constants import CRLF

Argument = Union[str, bytes, bytearray, memoryview, int]


def render_argument(value: Argument) -> bytes:
    """
    Render a single command argument to the bytes sent on the wire.

    Text is UTF-8 encoded, integers are written as base-10 ASCII and
    byte sequences pass through unchanged.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode('utf-8')
    # bool is an int subclass but has no wire form
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value).encode('ascii')
    raise TypeError(f"Unsupported argument type: {type(value).__name__}")


def as_bulk_string(payload: bytes) -> bytes:
    return b"$" + str(len(payload)).encode('ascii') + CRLF + payload + CRLF


def encode_command(name: Union[str, bytes], args: Iterable[Argument] = ()) -> bytes:
    """
    Frame a command as a multi-bulk array of bulk strings.

    Every argument is rendered before anything is framed, so an unsupported
    argument raises TypeError without producing a partial command. Length
    prefixes count rendered bytes, not characters.
    """
    parts = [render_argument(name)]
    parts.extend(render_argument(arg) for arg in args)

    encoded = bytearray(b"*" + str(len(parts)).encode('ascii') + CRLF)
    for part in parts:
        encoded += as_bulk_string(part)
    return bytes(encoded)


def write_command(stream: BinaryIO, name: Union[str, bytes], args: Iterable[Any] = ()) -> int:
    """Write one framed command to stream with a single write and flush."""
    payload = encode_command(name, args)
    stream.write(payload)
    stream.flush()
    return len(payload)
