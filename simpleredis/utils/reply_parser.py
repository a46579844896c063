import re
from typing import BinaryIO, List, Optional

from simpleredis.exceptions import ConnectionClosedError, ProtocolFormatError
from simpleredis.reply import ReplyValue
from simpleredis.utils.constants import (
    ABSENT_LENGTH,
    BULK_TAG,
    ERROR_TAG,
    INTEGER_TAG,
    MAX_LENGTH,
    MAX_NESTING_DEPTH,
    MULTI_BULK_TAG,
    STATUS_TAG,
)

LENGTH_PATTERN = re.compile(rb'-?[0-9]+')


def read_byte(file: BinaryIO) -> int:
    data = file.read(1)
    if not data:
        raise ConnectionClosedError("The server has disconnected")
    return data[0]


def read_exact(file: BinaryIO, length: int) -> bytes:
    """Read exactly length bytes, looping over short reads."""
    chunks = []
    remaining = length
    while remaining > 0:
        chunk = file.read(remaining)
        if not chunk:
            raise ConnectionClosedError("The server has disconnected")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_line(file: BinaryIO) -> bytes:
    """
    Read up to a CRLF terminator and return the bytes before it.

    A CR must be followed immediately by LF; anything else is a format error.
    """
    line = bytearray()
    while True:
        value = read_byte(file)
        if value == ord(b'\r'):
            if read_byte(file) != ord(b'\n'):
                raise ProtocolFormatError("Expected end-of-line")
            return bytes(line)
        line.append(value)


def read_end_of_line(file: BinaryIO) -> None:
    if read_byte(file) != ord(b'\r') or read_byte(file) != ord(b'\n'):
        raise ProtocolFormatError("Expected end-of-line")


def read_length(file: BinaryIO) -> int:
    """
    Read a length line for a bulk or multi-bulk reply.

    Returns -1 for the absent marker. Any other negative value, a value above
    MAX_LENGTH, or text that is not a decimal integer, is a format error.
    """
    data = read_line(file)
    if len(data) == 1:
        length = data[0] - ord(b'0')
        if length < 0 or length > 9:
            raise ProtocolFormatError(f"Invalid length: {data!r}")
        return length
    if not LENGTH_PATTERN.fullmatch(data):
        raise ProtocolFormatError(f"Invalid length: {data!r}")
    length = int(data)
    if length < ABSENT_LENGTH or length > MAX_LENGTH:
        raise ProtocolFormatError(f"Invalid length: {length}")
    return length


def read_bulk(file: BinaryIO) -> ReplyValue:
    length = read_length(file)
    if length == ABSENT_LENGTH:
        return ReplyValue.bulk(None)
    data = read_exact(file, length)
    read_end_of_line(file)
    return ReplyValue.bulk(data)


def read_multi_bulk(file: BinaryIO, depth: int = 0, max_depth: Optional[int] = None) -> ReplyValue:
    length = read_length(file)
    if length == ABSENT_LENGTH:
        return ReplyValue.multi_bulk(None)
    items: List[ReplyValue] = []
    for _ in range(length):
        items.append(read_reply(file, depth + 1, max_depth))
    return ReplyValue.multi_bulk(items)


def read_reply(file: BinaryIO, depth: int = 0, max_depth: Optional[int] = None) -> ReplyValue:
    """
    Read one complete reply from a blocking binary stream.

    Args:
        file: Binary file object positioned at the start of a reply.
        depth: Current multi-bulk nesting level.
        max_depth: Deepest multi-bulk nesting accepted, MAX_NESTING_DEPTH by default.

    Returns:
        The decoded ReplyValue. Error replies are returned, not raised.

    Raises:
        ConnectionClosedError: the stream ended before the reply was complete.
        ProtocolFormatError: the stream does not hold a well-formed reply.
    """
    if max_depth is None:
        max_depth = MAX_NESTING_DEPTH
    if depth > max_depth:
        raise ProtocolFormatError(f"Reply nesting exceeds {max_depth} levels")

    reply_type = read_byte(file)
    if reply_type == STATUS_TAG:
        return ReplyValue.status(read_line(file))
    if reply_type == ERROR_TAG:
        return ReplyValue.error(read_line(file))
    if reply_type == INTEGER_TAG:
        return ReplyValue.integer(read_line(file))
    if reply_type == BULK_TAG:
        return read_bulk(file)
    if reply_type == MULTI_BULK_TAG:
        return read_multi_bulk(file, depth, max_depth)
    raise ProtocolFormatError(f"Unexpected reply type: {chr(reply_type)!r}")
