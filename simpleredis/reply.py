import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from simpleredis.exceptions import ConversionError, ServerError

INTEGER_PATTERN = re.compile(rb'[+-]?[0-9]+')

INT_RANGES = {
    32: (-2**31, 2**31 - 1),
    64: (-2**63, 2**63 - 1),
}


class ReplyKind(Enum):
    STATUS = "status"
    ERROR = "error"
    INTEGER = "integer"
    BULK = "bulk"
    MULTI_BULK = "multi-bulk"


@dataclass(frozen=True)
class ReplyValue:
    """
    One decoded reply, converted to a concrete type only when asked.

    Scalar kinds keep their raw bytes in ``payload``; a multi-bulk reply keeps
    its nested replies in ``items``. A ``None`` payload (bulk) or ``None``
    items (multi-bulk) is the absent marker sent as length -1, which is not
    the same thing as an empty value.

    Error replies are poisoned: every conversion except ``as_exception``
    raises the server's error as ServerError.
    """
    kind: ReplyKind
    payload: Optional[bytes] = None
    items: Optional[Tuple['ReplyValue', ...]] = None

    @classmethod
    def status(cls, payload: bytes) -> 'ReplyValue':
        return cls(ReplyKind.STATUS, payload)

    @classmethod
    def error(cls, payload: bytes) -> 'ReplyValue':
        return cls(ReplyKind.ERROR, payload)

    @classmethod
    def integer(cls, payload: bytes) -> 'ReplyValue':
        return cls(ReplyKind.INTEGER, payload)

    @classmethod
    def bulk(cls, payload: Optional[bytes]) -> 'ReplyValue':
        return cls(ReplyKind.BULK, payload)

    @classmethod
    def multi_bulk(cls, items: Optional[List['ReplyValue']]) -> 'ReplyValue':
        return cls(ReplyKind.MULTI_BULK, items=None if items is None else tuple(items))

    @property
    def is_error(self) -> bool:
        return self.kind is ReplyKind.ERROR

    @property
    def is_absent(self) -> bool:
        if self.kind is ReplyKind.MULTI_BULK:
            return self.items is None
        return self.payload is None

    @property
    def error_message(self) -> Optional[str]:
        if not self.is_error:
            return None
        if self.payload is None:
            return "unknown error"
        return self.payload.decode('utf-8', errors='replace')

    def check(self) -> 'ReplyValue':
        """Raise ServerError now if this is an error reply, else return self."""
        if self.is_error:
            raise self.as_exception()
        return self

    def as_exception(self) -> ServerError:
        if not self.is_error:
            raise ConversionError(f"Cannot convert a {self.kind.value} reply to an exception")
        return ServerError(self.error_message)

    def _scalar_payload(self, target: str) -> Optional[bytes]:
        self.check()
        if self.kind is ReplyKind.MULTI_BULK:
            if self.items is None:
                return None
            raise ConversionError(f"Cannot convert a multi-bulk reply to {target}")
        return self.payload

    def as_bytes(self) -> Optional[bytes]:
        return self._scalar_payload("bytes")

    def as_str(self) -> Optional[str]:
        payload = self._scalar_payload("str")
        if payload is None:
            return None
        try:
            return payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ConversionError(f"Reply is not valid UTF-8: {e}") from e

    def as_int(self, bits: int = 64, optional: bool = False) -> Optional[int]:
        if bits not in INT_RANGES:
            raise ValueError(f"Unsupported integer width: {bits}")
        payload = self._scalar_payload("int")
        if payload is None:
            if optional:
                return None
            raise ConversionError("Cannot convert an absent reply to int")
        if not INTEGER_PATTERN.fullmatch(payload):
            raise ConversionError(f"Reply is not an integer: {payload!r}")
        value = int(payload)
        low, high = INT_RANGES[bits]
        if not low <= value <= high:
            raise ConversionError(f"Reply {value} does not fit in a {bits}-bit integer")
        return value

    def as_bool(self, optional: bool = False) -> Optional[bool]:
        payload = self._scalar_payload("bool")
        if self.kind is ReplyKind.STATUS:
            return payload.decode('utf-8', errors='replace').upper() == "OK"
        if payload is None:
            if optional:
                return None
            raise ConversionError("Cannot convert an absent reply to bool")
        if payload == b"1":
            return True
        if payload == b"0":
            return False
        raise ConversionError(f"Reply is not a boolean: {payload!r}")

    def as_list(self) -> Optional[List['ReplyValue']]:
        self.check()
        if self.kind is not ReplyKind.MULTI_BULK:
            if self.payload is None:
                return None
            raise ConversionError(f"Cannot convert a {self.kind.value} reply to list")
        if self.items is None:
            return None
        return list(self.items)

    def convert_to(self, target: type, optional: bool = False) -> Any:
        """
        Convert to one of bytes, str, int, bool, list or Exception.

        ``optional`` only matters for int and bool, where an absent reply
        otherwise raises ConversionError.
        """
        if target is Exception or target is ServerError:
            return self.as_exception()
        if target is bytes:
            return self.as_bytes()
        if target is str:
            return self.as_str()
        # bool before int, bool is an int subclass
        if target is bool:
            return self.as_bool(optional=optional)
        if target is int:
            return self.as_int(optional=optional)
        if target is list:
            return self.as_list()
        raise ConversionError(f"Unsupported conversion target: {target!r}")

    def __str__(self) -> str:
        if self.kind is ReplyKind.MULTI_BULK:
            return repr(self)
        if self.payload is None:
            return ""
        return self.payload.decode('utf-8', errors='replace')
