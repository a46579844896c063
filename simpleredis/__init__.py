from .client.redis_client import RedisClient
from .exceptions import (
    ClientClosedError,
    ConnectionClosedError,
    ConversionError,
    ProtocolFormatError,
    RedisError,
    ServerError,
)
from .reply import ReplyKind, ReplyValue
from .utils.encoding_utils import encode_command, write_command
from .utils.reply_parser import read_reply
