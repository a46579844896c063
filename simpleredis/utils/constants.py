CRLF = b"\r\n"

# Reply type tags
STATUS_TAG = ord(b'+')
ERROR_TAG = ord(b'-')
INTEGER_TAG = ord(b':')
BULK_TAG = ord(b'$')
MULTI_BULK_TAG = ord(b'*')

ABSENT_LENGTH = -1
# Largest bulk or multi-bulk length accepted from the server
MAX_LENGTH = 2**31 - 1
MAX_NESTING_DEPTH = 64

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379
WRITE_BUFFER_SIZE = 2048

# CLI display
NIL_DISPLAY = "(nil)"
EMPTY_ARRAY_DISPLAY = "(empty array)"
ERROR_DISPLAY = "(error)"
INTEGER_DISPLAY = "(integer)"
