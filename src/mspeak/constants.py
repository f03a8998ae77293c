from __future__ import annotations

IOBUFSIZE = 4096

ASCII_CR = 0x0D
ASCII_LF = 0x0A

MAX_ADDRESS_LEN = 31  # "a.b.c.d:p" text, colon included
MAX_PORT = 0xFFFF
LISTEN_BACKLOG = 1

HTTP_STATUS_LINE = "HTTP/1.1 200 OK"
HTTP_CONTENT_TYPE = "application/octet-stream"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
