from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from .constants import LOG_FORMAT, LOG_LEVELS
from .errors import SpeakError
from .framing import frame_file
from .options import Mode
from .session import speak

SPEAK_EPILOG = """\
flags (any order):
  r  read mode: connection -> standard output
  w  write mode: standard input -> connection
  c  client mode: connect to ADDRESS
  s  server mode: listen on ADDRESS, accept exactly one client
  h  fake HTTP mode: skip the client's request first (server write only)

Exactly one of r/w and one of c/s is required.

examples:
  mspeak sr 192.168.1.10:2000 > received.bin
  mspeak cw 192.168.1.10:2000 < payload.bin
  httpbin file.bin | mspeak swh 192.168.1.10:2000

Nothing is encrypted or authenticated. Listening on a low port may need
superuser privilege.
"""


class ArgumentParser(argparse.ArgumentParser):
    """argparse that fails with status 1 like every other failure."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, stream=sys.stderr, force=True)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS)


def build_speak_parser() -> ArgumentParser:
    p = ArgumentParser(
        prog="mspeak",
        description="Relay bytes one way between a TCP connection and stdin/stdout.",
        epilog=SPEAK_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_common(p)
    p.add_argument("flags", help="mode flags, e.g. sw, cr, swh")
    p.add_argument("address", help="numeric IPv4 address and port, e.g. 192.168.1.10:2000")
    return p


def build_httpbin_parser() -> ArgumentParser:
    p = ArgumentParser(
        prog="httpbin",
        description="Write a file to stdout behind an HTTP/1.1 response header.",
        epilog="example:\n  httpbin file.bin | mspeak swh 192.168.1.10:2000\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_common(p)
    p.add_argument("path", help="file to stream")
    return p


def run_speak(args: argparse.Namespace) -> bool:
    try:
        mode = Mode.from_flags(args.flags)
        speak(mode, args.address, sys.stdin.buffer, sys.stdout.buffer)
    except SpeakError as exc:
        logging.error("%s", exc)
        return False
    except KeyboardInterrupt:
        logging.error("interrupted")
        return False
    return True


def run_httpbin(args: argparse.Namespace) -> bool:
    try:
        frame_file(args.path, sys.stdout.buffer)
    except SpeakError as exc:
        logging.error("%s", exc)
        return False
    except KeyboardInterrupt:
        logging.error("interrupted")
        return False
    return True


def speak_main(argv: list[str] | None = None) -> int:
    args = build_speak_parser().parse_args(argv)
    _configure_logging(args.log_level)
    ok = run_speak(args)
    return 0 if ok else 1


def httpbin_main(argv: list[str] | None = None) -> int:
    args = build_httpbin_parser().parse_args(argv)
    _configure_logging(args.log_level)
    ok = run_httpbin(args)
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(speak_main())
