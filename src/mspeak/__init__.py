"""mspeak: a very small TCP pipe.

Two tools live here:
- ``mspeak`` relays bytes in one direction between one TCP connection and
  standard input or output
- ``httpbin`` frames a file as an HTTP response, for use with the relay's
  fake HTTP mode

Nothing is encrypted or authenticated. Treat the link as public.
"""

__all__ = []
