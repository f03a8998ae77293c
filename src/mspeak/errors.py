from __future__ import annotations

import enum


class SpeakError(Exception):
    """Base for every failure that ends a run."""


class FlagError(SpeakError):
    pass


class EndpointError(SpeakError):
    pass


class Stage(enum.Enum):
    SOCKET = "socket"
    OPTION = "option"
    BIND = "bind"
    LISTEN = "listen"
    ACCEPT = "accept"
    CONNECT = "connect"


class EstablishError(SpeakError):
    def __init__(self, stage: Stage, message: str):
        super().__init__(message)
        self.stage = stage


class LocalIOError(SpeakError):
    """Standard input/output or local file failed."""


class RemoteIOError(SpeakError):
    """Send or receive on the connection failed."""
