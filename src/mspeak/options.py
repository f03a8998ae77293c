from __future__ import annotations

import enum
from dataclasses import dataclass

from .errors import FlagError


class Role(enum.Enum):
    SERVER = "s"
    CLIENT = "c"


class Direction(enum.Enum):
    READ = "r"
    WRITE = "w"


FLAG_FAKE_HTTP = "h"


@dataclass(frozen=True, slots=True)
class Mode:
    role: Role
    direction: Direction
    fake_http: bool = False

    def __post_init__(self) -> None:
        if self.fake_http and not (self.role is Role.SERVER and self.direction is Direction.WRITE):
            raise FlagError("fake HTTP only allowed in server write mode")

    @staticmethod
    def from_flags(flags: str) -> "Mode":
        """Parse a flag string such as ``"sw"`` or ``"hsw"``.

        Flags may come in any order. Repeating a flag is fine, pairing it with
        its opposite (``r`` with ``w``, ``c`` with ``s``) is not.
        """
        role: Role | None = None
        direction: Direction | None = None
        fake_http = False

        for ch in flags:
            if ch in ("r", "w"):
                picked = Direction(ch)
                if direction is not None and direction is not picked:
                    raise FlagError("invalid flag combination")
                direction = picked
            elif ch in ("c", "s"):
                chosen = Role(ch)
                if role is not None and role is not chosen:
                    raise FlagError("invalid flag combination")
                role = chosen
            elif ch == FLAG_FAKE_HTTP:
                fake_http = True
            else:
                raise FlagError(f"unrecognized flag: {ch!r}")

        if role is None or direction is None:
            raise FlagError("required flag is missing")

        return Mode(role=role, direction=direction, fake_http=fake_http)

    def __str__(self) -> str:
        return self.role.value + self.direction.value + (FLAG_FAKE_HTTP if self.fake_http else "")
