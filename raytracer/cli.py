"""Command-line parsing for the raytracer."""

from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

_U16_MAX = 0xFFFF
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_ALIASES = {
    "-m": "--mode",
    "--cores": "--threads",
    "-c": "--threads",
    "-t": "--threads",
    "--debug": "-d",
    "-v": "-d",
    "--verbose": "-d",
}

USAGE = "\n".join([
    "USAGE: ./raytracer [--mode program_mode] [--threads threads_amount] "
    "[--config config_filepath] [-h host] [-p port] [-d] "
    "[--tile-size tile_size] [--no-preview] scene_filepath",
    "\tprogram_mode\tProgram mode (`self`, `server`, `client`). Defaults to `self`.",
    "\tthreads_amount\tNumber of threads that will be used to render the image. "
    "Defaults to `auto` (maximum threads available).",
    "\tconfig_filepath\tFile path of the server configuration. If mode is not set "
    "to `server`, an exception will be thrown.",
    "\thost\t\tHost to connect to. Only works if mode is set to `client`.",
    "\tport\t\tPort to connect to / host from. Only works if clustering is used "
    "(mode is set to either `client` or `server`).",
    "\ttile_size\tTile size (square). For multi-threading or cluster mode. "
    "Defaults to `auto`: 64 (for multi-threading) or 1024 (for clustering).",
    "\tscene_filepath\tFile path of the scene to render. If mode is set to "
    "`client`, an exception will be thrown.",
    "",
])

ABOUT = "OOP-400: Raytracer"


class Mode(enum.Enum):
    """How the program runs: alone, as a cluster server, or as a cluster client."""

    SELF = "self"
    SERVER = "server"
    CLIENT = "client"


def _default_threads() -> int:
    return min(os.cpu_count() or 1, _U16_MAX)


@dataclass
class Attributes:
    """Settings gathered from the command line."""

    program_mode: Mode = Mode.SELF
    threads_amount: int = field(default_factory=_default_threads)
    port: Optional[int] = None
    host: str = ""
    debug_mode: bool = False
    scene_filepaths: List[str] = field(default_factory=list)
    server_config_filepath: str = ""
    no_preview: bool = False
    tile_size: Optional[int] = None  # None means chosen automatically


class InvalidUsage(ValueError):
    """The command line is malformed or inconsistent."""


def normalize_flag(flag: str) -> str:
    """Map a flag alias to its canonical spelling; other tokens are unchanged."""
    return _ALIASES.get(flag, flag)


def _parse_int(text: str) -> int:
    """Read a leading integer like the C library does, ignoring trailing text."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    value = int(match.group(1))
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f"out of range: {text!r}")
    return value


def _bounded_int(text: str, high: Optional[int]) -> int:
    value = _parse_int(text)
    if value <= 0 or (high is not None and value > high):
        raise ValueError(f"value overflow: {value}")
    return value


class CommandLine:
    """Parses and queries the program's command-line arguments."""

    def __init__(self) -> None:
        self.tokens: List[str] = []
        self.attributes = Attributes()

    def parse(self, argv: Sequence[str]) -> bool:
        """Parse arguments (without the program name).

        Returns True when the program should exit right away (help or about
        was shown), False when it should run with ``attributes``.
        """
        self.tokens = list(argv)
        attrs = self.attributes
        tokens = iter(self.tokens)

        def value_after(message: str) -> str:
            try:
                return next(tokens)
            except StopIteration:
                raise InvalidUsage(message) from None

        for raw in tokens:
            token = normalize_flag(raw)
            if token == "--mode":
                value = value_after("Expected mode after --mode")
                try:
                    attrs.program_mode = Mode(value)
                except ValueError:
                    raise InvalidUsage(f"Invalid mode: {value}") from None
            elif token == "--threads":
                value = value_after("Expected value after --threads")
                if value != "auto":
                    try:
                        attrs.threads_amount = _bounded_int(value, _U16_MAX)
                    except ValueError:
                        raise InvalidUsage(f"Invalid thread count: {value}") from None
            elif token == "--tile-size":
                value = value_after("Expected value after --tile-size")
                if value != "auto":
                    try:
                        attrs.tile_size = _bounded_int(value, None)
                    except ValueError:
                        raise InvalidUsage(f"Invalid tile size: {value}") from None
            elif token == "--config":
                attrs.server_config_filepath = value_after(
                    "Expected value after --config"
                )
            elif token == "-h":
                host = value_after("Expected host after -h")
                attrs.host = "127.0.0.1" if host == "localhost" else host
            elif token == "-p":
                value = value_after("Expected port after -p")
                try:
                    attrs.port = _bounded_int(value, _U16_MAX)
                except ValueError:
                    raise InvalidUsage(f"Invalid port number: {value}") from None
            elif token == "-d":
                attrs.debug_mode = True
            elif token == "--no-preview":
                attrs.no_preview = True
            elif token.startswith("-"):
                # Left for process_flags, e.g. --help.
                continue
            else:
                attrs.scene_filepaths.append(token)

        if not self.process_flags():
            self._validate()
            return False
        return True

    def process_flags(self) -> bool:
        """Show help or about text for a lone flag; True if something was shown."""
        if not (len(self.tokens) == 1 and self.tokens[0].startswith("-")):
            return False
        if self.has_flag("--help") or self.has_flag("-h"):
            print(USAGE)
            return True
        if self.has_flag("--about") or self.has_flag("-a"):
            print(ABOUT)
            return True
        return False

    def has_flag(self, flag: str) -> bool:
        """Whether ``flag`` appears among the raw arguments."""
        return flag in self.tokens

    def flag_value(self, flag: str) -> str:
        """The argument following the first ``flag``, or an empty string."""
        for current, following in zip(self.tokens, self.tokens[1:]):
            if current == flag:
                return following
        return ""

    def _validate(self) -> None:
        attrs = self.attributes
        mode = attrs.program_mode
        if mode is Mode.CLIENT:
            if not attrs.host:
                raise InvalidUsage("Client mode requires a host (-h <host>)")
            if attrs.port is None:
                raise InvalidUsage("Client mode requires a port (-p <port>)")
            if attrs.scene_filepaths:
                raise InvalidUsage("Client mode must not include a scene file path")
            if attrs.no_preview:
                print("Client mode does not support --no-preview. Ignoring.")
        elif mode is Mode.SERVER:
            if attrs.port is None:
                raise InvalidUsage("Server mode requires a port (-p <port>)")
            if not attrs.server_config_filepath:
                raise InvalidUsage(
                    "Server mode requires a configuration file (--config <file>)"
                )
            if not attrs.scene_filepaths:
                raise InvalidUsage("Server mode requires a scene file path")
            if attrs.host:
                raise InvalidUsage("Server mode must not include a host")
        else:
            if not attrs.scene_filepaths:
                raise InvalidUsage("Self mode requires a scene file path")
            if attrs.host:
                raise InvalidUsage("Self mode must not include a host")
            if attrs.port is not None:
                raise InvalidUsage("Self mode must not include a port")