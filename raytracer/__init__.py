"""Vector maths, cluster wire protocol, sessions and command-line handling for a ray tracer."""

__version__ = "0.1.0"

__all__ = [
    "channel",
    "cli",
    "client",
    "codec",
    "framing",
    "packets",
    "server_handlers",
    "session",
    "signals",
    "tile",
    "vec",
]