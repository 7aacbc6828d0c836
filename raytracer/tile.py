"""Rectangular pieces of an image handed out for rendering."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Tile:
    """A rectangle of the image, and the thread rendering it (-1 if none)."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    thread_number: int = -1