"""Packets exchanged between the render server and its clients."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Type

from raytracer.codec import Deserializer, Serializer
from raytracer.vec import Vec


class PacketType(enum.IntEnum):
    """Kind of packet, as carried in the first byte on the wire."""

    UNKNOWN = 0x00
    PING = 0x01  # server -> client: status request (latency, progress)
    PONG = 0x02  # client -> server: answer to PING
    KISS = 0x03  # server -> client: disconnect
    WORKSLAVE = 0x04  # server -> client: a tile to render
    CESTCIAO = 0x05  # client -> server: client is leaving
    FINITO = 0x06  # client -> server: tile rendered
    NVMSTOP = 0x07  # server -> client: abort the current render


def packet_type_from_raw(raw: int) -> PacketType:
    """Return the packet type for a raw byte, or UNKNOWN if it names none."""
    if raw == PacketType.UNKNOWN:
        return PacketType.UNKNOWN
    try:
        return PacketType(raw)
    except ValueError:
        return PacketType.UNKNOWN


def packet_type_name(packet_type: object) -> str:
    """Return the name of a packet type, or ``"UNKNOWN"``."""
    if isinstance(packet_type, PacketType) and packet_type is not PacketType.UNKNOWN:
        return packet_type.name
    return "UNKNOWN"


class EmptyByteBuffer(ValueError):
    """A packet was built from an empty buffer."""

    def __init__(self) -> None:
        super().__init__("cannot build a packet from an empty byte buffer")


class UnknownPacket(ValueError):
    """The buffer starts with a byte that names no known packet."""

    def __init__(self, raw: int) -> None:
        super().__init__(f"unknown packet type: 0x{raw:02X}")
        self.raw = raw


class UnexpectedRemainingData(ValueError):
    """Bytes were left over after a packet was fully read."""

    def __init__(self, packet_type: PacketType) -> None:
        super().__init__(
            f"unexpected remaining data in {packet_type_name(packet_type)} packet"
        )
        self.packet_type = packet_type


class Packet:
    """Base of all packets: a type byte followed by a type-specific body."""

    packet_type: ClassVar[PacketType] = PacketType.UNKNOWN

    _registry: ClassVar[Dict[PacketType, Type["Packet"]]] = {}

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if cls.packet_type is not PacketType.UNKNOWN:
            Packet._registry[cls.packet_type] = cls

    def _write_body(self, out: Serializer) -> None:
        """Write the fields that follow the type byte."""

    def _read_body(self, src: Deserializer) -> None:
        """Read the fields that follow the type byte."""

    def serialize(self) -> bytes:
        """Return the wire form of the packet."""
        out = Serializer()
        out.write_u8(int(self.packet_type))
        self._write_body(out)
        return out.data()

    def deserialize(self, data: bytes) -> "Packet":
        """Fill this packet from its wire form and return it."""
        src = Deserializer(data)
        read_type = packet_type_from_raw(src.read_u8())
        self._read_body(src)
        if src.has_remaining():
            raise UnexpectedRemainingData(read_type)
        return self

    @staticmethod
    def from_bytes(data: bytes) -> "Packet":
        """Build the right kind of packet from its wire form."""
        if not data:
            raise EmptyByteBuffer()
        raw = data[0]
        cls = Packet._registry.get(packet_type_from_raw(raw))
        if cls is None:
            raise UnknownPacket(raw)
        return cls().deserialize(data)


@dataclass
class Ping(Packet):
    """Status request carrying the sender's timestamp."""

    packet_type: ClassVar[PacketType] = PacketType.PING

    timestamp: int = 0

    def _write_body(self, out: Serializer) -> None:
        out.write_u64(self.timestamp)

    def _read_body(self, src: Deserializer) -> None:
        self.timestamp = src.read_u64()


@dataclass
class Pong(Packet):
    """Answer to a ping, echoing its timestamp.

    The progress value is kept locally but is not sent on the wire.
    """

    packet_type: ClassVar[PacketType] = PacketType.PONG

    timestamp: int = 0
    progress: int = 0

    def _write_body(self, out: Serializer) -> None:
        out.write_u64(self.timestamp)

    def _read_body(self, src: Deserializer) -> None:
        self.timestamp = src.read_u64()


@dataclass
class Kiss(Packet):
    """Tells a client to disconnect."""

    packet_type: ClassVar[PacketType] = PacketType.KISS


@dataclass
class Workslave(Packet):
    """Hands a client a scene and the tile of it to render."""

    packet_type: ClassVar[PacketType] = PacketType.WORKSLAVE

    scene_content: str = ""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def _write_body(self, out: Serializer) -> None:
        out.write_string(self.scene_content)
        out.write_u32(self.x)
        out.write_u32(self.y)
        out.write_u32(self.width)
        out.write_u32(self.height)

    def _read_body(self, src: Deserializer) -> None:
        self.scene_content = src.read_string()
        self.x = src.read_u32()
        self.y = src.read_u32()
        self.width = src.read_u32()
        self.height = src.read_u32()


@dataclass
class Cestciao(Packet):
    """Sent by a client that is leaving."""

    packet_type: ClassVar[PacketType] = PacketType.CESTCIAO


@dataclass
class Finito(Packet):
    """Carries the pixels of a finished tile."""

    packet_type: ClassVar[PacketType] = PacketType.FINITO

    pixel_buffer: List[Vec] = field(default_factory=list)

    def _write_body(self, out: Serializer) -> None:
        out.write_vec_list(self.pixel_buffer)

    def _read_body(self, src: Deserializer) -> None:
        self.pixel_buffer = src.read_vec_list(3)


@dataclass
class Nvmstop(Packet):
    """Tells a client to abort its current render."""

    packet_type: ClassVar[PacketType] = PacketType.NVMSTOP