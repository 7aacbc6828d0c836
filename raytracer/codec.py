"""Big-endian binary encoding of the values carried by packets."""

from __future__ import annotations

import struct
from typing import Iterable, List

from raytracer.vec import Vec

_U32_MAX = 0xFFFFFFFF


class ValueOverflow(ValueError):
    """A value does not fit the field it is written to or read from."""

    def __init__(self, value: object) -> None:
        super().__init__(f"value overflow: {value!r}")
        self.value = value


class InvalidPacketSize(ValueError):
    """A read would go past the end of the buffer."""

    def __init__(self, needed: int, available: int) -> None:
        super().__init__(
            f"invalid packet size: needed {needed} bytes, only {available} available"
        )
        self.needed = needed
        self.available = available


class Serializer:
    """Accumulates values as network-order bytes."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def write_bytes(self, data: bytes) -> None:
        """Append raw bytes."""
        self._buf += data

    def _pack(self, fmt: str, value: int, bits: int) -> None:
        if not 0 <= value < (1 << bits):
            raise ValueOverflow(value)
        self._buf += struct.pack(fmt, value)

    def write_u8(self, value: int) -> None:
        self._pack(">B", value, 8)

    def write_u16(self, value: int) -> None:
        self._pack(">H", value, 16)

    def write_u32(self, value: int) -> None:
        self._pack(">I", value, 32)

    def write_u64(self, value: int) -> None:
        self._pack(">Q", value, 64)

    def write_f64(self, value: float) -> None:
        self._buf += struct.pack(">d", value)

    def write_bool(self, value: bool) -> None:
        self.write_u8(1 if value else 0)

    def write_string(self, text: str) -> None:
        """Write a UTF-8 string prefixed with its byte length as a u32."""
        raw = text.encode("utf-8")
        if len(raw) > _U32_MAX:
            raise ValueOverflow(len(raw))
        self.write_u32(len(raw))
        self._buf += raw

    def write_vec(self, vec: Vec) -> None:
        """Write each component of a vector as an f64."""
        for component in vec:
            self.write_f64(component)

    def write_vec_list(self, vecs: Iterable[Vec]) -> None:
        """Write a u32 count followed by each vector."""
        items = list(vecs)
        self.write_u32(len(items))
        for vec in items:
            self.write_vec(vec)

    def clear(self) -> None:
        self._buf.clear()

    def data(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buf)


class Deserializer:
    """Reads network-order values from a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self._buf = bytes(data)
        self._offset = 0

    def _take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._buf):
            raise InvalidPacketSize(end, len(self._buf))
        chunk = self._buf[self._offset:end]
        self._offset = end
        return chunk

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def read_u8(self) -> int:
        return self._unpack(">B")

    def read_u16(self) -> int:
        return self._unpack(">H")

    def read_u32(self) -> int:
        return self._unpack(">I")

    def read_u64(self) -> int:
        return self._unpack(">Q")

    def read_f64(self) -> float:
        return self._unpack(">d")

    def read_bool(self) -> bool:
        byte = self.read_u8()
        if byte > 1:
            raise ValueOverflow(byte)
        return byte == 1

    def read_string(self) -> str:
        length = self.read_u32()
        return self._take(length).decode("utf-8")

    def read_vec(self, n: int) -> Vec:
        return Vec(*(self.read_f64() for _ in range(n)))

    def read_vec_list(self, n: int) -> List[Vec]:
        count = self.read_u32()
        return [self.read_vec(n) for _ in range(count)]

    def has_remaining(self) -> bool:
        return self._offset < len(self._buf)

    def remaining(self) -> int:
        return len(self._buf) - self._offset