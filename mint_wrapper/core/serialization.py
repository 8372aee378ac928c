"""
Mint Wrapper Serialization Utilities

Borsh primitives as used by Anchor programs.
All multi-byte integers are LITTLE-ENDIAN.
"""

from __future__ import annotations
from typing import Optional, Tuple

from solders.pubkey import Pubkey

from mint_wrapper.constants import PUBKEY_SIZE

LITTLE_ENDIAN = "little"


# ==============================================================================
# Integer Serialization (Little-Endian)
# ==============================================================================

def serialize_u8(value: int) -> bytes:
    """Serialize unsigned 8-bit integer."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"u8 value out of range: {value}")
    return bytes([value])


def serialize_u32(value: int) -> bytes:
    """Serialize unsigned 32-bit integer (little-endian)."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"u32 value out of range: {value}")
    return value.to_bytes(4, LITTLE_ENDIAN)


def serialize_u64(value: int) -> bytes:
    """Serialize unsigned 64-bit integer (little-endian)."""
    if not 0 <= value <= 0xFFFFFFFFFFFFFFFF:
        raise ValueError(f"u64 value out of range: {value}")
    return value.to_bytes(8, LITTLE_ENDIAN)


def serialize_bool(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def serialize_string(value: str) -> bytes:
    """
    Serialize a Borsh string.
    Format: u32(length) || utf-8 bytes
    """
    encoded = value.encode("utf-8")
    return serialize_u32(len(encoded)) + encoded


# ==============================================================================
# Integer Deserialization (Little-Endian)
# ==============================================================================

def _check_available(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise ValueError(
            f"Unexpected end of data: need {size} bytes at offset {offset}, "
            f"have {len(data)}"
        )


def deserialize_u8(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 8-bit integer.
    Returns (value, bytes_consumed).
    """
    _check_available(data, offset, 1)
    return data[offset], 1


def deserialize_u32(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 32-bit integer (little-endian).
    Returns (value, bytes_consumed).
    """
    _check_available(data, offset, 4)
    return int.from_bytes(data[offset:offset + 4], LITTLE_ENDIAN), 4


def deserialize_u64(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 64-bit integer (little-endian).
    Returns (value, bytes_consumed).
    """
    _check_available(data, offset, 8)
    return int.from_bytes(data[offset:offset + 8], LITTLE_ENDIAN), 8


def deserialize_bool(data: bytes, offset: int = 0) -> Tuple[bool, int]:
    value, size = deserialize_u8(data, offset)
    if value > 1:
        raise ValueError(f"Invalid bool byte: {value}")
    return value == 1, size


def deserialize_string(data: bytes, offset: int = 0) -> Tuple[str, int]:
    """
    Deserialize a Borsh string.
    Returns (value, total_bytes_consumed).
    """
    length, length_size = deserialize_u32(data, offset)
    start = offset + length_size
    _check_available(data, start, length)
    return data[start:start + length].decode("utf-8"), length_size + length


# ==============================================================================
# Helper Functions
# ==============================================================================

def is_default_pubkey(key: Pubkey) -> bool:
    """The all-zero key stands for 'no key' in on-ledger layouts."""
    return bytes(key) == bytes(PUBKEY_SIZE)


class ByteReader:
    """
    Helper class for sequential deserialization.
    """

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read_u8(self) -> int:
        value, size = deserialize_u8(self.data, self.offset)
        self.offset += size
        return value

    def read_u32(self) -> int:
        value, size = deserialize_u32(self.data, self.offset)
        self.offset += size
        return value

    def read_u64(self) -> int:
        value, size = deserialize_u64(self.data, self.offset)
        self.offset += size
        return value

    def read_bool(self) -> bool:
        value, size = deserialize_bool(self.data, self.offset)
        self.offset += size
        return value

    def read_string(self) -> str:
        value, size = deserialize_string(self.data, self.offset)
        self.offset += size
        return value

    def read_fixed_bytes(self, size: int) -> bytes:
        """Read fixed-length byte array."""
        _check_available(self.data, self.offset, size)
        value = self.data[self.offset:self.offset + size]
        self.offset += size
        return value

    def read_pubkey(self) -> Pubkey:
        return Pubkey(self.read_fixed_bytes(PUBKEY_SIZE))

    def read_optional_pubkey(self) -> Optional[Pubkey]:
        """Read a pubkey where the all-zero key means absent."""
        key = self.read_pubkey()
        return None if is_default_pubkey(key) else key

    def read_coption_pubkey(self) -> Optional[Pubkey]:
        """Read an SPL `COption<Pubkey>`: u32 tag || 32 bytes."""
        tag = self.read_u32()
        key = self.read_pubkey()
        if tag == 0:
            return None
        if tag != 1:
            raise ValueError(f"Invalid COption tag: {tag}")
        return key

    def read_coption_u64(self) -> Optional[int]:
        tag = self.read_u32()
        value = self.read_u64()
        if tag == 0:
            return None
        if tag != 1:
            raise ValueError(f"Invalid COption tag: {tag}")
        return value


class ByteWriter:
    """
    Helper class for sequential serialization.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u8(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u8(value))
        return self

    def write_u32(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u32(value))
        return self

    def write_u64(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u64(value))
        return self

    def write_bool(self, value: bool) -> "ByteWriter":
        self.buffer.extend(serialize_bool(value))
        return self

    def write_string(self, value: str) -> "ByteWriter":
        self.buffer.extend(serialize_string(value))
        return self

    def write_pubkey(self, key: Pubkey) -> "ByteWriter":
        self.buffer.extend(bytes(key))
        return self

    def write_optional_pubkey(self, key: Optional[Pubkey]) -> "ByteWriter":
        """Write a pubkey, or the all-zero key when absent."""
        self.buffer.extend(bytes(PUBKEY_SIZE) if key is None else bytes(key))
        return self

    def write_coption_pubkey(self, key: Optional[Pubkey]) -> "ByteWriter":
        if key is None:
            self.write_u32(0)
            self.buffer.extend(bytes(PUBKEY_SIZE))
        else:
            self.write_u32(1)
            self.buffer.extend(bytes(key))
        return self

    def write_coption_u64(self, value: Optional[int]) -> "ByteWriter":
        self.write_u32(0 if value is None else 1)
        self.write_u64(0 if value is None else value)
        return self

    def write_raw(self, data: bytes) -> "ByteWriter":
        """Write raw bytes without length prefix."""
        self.buffer.extend(data)
        return self

    def to_bytes(self) -> bytes:
        """Return the serialized bytes."""
        return bytes(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)
