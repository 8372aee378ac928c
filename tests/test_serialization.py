"""
Mint Wrapper Serialization Tests
"""

import pytest
from solders.pubkey import Pubkey

from mint_wrapper.core.serialization import (
    ByteReader,
    ByteWriter,
    serialize_u64,
    deserialize_u64,
    deserialize_string,
)


class TestPrimitives:
    """Tests for Borsh primitives."""

    def test_u64_little_endian(self):
        """Test u64 byte order."""
        assert serialize_u64(1) == b"\x01" + bytes(7)
        assert deserialize_u64(serialize_u64(2**63)) == (2**63, 8)

    def test_u64_range(self):
        """Test out-of-range integers are rejected."""
        with pytest.raises(ValueError):
            serialize_u64(2**64)
        with pytest.raises(ValueError):
            serialize_u64(-1)

    def test_string_prefix(self):
        """Test strings carry a u32 byte length."""
        data = ByteWriter().write_string("héllo").to_bytes()
        assert data[:4] == (6).to_bytes(4, "little")
        assert deserialize_string(data) == ("héllo", 10)

    def test_short_string(self):
        """Test a length past the end raises."""
        with pytest.raises(ValueError):
            deserialize_string((10).to_bytes(4, "little") + b"abc")


class TestReaderWriter:
    """Tests for ByteReader and ByteWriter."""

    def test_sequential_fields(self):
        """Test mixed fields read back in order."""
        key = Pubkey(bytes([9] * 32))
        data = (
            ByteWriter()
            .write_u8(7)
            .write_bool(True)
            .write_pubkey(key)
            .write_optional_pubkey(None)
            .write_coption_pubkey(key)
            .write_coption_u64(None)
            .to_bytes()
        )
        reader = ByteReader(data)

        assert reader.read_u8() == 7
        assert reader.read_bool() is True
        assert reader.read_pubkey() == key
        assert reader.read_optional_pubkey() is None
        assert reader.read_coption_pubkey() == key
        assert reader.read_coption_u64() is None
        assert reader.offset == len(data)

    def test_invalid_bool(self):
        """Test bool bytes other than 0 and 1 raise."""
        with pytest.raises(ValueError):
            ByteReader(b"\x02").read_bool()

    def test_read_past_end(self):
        """Test reading beyond the buffer raises."""
        with pytest.raises(ValueError):
            ByteReader(b"\x00" * 4).read_u64()
