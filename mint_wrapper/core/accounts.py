"""
Mint Wrapper Account Records

On-ledger layouts of the MintWrapper and Minter accounts.
Each record starts with its 8-byte Anchor discriminator followed by the
Borsh-encoded fields in declaration order.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from solders.pubkey import Pubkey

from mint_wrapper.constants import DISCRIMINATOR_SIZE, MINT_WRAPPER_SIZE, MINTER_SIZE
from mint_wrapper.core.serialization import ByteReader, ByteWriter
from mint_wrapper.crypto.hash import account_discriminator
from mint_wrapper.errors import DecodeError

MINT_WRAPPER_DISCRIMINATOR = account_discriminator("MintWrapper")
MINTER_DISCRIMINATOR = account_discriminator("Minter")


def _open_record(name: str, discriminator: bytes, size: int, data: bytes) -> ByteReader:
    if len(data) < size:
        raise DecodeError(name, f"expected at least {size} bytes, got {len(data)}")
    if data[:DISCRIMINATOR_SIZE] != discriminator:
        raise DecodeError(
            name,
            f"discriminator mismatch: {data[:DISCRIMINATOR_SIZE].hex()} "
            f"!= {discriminator.hex()}"
        )
    reader = ByteReader(data)
    reader.offset = DISCRIMINATOR_SIZE
    return reader


@dataclass
class MintWrapper:
    """
    Minting-authorization root bound to exactly one token mint.

    The wrapper is the mint authority of `token_mint`; minters draw on it
    up to `hard_cap` units in total.
    """
    # Identity
    base: Pubkey
    bump: int

    # Supply ceiling (immutable after creation)
    hard_cap: int

    # Administration
    admin: Pubkey
    pending_admin: Optional[Pubkey]     # None when no transfer is in flight

    # Governed mint
    token_mint: Pubkey

    # Accounting
    num_minters: int = 0                # Minters ever created
    total_allowance: int = 0            # Sum of live minter allowances
    total_minted: int = 0               # Units minted through all minters

    def serialize(self) -> bytes:
        """Serialize to account data, discriminator included."""
        writer = ByteWriter()

        writer.write_raw(MINT_WRAPPER_DISCRIMINATOR)
        writer.write_pubkey(self.base)
        writer.write_u8(self.bump)
        writer.write_u64(self.hard_cap)
        writer.write_pubkey(self.admin)
        writer.write_optional_pubkey(self.pending_admin)
        writer.write_pubkey(self.token_mint)
        writer.write_u64(self.num_minters)
        writer.write_u64(self.total_allowance)
        writer.write_u64(self.total_minted)

        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> Tuple["MintWrapper", int]:
        """
        Deserialize account data.

        Raises:
            DecodeError: If the data is short or carries another discriminator
        """
        reader = _open_record("MintWrapper", MINT_WRAPPER_DISCRIMINATOR, MINT_WRAPPER_SIZE, data)

        record = cls(
            base=reader.read_pubkey(),
            bump=reader.read_u8(),
            hard_cap=reader.read_u64(),
            admin=reader.read_pubkey(),
            pending_admin=reader.read_optional_pubkey(),
            token_mint=reader.read_pubkey(),
            num_minters=reader.read_u64(),
            total_allowance=reader.read_u64(),
            total_minted=reader.read_u64(),
        )
        return record, reader.offset

    @property
    def remaining_supply(self) -> int:
        """Units that can still be minted before the hard cap."""
        return self.hard_cap - self.total_minted

    def copy(self) -> "MintWrapper":
        return replace(self)


@dataclass
class Minter:
    """Delegated, allowance-bounded minting permission of one authority."""
    mint_wrapper: Pubkey
    minter_authority: Pubkey
    bump: int
    index: int = 0                      # Creation ordinal under the wrapper
    allowance: int = 0                  # Remaining mintable units
    total_minted: int = 0

    def serialize(self) -> bytes:
        """Serialize to account data, discriminator included."""
        writer = ByteWriter()

        writer.write_raw(MINTER_DISCRIMINATOR)
        writer.write_pubkey(self.mint_wrapper)
        writer.write_pubkey(self.minter_authority)
        writer.write_u8(self.bump)
        writer.write_u64(self.index)
        writer.write_u64(self.allowance)
        writer.write_u64(self.total_minted)

        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> Tuple["Minter", int]:
        """
        Deserialize account data.

        Raises:
            DecodeError: If the data is short or carries another discriminator
        """
        reader = _open_record("Minter", MINTER_DISCRIMINATOR, MINTER_SIZE, data)

        record = cls(
            mint_wrapper=reader.read_pubkey(),
            minter_authority=reader.read_pubkey(),
            bump=reader.read_u8(),
            index=reader.read_u64(),
            allowance=reader.read_u64(),
            total_minted=reader.read_u64(),
        )
        return record, reader.offset

    def copy(self) -> "Minter":
        return replace(self)


def decode_mint_wrapper(data: Optional[bytes]) -> Optional[MintWrapper]:
    """Decode wrapper account data; `None` (no account) stays `None`."""
    if data is None:
        return None
    record, _ = MintWrapper.deserialize(data)
    return record


def decode_minter(data: Optional[bytes]) -> Optional[Minter]:
    """Decode minter account data; `None` (no account) stays `None`."""
    if data is None:
        return None
    record, _ = Minter.deserialize(data)
    return record
