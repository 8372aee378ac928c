"""
Mint Wrapper Account Record Tests
"""

import pytest
from solders.pubkey import Pubkey

from mint_wrapper.constants import MINT_WRAPPER_SIZE, MINTER_SIZE
from mint_wrapper.core.accounts import (
    MintWrapper,
    Minter,
    MINT_WRAPPER_DISCRIMINATOR,
    MINTER_DISCRIMINATOR,
    decode_mint_wrapper,
    decode_minter,
)
from mint_wrapper.crypto.hash import sha256
from mint_wrapper.errors import DecodeError


def make_wrapper(admin: Pubkey, pending_admin=None) -> MintWrapper:
    return MintWrapper(
        base=Pubkey(bytes([7] * 32)),
        bump=254,
        hard_cap=1_000_000,
        admin=admin,
        pending_admin=pending_admin,
        token_mint=Pubkey(bytes([8] * 32)),
        num_minters=2,
        total_allowance=600,
        total_minted=400,
    )


class TestMintWrapperRecord:
    """Tests for the MintWrapper layout."""

    def test_discriminator(self):
        """Test the Anchor account discriminator."""
        assert MINT_WRAPPER_DISCRIMINATOR == sha256(b"account:MintWrapper")[:8]

    def test_size(self, wallet):
        """Test the serialized size."""
        assert len(make_wrapper(wallet.pubkey()).serialize()) == MINT_WRAPPER_SIZE == 169

    def test_serialization(self, wallet, other_keypair):
        """Test serialization preserves every field."""
        wrapper = make_wrapper(wallet.pubkey(), other_keypair.pubkey())
        restored, consumed = MintWrapper.deserialize(wrapper.serialize())

        assert restored == wrapper
        assert consumed == MINT_WRAPPER_SIZE

    def test_no_pending_admin(self, wallet):
        """Test an absent pending admin is stored as the zero key."""
        data = make_wrapper(wallet.pubkey()).serialize()
        assert data[81:113] == bytes(32)
        restored, _ = MintWrapper.deserialize(data)
        assert restored.pending_admin is None

    def test_field_offsets(self, wallet):
        """Test fields sit where the program puts them."""
        data = make_wrapper(wallet.pubkey()).serialize()
        assert data[40] == 254
        assert int.from_bytes(data[41:49], "little") == 1_000_000
        assert data[49:81] == bytes(wallet.pubkey())
        assert int.from_bytes(data[161:169], "little") == 400

    def test_remaining_supply(self, wallet):
        """Test remaining supply under the hard cap."""
        assert make_wrapper(wallet.pubkey()).remaining_supply == 999_600

    def test_wrong_discriminator(self, wallet):
        """Test minter bytes are not accepted as a wrapper."""
        minter = Minter(
            mint_wrapper=wallet.pubkey(),
            minter_authority=wallet.pubkey(),
            bump=255,
        )
        data = minter.serialize() + bytes(MINT_WRAPPER_SIZE)
        with pytest.raises(DecodeError):
            MintWrapper.deserialize(data)

    def test_short_data(self, wallet):
        """Test truncated data raises."""
        data = make_wrapper(wallet.pubkey()).serialize()
        with pytest.raises(DecodeError):
            MintWrapper.deserialize(data[:-1])

    def test_copy_is_independent(self, wallet):
        """Test copies do not share state."""
        wrapper = make_wrapper(wallet.pubkey())
        copy = wrapper.copy()
        copy.total_minted += 1
        assert wrapper.total_minted == 400


class TestMinterRecord:
    """Tests for the Minter layout."""

    def test_discriminator(self):
        """Test the Anchor account discriminator."""
        assert MINTER_DISCRIMINATOR == sha256(b"account:Minter")[:8]

    def test_serialization(self, wallet, minter_keypair):
        """Test serialization preserves every field."""
        minter = Minter(
            mint_wrapper=wallet.pubkey(),
            minter_authority=minter_keypair.pubkey(),
            bump=251,
            index=3,
            allowance=500,
            total_minted=250,
        )
        data = minter.serialize()
        restored, consumed = Minter.deserialize(data)

        assert len(data) == MINTER_SIZE == 97
        assert restored == minter
        assert consumed == MINTER_SIZE

    def test_wrong_discriminator(self, wallet):
        """Test wrapper bytes are not accepted as a minter."""
        data = make_wrapper(wallet.pubkey()).serialize()
        with pytest.raises(DecodeError):
            Minter.deserialize(data)


class TestOptionalDecoding:
    """Tests for not-found handling."""

    def test_missing_wrapper(self):
        """Test no account decodes to None."""
        assert decode_mint_wrapper(None) is None

    def test_missing_minter(self):
        """Test no account decodes to None."""
        assert decode_minter(None) is None

    def test_present_wrapper(self, wallet):
        """Test present bytes decode to a record."""
        wrapper = make_wrapper(wallet.pubkey())
        assert decode_mint_wrapper(wrapper.serialize()) == wrapper

    def test_malformed_minter(self):
        """Test malformed bytes raise instead of returning None."""
        with pytest.raises(DecodeError):
            decode_minter(b"\x00" * 10)
