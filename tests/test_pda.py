"""
Mint Wrapper Address Derivation Tests
"""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    MINT_WRAPPER_PROGRAM_ID,
    METADATA_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from mint_wrapper.crypto import pda
from mint_wrapper.crypto.pda import (
    find_program_address,
    find_mint_wrapper_address,
    find_minter_address,
    find_metadata_address,
    find_associated_token_address,
)
from mint_wrapper.errors import DerivationExhaustedError, InvalidSeedsError, ErrorCode


class TestFindProgramAddress:
    """Tests for the bump search."""

    def test_matches_reference_derivation(self):
        """Test agreement with the reference implementation."""
        seeds = [b"MintWrapper", bytes(range(32))]
        expected = Pubkey.find_program_address(seeds, MINT_WRAPPER_PROGRAM_ID)
        assert find_program_address(seeds, MINT_WRAPPER_PROGRAM_ID) == expected

    def test_result_is_off_curve(self):
        """Test derived addresses are not valid public keys."""
        address, _ = find_program_address([b"seed"], MINT_WRAPPER_PROGRAM_ID)
        assert not address.is_on_curve()

    def test_bump_reproduces_address(self):
        """Test the returned bump recreates the same address."""
        seeds = [b"seed", b"other"]
        address, bump = find_program_address(seeds, MINT_WRAPPER_PROGRAM_ID)
        candidate = Pubkey.create_program_address(seeds + [bytes([bump])], MINT_WRAPPER_PROGRAM_ID)
        assert candidate == address

    def test_exhausted_search(self, monkeypatch):
        """Test every bump landing on the curve raises."""
        def on_curve(seeds, program_id):
            raise ValueError("Invalid seeds, address must fall off the curve")

        monkeypatch.setattr(pda, "_create_program_address", on_curve)
        with pytest.raises(DerivationExhaustedError) as exc_info:
            find_program_address([b"seed"], MINT_WRAPPER_PROGRAM_ID)
        assert exc_info.value.code == ErrorCode.DERIVATION_EXHAUSTED

    def test_search_starts_at_255(self, monkeypatch):
        """Test the first off-curve bump from the top wins."""
        calls = []

        def first_two_on_curve(seeds, program_id):
            calls.append(seeds[-1])
            if len(calls) < 3:
                raise ValueError("Invalid seeds, address must fall off the curve")
            return Pubkey.default()

        monkeypatch.setattr(pda, "_create_program_address", first_two_on_curve)
        address, bump = find_program_address([b"seed"], MINT_WRAPPER_PROGRAM_ID)
        assert address == Pubkey.default()
        assert bump == 253
        assert calls == [bytes([255]), bytes([254]), bytes([253])]

    def test_seed_too_long(self):
        """Test seeds over 32 bytes are rejected."""
        with pytest.raises(InvalidSeedsError):
            find_program_address([bytes(33)], MINT_WRAPPER_PROGRAM_ID)

    def test_too_many_seeds(self):
        """Test the bump needs a free seed slot."""
        with pytest.raises(InvalidSeedsError):
            find_program_address([b"x"] * 16, MINT_WRAPPER_PROGRAM_ID)
        find_program_address([b"x"] * 15, MINT_WRAPPER_PROGRAM_ID)


class TestNamedAddresses:
    """Tests for wrapper, minter, metadata and token account addresses."""

    def test_wrapper_deterministic(self, base_keypair):
        """Test repeated derivation yields the same pair."""
        base = base_keypair.pubkey()
        assert find_mint_wrapper_address(base) == find_mint_wrapper_address(base)

    def test_wrapper_seeds(self, base_keypair):
        """Test wrapper seeds are the tag and the base."""
        base = base_keypair.pubkey()
        expected = Pubkey.find_program_address([b"MintWrapper", bytes(base)], MINT_WRAPPER_PROGRAM_ID)
        assert find_mint_wrapper_address(base) == expected

    def test_wrapper_depends_on_program(self, base_keypair):
        """Test another program id gives another address."""
        base = base_keypair.pubkey()
        address, _ = find_mint_wrapper_address(base)
        other, _ = find_mint_wrapper_address(base, TOKEN_PROGRAM_ID)
        assert address != other

    def test_minter_seeds(self, base_keypair, minter_keypair):
        """Test minter seeds are the tag, the wrapper and the authority."""
        wrapper, _ = find_mint_wrapper_address(base_keypair.pubkey())
        authority = minter_keypair.pubkey()
        expected = Pubkey.find_program_address(
            [b"MintMinter", bytes(wrapper), bytes(authority)],
            MINT_WRAPPER_PROGRAM_ID,
        )
        assert find_minter_address(wrapper, authority) == expected

    def test_distinct_minters(self, base_keypair, minter_keypair, other_keypair):
        """Test distinct authorities get distinct minters."""
        wrapper, _ = find_mint_wrapper_address(base_keypair.pubkey())
        first, _ = find_minter_address(wrapper, minter_keypair.pubkey())
        second, _ = find_minter_address(wrapper, other_keypair.pubkey())
        assert first != second

    def test_minters_distinct_across_many_pairs(self):
        """Test no two wrapper/authority pairs share a minter address."""
        wrappers = [Keypair().pubkey() for _ in range(20)]
        authorities = [Keypair().pubkey() for _ in range(100)]
        addresses = {
            find_minter_address(wrapper, authority)[0]
            for wrapper in wrappers
            for authority in authorities
        }
        assert len(addresses) == len(wrappers) * len(authorities)

    def test_metadata_address_follows_program(self, mint_keypair):
        """Test an alternate metadata program changes seeds and owner."""
        mint = mint_keypair.pubkey()
        program = Keypair.from_seed(bytes([9] * 32)).pubkey()
        expected = Pubkey.find_program_address(
            [b"metadata", bytes(program), bytes(mint)],
            program,
        )
        assert find_metadata_address(mint, program) == expected
        assert find_metadata_address(mint, program) != find_metadata_address(mint)

    def test_metadata_address(self, mint_keypair):
        """Test metadata seeds live under the metadata program."""
        mint = mint_keypair.pubkey()
        expected = Pubkey.find_program_address(
            [b"metadata", bytes(METADATA_PROGRAM_ID), bytes(mint)],
            METADATA_PROGRAM_ID,
        )
        assert find_metadata_address(mint) == expected

    def test_associated_token_address(self, wallet, mint_keypair):
        """Test token account seeds are owner, token program and mint."""
        owner = wallet.pubkey()
        mint = mint_keypair.pubkey()
        expected = Pubkey.find_program_address(
            [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
            ASSOCIATED_TOKEN_PROGRAM_ID,
        )
        assert find_associated_token_address(owner, mint) == expected
