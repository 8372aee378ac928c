"""
Mint Wrapper Token Collaborator Tests
"""

import pytest
from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    MINT_ACCOUNT_SIZE,
    TOKEN_ACCOUNT_SIZE,
)
from mint_wrapper.crypto.pda import find_associated_token_address
from mint_wrapper.errors import DecodeError, InvalidParameterError
from mint_wrapper.protocol.token import (
    MintState,
    TokenAccountState,
    create_init_mint_instructions,
    get_or_create_ata,
)


class TestLayouts:
    """Tests for SPL account layouts."""

    def test_mint_layout(self, wallet):
        """Test mint size and round trip."""
        mint = MintState(mint_authority=wallet.pubkey(), supply=5, decimals=6, freeze_authority=None)
        data = mint.serialize()
        restored, _ = MintState.deserialize(data)

        assert len(data) == MINT_ACCOUNT_SIZE
        assert restored == mint

    def test_token_account_layout(self, wallet, mint_keypair):
        """Test token account size."""
        account = TokenAccountState(mint=mint_keypair.pubkey(), owner=wallet.pubkey(), amount=9)
        assert len(account.serialize()) == TOKEN_ACCOUNT_SIZE

    def test_short_mint(self):
        """Test truncated mint data raises."""
        with pytest.raises(DecodeError):
            MintState.deserialize(bytes(10))

    def test_bad_coption_tag(self):
        """Test an invalid COption tag raises."""
        data = bytearray(MINT_ACCOUNT_SIZE)
        data[0] = 7
        with pytest.raises(DecodeError):
            MintState.deserialize(bytes(data))


class TestMintCreation:
    """Tests for create-mint instructions."""

    def test_mint_keypair_signs(self, wallet, mint_keypair):
        """Test the new mint signs its allocation."""
        tx = create_init_mint_instructions(
            mint=mint_keypair,
            mint_authority=wallet.pubkey(),
            freeze_authority=None,
            decimals=6,
            payer=wallet.pubkey(),
            lamports=1,
        )
        assert len(tx) == 2
        assert tx.signer_pubkeys() == [mint_keypair.pubkey()]

    def test_decimals_range(self, wallet, mint_keypair):
        """Test decimals must fit a u8."""
        with pytest.raises(InvalidParameterError):
            create_init_mint_instructions(
                mint=mint_keypair,
                mint_authority=wallet.pubkey(),
                freeze_authority=None,
                decimals=256,
                payer=wallet.pubkey(),
                lamports=1,
            )


class TestAssociatedTokenAccounts:
    """Tests for destination resolution."""

    @pytest.mark.asyncio
    async def test_missing_account(self, ledger, wallet, mint_keypair):
        """Test a missing account comes with its creation instruction."""
        pending = await get_or_create_ata(ledger, mint_keypair.pubkey(), wallet.pubkey(), wallet.pubkey())
        expected, _ = find_associated_token_address(wallet.pubkey(), mint_keypair.pubkey())

        assert pending.address == expected
        assert pending.instruction is not None
        assert pending.instruction.program_id == ASSOCIATED_TOKEN_PROGRAM_ID
        assert bytes(pending.instruction.data) == bytes([1])

    @pytest.mark.asyncio
    async def test_existing_account(self, ledger, wallet, mint_keypair):
        """Test an existing account needs no instruction."""
        address, _ = find_associated_token_address(wallet.pubkey(), mint_keypair.pubkey())
        ledger.state.create(address, Pubkey.default(), bytes(TOKEN_ACCOUNT_SIZE))

        pending = await get_or_create_ata(ledger, mint_keypair.pubkey(), wallet.pubkey(), wallet.pubkey())
        assert pending.address == address
        assert pending.instruction is None
