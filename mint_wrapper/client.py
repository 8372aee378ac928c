"""
Mint Wrapper Client

Wallet-bound facade over the builders. Unset admins, payers and minter
authorities default to the wallet; reads go through an AccountReader and
nothing is submitted here: callers hand envelopes to a BatchSubmitter.
"""

from __future__ import annotations
import logging
from typing import Optional

from solders.pubkey import Pubkey

from mint_wrapper.config import ClientConfig
from mint_wrapper.constants import MINT_ACCOUNT_SIZE
from mint_wrapper.core.accounts import MintWrapper, Minter, decode_mint_wrapper, decode_minter
from mint_wrapper.core.envelope import TransactionEnvelope
from mint_wrapper.crypto.pda import find_mint_wrapper_address, find_minter_address
from mint_wrapper.protocol import metadata, minter, wrapper
from mint_wrapper.protocol.token import get_or_create_ata
from mint_wrapper.protocol.wrapper import (
    NewWrapperConfig,
    NewWrapperAndMintConfig,
    PendingMintWrapper,
    PendingMintAndWrapper,
)
from mint_wrapper.state.reader import AccountReader

logger = logging.getLogger(__name__)


class MintWrapperClient:
    """
    Builds mint wrapper envelopes on behalf of one wallet.

    Args:
        wallet: Identity that signs and pays by default
        reader: Ledger state source
        config: Client configuration (program ids, defaults)
        program_id: Overrides the configured mint wrapper program
    """

    def __init__(
        self,
        wallet: Pubkey,
        reader: AccountReader,
        config: Optional[ClientConfig] = None,
        program_id: Optional[Pubkey] = None,
    ):
        self.wallet = wallet
        self.reader = reader
        self.config = config or ClientConfig()
        self.program_id = program_id or self.config.programs.mint_wrapper
        self.token_program = self.config.programs.token_program
        self.metadata_program = self.config.programs.metadata_program

    # =========================================================================
    # Addresses
    # =========================================================================

    def wrapper_address(self, base: Pubkey) -> Pubkey:
        address, _ = find_mint_wrapper_address(base, self.program_id)
        return address

    def minter_address(self, mint_wrapper: Pubkey, authority: Pubkey) -> Pubkey:
        address, _ = find_minter_address(mint_wrapper, authority, self.program_id)
        return address

    # =========================================================================
    # Wrapper
    # =========================================================================

    def new_wrapper(self, config: NewWrapperConfig) -> PendingMintWrapper:
        return wrapper.new_wrapper(self.program_id, config.resolve(self.wallet))

    def new_wrapper_v1(self, config: NewWrapperConfig) -> PendingMintWrapper:
        return wrapper.new_wrapper_v1(self.program_id, config.resolve(self.wallet))

    async def new_wrapper_and_mint(
        self,
        config: NewWrapperAndMintConfig,
        legacy: bool = False,
    ) -> PendingMintAndWrapper:
        """
        Create a mint and the wrapper that owns it in one batch.

        Reads the rent-exempt minimum for the mint account once. Unset
        decimals come from the client configuration.
        """
        rent = await self.reader.get_minimum_balance_for_rent_exemption(MINT_ACCOUNT_SIZE)
        resolved = config.resolve(self.wallet, self.config.mint.decimals)
        if legacy:
            return wrapper.new_wrapper_and_mint_v1(self.program_id, resolved, rent)
        return wrapper.new_wrapper_and_mint(self.program_id, resolved, rent)

    def transfer_admin(
        self,
        mint_wrapper: Pubkey,
        next_admin: Pubkey,
        admin: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        return wrapper.transfer_admin(self.program_id, mint_wrapper, admin or self.wallet, next_admin)

    def accept_admin(
        self,
        mint_wrapper: Pubkey,
        pending_admin: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        return wrapper.accept_admin(self.program_id, mint_wrapper, pending_admin or self.wallet)

    # =========================================================================
    # Minters
    # =========================================================================

    def new_minter(
        self,
        mint_wrapper: Pubkey,
        authority: Pubkey,
        admin: Optional[Pubkey] = None,
        payer: Optional[Pubkey] = None,
        legacy: bool = False,
    ) -> TransactionEnvelope:
        build = minter.new_minter_v1 if legacy else minter.new_minter
        return build(
            self.program_id,
            mint_wrapper,
            authority,
            admin or self.wallet,
            payer or self.wallet,
        )

    def minter_update(
        self,
        mint_wrapper: Pubkey,
        authority: Pubkey,
        allowance: int,
        admin: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        """Overwrite the minter's allowance."""
        return minter.minter_update(
            self.program_id,
            mint_wrapper,
            authority,
            allowance,
            admin or self.wallet,
        )

    def new_minter_with_allowance(
        self,
        mint_wrapper: Pubkey,
        authority: Pubkey,
        allowance: int,
        admin: Optional[Pubkey] = None,
        payer: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        return minter.new_minter_with_allowance(
            self.program_id,
            mint_wrapper,
            authority,
            allowance,
            admin or self.wallet,
            payer or self.wallet,
        )

    async def perform_mint_to(
        self,
        amount: int,
        mint_wrapper: Pubkey,
        token_mint: Pubkey,
        minter_authority: Optional[Pubkey] = None,
        dest_owner: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        """
        Mint to the owner's associated token account.

        One read resolves the destination; its creation is prepended when
        it does not exist yet.
        """
        authority = minter_authority or self.wallet
        destination = await get_or_create_ata(
            self.reader,
            token_mint,
            dest_owner or self.wallet,
            self.wallet,
            self.token_program,
        )
        return minter.perform_mint_to(
            self.program_id,
            mint_wrapper,
            token_mint,
            amount,
            authority,
            destination.address,
            destination.instruction,
            self.token_program,
        )

    async def perform_mint_with_minter(
        self,
        amount: int,
        minter_address: Pubkey,
        minter_record: Minter,
        token_mint: Pubkey,
        dest_owner: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        destination = await get_or_create_ata(
            self.reader,
            token_mint,
            dest_owner or self.wallet,
            self.wallet,
            self.token_program,
        )
        return minter.perform_mint_with_minter(
            self.program_id,
            minter_address,
            minter_record,
            token_mint,
            amount,
            destination.address,
            destination.instruction,
            self.token_program,
        )

    # =========================================================================
    # Metadata
    # =========================================================================

    def create_mint_metadata(
        self,
        name: str,
        symbol: str,
        uri: str,
        token_mint: Pubkey,
        mint_wrapper: Pubkey,
        minter_authority: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        return metadata.create_mint_metadata(
            self.program_id,
            name,
            symbol,
            uri,
            token_mint,
            mint_wrapper,
            minter_authority or self.wallet,
            self.metadata_program,
        )

    def set_metaplex_update_authority(
        self,
        token_mint: Pubkey,
        mint_wrapper: Pubkey,
        new_update_authority: Pubkey,
        minter_authority: Optional[Pubkey] = None,
    ) -> TransactionEnvelope:
        return metadata.set_metaplex_update_authority(
            self.program_id,
            token_mint,
            mint_wrapper,
            minter_authority or self.wallet,
            new_update_authority,
            self.metadata_program,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def fetch_mint_wrapper(self, address: Pubkey) -> Optional[MintWrapper]:
        """The wrapper at `address`, or None when it does not exist."""
        return decode_mint_wrapper(await self.reader.get_account_data(address))

    async def fetch_minter(self, mint_wrapper: Pubkey, authority: Pubkey) -> Optional[Minter]:
        """The minter of `authority` under `mint_wrapper`, or None."""
        address = self.minter_address(mint_wrapper, authority)
        data = await self.reader.get_account_data(address)
        if data is None:
            logger.debug(f"No minter for {authority} under {mint_wrapper}")
        return decode_minter(data)
