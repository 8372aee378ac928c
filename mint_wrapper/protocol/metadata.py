"""
Mint Metadata Pass-through

The wrapper holds mint authority, so metadata for its mint is created and
handed over through the wrapper program. No state beyond the derived
metadata address is involved.
"""

from __future__ import annotations
import logging

from solders.pubkey import Pubkey

from mint_wrapper.constants import METADATA_PROGRAM_ID
from mint_wrapper.core import instructions
from mint_wrapper.core.envelope import TransactionEnvelope, new_tx
from mint_wrapper.crypto.pda import find_metadata_address

logger = logging.getLogger(__name__)


def create_mint_metadata(
    program_id: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    token_mint: Pubkey,
    mint_wrapper: Pubkey,
    minter_authority: Pubkey,
    metadata_program: Pubkey = METADATA_PROGRAM_ID,
) -> TransactionEnvelope:
    metadata_info, _ = find_metadata_address(token_mint, metadata_program)
    logger.debug(
        f"create_mint_metadata mint={token_mint} wrapper={mint_wrapper} "
        f"metadata={metadata_info}"
    )
    return new_tx([
        instructions.create_mint_metadata(
            program_id,
            name,
            symbol,
            uri,
            mint_wrapper=mint_wrapper,
            minter_authority=minter_authority,
            token_mint=token_mint,
            metadata_info=metadata_info,
            metadata_program=metadata_program,
        )
    ])


def set_metaplex_update_authority(
    program_id: Pubkey,
    token_mint: Pubkey,
    mint_wrapper: Pubkey,
    minter_authority: Pubkey,
    new_update_authority: Pubkey,
    metadata_program: Pubkey = METADATA_PROGRAM_ID,
) -> TransactionEnvelope:
    """Hand the mint's metadata update authority to `new_update_authority`."""
    metadata_info, _ = find_metadata_address(token_mint, metadata_program)
    return new_tx([
        instructions.set_metaplex_update_authority(
            program_id,
            mint_wrapper=mint_wrapper,
            minter_authority=minter_authority,
            token_mint=token_mint,
            metadata_info=metadata_info,
            new_update_authority=new_update_authority,
            metadata_program=metadata_program,
        )
    ])
