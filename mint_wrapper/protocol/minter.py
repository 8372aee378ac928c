"""
Minter Lifecycle

Minter creation, allowance updates and minting. Allowance updates are
absolute: the new value overwrites the old one.
"""

from __future__ import annotations
import logging
from typing import Optional

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from mint_wrapper.constants import TOKEN_PROGRAM_ID
from mint_wrapper.core import instructions
from mint_wrapper.core.accounts import Minter
from mint_wrapper.core.envelope import TransactionEnvelope, new_tx
from mint_wrapper.crypto.pda import find_minter_address

logger = logging.getLogger(__name__)


def new_minter_v1(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    authority: Pubkey,
    admin: Pubkey,
    payer: Pubkey,
) -> TransactionEnvelope:
    """Create a minter with the legacy instruction that carries the bump."""
    minter, bump = find_minter_address(mint_wrapper, authority, program_id)
    return new_tx([
        instructions.new_minter(
            program_id,
            bump,
            mint_wrapper=mint_wrapper,
            admin=admin,
            new_minter_authority=authority,
            minter=minter,
            payer=payer,
        )
    ])


def new_minter(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    authority: Pubkey,
    admin: Pubkey,
    payer: Pubkey,
) -> TransactionEnvelope:
    """Create a minter with a zero allowance."""
    minter, _ = find_minter_address(mint_wrapper, authority, program_id)
    return new_tx([
        instructions.new_minter_v2(
            program_id,
            mint_wrapper=mint_wrapper,
            admin=admin,
            new_minter_authority=authority,
            minter=minter,
            payer=payer,
        )
    ])


def minter_update(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    authority: Pubkey,
    allowance: int,
    admin: Pubkey,
) -> TransactionEnvelope:
    """
    Set a minter's allowance to `allowance`.

    This replaces the current value; read the minter first when an
    incremental change is intended.
    """
    minter, _ = find_minter_address(mint_wrapper, authority, program_id)
    return new_tx([
        instructions.minter_update(
            program_id,
            allowance,
            mint_wrapper=mint_wrapper,
            admin=admin,
            minter=minter,
        )
    ])


def new_minter_with_allowance(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    authority: Pubkey,
    allowance: int,
    admin: Pubkey,
    payer: Pubkey,
) -> TransactionEnvelope:
    """Create a minter and set its allowance in the same batch."""
    return new_minter(program_id, mint_wrapper, authority, admin, payer).combine(
        minter_update(program_id, mint_wrapper, authority, allowance, admin)
    )


def perform_mint_to(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    token_mint: Pubkey,
    amount: int,
    minter_authority: Pubkey,
    destination: Pubkey,
    create_destination: Optional[Instruction] = None,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> TransactionEnvelope:
    """
    Mint `amount` units to `destination` as the given minter authority.

    `create_destination`, when given, creates the destination token
    account and is placed ahead of the mint.
    """
    minter, _ = find_minter_address(mint_wrapper, minter_authority, program_id)
    mint_ix = instructions.perform_mint(
        program_id,
        amount,
        mint_wrapper=mint_wrapper,
        minter_authority=minter_authority,
        token_mint=token_mint,
        destination=destination,
        minter=minter,
        token_program=token_program,
    )
    logger.debug(f"perform_mint {amount} via minter {minter} to {destination}")

    if create_destination is None:
        return new_tx([mint_ix])
    return new_tx([create_destination, mint_ix])


def perform_mint_with_minter(
    program_id: Pubkey,
    minter_address: Pubkey,
    minter: Minter,
    token_mint: Pubkey,
    amount: int,
    destination: Pubkey,
    create_destination: Optional[Instruction] = None,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> TransactionEnvelope:
    """Mint using an already-fetched minter record for the account list."""
    mint_ix = instructions.perform_mint(
        program_id,
        amount,
        mint_wrapper=minter.mint_wrapper,
        minter_authority=minter.minter_authority,
        token_mint=token_mint,
        destination=destination,
        minter=minter_address,
        token_program=token_program,
    )

    if create_destination is None:
        return new_tx([mint_ix])
    return new_tx([create_destination, mint_ix])
