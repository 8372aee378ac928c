"""
Mint Wrapper Token Collaborators

SPL token pieces the wrapper depends on: mint and token-account layouts,
create-mint instructions and associated token account resolution.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, TYPE_CHECKING

from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account

from mint_wrapper.constants import (
    TOKEN_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    MINT_ACCOUNT_SIZE,
    TOKEN_ACCOUNT_SIZE,
    MAX_DECIMALS,
    TOKEN_IX_INITIALIZE_MINT2,
    ATA_IX_CREATE_IDEMPOTENT,
)
from mint_wrapper.core.envelope import TransactionEnvelope, new_tx
from mint_wrapper.core.serialization import ByteReader, ByteWriter
from mint_wrapper.crypto.pda import find_associated_token_address
from mint_wrapper.errors import DecodeError, InvalidParameterError

if TYPE_CHECKING:
    from mint_wrapper.state.reader import AccountReader

logger = logging.getLogger(__name__)

TOKEN_ACCOUNT_STATE_INITIALIZED = 1


@dataclass
class MintState:
    """
    SPL token mint.

    SIZE: 82 bytes
    SERIALIZATION: COption(mint_authority) || supply || decimals ||
                   is_initialized || COption(freeze_authority)
    """
    mint_authority: Optional[Pubkey]
    supply: int = 0
    decimals: int = 0
    is_initialized: bool = True
    freeze_authority: Optional[Pubkey] = None

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_coption_pubkey(self.mint_authority)
        writer.write_u64(self.supply)
        writer.write_u8(self.decimals)
        writer.write_bool(self.is_initialized)
        writer.write_coption_pubkey(self.freeze_authority)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> Tuple["MintState", int]:
        if len(data) < MINT_ACCOUNT_SIZE:
            raise DecodeError("Mint", f"expected {MINT_ACCOUNT_SIZE} bytes, got {len(data)}")
        reader = ByteReader(data)
        try:
            mint = cls(
                mint_authority=reader.read_coption_pubkey(),
                supply=reader.read_u64(),
                decimals=reader.read_u8(),
                is_initialized=reader.read_bool(),
                freeze_authority=reader.read_coption_pubkey(),
            )
        except ValueError as e:
            raise DecodeError("Mint", str(e)) from e
        return mint, reader.offset

    def copy(self) -> "MintState":
        return replace(self)


@dataclass
class TokenAccountState:
    """
    SPL token account.

    SIZE: 165 bytes
    """
    mint: Pubkey
    owner: Pubkey
    amount: int = 0
    delegate: Optional[Pubkey] = None
    state: int = TOKEN_ACCOUNT_STATE_INITIALIZED
    is_native: Optional[int] = None
    delegated_amount: int = 0
    close_authority: Optional[Pubkey] = None

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_pubkey(self.mint)
        writer.write_pubkey(self.owner)
        writer.write_u64(self.amount)
        writer.write_coption_pubkey(self.delegate)
        writer.write_u8(self.state)
        writer.write_coption_u64(self.is_native)
        writer.write_u64(self.delegated_amount)
        writer.write_coption_pubkey(self.close_authority)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> Tuple["TokenAccountState", int]:
        if len(data) < TOKEN_ACCOUNT_SIZE:
            raise DecodeError(
                "TokenAccount", f"expected {TOKEN_ACCOUNT_SIZE} bytes, got {len(data)}"
            )
        reader = ByteReader(data)
        try:
            account = cls(
                mint=reader.read_pubkey(),
                owner=reader.read_pubkey(),
                amount=reader.read_u64(),
                delegate=reader.read_coption_pubkey(),
                state=reader.read_u8(),
                is_native=reader.read_coption_u64(),
                delegated_amount=reader.read_u64(),
                close_authority=reader.read_coption_pubkey(),
            )
        except ValueError as e:
            raise DecodeError("TokenAccount", str(e)) from e
        return account, reader.offset

    def copy(self) -> "TokenAccountState":
        return replace(self)


# ==============================================================================
# Mint Creation
# ==============================================================================

def initialize_mint2(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Optional[Pubkey],
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """
    SPL `InitializeMint2`.
    Format: 20 || decimals || mint_authority || option_tag(u8) [|| freeze_authority]
    """
    writer = ByteWriter()
    writer.write_u8(TOKEN_IX_INITIALIZE_MINT2)
    writer.write_u8(decimals)
    writer.write_pubkey(mint_authority)
    if freeze_authority is None:
        writer.write_u8(0)
    else:
        writer.write_u8(1)
        writer.write_pubkey(freeze_authority)
    return Instruction(
        token_program,
        writer.to_bytes(),
        [AccountMeta(pubkey=mint, is_signer=False, is_writable=True)],
    )


def create_init_mint_instructions(
    mint: Keypair,
    mint_authority: Pubkey,
    freeze_authority: Optional[Pubkey],
    decimals: int,
    payer: Pubkey,
    lamports: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> TransactionEnvelope:
    """
    Allocate and initialize a new mint.

    The mint keypair signs the account allocation, so it rides along as an
    extra signer of the returned envelope.
    """
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidParameterError("decimals", f"{decimals} is outside 0..{MAX_DECIMALS}")

    allocate = create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=mint.pubkey(),
            lamports=lamports,
            space=MINT_ACCOUNT_SIZE,
            owner=token_program,
        )
    )
    init = initialize_mint2(
        mint.pubkey(),
        decimals,
        mint_authority,
        freeze_authority,
        token_program,
    )
    return new_tx([allocate, init], [mint])


# ==============================================================================
# Associated Token Accounts
# ==============================================================================

@dataclass(frozen=True)
class PendingAssociatedTokenAccount:
    """Associated token account address and, if missing, the instruction creating it."""
    address: Pubkey
    instruction: Optional[Instruction] = None


def create_associated_token_account_idempotent(
    payer: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """Create the owner's associated token account; a no-op if it already exists."""
    address, _ = find_associated_token_address(owner, mint, token_program)
    return Instruction(
        ASSOCIATED_TOKEN_PROGRAM_ID,
        bytes([ATA_IX_CREATE_IDEMPOTENT]),
        [
            AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=address, is_signer=False, is_writable=True),
            AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=token_program, is_signer=False, is_writable=False),
        ],
    )


async def get_or_create_ata(
    reader: "AccountReader",
    mint: Pubkey,
    owner: Pubkey,
    payer: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> PendingAssociatedTokenAccount:
    """
    Resolve the owner's associated token account.

    One account read; the creation instruction is returned only when the
    account does not exist yet.
    """
    address, _ = find_associated_token_address(owner, mint, token_program)
    data = await reader.get_account_data(address)
    if data is not None:
        return PendingAssociatedTokenAccount(address=address)

    logger.debug(f"Associated token account {address} missing for owner {owner}")
    return PendingAssociatedTokenAccount(
        address=address,
        instruction=create_associated_token_account_idempotent(payer, owner, mint, token_program),
    )
