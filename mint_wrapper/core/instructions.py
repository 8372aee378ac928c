"""
Mint Wrapper Instruction Codec

Instruction data is the 8-byte Anchor sighash of the snake_case instruction
name followed by the Borsh-encoded arguments. Account lists follow the
program's account struct declaration order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    DISCRIMINATOR_SIZE,
    U64_MAX,
    SYSTEM_PROGRAM_ID,
    METADATA_PROGRAM_ID,
    SYSVAR_INSTRUCTIONS_ID,
)
from mint_wrapper.core.serialization import ByteReader, ByteWriter
from mint_wrapper.crypto.hash import sighash
from mint_wrapper.errors import InvalidParameterError, InvalidInstructionError

# (name, is_signer, is_writable) per instruction, in declaration order.
INSTRUCTION_ACCOUNTS: Dict[str, List[Tuple[str, bool, bool]]] = {
    "new_wrapper": [
        ("base", True, False),
        ("mint_wrapper", False, True),
        ("admin", False, False),
        ("token_mint", False, False),
        ("token_program", False, False),
        ("payer", True, True),
        ("system_program", False, False),
    ],
    "new_minter": [
        ("mint_wrapper", False, True),
        ("admin", True, False),
        ("new_minter_authority", False, False),
        ("minter", False, True),
        ("payer", True, True),
        ("system_program", False, False),
    ],
    "minter_update": [
        ("mint_wrapper", False, True),
        ("admin", True, False),
        ("minter", False, True),
    ],
    "transfer_admin": [
        ("mint_wrapper", False, True),
        ("admin", True, False),
        ("next_admin", False, False),
    ],
    "accept_admin": [
        ("mint_wrapper", False, True),
        ("pending_admin", True, False),
    ],
    "perform_mint": [
        ("mint_wrapper", False, True),
        ("minter_authority", True, False),
        ("token_mint", False, True),
        ("destination", False, True),
        ("minter", False, True),
        ("token_program", False, False),
    ],
    "create_mint_metadata": [
        ("mint_wrapper", False, False),
        ("minter_authority", True, True),
        ("token_mint", False, False),
        ("metadata_program", False, False),
        ("metadata_info", False, True),
        ("system_program", False, False),
    ],
    "set_metaplex_update_authority": [
        ("mint_wrapper", False, True),
        ("minter_authority", True, False),
        ("token_mint", False, True),
        ("metadata_program", False, False),
        ("metadata_info", False, True),
        ("new_update_authority", False, True),
        ("system_program", False, False),
        ("sysvar_instructions", False, False),
    ],
}
INSTRUCTION_ACCOUNTS["new_wrapper_v2"] = INSTRUCTION_ACCOUNTS["new_wrapper"]
INSTRUCTION_ACCOUNTS["new_minter_v2"] = INSTRUCTION_ACCOUNTS["new_minter"]

INSTRUCTION_BY_SIGHASH: Dict[bytes, str] = {
    sighash(name): name for name in INSTRUCTION_ACCOUNTS
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Instruction name, decoded arguments and named accounts."""
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    accounts: Dict[str, AccountMeta] = field(default_factory=dict)

    def key(self, account: str) -> Pubkey:
        return self.accounts[account].pubkey


def check_u64(param: str, value: int) -> int:
    """Reject values that do not fit an on-ledger u64."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidParameterError(param, f"expected an integer, got {type(value).__name__}")
    if not 0 <= value <= U64_MAX:
        raise InvalidParameterError(param, f"{value} is outside the u64 range")
    return value


def _build(program_id: Pubkey, name: str, args: bytes, keys: Dict[str, Pubkey]) -> Instruction:
    accounts = [
        AccountMeta(pubkey=keys[account], is_signer=signer, is_writable=writable)
        for account, signer, writable in INSTRUCTION_ACCOUNTS[name]
    ]
    return Instruction(program_id, sighash(name) + args, accounts)


# ==============================================================================
# Wrapper Instructions
# ==============================================================================

def new_wrapper(
    program_id: Pubkey,
    bump: int,
    hard_cap: int,
    base: Pubkey,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    token_mint: Pubkey,
    token_program: Pubkey,
    payer: Pubkey,
) -> Instruction:
    """Legacy wrapper creation: the caller supplies the bump."""
    args = ByteWriter().write_u8(bump).write_u64(check_u64("hard_cap", hard_cap)).to_bytes()
    return _build(program_id, "new_wrapper", args, {
        "base": base,
        "mint_wrapper": mint_wrapper,
        "admin": admin,
        "token_mint": token_mint,
        "token_program": token_program,
        "payer": payer,
        "system_program": SYSTEM_PROGRAM_ID,
    })


def new_wrapper_v2(
    program_id: Pubkey,
    hard_cap: int,
    base: Pubkey,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    token_mint: Pubkey,
    token_program: Pubkey,
    payer: Pubkey,
) -> Instruction:
    """Wrapper creation where the program recomputes the bump."""
    args = ByteWriter().write_u64(check_u64("hard_cap", hard_cap)).to_bytes()
    return _build(program_id, "new_wrapper_v2", args, {
        "base": base,
        "mint_wrapper": mint_wrapper,
        "admin": admin,
        "token_mint": token_mint,
        "token_program": token_program,
        "payer": payer,
        "system_program": SYSTEM_PROGRAM_ID,
    })


def transfer_admin(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    next_admin: Pubkey,
) -> Instruction:
    return _build(program_id, "transfer_admin", b"", {
        "mint_wrapper": mint_wrapper,
        "admin": admin,
        "next_admin": next_admin,
    })


def accept_admin(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    pending_admin: Pubkey,
) -> Instruction:
    return _build(program_id, "accept_admin", b"", {
        "mint_wrapper": mint_wrapper,
        "pending_admin": pending_admin,
    })


# ==============================================================================
# Minter Instructions
# ==============================================================================

def new_minter(
    program_id: Pubkey,
    bump: int,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    new_minter_authority: Pubkey,
    minter: Pubkey,
    payer: Pubkey,
) -> Instruction:
    """Legacy minter creation: the caller supplies the bump."""
    args = ByteWriter().write_u8(bump).to_bytes()
    return _build(program_id, "new_minter", args, {
        "mint_wrapper": mint_wrapper,
        "admin": admin,
        "new_minter_authority": new_minter_authority,
        "minter": minter,
        "payer": payer,
        "system_program": SYSTEM_PROGRAM_ID,
    })


def new_minter_v2(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    new_minter_authority: Pubkey,
    minter: Pubkey,
    payer: Pubkey,
) -> Instruction:
    return _build(program_id, "new_minter_v2", b"", {
        "mint_wrapper": mint_wrapper,
        "admin": admin,
        "new_minter_authority": new_minter_authority,
        "minter": minter,
        "payer": payer,
        "system_program": SYSTEM_PROGRAM_ID,
    })


def minter_update(
    program_id: Pubkey,
    allowance: int,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    minter: Pubkey,
) -> Instruction:
    args = ByteWriter().write_u64(check_u64("allowance", allowance)).to_bytes()
    return _build(program_id, "minter_update", args, {
        "mint_wrapper": mint_wrapper,
        "admin": admin,
        "minter": minter,
    })


def perform_mint(
    program_id: Pubkey,
    amount: int,
    mint_wrapper: Pubkey,
    minter_authority: Pubkey,
    token_mint: Pubkey,
    destination: Pubkey,
    minter: Pubkey,
    token_program: Pubkey,
) -> Instruction:
    args = ByteWriter().write_u64(check_u64("amount", amount)).to_bytes()
    return _build(program_id, "perform_mint", args, {
        "mint_wrapper": mint_wrapper,
        "minter_authority": minter_authority,
        "token_mint": token_mint,
        "destination": destination,
        "minter": minter,
        "token_program": token_program,
    })


# ==============================================================================
# Metadata Instructions
# ==============================================================================

def create_mint_metadata(
    program_id: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    mint_wrapper: Pubkey,
    minter_authority: Pubkey,
    token_mint: Pubkey,
    metadata_info: Pubkey,
    metadata_program: Pubkey = METADATA_PROGRAM_ID,
) -> Instruction:
    args = ByteWriter().write_string(name).write_string(symbol).write_string(uri).to_bytes()
    return _build(program_id, "create_mint_metadata", args, {
        "mint_wrapper": mint_wrapper,
        "minter_authority": minter_authority,
        "token_mint": token_mint,
        "metadata_program": metadata_program,
        "metadata_info": metadata_info,
        "system_program": SYSTEM_PROGRAM_ID,
    })


def set_metaplex_update_authority(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    minter_authority: Pubkey,
    token_mint: Pubkey,
    metadata_info: Pubkey,
    new_update_authority: Pubkey,
    metadata_program: Pubkey = METADATA_PROGRAM_ID,
) -> Instruction:
    return _build(program_id, "set_metaplex_update_authority", b"", {
        "mint_wrapper": mint_wrapper,
        "minter_authority": minter_authority,
        "token_mint": token_mint,
        "metadata_program": metadata_program,
        "metadata_info": metadata_info,
        "new_update_authority": new_update_authority,
        "system_program": SYSTEM_PROGRAM_ID,
        "sysvar_instructions": SYSVAR_INSTRUCTIONS_ID,
    })


# ==============================================================================
# Decoding
# ==============================================================================

def _decode_args(name: str, reader: ByteReader) -> Dict[str, Any]:
    if name == "new_wrapper":
        return {"bump": reader.read_u8(), "hard_cap": reader.read_u64()}
    if name == "new_wrapper_v2":
        return {"hard_cap": reader.read_u64()}
    if name == "new_minter":
        return {"bump": reader.read_u8()}
    if name == "minter_update":
        return {"allowance": reader.read_u64()}
    if name == "perform_mint":
        return {"amount": reader.read_u64()}
    if name == "create_mint_metadata":
        return {
            "name": reader.read_string(),
            "symbol": reader.read_string(),
            "uri": reader.read_string(),
        }
    return {}


def decode_instruction(ix: Instruction) -> DecodedInstruction:
    """
    Decode a mint wrapper instruction back into name, arguments and accounts.

    Raises:
        InvalidInstructionError: Unknown discriminator, bad arguments or a
            short account list
    """
    data = bytes(ix.data)
    name = INSTRUCTION_BY_SIGHASH.get(data[:DISCRIMINATOR_SIZE])
    if name is None:
        raise InvalidInstructionError(
            f"unknown discriminator {data[:DISCRIMINATOR_SIZE].hex()}"
        )

    reader = ByteReader(data)
    reader.offset = DISCRIMINATOR_SIZE
    try:
        args = _decode_args(name, reader)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidInstructionError(f"{name}: {e}") from e

    layout = INSTRUCTION_ACCOUNTS[name]
    metas = list(ix.accounts)
    if len(metas) < len(layout):
        raise InvalidInstructionError(
            f"{name}: expected {len(layout)} accounts, got {len(metas)}"
        )
    accounts = {account: meta for (account, _, _), meta in zip(layout, metas)}

    return DecodedInstruction(name=name, args=args, accounts=accounts)
