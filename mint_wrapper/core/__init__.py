"""
Mint Wrapper Core Types

Account records, instruction codec and transaction envelopes.
"""

from mint_wrapper.core.accounts import (
    MintWrapper,
    Minter,
    decode_mint_wrapper,
    decode_minter,
)
from mint_wrapper.core.envelope import TransactionEnvelope, new_tx
from mint_wrapper.core.instructions import DecodedInstruction, decode_instruction

__all__ = [
    # Accounts
    "MintWrapper",
    "Minter",
    "decode_mint_wrapper",
    "decode_minter",
    # Envelopes
    "TransactionEnvelope",
    "new_tx",
    # Instructions
    "DecodedInstruction",
    "decode_instruction",
]
