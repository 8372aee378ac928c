"""
Mint Wrapper Hashing and Address Derivation
"""

from mint_wrapper.crypto.hash import sha256, sighash, account_discriminator
from mint_wrapper.crypto.pda import (
    find_program_address,
    find_mint_wrapper_address,
    find_minter_address,
    find_metadata_address,
    find_associated_token_address,
)

__all__ = [
    # Hash functions
    "sha256",
    "sighash",
    "account_discriminator",
    # Program-derived addresses
    "find_program_address",
    "find_mint_wrapper_address",
    "find_minter_address",
    "find_metadata_address",
    "find_associated_token_address",
]
