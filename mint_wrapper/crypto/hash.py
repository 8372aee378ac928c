"""
Mint Wrapper Hash Functions

SHA-256 and Anchor namespaced discriminators.
"""

from __future__ import annotations
import hashlib
from typing import Union

from mint_wrapper.constants import (
    DISCRIMINATOR_SIZE,
    ACCOUNT_NAMESPACE,
    INSTRUCTION_NAMESPACE,
)


def sha256(data: Union[bytes, bytearray, memoryview]) -> bytes:
    """
    SHA-256 hash function.

    Args:
        data: Input data to hash

    Returns:
        bytes: 32-byte hash output
    """
    return hashlib.sha256(data).digest()


def anchor_discriminator(namespace: str, name: str) -> bytes:
    """
    Anchor discriminator: first 8 bytes of SHA-256("<namespace>:<name>").

    Instruction names are snake_case, account names are the Rust struct name.
    """
    return sha256(f"{namespace}:{name}".encode())[:DISCRIMINATOR_SIZE]


def sighash(name: str) -> bytes:
    """Discriminator prefixed to instruction data."""
    return anchor_discriminator(INSTRUCTION_NAMESPACE, name)


def account_discriminator(name: str) -> bytes:
    """Discriminator prefixed to account data."""
    return anchor_discriminator(ACCOUNT_NAMESPACE, name)
