"""
Mint Wrapper Operation Builders

Wrapper, minter, metadata and token builders. Each returns an envelope for
one atomic batch.
"""

from mint_wrapper.protocol.wrapper import (
    NewWrapperConfig,
    NewWrapperAndMintConfig,
    PendingMintWrapper,
    PendingMintAndWrapper,
)
from mint_wrapper.protocol.token import (
    MintState,
    TokenAccountState,
    PendingAssociatedTokenAccount,
    get_or_create_ata,
)

__all__ = [
    # Wrapper
    "NewWrapperConfig",
    "NewWrapperAndMintConfig",
    "PendingMintWrapper",
    "PendingMintAndWrapper",
    # Token
    "MintState",
    "TokenAccountState",
    "PendingAssociatedTokenAccount",
    "get_or_create_ata",
]
