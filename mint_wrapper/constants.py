"""
Mint Wrapper Client Constants

Program identities, derivation seeds and account layout sizes.
All program constants defined here for single source of truth.
"""

from typing import Final

from solders.pubkey import Pubkey

# ==============================================================================
# PROGRAM IDENTITIES
# ==============================================================================

MINT_WRAPPER_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "QMWoBmAyJLAsA1Lh9ugMTw2gciTihncciphzdNzdZYV"
)
METADATA_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
)
TOKEN_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
)
ASSOCIATED_TOKEN_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
SYSTEM_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "11111111111111111111111111111111"
)
SYSVAR_INSTRUCTIONS_ID: Final[Pubkey] = Pubkey.from_string(
    "Sysvar1nstructions1111111111111111111111111"
)

# ==============================================================================
# ADDRESS DERIVATION
# ==============================================================================

PUBKEY_SIZE: Final[int] = 32
MAX_SEED_LEN: Final[int] = 32                   # Per-seed byte limit
MAX_SEEDS: Final[int] = 16                      # Including the bump seed
MAX_BUMP_SEED: Final[int] = 255                 # Search starts here, counts down

WRAPPER_SEED: Final[bytes] = b"MintWrapper"
MINTER_SEED: Final[bytes] = b"MintMinter"
METADATA_SEED: Final[bytes] = b"metadata"

# ==============================================================================
# ANCHOR ENCODING
# ==============================================================================

DISCRIMINATOR_SIZE: Final[int] = 8
ACCOUNT_NAMESPACE: Final[str] = "account"
INSTRUCTION_NAMESPACE: Final[str] = "global"

U64_MAX: Final[int] = 0xFFFFFFFFFFFFFFFF

# MintWrapper: discriminator || base || bump || hard_cap || admin ||
#              pending_admin || token_mint || num_minters ||
#              total_allowance || total_minted
MINT_WRAPPER_SIZE: Final[int] = DISCRIMINATOR_SIZE + 32 + 1 + 8 + 32 + 32 + 32 + 8 + 8 + 8

# Minter: discriminator || mint_wrapper || minter_authority || bump ||
#         index || allowance || total_minted
MINTER_SIZE: Final[int] = DISCRIMINATOR_SIZE + 32 + 32 + 1 + 8 + 8 + 8

# ==============================================================================
# SPL TOKEN
# ==============================================================================

MINT_ACCOUNT_SIZE: Final[int] = 82
TOKEN_ACCOUNT_SIZE: Final[int] = 165
DEFAULT_DECIMALS: Final[int] = 6
MAX_DECIMALS: Final[int] = 255

TOKEN_IX_INITIALIZE_MINT2: Final[int] = 20
ATA_IX_CREATE_IDEMPOTENT: Final[int] = 1
SYSTEM_IX_CREATE_ACCOUNT: Final[int] = 0

# ==============================================================================
# PROGRAM ERROR CODES
# ==============================================================================

ANCHOR_ERROR_OFFSET: Final[int] = 6000

PROGRAM_ERROR_UNAUTHORIZED: Final[int] = ANCHOR_ERROR_OFFSET + 0
PROGRAM_ERROR_HARDCAP_EXCEEDED: Final[int] = ANCHOR_ERROR_OFFSET + 1
PROGRAM_ERROR_ALLOWANCE_EXCEEDED: Final[int] = ANCHOR_ERROR_OFFSET + 2

SYSTEM_ERROR_ACCOUNT_ALREADY_IN_USE: Final[int] = 0

# ==============================================================================
# RPC
# ==============================================================================

DEFAULT_RPC_URL: Final[str] = "http://127.0.0.1:8899"
DEVNET_RPC_URL: Final[str] = "https://api.devnet.solana.com"
MAINNET_RPC_URL: Final[str] = "https://api.mainnet-beta.solana.com"
DEFAULT_COMMITMENT: Final[str] = "confirmed"
DEFAULT_RPC_TIMEOUT_SEC: Final[float] = 10.0
