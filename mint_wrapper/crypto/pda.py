"""
Mint Wrapper Address Derivation

Program-derived addresses (PDAs). A PDA is an address derived from seeds,
a bump byte and the owning program id that is NOT a valid ed25519 point.
No private key can exist for it, so only the owning program can sign for
the address. Candidates are computed by solders; this module only runs the
bump search and checks seed limits.

The named helpers are pure and memoized: the same inputs always yield the
same (address, bump) pair.
"""

from __future__ import annotations
import logging
from functools import lru_cache
from typing import Sequence, Tuple

from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    MAX_SEED_LEN,
    MAX_SEEDS,
    MAX_BUMP_SEED,
    WRAPPER_SEED,
    MINTER_SEED,
    METADATA_SEED,
    METADATA_PROGRAM_ID,
    MINT_WRAPPER_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
)
from mint_wrapper.errors import DerivationExhaustedError, InvalidSeedsError

logger = logging.getLogger(__name__)


def _validate_seeds(seeds: Sequence[bytes]) -> None:
    # The bump occupies one seed slot.
    if len(seeds) >= MAX_SEEDS:
        raise InvalidSeedsError(f"{len(seeds)} seeds, at most {MAX_SEEDS - 1} allowed")
    for index, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LEN:
            raise InvalidSeedsError(
                f"seed {index} is {len(seed)} bytes, max {MAX_SEED_LEN}"
            )


def _create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    # Raises ValueError when the candidate lands on the curve.
    return Pubkey.create_program_address(seeds, program_id)


def find_program_address(
    seeds: Sequence[bytes],
    program_id: Pubkey
) -> Tuple[Pubkey, int]:
    """
    Search bump seeds from 255 down to 0 for an off-curve address.

    Args:
        seeds: Seed byte strings (without bump)
        program_id: Owning program

    Returns:
        (address, bump)

    Raises:
        InvalidSeedsError: If a seed is too long or there are too many
        DerivationExhaustedError: If every bump lands on the curve
    """
    seeds = [bytes(seed) for seed in seeds]
    _validate_seeds(seeds)

    for bump in range(MAX_BUMP_SEED, -1, -1):
        try:
            address = _create_program_address(seeds + [bytes([bump])], program_id)
        except ValueError:
            continue
        return address, bump

    raise DerivationExhaustedError(program_id)


@lru_cache(maxsize=4096)
def find_mint_wrapper_address(
    base: Pubkey,
    program_id: Pubkey = MINT_WRAPPER_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    """Seeds: ["MintWrapper", base]."""
    address, bump = find_program_address([WRAPPER_SEED, bytes(base)], program_id)
    logger.debug(f"Derived mint wrapper {address} (bump={bump}) for base {base}")
    return address, bump


@lru_cache(maxsize=4096)
def find_minter_address(
    wrapper: Pubkey,
    authority: Pubkey,
    program_id: Pubkey = MINT_WRAPPER_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    """Seeds: ["MintMinter", wrapper, authority]."""
    address, bump = find_program_address(
        [MINTER_SEED, bytes(wrapper), bytes(authority)],
        program_id
    )
    logger.debug(f"Derived minter {address} (bump={bump}) for authority {authority}")
    return address, bump


@lru_cache(maxsize=4096)
def find_metadata_address(
    mint: Pubkey,
    metadata_program: Pubkey = METADATA_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    """Seeds: ["metadata", metadata_program, mint], owned by the metadata program."""
    return find_program_address(
        [METADATA_SEED, bytes(metadata_program), bytes(mint)],
        metadata_program
    )


@lru_cache(maxsize=4096)
def find_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID
) -> Tuple[Pubkey, int]:
    """Seeds: [owner, token_program, mint], owned by the associated token program."""
    return find_program_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID
    )
