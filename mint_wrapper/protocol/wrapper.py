"""
Mint Wrapper Lifecycle

Wrapper creation (legacy and current forms, with or without a fresh mint)
and the two-step admin transfer. Builders are pure: they derive addresses
and return envelopes; the ledger enforces authority at execution.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from mint_wrapper.constants import TOKEN_PROGRAM_ID, DEFAULT_DECIMALS
from mint_wrapper.core import instructions
from mint_wrapper.core.envelope import TransactionEnvelope, new_tx
from mint_wrapper.core.instructions import check_u64
from mint_wrapper.crypto.pda import find_mint_wrapper_address
from mint_wrapper.errors import InvalidParameterError
from mint_wrapper.protocol.token import create_init_mint_instructions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewWrapperConfig:
    """
    Parameters of wrapper creation.

    Defaults:
        base: a freshly generated keypair (signs the creation once)
        token_program: the SPL token program
        admin: None, meaning the submitting wallet
        payer: None, meaning the submitting wallet
    """
    hard_cap: int
    token_mint: Pubkey
    base: Keypair = field(default_factory=Keypair)
    token_program: Pubkey = TOKEN_PROGRAM_ID
    admin: Optional[Pubkey] = None
    payer: Optional[Pubkey] = None

    def resolve(self, wallet: Pubkey) -> "NewWrapperConfig":
        """Fill unset admin/payer with the wallet."""
        return replace(
            self,
            admin=self.admin if self.admin is not None else wallet,
            payer=self.payer if self.payer is not None else wallet,
        )


@dataclass(frozen=True)
class NewWrapperAndMintConfig:
    """
    Parameters of wrapper creation together with its mint.

    Defaults:
        mint: a freshly generated keypair for the new mint
        decimals: the caller's default, 6 unless configured otherwise
        base, token_program, admin, payer: as in NewWrapperConfig
    """
    hard_cap: int
    mint: Keypair = field(default_factory=Keypair)
    decimals: Optional[int] = None
    base: Keypair = field(default_factory=Keypair)
    token_program: Pubkey = TOKEN_PROGRAM_ID
    admin: Optional[Pubkey] = None
    payer: Optional[Pubkey] = None

    def resolve(
        self,
        wallet: Pubkey,
        decimals: int = DEFAULT_DECIMALS,
    ) -> "NewWrapperAndMintConfig":
        return replace(
            self,
            decimals=self.decimals if self.decimals is not None else decimals,
            admin=self.admin if self.admin is not None else wallet,
            payer=self.payer if self.payer is not None else wallet,
        )

    def wrapper_config(self) -> NewWrapperConfig:
        return NewWrapperConfig(
            hard_cap=self.hard_cap,
            token_mint=self.mint.pubkey(),
            base=self.base,
            token_program=self.token_program,
            admin=self.admin,
            payer=self.payer,
        )


@dataclass(frozen=True)
class PendingMintWrapper:
    """Wrapper address and the envelope that creates it."""
    mint_wrapper: Pubkey
    tx: TransactionEnvelope


@dataclass(frozen=True)
class PendingMintAndWrapper:
    """Wrapper address, new mint address and the envelope creating both."""
    mint_wrapper: Pubkey
    mint: Pubkey
    tx: TransactionEnvelope


def _require_resolved(config) -> None:
    if config.admin is None or config.payer is None:
        raise InvalidParameterError("config", "admin and payer must be resolved before building")
    if getattr(config, "decimals", 0) is None:
        raise InvalidParameterError("config", "decimals must be resolved before building")


def new_wrapper_v1(program_id: Pubkey, config: NewWrapperConfig) -> PendingMintWrapper:
    """
    Create a wrapper with the legacy instruction that carries the bump.

    Older program deployments only understand this form.
    """
    _require_resolved(config)
    check_u64("hard_cap", config.hard_cap)

    base = config.base.pubkey()
    mint_wrapper, bump = find_mint_wrapper_address(base, program_id)
    ix = instructions.new_wrapper(
        program_id,
        bump,
        config.hard_cap,
        base=base,
        mint_wrapper=mint_wrapper,
        admin=config.admin,
        token_mint=config.token_mint,
        token_program=config.token_program,
        payer=config.payer,
    )
    logger.debug(f"new_wrapper (v1) {mint_wrapper} hard_cap={config.hard_cap}")
    return PendingMintWrapper(mint_wrapper=mint_wrapper, tx=new_tx([ix], [config.base]))


def new_wrapper(program_id: Pubkey, config: NewWrapperConfig) -> PendingMintWrapper:
    """Create a wrapper; the program recomputes the bump itself."""
    _require_resolved(config)
    check_u64("hard_cap", config.hard_cap)

    base = config.base.pubkey()
    mint_wrapper, _ = find_mint_wrapper_address(base, program_id)
    ix = instructions.new_wrapper_v2(
        program_id,
        config.hard_cap,
        base=base,
        mint_wrapper=mint_wrapper,
        admin=config.admin,
        token_mint=config.token_mint,
        token_program=config.token_program,
        payer=config.payer,
    )
    logger.debug(f"new_wrapper_v2 {mint_wrapper} hard_cap={config.hard_cap}")
    return PendingMintWrapper(mint_wrapper=mint_wrapper, tx=new_tx([ix], [config.base]))


def _with_mint(
    pending: PendingMintWrapper,
    config: NewWrapperAndMintConfig,
    mint_rent_lamports: int,
) -> PendingMintAndWrapper:
    # Mint creation goes first so the wrapper holds both authorities from
    # the moment the mint exists.
    init_mint = create_init_mint_instructions(
        mint=config.mint,
        mint_authority=pending.mint_wrapper,
        freeze_authority=pending.mint_wrapper,
        decimals=config.decimals,
        payer=config.payer,
        lamports=mint_rent_lamports,
        token_program=config.token_program,
    )
    return PendingMintAndWrapper(
        mint_wrapper=pending.mint_wrapper,
        mint=config.mint.pubkey(),
        tx=init_mint.combine(pending.tx),
    )


def new_wrapper_and_mint_v1(
    program_id: Pubkey,
    config: NewWrapperAndMintConfig,
    mint_rent_lamports: int,
) -> PendingMintAndWrapper:
    _require_resolved(config)
    pending = new_wrapper_v1(program_id, config.wrapper_config())
    return _with_mint(pending, config, mint_rent_lamports)


def new_wrapper_and_mint(
    program_id: Pubkey,
    config: NewWrapperAndMintConfig,
    mint_rent_lamports: int,
) -> PendingMintAndWrapper:
    """Create a mint owned by a new wrapper, both in one atomic batch."""
    _require_resolved(config)
    pending = new_wrapper(program_id, config.wrapper_config())
    return _with_mint(pending, config, mint_rent_lamports)


def transfer_admin(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    admin: Pubkey,
    next_admin: Pubkey,
) -> TransactionEnvelope:
    """
    Propose `next_admin`. The admin stays in place until the proposed
    identity calls accept_admin.
    """
    return new_tx([instructions.transfer_admin(program_id, mint_wrapper, admin, next_admin)])


def accept_admin(
    program_id: Pubkey,
    mint_wrapper: Pubkey,
    pending_admin: Pubkey,
) -> TransactionEnvelope:
    """Claim a proposed admin role; must be signed by the pending admin."""
    return new_tx([instructions.accept_admin(program_id, mint_wrapper, pending_admin)])
