"""
Mint Wrapper Local Ledger

In-memory ledger that executes envelopes with the semantics of the deployed
programs: system account creation, SPL mint initialization, associated token
accounts, the metadata pass-through and every mint wrapper instruction.

Batches are atomic. Instructions run against a copy of the committed state,
and the copy replaces it only when every instruction succeeds.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, Optional, Sequence, Set, Tuple

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    MINT_WRAPPER_PROGRAM_ID,
    METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    MINT_WRAPPER_SIZE,
    MINTER_SIZE,
    MINT_ACCOUNT_SIZE,
    TOKEN_ACCOUNT_SIZE,
    TOKEN_IX_INITIALIZE_MINT2,
    ATA_IX_CREATE_IDEMPOTENT,
    SYSTEM_IX_CREATE_ACCOUNT,
    U64_MAX,
)
from mint_wrapper.core.accounts import MintWrapper, Minter
from mint_wrapper.core.envelope import TransactionEnvelope
from mint_wrapper.core.instructions import DecodedInstruction, decode_instruction
from mint_wrapper.core.serialization import ByteReader, ByteWriter
from mint_wrapper.crypto.hash import sha256
from mint_wrapper.crypto.pda import (
    find_mint_wrapper_address,
    find_minter_address,
    find_metadata_address,
    find_associated_token_address,
)
from mint_wrapper.errors import (
    MintWrapperError,
    UnauthorizedError,
    InsufficientAllowanceError,
    HardcapExceededError,
    AlreadyExistsError,
    AccountNotInitializedError,
    InvalidInstructionError,
)
from mint_wrapper.protocol.token import MintState, TokenAccountState

logger = logging.getLogger(__name__)

# Rent: (size + overhead) * lamports per byte-year * exemption years
ACCOUNT_STORAGE_OVERHEAD = 128
RENT_LAMPORTS_PER_BYTE_YEAR = 3480
RENT_EXEMPTION_YEARS = 2

METADATA_ACCOUNT_SIZE = 679


def rent_exempt_minimum(size: int) -> int:
    """Lamports an account of `size` bytes must hold to be rent exempt."""
    return (size + ACCOUNT_STORAGE_OVERHEAD) * RENT_LAMPORTS_PER_BYTE_YEAR * RENT_EXEMPTION_YEARS


@dataclass
class LedgerAccount:
    """One account: owning program, balance and raw data."""
    owner: Pubkey
    lamports: int
    data: bytes


@dataclass
class MetadataRecord:
    """Token metadata as kept by the metadata program."""
    mint: Pubkey
    update_authority: Pubkey
    name: str = ""
    symbol: str = ""
    uri: str = ""

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_pubkey(self.update_authority)
        writer.write_pubkey(self.mint)
        writer.write_string(self.name)
        writer.write_string(self.symbol)
        writer.write_string(self.uri)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> Tuple["MetadataRecord", int]:
        reader = ByteReader(data)
        update_authority = reader.read_pubkey()
        record = cls(
            mint=reader.read_pubkey(),
            update_authority=update_authority,
            name=reader.read_string(),
            symbol=reader.read_string(),
            uri=reader.read_string(),
        )
        return record, reader.offset


@dataclass
class LedgerState:
    """
    All accounts plus the slot counter.

    While an instruction runs, `writable` holds the addresses it marked
    writable and every create or write outside that set is rejected.
    """
    accounts: Dict[Pubkey, LedgerAccount] = field(default_factory=dict)
    slot: int = 0
    writable: Optional[Set[Pubkey]] = None

    def copy(self) -> "LedgerState":
        """Deep copy for speculative execution."""
        return LedgerState(
            accounts={address: replace(account) for address, account in self.accounts.items()},
            slot=self.slot,
        )

    def get(self, address: Pubkey) -> Optional[LedgerAccount]:
        return self.accounts.get(address)

    def require(self, name: str, address: Pubkey) -> LedgerAccount:
        account = self.accounts.get(address)
        if account is None:
            raise AccountNotInitializedError(name, address)
        return account

    def create(self, address: Pubkey, owner: Pubkey, data: bytes, lamports: Optional[int] = None) -> None:
        self._check_writable(address)
        if address in self.accounts:
            raise AlreadyExistsError(address)
        if lamports is None:
            lamports = rent_exempt_minimum(len(data))
        self.accounts[address] = LedgerAccount(owner=owner, lamports=lamports, data=data)

    def write(self, address: Pubkey, data: bytes) -> None:
        self._check_writable(address)
        self.accounts[address].data = data

    def _check_writable(self, address: Pubkey) -> None:
        if self.writable is not None and address not in self.writable:
            raise InvalidInstructionError(f"{address} is not marked writable")


class LocalLedger:
    """
    AccountReader and BatchSubmitter backed by process memory.

    Submission is at most once: a rejected batch raises the typed error and
    leaves the committed state untouched.
    """

    def __init__(
        self,
        program_id: Pubkey = MINT_WRAPPER_PROGRAM_ID,
        token_program: Pubkey = TOKEN_PROGRAM_ID,
        metadata_program: Pubkey = METADATA_PROGRAM_ID,
    ):
        self.program_id = program_id
        self.token_program = token_program
        self.metadata_program = metadata_program
        self.state = LedgerState()

        # Statistics
        self.batches_applied = 0
        self.batches_rejected = 0

        self._wrapper_handlers: Dict[str, Callable[[LedgerState, DecodedInstruction], None]] = {
            "new_wrapper": self._new_wrapper,
            "new_wrapper_v2": self._new_wrapper,
            "new_minter": self._new_minter,
            "new_minter_v2": self._new_minter,
            "minter_update": self._minter_update,
            "transfer_admin": self._transfer_admin,
            "accept_admin": self._accept_admin,
            "perform_mint": self._perform_mint,
            "create_mint_metadata": self._create_mint_metadata,
            "set_metaplex_update_authority": self._set_metaplex_update_authority,
        }

    # =========================================================================
    # AccountReader
    # =========================================================================

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        account = self.state.get(address)
        return None if account is None else account.data

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        return rent_exempt_minimum(size)

    # =========================================================================
    # BatchSubmitter
    # =========================================================================

    async def submit(
        self,
        tx: TransactionEnvelope,
        signers: Sequence[Keypair] = ()
    ) -> str:
        """
        Execute an envelope atomically.

        Args:
            tx: Envelope to execute
            signers: Keypairs signing besides the envelope's own (the wallet)

        Returns:
            Hex identifier of the executed batch

        Raises:
            MintWrapperError: The first failing instruction's error
        """
        signed = {keypair.pubkey() for keypair in list(tx.signers) + list(signers)}

        try:
            new_state = self.execute(tx.instructions, signed)
        except MintWrapperError as e:
            self.batches_rejected += 1
            logger.warning(f"Batch rejected at slot {self.state.slot}: {e}")
            raise

        batch_id = self._batch_id(new_state.slot, tx.instructions)
        self.state = new_state
        self.batches_applied += 1
        logger.info(
            f"Applied batch {batch_id[:16]} at slot {new_state.slot} "
            f"({len(tx)} instructions)"
        )
        return batch_id

    def execute(self, instructions: Iterable[Instruction], signed: Set[Pubkey]) -> LedgerState:
        """
        Run instructions against a copy of the committed state.

        Returns:
            The resulting state; the committed state is not modified
        """
        state = self.state.copy()
        for ix in instructions:
            self._check_signatures(ix, signed)
            state.writable = {meta.pubkey for meta in ix.accounts if meta.is_writable}
            self._apply(state, ix)
        state.writable = None
        state.slot += 1
        return state

    @staticmethod
    def _batch_id(slot: int, instructions: Iterable[Instruction]) -> str:
        writer = ByteWriter().write_u64(slot)
        for ix in instructions:
            writer.write_pubkey(ix.program_id)
            writer.write_raw(bytes(ix.data))
        return sha256(writer.to_bytes()).hex()

    @staticmethod
    def _check_signatures(ix: Instruction, signed: Set[Pubkey]) -> None:
        for meta in ix.accounts:
            if meta.is_signer and meta.pubkey not in signed:
                raise UnauthorizedError(f"Missing signature for {meta.pubkey}")

    def _apply(self, state: LedgerState, ix: Instruction) -> None:
        program_id = ix.program_id
        if program_id == SYSTEM_PROGRAM_ID:
            self._system_create_account(state, ix)
        elif program_id == self.token_program:
            self._token_initialize_mint2(state, ix)
        elif program_id == ASSOCIATED_TOKEN_PROGRAM_ID:
            self._ata_create_idempotent(state, ix)
        elif program_id == self.program_id:
            decoded = decode_instruction(ix)
            logger.debug(f"Executing {decoded.name}")
            self._wrapper_handlers[decoded.name](state, decoded)
        else:
            raise InvalidInstructionError(f"unknown program {program_id}")

    # =========================================================================
    # Record Access
    # =========================================================================

    def _load_wrapper(self, state: LedgerState, address: Pubkey) -> MintWrapper:
        account = state.require("MintWrapper", address)
        if account.owner != self.program_id:
            raise InvalidInstructionError(f"{address} is not owned by the mint wrapper program")
        record, _ = MintWrapper.deserialize(account.data)
        return record

    def _load_minter(self, state: LedgerState, address: Pubkey) -> Minter:
        account = state.require("Minter", address)
        if account.owner != self.program_id:
            raise InvalidInstructionError(f"{address} is not owned by the mint wrapper program")
        record, _ = Minter.deserialize(account.data)
        return record

    def _load_mint(self, state: LedgerState, address: Pubkey) -> MintState:
        account = state.require("Mint", address)
        if account.owner != self.token_program:
            raise InvalidInstructionError(f"{address} is not owned by the token program")
        mint, _ = MintState.deserialize(account.data)
        if not mint.is_initialized:
            raise AccountNotInitializedError("Mint", address)
        return mint

    def _load_token_account(self, state: LedgerState, address: Pubkey) -> TokenAccountState:
        account = state.require("TokenAccount", address)
        if account.owner != self.token_program:
            raise InvalidInstructionError(f"{address} is not owned by the token program")
        token_account, _ = TokenAccountState.deserialize(account.data)
        return token_account

    @staticmethod
    def _require_admin(wrapper: MintWrapper, admin: Pubkey) -> None:
        if wrapper.admin != admin:
            raise UnauthorizedError(f"{admin} is not the wrapper admin")

    # =========================================================================
    # System, Token and Associated Token Programs
    # =========================================================================

    def _system_create_account(self, state: LedgerState, ix: Instruction) -> None:
        reader = ByteReader(bytes(ix.data))
        try:
            tag = reader.read_u32()
            if tag != SYSTEM_IX_CREATE_ACCOUNT:
                raise InvalidInstructionError(f"unsupported system instruction {tag}")
            lamports = reader.read_u64()
            space = reader.read_u64()
            owner = reader.read_pubkey()
        except ValueError as e:
            raise InvalidInstructionError(f"create_account: {e}") from e

        if len(ix.accounts) < 2:
            raise InvalidInstructionError(f"create_account expects 2 accounts, got {len(ix.accounts)}")
        new_account = ix.accounts[1].pubkey
        if state.get(new_account) is not None:
            raise AlreadyExistsError(new_account)
        if lamports < rent_exempt_minimum(space):
            raise InvalidInstructionError(f"{new_account} would not be rent exempt")

        state.create(new_account, owner, bytes(space), lamports)

    def _token_initialize_mint2(self, state: LedgerState, ix: Instruction) -> None:
        reader = ByteReader(bytes(ix.data))
        try:
            tag = reader.read_u8()
            if tag != TOKEN_IX_INITIALIZE_MINT2:
                raise InvalidInstructionError(f"unsupported token instruction {tag}")
            decimals = reader.read_u8()
            mint_authority = reader.read_pubkey()
            freeze_authority = reader.read_pubkey() if reader.read_bool() else None
        except ValueError as e:
            raise InvalidInstructionError(f"initialize_mint2: {e}") from e

        if not ix.accounts:
            raise InvalidInstructionError("initialize_mint2 expects the mint account")
        address = ix.accounts[0].pubkey
        account = state.require("Mint", address)
        if account.owner != self.token_program or len(account.data) != MINT_ACCOUNT_SIZE:
            raise InvalidInstructionError(f"{address} is not a token mint account")
        current, _ = MintState.deserialize(account.data)
        if current.is_initialized:
            raise AlreadyExistsError(address)

        mint = MintState(
            mint_authority=mint_authority,
            decimals=decimals,
            freeze_authority=freeze_authority,
        )
        state.write(address, mint.serialize())

    def _ata_create_idempotent(self, state: LedgerState, ix: Instruction) -> None:
        if bytes(ix.data) != bytes([ATA_IX_CREATE_IDEMPOTENT]):
            raise InvalidInstructionError("unsupported associated token instruction")

        metas = list(ix.accounts)
        if len(metas) < 6:
            raise InvalidInstructionError(f"create_idempotent expects 6 accounts, got {len(metas)}")
        address, owner, mint = metas[1].pubkey, metas[2].pubkey, metas[3].pubkey
        token_program = metas[5].pubkey
        expected, _ = find_associated_token_address(owner, mint, token_program)
        if address != expected:
            raise InvalidInstructionError(f"{address} is not the associated token account of {owner}")

        if state.get(address) is not None:
            return

        self._load_mint(state, mint)
        token_account = TokenAccountState(mint=mint, owner=owner)
        state.create(address, token_program, token_account.serialize(), rent_exempt_minimum(TOKEN_ACCOUNT_SIZE))

    # =========================================================================
    # Mint Wrapper Program
    # =========================================================================

    def _new_wrapper(self, state: LedgerState, ix: DecodedInstruction) -> None:
        base = ix.key("base")
        address = ix.key("mint_wrapper")
        expected, bump = find_mint_wrapper_address(base, self.program_id)
        if address != expected:
            raise InvalidInstructionError(f"{address} is not derived from base {base}")
        if "bump" in ix.args and ix.args["bump"] != bump:
            raise InvalidInstructionError(f"bump {ix.args['bump']} does not match derived bump {bump}")
        if state.get(address) is not None:
            raise AlreadyExistsError(address)

        token_mint = ix.key("token_mint")
        mint = self._load_mint(state, token_mint)
        if mint.mint_authority != address or mint.freeze_authority != address:
            raise UnauthorizedError("Wrapper must hold both mint and freeze authority")
        if mint.supply != 0:
            raise UnauthorizedError("Mint supply must be zero when wrapped")

        wrapper = MintWrapper(
            base=base,
            bump=bump,
            hard_cap=ix.args["hard_cap"],
            admin=ix.key("admin"),
            pending_admin=None,
            token_mint=token_mint,
        )
        state.create(address, self.program_id, wrapper.serialize(), rent_exempt_minimum(MINT_WRAPPER_SIZE))

    def _new_minter(self, state: LedgerState, ix: DecodedInstruction) -> None:
        wrapper_address = ix.key("mint_wrapper")
        wrapper = self._load_wrapper(state, wrapper_address)
        self._require_admin(wrapper, ix.key("admin"))

        authority = ix.key("new_minter_authority")
        address = ix.key("minter")
        expected, bump = find_minter_address(wrapper_address, authority, self.program_id)
        if address != expected:
            raise InvalidInstructionError(f"{address} is not the minter of {authority}")
        if "bump" in ix.args and ix.args["bump"] != bump:
            raise InvalidInstructionError(f"bump {ix.args['bump']} does not match derived bump {bump}")
        if state.get(address) is not None:
            raise AlreadyExistsError(address)

        minter = Minter(
            mint_wrapper=wrapper_address,
            minter_authority=authority,
            bump=bump,
            index=wrapper.num_minters,
        )
        wrapper.num_minters += 1

        state.create(address, self.program_id, minter.serialize(), rent_exempt_minimum(MINTER_SIZE))
        state.write(wrapper_address, wrapper.serialize())

    def _minter_update(self, state: LedgerState, ix: DecodedInstruction) -> None:
        wrapper_address = ix.key("mint_wrapper")
        wrapper = self._load_wrapper(state, wrapper_address)
        self._require_admin(wrapper, ix.key("admin"))

        minter_address = ix.key("minter")
        minter = self._load_minter(state, minter_address)
        if minter.mint_wrapper != wrapper_address:
            raise UnauthorizedError(f"Minter {minter_address} belongs to another wrapper")

        allowance = ix.args["allowance"]
        total_allowance = wrapper.total_allowance - minter.allowance + allowance
        if total_allowance > U64_MAX:
            raise InvalidInstructionError("total allowance overflows u64")

        wrapper.total_allowance = total_allowance
        minter.allowance = allowance

        state.write(wrapper_address, wrapper.serialize())
        state.write(minter_address, minter.serialize())

    def _transfer_admin(self, state: LedgerState, ix: DecodedInstruction) -> None:
        wrapper_address = ix.key("mint_wrapper")
        wrapper = self._load_wrapper(state, wrapper_address)
        self._require_admin(wrapper, ix.key("admin"))

        wrapper.pending_admin = ix.key("next_admin")
        state.write(wrapper_address, wrapper.serialize())

    def _accept_admin(self, state: LedgerState, ix: DecodedInstruction) -> None:
        wrapper_address = ix.key("mint_wrapper")
        wrapper = self._load_wrapper(state, wrapper_address)
        pending_admin = ix.key("pending_admin")
        if wrapper.pending_admin is None or wrapper.pending_admin != pending_admin:
            raise UnauthorizedError(f"{pending_admin} is not the pending admin")

        wrapper.admin = pending_admin
        wrapper.pending_admin = None
        state.write(wrapper_address, wrapper.serialize())

    def _perform_mint(self, state: LedgerState, ix: DecodedInstruction) -> None:
        wrapper_address = ix.key("mint_wrapper")
        wrapper = self._load_wrapper(state, wrapper_address)

        minter_address = ix.key("minter")
        minter = self._load_minter(state, minter_address)
        authority = ix.key("minter_authority")
        if minter.mint_wrapper != wrapper_address or minter.minter_authority != authority:
            raise UnauthorizedError(f"{authority} is not the authority of minter {minter_address}")

        token_mint = ix.key("token_mint")
        if token_mint != wrapper.token_mint:
            raise UnauthorizedError(f"Mint {token_mint} is not governed by this wrapper")
        if ix.key("token_program") != self.token_program:
            raise InvalidInstructionError("unexpected token program")

        amount = ix.args["amount"]
        if amount > minter.allowance:
            raise InsufficientAllowanceError(minter.allowance, amount)
        if wrapper.total_minted + amount > wrapper.hard_cap:
            raise HardcapExceededError(wrapper.total_minted, amount, wrapper.hard_cap)

        destination_address = ix.key("destination")
        destination = self._load_token_account(state, destination_address)
        if destination.mint != token_mint:
            raise InvalidInstructionError(f"{destination_address} holds another mint")
        mint = self._load_mint(state, token_mint)

        minter.allowance -= amount
        minter.total_minted += amount
        wrapper.total_minted += amount
        wrapper.total_allowance -= amount
        mint.supply += amount
        destination.amount += amount

        state.write(wrapper_address, wrapper.serialize())
        state.write(minter_address, minter.serialize())
        state.write(token_mint, mint.serialize())
        state.write(destination_address, destination.serialize())

    def _require_metadata_address(self, ix: DecodedInstruction) -> Pubkey:
        metadata_address = ix.key("metadata_info")
        expected, _ = find_metadata_address(ix.key("token_mint"), self.metadata_program)
        if metadata_address != expected:
            raise UnauthorizedError(f"{metadata_address} is not the metadata account of the mint")
        if ix.key("metadata_program") != self.metadata_program:
            raise InvalidInstructionError("unexpected metadata program")
        return metadata_address

    def _load_governing_wrapper(self, state: LedgerState, ix: DecodedInstruction) -> MintWrapper:
        wrapper = self._load_wrapper(state, ix.key("mint_wrapper"))
        self._require_admin(wrapper, ix.key("minter_authority"))
        if ix.key("token_mint") != wrapper.token_mint:
            raise UnauthorizedError(f"Mint {ix.key('token_mint')} is not governed by this wrapper")
        return wrapper

    def _create_mint_metadata(self, state: LedgerState, ix: DecodedInstruction) -> None:
        metadata_address = self._require_metadata_address(ix)
        self._load_governing_wrapper(state, ix)

        record = MetadataRecord(
            mint=ix.key("token_mint"),
            update_authority=ix.key("mint_wrapper"),
            name=ix.args["name"],
            symbol=ix.args["symbol"],
            uri=ix.args["uri"],
        )
        state.create(
            metadata_address,
            self.metadata_program,
            record.serialize(),
            rent_exempt_minimum(METADATA_ACCOUNT_SIZE),
        )

    def _set_metaplex_update_authority(self, state: LedgerState, ix: DecodedInstruction) -> None:
        metadata_address = self._require_metadata_address(ix)
        wrapper_address = ix.key("mint_wrapper")
        self._load_wrapper(state, wrapper_address)

        # A missing metadata account is created first, owned by the wrapper.
        # Only the mint authority may create it.
        account = state.get(metadata_address)
        if account is None:
            mint = self._load_mint(state, ix.key("token_mint"))
            if mint.mint_authority != wrapper_address:
                raise UnauthorizedError("Wrapper is not the mint authority")
            record = MetadataRecord(mint=ix.key("token_mint"), update_authority=wrapper_address)
            state.create(
                metadata_address,
                self.metadata_program,
                record.serialize(),
                rent_exempt_minimum(METADATA_ACCOUNT_SIZE),
            )
        else:
            record, _ = MetadataRecord.deserialize(account.data)

        if record.update_authority != wrapper_address:
            raise UnauthorizedError("Wrapper is not the metadata update authority")

        # The update also resets name, symbol and uri.
        updated = MetadataRecord(mint=record.mint, update_authority=ix.key("new_update_authority"))
        state.write(metadata_address, updated.serialize())

    # =========================================================================
    # Inspection
    # =========================================================================

    def get_mint_wrapper(self, address: Pubkey) -> Optional[MintWrapper]:
        account = self.state.get(address)
        return None if account is None else MintWrapper.deserialize(account.data)[0]

    def get_minter(self, address: Pubkey) -> Optional[Minter]:
        account = self.state.get(address)
        return None if account is None else Minter.deserialize(account.data)[0]

    def get_mint(self, address: Pubkey) -> Optional[MintState]:
        account = self.state.get(address)
        return None if account is None else MintState.deserialize(account.data)[0]

    def get_token_account(self, address: Pubkey) -> Optional[TokenAccountState]:
        account = self.state.get(address)
        return None if account is None else TokenAccountState.deserialize(account.data)[0]

    def get_metadata(self, mint: Pubkey) -> Optional[MetadataRecord]:
        address, _ = find_metadata_address(mint, self.metadata_program)
        account = self.state.get(address)
        return None if account is None else MetadataRecord.deserialize(account.data)[0]

    def get_stats(self) -> dict:
        return {
            "slot": self.state.slot,
            "accounts": len(self.state.accounts),
            "batches_applied": self.batches_applied,
            "batches_rejected": self.batches_rejected,
        }
