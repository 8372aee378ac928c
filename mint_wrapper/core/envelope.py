"""
Mint Wrapper Transaction Envelopes

An envelope is an ordered list of instructions plus the extra keypairs that
must sign alongside the submitting wallet. The ledger executes an envelope
atomically: every instruction lands or none does.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class TransactionEnvelope:
    """Ordered, atomically-submitted instruction batch."""
    instructions: List[Instruction] = field(default_factory=list)
    signers: List[Keypair] = field(default_factory=list)

    def combine(self, other: "TransactionEnvelope") -> "TransactionEnvelope":
        """
        Append `other` after this envelope.

        Instructions keep their order and are never deduplicated; a signer
        appearing in both envelopes is listed once.
        """
        signers = list(self.signers)
        seen = {signer.pubkey() for signer in signers}
        for signer in other.signers:
            if signer.pubkey() not in seen:
                seen.add(signer.pubkey())
                signers.append(signer)
        return TransactionEnvelope(
            instructions=list(self.instructions) + list(other.instructions),
            signers=signers,
        )

    @classmethod
    def combine_all(cls, *envelopes: "TransactionEnvelope") -> "TransactionEnvelope":
        result = cls()
        for envelope in envelopes:
            result = result.combine(envelope)
        return result

    def signer_pubkeys(self) -> List[Pubkey]:
        return [signer.pubkey() for signer in self.signers]

    def required_signers(self) -> List[Pubkey]:
        """Every account flagged as signer across all instructions, in order."""
        required: List[Pubkey] = []
        for ix in self.instructions:
            for meta in ix.accounts:
                if meta.is_signer and meta.pubkey not in required:
                    required.append(meta.pubkey)
        return required

    def __len__(self) -> int:
        return len(self.instructions)


def new_tx(
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair] = ()
) -> TransactionEnvelope:
    """Build an envelope from instructions and extra signers."""
    return TransactionEnvelope(instructions=list(instructions), signers=list(signers))
