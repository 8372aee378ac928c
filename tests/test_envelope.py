"""
Mint Wrapper Transaction Envelope Tests
"""

from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair

from mint_wrapper.constants import MINT_WRAPPER_PROGRAM_ID
from mint_wrapper.core.envelope import TransactionEnvelope, new_tx


def make_ix(tag: int) -> Instruction:
    return Instruction(MINT_WRAPPER_PROGRAM_ID, bytes([tag]), [])


class TestCombine:
    """Tests for envelope composition."""

    def test_order_preserved(self):
        """Test [a1, a2] + [b1, b2] == [a1, a2, b1, b2]."""
        a = new_tx([make_ix(1), make_ix(2)])
        b = new_tx([make_ix(3), make_ix(4)])
        combined = a.combine(b)
        assert [bytes(ix.data)[0] for ix in combined.instructions] == [1, 2, 3, 4]

    def test_associative(self):
        """Test (a + b) + c == a + (b + c)."""
        a, b, c = new_tx([make_ix(1)]), new_tx([make_ix(2)]), new_tx([make_ix(3)])
        left = a.combine(b).combine(c)
        right = a.combine(b.combine(c))
        assert left.instructions == right.instructions

    def test_no_instruction_dedup(self):
        """Test identical instructions are both kept."""
        a = new_tx([make_ix(1)])
        assert len(a.combine(a)) == 2

    def test_signers_listed_once(self):
        """Test a shared signer appears once, first occurrence first."""
        first, second = Keypair(), Keypair()
        a = new_tx([make_ix(1)], [first])
        b = new_tx([make_ix(2)], [second, first])
        combined = a.combine(b)
        assert combined.signer_pubkeys() == [first.pubkey(), second.pubkey()]

    def test_inputs_untouched(self):
        """Test combining does not mutate either envelope."""
        a = new_tx([make_ix(1)])
        b = new_tx([make_ix(2)])
        a.combine(b)
        assert len(a) == 1
        assert len(b) == 1

    def test_combine_all(self):
        """Test folding several envelopes."""
        combined = TransactionEnvelope.combine_all(
            new_tx([make_ix(1)]), new_tx([]), new_tx([make_ix(2), make_ix(3)])
        )
        assert [bytes(ix.data)[0] for ix in combined.instructions] == [1, 2, 3]


class TestRequiredSigners:
    """Tests for signer discovery."""

    def test_required_signers(self):
        """Test signer metas are collected once in order."""
        first, second = Keypair().pubkey(), Keypair().pubkey()
        ix1 = Instruction(MINT_WRAPPER_PROGRAM_ID, b"", [
            AccountMeta(first, True, False),
            AccountMeta(second, False, True),
        ])
        ix2 = Instruction(MINT_WRAPPER_PROGRAM_ID, b"", [
            AccountMeta(second, True, True),
            AccountMeta(first, True, False),
        ])
        assert new_tx([ix1, ix2]).required_signers() == [first, second]
