"""
Mint Wrapper Ledger Access

Reader and submitter interfaces, the JSON-RPC reader and the local ledger.
"""

from mint_wrapper.state.reader import AccountReader, BatchSubmitter, RpcAccountReader
from mint_wrapper.state.ledger import LocalLedger, LedgerState, MetadataRecord

__all__ = [
    # Interfaces
    "AccountReader",
    "BatchSubmitter",
    # Implementations
    "RpcAccountReader",
    "LocalLedger",
    "LedgerState",
    "MetadataRecord",
]
