"""
Mint Wrapper Client

Capped-supply token minting authorization: address derivation, instruction
building and account decoding for the mint wrapper program.
"""

__version__ = "0.1.0"
__author__ = "Mint Wrapper Contributors"

from mint_wrapper.constants import MINT_WRAPPER_PROGRAM_ID, METADATA_PROGRAM_ID
from mint_wrapper.client import MintWrapperClient
from mint_wrapper.errors import MintWrapperError, ErrorCode

__all__ = [
    "MINT_WRAPPER_PROGRAM_ID",
    "METADATA_PROGRAM_ID",
    "MintWrapperClient",
    "MintWrapperError",
    "ErrorCode",
    "__version__",
]
