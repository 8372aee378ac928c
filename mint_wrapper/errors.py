"""
Mint Wrapper Client Error Handling

All error codes and exception classes.
"""

from enum import IntEnum
from typing import Optional, Any

from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    PROGRAM_ERROR_UNAUTHORIZED,
    PROGRAM_ERROR_HARDCAP_EXCEEDED,
    PROGRAM_ERROR_ALLOWANCE_EXCEEDED,
    SYSTEM_ERROR_ACCOUNT_ALREADY_IN_USE,
)


class ErrorCode(IntEnum):
    """Client error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001

    # 2xxx - Address derivation errors
    DERIVATION_EXHAUSTED = 2001
    INVALID_SEEDS = 2002

    # 3xxx - Decoding errors
    DECODE_ERROR = 3001

    # 4xxx - Ledger execution errors
    UNAUTHORIZED = 4001
    INSUFFICIENT_ALLOWANCE = 4002
    HARDCAP_EXCEEDED = 4003
    ALREADY_EXISTS = 4004
    ACCOUNT_NOT_INITIALIZED = 4005
    INVALID_INSTRUCTION = 4006

    # 5xxx - Transport errors
    RPC_ERROR = 5001


class MintWrapperError(Exception):
    """Base exception for all mint wrapper client errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class UnknownError(MintWrapperError):
    def __init__(self, message: str = "Unknown error occurred", details: Any = None):
        super().__init__(ErrorCode.UNKNOWN_ERROR, message, details)


class InvalidParameterError(MintWrapperError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


# ==============================================================================
# Derivation Errors (2xxx)
# ==============================================================================

class DerivationExhaustedError(MintWrapperError):
    def __init__(self, program_id: Pubkey):
        super().__init__(
            ErrorCode.DERIVATION_EXHAUSTED,
            f"No viable bump seed found for program {program_id}",
            {"program_id": str(program_id)}
        )


class InvalidSeedsError(MintWrapperError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.INVALID_SEEDS,
            f"Invalid seeds: {reason}",
            {"reason": reason}
        )


# ==============================================================================
# Decode Errors (3xxx)
# ==============================================================================

class DecodeError(MintWrapperError):
    def __init__(self, record: str, reason: str):
        super().__init__(
            ErrorCode.DECODE_ERROR,
            f"Cannot decode {record}: {reason}",
            {"record": record, "reason": reason}
        )


# ==============================================================================
# Ledger Errors (4xxx)
# ==============================================================================

class UnauthorizedError(MintWrapperError):
    def __init__(self, reason: str = "You are not authorized to perform this action."):
        super().__init__(ErrorCode.UNAUTHORIZED, reason)


class InsufficientAllowanceError(MintWrapperError):
    def __init__(self, allowance: Optional[int] = None, amount: Optional[int] = None):
        if allowance is None or amount is None:
            super().__init__(
                ErrorCode.INSUFFICIENT_ALLOWANCE,
                "Minter allowance exceeded"
            )
        else:
            super().__init__(
                ErrorCode.INSUFFICIENT_ALLOWANCE,
                f"Minter allowance exceeded: {amount} > {allowance}",
                {"allowance": allowance, "amount": amount}
            )


class HardcapExceededError(MintWrapperError):
    def __init__(
        self,
        total_minted: Optional[int] = None,
        amount: Optional[int] = None,
        hard_cap: Optional[int] = None
    ):
        if total_minted is None or amount is None or hard_cap is None:
            super().__init__(ErrorCode.HARDCAP_EXCEEDED, "Cannot mint over hard cap")
        else:
            super().__init__(
                ErrorCode.HARDCAP_EXCEEDED,
                f"Cannot mint over hard cap: {total_minted} + {amount} > {hard_cap}",
                {"total_minted": total_minted, "amount": amount, "hard_cap": hard_cap}
            )


class AlreadyExistsError(MintWrapperError):
    """
    Creation targeted an address that is already initialized.

    Resubmitting a create batch that already landed raises this; callers
    retrying a create should read it as success.
    """

    def __init__(self, address: Optional[Pubkey] = None):
        if address is None:
            super().__init__(ErrorCode.ALREADY_EXISTS, "Account already in use")
        else:
            super().__init__(
                ErrorCode.ALREADY_EXISTS,
                f"Account already in use: {address}",
                {"address": str(address)}
            )


class AccountNotInitializedError(MintWrapperError):
    def __init__(self, name: str, address: Pubkey):
        super().__init__(
            ErrorCode.ACCOUNT_NOT_INITIALIZED,
            f"{name} account {address} is not initialized",
            {"name": name, "address": str(address)}
        )


class InvalidInstructionError(MintWrapperError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.INVALID_INSTRUCTION,
            f"Invalid instruction: {reason}",
            {"reason": reason}
        )


# ==============================================================================
# Transport Errors (5xxx)
# ==============================================================================

class RpcError(MintWrapperError):
    def __init__(self, method: str, message: str, rpc_code: Optional[int] = None):
        details = {"method": method}
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        super().__init__(
            ErrorCode.RPC_ERROR,
            f"RPC {method} failed: {message}",
            details
        )


def error_from_program_code(code: int, from_system_program: bool = False) -> MintWrapperError:
    """
    Map a custom program error code reported by the ledger to a typed error.

    The system program reports its own small codes; `AccountAlreadyInUse`
    is the one surfaced when an `init` targets an existing address.
    """
    if from_system_program:
        if code == SYSTEM_ERROR_ACCOUNT_ALREADY_IN_USE:
            return AlreadyExistsError()
        return UnknownError(f"System program error {code}", {"code": code})

    if code == PROGRAM_ERROR_UNAUTHORIZED:
        return UnauthorizedError()
    if code == PROGRAM_ERROR_HARDCAP_EXCEEDED:
        return HardcapExceededError()
    if code == PROGRAM_ERROR_ALLOWANCE_EXCEEDED:
        return InsufficientAllowanceError()
    return UnknownError(f"Program error {code}", {"code": code})
