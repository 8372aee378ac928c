"""
Mint Wrapper Client Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from solders.pubkey import Pubkey

from mint_wrapper.constants import (
    DEFAULT_RPC_URL,
    DEVNET_RPC_URL,
    MAINNET_RPC_URL,
    DEFAULT_COMMITMENT,
    DEFAULT_RPC_TIMEOUT_SEC,
    DEFAULT_DECIMALS,
    MAX_DECIMALS,
    MINT_WRAPPER_PROGRAM_ID,
    METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

logger = logging.getLogger(__name__)

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")


@dataclass
class RpcConfig:
    """Ledger JSON-RPC endpoint."""
    url: str = DEFAULT_RPC_URL
    commitment: str = DEFAULT_COMMITMENT
    timeout_sec: float = DEFAULT_RPC_TIMEOUT_SEC


@dataclass
class ProgramConfig:
    """Program identities, base58-encoded."""
    mint_wrapper_program_id: str = str(MINT_WRAPPER_PROGRAM_ID)
    metadata_program_id: str = str(METADATA_PROGRAM_ID)
    token_program_id: str = str(TOKEN_PROGRAM_ID)

    @property
    def mint_wrapper(self) -> Pubkey:
        return Pubkey.from_string(self.mint_wrapper_program_id)

    @property
    def token_program(self) -> Pubkey:
        return Pubkey.from_string(self.token_program_id)

    @property
    def metadata_program(self) -> Pubkey:
        return Pubkey.from_string(self.metadata_program_id)


@dataclass
class MintDefaults:
    """Defaults for mints created alongside a wrapper."""
    decimals: int = DEFAULT_DECIMALS


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class ClientConfig:
    """
    Complete client configuration.

    All settings for talking to a mint wrapper deployment.
    """
    # Identity
    name: str = "mint-wrapper-client"
    network: str = "localnet"

    # Sub-configurations
    rpc: RpcConfig = field(default_factory=RpcConfig)
    programs: ProgramConfig = field(default_factory=ProgramConfig)
    mint: MintDefaults = field(default_factory=MintDefaults)
    log: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.rpc.url.startswith(("http://", "https://")):
            errors.append(f"Invalid RPC url: {self.rpc.url}")

        if self.rpc.commitment not in VALID_COMMITMENTS:
            errors.append(f"Invalid commitment: {self.rpc.commitment}")

        if self.rpc.timeout_sec <= 0:
            errors.append("timeout_sec must be positive")

        for name in ("mint_wrapper_program_id", "metadata_program_id", "token_program_id"):
            value = getattr(self.programs, name)
            try:
                Pubkey.from_string(value)
            except Exception:  # noqa: BLE001
                errors.append(f"Invalid {name}: {value}")

        if not 0 <= self.mint.decimals <= MAX_DECIMALS:
            errors.append(f"Invalid decimals: {self.mint.decimals}")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "ClientConfig":
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls(
            name=data.get("name", "mint-wrapper-client"),
            network=data.get("network", "localnet"),
        )

        if "rpc" in data:
            config.rpc = RpcConfig(**data["rpc"])

        if "programs" in data:
            config.programs = ProgramConfig(**data["programs"])

        if "mint" in data:
            config.mint = MintDefaults(**data["mint"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    @classmethod
    def default_devnet(cls) -> "ClientConfig":
        """Create default devnet configuration."""
        config = cls(name="mint-wrapper-devnet", network="devnet")
        config.rpc.url = DEVNET_RPC_URL
        return config

    @classmethod
    def default_mainnet(cls) -> "ClientConfig":
        """Create default mainnet configuration."""
        config = cls(name="mint-wrapper-mainnet", network="mainnet-beta")
        config.rpc.url = MAINNET_RPC_URL
        config.rpc.commitment = "finalized"
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "name": self.name,
            "network": self.network,
            "rpc": asdict(self.rpc),
            "programs": asdict(self.programs),
            "mint": asdict(self.mint),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
