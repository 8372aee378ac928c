"""
Mint Wrapper Configuration and Error Tests
"""

from mint_wrapper.config import ClientConfig
from mint_wrapper.constants import MINT_WRAPPER_PROGRAM_ID, DEVNET_RPC_URL
from mint_wrapper.errors import (
    ErrorCode,
    UnauthorizedError,
    HardcapExceededError,
    InsufficientAllowanceError,
    AlreadyExistsError,
    UnknownError,
    error_from_program_code,
)


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults_valid(self):
        """Test the default configuration validates."""
        config = ClientConfig()
        assert config.validate() == []
        assert config.programs.mint_wrapper == MINT_WRAPPER_PROGRAM_ID
        assert config.mint.decimals == 6

    def test_invalid_values(self):
        """Test invalid settings are reported."""
        config = ClientConfig()
        config.rpc.url = "ledger.local"
        config.rpc.commitment = "eventually"
        config.programs.token_program_id = "not-a-key"
        config.mint.decimals = 300

        errors = config.validate()
        assert len(errors) == 4

    def test_save_and_load(self, tmp_path):
        """Test configuration survives a file round trip."""
        config = ClientConfig.default_devnet()
        config.log.level = "DEBUG"
        path = tmp_path / "client.json"

        config.save(str(path))
        loaded = ClientConfig.load(str(path))

        assert loaded.to_dict() == config.to_dict()
        assert loaded.rpc.url == DEVNET_RPC_URL

    def test_mainnet_commitment(self):
        """Test mainnet defaults to finalized reads."""
        assert ClientConfig.default_mainnet().rpc.commitment == "finalized"


class TestProgramErrors:
    """Tests for ledger error code mapping."""

    def test_program_codes(self):
        """Test custom program codes map to typed errors."""
        assert isinstance(error_from_program_code(6000), UnauthorizedError)
        assert isinstance(error_from_program_code(6001), HardcapExceededError)
        assert isinstance(error_from_program_code(6002), InsufficientAllowanceError)

    def test_system_already_in_use(self):
        """Test the system program's in-use code maps to AlreadyExists."""
        error = error_from_program_code(0, from_system_program=True)
        assert isinstance(error, AlreadyExistsError)
        assert error.code == ErrorCode.ALREADY_EXISTS

    def test_unknown_code(self):
        """Test unmapped codes stay visible."""
        error = error_from_program_code(6999)
        assert isinstance(error, UnknownError)
        assert error.to_dict()["details"] == {"code": 6999}
