"""
Unit tests for the exception hierarchy
"""

from tortilla.utils.exceptions import (
    ArtifactWriteError,
    ConfigurationError,
    ContractError,
    ErrorCodes,
    FormatError,
    MissingFieldError,
    ProcessError,
    SchemaError,
    TortillaError,
    UnrecognizedEntryError,
)


class TestExceptions:
    """Test custom exceptions"""

    def test_base_exception(self):
        """Test base TortillaError"""
        error = TortillaError("Test error", code=1001)

        assert error.message == "Test error"
        assert error.code == 1001
        assert str(error) == "[1001] Test error"

        error_dict = error.to_dict()
        assert error_dict["error"] == "TortillaError"
        assert error_dict["message"] == "Test error"
        assert error_dict["code"] == 1001
        assert error_dict["details"] == {}

    def test_without_code(self):
        """Test TortillaError without a code"""
        assert str(TortillaError("plain")) == "plain"

    def test_format_error(self):
        """Test FormatError carries the expected and actual lines"""
        error = FormatError(
            "Expected 'Binary:'",
            expected="Binary:",
            actual="Warning: unused",
            line_number=9,
        )

        assert error.code == ErrorCodes.FORMAT_LABEL_MISMATCH
        assert error.details == {"expected": "Binary:", "actual": "Warning: unused", "line_number": 9}
        assert isinstance(error, TortillaError)

    def test_schema_errors(self):
        """Test ABI schema error types"""
        missing = MissingFieldError("inputs", entry_type="constructor")
        unknown = UnrecognizedEntryError("receive")

        assert isinstance(missing, SchemaError)
        assert isinstance(unknown, SchemaError)
        assert missing.code == ErrorCodes.SCHEMA_MISSING_FIELD
        assert "constructor" in missing.message
        assert unknown.to_dict()["details"] == {"entry_type": "receive"}

    def test_process_error(self):
        """Test ProcessError with command details"""
        error = ProcessError("solc failed", command="solc --abi -", returncode=2, stderr="boom")

        assert error.returncode == 2
        assert error.details["command"] == "solc --abi -"
        assert str(error) == f"[{ErrorCodes.PROCESS_FAILED}] solc failed"

    def test_artifact_write_error(self):
        """Test ArtifactWriteError keeps the cause"""
        cause = PermissionError("denied")
        error = ArtifactWriteError("Failed to write", path="/out/A.json", cause=cause)

        assert error.cause is cause
        assert error.details == {"path": "/out/A.json"}

    def test_configuration_error(self):
        """Test ConfigurationError with file info"""
        error = ConfigurationError(
            "Invalid config",
            config_file="/path/to/tortilla.yaml",
            field="gas",
        )

        assert error.details["config_file"] == "/path/to/tortilla.yaml"
        assert error.details["field"] == "gas"

    def test_contract_error(self):
        """Test ContractError with contract name"""
        error = ContractError("No gas estimates attached", contract_name="Token")

        assert error.code == ErrorCodes.CONTRACT_INVALID_STATE
        assert error.details["contract_name"] == "Token"
