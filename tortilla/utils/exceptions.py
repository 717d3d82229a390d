"""
Exception hierarchy for Tortilla

Every error raised by the library derives from TortillaError so callers can
catch one type at the CLI boundary. Errors carry a numeric code and a details
dictionary that is serialized by to_dict() for machine-readable reporting.
"""

from typing import Any, Dict, Optional


class ErrorCodes:
    """Numeric error codes grouped by failure domain"""
    # Output parsing (1xxx)
    FORMAT_LABEL_MISMATCH = 1001
    FORMAT_BAD_HEADER = 1002
    FORMAT_UNEXPECTED_EOF = 1003
    FORMAT_BAD_GAS_LINE = 1004

    # ABI schema (2xxx)
    SCHEMA_INVALID_JSON = 2001
    SCHEMA_UNRECOGNIZED_ENTRY = 2002
    SCHEMA_MISSING_FIELD = 2003
    SCHEMA_INVALID_FIELD = 2004

    # Compiler process (3xxx)
    PROCESS_NOT_FOUND = 3001
    PROCESS_FAILED = 3002

    # Artifact output (4xxx)
    IO_WRITE_FAILED = 4001

    # Configuration (5xxx)
    CONFIG_FILE_NOT_FOUND = 5001
    CONFIG_VALIDATION_FAILED = 5002

    # Contract model (6xxx)
    CONTRACT_INVALID_STATE = 6001
    CONTRACT_INVALID_DOCUMENT = 6002


class TortillaError(Exception):
    """Base exception class for Tortilla"""

    def __init__(self, message: str, code: Optional[int] = None, **details: Any):
        self.message = message
        self.code = code
        self.details: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}
        super().__init__(message)

    def __str__(self) -> str:
        if self.code is not None:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON reporting"""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class FormatError(TortillaError):
    """The compiler output did not follow the expected line grammar"""

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        line_number: Optional[int] = None,
        code: int = ErrorCodes.FORMAT_LABEL_MISMATCH,
    ):
        self.expected = expected
        self.actual = actual
        self.line_number = line_number
        super().__init__(
            message,
            code=code,
            expected=expected,
            actual=actual,
            line_number=line_number,
        )


class SchemaError(TortillaError):
    """An ABI JSON entry could not be decoded"""

    def __init__(self, message: str, code: int = ErrorCodes.SCHEMA_INVALID_FIELD, **details: Any):
        super().__init__(message, code=code, **details)


class UnrecognizedEntryError(SchemaError):
    """ABI entry matched none of the known variant shapes"""

    def __init__(self, entry_type: Any):
        self.entry_type = entry_type
        super().__init__(
            f"Unrecognized ABI entry type: {entry_type!r}",
            code=ErrorCodes.SCHEMA_UNRECOGNIZED_ENTRY,
            entry_type=entry_type,
        )


class MissingFieldError(SchemaError):
    """A field required by the matched ABI variant is absent"""

    def __init__(self, field: str, entry_type: Optional[str] = None):
        self.field = field
        where = f" in {entry_type} entry" if entry_type else ""
        super().__init__(
            f"Missing required field '{field}'{where}",
            code=ErrorCodes.SCHEMA_MISSING_FIELD,
            field=field,
            entry_type=entry_type,
        )


class ProcessError(TortillaError):
    """The external compiler could not be run or exited with an error"""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        code: int = ErrorCodes.PROCESS_FAILED,
    ):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, code=code, command=command, returncode=returncode, stderr=stderr)


class ArtifactWriteError(TortillaError):
    """Creating the output directory or writing an artifact failed"""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message, code=ErrorCodes.IO_WRITE_FAILED, path=path)


class ConfigurationError(TortillaError):
    """Invalid or missing configuration"""

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        field: Optional[str] = None,
        code: int = ErrorCodes.CONFIG_VALIDATION_FAILED,
    ):
        super().__init__(message, code=code, config_file=config_file, field=field)


class ContractError(TortillaError):
    """Invalid operation on a contract artifact"""

    def __init__(
        self,
        message: str,
        contract_name: Optional[str] = None,
        code: int = ErrorCodes.CONTRACT_INVALID_STATE,
    ):
        super().__init__(message, code=code, contract_name=contract_name)
