"""
solc process invocation

Runs the solc command-line compiler synchronously and returns its captured
output. The invoker is a plain object passed into the Compiler so tests can
substitute a fake that returns canned text.
"""

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Sequence, Union

from ..utils.exceptions import ErrorCodes, ProcessError

LOG = logging.getLogger(__name__)

DEFAULT_SOLC = "solc"


class OutputKind(enum.Enum):
    """Output sections solc can be asked to print"""
    ABI = "abi"
    BIN = "bin"
    GAS = "gas"

    @property
    def flag(self) -> str:
        return f"--{self.value}"


ALL_OUTPUTS: FrozenSet[OutputKind] = frozenset(OutputKind)

# solc prints the sections in this order regardless of flag order
_FLAG_ORDER = (OutputKind.GAS, OutputKind.BIN, OutputKind.ABI)


def output_flags(outputs: Iterable[OutputKind]) -> list:
    """Command-line flags for a set of requested outputs, in a stable order"""
    requested = set(outputs)
    return [kind.flag for kind in _FLAG_ORDER if kind in requested]


@dataclass(frozen=True)
class CompilerInput:
    """Either inline source text (sent on stdin) or a path on disk"""
    source: Optional[str] = None
    path: Optional[Path] = None

    @classmethod
    def from_source(cls, source: str) -> "CompilerInput":
        return cls(source=source)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CompilerInput":
        return cls(path=Path(path))

    def describe(self) -> str:
        return str(self.path) if self.path is not None else "<stdin>"


@dataclass
class CompilerOutput:
    """Captured solc output"""
    stdout: str
    stderr: str = ""


class SolcInvoker:
    """
    Runs the solc executable.

    Usage:
        invoker = SolcInvoker()
        output = invoker.invoke(CompilerInput.from_path("contracts/Token.sol"),
                                {OutputKind.ABI, OutputKind.BIN})
    """

    def __init__(self, executable: str = DEFAULT_SOLC, extra_args: Sequence[str] = ()):
        self.executable = executable
        self.extra_args = list(extra_args)

    def build_command(self, compiler_input: CompilerInput, outputs: Iterable[OutputKind]) -> list:
        cmd = [self.executable, *self.extra_args, *output_flags(outputs)]
        if compiler_input.path is not None:
            cmd.append(str(compiler_input.path))
        else:
            cmd.append("-")
        return cmd

    def invoke(self, compiler_input: CompilerInput, outputs: Iterable[OutputKind]) -> CompilerOutput:
        """
        Run solc and wait for it to exit.

        Args:
            compiler_input: Source text or file to compile
            outputs: Output sections to request

        Returns:
            CompilerOutput with the captured stdout and stderr

        Raises:
            ProcessError: solc is not installed or exited with a non-zero code
        """
        cmd = self.build_command(compiler_input, outputs)
        LOG.debug(f"Running {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                input=compiler_input.source,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise ProcessError(
                f"Compiler executable not found: {self.executable}",
                command=" ".join(cmd),
                code=ErrorCodes.PROCESS_NOT_FOUND,
            ) from e

        if result.returncode != 0:
            LOG.error(f"solc failed on {compiler_input.describe()}:\n{result.stderr}")
            raise ProcessError(
                f"solc exited with code {result.returncode} compiling {compiler_input.describe()}",
                command=" ".join(cmd),
                returncode=result.returncode,
                stderr=result.stderr,
            )

        if result.stderr:
            LOG.warning(result.stderr.rstrip())

        return CompilerOutput(stdout=result.stdout, stderr=result.stderr)
