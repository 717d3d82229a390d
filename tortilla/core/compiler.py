"""
Compile Solidity sources into Contract artifacts

Each call runs solc once and parses that one output, so the ABI, bytecode and
gas estimates of a contract always come from the same compiler run.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .contract import Contract
from .output_parser import parse_output
from .solc import ALL_OUTPUTS, CompilerInput, OutputKind, SolcInvoker

LOG = logging.getLogger(__name__)


class Compiler:
    """
    Runs solc through an invoker and parses what it prints.

    Args:
        invoker: Object with an invoke(CompilerInput, outputs) method returning
            a CompilerOutput (default: SolcInvoker running "solc")
        outputs: Output kinds to request and parse
    """

    def __init__(
        self,
        invoker: Optional[SolcInvoker] = None,
        outputs: Iterable[OutputKind] = ALL_OUTPUTS,
    ):
        self.invoker = invoker or SolcInvoker()
        self.outputs = frozenset(outputs)

    def compile(self, compiler_input: CompilerInput) -> List[Contract]:
        output = self.invoker.invoke(compiler_input, self.outputs)
        contracts = parse_output(output.stdout, self.outputs)
        LOG.info(f"Compiled {len(contracts)} contracts from {compiler_input.describe()}")
        return contracts

    def compile_source(self, source: str) -> List[Contract]:
        """Compile inline Solidity source text"""
        return self.compile(CompilerInput.from_source(source))

    def compile_file(self, path: Union[str, Path]) -> List[Contract]:
        return self.compile(CompilerInput.from_path(path))

    def compile_dir(self, directory: Union[str, Path]) -> List[Contract]:
        """Compile every regular file directly inside a directory"""
        contracts = []
        for path in sorted(Path(directory).iterdir()):
            if not path.is_file():
                continue
            contracts.extend(self.compile_file(path))
        return contracts

    def compile_paths(self, paths: Iterable[Union[str, Path]]) -> List[Contract]:
        """Compile a mix of files and directories, in the given order"""
        contracts = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                contracts.extend(self.compile_dir(path))
            else:
                contracts.extend(self.compile_file(path))
        return contracts
