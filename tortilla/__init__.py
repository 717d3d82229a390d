"""
Tortilla: a wrapper over the solc compiler

Example:
    from tortilla import Compiler

    for contract in Compiler().compile_paths(["contracts/"]):
        print(contract.serialize_pretty())
"""

from .core.abi import Constructor, Event, EventParameter, Fallback, Function, Parameter, decode_abi
from .core.compiler import Compiler
from .core.contract import Contract, GasEstimates, Network
from .core.output_parser import OutputScanner, parse_output
from .core.solc import CompilerInput, OutputKind, SolcInvoker

__version__ = "0.1.0"
