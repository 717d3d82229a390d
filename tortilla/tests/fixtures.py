"""
Canned solc output and test doubles shared by the unit tests
"""

import json
from typing import Iterable, List, Optional

from tortilla.core.solc import CompilerInput, CompilerOutput, OutputKind

MIGRATIONS_BIN = (
    "608060405234801561001057600080fd5b50336000806101000a81548173ffffffffffffffffffff"
    "ffffffffffffffffffff021916908373ffffffffffffffffffffffffffffffffffffffff160217905550"
)

MIGRATIONS_ABI = [
    {
        "constant": False,
        "inputs": [{"name": "new_address", "type": "address"}],
        "name": "upgrade",
        "outputs": [],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "last_completed_migration",
        "outputs": [{"name": "", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "owner",
        "outputs": [{"name": "", "type": "address"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [{"name": "completed", "type": "uint256"}],
        "name": "setCompleted",
        "outputs": [],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
]

TOKEN_ABI = [
    {
        "inputs": [{"internalType": "uint256", "name": "supply", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "from", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "to", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "value", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {"stateMutability": "payable", "type": "fallback"},
]


def solc_section(
    name: str,
    abi: Optional[list] = None,
    bin: Optional[str] = None,
    construction: Optional[str] = None,
    external: Iterable[str] = (),
    internal: Optional[Iterable[str]] = None,
    path: str = "<stdin>",
) -> List[str]:
    """Lines of one contract section as solc prints them"""
    lines = ["", f"======= {path}:{name} ======="]
    if construction is not None:
        lines += ["Gas estimation:", "construction:", f"   {construction}", "external:"]
        lines += [f"   {row}" for row in external]
        if internal is not None:
            lines.append("internal:")
            lines += [f"   {row}" for row in internal]
    if bin is not None:
        lines += ["Binary:", bin]
    if abi is not None:
        lines += ["Contract JSON ABI", json.dumps(abi, separators=(",", ":"))]
    return lines


def solc_output(*sections: List[str]) -> str:
    return "\n".join(line for section in sections for line in section) + "\n"


class FakeInvoker:
    """Returns canned output and records every call"""

    def __init__(self, stdout: str = "", stderr: str = "", outputs_by_path: Optional[dict] = None):
        self.stdout = stdout
        self.stderr = stderr
        self.outputs_by_path = outputs_by_path or {}
        self.calls = []

    def invoke(self, compiler_input: CompilerInput, outputs: Iterable[OutputKind]) -> CompilerOutput:
        self.calls.append((compiler_input, frozenset(outputs)))
        if compiler_input.path is not None and compiler_input.path.name in self.outputs_by_path:
            return CompilerOutput(stdout=self.outputs_by_path[compiler_input.path.name])
        return CompilerOutput(stdout=self.stdout, stderr=self.stderr)
