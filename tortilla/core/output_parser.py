"""
Parser for solc's human-readable output

With --gas --bin --abi, solc prints one section per contract:

    <blank line>
    ======= contracts/Migrations.sol:Migrations =======
    Gas estimation:
    construction:
       41200 + 139000 = 180200
    external:
       setCompleted(uint256):	20402
       upgrade(address):	infinite
    internal:
       _restricted():	12
    Binary:
    6080604052...
    Contract JSON ABI
    [{"inputs":[],...}]

Sections without a requested output kind are left out by solc, so the scanner
is built with the same output set that was passed to solc. Labels are matched
exactly after trimming. Any mismatch raises FormatError and no contracts are
returned.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from .abi import decode_abi
from .contract import Contract, GasEstimates
from .solc import ALL_OUTPUTS, OutputKind
from ..utils.exceptions import ErrorCodes, FormatError

LOG = logging.getLogger(__name__)

HEADER_MARKER = "======="
GAS_LABEL = "Gas estimation:"
CONSTRUCTION_LABEL = "construction:"
EXTERNAL_LABEL = "external:"
INTERNAL_LABEL = "internal:"
BINARY_LABEL = "Binary:"
ABI_LABEL = "Contract JSON ABI"


class ScanState(enum.Enum):
    """Where the scanner is inside the current section"""
    START = "start"
    SEPARATOR = "separator"
    HEADER = "header"
    GAS_LABEL = "gas_label"
    CONSTRUCTION_LABEL = "construction_label"
    CONSTRUCTION_LINE = "construction_line"
    EXTERNAL_LABEL = "external_label"
    GAS_LINES = "gas_lines"
    BINARY_LABEL = "binary_label"
    BINARY_LINE = "binary_line"
    ABI_LABEL = "abi_label"
    ABI_LINE = "abi_line"
    DONE = "done"


@dataclass
class _Section:
    """Raw fragments collected for the contract being scanned"""
    name: Optional[str] = None
    bin: str = ""
    abi_text: Optional[str] = None
    construction: Optional[str] = None
    external: Dict[str, str] = field(default_factory=dict)
    internal: Dict[str, str] = field(default_factory=dict)
    collecting_internal: bool = False


def parse_header(line: str, line_number: Optional[int] = None) -> str:
    """Extract the contract name from '======= <path>:<Name> ======='"""
    stripped = line.strip()
    if not (stripped.startswith(HEADER_MARKER) and stripped.endswith(HEADER_MARKER)):
        raise FormatError(
            f"Expected a section header '{HEADER_MARKER} <path>:<Name> {HEADER_MARKER}', "
            f"found '{stripped}'",
            expected=f"{HEADER_MARKER} <path>:<Name> {HEADER_MARKER}",
            actual=stripped,
            line_number=line_number,
            code=ErrorCodes.FORMAT_BAD_HEADER,
        )

    inner = stripped.strip("= ")
    if ":" not in inner:
        raise FormatError(
            f"Section header has no '<path>:<Name>' part: '{stripped}'",
            expected="<path>:<Name>",
            actual=stripped,
            line_number=line_number,
            code=ErrorCodes.FORMAT_BAD_HEADER,
        )

    name = inner.rsplit(":", 1)[1].strip("= ")
    if not name:
        raise FormatError(
            f"Section header has an empty contract name: '{stripped}'",
            expected="<Name>",
            actual=stripped,
            line_number=line_number,
            code=ErrorCodes.FORMAT_BAD_HEADER,
        )
    return name


class OutputScanner:
    """
    Single-pass state machine over solc's captured stdout.

    Each call to advance() consumes at most one line and moves to the next
    state. run() drives it until DONE and returns the parsed contracts.

    Usage:
        scanner = OutputScanner(stdout, {OutputKind.ABI, OutputKind.BIN})
        contracts = scanner.run()
    """

    def __init__(self, text: str, outputs: Iterable[OutputKind] = ALL_OUTPUTS):
        self.outputs: FrozenSet[OutputKind] = frozenset(outputs)
        self.state = ScanState.START
        self.contracts: List[Contract] = []

        self._lines = text.splitlines()
        self._pos = 0
        self._section = _Section()
        self._plan = self._section_plan()
        self._handlers: Dict[ScanState, Callable[[], None]] = {
            ScanState.START: self._on_start,
            ScanState.SEPARATOR: self._on_separator,
            ScanState.HEADER: self._on_header,
            ScanState.GAS_LABEL: lambda: self._expect_label(GAS_LABEL),
            ScanState.CONSTRUCTION_LABEL: lambda: self._expect_label(CONSTRUCTION_LABEL),
            ScanState.CONSTRUCTION_LINE: self._on_construction_line,
            ScanState.EXTERNAL_LABEL: lambda: self._expect_label(EXTERNAL_LABEL),
            ScanState.GAS_LINES: self._on_gas_line,
            ScanState.BINARY_LABEL: lambda: self._expect_label(BINARY_LABEL),
            ScanState.BINARY_LINE: self._on_binary_line,
            ScanState.ABI_LABEL: lambda: self._expect_label(ABI_LABEL),
            ScanState.ABI_LINE: self._on_abi_line,
        }

    def _section_plan(self) -> List[ScanState]:
        plan = [ScanState.HEADER]
        if OutputKind.GAS in self.outputs:
            plan += [
                ScanState.GAS_LABEL,
                ScanState.CONSTRUCTION_LABEL,
                ScanState.CONSTRUCTION_LINE,
                ScanState.EXTERNAL_LABEL,
                ScanState.GAS_LINES,
            ]
        if OutputKind.BIN in self.outputs:
            plan += [ScanState.BINARY_LABEL, ScanState.BINARY_LINE]
        if OutputKind.ABI in self.outputs:
            plan += [ScanState.ABI_LABEL, ScanState.ABI_LINE]
        return plan

    @property
    def line_number(self) -> int:
        """1-based number of the last consumed line"""
        return self._pos

    def run(self) -> List[Contract]:
        while self.state is not ScanState.DONE:
            self.advance()
        LOG.debug(f"Parsed {len(self.contracts)} contracts from {len(self._lines)} lines")
        return self.contracts

    def advance(self) -> ScanState:
        """Process one step and return the new state"""
        if self.state is ScanState.DONE:
            return self.state
        self._handlers[self.state]()
        return self.state

    # ------------------------------------------------------------------
    # Line access
    # ------------------------------------------------------------------

    def _peek(self) -> Optional[str]:
        if self._pos < len(self._lines):
            return self._lines[self._pos]
        return None

    def _next_line(self, expected: str) -> str:
        line = self._peek()
        if line is None:
            raise FormatError(
                f"Unexpected end of compiler output, expected '{expected}'",
                expected=expected,
                actual=None,
                line_number=self._pos + 1,
                code=ErrorCodes.FORMAT_UNEXPECTED_EOF,
            )
        self._pos += 1
        return line

    def _expect_label(self, label: str) -> None:
        actual = self._next_line(label).strip()
        if actual != label:
            raise FormatError(
                f"Expected '{label}' on line {self._pos}, found '{actual}'",
                expected=label,
                actual=actual,
                line_number=self._pos,
            )
        self._next_state()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _next_state(self) -> None:
        index = self._plan.index(self.state)
        if index + 1 < len(self._plan):
            self.state = self._plan[index + 1]
        else:
            self._finish_section()

    def _finish_section(self) -> None:
        section = self._section
        abi = decode_abi(section.abi_text) if section.abi_text is not None else []
        contract = Contract(name=section.name, abi=abi, bin=section.bin)
        if OutputKind.GAS in self.outputs:
            contract.attach_gas_estimates(GasEstimates(
                construction=section.construction,
                external=section.external,
                internal=section.internal,
            ))
        self.contracts.append(contract)
        LOG.debug(f"Parsed contract {contract.name}")
        self.state = ScanState.START

    def _gas_terminator(self) -> Optional[str]:
        """Label that ends the gas rows, None when the section ends with them"""
        if OutputKind.BIN in self.outputs:
            return BINARY_LABEL
        if OutputKind.ABI in self.outputs:
            return ABI_LABEL
        return None

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _on_start(self) -> None:
        self._section = _Section()
        self.state = ScanState.SEPARATOR

    def _on_separator(self) -> None:
        if self._peek() is None:
            self.state = ScanState.DONE
            return

        line = self._next_line("")
        if line.strip():
            raise FormatError(
                f"Expected a blank line before the section header on line {self._pos}, "
                f"found '{line.strip()}'",
                expected="",
                actual=line.strip(),
                line_number=self._pos,
            )

        # Trailing blank line at the end of the output
        self.state = ScanState.DONE if self._peek() is None else ScanState.HEADER

    def _on_header(self) -> None:
        line = self._next_line(f"{HEADER_MARKER} <path>:<Name> {HEADER_MARKER}")
        self._section.name = parse_header(line, self._pos)
        self._next_state()

    def _on_construction_line(self) -> None:
        line = self._next_line("<amount> = <total>")
        total = line.rsplit("=", 1)[-1].strip()
        if not total:
            raise FormatError(
                f"Empty construction cost on line {self._pos}",
                expected="<amount> = <total>",
                actual=line.strip(),
                line_number=self._pos,
                code=ErrorCodes.FORMAT_BAD_GAS_LINE,
            )
        self._section.construction = total
        self._next_state()

    def _on_gas_line(self) -> None:
        terminator = self._gas_terminator()
        upcoming = self._peek()

        if upcoming is None:
            if terminator is not None:
                self._next_line(terminator)
            self._finish_section()
            return
        if terminator is not None and upcoming.strip() == terminator:
            self._next_state()
            return
        if terminator is None and not upcoming.strip():
            self._finish_section()
            return

        line = self._next_line("<name>(<signature>): <cost>").strip()
        if line == INTERNAL_LABEL:
            self._section.collecting_internal = True
            return

        # The fallback function is listed with an empty signature, e.g. ":\t21000"
        head, sep, cost = line.partition(":")
        name = head.split("(", 1)[0].strip()
        if not sep:
            raise FormatError(
                f"Malformed gas estimate on line {self._pos}: '{line}'",
                expected="<name>(<signature>): <cost>",
                actual=line,
                line_number=self._pos,
                code=ErrorCodes.FORMAT_BAD_GAS_LINE,
            )

        target = self._section.internal if self._section.collecting_internal else self._section.external
        target[name] = cost.strip()

    def _on_binary_line(self) -> None:
        self._section.bin = self._next_line("<bytecode>").strip()
        self._next_state()

    def _on_abi_line(self) -> None:
        self._section.abi_text = self._next_line("<JSON ABI>").strip()
        self._next_state()


def parse_output(text: str, outputs: Iterable[OutputKind] = ALL_OUTPUTS) -> List[Contract]:
    """Parse solc stdout produced with the given output flags"""
    return OutputScanner(text, outputs).run()
