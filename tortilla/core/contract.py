"""
Contract artifact model

A Contract bundles what one solc output section describes: the contract name,
its decoded ABI, the bytecode and, when requested, the gas estimates. Networks
(deployment addresses keyed by network id) are the only part that changes
after the contract is built.

The JSON document produced by serialize() looks like:

    {
      "name": "Migrations",
      "abi": [...],
      "bin": "6080...",
      "gas_estimates": {"construction": "...", "external": {...}, "internal": {...}},
      "networks": {"1": {"address": "0x..."}}
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from web3 import Web3

from .abi import AbiEntry, Function, decode_abi_list, encode_abi
from ..utils.common import address_to_hex, to_address_bytes
from ..utils.exceptions import ArtifactWriteError, ContractError, ErrorCodes

LOG = logging.getLogger(__name__)

CONSTRUCTION_LABEL = "construction"


@dataclass
class GasEstimates:
    """Gas costs reported by solc, kept as the strings solc printed"""
    construction: str
    external: Dict[str, str] = field(default_factory=dict)
    internal: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "construction": self.construction,
            "external": dict(self.external),
            "internal": dict(self.internal),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GasEstimates":
        if not isinstance(data, dict) or "construction" not in data:
            raise ContractError(
                "Invalid gas_estimates document: 'construction' is required",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            )

        construction = data["construction"]
        external = data.get("external", {})
        internal = data.get("internal", {})
        if not (isinstance(external, dict) and isinstance(internal, dict)):
            raise ContractError(
                "Invalid gas_estimates document: 'external' and 'internal' must be objects",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            )
        costs = [construction, *external.values(), *internal.values()]
        if not all(isinstance(cost, str) for cost in costs):
            raise ContractError(
                "Invalid gas_estimates document: costs must be strings",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            )

        return cls(construction=construction, external=dict(external), internal=dict(internal))


@dataclass
class Network:
    """A deployment of the contract on one network"""
    address: bytes

    def __post_init__(self):
        self.address = to_address_bytes(self.address)

    def to_dict(self) -> Dict[str, str]:
        return {"address": address_to_hex(self.address)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Network":
        try:
            return cls(address=data["address"])
        except (KeyError, TypeError, ValueError) as e:
            raise ContractError(
                f"Invalid network document: {e}",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            ) from e


@dataclass
class Contract:
    """A compiled contract

    Attributes:
        name: Contract name taken from the solc section header
        abi: ABI entries in declaration order
        bin: Bytecode as a hex string, empty when not requested
        gas_estimates: Present only when gas output was requested
        networks: Network id -> deployment
    """
    name: str
    abi: List[AbiEntry] = field(default_factory=list)
    bin: str = ""
    gas_estimates: Optional[GasEstimates] = None
    networks: Dict[str, Network] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Contract name cannot be empty")

    def attach_gas_estimates(self, estimates: GasEstimates) -> None:
        """Attach the gas estimates parsed from the same section; only once"""
        if self.gas_estimates is not None:
            raise ContractError(
                "Gas estimates are already attached",
                contract_name=self.name,
            )
        self.gas_estimates = estimates

    def get_methods(self) -> Dict[str, Function]:
        """Map function names to their ABI entries

        Overloads share a name, so only the last one in ABI order is kept.
        """
        return {entry.name: entry for entry in self.abi if isinstance(entry, Function)}

    def add_network(self, network_id: str, address: Union[str, bytes]) -> None:
        """Register (or replace) the deployment address for a network"""
        network = Network(address=address)
        self.networks[str(network_id)] = network
        LOG.debug(f"{self.name}: network {network_id} -> {address_to_hex(network.address)}")

    def get_address(self, network_id: str) -> Optional[bytes]:
        """Return the 20-byte address registered for a network, if any"""
        network = self.networks.get(str(network_id))
        return network.address if network else None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def abi_json(self) -> List[Dict[str, Any]]:
        return encode_abi(self.abi)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "abi": self.abi_json(),
            "bin": self.bin,
        }
        if self.gas_estimates is not None:
            data["gas_estimates"] = self.gas_estimates.to_dict()
        data["networks"] = {
            network_id: network.to_dict()
            for network_id, network in self.networks.items()
        }
        return data

    def serialize(self) -> str:
        """Compact JSON document"""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def serialize_pretty(self) -> str:
        """Indented JSON document"""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contract":
        if not isinstance(data, dict):
            raise ContractError(
                "Contract document must be a JSON object",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            )
        if not data.get("name"):
            raise ContractError(
                "Contract document is missing 'name'",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            )

        gas = data.get("gas_estimates")
        networks = data.get("networks") or {}
        return cls(
            name=data["name"],
            abi=decode_abi_list(data.get("abi", [])),
            bin=data.get("bin", ""),
            gas_estimates=GasEstimates.from_dict(gas) if gas is not None else None,
            networks={
                str(network_id): Network.from_dict(network)
                for network_id, network in networks.items()
            },
        )

    @classmethod
    def from_json(cls, text: str) -> "Contract":
        """Parse a document produced by serialize() or serialize_pretty()"""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ContractError(
                f"Invalid contract JSON: {e}",
                code=ErrorCodes.CONTRACT_INVALID_DOCUMENT,
            ) from e
        return cls.from_dict(data)

    # ------------------------------------------------------------------
    # Reports and output
    # ------------------------------------------------------------------

    def gas_estimate_report(self) -> str:
        """Human readable gas table with values aligned on one column

        Example:
            construction: 140000
            external:
            upgrade:      23000
        """
        if self.gas_estimates is None:
            raise ContractError("No gas estimates attached", contract_name=self.name)

        gas = self.gas_estimates
        width = max(
            [len(CONSTRUCTION_LABEL)]
            + [len(name) for name in gas.external]
            + [len(name) for name in gas.internal]
        ) + 1

        def row(key: str, value: str) -> str:
            return f"{(key + ':').ljust(width)} {value}"

        lines = [row(CONSTRUCTION_LABEL, gas.construction)]
        for label, costs in (("external", gas.external), ("internal", gas.internal)):
            if not costs:
                continue
            lines.append(f"{label}:")
            for name in sorted(costs):
                lines.append(row(name, costs[name]))

        return "\n".join(lines)

    def write_to_dir(self, directory: Union[str, Path], pretty: bool = False) -> Path:
        """Write the contract document to <directory>/<name>.json

        Returns:
            Path of the written file
        """
        directory = Path(directory)
        output_file = directory / f"{self.name}.json"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(output_file, "w") as f:
                f.write(self.serialize_pretty() if pretty else self.serialize())
        except OSError as e:
            raise ArtifactWriteError(
                f"Failed to write {output_file}: {e}",
                path=str(output_file),
                cause=e,
            ) from e

        LOG.info(f"Wrote {self.name} to {output_file}")
        return output_file

    def web3_contract(self, web3: Web3, network_id: Optional[str] = None):
        """Build a web3 contract object from this artifact

        Without a network id the result is a contract factory that can deploy
        the bytecode. With one, it is bound to the registered address.
        """
        if network_id is None:
            return web3.eth.contract(abi=self.abi_json(), bytecode=self.bin or None)

        address = self.get_address(network_id)
        if address is None:
            raise ContractError(
                f"{self.name} has no address on network {network_id}",
                contract_name=self.name,
            )
        return web3.eth.contract(address=address_to_hex(address), abi=self.abi_json())
