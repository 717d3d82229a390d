"""
ABI decoding for contracts compiled by solc

The JSON ABI is an array of untagged objects. Each object is read generically,
its "type" value selects one of the known variants (function, constructor,
fallback, event), and the variant is then decoded strictly. Two generations of
the schema are accepted without the caller saying which one it has:

- legacy: mutability expressed by the "constant" and "payable" booleans
- modern: a single "stateMutability" field, "components" for tuple types

Decoding never coerces: a missing required field raises MissingFieldError and
an object that matches no variant raises UnrecognizedEntryError.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..utils.exceptions import (
    ErrorCodes,
    MissingFieldError,
    SchemaError,
    UnrecognizedEntryError,
)

LOG = logging.getLogger(__name__)

STATE_MUTABILITIES = ("pure", "view", "nonpayable", "payable")


@dataclass
class Parameter:
    """A named, typed function or constructor parameter"""
    name: str
    type: str
    components: Optional[List["Parameter"]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.components is not None:
            data["components"] = [c.to_dict() for c in self.components]
        return data


@dataclass
class EventParameter(Parameter):
    """An event field; indexed fields are stored as log topics"""
    indexed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["indexed"] = self.indexed
        return data


class AbiEntry:
    """Base class of the four ABI entry variants"""
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass
class Function(AbiEntry):
    name: str
    inputs: List[Parameter] = field(default_factory=list)
    outputs: List[Parameter] = field(default_factory=list)
    state_mutability: str = "nonpayable"
    # Only set when the entry came from the legacy schema
    constant: Optional[bool] = None
    payable: Optional[bool] = None

    type = "function"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "name": self.name,
            "inputs": [p.to_dict() for p in self.inputs],
            "outputs": [p.to_dict() for p in self.outputs],
            "stateMutability": self.state_mutability,
        }
        if self.constant is not None:
            data["constant"] = self.constant
        if self.payable is not None:
            data["payable"] = self.payable
        return data


@dataclass
class Constructor(AbiEntry):
    inputs: List[Parameter] = field(default_factory=list)
    state_mutability: str = "nonpayable"
    payable: Optional[bool] = None

    type = "constructor"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "inputs": [p.to_dict() for p in self.inputs],
            "stateMutability": self.state_mutability,
        }
        if self.payable is not None:
            data["payable"] = self.payable
        return data


@dataclass
class Fallback(AbiEntry):
    state_mutability: str = "nonpayable"
    payable: Optional[bool] = None

    type = "fallback"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "stateMutability": self.state_mutability}
        if self.payable is not None:
            data["payable"] = self.payable
        return data


@dataclass
class Event(AbiEntry):
    name: str
    inputs: List[EventParameter] = field(default_factory=list)
    anonymous: bool = False

    type = "event"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "inputs": [p.to_dict() for p in self.inputs],
            "anonymous": self.anonymous,
        }


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

def _require(obj: Dict[str, Any], key: str, expected: type, entry_type: str) -> Any:
    if key not in obj:
        raise MissingFieldError(key, entry_type)
    return _check_type(obj[key], key, expected, entry_type)


def _optional(obj: Dict[str, Any], key: str, expected: type, entry_type: str) -> Any:
    if key not in obj or obj[key] is None:
        return None
    return _check_type(obj[key], key, expected, entry_type)


def _check_type(value: Any, key: str, expected: type, entry_type: str) -> Any:
    # bool is an int subclass in Python, but JSON keeps them apart
    if (expected is not bool and isinstance(value, bool)) or not isinstance(value, expected):
        raise SchemaError(
            f"Field '{key}' in {entry_type} entry must be {expected.__name__}, "
            f"got {type(value).__name__}",
            code=ErrorCodes.SCHEMA_INVALID_FIELD,
            field=key,
            entry_type=entry_type,
        )
    return value


def _decode_parameter(obj: Any, entry_type: str) -> Parameter:
    if not isinstance(obj, dict):
        raise SchemaError(f"Parameter in {entry_type} entry must be an object")
    components = _decode_components(obj, entry_type)
    return Parameter(
        name=_require(obj, "name", str, entry_type),
        type=_require(obj, "type", str, entry_type),
        components=components,
    )


def _decode_event_parameter(obj: Any, entry_type: str) -> EventParameter:
    if not isinstance(obj, dict):
        raise SchemaError(f"Parameter in {entry_type} entry must be an object")
    return EventParameter(
        name=_require(obj, "name", str, entry_type),
        type=_require(obj, "type", str, entry_type),
        components=_decode_components(obj, entry_type),
        indexed=_require(obj, "indexed", bool, entry_type),
    )


def _decode_components(obj: Dict[str, Any], entry_type: str) -> Optional[List[Parameter]]:
    components = _optional(obj, "components", list, entry_type)
    if components is None:
        return None
    return [_decode_parameter(c, entry_type) for c in components]


def _decode_parameters(obj: Dict[str, Any], key: str, entry_type: str) -> List[Parameter]:
    return [_decode_parameter(p, entry_type) for p in _require(obj, key, list, entry_type)]


def _decode_mutability(obj: Dict[str, Any], entry_type: str) -> Tuple[str, Optional[bool], Optional[bool]]:
    """Return (stateMutability, constant, payable) for either schema generation"""
    constant = _optional(obj, "constant", bool, entry_type)
    payable = _optional(obj, "payable", bool, entry_type)
    mutability = _optional(obj, "stateMutability", str, entry_type)

    if mutability is None:
        if constant is None and payable is None:
            raise MissingFieldError("stateMutability", entry_type)
        if payable:
            mutability = "payable"
        elif constant:
            mutability = "view"
        else:
            mutability = "nonpayable"
    elif mutability not in STATE_MUTABILITIES:
        raise SchemaError(
            f"Invalid stateMutability {mutability!r} in {entry_type} entry",
            code=ErrorCodes.SCHEMA_INVALID_FIELD,
            field="stateMutability",
            entry_type=entry_type,
        )

    return mutability, constant, payable


# ---------------------------------------------------------------------------
# Variant decoders
# ---------------------------------------------------------------------------

def _decode_function(obj: Dict[str, Any]) -> Function:
    mutability, constant, payable = _decode_mutability(obj, "function")
    return Function(
        name=_require(obj, "name", str, "function"),
        inputs=_decode_parameters(obj, "inputs", "function"),
        outputs=_decode_parameters(obj, "outputs", "function"),
        state_mutability=mutability,
        constant=constant,
        payable=payable,
    )


def _decode_constructor(obj: Dict[str, Any]) -> Constructor:
    mutability, _, payable = _decode_mutability(obj, "constructor")
    return Constructor(
        inputs=_decode_parameters(obj, "inputs", "constructor"),
        state_mutability=mutability,
        payable=payable,
    )


def _decode_fallback(obj: Dict[str, Any]) -> Fallback:
    mutability, _, payable = _decode_mutability(obj, "fallback")
    return Fallback(state_mutability=mutability, payable=payable)


def _decode_event(obj: Dict[str, Any]) -> Event:
    return Event(
        name=_require(obj, "name", str, "event"),
        inputs=[
            _decode_event_parameter(p, "event")
            for p in _require(obj, "inputs", list, "event")
        ],
        anonymous=_require(obj, "anonymous", bool, "event"),
    )


# Tried in this order
VARIANT_DECODERS: List[Tuple[str, Callable[[Dict[str, Any]], AbiEntry]]] = [
    ("function", _decode_function),
    ("constructor", _decode_constructor),
    ("fallback", _decode_fallback),
    ("event", _decode_event),
]


def decode_entry(obj: Any) -> AbiEntry:
    """Decode one ABI JSON object into its typed variant

    Raises:
        UnrecognizedEntryError: the object matches no known variant
        MissingFieldError: a field required by the matched variant is absent
        SchemaError: a field has the wrong JSON type or value
    """
    if not isinstance(obj, dict):
        raise UnrecognizedEntryError(type(obj).__name__)

    # An entry without "type" is a function
    entry_type = obj.get("type", "function")
    for variant, decoder in VARIANT_DECODERS:
        if entry_type == variant:
            return decoder(obj)

    raise UnrecognizedEntryError(entry_type)


def decode_abi(text: str) -> List[AbiEntry]:
    """Decode a JSON ABI array, preserving entry order

    Args:
        text: The raw JSON array text emitted by solc

    Returns:
        Ordered list of AbiEntry values
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(
            f"Invalid ABI JSON: {e}",
            code=ErrorCodes.SCHEMA_INVALID_JSON,
        ) from e

    return decode_abi_list(data)


def decode_abi_list(data: Any) -> List[AbiEntry]:
    """Decode an already parsed ABI array"""
    if not isinstance(data, list):
        raise SchemaError(
            f"ABI must be a JSON array, got {type(data).__name__}",
            code=ErrorCodes.SCHEMA_INVALID_JSON,
        )

    entries = [decode_entry(obj) for obj in data]
    LOG.debug(f"Decoded {len(entries)} ABI entries")
    return entries


def encode_abi(entries: List[AbiEntry]) -> List[Dict[str, Any]]:
    """Encode entries back into ABI JSON objects"""
    return [entry.to_dict() for entry in entries]
