"""
Build configuration

Settings come from three layers, later ones winning:

1. an optional YAML file (tortilla.yaml)
2. TORTILLA_* environment variables
3. command-line flags

Example tortilla.yaml:

    inputs:
      - contracts/
    output: build/contracts
    pretty: true
    gas: false
    solc: /usr/local/bin/solc
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import ConfigurationError, ErrorCodes
from ..core.solc import DEFAULT_SOLC, OutputKind

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "tortilla.yaml"
ENV_PREFIX = "TORTILLA_"

# Output value that prints artifacts to stdout instead of writing files
STDOUT_OUTPUT = "-"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class BuildConfig:
    """What to compile and where the artifacts go"""
    inputs: List[Path] = field(default_factory=list)
    watch: bool = False
    output: str = ""
    pretty: bool = False
    gas: bool = False
    solc: str = DEFAULT_SOLC
    log_level: str = "INFO"

    @property
    def outputs(self) -> frozenset:
        """Output kinds to request from solc"""
        kinds = {OutputKind.ABI, OutputKind.BIN}
        if self.gas:
            kinds.add(OutputKind.GAS)
        return frozenset(kinds)

    @property
    def prints_to_stdout(self) -> bool:
        return self.output == STDOUT_OUTPUT


_FIELD_TYPES = {
    "inputs": list,
    "watch": bool,
    "output": str,
    "pretty": bool,
    "gas": bool,
    "solc": str,
    "log_level": str,
}


def _get_env_override(key: str, default: Any = None) -> Any:
    """Read TORTILLA_<KEY>, parsing JSON literals like true/false"""
    env_value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
    if env_value is None:
        return default
    try:
        return json.loads(env_value)
    except json.JSONDecodeError:
        return env_value


def validate_config(data: Dict[str, Any], config_file: Optional[str] = None) -> Dict[str, Any]:
    """Check keys and value types of a raw configuration mapping"""
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration must be a mapping",
            config_file=config_file,
        )

    for key, value in data.items():
        if key not in _FIELD_TYPES:
            raise ConfigurationError(
                f"Unknown configuration key '{key}'",
                config_file=config_file,
                field=key,
            )
        expected = _FIELD_TYPES[key]
        if not isinstance(value, expected):
            raise ConfigurationError(
                f"'{key}' must be {expected.__name__}, got {type(value).__name__}",
                config_file=config_file,
                field=key,
            )

    if "log_level" in data and data["log_level"].upper() not in LOG_LEVELS:
        raise ConfigurationError(
            f"'log_level' must be one of {', '.join(LOG_LEVELS)}, got '{data['log_level']}'",
            config_file=config_file,
            field="log_level",
        )

    if "inputs" in data and not all(isinstance(i, str) for i in data["inputs"]):
        raise ConfigurationError(
            "'inputs' must be a list of paths",
            config_file=config_file,
            field="inputs",
        )
    return data


def load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
    """
    Load and validate a YAML configuration file.

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    config_file = Path(config_file)
    if not config_file.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_file}",
            config_file=str(config_file),
            code=ErrorCodes.CONFIG_FILE_NOT_FOUND,
        )

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file {config_file}: {e}",
            config_file=str(config_file),
        ) from e

    LOG.debug(f"Loaded configuration from {config_file}")
    return validate_config(data, str(config_file))


def apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay TORTILLA_* environment variables on a configuration mapping"""
    result = dict(data)
    for key in ("output", "solc", "log_level"):
        value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if value is not None:
            result[key] = value
    for key in ("pretty", "gas"):
        value = _get_env_override(key, result.get(key))
        if value is not None:
            result[key] = value
    return validate_config(result, "environment")


def build_config(
    config_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> BuildConfig:
    """
    Assemble a BuildConfig from file, environment and explicit overrides.

    Args:
        config_file: YAML file to read; when None, tortilla.yaml in the
            working directory is used if it exists
        **overrides: Values from the command line; None means "not given"

    Returns:
        BuildConfig
    """
    data: Dict[str, Any] = {}
    if config_file is not None:
        data = load_config_file(config_file)
    elif Path(DEFAULT_CONFIG_FILE).exists():
        data = load_config_file(DEFAULT_CONFIG_FILE)

    data = apply_env_overrides(data)

    known = {f.name for f in fields(BuildConfig)}
    for key, value in overrides.items():
        if key not in known:
            raise ConfigurationError(f"Unknown configuration key '{key}'", field=key)
        if value is not None:
            data[key] = value

    if "inputs" in data:
        data["inputs"] = [Path(p) for p in data["inputs"]]
    return replace(BuildConfig(), **data)
