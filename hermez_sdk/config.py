"""
Configuration for the Hermez SDK clients.

Configuration is read from a TOML file and may be overridden with ``HEZ_*``
environment variables. Example::

    [ethereum]
    rpc_url = "http://localhost:8545"
    call_gas_limit = 300000
    gas_price_div = 100

    [keystore]
    path = "/var/hermez/keystore"

    [contracts]
    auction = "0x..."
    rollup = "0x..."
    wdelayer = "0x..."

    [[provers]]
    url = "http://localhost:3000"
    poll_interval = 1.0
"""
import logging
import os
import pathlib
from typing import Any, Dict, List, Optional, Union

import tomli
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CALL_GAS_LIMIT = 300000
DEFAULT_GAS_PRICE_DIV = 100
DEFAULT_POLL_INTERVAL = 1.0

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "HEZ_RPC_URL": ("ethereum", "rpc_url"),
    "HEZ_CALL_GAS_LIMIT": ("ethereum", "call_gas_limit"),
    "HEZ_GAS_PRICE_DIV": ("ethereum", "gas_price_div"),
    "HEZ_KEYSTORE_PATH": ("keystore", "path"),
    "HEZ_KEYSTORE_PASSWORD": ("keystore", "password"),
}


class EthereumConfig(BaseModel):
    """Parameters of the chain node client"""
    rpc_url: Optional[str] = None
    call_gas_limit: int = Field(DEFAULT_CALL_GAS_LIMIT, gt=0)
    gas_price_div: int = Field(DEFAULT_GAS_PRICE_DIV, gt=0)


class ProverConfig(BaseModel):
    """Parameters of one proof server"""
    url: str
    poll_interval: float = Field(DEFAULT_POLL_INTERVAL, gt=0)
    timeout: float = Field(30, gt=0)
    retry_count: int = Field(0, ge=0)
    debug_inputs_dir: Optional[str] = None

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"prover url must be http(s), got: {value}")
        return value


class KeyStoreConfig(BaseModel):
    path: Optional[str] = None
    password: Optional[str] = None
    # Address of the account used for authorized calls
    address: Optional[str] = None


class ContractsConfig(BaseModel):
    auction: Optional[str] = None
    rollup: Optional[str] = None
    wdelayer: Optional[str] = None


class ClientConfig(BaseModel):
    """Top level configuration"""
    ethereum: EthereumConfig = Field(default_factory=EthereumConfig)
    keystore: KeyStoreConfig = Field(default_factory=KeyStoreConfig)
    contracts: ContractsConfig = Field(default_factory=ContractsConfig)
    provers: List[ProverConfig] = Field(default_factory=list)


def _apply_env_overrides(data: Dict[str, Any], environ) -> Dict[str, Any]:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        logger.debug(f"Config override from {env_name}")
        section_data = data.setdefault(section, {})
        if not isinstance(section_data, dict):
            raise ConfigError(f"Config section [{section}] must be a table to apply {env_name}")
        section_data[key] = value
    return data


def load_config(
    path: Optional[Union[str, pathlib.Path]] = None,
    environ: Optional[Dict[str, str]] = None
) -> ClientConfig:
    """
    Load the client configuration.

    Args:
        path: TOML file to read (defaults to the HEZ_CONFIG env var; when
            neither is set only defaults and env overrides are used)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated ClientConfig

    Raises:
        ConfigError: If the file cannot be read or parsed, or fails validation
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("HEZ_CONFIG")

    data: Dict[str, Any] = {}
    if path:
        config_path = pathlib.Path(path)
        try:
            with config_path.open("rb") as f:
                data = tomli.load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}", path=str(config_path)) from e
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}", path=str(config_path)) from e
        logger.info(f"Loaded config from {config_path}")

    data = _apply_env_overrides(data, environ)

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", path=str(path) if path else None) from e
