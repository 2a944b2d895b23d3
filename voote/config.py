"""
Configuration module for Voote.
Builds the toolchain configuration (compiler version, network profile and
block explorer credential) from environment variables.
Supports a .env file in the working directory.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from dotenv import load_dotenv
from eth_account import Account

from voote import utils
from voote.errors import ConfigurationError

# Load environment variables from .env file if it exists
load_dotenv()

SOLIDITY_VERSION = "0.8.25"
DEFAULT_NETWORK = "sepolia"
DEFAULT_CONTRACT = "Voote"

RPC_URL_VAR = "RPC_URL"
PRIVATE_KEY_VAR = "PRIVATE_KEY"
API_KEY_VAR = "POLYGON_SCAN_API_KEY"
REQUIRED_VARIABLES: Tuple[str, ...] = (RPC_URL_VAR, PRIVATE_KEY_VAR, API_KEY_VAR)

# Etherscan v2 serves every supported chain from one endpoint, keyed by chainid
ETHERSCAN_API_URL = "https://api.etherscan.io/v2/api"

# Chain IDs known to the block explorer; transactions use the node's own chain ID
CHAIN_IDS: Dict[str, int] = {
    "sepolia": 11155111,
}

RPC_SCHEMES = ("http", "https", "ws", "wss")


def get_env(key: str, default: str) -> str:
    """Get environment variable with fallback to default."""
    return os.getenv(key, default)


@dataclass(frozen=True)
class NetworkProfile:
    """A named network endpoint and the keys allowed to sign on it."""
    name: str
    rpc_url: str
    accounts: Tuple[str, ...]
    chain_id: Optional[int] = None

    @property
    def signing_key(self) -> str:
        return self.accounts[0]

    def __repr__(self) -> str:
        return (
            f"NetworkProfile(name={self.name!r}, rpc_url={self.rpc_url!r}, "
            f"accounts=<{len(self.accounts)} redacted>, chain_id={self.chain_id!r})"
        )


@dataclass(frozen=True)
class VerificationConfig:
    """Block explorer credential used for source verification."""
    api_key: str = field(repr=False)
    api_url: str = ETHERSCAN_API_URL


@dataclass(frozen=True)
class ProjectPaths:
    """Directories the compiler reads from and writes to."""
    root: Path
    sources: Path
    artifacts: Path

    @classmethod
    def from_root(cls, root: Path) -> "ProjectPaths":
        root = Path(root)
        return cls(root=root, sources=root / "contracts", artifacts=root / "artifacts")


@dataclass(frozen=True)
class ToolchainConfig:
    """Immutable configuration shared by the compiler, deployer and verifier."""
    solidity_version: str
    networks: Mapping[str, NetworkProfile]
    etherscan: VerificationConfig
    paths: ProjectPaths
    default_network: str = DEFAULT_NETWORK

    def network(self, name: Optional[str] = None) -> NetworkProfile:
        """
        Get the network profile registered under a name.

        Args:
            name: Network name (default: the configured default network)

        Returns:
            The matching NetworkProfile

        Raises:
            ConfigurationError: If no profile has that name
        """
        name = name or self.default_network
        profile = self.networks.get(name)
        if profile is None:
            known = ", ".join(sorted(self.networks)) or "none"
            raise ConfigurationError(f"Unknown network {name!r} (configured: {known})")
        return profile


def _read_required(environ: Mapping[str, str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    missing: List[str] = []
    for key in REQUIRED_VARIABLES:
        value = (environ.get(key) or "").strip()
        if value:
            values[key] = value
        else:
            missing.append(key)

    if missing:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(missing)}. "
            "Set them in the environment or in a .env file.",
            missing=missing,
        )
    return values


def validate_rpc_url(rpc_url: str) -> str:
    """Check that an RPC endpoint is an absolute http(s) or ws(s) URL."""
    parsed = urlparse(rpc_url)
    if parsed.scheme.lower() not in RPC_SCHEMES or not parsed.netloc:
        raise ConfigurationError(
            f"{RPC_URL_VAR} must be an http(s) or ws(s) URL, got {rpc_url!r}"
        )
    return rpc_url


def validate_private_key(private_key: str) -> str:
    """
    Normalize a hex private key to its 0x-prefixed form.

    The key value never appears in the raised error.

    Raises:
        ConfigurationError: If the key is not 32 bytes of hex or lies
            outside the secp256k1 key range
    """
    clean = private_key[2:] if private_key.lower().startswith("0x") else private_key
    try:
        key_bytes = bytes.fromhex(clean)
    except ValueError:
        raise ConfigurationError(f"{PRIVATE_KEY_VAR} is not valid hex") from None

    if len(key_bytes) != 32:
        raise ConfigurationError(
            f"{PRIVATE_KEY_VAR} must be 32 bytes (64 hex characters), got {len(key_bytes)} bytes"
        )
    try:
        Account.from_key(key_bytes)
    except (ValueError, TypeError):
        raise ConfigurationError(f"{PRIVATE_KEY_VAR} is not a valid secp256k1 key") from None
    return "0x" + clean.lower()


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    root: Optional[Path] = None,
) -> ToolchainConfig:
    """
    Build the toolchain configuration from environment variables.

    All required variables are checked before anything else, so a single
    error names every missing one.

    Args:
        environ: Variables to read (default: os.environ)
        root: Project root holding contracts/ and artifacts/ (default: cwd)

    Returns:
        A read-only ToolchainConfig

    Raises:
        ConfigurationError: If a variable is missing or malformed
    """
    if environ is None:
        environ = os.environ

    values = _read_required(environ)
    rpc_url = validate_rpc_url(values[RPC_URL_VAR])
    private_key = validate_private_key(values[PRIVATE_KEY_VAR])

    sepolia = NetworkProfile(
        name=DEFAULT_NETWORK,
        rpc_url=rpc_url,
        accounts=(private_key,),
    )

    return ToolchainConfig(
        solidity_version=SOLIDITY_VERSION,
        networks=MappingProxyType({sepolia.name: sepolia}),
        etherscan=VerificationConfig(
            api_key=values[API_KEY_VAR],
            api_url=get_env("ETHERSCAN_API_URL", ETHERSCAN_API_URL),
        ),
        paths=ProjectPaths.from_root(root if root is not None else Path.cwd()),
        default_network=DEFAULT_NETWORK,
    )


def describe_config(config: ToolchainConfig) -> Dict[str, object]:
    """Return a display-safe view of the configuration with secrets redacted."""
    networks = {
        name: {
            "url": profile.rpc_url,
            "chain_id": profile.chain_id if profile.chain_id is not None else "auto",
            "accounts": ", ".join(utils.redact(key) for key in profile.accounts),
        }
        for name, profile in config.networks.items()
    }
    return {
        "solidity": config.solidity_version,
        "default_network": config.default_network,
        "networks": networks,
        "etherscan": {
            "api_url": config.etherscan.api_url,
            "api_key": utils.redact(config.etherscan.api_key),
        },
        "paths": {
            "sources": str(config.paths.sources),
            "artifacts": str(config.paths.artifacts),
        },
    }


def list_networks(config: ToolchainConfig) -> list[str]:
    """List all configured network names."""
    return list(config.networks.keys())
