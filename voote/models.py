"""Data models for Voote."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract loaded from a Hardhat-format artifact file."""
    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    deployed_bytecode: str = "0x"
    path: Optional[Path] = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of one confirmed contract-creation transaction."""
    contract_name: str
    address: str
    transaction_hash: str
    network: str
    receipt: Mapping[str, Any] = field(default_factory=dict, repr=False)
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


@dataclass(frozen=True)
class VerificationResult:
    """Final status reported by the block explorer for a verification request."""
    address: str
    guid: Optional[str]
    status: str
    message: str
