"""Lookup of Hardhat-format build artifacts."""

import json
from pathlib import Path
from typing import Any, Dict, List

from voote.errors import ArtifactNotFound
from voote.models import ContractArtifact

BUILD_INFO_DIR = "build-info"
DEBUG_SUFFIX = ".dbg.json"


def _candidate_files(artifacts_dir: Path) -> List[Path]:
    files = []
    for path in artifacts_dir.rglob("*.json"):
        relative = path.relative_to(artifacts_dir)
        if relative.parts[0] == BUILD_INFO_DIR or path.name.endswith(DEBUG_SUFFIX):
            continue
        files.append(path)
    return sorted(files)


def _split_name(name: str) -> tuple[str | None, str]:
    """Split ``contracts/Voote.sol:Voote`` into its source and contract parts."""
    if ":" in name:
        source, contract = name.rsplit(":", 1)
        return source, contract
    return None, name


def load_artifact(path: Path) -> ContractArtifact:
    """
    Load a single artifact file.

    Raises:
        ArtifactNotFound: If the file is unreadable or lacks abi/bytecode
    """
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ArtifactNotFound(f"Cannot read artifact {path}: {e}") from e

    try:
        return ContractArtifact(
            contract_name=data["contractName"],
            source_name=data["sourceName"],
            abi=data["abi"],
            bytecode=data["bytecode"],
            deployed_bytecode=data.get("deployedBytecode", "0x"),
            path=Path(path),
        )
    except (KeyError, TypeError) as e:
        raise ArtifactNotFound(f"Malformed artifact {path}: missing {e}") from e


def list_artifacts(artifacts_dir: Path) -> List[str]:
    """List fully qualified names of all artifacts under a directory."""
    artifacts_dir = Path(artifacts_dir)
    if not artifacts_dir.is_dir():
        return []
    return sorted(load_artifact(path).fully_qualified_name for path in _candidate_files(artifacts_dir))


def resolve_artifact(name: str, artifacts_dir: Path) -> ContractArtifact:
    """
    Find the deployable artifact for a contract.

    Args:
        name: Bare contract name ("Voote") or fully qualified
            name ("contracts/Voote.sol:Voote")
        artifacts_dir: Root of the compiled artifacts

    Returns:
        The matching ContractArtifact

    Raises:
        ArtifactNotFound: If the name is unknown, ambiguous, not yet
            compiled, or refers to an abstract contract or interface
    """
    artifacts_dir = Path(artifacts_dir)
    if not artifacts_dir.is_dir():
        raise ArtifactNotFound(
            f"Artifact for contract {name!r} not found: {artifacts_dir} does not exist. "
            "Run 'voote compile' first."
        )

    source, contract = _split_name(name)
    matches = [
        artifact
        for artifact in (load_artifact(path) for path in _candidate_files(artifacts_dir) if path.stem == contract)
        if artifact.contract_name == contract and (source is None or artifact.source_name == source)
    ]

    if not matches:
        raise ArtifactNotFound(
            f"Artifact for contract {name!r} not found in {artifacts_dir}. "
            "Check the name or run 'voote compile'."
        )
    if len(matches) > 1:
        candidates = "\n".join(f"  * {artifact.fully_qualified_name}" for artifact in matches)
        raise ArtifactNotFound(
            f"There are multiple artifacts for contract {name!r}, "
            f"use a fully qualified name instead:\n{candidates}"
        )

    artifact = matches[0]
    if artifact.bytecode in ("", "0x"):
        raise ArtifactNotFound(
            f"{artifact.fully_qualified_name} has no bytecode; "
            "it is an abstract contract or interface and cannot be deployed."
        )
    return artifact


def load_build_info(artifact: ContractArtifact) -> Dict[str, Any]:
    """
    Load the compiler build info that produced an artifact.

    The artifact's .dbg.json names the build-info file relative to itself.

    Raises:
        ArtifactNotFound: If the debug file or build info is missing
    """
    if artifact.path is None:
        raise ArtifactNotFound(f"{artifact.fully_qualified_name} was not loaded from disk")

    debug_path = artifact.path.with_name(artifact.path.stem + DEBUG_SUFFIX)
    try:
        debug = json.loads(debug_path.read_text())
        build_info_path = (debug_path.parent / debug["buildInfo"]).resolve()
        return json.loads(build_info_path.read_text())
    except (OSError, KeyError, json.JSONDecodeError) as e:
        raise ArtifactNotFound(
            f"Build info for {artifact.fully_qualified_name} not found: {e}. "
            "Run 'voote compile' again."
        ) from e
