"""Compile project sources into Hardhat-format artifacts."""

import hashlib
import json
import os
import shutil
from pathlib import Path
from typing import Any, Dict, List

from solcx import compile_standard, get_installed_solc_versions, install_solc
from solcx.exceptions import SolcError

from voote import utils
from voote.artifacts import BUILD_INFO_DIR, DEBUG_SUFFIX
from voote.config import ToolchainConfig
from voote.errors import CompilationError

ARTIFACT_FORMAT = "hh-sol-artifact-1"
DEBUG_FORMAT = "hh-sol-dbg-1"
BUILD_INFO_FORMAT = "hh-sol-build-info-1"

OUTPUT_SELECTION = {
    "*": {
        "*": ["abi", "evm.bytecode", "evm.deployedBytecode", "evm.methodIdentifiers", "metadata"],
        "": ["ast"],
    }
}


def find_sources(config: ToolchainConfig) -> Dict[str, Path]:
    """Map source names (e.g. "contracts/Voote.sol") to their files."""
    sources_dir = config.paths.sources
    if not sources_dir.is_dir():
        return {}
    return {
        path.relative_to(config.paths.root).as_posix(): path
        for path in sorted(sources_dir.rglob("*.sol"))
    }


def build_input(sources: Dict[str, Path]) -> Dict[str, Any]:
    """Build the solc standard-JSON input for a set of sources."""
    return {
        "language": "Solidity",
        "sources": {name: {"content": path.read_text()} for name, path in sources.items()},
        "settings": {
            "optimizer": {"enabled": False, "runs": 200},
            "outputSelection": OUTPUT_SELECTION,
        },
    }


def _ensure_solc(version: str) -> None:
    installed = {str(v) for v in get_installed_solc_versions()}
    if version not in installed:
        utils.info(f"Installing solc {version}...")
        install_solc(version)


def _long_version(output: Dict[str, Any], version: str) -> str:
    """Read the full compiler version (with commit hash) from contract metadata."""
    for contracts in output.get("contracts", {}).values():
        for contract in contracts.values():
            metadata = contract.get("metadata")
            if metadata:
                return json.loads(metadata)["compiler"]["version"]
    return version


def _check_errors(output: Dict[str, Any]) -> None:
    errors: List[str] = []
    for entry in output.get("errors", []):
        message = entry.get("formattedMessage") or entry.get("message", "")
        if entry.get("severity") == "error":
            errors.append(message.strip())
        else:
            utils.warn(message.strip())
    if errors:
        raise CompilationError("Compilation failed:\n" + "\n".join(errors))


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")


def write_artifacts(
    artifacts_dir: Path,
    solc_input: Dict[str, Any],
    output: Dict[str, Any],
    version: str,
) -> List[str]:
    """
    Write build info, artifacts and debug files for one compilation.

    Returns:
        Fully qualified names of the written artifacts
    """
    long_version = _long_version(output, version)
    build_id = hashlib.md5(
        json.dumps({"solcVersion": version, "input": solc_input}, sort_keys=True).encode()
    ).hexdigest()

    build_info_path = artifacts_dir / BUILD_INFO_DIR / f"{build_id}.json"
    _write_json(
        build_info_path,
        {
            "_format": BUILD_INFO_FORMAT,
            "id": build_id,
            "solcVersion": version,
            "solcLongVersion": long_version,
            "input": solc_input,
            "output": output,
        },
    )

    written = []
    for source_name, contracts in sorted(output.get("contracts", {}).items()):
        for contract_name, contract in sorted(contracts.items()):
            evm = contract.get("evm", {})
            artifact_path = artifacts_dir / source_name / f"{contract_name}.json"
            _write_json(
                artifact_path,
                {
                    "_format": ARTIFACT_FORMAT,
                    "contractName": contract_name,
                    "sourceName": source_name,
                    "abi": contract.get("abi", []),
                    "bytecode": "0x" + evm.get("bytecode", {}).get("object", ""),
                    "deployedBytecode": "0x" + evm.get("deployedBytecode", {}).get("object", ""),
                    "linkReferences": evm.get("bytecode", {}).get("linkReferences", {}),
                    "deployedLinkReferences": evm.get("deployedBytecode", {}).get("linkReferences", {}),
                },
            )
            debug_path = artifact_path.with_name(contract_name + DEBUG_SUFFIX)
            _write_json(
                debug_path,
                {
                    "_format": DEBUG_FORMAT,
                    "buildInfo": Path(os.path.relpath(build_info_path, debug_path.parent)).as_posix(),
                },
            )
            written.append(f"{source_name}:{contract_name}")
    return written


def compile_project(config: ToolchainConfig) -> List[str]:
    """
    Compile every .sol file under the sources directory with the pinned solc.

    Existing artifacts are replaced only after a successful compilation.

    Returns:
        Fully qualified names of the compiled contracts

    Raises:
        CompilationError: If there are no sources or solc reports errors
    """
    sources = find_sources(config)
    if not sources:
        raise CompilationError(f"No Solidity sources found under {config.paths.sources}")

    version = config.solidity_version
    _ensure_solc(version)
    solc_input = build_input(sources)

    utils.info(f"Compiling {len(sources)} Solidity file(s) with solc {version}")
    try:
        output = compile_standard(
            solc_input,
            solc_version=version,
            base_path=str(config.paths.root),
            allow_paths=[str(config.paths.root)],
        )
    except SolcError as e:
        raise CompilationError(f"Compilation failed: {e}") from e
    _check_errors(output)

    if config.paths.artifacts.exists():
        shutil.rmtree(config.paths.artifacts)
    return write_artifacts(config.paths.artifacts, solc_input, output, version)
