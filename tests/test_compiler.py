"""Tests for compilation into Hardhat-format artifacts."""

import json
from unittest import mock

import pytest

from voote import compiler
from voote.artifacts import list_artifacts, load_build_info, resolve_artifact
from voote.errors import CompilationError

VOOTE_SOURCE = "// SPDX-License-Identifier: MIT\npragma solidity 0.8.25;\ncontract Voote {}\n"

METADATA = json.dumps({"compiler": {"version": "0.8.25+commit.b61c2a91"}})

SOLC_OUTPUT = {
    "contracts": {
        "contracts/Voote.sol": {
            "Voote": {
                "abi": [],
                "metadata": METADATA,
                "evm": {
                    "bytecode": {"object": "6080604052", "linkReferences": {}},
                    "deployedBytecode": {"object": "60806040", "linkReferences": {}},
                },
            },
        },
    },
    "sources": {"contracts/Voote.sol": {"id": 0}},
}


@pytest.fixture
def sources(toolchain):
    toolchain.paths.sources.mkdir()
    (toolchain.paths.sources / "Voote.sol").write_text(VOOTE_SOURCE)
    return toolchain.paths.sources


@pytest.fixture
def solc():
    with mock.patch.object(compiler, "get_installed_solc_versions", return_value=["0.8.25"]), \
            mock.patch.object(compiler, "install_solc") as install, \
            mock.patch.object(compiler, "compile_standard", return_value=SOLC_OUTPUT) as compile_standard:
        yield install, compile_standard


def test_find_sources_uses_project_relative_names(toolchain, sources):
    assert list(compiler.find_sources(toolchain)) == ["contracts/Voote.sol"]


def test_compile_writes_artifacts_and_build_info(toolchain, sources, solc):
    install, compile_standard = solc

    compiled = compiler.compile_project(toolchain)

    assert compiled == ["contracts/Voote.sol:Voote"]
    install.assert_not_called()
    solc_input = compile_standard.call_args.args[0]
    assert solc_input["sources"]["contracts/Voote.sol"]["content"] == VOOTE_SOURCE
    assert compile_standard.call_args.kwargs["solc_version"] == "0.8.25"

    assert list_artifacts(toolchain.paths.artifacts) == ["contracts/Voote.sol:Voote"]
    artifact = resolve_artifact("Voote", toolchain.paths.artifacts)
    assert artifact.bytecode == "0x6080604052"
    assert artifact.deployed_bytecode == "0x60806040"

    build_info = load_build_info(artifact)
    assert build_info["_format"] == "hh-sol-build-info-1"
    assert build_info["solcLongVersion"] == "0.8.25+commit.b61c2a91"
    assert build_info["input"] == solc_input


def test_missing_compiler_is_installed(toolchain, sources, solc):
    install, _ = solc
    with mock.patch.object(compiler, "get_installed_solc_versions", return_value=[]):
        compiler.compile_project(toolchain)
    install.assert_called_once_with("0.8.25")


def test_no_sources(toolchain, solc):
    with pytest.raises(CompilationError, match="No Solidity sources"):
        compiler.compile_project(toolchain)


def test_solc_errors_keep_previous_artifacts(toolchain, sources, solc, voote_artifact):
    _, compile_standard = solc
    compile_standard.return_value = {
        "errors": [
            {"severity": "warning", "formattedMessage": "Warning: unused variable"},
            {"severity": "error", "formattedMessage": "ParserError: Expected ';'"},
        ],
    }

    with pytest.raises(CompilationError, match="ParserError"):
        compiler.compile_project(toolchain)
    assert voote_artifact.exists()
