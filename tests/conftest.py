"""Shared fixtures for Voote tests."""

import json
from pathlib import Path

import pytest
from hexbytes import HexBytes

from voote.config import load_config

PRIVATE_KEY = "0x" + "11" * 32
TX_HASH = "0x" + "ab" * 32
DEPLOYED_ADDRESS = "0xAbCd...1234"

VALID_ENV = {
    "RPC_URL": "http://127.0.0.1:8545",
    "PRIVATE_KEY": PRIVATE_KEY,
    "POLYGON_SCAN_API_KEY": "TESTAPIKEY1234",
}

VOOTE_ABI = [{"inputs": [], "stateMutability": "nonpayable", "type": "constructor"}]


def write_artifact(
    artifacts_dir: Path,
    name: str = "Voote",
    source: str = "contracts/Voote.sol",
    bytecode: str = "0x6080604052",
) -> Path:
    """Write a minimal Hardhat artifact and return its path."""
    path = artifacts_dir / source / f"{name}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": name,
                "sourceName": source,
                "abi": VOOTE_ABI,
                "bytecode": bytecode,
                "deployedBytecode": bytecode,
            }
        )
    )
    return path


class FakeClient:
    """Network client double that records calls in order."""

    def __init__(self, address=DEPLOYED_ADDRESS, submit_error=None, confirm_error=None, on_wait=None, balance=10**18):
        self.balance = balance
        self.address = "0x19E7E376E7C213B7E7e7e46cc70A5dD086DAff2A"
        self.deployed_address = address
        self.submit_error = submit_error
        self.confirm_error = confirm_error
        self.on_wait = on_wait
        self.events = []

    def balance_of(self, address):
        self.events.append(("balance", address))
        return self.balance

    def submit_deployment(self, artifact, *constructor_args):
        self.events.append(("submit", artifact.contract_name, constructor_args))
        if self.submit_error is not None:
            raise self.submit_error
        return HexBytes(TX_HASH)

    def wait_for_deployment(self, tx_hash):
        self.events.append(("wait", HexBytes(tx_hash)))
        if self.on_wait is not None:
            self.on_wait()
        if self.confirm_error is not None:
            raise self.confirm_error
        return {
            "status": 1,
            "contractAddress": self.deployed_address,
            "blockNumber": 42,
            "gasUsed": 123456,
        }


@pytest.fixture
def env():
    return dict(VALID_ENV)


@pytest.fixture
def toolchain(tmp_path, env):
    return load_config(env, root=tmp_path)


@pytest.fixture
def voote_artifact(toolchain):
    return write_artifact(toolchain.paths.artifacts)
