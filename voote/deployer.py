"""Deployment driver: resolve, submit, confirm, report."""

import sys
from typing import Any, Callable, Optional, Sequence, TextIO

from web3 import Web3

from voote import utils
from voote.artifacts import resolve_artifact
from voote.config import DEFAULT_CONTRACT, NetworkProfile, ToolchainConfig
from voote.errors import VooteError
from voote.evm import EVMClient
from voote.models import DeploymentResult

SUCCESS_MESSAGE = "✅ Contract deployed to: {address}"
FAILURE_MESSAGE = "❌ Deployment failed: {error}"

ClientFactory = Callable[[NetworkProfile], Any]


def deploy_contract(
    config: ToolchainConfig,
    contract_name: str = DEFAULT_CONTRACT,
    network: Optional[str] = None,
    client: Any = None,
    client_factory: ClientFactory = EVMClient,
    constructor_args: Sequence[Any] = (),
) -> DeploymentResult:
    """
    Deploy one contract and wait until it is confirmed.

    Args:
        config: Toolchain configuration
        contract_name: Bare or fully qualified contract name
        network: Network profile name (default: config.default_network)
        client: Already-connected client; built from client_factory when omitted
        client_factory: Callable building a client from a NetworkProfile
        constructor_args: Arguments passed to the contract constructor

    Returns:
        DeploymentResult for the confirmed contract

    Raises:
        ArtifactNotFound: Unknown or uncompiled contract
        SubmissionError: Transaction rejected at broadcast time
        ConfirmationError: Transaction dropped, reverted or timed out
    """
    profile = config.network(network)
    artifact = resolve_artifact(contract_name, config.paths.artifacts)

    if client is None:
        client = client_factory(profile)

    utils.info(f"Network: {profile.name}")
    utils.info(f"Deployer: {client.address}")
    if client.balance_of(client.address) == 0:
        utils.warn(f"Deployer {client.address} has no native balance to pay for gas")

    tx_hash = client.submit_deployment(artifact, *constructor_args)
    tx_hex = Web3.to_hex(tx_hash)
    utils.info(f"Transaction sent: {tx_hex}")
    utils.info("Waiting for confirmation...")

    receipt = client.wait_for_deployment(tx_hash)

    return DeploymentResult(
        contract_name=artifact.contract_name,
        address=receipt["contractAddress"],
        transaction_hash=tx_hex,
        network=profile.name,
        receipt=receipt,
        block_number=receipt.get("blockNumber"),
        gas_used=receipt.get("gasUsed"),
    )


def run_deployment(
    config: ToolchainConfig,
    contract_name: str = DEFAULT_CONTRACT,
    network: Optional[str] = None,
    client: Any = None,
    client_factory: ClientFactory = EVMClient,
    constructor_args: Sequence[Any] = (),
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Deploy a contract and report the outcome; returns the process exit code."""
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr

    try:
        deployment = deploy_contract(
            config,
            contract_name=contract_name,
            network=network,
            client=client,
            client_factory=client_factory,
            constructor_args=constructor_args,
        )
    except VooteError as e:
        print(FAILURE_MESSAGE.format(error=e), file=err)
        return 1
    except Exception as e:
        print(FAILURE_MESSAGE.format(error=f"{type(e).__name__}: {e}"), file=err)
        return 1

    print(SUCCESS_MESSAGE.format(address=deployment.address), file=out)
    if deployment.block_number is not None:
        utils.result(f"Block: {deployment.block_number}  Gas used: {deployment.gas_used}")
    return 0
