"""Source verification through the Etherscan-compatible API."""

import json
import time
from typing import Any, Callable, Dict, Optional

import requests
from web3 import Web3

from voote import utils
from voote.artifacts import load_build_info, resolve_artifact
from voote.config import CHAIN_IDS, DEFAULT_CONTRACT, NetworkProfile, ToolchainConfig
from voote.errors import VerificationError
from voote.models import VerificationResult

PENDING = "Pending in queue"
ALREADY_VERIFIED = "already verified"
REQUEST_TIMEOUT = 30


def _api_call(
    session: requests.Session,
    method: str,
    url: str,
    params: Dict[str, Any],
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    try:
        response = session.request(method, url, params=params, data=data, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        raise VerificationError(f"Block explorer request failed: {e}") from e


def _explorer_chain_id(profile: NetworkProfile) -> int:
    chain_id = profile.chain_id if profile.chain_id is not None else CHAIN_IDS.get(profile.name)
    if chain_id is None:
        raise VerificationError(f"Chain ID for network {profile.name!r} is unknown")
    return chain_id


def submit_verification(
    config: ToolchainConfig,
    address: str,
    contract_name: str = DEFAULT_CONTRACT,
    network: Optional[str] = None,
    constructor_args_hex: str = "",
    session: Optional[requests.Session] = None,
) -> Optional[str]:
    """
    Submit a contract's standard-JSON input for verification.

    Returns:
        The explorer's request GUID, or None if the contract is already verified

    Raises:
        VerificationError: If the explorer rejects the request
    """
    if not Web3.is_address(address):
        raise VerificationError(f"{address!r} is not a valid contract address")

    session = session or requests.Session()
    chain_id = _explorer_chain_id(config.network(network))
    artifact = resolve_artifact(contract_name, config.paths.artifacts)
    build_info = load_build_info(artifact)

    constructor_args = constructor_args_hex[2:] if constructor_args_hex.startswith("0x") else constructor_args_hex

    payload = _api_call(
        session,
        "POST",
        config.etherscan.api_url,
        params={"chainid": chain_id},
        data={
            "apikey": config.etherscan.api_key,
            "module": "contract",
            "action": "verifysourcecode",
            "contractaddress": Web3.to_checksum_address(address),
            "sourceCode": json.dumps(build_info["input"]),
            "codeformat": "solidity-standard-json-input",
            "contractname": artifact.fully_qualified_name,
            "compilerversion": "v" + build_info["solcLongVersion"],
            "constructorArguements": constructor_args,
        },
    )

    message = str(payload.get("result", ""))
    if payload.get("status") == "1":
        return message
    if ALREADY_VERIFIED in message.lower():
        return None
    raise VerificationError(f"Verification request rejected: {message or payload.get('message')}")


def check_verification(
    config: ToolchainConfig,
    guid: str,
    network: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """Fetch the current status of a verification request."""
    session = session or requests.Session()
    chain_id = _explorer_chain_id(config.network(network))
    return _api_call(
        session,
        "GET",
        config.etherscan.api_url,
        params={
            "chainid": chain_id,
            "apikey": config.etherscan.api_key,
            "module": "contract",
            "action": "checkverifystatus",
            "guid": guid,
        },
    )


def verify_contract(
    config: ToolchainConfig,
    address: str,
    contract_name: str = DEFAULT_CONTRACT,
    network: Optional[str] = None,
    constructor_args_hex: str = "",
    session: Optional[requests.Session] = None,
    poll_interval: float = 5.0,
    max_attempts: int = 24,
    sleep: Callable[[float], None] = time.sleep,
) -> VerificationResult:
    """
    Verify a deployed contract and wait for the explorer's verdict.

    Args:
        config: Toolchain configuration holding the explorer API key
        address: Deployed contract address
        contract_name: Bare or fully qualified contract name
        network: Network profile name (default: config.default_network)
        constructor_args_hex: ABI-encoded constructor arguments
        session: HTTP session (default: a new requests.Session)
        poll_interval: Seconds between status checks
        max_attempts: Status checks before giving up
        sleep: Sleep function used between checks

    Returns:
        VerificationResult with the final status

    Raises:
        VerificationError: If the explorer rejects the source or never answers
    """
    session = session or requests.Session()
    guid = submit_verification(config, address, contract_name, network, constructor_args_hex, session)
    if guid is None:
        utils.info(f"{address} is already verified")
        return VerificationResult(address=address, guid=None, status="verified", message="Already Verified")

    utils.info(f"Verification submitted, GUID: {guid}")
    for _ in range(max_attempts):
        sleep(poll_interval)
        payload = check_verification(config, guid, network, session)
        message = str(payload.get("result", ""))
        if message == PENDING:
            continue
        if payload.get("status") == "1" or ALREADY_VERIFIED in message.lower():
            return VerificationResult(address=address, guid=guid, status="verified", message=message)
        raise VerificationError(f"Verification failed: {message}")

    raise VerificationError(f"Verification still pending after {max_attempts} checks (GUID {guid})")
