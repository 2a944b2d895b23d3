"""EVM blockchain operations."""

from typing import Any, Dict

import requests
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception
from web3.types import TxReceipt

from voote import utils
from voote.config import NetworkProfile
from voote.errors import ConfirmationError, ConfirmationTimeout, SubmissionError
from voote.models import ContractArtifact

DEFAULT_TIMEOUT = 120
DEFAULT_POLL_LATENCY = 0.1
GAS_BUFFER = 1.2

# Failures a node or transport can raise while building or broadcasting
NETWORK_ERRORS = (Web3Exception, ValueError, requests.exceptions.RequestException, OSError)


class EVMClient:
    """EVM blockchain client bound to one network profile and its signer."""

    def __init__(
        self,
        profile: NetworkProfile,
        timeout: float = DEFAULT_TIMEOUT,
        poll_latency: float = DEFAULT_POLL_LATENCY,
    ):
        """
        Initialize EVM client for a network profile.

        Args:
            profile: Network endpoint and signing keys
            timeout: Seconds to wait for a deployment receipt
            poll_latency: Seconds between receipt polls
        """
        self.profile = profile
        self.network = profile.name
        self.timeout = timeout
        self.poll_latency = poll_latency
        self.account = Account.from_key(profile.signing_key)
        self.w3 = self._connect_web3()

    def _connect_web3(self) -> Web3:
        """Return a connected Web3 instance or raise if unreachable."""
        if self.profile.rpc_url.lower().startswith(("ws://", "wss://")):
            provider = Web3.LegacyWebSocketProvider(self.profile.rpc_url)
        else:
            provider = Web3.HTTPProvider(self.profile.rpc_url)
        w3 = Web3(provider)

        try:
            connected = w3.is_connected()
        except NETWORK_ERRORS:
            connected = False
        if not connected:
            raise SubmissionError(f"Failed to connect to RPC endpoint for network {self.network!r}")

        return w3

    @property
    def address(self) -> str:
        """Checksum address of the signing account."""
        return self.account.address

    @property
    def chain_id(self) -> int:
        """Chain ID reported by the node, checked against the profile when it pins one."""
        node_chain_id = self.w3.eth.chain_id
        if self.profile.chain_id is not None and self.profile.chain_id != node_chain_id:
            raise SubmissionError(
                f"Network {self.network!r} expects chain ID {self.profile.chain_id}, "
                f"but the RPC endpoint reports {node_chain_id}"
            )
        return node_chain_id

    def balance_of(self, address: str) -> int:
        """Native currency balance of an address, in wei."""
        try:
            return self.w3.eth.get_balance(Web3.to_checksum_address(address))
        except NETWORK_ERRORS as e:
            raise SubmissionError(f"Failed to read balance of {address}: {e}") from e

    def build_deployment(self, artifact: ContractArtifact, *constructor_args: Any) -> Dict[str, Any]:
        """Build an unsigned contract-creation transaction after estimating gas."""
        contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        constructor = contract.constructor(*constructor_args)

        gas_estimate = constructor.estimate_gas({"from": self.address})
        gas_price = self.w3.eth.gas_price
        chain_id = self.chain_id
        utils.info(f"Chain ID: {chain_id}")
        utils.info(f"  Gas limit: {int(gas_estimate * GAS_BUFFER)}")
        utils.info(f"  Gas price: {Web3.from_wei(gas_price, 'gwei')} gwei")

        return constructor.build_transaction(
            {
                "from": self.address,
                "nonce": self.w3.eth.get_transaction_count(self.address),
                "gas": int(gas_estimate * GAS_BUFFER),
                "gasPrice": gas_price,
                "chainId": chain_id,
            }
        )

    def submit_deployment(self, artifact: ContractArtifact, *constructor_args: Any) -> HexBytes:
        """
        Sign and broadcast a contract-creation transaction.

        Args:
            artifact: Compiled contract to deploy
            constructor_args: Arguments passed to the contract constructor

        Returns:
            Hash of the broadcast transaction

        Raises:
            SubmissionError: If the transaction cannot be built or the node
                rejects it (insufficient funds, nonce conflict, unreachable)
        """
        try:
            transaction = self.build_deployment(artifact, *constructor_args)
            signed = self.account.sign_transaction(transaction)
            return HexBytes(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        except NETWORK_ERRORS as e:
            raise SubmissionError(f"Failed to submit deployment of {artifact.contract_name}: {e}") from e

    def wait_for_deployment(self, tx_hash: HexBytes) -> TxReceipt:
        """
        Block until a deployment transaction is mined.

        Returns:
            The transaction receipt, which carries the contract address

        Raises:
            ConfirmationTimeout: If no receipt appears within the timeout
            ConfirmationError: If the transaction reverted or created no contract
        """
        tx_hex = Web3.to_hex(tx_hash)
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.timeout, poll_latency=self.poll_latency
            )
        except TimeExhausted as e:
            raise ConfirmationTimeout(
                f"Transaction {tx_hex} was not confirmed within {self.timeout} seconds; "
                "it may still be mined later",
                transaction_hash=tx_hex,
            ) from e
        except NETWORK_ERRORS as e:
            raise ConfirmationError(f"Could not observe transaction {tx_hex}: {e}", transaction_hash=tx_hex) from e

        if receipt["status"] != 1:
            raise ConfirmationError(f"Transaction {tx_hex} reverted", transaction_hash=tx_hex)
        if not receipt.get("contractAddress"):
            raise ConfirmationError(f"Transaction {tx_hex} did not create a contract", transaction_hash=tx_hex)

        return receipt
