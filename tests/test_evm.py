"""Tests for the EVM client with a mocked Web3 connection."""

import dataclasses
from unittest import mock

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3.exceptions import TimeExhausted

from tests.conftest import PRIVATE_KEY, TX_HASH, VOOTE_ABI
from voote.errors import ConfirmationError, ConfirmationTimeout, SubmissionError
from voote.evm import EVMClient
from voote.models import ContractArtifact

ARTIFACT = ContractArtifact(
    contract_name="Voote",
    source_name="contracts/Voote.sol",
    abi=VOOTE_ABI,
    bytecode="0x6080604052",
)


@pytest.fixture
def w3():
    w3 = mock.MagicMock()
    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 100_000
    constructor.build_transaction.side_effect = lambda params: {
        **params,
        "data": ARTIFACT.bytecode,
        "value": 0,
    }
    w3.eth.gas_price = 2_000_000_000
    w3.eth.chain_id = 31337
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = HexBytes(TX_HASH)
    return w3


@pytest.fixture
def client(toolchain, w3):
    with mock.patch.object(EVMClient, "_connect_web3", return_value=w3):
        yield EVMClient(toolchain.network(), timeout=5, poll_latency=0.01)


def test_signer_comes_from_profile(client):
    assert client.address == Account.from_key(PRIVATE_KEY).address
    assert client.chain_id == 31337


def test_submit_deployment_signs_and_broadcasts(client, w3):
    tx_hash = client.submit_deployment(ARTIFACT)

    assert tx_hash == HexBytes(TX_HASH)
    w3.eth.contract.assert_called_once_with(abi=ARTIFACT.abi, bytecode=ARTIFACT.bytecode)

    params = w3.eth.contract.return_value.constructor.return_value.build_transaction.call_args.args[0]
    assert params["from"] == client.address
    assert params["nonce"] == 7
    assert params["gas"] == 120_000
    assert params["gasPrice"] == 2_000_000_000
    assert params["chainId"] == 31337

    raw = w3.eth.send_raw_transaction.call_args.args[0]
    assert isinstance(raw, (bytes, HexBytes)) and len(raw) > 0


def test_constructor_args_reach_contract(client, w3):
    client.submit_deployment(ARTIFACT, "Election", 3)
    w3.eth.contract.return_value.constructor.assert_called_once_with("Election", 3)


def test_rejected_broadcast_raises_submission_error(client, w3):
    w3.eth.send_raw_transaction.side_effect = ValueError("nonce too low")

    with pytest.raises(SubmissionError, match="nonce too low"):
        client.submit_deployment(ARTIFACT)


def test_gas_estimation_failure_raises_submission_error(client, w3):
    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.side_effect = ValueError("insufficient funds for gas")

    with pytest.raises(SubmissionError, match="insufficient funds"):
        client.submit_deployment(ARTIFACT)
    w3.eth.send_raw_transaction.assert_not_called()


def test_unreachable_network(toolchain):
    with mock.patch("voote.evm.Web3") as web3_cls:
        web3_cls.return_value.is_connected.return_value = False
        with pytest.raises(SubmissionError, match="Failed to connect"):
            EVMClient(toolchain.network())


def test_wait_returns_receipt(client, w3):
    receipt = {"status": 1, "contractAddress": "0xAbCd000000000000000000000000000000001234"}
    w3.eth.wait_for_transaction_receipt.return_value = receipt

    assert client.wait_for_deployment(HexBytes(TX_HASH)) is receipt
    w3.eth.wait_for_transaction_receipt.assert_called_once_with(
        HexBytes(TX_HASH), timeout=5, poll_latency=0.01
    )


def test_wait_timeout(client, w3):
    w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("timed out")

    with pytest.raises(ConfirmationTimeout) as excinfo:
        client.wait_for_deployment(HexBytes(TX_HASH))
    assert excinfo.value.transaction_hash == TX_HASH
    assert isinstance(excinfo.value, ConfirmationError)


def test_wait_reverted(client, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "contractAddress": None}

    with pytest.raises(ConfirmationError, match="reverted"):
        client.wait_for_deployment(HexBytes(TX_HASH))


def test_wait_without_contract_address(client, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "contractAddress": None}

    with pytest.raises(ConfirmationError, match="did not create a contract"):
        client.wait_for_deployment(HexBytes(TX_HASH))


def test_balance_of_checksums_address(client, w3):
    w3.eth.get_balance.return_value = 10**18

    assert client.balance_of(client.address.lower()) == 10**18
    w3.eth.get_balance.assert_called_once_with(client.address)


def test_pinned_chain_id_must_match_node(toolchain, w3):
    profile = dataclasses.replace(toolchain.network(), chain_id=11155111)
    with mock.patch.object(EVMClient, "_connect_web3", return_value=w3):
        client = EVMClient(profile)

    with pytest.raises(SubmissionError, match="expects chain ID 11155111.*reports 31337"):
        client.submit_deployment(ARTIFACT)
    w3.eth.send_raw_transaction.assert_not_called()


def test_balance_failure_raises_submission_error(client, w3):
    w3.eth.get_balance.side_effect = OSError("connection reset")

    with pytest.raises(SubmissionError, match="connection reset"):
        client.balance_of(client.address)
