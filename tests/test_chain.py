"""Tests for settings, deployments, accounts, transactions and the protocol client."""

import asyncio
import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from eth_account import Account
from hexbytes import HexBytes
from rich.console import Console
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, TransactionNotFound

from fakes import (
    OTHER_CONTRACT,
    RECEIVER,
    REGISTRY,
    contract,
    ip_asset_written,
    make_log,
    relation_set,
    relationship_id_for,
)
from fakes import RELATIONSHIP_MODULE as RELATIONSHIP_MODULE_ADDRESS
from ip_registry_tools.chain.abi import TRANSFER
from ip_registry_tools.chain.client import ProtocolClient
from ip_registry_tools.chain.connection import check_connection, get_account
from ip_registry_tools.chain.deployment import (
    FRANCHISE_REGISTRY,
    LICENSING_MODULE,
    RELATIONSHIP_MODULE,
    Deployment,
    load_deployment,
)
from ip_registry_tools.chain.events import EventDecoder
from ip_registry_tools.chain.transactions import TransactionSender, fetch_receipt, wait_for_receipt
from ip_registry_tools.config import Settings
from ip_registry_tools.errors import (
    ConfigurationError,
    DeploymentError,
    InvalidBlockTypeError,
    ReceiptNotFoundError,
    TransactionFailedError,
)
from ip_registry_tools.models.dataset import BlockType
from ip_registry_tools.models.params import (
    ZERO_ADDRESS,
    FranchiseLicensingConfig,
    IPAssetConfig,
    LicenseTerms,
    RelationParams,
)
from ip_registry_tools.registry import create_ip_asset, create_license, parse_flag
from ip_registry_tools.registry.ip_assets import IPAssetData

KEY = "0x" + "00" * 31 + "01"


@pytest.fixture
def settings(tmp_path):
    (tmp_path / "deployment-local.json").write_text(
        json.dumps({"31337": {FRANCHISE_REGISTRY: REGISTRY}}), encoding="utf-8"
    )
    (tmp_path / "deployment-public.json").write_text(
        json.dumps({"5": {FRANCHISE_REGISTRY: "0x" + "66" * 20}}), encoding="utf-8"
    )
    return Settings(deployment_dir=tmp_path, private_key="")


class TestDeployment:
    """Test reading deployment files."""

    def test_local_chain(self, settings):
        deployment = load_deployment(31337, settings)

        assert deployment.source.name == "deployment-local.json"
        assert deployment.address(FRANCHISE_REGISTRY) == REGISTRY

    def test_public_chain(self, settings):
        deployment = load_deployment(5, settings)
        assert deployment.source.name == "deployment-public.json"

    def test_unknown_chain(self, settings):
        with pytest.raises(DeploymentError, match="No deployment for chain 1"):
            load_deployment(1, settings)

    def test_missing_contract(self, settings):
        deployment = load_deployment(31337, settings)
        with pytest.raises(DeploymentError, match=RELATIONSHIP_MODULE):
            deployment.address(RELATIONSHIP_MODULE)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DeploymentError, match="not found"):
            load_deployment(31337, Settings(deployment_dir=tmp_path / "nowhere"))

    def test_custom_local_chain_id(self, settings):
        settings.local_chain_id = 5
        assert settings.deployment_file(5).name == "deployment-local.json"
        assert settings.deployment_file(31337).name == "deployment-public.json"


class TestAccount:
    """Test loading the signing account."""

    def test_missing_key(self, settings):
        with pytest.raises(ConfigurationError, match="not set"):
            get_account(settings)

    def test_invalid_key(self, settings):
        settings.private_key = "0x1234"
        with pytest.raises(ConfigurationError, match="not a valid key"):
            get_account(settings)

    def test_valid_key(self, settings):
        settings.private_key = KEY
        assert get_account(settings).address == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"


class TestParams:
    """Test contract call arguments."""

    def test_relation_tuple(self):
        rid = relationship_id_for("LIVES_IN")
        params = RelationParams(REGISTRY, 1, REGISTRY, 2, rid, 60)

        assert params.as_tuple() == (REGISTRY, 1, REGISTRY, 2, HexBytes(rid), 60)

    def test_franchise_config_tuple(self):
        config = FranchiseLicensingConfig(
            non_commercial=IPAssetConfig(True, 0),
            commercial=IPAssetConfig(False, 7),
            root_ip_asset_has_commercial_rights=False,
            revoker=REGISTRY,
            commercial_license_uri="https://example.com/license",
        )

        assert config.as_tuple() == (
            (True, 0),
            (ZERO_ADDRESS, b""),
            (False, 7),
            (ZERO_ADDRESS, b""),
            False,
            REGISTRY,
            "https://example.com/license",
        )

    @pytest.mark.parametrize("value,expected", [("true", True), ("TRUE", True), ("false", False), ("1", False), ("yes", False)])
    def test_parse_flag(self, value, expected):
        assert parse_flag(value) is expected


class TestIPAssets:
    """Test single IP asset operations."""

    def test_invalid_type_before_network(self):
        client = SimpleNamespace()

        with pytest.raises(InvalidBlockTypeError):
            asyncio.run(create_ip_asset(client, 1, "VEHICLE", "Car", "", ""))

    def test_read_result(self):
        data = IPAssetData.from_call(4, (5, "Bag End", "home", "ar://bag-end"))

        assert data.block_type is BlockType.LOCATION
        assert data.name == "Bag End"


class StubEth:
    """Async ``w3.eth`` stand-in recording what is sent."""

    def __init__(self, nonce: int = 7, receipt: dict | None = None, error: Exception | None = None):
        self.nonce = nonce
        self.receipt = receipt
        self.error = error
        self.nonce_lookups = 0
        self.raw: list[bytes] = []

    async def get_transaction_count(self, address, block_identifier):
        self.nonce_lookups += 1
        await asyncio.sleep(0)
        return self.nonce

    async def send_raw_transaction(self, raw):
        await asyncio.sleep(0)
        self.raw.append(bytes(raw))
        return Web3.keccak(raw)

    async def wait_for_transaction_receipt(self, tx_hash, timeout):
        if self.error is not None:
            raise self.error
        return self.receipt

    async def get_transaction_receipt(self, tx_hash):
        if self.error is not None:
            raise self.error
        return self.receipt


class StubCall:
    """Bound contract call whose transaction is built after a yield."""

    def __init__(self, built: list):
        self.built = built

    async def build_transaction(self, params):
        await asyncio.sleep(0)
        tx = {
            "to": REGISTRY,
            "value": 0,
            "gas": 100_000,
            "gasPrice": 1,
            "data": "0x",
            "chainId": 31337,
            **params,
        }
        self.built.append(tx)
        return tx


class TestTransactionSender:
    """Test signing and nonce allocation."""

    def test_concurrent_sends_get_sequential_nonces(self):
        eth = StubEth(nonce=7)
        sender = TransactionSender(SimpleNamespace(eth=eth), Account.from_key(KEY))
        built = []

        async def send_all():
            return await asyncio.gather(*(sender.send(StubCall(built)) for _ in range(3)))

        hashes = asyncio.run(send_all())

        assert [tx["nonce"] for tx in built] == [7, 8, 9]
        assert eth.nonce_lookups == 1
        assert len(set(hashes)) == 3
        assert all(tx["from"] == sender.address for tx in built)
        assert hashes == [Web3.to_hex(Web3.keccak(raw)) for raw in eth.raw]

    def test_nonce_continues_across_calls(self):
        eth = StubEth(nonce=0)
        sender = TransactionSender(SimpleNamespace(eth=eth), Account.from_key(KEY))
        built = []

        asyncio.run(sender.send(StubCall(built)))
        asyncio.run(sender.send(StubCall(built)))

        assert [tx["nonce"] for tx in built] == [0, 1]


class TestReceipts:
    """Test receipt lookups and confirmation."""

    def test_mined(self):
        w3 = SimpleNamespace(eth=StubEth(receipt={"status": 1, "logs": []}))
        assert asyncio.run(wait_for_receipt(w3, "0xaa"))["status"] == 1

    def test_reverted(self):
        w3 = SimpleNamespace(eth=StubEth(receipt={"status": 0, "logs": []}))

        with pytest.raises(TransactionFailedError):
            asyncio.run(wait_for_receipt(w3, "0xaa"))

    def test_not_mined_in_time(self):
        w3 = SimpleNamespace(eth=StubEth(error=TimeExhausted("timed out")))

        with pytest.raises(ReceiptNotFoundError, match="not mined"):
            asyncio.run(wait_for_receipt(w3, "0xaa", timeout=1))

    def test_unknown_hash(self):
        w3 = SimpleNamespace(eth=StubEth(error=TransactionNotFound("unknown")))

        with pytest.raises(ReceiptNotFoundError, match="0xbb"):
            asyncio.run(fetch_receipt(w3, "0xbb"))


@pytest.fixture
def client():
    deployment = Deployment(
        chain_id=31337,
        source=Path("deployment-local.json"),
        addresses={
            FRANCHISE_REGISTRY: "0x" + "11" * 20,
            RELATIONSHIP_MODULE: RELATIONSHIP_MODULE_ADDRESS,
            LICENSING_MODULE: "0x" + "66" * 20,
        },
    )
    w3 = AsyncWeb3(AsyncHTTPProvider("http://127.0.0.1:8545"))
    return ProtocolClient(w3, deployment, console=Console(quiet=True))


class TestProtocolClient:
    """Test call encoding and decoding against the contract ABIs."""

    def test_encode_create_ip_asset(self, client):
        data = client.encode_create_ip_asset(REGISTRY, 5, "Bag End", "home", "ar://bag-end", RECEIVER)

        func, args = client.ip_asset_registry(REGISTRY).decode_function_input(data)

        assert func.fn_name == "createIPAsset"
        assert args["ipAssetType"] == 5
        assert args["name"] == "Bag End"
        assert args["to"] == Web3.to_checksum_address(RECEIVER)
        assert args["parentIpAssetId"] == 0

    def test_encode_relate(self, client):
        rid = relationship_id_for("LIVES_IN")
        params = RelationParams(REGISTRY, 10, REGISTRY, 12, rid, 3600)

        func, args = client.relationship_module.decode_function_input(client.encode_relate(params))

        assert func.fn_name == "relate"
        source_contract, source_id, dest_contract, dest_id, relationship_id, ttl = args["params"]
        assert (source_id, dest_id, ttl) == (10, 12, 3600)
        assert Web3.to_hex(relationship_id) == rid
        assert args["data"] == b""

    def test_send_needs_signer(self, client):
        with pytest.raises(ConfigurationError):
            asyncio.run(client.send(StubCall([])))

    def test_decoder_checks_emitters(self, client):
        decoder = client.decoder("IPAssetWritten", "RelationSet", registry_address=REGISTRY)
        rid = relationship_id_for("LIVES_IN")
        receipt = {"logs": [
            ip_asset_written(10, 1, "A"),
            {**ip_asset_written(11, 1, "B"), "address": OTHER_CONTRACT},
            relation_set(10, 12, rid),
        ]}

        events = decoder(receipt)

        assert [type(e).__name__ for e in events] == ["IPAssetWritten", "RelationSet"]
        assert events[0].ip_asset_id == 10


class TestLicensing:
    """Test reading the license id from the receipt."""

    def test_minted_token_is_the_license(self):
        receipt = {"logs": [
            make_log([TRANSFER], "Transfer", address=OTHER_CONTRACT, **{"from": RECEIVER, "to": REGISTRY, "tokenId": 1}),
            make_log([TRANSFER], "Transfer", address=OTHER_CONTRACT, **{"from": ZERO_ADDRESS, "to": RECEIVER, "tokenId": 42}),
        ]}

        async def create(*args):
            return receipt

        client = SimpleNamespace(
            create_license=create,
            decoder=lambda *names: EventDecoder(contract([TRANSFER])),
        )
        license_id, events = asyncio.run(create_license(client, 1, 2, False, "ar://license", LicenseTerms(name="std")))

        assert license_id == 42
        assert len(events) == 2


def test_check_connection_leaves_given_provider_open():
    disconnected = []

    async def is_connected():
        return True

    async def disconnect():
        disconnected.append(True)

    w3 = SimpleNamespace(is_connected=is_connected, provider=SimpleNamespace(disconnect=disconnect))

    assert asyncio.run(check_connection(w3)) is True
    assert disconnected == []
