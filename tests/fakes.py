"""In-memory stand-ins for the protocol client, emitting real ABI-encoded logs."""

import asyncio
from types import SimpleNamespace

from eth_abi import encode as abi_encode
from eth_utils import collapse_if_tuple, event_abi_to_log_topic
from hexbytes import HexBytes
from web3 import Web3

from ip_registry_tools.chain.abi import IP_ASSET_REGISTRY_ABI, RELATIONSHIP_MODULE_ABI
from ip_registry_tools.chain.events import EventDecoder
from ip_registry_tools.errors import ReceiptNotFoundError

REGISTRY = "0x" + "22" * 20
RELATIONSHIP_MODULE = "0x" + "33" * 20
RECEIVER = "0x" + "44" * 20
OTHER_CONTRACT = "0x" + "55" * 20

_w3 = Web3()


def contract(abi: list, address: str | None = None):
    """Offline contract object, bound to ``address`` when given."""
    if address is None:
        return _w3.eth.contract(abi=abi)
    return _w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)


def make_log(abi: list, event_name: str, address: str = REGISTRY, log_index: int = 0, **args) -> dict:
    """Log entry for an event, encoded the way the contract would emit it."""
    entry = next(e for e in abi if e.get("type") == "event" and e["name"] == event_name)
    indexed = [p for p in entry["inputs"] if p.get("indexed")]
    unindexed = [p for p in entry["inputs"] if not p.get("indexed")]
    topics = [HexBytes(event_abi_to_log_topic(entry))] + [
        HexBytes(abi_encode([collapse_if_tuple(p)], [args[p["name"]]])) for p in indexed
    ]
    data = abi_encode([collapse_if_tuple(p) for p in unindexed], [args[p["name"]] for p in unindexed])
    return {
        "address": Web3.to_checksum_address(address),
        "topics": topics,
        "data": HexBytes(data),
        "logIndex": log_index,
        "transactionIndex": 0,
        "transactionHash": HexBytes(b"\x01" * 32),
        "blockHash": HexBytes(b"\x02" * 32),
        "blockNumber": 1,
    }


def ip_asset_written(ip_asset_id: int, block_type: int, name: str) -> dict:
    return make_log(
        IP_ASSET_REGISTRY_ABI,
        "IPAssetWritten",
        IPAssetId=ip_asset_id,
        blockType=block_type,
        name=name,
        description="",
        mediaUrl="",
    )


def relation_set(
    source_id: int,
    dest_id: int,
    relationship_id: str,
    source_contract: str = REGISTRY,
    dest_contract: str = REGISTRY,
) -> dict:
    return make_log(
        RELATIONSHIP_MODULE_ABI,
        "RelationSet",
        address=RELATIONSHIP_MODULE,
        sourceContract=source_contract,
        sourceId=source_id,
        destContract=dest_contract,
        destId=dest_id,
        relationshipId=bytes(HexBytes(relationship_id)),
        endTime=0,
    )


def relationship_id_for(name: str) -> str:
    return Web3.to_hex(Web3.keccak(text=name))


class FakeClient:
    """Protocol client that "mines" every multicall immediately.

    IP assets get sequential ids starting at ``start_id``. Multicalls whose
    1-based submission number is in ``fail_on`` raise instead.
    """

    chain_id = 31337

    def __init__(self, start_id: int = 10, fail_on: tuple[int, ...] = ()):
        self.next_id = start_id
        self.fail_on = set(fail_on)
        self.sent: list[tuple[str, list]] = []
        self.receipts: dict[str, dict] = {}
        self.relationship_module = SimpleNamespace(address=RELATIONSHIP_MODULE)
        self.signer_address = RECEIVER

    def decoder(self, *names: str, registry_address: str | None = None) -> EventDecoder:
        return EventDecoder(
            contract(IP_ASSET_REGISTRY_ABI, registry_address),
            contract(RELATIONSHIP_MODULE_ABI, RELATIONSHIP_MODULE),
            only=names or None,
        )

    def encode_create_ip_asset(self, registry, block_type, name, description, media_url, receiver, parent_id=0):
        return ("createIPAsset", block_type, name)

    def encode_relate(self, params):
        return ("relate", params)

    async def relationship_id(self, name: str) -> str:
        await asyncio.sleep(0)
        return relationship_id_for(name)

    async def multicall(self, target: str, calls: list) -> str:
        self.sent.append((target, list(calls)))
        number = len(self.sent)
        if number in self.fail_on:
            await asyncio.sleep(0)
            raise RuntimeError("execution reverted")

        logs = []
        for call in calls:
            if call[0] == "createIPAsset":
                logs.append(ip_asset_written(self.next_id, call[1], call[2]))
                self.next_id += 1
            else:
                params = call[1]
                logs.append(
                    relation_set(
                        params.source_id,
                        params.dest_id,
                        params.relationship_id,
                        params.source_contract,
                        params.dest_contract,
                    )
                )

        tx_hash = f"0x{number:064x}"
        self.receipts[tx_hash] = {"transactionHash": tx_hash, "status": 1, "logs": logs}
        await asyncio.sleep(0)
        return tx_hash

    async def wait(self, tx_hash: str) -> dict:
        await asyncio.sleep(0)
        return self.receipts[tx_hash]

    async def get_receipt(self, tx_hash: str) -> dict:
        await asyncio.sleep(0)
        try:
            return self.receipts[tx_hash]
        except KeyError:
            raise ReceiptNotFoundError(tx_hash) from None

    @property
    def submitted_names(self) -> list[str]:
        return [call[2] for _, calls in self.sent for call in calls if call[0] == "createIPAsset"]
