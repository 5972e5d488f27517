"""Batch upload of a dataset file: IP assets first, then relationships."""

import asyncio
import math
from typing import Any

from rich.console import Console
from web3 import Web3

from ..errors import ChunkSubmissionError
from ..models.dataset import SAME_CONTRACT, BlockType, Record, RelationshipSpec
from ..models.params import RelationParams
from .batching import submit_batch
from .reconcile import Reconciler
from .store import DatasetStore


class BatchUploader:
    """Creates the pending records of a dataset in a franchise's registry.

    Each chunk of records goes out as one multicall transaction. As soon as a
    chunk is mined, the ids it assigned are written back to the dataset file,
    so an interrupted run can be resumed by running it again.

    Usage:
        store = DatasetStore.load("data/franchise.json")
        uploader = BatchUploader(client, store, registry_address, receiver)
        await uploader.run()
    """

    def __init__(
        self,
        client: Any,
        store: DatasetStore,
        registry_address: str,
        receiver: str,
        chunk_size: int = 100,
        show_events: bool = False,
        console: Console | None = None,
    ):
        """Initialize the uploader.

        Args:
            client: Protocol client (encoding, multicall, receipts)
            store: Dataset being uploaded
            registry_address: IP asset registry of the franchise
            receiver: Owner of the created IP assets
            chunk_size: Calls per transaction
            show_events: Print the decoded events of each receipt
            console: Console for progress output
        """
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be at least 1, got {chunk_size}")
        self.client = client
        self.store = store
        self.registry_address = registry_address
        self.receiver = receiver
        self.chunk_size = chunk_size
        self.show_events = show_events
        self.console = console or Console()
        self.decode = client.decoder("IPAssetWritten", "RelationSet", registry_address=registry_address)
        self.reconciler = Reconciler(store, client.get_receipt, self.decode, self.console)

    async def run(self) -> None:
        await self.upload_ip_assets()
        self.console.print("\n[bold]Setting up relationships...[/bold]")
        await self.upload_relationships()

    # ------------------------------------------------------------------
    # IP assets
    # ------------------------------------------------------------------

    def encode_record(self, record: Record) -> str:
        block_type = BlockType.parse(record.block_type)
        return self.client.encode_create_ip_asset(
            self.registry_address,
            int(block_type),
            record.name,
            record.description,
            record.media_url or "",
            self.receiver,
        )

    async def upload_ip_assets(self) -> int:
        """Create every IP asset without an id.

        Returns:
            Number of IP assets submitted
        """
        dataset = self.store.dataset
        dataset.check_pending_names()
        pending = dataset.pending_records()

        self.console.print(f"Will upload: {len(pending)} IP assets")
        if not pending:
            return 0
        self.console.print(f"Batches: {math.ceil(len(pending) / self.chunk_size)}")

        async def submit(index: int, calls: list[str]) -> str:
            return await self._submit(self.registry_address, index, calls, "IP assets")

        async def confirmed(records: list[Record], tx_hash: str) -> None:
            await self.reconciler.reconcile_ip_assets(tx_hash)

        await submit_batch(pending, self.chunk_size, self.encode_record, submit, confirmed)
        self.console.print("[bold green]IP assets created![/bold green]")
        return len(pending)

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def _contract_address(self, value: str) -> str:
        if value == SAME_CONTRACT:
            return self.registry_address
        return Web3.to_checksum_address(value)

    def relation_params(self, spec: RelationshipSpec, relationship_id: str) -> RelationParams:
        """On-chain parameters of a relationship whose records already exist."""
        dataset = self.store.dataset
        return RelationParams(
            source_contract=self._contract_address(spec.source_contract),
            source_id=dataset.resolved_id(spec.source_asset_type, spec.source_asset_index),
            dest_contract=self._contract_address(spec.dest_contract),
            dest_id=dataset.resolved_id(spec.dest_asset_type, spec.dest_asset_index),
            relationship_id=relationship_id,
            ttl=spec.ttl,
        )

    async def upload_relationships(self) -> int:
        """Relate every pending relationship of the dataset.

        Returns:
            Number of relationships submitted
        """
        pending = self.store.dataset.pending_relationships()
        self.console.print(f"Will upload: {len(pending)} relationships")
        if not pending:
            return 0

        names = sorted({spec.name for _, spec in pending})
        ids = await asyncio.gather(*(self.client.relationship_id(name) for name in names))
        relationship_ids = dict(zip(names, ids))
        for name, relationship_id in relationship_ids.items():
            self.console.print(f"  [dim]{name}: {relationship_id}[/dim]")

        submitted = [
            (index, self.relation_params(spec, relationship_ids[spec.name]))
            for index, spec in pending
        ]
        target = self.client.relationship_module.address

        async def submit(index: int, calls: list[str]) -> str:
            return await self._submit(target, index, calls, "relationships")

        async def confirmed(chunk: list[tuple[int, RelationParams]], tx_hash: str) -> None:
            await self.reconciler.reconcile_relationships(tx_hash, chunk)

        await submit_batch(
            submitted,
            self.chunk_size,
            lambda item: self.client.encode_relate(item[1]),
            submit,
            confirmed,
        )
        self.console.print("[bold green]Relationships created![/bold green]")
        return len(submitted)

    # ------------------------------------------------------------------

    async def _submit(self, target: str, index: int, calls: list[str], label: str) -> str:
        """Send one chunk through multicall and wait until it is mined."""
        self.console.print(f"Uploading batch of {len(calls)} {label}")
        try:
            tx_hash = await self.client.multicall(target, calls)
            self.console.print(f"tx: {tx_hash}")
            self.console.print("[dim]Waiting for tx to be mined...[/dim]")
            receipt = await self.client.wait(tx_hash)
        except Exception as e:
            chain_id = self.client.chain_id
            self.console.print(f"[red]ERROR uploading {label} batch {index}[/red] (chainId {chain_id}): {e}")
            raise ChunkSubmissionError(
                f"Batch {index} of {label} failed on chain {chain_id}: {e}",
                chain_id=chain_id,
                chunk_index=index,
            ) from e

        if self.show_events:
            self.console.print("Events:")
            for event in self.decode(receipt):
                self.console.print(event)
        return tx_hash
