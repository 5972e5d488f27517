"""Merge ids assigned on chain back into the dataset.

IP assets are matched to their ``IPAssetWritten`` events by block type and
name. Relationships are matched to their ``RelationSet`` events by position
within the transaction, checked against the submitted parameters.
"""

from collections import defaultdict
from typing import Any, Awaitable, Callable, Sequence

from rich.console import Console

from ..errors import InvalidBlockTypeError, ReconciliationError
from ..models.dataset import BlockType, Dataset, Record
from ..models.events import DecodedEvent, IPAssetWritten, RelationSet
from ..models.params import RelationParams
from .store import DatasetStore


def match_created_assets(
    dataset: Dataset,
    events: Sequence[IPAssetWritten],
) -> list[tuple[Record, IPAssetWritten]]:
    """Pair pending records with the creation events that carry their name.

    Each event is used at most once. Records without a matching event are
    left out.
    """
    by_type: dict[int, list[IPAssetWritten]] = defaultdict(list)
    for event in events:
        by_type[event.block_type].append(event)

    matches = []
    for records in dataset.assets.values():
        for record in records:
            if not record.is_pending:
                continue
            try:
                block_type = BlockType.parse(record.block_type)
            except InvalidBlockTypeError:
                continue

            candidates = by_type.get(int(block_type))
            if not candidates:
                continue
            for i, event in enumerate(candidates):
                if event.name == record.name:
                    matches.append((record, candidates.pop(i)))
                    break

    return matches


def _event_key(event: RelationSet) -> tuple[str, int, str, int, str]:
    return (
        event.source_contract.lower(),
        event.source_id,
        event.dest_contract.lower(),
        event.dest_id,
        event.relationship_id.lower(),
    )


def match_relationships(
    submitted: Sequence[tuple[int, RelationParams]],
    events: Sequence[RelationSet],
) -> list[tuple[int, RelationSet]]:
    """Pair submitted relationships (by dataset index) with their events.

    The Nth event belongs to the Nth submitted relationship. When the events
    do not line up with what was submitted, they are matched by their
    parameters instead.
    """
    if len(events) == len(submitted) and all(
        params.key() == _event_key(event) for (_, params), event in zip(submitted, events)
    ):
        return [(index, event) for (index, _), event in zip(submitted, events)]

    remaining = list(submitted)
    matches = []
    for event in events:
        key = _event_key(event)
        for pos, (index, params) in enumerate(remaining):
            if params.key() == key:
                matches.append((index, event))
                del remaining[pos]
                break
        else:
            raise ReconciliationError(
                f"RelationSet {event.source_id} -> {event.dest_id} does not match any submitted relationship"
            )
    return matches


class Reconciler:
    """Updates a dataset store from the receipts of confirmed transactions."""

    def __init__(
        self,
        store: DatasetStore,
        fetch_receipt: Callable[[str], Awaitable[Any]],
        decode: Callable[[Any], list[DecodedEvent]],
        console: Console | None = None,
    ):
        """Initialize the reconciler.

        Args:
            store: Dataset store to update and persist
            fetch_receipt: Returns the receipt for a transaction hash
            decode: Decodes a receipt into typed events
            console: Console for progress output
        """
        self.store = store
        self.fetch_receipt = fetch_receipt
        self.decode = decode
        self.console = console or Console()

    async def _events(self, tx_hash: str, kind: type) -> list:
        receipt = await self.fetch_receipt(tx_hash)
        return [e for e in self.decode(receipt) if isinstance(e, kind)]

    async def reconcile_ip_assets(self, tx_hash: str) -> list[IPAssetWritten]:
        """Assign ids of the IP assets created in a transaction.

        Returns:
            The events that were matched to a record
        """
        events = await self._events(tx_hash, IPAssetWritten)
        if not events:
            self.console.print(f"[yellow]No IP assets created in tx {tx_hash}[/yellow]")
            return []

        def apply(dataset: Dataset) -> list[tuple[Record, IPAssetWritten]]:
            matches = match_created_assets(dataset, events)
            for record, event in matches:
                record.id = event.ip_asset_id
            return matches

        matches = await self.store.commit(apply)
        self.console.print(
            f"[green]OK[/green] Updated {len(matches)}/{len(events)} IP asset ids in {self.store.path}"
        )
        return [event for _, event in matches]

    async def reconcile_relationships(
        self,
        tx_hash: str,
        submitted: Sequence[tuple[int, RelationParams]],
    ) -> list[RelationSet]:
        """Record the relationships confirmed in a transaction.

        Args:
            tx_hash: Transaction that carried the relate calls
            submitted: Dataset index and parameters of each call, in call order
        """
        events = await self._events(tx_hash, RelationSet)
        if not events:
            self.console.print(f"[yellow]No relationships set in tx {tx_hash}[/yellow]")
            return []

        matches = match_relationships(submitted, events)

        def apply(dataset: Dataset) -> None:
            for index, event in matches:
                spec = dataset.relationships[index]
                spec.source_id = event.source_id
                spec.dest_id = event.dest_id
                spec.relationship_id = event.relationship_id

        await self.store.commit(apply)
        self.console.print(
            f"[green]OK[/green] Wrote {len(matches)} relationships to {self.store.path}"
        )
        return [event for _, event in matches]
