"""Decode receipt logs into typed protocol events.

Logs are decoded with the contracts' own web3 event objects and the
arguments are validated into the event's model. A log is skipped when no
known event matches it: another topic, another indexed layout, or an
emitter other than the contract the event is bound to.
"""

from typing import Any, Iterable, Mapping

from eth_abi.exceptions import DecodingError
from eth_utils import event_abi_to_log_topic
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import LogTopicError, MismatchedABI

from ..errors import EventDecodeError
from ..models.events import KNOWN_EVENTS, DecodedEvent, parse_event


class EventDecoder:
    """Decodes logs emitted by the given contracts into typed events.

    Contracts created with an address only accept logs from that address;
    contracts created without one accept logs from any emitter.

    Usage:
        decoder = EventDecoder(registry_contract, only=["IPAssetWritten"])
        events = decoder.decode_receipt(receipt)
    """

    def __init__(self, *contracts: Any, only: Iterable[str] | None = None):
        wanted = set(only) if only is not None else set(KNOWN_EVENTS)
        self._events: dict[bytes, list[tuple[str, Any, str | None]]] = {}
        for contract in contracts:
            address = contract.address
            for entry in contract.abi:
                if entry.get("type") != "event" or entry["name"] not in wanted:
                    continue
                event = getattr(contract.events, entry["name"])()
                topic = bytes(event_abi_to_log_topic(entry))
                self._events.setdefault(topic, []).append((entry["name"], event, address))

        # Bound contracts are tried before catch-all ones
        for candidates in self._events.values():
            candidates.sort(key=lambda item: item[2] is None)

    def decode_log(self, log: Mapping[str, Any]) -> DecodedEvent | None:
        """Typed event for a log, or None when no known event matches it."""
        topics = log.get("topics") or []
        if not topics:
            return None

        emitter = Web3.to_checksum_address(log["address"])
        for name, event, address in self._events.get(bytes(HexBytes(topics[0])), []):
            if address is not None and address != emitter:
                continue
            try:
                data = event.process_log(log)
            except (MismatchedABI, LogTopicError):
                continue
            except DecodingError as e:
                raise EventDecodeError(f"{name}: cannot decode log: {e}") from e
            return parse_event(data["event"], {**data["args"], "address": data["address"]})
        return None

    def decode_logs(self, logs: Iterable[Mapping[str, Any]]) -> list[DecodedEvent]:
        events = []
        for log in logs:
            event = self.decode_log(log)
            if event is not None:
                events.append(event)
        return events

    def decode_receipt(self, receipt: Mapping[str, Any]) -> list[DecodedEvent]:
        return self.decode_logs(receipt.get("logs") or [])

    __call__ = decode_receipt


def first_event(events: Iterable[DecodedEvent], kind: type, **fields: Any) -> Any:
    """First event of a given type whose fields match; raises if there is none."""
    for event in events:
        if isinstance(event, kind) and all(getattr(event, k) == v for k, v in fields.items()):
            return event
    raise EventDecodeError(f"No {kind.__name__} event in receipt")
