"""Dataset models for batch uploads.

A dataset file holds the IP assets of a franchise grouped by category, plus
the relationships between them. Records without an ``id`` have not been
created on chain yet.
"""

import json
from collections import defaultdict
from enum import IntEnum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from ..errors import DuplicateRecordError, InvalidBlockTypeError, UnresolvedReferenceError

SAME_CONTRACT = "same"
ASSET_KEYS = ("blocks", "ip-assets")


class BlockType(IntEnum):
    """IP asset kinds, as numbered by the registry contract."""

    STORY = 1
    CHARACTER = 2
    ART = 3
    GROUP = 4
    LOCATION = 5
    ITEM = 6

    @classmethod
    def parse(cls, value: "str | int | BlockType") -> "BlockType":
        """Resolve a block type from its name or contract number."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value]
            except KeyError:
                raise InvalidBlockTypeError(value) from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidBlockTypeError(value) from None
        raise InvalidBlockTypeError(value)


class FileModel(BaseModel):
    """Model read from a hand-edited JSON object.

    Remembers the order of the object's keys so that rewriting the file
    keeps them where they were.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: Any) -> Any:
        model = handler(data)
        if isinstance(data, dict):
            model._key_order = list(data)
        return model

    def _in_file_order(self, data: dict[str, Any]) -> dict[str, Any]:
        ordered = {key: data[key] for key in self._key_order if key in data}
        ordered.update((key, value) for key, value in data.items() if key not in ordered)
        return ordered


class Record(FileModel):
    """An IP asset, pending (``id`` is None) or already created on chain."""

    name: str
    description: str = ""
    media_url: str | None = Field(default=None, alias="mediaURL")
    block_type: str | int = Field(
        alias="blockType",
        validation_alias=AliasChoices("blockType", "ipAssetType"),
    )
    id: int | None = None

    @property
    def is_pending(self) -> bool:
        return self.id is None

    def to_dict(self, type_key: str = "blockType") -> dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_unset=True)
        if type_key != "blockType":
            data = {(type_key if k == "blockType" else k): v for k, v in data.items()}
        return self._in_file_order(data)


class RelationshipSpec(FileModel):
    """A relationship between two records of the dataset.

    Source and destination are pointers (category + index) into the dataset;
    they resolve to on-chain ids once the records have been created.
    """

    source_contract: str = Field(alias="sourceContract")
    source_asset_type: str = Field(alias="sourceAssetType")
    source_asset_index: int = Field(alias="sourceAssetIndex")
    dest_contract: str = Field(alias="destContract")
    dest_asset_type: str = Field(alias="destAssetType")
    dest_asset_index: int = Field(alias="destAssetIndex")
    name: str
    ttl: int = 0

    # Filled in once the relationship is confirmed on chain
    source_id: int | None = Field(default=None, alias="sourceId")
    dest_id: int | None = Field(default=None, alias="destId")
    relationship_id: str | None = Field(default=None, alias="relationshipId")

    @property
    def is_pending(self) -> bool:
        return self.relationship_id is None

    def to_dict(self) -> dict[str, Any]:
        return self._in_file_order(self.model_dump(by_alias=True, exclude_unset=True))


class Dataset(FileModel):
    """Records by category plus relationships, as stored in a JSON file."""

    assets: dict[str, list[Record]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices(*ASSET_KEYS),
    )
    relationships: list[RelationshipSpec] = Field(default_factory=list)

    _assets_key: str = PrivateAttr(default="blocks")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dataset":
        dataset = cls.model_validate(data)
        dataset._assets_key = next((key for key in ASSET_KEYS if key in data), "blocks")
        return dataset

    @classmethod
    def load(cls, path: Path | str) -> "Dataset":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict[str, Any]:
        type_key = "ipAssetType" if self._assets_key == "ip-assets" else "blockType"
        data: dict[str, Any] = {
            self._assets_key: {
                category: [record.to_dict(type_key) for record in records]
                for category, records in self.assets.items()
            },
        }
        if "relationships" in self.model_fields_set or self.relationships:
            data["relationships"] = [rel.to_dict() for rel in self.relationships]
        data.update(self.model_extra or {})
        return self._in_file_order(data)

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def pending_records(self) -> list[Record]:
        """Records not yet created on chain, in category then file order."""
        return [
            record
            for records in self.assets.values()
            for record in records
            if record.is_pending
        ]

    def pending_relationships(self) -> list[tuple[int, RelationshipSpec]]:
        """Relationships not yet confirmed, with their position in the file."""
        return [(i, rel) for i, rel in enumerate(self.relationships) if rel.is_pending]

    def check_pending_names(self) -> None:
        """Reject datasets where pending records of one type share a name.

        Created records are matched back by name, so a duplicate would make
        the assigned id ambiguous.
        """
        seen: dict[tuple[BlockType, str], int] = defaultdict(int)
        for record in self.pending_records():
            seen[(BlockType.parse(record.block_type), record.name)] += 1

        duplicates = sorted(f"{bt.name}:{name}" for (bt, name), n in seen.items() if n > 1)
        if duplicates:
            raise DuplicateRecordError(
                "Pending records share a name within the same type: " + ", ".join(duplicates)
            )

    def record_at(self, category: str, index: int) -> Record:
        """Record referenced by a relationship pointer."""
        records = self.assets.get(category)
        if records is None:
            raise UnresolvedReferenceError(f"Unknown asset category: {category!r}")
        if not 0 <= index < len(records):
            raise UnresolvedReferenceError(
                f"Index {index} out of range for category {category!r} ({len(records)} records)"
            )
        return records[index]

    def resolved_id(self, category: str, index: int) -> int:
        """On-chain id of a referenced record, which must already exist."""
        record = self.record_at(category, index)
        if record.id is None:
            raise UnresolvedReferenceError(
                f"Record {category}[{index}] ({record.name!r}) has not been created yet"
            )
        return record.id
