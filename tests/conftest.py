"""Shared fixtures."""

import json

import pytest


@pytest.fixture
def stories_file(tmp_path):
    """Dataset with three pending stories and no relationships."""
    path = tmp_path / "franchise.json"
    data = {
        "blocks": {
            "stories": [
                {"name": "A", "description": "first", "mediaURL": "ar://a", "blockType": "STORY", "id": None},
                {"name": "B", "description": "second", "mediaURL": "ar://b", "blockType": "STORY", "id": None},
                {"name": "C", "description": "third", "mediaURL": "ar://c", "blockType": "STORY", "id": None},
            ],
        },
    }
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def franchise_file(tmp_path):
    """Dataset with characters, a location and two relationships between them."""
    path = tmp_path / "ip-assets.json"
    data = {
        "ip-assets": {
            "characters": [
                {"name": "Bilbo", "description": "hobbit", "mediaURL": "", "ipAssetType": "CHARACTER", "id": None},
                {"name": "Gandalf", "description": "wizard", "mediaURL": "", "ipAssetType": "CHARACTER", "id": None},
            ],
            "locations": [
                {"name": "Bag End", "description": "home", "ipAssetType": "LOCATION", "id": None},
            ],
        },
        "relationships": [
            {
                "sourceContract": "same",
                "sourceAssetType": "characters",
                "sourceAssetIndex": 0,
                "destContract": "same",
                "destAssetType": "locations",
                "destAssetIndex": 0,
                "name": "LIVES_IN",
                "ttl": 0,
            },
            {
                "sourceContract": "same",
                "sourceAssetType": "characters",
                "sourceAssetIndex": 1,
                "destContract": "same",
                "destAssetType": "characters",
                "destAssetIndex": 0,
                "name": "MENTOR_OF",
                "ttl": 3600,
            },
        ],
    }
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
