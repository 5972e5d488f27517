"""Batch upload of dataset files and reconciliation of on-chain ids."""

from ip_registry_tools.upload.batching import chunk, submit_batch
from ip_registry_tools.upload.reconcile import Reconciler, match_created_assets, match_relationships
from ip_registry_tools.upload.store import DatasetStore
from ip_registry_tools.upload.uploader import BatchUploader

__all__ = [
    "chunk",
    "submit_batch",
    "Reconciler",
    "match_created_assets",
    "match_relationships",
    "DatasetStore",
    "BatchUploader",
]
