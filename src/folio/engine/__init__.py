"""Content publishing and versioning engine for Folio.

Public services:
- ProjectPublisher: draft lifecycle (create, save, publish, unpublish,
  delete, duplicate) with versions and history
- MediaService: upload slots and upload commits
- PublicReader: published snapshots for the public site
- resolve_media_url: stored media reference to servable URL
"""

from folio.engine.documents import GalleryInput, MetaInput, ProjectPayload
from folio.engine.factory import FolioEngine, build_engine
from folio.engine.gc import AssetGarbageCollector
from folio.engine.media import CommittedAsset, MediaService, UploadSlot
from folio.engine.media_urls import resolve_media_url
from folio.engine.publisher import ProjectPublisher
from folio.engine.snapshot import PublicReader
from folio.engine.state_machine import VALID_TRANSITIONS, validate_transition
from folio.engine.transactions import RetryPolicy, TransactionCoordinator, is_retryable
from folio.engine.views import AdminProject, PublicProject

__all__ = [
    # Payloads and views
    "ProjectPayload",
    "MetaInput",
    "GalleryInput",
    "AdminProject",
    "PublicProject",
    "UploadSlot",
    "CommittedAsset",
    # Services
    "ProjectPublisher",
    "MediaService",
    "PublicReader",
    "AssetGarbageCollector",
    "FolioEngine",
    "build_engine",
    # Transactions
    "TransactionCoordinator",
    "RetryPolicy",
    "is_retryable",
    # State machine
    "VALID_TRANSITIONS",
    "validate_transition",
    # Media URLs
    "resolve_media_url",
]
