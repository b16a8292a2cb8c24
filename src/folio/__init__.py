"""Folio - Content publishing and versioning engine for a portfolio site.

This package provides the transactional core that keeps draft projects,
published snapshots, version history, the audit log and shared media-asset
metadata consistent, backed by SQLAlchemy async sessions and an
S3-compatible blob store.
"""

__version__ = "0.1.0"
