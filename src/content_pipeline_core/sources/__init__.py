from __future__ import annotations

from content_pipeline_core.sources.filesystem import iter_directory
from content_pipeline_core.sources.http_api import ContentApiSource
from content_pipeline_core.sources.s3 import ObjectStore, S3Source

__all__ = [
    "ContentApiSource",
    "ObjectStore",
    "S3Source",
    "iter_directory",
]
