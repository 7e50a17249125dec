from __future__ import annotations

from content_pipeline_core.storage.s3 import S3Client, S3Config, parse_s3_uri

__all__ = [
    "S3Client",
    "S3Config",
    "parse_s3_uri",
]
