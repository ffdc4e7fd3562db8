from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import boto3

from domain.errors import ConfigurationError
from domain.ports import LoggerPort


class S3FileFetcher:
    """Downloads ``s3://`` documents to a local temp directory for upload actions.

    With a default bucket configured the whole path after ``s3://`` is the
    object key; otherwise the first path segment names the bucket.
    """

    def __init__(
        self,
        *,
        logger: LoggerPort,
        bucket: str | None = None,
        profile: str | None = None,
        download_dir: str | None = None,
        client: Any = None,
    ) -> None:
        self._logger = logger
        self._bucket = bucket
        self._profile = profile
        self._download_dir = Path(download_dir or tempfile.gettempdir())
        self._client = client

    def fetch(self, uri: str) -> str:
        bucket, key = self.split_uri(uri)
        local_path = self._download_dir / Path(key).name
        self._download_dir.mkdir(parents=True, exist_ok=True)
        self._s3().download_file(bucket, key, str(local_path))
        self._logger.info("s3_download_completed", bucket=bucket, key=key, path=str(local_path))
        return str(local_path)

    def split_uri(self, uri: str) -> tuple[str, str]:
        if not uri.startswith("s3://"):
            raise ConfigurationError(f"Not an S3 URI: {uri}")
        path = uri[len("s3://"):].lstrip("/")
        if self._bucket:
            key = path
            bucket = self._bucket
        else:
            bucket, _, key = path.partition("/")
        if not bucket or not key:
            raise ConfigurationError(f"S3 URI needs a bucket and an object key: {uri}")
        return bucket, key

    def _s3(self) -> Any:
        if self._client is None:
            session = boto3.Session(profile_name=self._profile)
            self._client = session.client("s3")
        return self._client
