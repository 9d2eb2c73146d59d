from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from loguru import logger

from portfoliocms.domain.errors import (
    BlobDeleteError,
    BlobStreamError,
    BlobUploadError,
    UpstreamTransientError,
    ValidationError,
)
from portfoliocms.infrastructure.settings import Settings

RETRY_HINT = "Please check your internet connection and try again."

_TRANSIENT_ERRORS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
    TimeoutError,
)
# S3 answers an idle upload with 400 RequestTimeout
_TRANSIENT_CODES = {"RequestTimeout"}
_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass(frozen=True)
class S3StoreConfig:
    endpoint: Optional[str]
    region: str
    access_key: Optional[str]
    secret_key: Optional[str]
    bucket: str
    public_base_url: str
    root_folder: str = "portfolio"
    force_path_style: bool = True
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    multipart_chunk_mb: int = 8


class _GuardedStream:
    """Read-only view of an upload stream that reports read failures distinctly."""

    def __init__(self, raw: BinaryIO):
        self._raw = raw

    def read(self, size: int = -1) -> bytes:
        try:
            return self._raw.read(size)
        except OSError as e:
            raise BlobStreamError(f"Stream error: {e}") from e


class S3BlobStore:
    """Blob store backed by an S3-compatible bucket.

    Objects live at ``<root>/<folder>/<public_id>``; the key carries no
    extension so the public id derived from the returned URL addresses the
    object directly.
    """

    def __init__(self, cfg: S3StoreConfig, client=None) -> None:
        self.cfg = cfg
        if client is None:
            s3_cfg = Config(
                s3={"addressing_style": "path"} if cfg.force_path_style else {},
                connect_timeout=cfg.connect_timeout,
                read_timeout=cfg.read_timeout,
                retries={"max_attempts": 3, "mode": "standard"},
            )
            client = boto3.client(
                "s3",
                endpoint_url=cfg.endpoint,
                aws_access_key_id=cfg.access_key,
                aws_secret_access_key=cfg.secret_key,
                region_name=cfg.region,
                config=s3_cfg,
            )
        self.client = client
        chunk = cfg.multipart_chunk_mb * 1024 * 1024
        # Multipart streaming: never holds more than a few chunks in memory
        self.transfer_config = TransferConfig(multipart_threshold=chunk, multipart_chunksize=chunk)

    def object_key(self, folder: str, public_id: str) -> str:
        return f"{self.cfg.root_folder}/{folder}/{public_id}"

    def object_url(self, key: str) -> str:
        return f"{self.cfg.public_base_url.rstrip('/')}/{key}"

    def upload(self, stream: BinaryIO, folder: str, content_type: Optional[str] = None) -> str:
        """Stream an attachment into ``folder`` and return its durable URL."""
        key = self.object_key(folder, uuid.uuid4().hex)
        extra_args = {"CacheControl": "public, max-age=31536000, immutable"}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            self.client.upload_fileobj(
                _GuardedStream(stream),
                self.cfg.bucket,
                key,
                ExtraArgs=extra_args,
                Config=self.transfer_config,
            )
        except BlobStreamError:
            raise
        except _TRANSIENT_ERRORS as e:
            logger.warning(f"Blob upload to {folder} could not reach the store: {e}")
            raise UpstreamTransientError(RETRY_HINT) from e
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _TRANSIENT_CODES:
                logger.warning(f"Blob upload to {folder} timed out: {e}")
                raise UpstreamTransientError(RETRY_HINT) from e
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if status == 400:
                raise ValidationError("File format not supported") from e
            logger.error(f"Blob upload to {folder} rejected: {e}")
            raise BlobUploadError("Attachment upload failed") from e
        except Exception as e:
            logger.error(f"Blob upload to {folder} failed: {e}")
            raise BlobUploadError("Attachment upload failed") from e

        logger.info(f"Uploaded blob {key}")
        return self.object_url(key)

    def delete(self, public_id: str, folder: str) -> None:
        """Delete an uploaded object; an object that is already gone counts as deleted."""
        key = self.object_key(folder, public_id)
        try:
            self.client.delete_object(Bucket=self.cfg.bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                logger.debug(f"Blob {key} already absent")
                return
            raise BlobDeleteError(f"Blob deletion failed: {e}") from e
        except BotoCoreError as e:
            raise BlobDeleteError(f"Blob deletion failed: {e}") from e
        logger.info(f"Deleted blob {key}")


def s3_store_from_settings(settings: Settings) -> S3BlobStore:
    cfg = S3StoreConfig(
        endpoint=settings.s3_endpoint,
        region=settings.s3_region,
        access_key=settings.s3_access_key.get_secret_value() if settings.s3_access_key else None,
        secret_key=settings.s3_secret_key.get_secret_value() if settings.s3_secret_key else None,
        bucket=settings.s3_bucket,
        public_base_url=settings.blob_public_base_url,
        root_folder=settings.blob_root_folder,
        force_path_style=settings.s3_force_path_style,
        connect_timeout=settings.s3_connect_timeout_seconds,
        read_timeout=settings.s3_read_timeout_seconds,
        multipart_chunk_mb=settings.s3_multipart_chunk_mb,
    )
    return S3BlobStore(cfg)
