import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, ReadTimeoutError

from portfoliocms.domain.errors import (
    BlobDeleteError,
    BlobStreamError,
    BlobUploadError,
    UpstreamTransientError,
    ValidationError,
)
from portfoliocms.infrastructure.blobs import S3BlobStore, S3StoreConfig, s3_store_from_settings
from portfoliocms.infrastructure.blobs.s3_store import RETRY_HINT
from portfoliocms.infrastructure.settings import Settings


def _client_error(code: str, status: int, operation: str = "PutObject") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


@pytest.fixture()
def s3_client() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def store(s3_client: MagicMock) -> S3BlobStore:
    cfg = S3StoreConfig(
        endpoint="http://minio:9000",
        region="us-east-1",
        access_key="minio",
        secret_key="minio123",
        bucket="assets",
        public_base_url="https://assets.example.com/",
    )
    return S3BlobStore(cfg, client=s3_client)


class TestUpload:
    def test_returns_url_whose_public_id_addresses_the_object(self, store, s3_client) -> None:
        url = store.upload(io.BytesIO(b"png"), "thumbnails", "image/png")

        args, kwargs = s3_client.upload_fileobj.call_args
        bucket, key = args[1], args[2]
        assert bucket == "assets"
        assert key.startswith("portfolio/thumbnails/")
        assert url == f"https://assets.example.com/{key}"
        assert kwargs["ExtraArgs"]["ContentType"] == "image/png"
        assert kwargs["Config"] is store.transfer_config

    def test_unreachable_store_is_transient(self, store, s3_client) -> None:
        s3_client.upload_fileobj.side_effect = EndpointConnectionError(endpoint_url="http://minio:9000")

        with pytest.raises(UpstreamTransientError) as exc:
            store.upload(io.BytesIO(b"png"), "thumbnails", "image/png")

        assert exc.value.message == RETRY_HINT

    @pytest.mark.parametrize(
        "error",
        [
            ReadTimeoutError(endpoint_url="http://minio:9000"),
            TimeoutError("timed out"),
            _client_error("RequestTimeout", 400),
        ],
    )
    def test_timeouts_are_transient(self, store, s3_client, error) -> None:
        s3_client.upload_fileobj.side_effect = error

        with pytest.raises(UpstreamTransientError):
            store.upload(io.BytesIO(b"png"), "thumbnails")

    def test_timeout_wording_alone_is_an_upload_error(self, store, s3_client) -> None:
        s3_client.upload_fileobj.side_effect = RuntimeError("Request Timeout while sending part 2")

        with pytest.raises(BlobUploadError):
            store.upload(io.BytesIO(b"png"), "thumbnails")

    def test_rejected_payload_is_a_format_error(self, store, s3_client) -> None:
        s3_client.upload_fileobj.side_effect = _client_error("InvalidArgument", 400)

        with pytest.raises(ValidationError, match="File format not supported"):
            store.upload(io.BytesIO(b"png"), "thumbnails")

    def test_other_rejections_are_upload_errors(self, store, s3_client) -> None:
        s3_client.upload_fileobj.side_effect = _client_error("AccessDenied", 403)

        with pytest.raises(BlobUploadError):
            store.upload(io.BytesIO(b"png"), "thumbnails")

    def test_unreadable_stream_is_a_stream_error(self, store, s3_client) -> None:
        broken = MagicMock()
        broken.read.side_effect = OSError("connection reset by peer")

        def read_all(fileobj, bucket, key, ExtraArgs=None, Config=None):
            fileobj.read(1024)

        s3_client.upload_fileobj.side_effect = read_all

        with pytest.raises(BlobStreamError, match="Stream error: connection reset by peer"):
            store.upload(broken, "thumbnails")


class TestDelete:
    def test_deletes_key_under_folder(self, store, s3_client) -> None:
        store.delete("abc123", "company_logos")

        s3_client.delete_object.assert_called_once_with(Bucket="assets", Key="portfolio/company_logos/abc123")

    def test_missing_object_counts_as_deleted(self, store, s3_client) -> None:
        s3_client.delete_object.side_effect = _client_error("NoSuchKey", 404, "DeleteObject")

        store.delete("abc123", "company_logos")

    def test_other_failures_raise(self, store, s3_client) -> None:
        s3_client.delete_object.side_effect = _client_error("AccessDenied", 403, "DeleteObject")

        with pytest.raises(BlobDeleteError):
            store.delete("abc123", "company_logos")


def test_store_from_settings_uses_configured_bucket_and_folder() -> None:
    settings = Settings(
        s3_endpoint="http://minio:9000",
        s3_bucket="portfolio-assets",
        s3_access_key="minio",
        s3_secret_key="minio123",
        blob_root_folder="site",
    )

    store = s3_store_from_settings(settings)

    assert store.cfg.bucket == "portfolio-assets"
    assert store.cfg.access_key == "minio"
    assert store.object_url(store.object_key("thumbnails", "x")) == "http://minio:9000/portfolio-assets/site/thumbnails/x"
