"""Tests for image ingestion and the S3 object store."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from conftest import BUCKET, InMemoryObjectStore, image
from listing_admin.core.exceptions import StorageWriteError, ValidationError
from listing_admin.services.images import ImageIngestor
from listing_admin.services.storage import S3ObjectStore
from listing_admin.utils.strings import sanitize_filename


class TestSanitizeFilename:
    def test_whitespace_replaced(self) -> None:
        assert sanitize_filename("front  door.jpg") == "front_door.jpg"

    def test_path_components_dropped(self) -> None:
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("C:\\Users\\me\\pic.png") == "pic.png"

    def test_unsafe_characters_replaced(self) -> None:
        assert sanitize_filename("kitchen#1?.jpg") == "kitchen_1_.jpg"

    def test_fallback(self) -> None:
        assert sanitize_filename(None) == "upload"
        assert sanitize_filename("   ") == "upload"
        assert sanitize_filename("folder/") == "upload"


class TestImageIngestor:
    def test_ingest_stores_and_returns_public_url(self, ingestor, object_store) -> None:
        url = ingestor.ingest(b"bytes", "My House.jpg", "image/jpeg")

        assert url.startswith(f"{object_store.base}/{BUCKET}/")
        assert url.endswith("_My_House.jpg")
        key = object_store.key_for_url(BUCKET, url)
        assert object_store.objects[(BUCKET, key)] == (b"bytes", "image/jpeg")

    def test_keys_unique_for_same_name(self, ingestor) -> None:
        urls = {ingestor.ingest(b"x", "a.jpg", "image/jpeg") for _ in range(20)}
        assert len(urls) == 20

    def test_key_prefix(self, object_store) -> None:
        ing = ImageIngestor(object_store, bucket=BUCKET, key_prefix="listings/")
        assert "/listings/" in ing.ingest(b"x", "a.jpg", "image/jpeg")

    def test_upload_is_upsert(self) -> None:
        store = MagicMock()
        store.public_url.return_value = "https://cdn.test/k"
        ImageIngestor(store, bucket=BUCKET).ingest(b"x", "a.jpg", None)

        args, kwargs = store.put.call_args
        assert kwargs["upsert"] is True
        assert args[3] == "application/octet-stream"

    def test_empty_file_rejected(self, ingestor, object_store) -> None:
        with pytest.raises(ValidationError):
            ingestor.ingest(b"", "a.jpg", "image/jpeg")
        assert object_store.objects == {}

    def test_ingest_many_keeps_upload_order(self, ingestor) -> None:
        names = [f"img{i}.jpg" for i in range(8)]
        urls = ingestor.ingest_many([image(n) for n in names])
        assert [u.rsplit("_", 1)[1] for u in urls] == names

    def test_ingest_many_sequential(self, object_store) -> None:
        ing = ImageIngestor(object_store, bucket=BUCKET, max_workers=1)
        urls = ing.ingest_many([image("b.jpg"), image("a.jpg")])
        assert urls[0].endswith("_b.jpg") and urls[1].endswith("_a.jpg")

    def test_ingest_many_failure_raises_storage_error(self, ingestor, object_store) -> None:
        object_store.fail_on.add("bad.jpg")
        with pytest.raises(StorageWriteError):
            ingestor.ingest_many([image("ok.jpg"), image("bad.jpg"), image("ok2.jpg")])

    def test_ingest_many_rejects_empty_before_upload(self, ingestor, object_store) -> None:
        with pytest.raises(ValidationError):
            ingestor.ingest_many([image("ok.jpg"), image("empty.jpg", data=b"")])
        assert object_store.objects == {}

    def test_discard_skips_foreign_urls(self, ingestor, object_store) -> None:
        url = ingestor.ingest(b"x", "a.jpg", "image/jpeg")
        assert ingestor.discard([url, None, "https://elsewhere.test/b.jpg"]) == 1
        assert object_store.objects == {}

    def test_discard_failure_is_swallowed(self) -> None:
        store = InMemoryObjectStore()
        store.remove = MagicMock(side_effect=StorageWriteError("nope"))
        ing = ImageIngestor(store, bucket=BUCKET)
        assert ing.discard([f"{store.base}/{BUCKET}/k.jpg"]) == 0


class TestS3ObjectStore:
    def test_put_params(self) -> None:
        client = MagicMock()
        S3ObjectStore(client).put("b", "k.jpg", b"data", "image/png")

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "b"
        assert kwargs["Key"] == "k.jpg"
        assert kwargs["ContentType"] == "image/png"
        assert "IfNoneMatch" not in kwargs

    def test_put_without_upsert_is_conditional(self) -> None:
        client = MagicMock()
        S3ObjectStore(client).put("b", "k.jpg", b"data", "image/png", upsert=False)
        assert client.put_object.call_args.kwargs["IfNoneMatch"] == "*"

    def test_put_failure_wrapped(self) -> None:
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        with pytest.raises(StorageWriteError):
            S3ObjectStore(client).put("b", "k.jpg", b"data", "image/png")

    def test_public_url_with_base(self) -> None:
        store = S3ObjectStore(MagicMock(), public_base="http://localhost:9000/")
        url = store.public_url("property-images", "1_a b.jpg")
        assert url == "http://localhost:9000/property-images/1_a%20b.jpg"
        assert store.key_for_url("property-images", url) == "1_a b.jpg"

    def test_public_url_aws(self) -> None:
        store = S3ObjectStore(MagicMock())
        assert store.public_url("imgs", "k.jpg") == "https://imgs.s3.amazonaws.com/k.jpg"
        assert store.key_for_url("imgs", "https://other.test/k.jpg") is None

    def test_remove(self) -> None:
        client = MagicMock()
        S3ObjectStore(client).remove("b", ["k1", "k2"])
        kwargs = client.delete_objects.call_args.kwargs
        assert kwargs["Delete"]["Objects"] == [{"Key": "k1"}, {"Key": "k2"}]

    def test_remove_nothing(self) -> None:
        client = MagicMock()
        S3ObjectStore(client).remove("b", [])
        client.delete_objects.assert_not_called()
