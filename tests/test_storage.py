import json
import os
import threading
import unittest
from types import SimpleNamespace
from unittest.mock import Mock, patch

from vercel.blob import BlobAccessError, BlobNotFoundError

from voipshop_docs import storage
from voipshop_docs.storage import BlobStorageError, BlobStore, SnapshotNotFound, StoredBlob


class FakeBlobService:
    """Records uploads and answers like the Blob SDK."""

    def __init__(self) -> None:
        self.calls = []
        self.objects = {}
        self.lock = threading.Lock()

    def put_blob(self, pathname, body, **options):
        with self.lock:
            self.calls.append({"pathname": pathname, "data": body, "options": options})
        return SimpleNamespace(url=f"https://public.blob.test/{pathname}", pathname=pathname)

    def get_blob(self, pathname, access):
        if pathname not in self.objects:
            raise BlobNotFoundError()
        return SimpleNamespace(body=self.objects[pathname])


class BlobTestCase(unittest.TestCase):
    def setUp(self) -> None:
        env = patch.dict(os.environ, {"BLOB_READ_WRITE_TOKEN": "t", "BLOB_BASE_URL": ""})
        env.start()
        self.addCleanup(env.stop)
        self.service = FakeBlobService()
        for name in ("put_blob", "get_blob"):
            patcher = patch(f"voipshop_docs.storage.blob.{name}", side_effect=getattr(self.service, name))
            patcher.start()
            self.addCleanup(patcher.stop)


class BlobStoreTests(BlobTestCase):
    def test_put_pdf_is_public_and_fixed_name(self) -> None:
        stored = BlobStore().put_pdf("orders/VS-1/invoice-INV-1.pdf", b"%PDF-1.4")

        self.assertEqual(
            stored,
            StoredBlob("https://public.blob.test/orders/VS-1/invoice-INV-1.pdf", "orders/VS-1/invoice-INV-1.pdf"),
        )
        options = self.service.calls[0]["options"]
        self.assertEqual(options["access"], "public")
        self.assertEqual(options["content_type"], "application/pdf")
        self.assertFalse(options["add_random_suffix"])
        self.assertEqual(options["cache_control_max_age"], 31536000)

    def test_text_is_encoded(self) -> None:
        BlobStore().put("orders/x/hello.txt", "héllo", "text/plain")

        self.assertEqual(self.service.calls[0]["data"], "héllo".encode("utf-8"))
        self.assertIsNone(self.service.calls[0]["options"]["cache_control_max_age"])

    def test_put_without_token_fails(self) -> None:
        with patch.dict(os.environ, {"BLOB_READ_WRITE_TOKEN": ""}):
            with self.assertRaisesRegex(BlobStorageError, "BLOB_READ_WRITE_TOKEN"):
                BlobStore().put("a.txt", "x", "text/plain")

        self.assertEqual(self.service.calls, [])

    def test_sdk_error_is_wrapped(self) -> None:
        with patch("voipshop_docs.storage.blob.put_blob", side_effect=BlobAccessError()):
            with self.assertRaisesRegex(BlobStorageError, "a.txt"):
                BlobStore().put("a.txt", "x", "text/plain")


class PersistOrderArtifactsTests(BlobTestCase):
    def test_requires_order_number(self) -> None:
        with self.assertRaises(ValueError):
            storage.persist_order_artifacts("")

    def test_uploads_documents_and_writes_links_last(self) -> None:
        links = storage.persist_order_artifacts(
            order_number="VS 1",
            invoice_number="INV/1",
            invoice_pdf=b"inv",
            sla_pdf=b"sla",
            porting_pdf=b"port",
            snapshot={"orderNumber": "VS 1"},
        )

        self.assertEqual(links["orderNumber"], "VS-1")
        self.assertEqual(links["invoiceNumber"], "INV-1")
        self.assertEqual(links["invoiceUrl"], "https://public.blob.test/orders/VS-1/invoice-INV-1.pdf")
        self.assertEqual(links["slaUrl"], "https://public.blob.test/orders/VS-1/sla-INV-1.pdf")
        self.assertEqual(links["portingUrl"], "https://public.blob.test/orders/VS-1/porting-VS-1.pdf")
        self.assertEqual(links["metaUrl"], "https://public.blob.test/orders/VS-1/meta.json")
        self.assertNotIn("quoteUrl", links)

        self.assertEqual(self.service.calls[-1]["pathname"], "orders/VS-1/links.json")
        self.assertEqual(json.loads(self.service.calls[-1]["data"]), links)
        self.assertEqual(len(self.service.calls), 5)

    def test_quote_only_uses_quote_number(self) -> None:
        links = storage.persist_order_artifacts(order_number="Q-1", quote_number="Q-1", quote_pdf=b"q")

        self.assertEqual(links["quoteUrl"], "https://public.blob.test/orders/Q-1/quote-Q-1.pdf")
        self.assertEqual(links["quoteNumber"], "Q-1")

    def test_base_url_overrides_returned_url(self) -> None:
        with patch.dict(os.environ, {"BLOB_BASE_URL": "https://cdn.test/"}):
            links = storage.persist_order_artifacts(order_number="Q-1", quote_pdf=b"q")

        self.assertEqual(links["quoteUrl"], "https://cdn.test/orders/Q-1/quote-Q-1.pdf")

    def test_upload_failure_fails_the_batch(self) -> None:
        failing = Mock()
        failing.put_json.return_value = StoredBlob("u", "orders/VS-1/meta.json")
        failing.put_pdf.side_effect = BlobStorageError("boom")

        with self.assertRaises(BlobStorageError):
            storage.persist_order_artifacts(order_number="VS-1", invoice_pdf=b"x", store=failing)
        failing.put_json.assert_called_once()


class OrderLookupTests(BlobTestCase):
    def test_links_missing_returns_empty(self) -> None:
        self.assertEqual(storage.get_order_links("VS-1"), {})

    def test_links_are_read_by_pathname(self) -> None:
        self.service.objects["orders/VS-1/links.json"] = b'{"slaUrl": "https://cdn.test/s.pdf"}'

        self.assertEqual(storage.get_order_links("VS-1"), {"slaUrl": "https://cdn.test/s.pdf"})

    def test_snapshot_missing_raises(self) -> None:
        with self.assertRaises(SnapshotNotFound):
            storage.get_order_snapshot("VS-1")

    def test_snapshot_must_be_an_object(self) -> None:
        self.service.objects["orders/VS-1/meta.json"] = b"[1, 2]"

        with self.assertRaises(SnapshotNotFound):
            storage.get_order_snapshot("VS-1")

    def test_snapshot_is_returned(self) -> None:
        self.service.objects["orders/VS-1/meta.json"] = b'{"orderNumber": "VS-1"}'

        self.assertEqual(storage.get_order_snapshot("VS-1"), {"orderNumber": "VS-1"})

    def test_invalid_json_is_a_storage_error(self) -> None:
        self.service.objects["orders/VS-1/links.json"] = b"{oops"

        with self.assertRaises(BlobStorageError):
            storage.get_order_links("VS-1")

    def test_access_error_is_wrapped(self) -> None:
        with patch("voipshop_docs.storage.blob.get_blob", side_effect=BlobAccessError()):
            with self.assertRaises(BlobStorageError):
                storage.get_order_snapshot("VS-1")


if __name__ == "__main__":
    unittest.main()
