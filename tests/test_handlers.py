import os
import unittest
from unittest.mock import Mock, patch

from voipshop_docs.handlers import complete_order, dev, diagnostics, invoice, orders, porting, quote, sla
from voipshop_docs.mailer import EmailSendError
from voipshop_docs.ratelimit import ALLOW, RateLimitResult
from voipshop_docs.recaptcha import RecaptchaResult
from voipshop_docs.storage import BlobStorageError, SnapshotNotFound, StoredBlob
from voipshop_docs.web import Request

PDF = b"%PDF-1.4 test"
CAPTCHA_OK = RecaptchaResult(True, "", {"success": True, "action": "x", "score": 0.9})
CAPTCHA_LOW = RecaptchaResult(False, "low_score", {"success": True, "action": "x", "score": 0.1, "hostname": "h"})
LIMITED = RateLimitResult(ok=False, limit=10, remaining=0, window="1m")


class HandlerTestCase(unittest.TestCase):
    """Patches every outbound integration; tests override what they exercise."""

    env = {
        "RECAPTCHA_V3_SECRET_KEY": "secret",
        "RECAPTCHA_SECRET_KEY": "",
        "RECAPTCHA_SECRET": "",
        "RESEND_API_KEY": "re_test",
        "USE_BLOB_LINK": "",
        "BLOB_BASE_URL": "",
    }

    def setUp(self) -> None:
        self.start(patch.dict(os.environ, self.env))
        self.captcha = self.start(patch("voipshop_docs.recaptcha.verify_recaptcha", return_value=CAPTCHA_OK))
        self.limits = self.start(patch("voipshop_docs.ratelimit.enforce_limits", return_value=ALLOW))
        self.send = self.start(patch("voipshop_docs.mailer.send_email", return_value="msg_1"))
        self.persist = self.start(
            patch(
                "voipshop_docs.storage.persist_order_artifacts",
                side_effect=lambda **kwargs: {"orderNumber": kwargs["order_number"], "quoteUrl": "https://cdn.test/q.pdf"},
            )
        )
        self.builders = {
            name: self.start(patch(f"voipshop_docs.documents.build_{name}_pdf", return_value=PDF))
            for name in ("quote", "invoice", "sla", "porting")
        }

    def start(self, patcher):
        mocked = patcher.start()
        self.addCleanup(patcher.stop)
        return mocked

    def post(self, body: dict, **kwargs) -> Request:
        return Request("POST", kwargs.pop("path", "/"), body=body, remote_addr="10.0.0.1", **kwargs)


class SendQuoteTests(HandlerTestCase):
    def body(self, **extra) -> dict:
        return {
            "quoteNumber": "Q-1",
            "client": {"name": "Jane", "email": "jane@example.com"},
            "subtotals": {"onceOff": 100, "monthly": 480},
            "recaptchaToken": "tok",
            **extra,
        }

    def test_options_is_preflight(self) -> None:
        response = quote.handle(Request("OPTIONS", "/api/send-quote"))

        self.assertEqual(response.status, 204)
        self.assertEqual(response.headers["Access-Control-Allow-Origin"], "*")

    def test_without_client_email_returns_inline_pdf(self) -> None:
        response = quote.handle(self.post({"quoteNumber": "Q-1"}, query={"compact": "1"}))

        self.assertEqual(response.status, 200)
        self.assertEqual(response.body, PDF)
        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="Quote-Q-1.pdf"')
        self.assertTrue(self.builders["quote"].call_args[0][0]["compact"])
        self.captcha.assert_not_called()

    def test_preview_flag_skips_email(self) -> None:
        response = quote.handle(self.post(self.body(preview=True)))

        self.assertEqual(response.content_type, "application/pdf")
        self.send.assert_not_called()
        self.persist.assert_not_called()

    def test_missing_secret_is_server_error(self) -> None:
        with patch.dict(os.environ, {"RECAPTCHA_V3_SECRET_KEY": ""}):
            response = quote.handle(self.post(self.body()))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.json(), {"error": "Server misconfigured: missing reCAPTCHA secret env"})

    def test_captcha_rejection(self) -> None:
        self.captcha.return_value = CAPTCHA_LOW

        response = quote.handle(self.post(self.body()))

        self.assertEqual(response.status, 400)
        self.assertEqual(
            response.json(),
            {"error": "reCAPTCHA rejected", "reason": "low_score", "meta": {"action": "x", "score": 0.1, "hostname": "h"}},
        )
        self.assertEqual(self.captcha.call_args[1]["action_expected"], "send_quote")
        self.assertEqual(self.captcha.call_args[1]["remote_ip"], "10.0.0.1")

    def test_rate_limited(self) -> None:
        self.limits.return_value = LIMITED

        response = quote.handle(self.post(self.body()))

        self.assertEqual(response.status, 429)
        self.assertEqual(
            response.json(), {"error": "Too many requests", "retry_window": "1m", "limit": 10, "remaining": 0}
        )
        self.limits.assert_called_once_with(ip="10.0.0.1", action="send_quote", email="jane@example.com")
        self.builders["quote"].assert_not_called()

    def test_persists_under_quote_number_without_order(self) -> None:
        quote.handle(self.post(self.body()))

        kwargs = self.persist.call_args[1]
        self.assertEqual(kwargs["order_number"], "Q-1")
        self.assertEqual(kwargs["quote_pdf"], PDF)
        self.assertEqual(kwargs["snapshot"]["quoteNumber"], "Q-1")

    def test_email_not_configured_still_returns_links(self) -> None:
        with patch.dict(os.environ, {"RESEND_API_KEY": ""}):
            response = quote.handle(self.post(self.body(orderNumber="VS-9")))

        self.assertEqual(response.status, 500)
        self.assertEqual(
            response.json(),
            {"ok": False, "error": "Email not configured", "orderNumber": "VS-9", "quoteUrl": "https://cdn.test/q.pdf"},
        )

    def test_link_delivery(self) -> None:
        response = quote.handle(self.post(self.body(delivery="LINK")))

        self.assertEqual(response.status, 200)
        self.assertEqual(response.json()["delivery"], "link")
        self.assertEqual(response.json()["quoteUrl"], "https://cdn.test/q.pdf")
        message = self.send.call_args[1]
        self.assertEqual(message["subject"], "VoIP Shop Quote • Q-1")
        self.assertEqual(message["cc"], ["sales@voipshop.co.za"])
        self.assertIn("https://cdn.test/q.pdf", message["html"])
        self.assertIn("R 552.00", message["html"])
        self.assertNotIn("attachments", message)

    def test_attach_delivery_is_default(self) -> None:
        response = quote.handle(self.post(self.body()))

        self.assertEqual(response.json()["delivery"], "attach")
        self.assertEqual(response.json()["id"], "msg_1")
        attachment = self.send.call_args[1]["attachments"][0]
        self.assertEqual((attachment.filename, attachment.content), ("Quote-Q-1.pdf", PDF))

    def test_use_blob_link_switches_default(self) -> None:
        with patch.dict(os.environ, {"USE_BLOB_LINK": "1"}):
            response = quote.handle(self.post(self.body()))

        self.assertEqual(response.json()["delivery"], "link")

    def test_send_failure(self) -> None:
        self.send.side_effect = EmailSendError("rejected")

        response = quote.handle(self.post(self.body()))

        self.assertEqual(response.status, 502)
        self.assertEqual(response.json()["error"], "Email send failed")
        self.assertEqual(response.json()["quoteUrl"], "https://cdn.test/q.pdf")

    def test_unexpected_error_is_plain_text(self) -> None:
        self.persist.side_effect = BlobStorageError("Missing BLOB_READ_WRITE_TOKEN env")

        response = quote.handle(self.post(self.body()))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.body, b"Missing BLOB_READ_WRITE_TOKEN env")
        self.assertEqual(response.headers["Access-Control-Allow-Origin"], "*")


class SendInvoiceTests(HandlerTestCase):
    def body(self, **extra) -> dict:
        return {
            "invoiceNumber": "INV-1",
            "orderNumber": "VS-1",
            "client": {"name": "Jane", "email": "jane@example.com"},
            "recaptchaToken": "tok",
            "recaptchaAction": "send_invoice",
            **extra,
        }

    def test_options(self) -> None:
        self.assertEqual(invoice.handle(Request("OPTIONS", "/")).status, 200)

    def test_get_renders_without_captcha(self) -> None:
        response = invoice.handle(Request("GET", "/api/send-invoice"))

        self.assertEqual(response.status, 200)
        self.assertTrue(response.headers["Content-Disposition"].startswith('inline; filename="Invoice-INV-'))
        self.captcha.assert_not_called()

    def test_captcha_rejection(self) -> None:
        self.captcha.return_value = CAPTCHA_LOW

        response = invoice.handle(self.post(self.body()))

        self.assertEqual(response.status, 400)
        self.assertEqual(self.captcha.call_args[1]["action_expected"], "send_invoice")
        self.builders["invoice"].assert_not_called()

    def test_post_without_email_returns_pdf(self) -> None:
        response = invoice.handle(self.post({"invoiceNumber": "INV-1", "recaptchaToken": "tok"}))

        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="Invoice-INV-1.pdf"')
        self.send.assert_not_called()

    def test_link_delivery_uploads_dated_object(self) -> None:
        with patch("voipshop_docs.storage.BlobStore") as store_cls, patch(
            "voipshop_docs.payloads.utc_today", return_value="2026-10-19"
        ):
            store_cls.return_value.put_pdf.return_value = StoredBlob(
                "https://blob.test/invoices/2026-10-19/invoice-INV-1.pdf", "invoices/2026-10-19/invoice-INV-1.pdf"
            )
            response = invoice.handle(self.post(self.body(delivery="link")))

        store_cls.return_value.put_pdf.assert_called_once_with("invoices/2026-10-19/invoice-INV-1.pdf", PDF)
        self.assertEqual(
            response.json(),
            {"ok": True, "delivery": "link", "pdfUrl": "https://blob.test/invoices/2026-10-19/invoice-INV-1.pdf"},
        )
        to, subject, html = self.send.call_args[0]
        self.assertEqual(subject, "VoIP Shop Invoice • INV-1 • Order VS-1")
        self.assertIn("Download Invoice (PDF)", html)

    def test_email_not_configured(self) -> None:
        with patch.dict(os.environ, {"RESEND_API_KEY": ""}), patch("voipshop_docs.storage.BlobStore") as store_cls:
            response = invoice.handle(self.post(self.body(delivery="link")))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.json(), {"ok": False, "error": "Email not configured"})
        self.assertEqual(response.headers["Access-Control-Allow-Origin"], "*")
        store_cls.assert_not_called()
        self.send.assert_not_called()

    def test_attach_delivery(self) -> None:
        response = invoice.handle(self.post(self.body()))

        self.assertEqual(response.json(), {"ok": True, "delivery": "attach", "id": "msg_1"})
        self.assertEqual(self.send.call_args[1]["attachments"][0].filename, "Invoice-INV-1.pdf")

    def test_send_failure_is_plain_text(self) -> None:
        self.send.side_effect = EmailSendError("boom")

        response = invoice.handle(self.post(self.body()))

        self.assertEqual(response.status, 502)
        self.assertEqual(response.body, b"Email send failed: boom")


class SendSlaTests(HandlerTestCase):
    def test_only_post(self) -> None:
        response = sla.handle(Request("GET", "/api/send-sla"))

        self.assertEqual(response.status, 405)
        self.assertEqual(response.json(), {"error": "Only POST allowed"})

    def test_captcha_rejection(self) -> None:
        self.captcha.return_value = RecaptchaResult(False, "missing_token")

        response = sla.handle(self.post({}))

        self.assertEqual(response.status, 400)
        self.assertEqual(response.json(), {"error": "reCAPTCHA rejected", "reason": "missing_token"})

    def test_rate_limit_uses_customer_email(self) -> None:
        self.limits.return_value = LIMITED

        response = sla.handle(self.post({"customer": {"email": "ops@acme.test"}}))

        self.assertEqual(response.status, 429)
        self.limits.assert_called_once_with(ip="10.0.0.1", action="send_sla", email="ops@acme.test")

    def test_returns_inline_pdf(self) -> None:
        response = sla.handle(self.post({"slaNumber": "SLA-7", "monthly": {"extensions": 4}}))

        self.assertEqual(response.status, 200)
        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="SLA-7.pdf"')
        services = self.builders["sla"].call_args[0][0]["services"]
        self.assertEqual(services[1], {"name": "Extensions", "qty": 4})

    def test_default_filename(self) -> None:
        response = sla.handle(self.post({}))

        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="SLA.pdf"')

    def test_build_failure(self) -> None:
        self.builders["sla"].side_effect = RuntimeError("font missing")

        response = sla.handle(self.post({}))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.json(), {"error": "Error generating SLA PDF", "detail": "font missing"})


class SendPortingTests(HandlerTestCase):
    def body(self) -> dict:
        return {
            "client": {"name": "Jane", "company": "Acme", "email": "jane@acme.test"},
            "port": {"numbers": ["0101234567"]},
            "recaptchaToken": "tok",
        }

    def test_preflight_reflects_origin_and_headers(self) -> None:
        request = Request(
            "OPTIONS",
            "/api/send-porting",
            headers={"Origin": "https://shop.test", "Access-Control-Request-Headers": "X-Custom"},
        )

        response = porting.handle(request)

        self.assertEqual(response.status, 204)
        self.assertEqual(response.headers["Access-Control-Allow-Origin"], "https://shop.test")
        self.assertEqual(response.headers["Access-Control-Allow-Headers"], "X-Custom")
        self.assertEqual(response.headers["Access-Control-Max-Age"], "86400")

    def test_get_not_allowed(self) -> None:
        response = porting.handle(Request("GET", "/api/send-porting"))

        self.assertEqual(response.status, 405)
        self.assertEqual(response.body, b"Method Not Allowed")

    def test_missing_client_email(self) -> None:
        response = porting.handle(self.post({"client": {"name": "Jane"}}))

        self.assertEqual(response.status, 400)
        self.assertEqual(response.body, b"Missing client email.")

    def test_email_not_configured(self) -> None:
        with patch.dict(os.environ, {"RESEND_API_KEY": ""}):
            response = porting.handle(self.post(self.body()))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.body, b"Server not configured (email).")

    def test_sends_letter(self) -> None:
        response = porting.handle(self.post(self.body()))

        self.assertEqual(response.json(), {"ok": True, "id": "msg_1", "attached": {"porting": True}})
        args, kwargs = self.send.call_args
        self.assertEqual(args[0], "jane@acme.test")
        self.assertEqual(args[1], "Porting Letter of Authority • Acme")
        self.assertEqual(kwargs["attachments"][0].filename, "Porting-Letter-of-Authority.pdf")
        company, client, port = self.builders["porting"].call_args[0]
        self.assertEqual(company["name"], "VoIP Shop")
        self.assertEqual(port, {"numbers": ["0101234567"]})

    def test_send_failure(self) -> None:
        self.send.side_effect = EmailSendError("nope")

        response = porting.handle(self.post(self.body()))

        self.assertEqual(response.status, 502)
        self.assertEqual(response.body, b"Email send failed: nope")


class CompleteOrderTests(HandlerTestCase):
    def body(self, **extra) -> dict:
        return {
            "customer": {"name": "Jane", "company": "Acme", "email": "jane@acme.test"},
            "monthly": {"items": [{"name": "Cloud PBX", "qty": 1, "unit": 150}], "totals": {"exVat": 150}},
            "orderNumber": "VS-1",
            "invoiceNumber": "INV-1",
            "recaptchaToken": "tok",
            **extra,
        }

    def setUp(self) -> None:
        super().setUp()
        self.persist.side_effect = lambda **kwargs: {
            "orderNumber": kwargs["order_number"],
            "invoiceNumber": kwargs["invoice_number"],
            "invoiceUrl": "https://cdn.test/i.pdf",
        }

    def test_cors_allowlist(self) -> None:
        allowed = complete_order.handle(Request("OPTIONS", "/", headers={"Origin": "http://localhost:5500"}))
        other = complete_order.handle(Request("OPTIONS", "/", headers={"Origin": "https://evil.test"}))

        self.assertEqual(allowed.status, 204)
        self.assertEqual(allowed.headers["Access-Control-Allow-Origin"], "http://localhost:5500")
        self.assertEqual(other.headers["Access-Control-Allow-Origin"], "https://voipshop.co.za")

    def test_get_is_health_check(self) -> None:
        response = complete_order.handle(Request("GET", "/api/complete-order"))

        self.assertEqual(response.json(), {"ok": True, "info": "complete-order API up"})

    def test_other_methods_rejected(self) -> None:
        self.assertEqual(complete_order.handle(Request("PUT", "/")).status, 405)

    def test_missing_customer_email(self) -> None:
        response = complete_order.handle(self.post({"customer": {"name": "Jane"}}))

        self.assertEqual(response.status, 400)
        self.assertEqual(response.json(), {"error": "Missing customer email."})

    def test_missing_secret_is_captcha_rejection(self) -> None:
        with patch.dict(os.environ, {"RECAPTCHA_V3_SECRET_KEY": ""}):
            response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 400)
        self.assertEqual(response.json()["reason"], "server_misconfigured_secret_missing")
        self.captcha.assert_not_called()

    def test_rate_limited(self) -> None:
        self.limits.return_value = LIMITED

        response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 429)
        self.assertEqual(self.limits.call_args[1]["action"], "complete_order_bundle")

    def test_email_not_configured(self) -> None:
        with patch.dict(os.environ, {"RESEND_API_KEY": ""}):
            response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.json(), {"error": "Server not configured (email)."})
        self.builders["invoice"].assert_not_called()

    def test_builder_failure(self) -> None:
        self.builders["sla"].side_effect = RuntimeError("boom")

        response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.json(), {"error": "Failed to build one of the PDFs: boom"})
        self.send.assert_not_called()

    def test_sends_bundle_with_links(self) -> None:
        response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 200)
        self.assertEqual(
            response.json(),
            {
                "ok": True,
                "id": "msg_1",
                "orderNumber": "VS-1",
                "invoiceNumber": "INV-1",
                "invoiceUrl": "https://cdn.test/i.pdf",
            },
        )
        args, kwargs = self.send.call_args
        self.assertEqual(args[1], "Order VS-1 • Invoice, SLA & Porting • VoIP Shop")
        self.assertEqual(kwargs["cc"], ["sales@voipshop.co.za"])
        self.assertEqual(
            [attachment.filename for attachment in kwargs["attachments"]],
            ["Invoice-INV-1.pdf", "Service-Level-Agreement.pdf", "Porting-Letter-of-Authority.pdf"],
        )
        snapshot = self.persist.call_args[1]["snapshot"]
        self.assertEqual(snapshot["invoicePayload"]["invoiceNumber"], "INV-1")

    def test_persist_failure_still_sends(self) -> None:
        self.persist.side_effect = BlobStorageError("no token")

        response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 200)
        self.assertNotIn("invoiceUrl", response.json())
        self.send.assert_called_once()

    def test_send_failure_keeps_links(self) -> None:
        self.send.side_effect = EmailSendError("bounced")

        response = complete_order.handle(self.post(self.body()))

        self.assertEqual(response.status, 502)
        self.assertEqual(response.json()["error"], "Email send failed: bounced")
        self.assertEqual(response.json()["invoiceUrl"], "https://cdn.test/i.pdf")


class OrderDocumentTests(HandlerTestCase):
    def get(self, order: str, doc: str) -> Request:
        return Request("GET", f"/api/orders/{order}/{doc}", params={"order": order, "doc": doc})

    def test_order_required(self) -> None:
        response = orders.handle(self.get("", "invoice"))

        self.assertEqual(response.status, 400)
        self.assertEqual(response.json(), {"error": "order required"})

    def test_redirects_to_stored_pdf(self) -> None:
        with patch("voipshop_docs.storage.get_order_links", return_value={"slaUrl": "https://cdn.test/s.pdf"}):
            response = orders.handle(self.get("VS-1", "sla"))

        self.assertEqual(response.status, 302)
        self.assertEqual(response.headers["Location"], "https://cdn.test/s.pdf")

    def test_rebuilds_invoice_from_snapshot(self) -> None:
        snapshot = {"invoiceNumber": "INV-1", "invoicePayload": {"invoiceNumber": "INV-1", "items": []}}
        with patch("voipshop_docs.storage.get_order_links", return_value={}), patch(
            "voipshop_docs.storage.get_order_snapshot", return_value=snapshot
        ):
            response = orders.handle(self.get("VS-1", "invoice"))

        self.assertEqual(response.status, 200)
        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="Invoice-INV-1.pdf"')
        self.builders["invoice"].assert_called_once_with(snapshot["invoicePayload"])

    def test_rebuilds_quote_snapshot(self) -> None:
        snapshot = {"quoteNumber": "Q-5", "client": {"name": "Jane"}, "itemsMonthly": []}
        with patch("voipshop_docs.storage.get_order_links", return_value={}), patch(
            "voipshop_docs.storage.get_order_snapshot", return_value=snapshot
        ):
            response = orders.handle(self.get("Q-5", "quote"))

        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="Quote-Q-5.pdf"')
        self.assertEqual(self.builders["quote"].call_args[0][0]["quoteNumber"], "Q-5")

    def test_rebuilds_porting_with_order_name(self) -> None:
        snapshot = {"portingPayload": {"company": {"name": "VoIP Shop"}, "client": {"name": "Jane"}, "port": {}}}
        with patch("voipshop_docs.storage.get_order_links", return_value={}), patch(
            "voipshop_docs.storage.get_order_snapshot", return_value=snapshot
        ):
            response = orders.handle(self.get("VS-1", "porting"))

        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="Porting-VS-1.pdf"')
        self.builders["porting"].assert_called_once_with({"name": "VoIP Shop"}, {"name": "Jane"}, {})

    def test_missing_snapshot_is_not_found(self) -> None:
        with patch("voipshop_docs.storage.get_order_links", return_value={}), patch(
            "voipshop_docs.storage.get_order_snapshot", side_effect=SnapshotNotFound("Snapshot not found")
        ):
            response = orders.handle(self.get("VS-1", "sla"))

        self.assertEqual(response.status, 404)
        self.assertEqual(response.json(), {"error": "Snapshot not found"})

    def test_unknown_document(self) -> None:
        self.assertEqual(orders.handle(self.get("VS-1", "receipt")).status, 404)


class DevPreviewTests(HandlerTestCase):
    def test_quote_preview_defaults(self) -> None:
        response = dev.preview_quote(Request("GET", "/api/dev/preview-quote"))

        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="quote-VOIP-PREVIEW-QUOTE.pdf"')
        data = self.builders["quote"].call_args[0][0]
        self.assertEqual(len(data["itemsMonthly"]), 3)
        self.assertEqual(data["client"]["email"], "test@example.com")

    def test_quote_preview_merges_body_and_download(self) -> None:
        request = Request(
            "POST",
            "/api/dev/preview-quote",
            query={"download": "1"},
            body={"quoteNumber": "Q 9", "client": {"name": "Override"}},
        )

        response = dev.preview_quote(request)

        self.assertEqual(response.headers["Content-Disposition"], 'attachment; filename="quote-Q-9.pdf"')
        client = self.builders["quote"].call_args[0][0]["client"]
        self.assertEqual(client, {"name": "Override", "email": "test@example.com"})

    def test_invoice_preview_uses_order_query(self) -> None:
        response = dev.preview_invoice(Request("GET", "/", query={"order": "VS-77"}))

        self.assertEqual(response.headers["Content-Disposition"], 'inline; filename="invoice-VS-77.pdf"')
        self.assertEqual(self.builders["invoice"].call_args[0][0]["company"]["vat"], "1234567890")

    def test_sla_preview_minutes(self) -> None:
        dev.preview_sla(Request("GET", "/", query={"minutes": "500"}))

        self.assertEqual(self.builders["sla"].call_args[0][0]["minutesIncluded"], 500.0)

    def test_preview_failure(self) -> None:
        self.builders["invoice"].side_effect = RuntimeError("bad layout")

        response = dev.preview_invoice(Request("GET", "/"))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.body, b"bad layout")

    def test_generic_preview_types(self) -> None:
        sla_response = dev.preview(Request("GET", "/api/dev/preview"))
        other = dev.preview(Request("GET", "/api/dev/preview", query={"type": "invoice"}))

        self.assertEqual(sla_response.headers["Content-Disposition"], 'inline; filename="sla-preview.pdf"')
        self.assertEqual(other.status, 400)
        self.assertEqual(other.json(), {"ok": False, "error": "Unknown preview type"})


class DiagnosticsTests(unittest.TestCase):
    def test_hello(self) -> None:
        self.assertEqual(diagnostics.hello(Request("GET", "/api/hello")).json(), {"ok": True, "route": "/api/hello"})

    def test_blob_write(self) -> None:
        store = Mock()
        store.put.return_value = StoredBlob("https://blob.test/orders/VS-TEST-123/hello.txt", "orders/VS-TEST-123/hello.txt")
        with patch("voipshop_docs.storage.BlobStore", return_value=store):
            response = diagnostics.test_blob(Request("GET", "/api/test-blob"))

        self.assertEqual(response.json(), {"ok": True, "url": "https://blob.test/orders/VS-TEST-123/hello.txt"})
        self.assertEqual(store.put.call_args[0][0], "orders/VS-TEST-123/hello.txt")

    def test_blob_write_failure(self) -> None:
        with patch("voipshop_docs.storage.BlobStore", side_effect=BlobStorageError("Missing BLOB_READ_WRITE_TOKEN env")):
            response = diagnostics.test_blob(Request("GET", "/api/test-blob"))

        self.assertEqual(response.status, 500)
        self.assertEqual(response.json(), {"ok": False, "error": "Missing BLOB_READ_WRITE_TOKEN env"})


if __name__ == "__main__":
    unittest.main()
