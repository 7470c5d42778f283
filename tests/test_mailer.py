import base64
import os
import unittest
from unittest.mock import patch

import requests

from voipshop_docs import emails, mailer
from voipshop_docs.mailer import Attachment, EmailNotConfigured, EmailSendError
from voipshop_docs.payloads import COMPANY_DEFAULTS, ORDER_COMPANY


class SendEmailTests(unittest.TestCase):
    def setUp(self) -> None:
        env = patch.dict(os.environ, {"RESEND_API_KEY": "re_test", "EMAIL_FROM": ""})
        env.start()
        self.addCleanup(env.stop)

    def test_requires_api_key(self) -> None:
        with patch.dict(os.environ, {"RESEND_API_KEY": ""}):
            with self.assertRaises(EmailNotConfigured):
                mailer.send_email("a@example.com", "Hi", "<p>Hi</p>")

    def test_builds_resend_params(self) -> None:
        with patch("voipshop_docs.mailer.resend.Emails.send", return_value={"id": "msg_1"}) as send:
            message_id = mailer.send_email(
                "a@example.com",
                "Subject",
                "<p>Body</p>",
                attachments=[Attachment("Quote-1.pdf", b"%PDF")],
                cc=["sales@voipshop.co.za"],
            )

        self.assertEqual(message_id, "msg_1")
        params = send.call_args[0][0]
        self.assertEqual(params["from"], "sales@voipshop.co.za")
        self.assertEqual(params["reply_to"], "sales@voipshop.co.za")
        self.assertEqual(params["to"], ["a@example.com"])
        self.assertEqual(params["cc"], ["sales@voipshop.co.za"])
        attachment = params["attachments"][0]
        self.assertEqual(attachment["filename"], "Quote-1.pdf")
        self.assertEqual(base64.b64decode(attachment["content"]), b"%PDF")

    def test_omits_empty_optional_fields(self) -> None:
        with patch("voipshop_docs.mailer.resend.Emails.send", return_value={"id": "msg_2"}) as send:
            mailer.send_email(["a@example.com", "b@example.com"], "Subject", "<p>Body</p>")

        params = send.call_args[0][0]
        self.assertNotIn("cc", params)
        self.assertNotIn("attachments", params)
        self.assertEqual(params["to"], ["a@example.com", "b@example.com"])

    def test_transport_errors_become_send_errors(self) -> None:
        with patch("voipshop_docs.mailer.resend.Emails.send", side_effect=requests.ConnectionError("down")):
            with self.assertRaisesRegex(EmailSendError, "down"):
                mailer.send_email("a@example.com", "Subject", "<p>Body</p>")


class EmailTemplateTests(unittest.TestCase):
    def test_quote_link_email_includes_download_link(self) -> None:
        html = emails.quote_email(
            COMPANY_DEFAULTS, "Jane", 552.0, "https://voipshop.co.za/complete-order", pdf_url="https://cdn.test/q.pdf"
        )

        self.assertIn("R 552.00", html)
        self.assertIn("https://cdn.test/q.pdf", html)
        self.assertIn("Complete Your Order", html)
        self.assertNotIn("(attached)", html)

    def test_quote_attach_email_mentions_attachment(self) -> None:
        html = emails.quote_email(COMPANY_DEFAULTS, "Jane", 10, "https://voipshop.co.za/complete-order")

        self.assertIn("(attached)", html)

    def test_client_name_is_escaped(self) -> None:
        html = emails.porting_email(COMPANY_DEFAULTS, "<script>x</script>")

        self.assertNotIn("<script>", html)
        self.assertIn("&lt;script&gt;", html)

    def test_invoice_email_variants(self) -> None:
        linked = emails.invoice_email(COMPANY_DEFAULTS, "Jane", "INV-1", "VS-1", pdf_url="https://cdn.test/i.pdf")
        attached = emails.invoice_email(COMPANY_DEFAULTS, "Jane", "INV-1", "VS-1")

        self.assertIn("Download Invoice (PDF)", linked)
        self.assertIn("is attached as a PDF", attached)

    def test_order_email_lists_documents_and_website(self) -> None:
        html = emails.order_email(ORDER_COMPANY, "", "VS-1", "INV-1")

        self.assertIn("Thank you for your order VS-1", html)
        self.assertIn("Hi there", html)
        self.assertIn("Porting Letter of Authority (LOA)", html)
        self.assertIn("https://voipshop.co.za", html)


if __name__ == "__main__":
    unittest.main()
