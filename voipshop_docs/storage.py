"""Order artifact storage on Vercel Blob.

Layout::

    orders/{order}/meta.json      snapshot of the request that built the PDFs
    orders/{order}/links.json     public URLs of everything below
    orders/{order}/quote-*.pdf
    orders/{order}/invoice-*.pdf
    orders/{order}/sla-*.pdf
    orders/{order}/porting-*.pdf

Objects are written once; nothing is ever updated or versioned.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from vercel.blob import BlobError, BlobNotFoundError
from vercel.blob import sync as blob

from . import config
from .fanout import gather
from .formatting import safe_part

LOGGER = logging.getLogger(__name__)

ONE_YEAR_S = 31536000
JSON_CACHE_CONTROL = f"public, max-age={ONE_YEAR_S}"
PDF_CACHE_CONTROL = f"public, max-age={ONE_YEAR_S}, immutable"

Bytes = Union[bytes, bytearray]


class BlobStorageError(RuntimeError):
    """Raised when a blob upload or lookup cannot be completed."""


class SnapshotNotFound(LookupError):
    """Raised when an order has no stored ``meta.json``."""


@dataclass(frozen=True)
class StoredBlob:
    url: str
    pathname: str


def _max_age(cache_control: str) -> Optional[int]:
    for directive in cache_control.split(","):
        name, _, value = directive.strip().partition("=")
        if name == "max-age" and value.isdigit():
            return int(value)
    return None


class BlobStore:
    """Public, fixed-name uploads through the Vercel Blob SDK.

    The SDK reads ``BLOB_READ_WRITE_TOKEN`` itself; it is checked here first so
    a missing token fails with a readable message.
    """

    def put(
        self,
        pathname: str,
        data: Union[Bytes, str],
        content_type: str,
        cache_control: str = "",
    ) -> StoredBlob:
        if not config.blob_token():
            raise BlobStorageError("Missing BLOB_READ_WRITE_TOKEN env")
        if isinstance(data, str):
            data = data.encode("utf-8")

        try:
            result = blob.put_blob(
                pathname,
                bytes(data),
                access="public",
                content_type=content_type,
                add_random_suffix=False,
                allow_overwrite=True,
                cache_control_max_age=_max_age(cache_control),
            )
        except BlobError as exc:
            raise BlobStorageError(f"Blob upload failed for {pathname}: {exc}") from exc
        return StoredBlob(url=result.url, pathname=result.pathname or pathname)

    def put_json(self, pathname: str, value: Any) -> StoredBlob:
        return self.put(pathname, json.dumps(value, indent=2), "application/json", JSON_CACHE_CONTROL)

    def put_pdf(self, pathname: str, data: Bytes) -> StoredBlob:
        return self.put(pathname, data, "application/pdf", PDF_CACHE_CONTROL)


def public_url(stored: StoredBlob) -> str:
    """URL under ``BLOB_BASE_URL`` when configured, else the URL the SDK returned."""
    base = config.blob_base_url()
    if not base or not stored.pathname:
        return stored.url
    return f"{base}/{stored.pathname.lstrip('/')}"


def _order_path(order: str, name: str) -> str:
    return f"orders/{order}/{name}"


def _read_json(pathname: str) -> Any:
    """Decoded JSON stored at ``pathname``; ``BlobNotFoundError`` propagates."""
    try:
        result = blob.get_blob(pathname, access="public")
    except BlobNotFoundError:
        raise
    except BlobError as exc:
        raise BlobStorageError(f"Blob read failed for {pathname}: {exc}") from exc
    try:
        return json.loads(result.body.decode("utf-8"))
    except ValueError as exc:
        raise BlobStorageError(f"{pathname} is not valid JSON") from exc


def get_order_links(order: str) -> Dict[str, Any]:
    """``links.json`` for ``order``; ``{}`` when it does not exist."""
    try:
        links = _read_json(_order_path(order, "links.json"))
    except BlobNotFoundError:
        return {}
    return links if isinstance(links, dict) else {}


def get_order_snapshot(order: str) -> Dict[str, Any]:
    try:
        snapshot = _read_json(_order_path(order, "meta.json"))
    except BlobNotFoundError as exc:
        raise SnapshotNotFound("Snapshot not found") from exc
    if not isinstance(snapshot, dict):
        raise SnapshotNotFound("Snapshot not found")
    return snapshot


_PDF_LINK_KEYS = (
    ("/quote-", "quoteUrl"),
    ("/invoice-", "invoiceUrl"),
    ("/sla-", "slaUrl"),
    ("/porting-", "portingUrl"),
)


def links_from_results(
    results: List[StoredBlob],
    order_safe: str,
    invoice_safe: str = "",
    quote_safe: str = "",
) -> Dict[str, Any]:
    links: Dict[str, Any] = {"orderNumber": order_safe}
    if invoice_safe:
        links["invoiceNumber"] = invoice_safe
    if quote_safe:
        links["quoteNumber"] = quote_safe

    for stored in results:
        if not stored.url:
            continue
        url = public_url(stored)
        if stored.pathname.endswith("/meta.json"):
            links["metaUrl"] = url
        if stored.pathname.endswith(".pdf"):
            for marker, key in _PDF_LINK_KEYS:
                if marker in stored.pathname:
                    links[key] = url
    return links


def persist_order_artifacts(
    order_number: str,
    invoice_number: str = "",
    quote_number: str = "",
    invoice_pdf: Optional[Bytes] = None,
    quote_pdf: Optional[Bytes] = None,
    sla_pdf: Optional[Bytes] = None,
    porting_pdf: Optional[Bytes] = None,
    snapshot: Optional[Mapping[str, Any]] = None,
    store: Optional[BlobStore] = None,
) -> Dict[str, Any]:
    """Upload the snapshot and every PDF given, then write ``links.json``.

    Uploads run concurrently and one failure fails the whole call.
    """
    if not order_number:
        raise ValueError("orderNumber is required")
    store = store or BlobStore()

    order_safe = safe_part(order_number)
    invoice_safe = safe_part(invoice_number)
    quote_safe = safe_part(quote_number)
    base = f"orders/{order_safe}"

    uploads: List[Callable[[], StoredBlob]] = [
        lambda: store.put_json(f"{base}/meta.json", dict(snapshot or {}))
    ]
    documents = (
        (quote_pdf, f"{base}/quote-{quote_safe or order_safe}.pdf"),
        (invoice_pdf, f"{base}/invoice-{invoice_safe or order_safe}.pdf"),
        (sla_pdf, f"{base}/sla-{invoice_safe or order_safe}.pdf"),
        (porting_pdf, f"{base}/porting-{order_safe}.pdf"),
    )
    for data, path in documents:
        if data:
            uploads.append(lambda data=data, path=path: store.put_pdf(path, data))

    results = gather(uploads)
    links = links_from_results(results, order_safe, invoice_safe, quote_safe)
    store.put_json(f"{base}/links.json", links)
    LOGGER.info("Persisted %d artifact(s) under %s", len(results), base)
    return links
