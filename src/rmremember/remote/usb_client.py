"""Client for the tablet's USB web interface."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import httpx

from ..config.app_config import DEFAULT_TABLET_IP, DEFAULT_USB_TIMEOUT_S
from ..errors import (
    HttpStatusError,
    TransportError,
    UnsupportedFileError,
    classify_usb_failure,
    describe_http_exception,
    transport_error,
)


logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 100 * 1024 * 1024
UPLOAD_MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".epub": "application/epub+zip",
}
DOWNLOAD_CHUNK_BYTES = 64 * 1024
REQUEST_TIMEOUT_S = 100.0


def upload_media_type(path: Path) -> str:
    """
    Validate *path* for upload and return its media type.

    Raises :class:`UnsupportedFileError` for files of 100 MiB or more and for
    anything that is not a PDF or EPUB.  Never touches the network.
    """
    if path.stat().st_size >= MAX_UPLOAD_BYTES:
        raise UnsupportedFileError("File is too large.")
    media_type = UPLOAD_MEDIA_TYPES.get(path.suffix.lower())
    if media_type is None:
        raise UnsupportedFileError("File type is not supported.")
    return media_type


@contextmanager
def _classified() -> Iterator[None]:
    try:
        yield
    except httpx.TransportError as exc:
        failure = describe_http_exception(exc)
        error = classify_usb_failure(failure)
        logger.warning(
            "USB request failed (%s): %s",
            error.name if error else "unclassified",
            failure.message,
        )
        raise transport_error(error, failure) from exc


def _check_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise HttpStatusError(response.status_code, str(response.request.url))


class UsbClient:
    """
    Thin wrapper around :class:`httpx.Client` for ``http://10.11.99.1``.

    ``probe_timeout_s`` bounds the cheap connectivity check; regular requests
    use ``timeout_s`` (``None`` waits as long as the transfer takes).
    Timeouts classify as ``USB_NOT_CONNECTED``.
    """

    def __init__(
        self,
        host: str = DEFAULT_TABLET_IP,
        *,
        timeout_s: Optional[float] = REQUEST_TIMEOUT_S,
        probe_timeout_s: float = DEFAULT_USB_TIMEOUT_S,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = f"http://{host}"
        self.probe_timeout_s = probe_timeout_s
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_s, connect=probe_timeout_s),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> UsbClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ requests
    def list_folder(self, parent_id: str = "") -> Any:
        """``GET /documents/{parent_id}``; also used as an existence check before upload."""
        with _classified():
            response = self._client.get(f"/documents/{parent_id}")
        _check_status(response)
        return response.json() if response.content else []

    def probe(self) -> None:
        """Raise :class:`TransportError` unless the web interface answers with success."""
        with _classified():
            response = self._client.get("/documents/", timeout=self.probe_timeout_s)
        try:
            _check_status(response)
        except HttpStatusError as exc:
            logger.warning("USB probe got %s", exc)
            raise TransportError(None, str(exc)) from exc

    @contextmanager
    def download(self, document_id: str) -> Iterator[Iterator[bytes]]:
        """Yield an iterator over the document bytes; nothing is buffered whole."""
        with _classified():
            with self._client.stream("GET", f"/download/{document_id}/placeholder") as response:
                _check_status(response)
                yield response.iter_bytes(DOWNLOAD_CHUNK_BYTES)

    def upload(self, path: str | Path, parent_id: str = "") -> None:
        path = Path(path)
        media_type = upload_media_type(path)

        self.list_folder(parent_id)

        logger.info("Uploading %s to folder %r", path.name, parent_id)
        with path.open("rb") as fh, _classified():
            response = self._client.post(
                "/upload",
                files={"file": (path.name, fh, media_type)},
            )
        _check_status(response)
