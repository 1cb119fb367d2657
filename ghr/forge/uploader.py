"""Release asset upload.

Each call streams one local file to the release's upload endpoint. The file
is opened right before the request and closed when the call returns, on
every path. Its size is taken from ``fstat`` on the open handle and sent as
an explicit Content-Length, and exactly that many bytes are sent.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from urllib.parse import quote

from ghr.core.config import Credential
from ghr.core.result import Err, Ok, Result
from ghr.forge.errors import AssetError
from ghr.forge.http import HttpClient
from ghr.forge.mime import MimeTable
from ghr.forge.models import (
    AssetRejected,
    AssetUndecodable,
    AssetUploaded,
    AssetUploadOutcome,
    UploadedAsset,
    decode_json_object,
    summarize_forge_error,
)
from ghr.output.console import ConsoleProtocol

__all__ = ["AssetUploader", "expand_upload_url", "UPLOAD_URL_PLACEHOLDER", "ASSET_UPLOADED"]

UPLOAD_URL_PLACEHOLDER = "{?name,label}"
ASSET_UPLOADED = 201

_BODY_SNIPPET_LIMIT = 1024


def expand_upload_url(template: str, file_name: str) -> Result[str, str]:
    """Replace the hypermedia marker in ``template`` with ``?name=<file_name>``.

    This is a single literal substitution, not RFC 6570 expansion. The
    marker must appear verbatim; anything else in the template is kept.

    >>> expand_upload_url(
    ...     "https://uploads.example.com/repos/o/r/releases/1/assets{?name,label}",
    ...     "report final.txt",
    ... ).unwrap()
    'https://uploads.example.com/repos/o/r/releases/1/assets?name=report%20final.txt'
    """
    if UPLOAD_URL_PLACEHOLDER not in template:
        return Err(f"upload url has no {UPLOAD_URL_PLACEHOLDER} placeholder: {template}")
    query = f"?name={quote(file_name, safe='')}"
    return Ok(template.replace(UPLOAD_URL_PLACEHOLDER, query, 1))


class AssetUploader:
    """Uploads local files as assets of an existing release."""

    def __init__(self, http: HttpClient, mime: MimeTable, console: ConsoleProtocol) -> None:
        self._http = http
        self._mime = mime
        self._console = console

    def upload(
        self,
        credential: Credential,
        upload_url_template: str,
        path: Path,
    ) -> Result[AssetUploadOutcome, AssetError]:
        """Upload ``path`` to the release behind ``upload_url_template``.

        Returns:
            Ok(AssetUploaded) on 201 with a decodable body.
            Ok(AssetUndecodable) on 201 with a body that does not decode; the
              asset exists forge-side.
            Ok(AssetRejected) for any other status, e.g. 422 for a duplicate
              asset name.
            Err(AssetError) when nothing could be sent: bad template
              (``invalid_template``), unreadable file (``asset_read``) or
              transport failure (``asset_upload``).
        """
        url = expand_upload_url(upload_url_template, path.name)
        if isinstance(url, Err):
            return Err(AssetError(kind="invalid_template", path=path, message=url.error))

        content_type = self._mime.resolve(path)

        # open() on a FIFO blocks until a writer appears, so only regular
        # files are opened. fstat below re-checks the handle actually opened.
        try:
            if not stat.S_ISREG(path.stat().st_mode):
                return Err(AssetError(kind="asset_read", path=path, message="not a regular file"))
            handle = path.open("rb")
        except OSError as e:
            return Err(AssetError(kind="asset_read", path=path, message=_os_message(e)))

        with handle:
            try:
                st = os.fstat(handle.fileno())
            except OSError as e:
                return Err(AssetError(kind="asset_read", path=path, message=_os_message(e)))
            if not stat.S_ISREG(st.st_mode):
                return Err(AssetError(kind="asset_read", path=path, message="not a regular file"))

            size = st.st_size
            self._console.info(f"uploading {path.name} ({content_type}, {size} bytes)")
            self._console.debug(f"POST {url.value}")

            sent = self._http.post_stream(
                url.value,
                handle,
                content_length=size,
                headers={
                    "Authorization": credential.bearer(),
                    "Content-Type": content_type,
                },
            )

        if isinstance(sent, Err):
            return Err(
                AssetError(
                    kind="asset_upload",
                    path=path,
                    message=f"asset upload request failed: {sent.error}",
                )
            )

        response = sent.value
        self._console.debug(f"upload {path.name}: {response.status_line}")

        if response.status != ASSET_UPLOADED:
            body = response.text()[:_BODY_SNIPPET_LIMIT]
            return Ok(
                AssetRejected(
                    path=path,
                    status=response.status,
                    reason=summarize_forge_error(response.body) or response.reason,
                    body=body,
                )
            )

        decoded = decode_json_object(response.body).flat_map(UploadedAsset.from_json)
        if isinstance(decoded, Err):
            return Ok(
                AssetUndecodable(
                    path=path,
                    status=response.status,
                    message=decoded.error,
                    body=response.text()[:_BODY_SNIPPET_LIMIT],
                )
            )

        return Ok(AssetUploaded(path=path, asset=decoded.value))


def _os_message(e: OSError) -> str:
    return e.strerror or str(e)
