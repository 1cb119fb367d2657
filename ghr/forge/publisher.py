"""Release creation.

One POST, one attempt, no retries. The forge either answers 201 with the
release document or explains why it refused.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from ghr.core.config import DEFAULT_API_URL, Credential
from ghr.core.result import Err, Ok, Result
from ghr.forge.errors import ReleaseError
from ghr.forge.http import HttpClient
from ghr.forge.models import (
    ReleaseRequest,
    ReleaseResult,
    decode_json_object,
    find_html_url,
    summarize_forge_error,
)
from ghr.output.console import ConsoleProtocol

__all__ = ["ReleasePublisher", "API_VERSION", "RELEASE_CREATED", "api_headers"]

API_VERSION = "2022-11-28"
RELEASE_CREATED = 201

_BODY_SNIPPET_LIMIT = 2048
_IDENTIFIER = re.compile(r"^[A-Za-z0-9_.-]+$")


def api_headers(credential: Credential) -> dict[str, str]:
    return {
        "Authorization": credential.bearer(),
        "X-GitHub-Api-Version": API_VERSION,
        "Accept": "application/vnd.github+json",
        "Content-Type": "application/json",
    }


class ReleasePublisher:
    """Creates a release on the forge.

    Tag handling is owned by the forge:

    - Precondition: ``request.tag_name`` names an existing tag, or
      ``request.target_commitish`` is set so the forge can create one.
    - Postcondition: when the tag did not exist, the forge creates it at
      ``target_commitish`` as the release is created (for drafts, when the
      draft is published). This tool never creates or deletes tags itself.
    """

    def __init__(
        self,
        http: HttpClient,
        console: ConsoleProtocol,
        *,
        api_url: str = DEFAULT_API_URL,
    ) -> None:
        self._http = http
        self._console = console
        self.api_url = api_url.rstrip("/")

    def releases_url(self, owner: str, repo: str) -> str:
        return f"{self.api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/releases"

    def create_release(
        self,
        credential: Credential,
        owner: str,
        repo: str,
        request: ReleaseRequest,
    ) -> Result[ReleaseResult, ReleaseError]:
        """Create a release and return its identity and upload template.

        Returns:
            Ok(ReleaseResult) on 201 with a decodable body.
            Err(ReleaseError) with kind:
              - ``invalid_input``: empty credential or malformed owner/repo
              - ``create_request``: transport failure, nothing was created
              - ``create_rejected``: any status other than 201
              - ``create_decode``: 201 whose body could not be decoded; the
                release exists forge-side
        """
        invalid = _validate_inputs(credential, owner, repo)
        if invalid is not None:
            return Err(invalid)

        url = self.releases_url(owner, repo)
        payload = request.to_payload()
        self._console.debug(f"POST {url} fields={sorted(payload)}")

        sent = self._http.post_json(url, payload, api_headers(credential))
        if isinstance(sent, Err):
            return Err(
                ReleaseError(
                    kind="create_request",
                    message=f"create release request failed: {sent.error}",
                )
            )

        response = sent.value
        self._console.debug(f"create release: {response.status_line}")

        if response.status != RELEASE_CREATED:
            # 422 usually means a bad tag name or target_commitish
            summary = summarize_forge_error(response.body)
            message = f"create release unexpected status: {response.status_line}"
            if summary:
                message = f"{message}: {summary}"
            return Err(
                ReleaseError(
                    kind="create_rejected",
                    message=message,
                    status=response.status,
                    body=response.text()[:_BODY_SNIPPET_LIMIT],
                )
            )

        decoded = decode_json_object(response.body).flat_map(ReleaseResult.from_json)
        if isinstance(decoded, Err):
            recovered = find_html_url(response.body) or response.header("Location")
            return Err(
                ReleaseError(
                    kind="create_decode",
                    message=f"release created but response could not be decoded: {decoded.error}",
                    status=response.status,
                    body=response.text()[:_BODY_SNIPPET_LIMIT],
                    hint=f"release exists at {recovered}" if recovered else None,
                )
            )

        return decoded


def _validate_inputs(credential: Credential, owner: str, repo: str) -> ReleaseError | None:
    if not credential.token.strip():
        return ReleaseError(kind="invalid_input", message="empty credential")
    for label, value in (("owner", owner), ("repo", repo)):
        if not value or not _IDENTIFIER.match(value):
            return ReleaseError(kind="invalid_input", message=f"invalid {label}: {value!r}")
    return None
