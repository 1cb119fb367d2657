"""Release publishing workflow.

Creates the release, then uploads the discovered assets one at a time in
the order given. The first asset that cannot be sent, or that the forge
rejects, stops the batch; later files are never attempted. Nothing is
rolled back: the release and the assets already uploaded stay in place.

A 201 whose body does not decode is recorded as a warning and the batch
continues, since the asset exists forge-side.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from ghr.core.config import Credential
from ghr.core.errors import ErrorCode
from ghr.core.result import Err, Ok
from ghr.forge.errors import AssetError, ReleaseError
from ghr.forge.models import (
    AssetRejected,
    AssetUndecodable,
    AssetUploaded,
    AssetUploadOutcome,
    ReleaseRequest,
    ReleaseResult,
)
from ghr.forge.publisher import ReleasePublisher
from ghr.forge.uploader import AssetUploader
from ghr.output.console import ConsoleProtocol

__all__ = ["PublishPlan", "PublishReport", "PublishService"]


@dataclass(frozen=True, slots=True)
class PublishPlan:
    credential: Credential
    owner: str
    repo: str
    request: ReleaseRequest
    assets: tuple[Path, ...] = ()


@dataclass(slots=True)
class PublishReport:
    """What happened during one run.

    Attributes:
        release: The created release, or None if creation failed.
        release_error: Why creation failed, if it did.
        outcomes: One entry per attempted asset, in upload order.
        failure: The error or rejection that halted the batch, if any.
        skipped: Assets never attempted because the batch halted.
        elapsed: Wall-clock seconds for the whole run.
    """

    release: ReleaseResult | None = None
    release_error: ReleaseError | None = None
    outcomes: list[AssetUploadOutcome | AssetError] = field(default_factory=list)
    failure: AssetRejected | AssetError | None = None
    skipped: tuple[Path, ...] = ()
    elapsed: float = 0.0

    @property
    def uploaded(self) -> list[AssetUploaded]:
        return [o for o in self.outcomes if isinstance(o, AssetUploaded)]

    @property
    def undecodable(self) -> list[AssetUndecodable]:
        return [o for o in self.outcomes if isinstance(o, AssetUndecodable)]

    @property
    def exit_code(self) -> ErrorCode:
        if self.release_error is not None:
            if self.release_error.kind == "invalid_input":
                return ErrorCode.UNKNOWN_ERROR
            return ErrorCode.CREATE_REQUEST_ERROR
        match self.failure:
            case AssetError(kind="asset_read"):
                return ErrorCode.ASSET_READ_ERROR
            case AssetError() | AssetRejected():
                return ErrorCode.ASSET_UPLOAD_ERROR
            case None:
                return ErrorCode.OK
        return ErrorCode.UNKNOWN_ERROR


class PublishService:
    """Runs a :class:`PublishPlan` against the forge."""

    def __init__(
        self,
        *,
        publisher: ReleasePublisher,
        uploader: AssetUploader,
        console: ConsoleProtocol,
    ) -> None:
        self._publisher = publisher
        self._uploader = uploader
        self._console = console

    def run(self, plan: PublishPlan) -> PublishReport:
        start = time.monotonic()
        report = PublishReport()
        try:
            self._run(plan, report)
        finally:
            report.elapsed = time.monotonic() - start
        return report

    def _run(self, plan: PublishPlan, report: PublishReport) -> None:
        created = self._publisher.create_release(
            plan.credential, plan.owner, plan.repo, plan.request
        )
        if isinstance(created, Err):
            report.release_error = created.error
            return

        release = created.value
        report.release = release
        self._console.success(f"release created: {release.html_url} (id {release.id})")

        if not plan.assets:
            self._console.info("no assets to upload")
            return

        self._console.header(f"Uploading {len(plan.assets)} asset(s)")
        for index, path in enumerate(plan.assets):
            result = self._uploader.upload(plan.credential, release.upload_url, path)
            match result:
                case Err(error):
                    report.outcomes.append(error)
                    report.failure = error
                case Ok(AssetRejected() as rejected):
                    report.outcomes.append(rejected)
                    report.failure = rejected
                case Ok(AssetUndecodable() as undecodable):
                    report.outcomes.append(undecodable)
                    self._console.warning(
                        f"{path.name}: uploaded but response could not be decoded "
                        f"({undecodable.message})"
                    )
                case Ok(AssetUploaded() as uploaded):
                    report.outcomes.append(uploaded)
                    self._console.success(
                        f"{uploaded.asset.name} -> {uploaded.asset.browser_download_url}"
                    )

            if report.failure is not None:
                report.skipped = plan.assets[index + 1 :]
                return
