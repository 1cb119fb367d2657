"""Error presentation utilities.

Centralized formatting of workflow failures for consistent UX. Exit codes
come from :attr:`ghr.services.publish.PublishReport.exit_code`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ghr.core.config import ConfigError
from ghr.core.errors import ErrorCode
from ghr.forge.errors import AssetError, ReleaseError
from ghr.forge.models import AssetRejected
from ghr.output.console import Style
from ghr.services.assets import DiscoveryError

if TYPE_CHECKING:
    from ghr.output.console import ConsoleProtocol
    from ghr.services.publish import PublishReport

__all__ = [
    "config_error_exit_code",
    "discovery_error_exit_code",
    "print_asset_failure",
    "print_publish_report",
    "print_release_error",
]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    match error:
        case ReleaseError(kind="create_decode", hint=hint):
            console.error(error.message)
            if hint:
                console.print(f"hint: {hint}; delete it or publish it manually", Style.DIM)
        case ReleaseError(kind="create_rejected", status=422):
            console.error(error.message)
            console.print(
                "hint: check that the tag exists or that --target names a valid commitish",
                Style.DIM,
            )
        case _:
            console.error(error.pretty())
    if error.body:
        console.debug(f"response body: {error.body}")


def print_asset_failure(failure: AssetRejected | AssetError, console: ConsoleProtocol) -> None:
    match failure:
        case AssetRejected(is_duplicate=True):
            console.error(f"{failure.path.name}: asset already exists on this release")
            console.print("hint: rename the file or delete the existing asset", Style.DIM)
        case AssetRejected(status=status, reason=reason):
            console.error(f"{failure.path.name}: asset upload issue status: {status} {reason}")
            if failure.body:
                console.print(failure.body, Style.DIM)
        case AssetError():
            console.error(failure.pretty())


def print_publish_report(report: PublishReport, console: ConsoleProtocol) -> None:
    if report.release_error is not None:
        print_release_error(report.release_error, console)
        console.print("no assets were uploaded", Style.DIM)
    elif report.failure is not None:
        print_asset_failure(report.failure, console)
        if report.skipped:
            names = ", ".join(p.name for p in report.skipped)
            console.warning(f"not attempted: {names}")
        if report.release is not None:
            console.print(f"release left in place: {report.release.html_url}", Style.DIM)

    if report.release is not None:
        console.info(f"files uploaded: {len(report.uploaded) + len(report.undecodable)}")
    console.print(f"operation complete in {report.elapsed:.2f}s", Style.DIM)


def config_error_exit_code(error: ConfigError) -> int:
    match error.kind:
        case "token_missing":
            return int(ErrorCode.TOKEN_NOT_FOUND)
        case _:
            return int(ErrorCode.UNKNOWN_ERROR)


def discovery_error_exit_code(error: DiscoveryError) -> int:
    match error.kind:
        case "dir_not_found":
            return int(ErrorCode.ASSET_DIR_NOT_FOUND)
        case "bad_pattern":
            return int(ErrorCode.BAD_PATTERN)
    # Fallback for exhaustiveness
    return int(ErrorCode.UNKNOWN_ERROR)
