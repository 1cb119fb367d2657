from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import NoReturn

import typer

from ghr import __version__
from ghr.cli.context import CLIContext, build_context
from ghr.core.errors import ErrorCode
from ghr.core.result import Err
from ghr.forge.models import MakeLatest, ReleaseRequest
from ghr.forge.publisher import ReleasePublisher
from ghr.forge.uploader import AssetUploader
from ghr.git.remote import RepoSlug, infer_repo_slug, parse_repo_slug
from ghr.output.console import Style
from ghr.output.errors import discovery_error_exit_code, print_publish_report
from ghr.services.assets import discover_assets
from ghr.services.publish import PublishPlan, PublishService


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)

_MAKE_LATEST_CHOICES: tuple[MakeLatest, ...] = ("true", "false", "legacy")


def _build_info() -> list[str]:
    try:
        installed = dist_version("ghr")
    except PackageNotFoundError:
        installed = __version__
    return [
        f"ghr {installed}",
        f"python {platform.python_version()} ({sys.implementation.name})",
        f"platform {platform.system().lower()}-{platform.machine().lower()}",
    ]


def _version_callback(value: bool) -> None:
    if value:
        for line in _build_info():
            typer.echo(line)
        raise typer.Exit(code=0)


def _fail(ctx: CLIContext, message: str, *, code: ErrorCode) -> NoReturn:
    ctx.console.error(message)
    raise typer.Exit(code=int(code))


def _resolve_slug(ctx: CLIContext, owner: str | None, repo: str | None) -> RepoSlug:
    inferred: RepoSlug | None = None
    if not owner or not repo:
        if ctx.config.repository:
            inferred = parse_repo_slug(ctx.config.repository)
        if inferred is None:
            inferred = infer_repo_slug(Path.cwd())
        if inferred is not None:
            ctx.console.debug(f"inferred repository: {inferred}")

    owner = owner or (inferred.owner if inferred else None)
    repo = repo or (inferred.repo if inferred else None)
    if not owner:
        _fail(
            ctx,
            "missing owner (use --owner or GITHUB_REPOSITORY)",
            code=ErrorCode.OWNER_NOT_FOUND,
        )
    if not repo:
        _fail(
            ctx,
            "missing repo (use --repo or GITHUB_REPOSITORY)",
            code=ErrorCode.REPO_NOT_FOUND,
        )
    return RepoSlug(owner=owner, repo=repo)


def _read_body(ctx: CLIContext, body: str | None, body_file: Path | None) -> str:
    if body is not None and body_file is not None:
        _fail(ctx, "--body and --body-file are mutually exclusive", code=ErrorCode.UNKNOWN_ERROR)
    if body_file is None:
        return body or ""
    try:
        return body_file.read_text(encoding="utf-8")
    except OSError as e:
        _fail(ctx, f"cannot read --body-file {body_file}: {e}", code=ErrorCode.UNKNOWN_ERROR)


@app.command()
def publish(
    owner: str | None = typer.Option(None, "--owner", help="Repository owner."),
    repo: str | None = typer.Option(None, "--repo", help="Repository name."),
    tag: str | None = typer.Option(None, "--tag", help="Tag the release points at."),
    target: str | None = typer.Option(
        None,
        "--target",
        help="Commitish to create the tag at when it does not exist yet.",
    ),
    name: str | None = typer.Option(None, "--name", help="Release title."),
    body: str | None = typer.Option(None, "--body", help="Release notes."),
    body_file: Path | None = typer.Option(
        None, "--body-file", help="Read release notes from a file."
    ),
    draft: bool = typer.Option(False, "--draft", help="Create an unpublished draft."),
    prerelease: bool = typer.Option(False, "--prerelease", help="Mark as a pre-release."),
    generate_notes: bool = typer.Option(
        False, "--generate-notes", help="Let the forge generate release notes."
    ),
    make_latest: str | None = typer.Option(
        None, "--make-latest", help="Mark as latest: true, false or legacy."
    ),
    directory: Path = typer.Option(Path("build"), "--dir", help="Directory to search for assets."),
    pattern: str = typer.Option("*", "--pattern", help="Glob pattern, relative to --dir."),
    no_assets: bool = typer.Option(False, "--no-assets", help="Create the release only."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show request diagnostics."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show build information and exit.",
    ),
) -> None:
    """Create a GitHub release and upload assets to it."""
    ctx = build_context(verbose=verbose)

    slug = _resolve_slug(ctx, owner, repo)
    if not tag or not tag.strip():
        _fail(ctx, "missing tag name (use --tag)", code=ErrorCode.TAG_NAME_REQUIRED)

    if make_latest is not None and make_latest not in _MAKE_LATEST_CHOICES:
        _fail(
            ctx,
            f"invalid --make-latest {make_latest!r} (expected true, false or legacy)",
            code=ErrorCode.UNKNOWN_ERROR,
        )

    notes = _read_body(ctx, body, body_file)

    assets: tuple[Path, ...] = ()
    if not no_assets:
        found = discover_assets(directory, pattern)
        if isinstance(found, Err):
            ctx.console.error(found.error.message)
            raise typer.Exit(code=discovery_error_exit_code(found.error))
        assets = found.value
        ctx.console.print(f"files: {len(assets)} in {directory}", Style.DIM)

    request = ReleaseRequest(
        tag_name=tag.strip(),
        target_commitish=(target or "").strip(),
        name=name or "",
        body=notes,
        draft=draft,
        prerelease=prerelease,
        generate_release_notes=generate_notes,
        make_latest=_as_make_latest(make_latest),
    )

    service = PublishService(
        publisher=ReleasePublisher(ctx.http, ctx.console, api_url=ctx.config.api_url),
        uploader=AssetUploader(ctx.http, ctx.mime, ctx.console),
        console=ctx.console,
    )
    report = service.run(
        PublishPlan(
            credential=ctx.config.credential,
            owner=slug.owner,
            repo=slug.repo,
            request=request,
            assets=assets,
        )
    )

    print_publish_report(report, ctx.console)
    code = report.exit_code
    if code.is_error:
        raise typer.Exit(code=int(code))


def _as_make_latest(value: str | None) -> MakeLatest | None:
    for choice in _MAKE_LATEST_CHOICES:
        if value == choice:
            return choice
    return None


def main() -> None:
    app()
