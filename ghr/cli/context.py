from __future__ import annotations

import os
from dataclasses import dataclass

import typer

from ghr.core.config import Config, load_config
from ghr.core.result import Err
from ghr.forge.http import HttpClient, RealHttpClient
from ghr.forge.mime import MimeTable
from ghr.output.console import ConsoleProtocol, RichConsole
from ghr.output.errors import config_error_exit_code


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    http: HttpClient
    mime: MimeTable


def build_context(*, verbose: bool = False) -> CLIContext:
    console = RichConsole(verbose=verbose)

    config_result = load_config(os.environ)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=config_error_exit_code(config_result.error))

    config = config_result.value
    console.debug(f"api: {config.api_url} (timeout {config.timeout:g}s)")

    return CLIContext(
        config=config,
        console=console,
        http=RealHttpClient(timeout=config.timeout),
        mime=MimeTable.default(),
    )
