"""gitnab CLI entrypoint.

This module provides the `main` click command which parses a repository tree
URL, downloads the provider's tarball and extracts just the requested
subdirectory while displaying progress.

Usage example (from shell):
    gitnab https://github.com/owner/repo/tree/main/examples/hello -o hello/

Archive handling is delegated to `gitnab.Downloader` and
`gitnab.TarExtractor`; this module focuses on user interaction, progress
reporting and turning failures into an exit status.
"""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, DownloadColumn, TransferSpeedColumn

from . import __version__
from .Downloader import download_and_extract
from .Errors import GitnabError
from .LoggingConfig import configure_logging
from .Protocols import ExtractOptions, Settings
from .Providers import parse_url

logger = logging.getLogger(__name__)

EPILOG = """\b
Supported platforms:
  GitHub: https://github.com/owner/repo/tree/branch/path
  GitLab: https://gitlab.com/namespace/project/-/tree/branch/path

\b
Examples:
  gitnab https://github.com/vercel/next.js/tree/canary/examples/hello-world .
  gitnab https://gitlab.com/gitlab-org/gitlab/-/tree/master/doc/api .
  gitnab -k https://github.com/owner/repo/tree/main/src/components
"""

# Create a single console instance for the CLI UI (rich console handles colors/formatting)
console = Console()


@click.command(context_settings=dict(help_option_names=["-h", "--help"]), epilog=EPILOG)
@click.argument("url", type=str)
@click.argument("destination", required=False,
                type=click.Path(file_okay=False, dir_okay=True, path_type=Path))
@click.option("--output", "-o",
              type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
              default=None,
              help="Output directory (alternative to the positional argument)")
@click.option("--keep-folder-name", "-k", is_flag=True, default=False,
              help="Create a subfolder named after the last path segment instead of extracting directly into the destination")
@click.option("--token", type=str, default=None, envvar=["GITNAB_TOKEN", "GITHUB_TOKEN", "GITLAB_TOKEN"],
              help="Access token for private repositories or higher rate limits")
@click.option("--timeout", type=float, default=30.0, show_default=True, envvar="GITNAB_TIMEOUT",
              help="Connect timeout in seconds")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, envvar="GITNAB_LOG_LEVEL", help="Log verbosity (default: WARNING)")
@click.version_option(__version__, "-v", "--version", message="%(version)s")
def main(url: str, destination: Path | None, output: Path | None, keep_folder_name: bool,
         token: str | None, timeout: float, log_level: str | None):
    """Nab just the subfolder you need from a Git repository URL.

    URL points at a folder in the repository tree. DESTINATION defaults to the
    current directory.
    """
    configure_logging(log_level)
    target = (output or destination or Path(".")).resolve()
    settings = Settings(token=token, timeout=timeout)

    try:
        console.print("Parsing URL...")
        provider, info = parse_url(url)
        console.print(f"  Provider: {provider.name}")
        console.print(f"  Repository: {escape(info.owner)}/{escape(info.repo)}")
        console.print(f"  Branch/Tag: {escape(info.ref)}")
        console.print(f"  Path: {escape(info.subpath)}")

        options = ExtractOptions(destination=target, subpath=info.subpath, keep_folder_name=keep_folder_name)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Downloading and extracting...", total=None)

            # Invoked from the extraction worker thread; Progress.update is thread safe
            def progress_callback(bytes_written):
                progress.update(task, advance=bytes_written)

            result = asyncio.run(download_and_extract(provider, info, options, settings,
                                                      progress_callback=progress_callback))
    except GitnabError as e:
        logger.debug("Extraction failed", exc_info=True)
        console.print(f"\n[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    console.print(f"\nDone! Files extracted to: {escape(str(result.output_path))}")
