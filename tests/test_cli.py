from __future__ import annotations

import pytest
from click.testing import CliRunner

from gitnab import CLI as cli_module
from gitnab import __version__
from gitnab.Errors import ArchiveStreamError, DownloadError, NoFilesFoundError
from gitnab.TarExtractor import ExtractResult

URL = "https://github.com/owner/repo/tree/main/examples"


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    async def fake_download_and_extract(provider, info, options, settings, progress_callback=None):
        recorded.append((provider, info, options, settings))
        if progress_callback:
            progress_callback(42)
        output_path = options.destination
        if options.keep_folder_name:
            output_path = output_path / info.subpath.split("/")[-1]
        return ExtractResult(output_path=output_path, files=1, bytes_written=42)

    monkeypatch.setattr(cli_module, "download_and_extract", fake_download_and_extract)
    return recorded


def test_extracts_to_positional_destination(calls, tmp_path):
    result = CliRunner().invoke(cli_module.main, [URL, str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "Provider: GitHub" in result.output
    assert "Repository: owner/repo" in result.output
    assert "Path: examples" in result.output
    assert "Done! Files extracted to:" in result.output

    _, info, options, _ = calls[0]
    assert info.subpath == "examples"
    assert options.destination == tmp_path.resolve()
    assert options.keep_folder_name is False


def test_output_option_and_keep_folder_name(calls, tmp_path):
    result = CliRunner().invoke(cli_module.main, ["-k", "-o", str(tmp_path / "out"), URL, str(tmp_path / "ignored")])

    assert result.exit_code == 0, result.output
    _, _, options, _ = calls[0]
    assert options.destination == (tmp_path / "out").resolve()
    assert options.keep_folder_name is True


def test_defaults_to_current_directory(calls, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli_module.main, [URL])

    assert result.exit_code == 0, result.output
    assert calls[0][2].destination == tmp_path.resolve()


def test_token_from_environment(calls, tmp_path):
    result = CliRunner().invoke(cli_module.main, [URL, str(tmp_path)], env={"GITNAB_TOKEN": None, "GITHUB_TOKEN": "from-env"})

    assert result.exit_code == 0, result.output
    assert calls[0][3].token == "from-env"


def test_unsupported_url_exits_with_error(calls):
    result = CliRunner().invoke(cli_module.main, ["https://example.com/owner/repo"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Unsupported URL format" in result.output
    assert calls == []


@pytest.mark.parametrize(
    "error",
    [
        NoFilesFoundError("nonexistent"),
        DownloadError("GitHub error: 500", status_code=500),
        ArchiveStreamError("Failed to read archive stream: stream closed"),
    ],
)
def test_extraction_errors_exit_with_error(monkeypatch, tmp_path, error):
    async def failing(*args, **kwargs):
        raise error

    monkeypatch.setattr(cli_module, "download_and_extract", failing)
    result = CliRunner().invoke(cli_module.main, [URL, str(tmp_path)])

    assert result.exit_code == 1
    assert str(error).splitlines()[0] in result.output


def test_version():
    result = CliRunner().invoke(cli_module.main, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_help_lists_supported_platforms():
    result = CliRunner().invoke(cli_module.main, ["-h"])

    assert result.exit_code == 0
    assert "--keep-folder-name" in result.output
    assert "gitlab.com/namespace/project" in result.output
