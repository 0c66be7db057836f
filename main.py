"""
gitmelt - Main CLI Entry Point

Gop toan bo file text cua mot repository (local hoac remote) thanh
MOT digest duy nhat de dua vao LLM, kem uoc luong so token.

Usage:
    gitmelt .                          # -> ./digest.txt
    gitmelt https://github.com/x/y -o y.txt --preset markdown
    gitmelt src --stdout --no-tokens -i "*.py" -e "tests/*"
"""

from pathlib import Path
from typing import List, Optional

import typer

from config.output_format import get_all_preset_ids
from config.paths import DIGEST_FILENAME, SETTINGS_FILE
from core.ingestion import IngestError, OutputDestination
from core.logging_config import flush_logs, log_warning, set_debug_mode
from core.utils.repo_manager import RepoError
from services.digest_service import DigestReport, DigestRequest, build_digest
from services.settings_manager import load_ingest_settings, save_ingest_settings

app = typer.Typer(
    name="gitmelt",
    help="Melt a repository into a single LLM-ready digest.",
    add_completion=False,
)


def _resolve_destination(
    output: Optional[Path], stdout: bool, dry: bool
) -> tuple[OutputDestination, Optional[Path]]:
    """
    Chon noi ghi digest tu cac flags.

    Raises:
        typer.BadParameter: Neu --stdout di cung --output
    """
    if stdout and output is not None:
        raise typer.BadParameter("--stdout cannot be combined with --output")
    if dry:
        return OutputDestination.NULL, None
    if stdout:
        return OutputDestination.STDOUT, None
    return OutputDestination.FILE, output or Path(DIGEST_FILENAME)


def _print_summary(report: DigestReport, timing: bool) -> None:
    # Digest co the dang o stdout, moi thong tin khac ra stderr
    if report.total_tokens is not None:
        typer.echo(f"Estimated tokens: {report.total_tokens}", err=True)
    if report.digest_chars is not None:
        typer.echo(f"Dry run: digest would be {report.digest_chars} characters", err=True)
    if report.output_path is not None:
        typer.echo(
            f"Wrote {report.file_count} files to {report.output_path}", err=True
        )
    if timing:
        typer.echo(
            f"Discovery: {report.discovery_seconds:.3f}s, "
            f"ingestion: {report.ingestion_seconds:.3f}s, "
            f"total: {report.total_seconds:.3f}s",
            err=True,
        )


@app.command()
def main(
    input: str = typer.Argument(".", help="Local directory or remote git URL"),
    branch: Optional[str] = typer.Option(
        None, "--branch", help="Branch or tag to clone (remote input only)"
    ),
    include: List[str] = typer.Option(
        [], "--include", "-i", help="Glob of files to include (repeatable)"
    ),
    exclude: List[str] = typer.Option(
        [], "--exclude", "-e", help="Glob of files to exclude (repeatable)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help=f"Output file (default: ./{DIGEST_FILENAME})"
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Write the digest to stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    preset: Optional[str] = typer.Option(
        None, "--preset", help=f"Output preset: {', '.join(get_all_preset_ids())}"
    ),
    prologue: Optional[str] = typer.Option(
        None, "--prologue", help="Prologue mode: off, list or tree"
    ),
    dry: bool = typer.Option(
        False, "--dry", help="Run the pipeline without writing a digest"
    ),
    no_tokens: bool = typer.Option(False, "--no-tokens", help="Skip token counting"),
    timing: bool = typer.Option(False, "--timing", "-t", help="Print a timing summary"),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Number of worker threads"
    ),
    max_file_size: Optional[int] = typer.Option(
        None, "--max-file-size", min=0, help="Skip files larger than this (bytes)"
    ),
    save_defaults: bool = typer.Option(
        False, "--save-defaults", help=f"Save the effective settings to {SETTINGS_FILE}"
    ),
) -> None:
    """Create a digest of INPUT (default: current directory)."""
    if verbose:
        set_debug_mode(True)

    destination, output_path = _resolve_destination(output, stdout, dry)

    settings = load_ingest_settings().with_overrides(
        preset=preset,
        prologue=prologue,
        count_tokens=False if no_tokens else None,
        max_workers=workers,
        max_file_size=max_file_size,
    )
    request = DigestRequest(
        input=input,
        branch=branch,
        include=list(include),
        exclude=list(exclude),
        destination=destination,
        output_path=output_path,
        settings=settings,
    )

    try:
        report = build_digest(request)
    except (IngestError, RepoError, ValueError, OSError) as e:
        log_warning(f"[CLI] Digest failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    finally:
        flush_logs()

    # Chi luu settings da chay thanh cong (preset/prologue hop le)
    if save_defaults and save_ingest_settings(settings):
        typer.echo(f"Saved defaults to {SETTINGS_FILE}", err=True)

    if report.file_count == 0:
        typer.echo("No files matched.", err=True)
        return

    _print_summary(report, timing)


if __name__ == "__main__":
    app()
