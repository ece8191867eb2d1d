# cli.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from .config import MigrationRequest, aws_settings, load_cfg, resolve_bucket
from .core import get_s3_client
from .errors import ConfigError, S3PrefixError, setup_logging
from .migrate import MigrationResult, migrate_prefix
from .report import write_report

app = typer.Typer(add_completion=False, help="S3 prefix migration CLI")

# ---------------- Settings kept in Typer context ----------------
@dataclass
class Settings:
    verbose: bool = False
    aws_profile: Optional[str] = None
    aws_region: Optional[str] = None
    endpoint_url: Optional[str] = None

# ---------------- Helpers ----------------
def _client_from_cfg(cfg: dict, settings: Settings):
    """
    Resolve AWS auth/region with priority:
    CLI flags -> YAML -> app .env variables (AWS_DEFAULT_REGION, AWS_ENDPOINT, ...).
    """
    kw = aws_settings(cfg)
    if settings.aws_profile:
        kw["aws_profile"] = settings.aws_profile
    if settings.aws_region:
        kw["region_name"] = settings.aws_region
    if settings.endpoint_url:
        kw["endpoint_url"] = settings.endpoint_url
    return get_s3_client(**kw)

def _project_root(cfg: dict) -> Path:
    paths = (cfg.get("paths") or {}) if cfg else {}
    root = paths.get("project_root")
    return Path(root) if root else Path.cwd()

def _summary(result: MigrationResult) -> str:
    s = result.stats
    return (
        f"Completed. Processed: {s.processed}, Copied: {s.copied}, Skipped: {s.skipped}, "
        f"Deleted: {s.deleted}, Failed: {s.failed}, "
        f"Elapsed: {s.elapsed_seconds:.2f}s, Rate: {s.rate_per_second:.2f}/s"
    )

# ---------------- Root options (global) ----------------
@app.callback()
def _root(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    profile: Optional[str] = typer.Option(None, "--profile", help="AWS profile name"),
    region: Optional[str] = typer.Option(None, "--region", help="AWS region (e.g. us-east-1)"),
    endpoint_url: Optional[str] = typer.Option(None, "--endpoint-url", help="S3-compatible endpoint (e.g. MinIO)"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Set up global Settings and logging once.
    """
    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level=level, logfile=log_file)

    ctx.obj = Settings(
        verbose=verbose,
        aws_profile=profile,
        aws_region=region,
        endpoint_url=endpoint_url,
    )

# ---------------- NORMALIZE PREFIX ----------------
@app.command("normalize-prefix")
def cmd_normalize_prefix(
    ctx: typer.Context,
    dry: bool = typer.Option(False, "--dry", help="Do not perform changes (dry run)"),
    source: Optional[str] = typer.Option(None, "--source", help="Source prefix (required)"),
    target: Optional[str] = typer.Option(None, "--target", help="Target prefix (required)"),
    bucket: Optional[str] = typer.Option(None, "--bucket", help="Bucket to operate on (overrides env/config)"),
    delete_original: bool = typer.Option(False, "--delete-original", help="Delete original objects after copy"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite target if exists"),
    progress_only: bool = typer.Option(False, "--progress-only", help="Hide per-object lines, keep the progress display"),
    spinner: bool = typer.Option(False, "--spinner", help="Spinner instead of a progress bar (skips the counting pass)"),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Max objects to process (for safety)"),
    report_path: Optional[str] = typer.Option(None, "--report-path", help="Report file (.json/.yaml) or directory"),
    summary_only: bool = typer.Option(False, "--summary-only", help="Only print the final summary (implies --progress-only, disables --spinner)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
):
    """
    Copy every object under SOURCE/ to TARGET/ within one bucket, optionally deleting the originals.
    """
    log = logging.getLogger("s3_prefix.cli.normalize_prefix")
    cfg = load_cfg(config)
    ncfg = (cfg.get("normalize") or {}) if cfg else {}

    try:
        request = MigrationRequest.build(
            bucket=resolve_bucket(bucket, cfg),
            source=source,
            target=target,
            dry_run=dry,
            overwrite=overwrite,
            delete_original=delete_original,
            limit=limit,
            spinner=spinner,
            progress_only=progress_only,
            summary_only=summary_only,
            report_path=report_path or ncfg.get("report_path"),
        )
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if request.progress_mode != "silent":
        typer.echo(f"Using bucket: {request.bucket}")
        typer.echo(f"Source prefix: {request.source}")
        typer.echo(f"Target prefix: {request.target}")
        typer.echo("DRY RUN (no changes will be made)" if request.dry_run else "LIVE RUN")

    s3 = _client_from_cfg(cfg, ctx.obj or Settings())

    try:
        result = migrate_prefix(s3, request)
    except S3PrefixError as e:
        typer.echo(f"Migration aborted: {e}", err=True)
        raise typer.Exit(code=1)

    # silent mode prints the summary line and nothing else
    if request.progress_mode != "silent":
        if result.no_objects:
            typer.echo(f"No objects found under {request.source}/")
        elif result.limit_reached:
            log.info("Stopped at limit %d", request.limit)

    write_report(request, result, project_root=_project_root(cfg))
    typer.echo(_summary(result))


def main():
    app()


if __name__ == "__main__":
    main()
