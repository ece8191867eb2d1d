from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .config import MigrationRequest
from .migrate import MAX_SAMPLES, MigrationResult
from .utils import ensure_dir, utc_now

log = logging.getLogger(__name__)

DEFAULT_REPORT_DIR = "storage/reports"
REPORT_EXTENSIONS = {".json", ".yaml", ".yml"}


def resolve_report_path(report_path: Optional[str], project_root: Path | str, stamp: str) -> Path:
    """
    A path with a known extension is the report file; anything else is a directory
    that gets a timestamped JSON file. Relative paths hang off project_root.
    """
    p = Path(report_path or DEFAULT_REPORT_DIR).expanduser()
    if not p.is_absolute():
        p = Path(project_root) / p
    if p.suffix.lower() in REPORT_EXTENSIONS:
        return p
    return p / f"s3-normalize-prefix-{stamp}.json"


def build_report(request: MigrationRequest, result: MigrationResult, timestamp: str) -> Dict[str, Any]:
    return {
        "timestamp": timestamp,
        "bucket": request.bucket,
        "source": request.source,
        "target": request.target,
        "dry": request.dry_run,
        "options": request.options(),
        "stats": result.stats.to_dict(),
        "samples": [r.to_dict() for r in result.samples[:MAX_SAMPLES]],
    }


def write_report(
    request: MigrationRequest,
    result: MigrationResult,
    project_root: Path | str = ".",
) -> Optional[Path]:
    """
    Persist the run report. Failures are logged and swallowed: the report is a
    side effect and never decides whether the migration succeeded.
    """
    now = utc_now()
    try:
        path = resolve_report_path(request.report_path, project_root, now.strftime("%Y%m%d-%H%M%S"))
        data = build_report(request, result, now.isoformat())
        ensure_dir(path.parent)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                yaml.safe_dump(data, f, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
                f.write("\n")
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        log.warning("Failed to write report: %s", e)
        return None
    log.debug("Report written to %s", path)
    return path
