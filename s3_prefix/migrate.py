from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from .config import MigrationRequest
from .core import copy_object, count_prefix_keys, delete_object, iter_prefix_keys, object_exists
from .progress import make_progress
from .utils import KeyMapper

log = logging.getLogger(__name__)

MAX_SAMPLES = 200

Action = Literal["copied", "would_copy", "skipped", "deleted", "delete_failed", "copy_failed"]
Decision = Literal["skip", "proceed"]


@dataclass(frozen=True)
class ActionRecord:
    action: Action
    source: str
    target: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"action": self.action, "source": self.source}
        if self.target is not None:
            d["target"] = self.target
        if self.error is not None:
            d["error"] = self.error
        return d


@dataclass(frozen=True)
class RunStats:
    processed: int = 0
    copied: int = 0
    skipped: int = 0
    deleted: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0

    def bump(self, **deltas: int) -> "RunStats":
        return replace(self, **{k: getattr(self, k) + v for k, v in deltas.items()})

    def finish(self, elapsed_seconds: float) -> "RunStats":
        # rate is derived from the stored (rounded) elapsed value
        return replace(self, elapsed_seconds=round(max(elapsed_seconds, 0.0), 3))

    @property
    def rate_per_second(self) -> float:
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds
        return float(self.processed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "copied": self.copied,
            "skipped": self.skipped,
            "deleted": self.deleted,
            "failed": self.failed,
            "elapsed_seconds": self.elapsed_seconds,
            "rate_per_second": self.rate_per_second,
        }


@dataclass
class MigrationResult:
    stats: RunStats
    samples: List[ActionRecord] = field(default_factory=list)
    no_objects: bool = False
    limit_reached: bool = False


def resolve_conflict(s3_client, bucket: str, target_key: str, overwrite: bool) -> Decision:
    """
    Skip when the target exists and overwrite is off. A failed probe counts as
    "not there": a later run with overwrite off will skip it once it really exists.
    """
    probe = object_exists(s3_client, bucket, target_key)
    if not probe.ok:
        log.debug("Existence probe failed for %s, assuming absent: %s", target_key, probe.error)
        return "proceed"
    if probe.found and not overwrite:
        return "skip"
    return "proceed"


def process_key(
    s3_client,
    request: MigrationRequest,
    key: str,
    target_key: str,
    stats: RunStats,
    say: Callable[[str], None],
) -> Tuple[RunStats, List[ActionRecord]]:
    """Resolve one key to a terminal outcome; returns the folded stats and its records."""
    say(f"Found: {key} -> {target_key}")

    if resolve_conflict(s3_client, request.bucket, target_key, request.overwrite) == "skip":
        say(f"Skipping existing target: {target_key}")
        return stats.bump(processed=1, skipped=1), [ActionRecord("skipped", key, target_key)]

    if request.dry_run:
        say(f"DRY: Would copy {key} to {target_key}")
        return stats.bump(processed=1), [ActionRecord("would_copy", key, target_key)]

    say(f"Copying {key} to {target_key}")
    copied = copy_object(s3_client, request.bucket, key, target_key)
    if not copied.ok:
        log.warning("Copy failed %s -> %s: %s", key, target_key, copied.error)
        return stats.bump(processed=1, failed=1), [ActionRecord("copy_failed", key, target_key, copied.error)]

    stats = stats.bump(copied=1)
    records = [ActionRecord("copied", key, target_key)]

    if request.delete_original:
        say(f"Deleting original {key}")
        deleted = delete_object(s3_client, request.bucket, key)
        if deleted.ok:
            stats = stats.bump(deleted=1)
            records.append(ActionRecord("deleted", key))
        else:
            log.warning("Delete failed for %s: %s", key, deleted.error)
            stats = stats.bump(failed=1)
            records.append(ActionRecord("delete_failed", key, error=deleted.error))

    return stats.bump(processed=1), records


def migrate_prefix(
    s3_client,
    request: MigrationRequest,
    progress_file=None,
    clock: Callable[[], float] = time.monotonic,
) -> MigrationResult:
    """
    Copy every object under `source/` to `target/` in one bucket, one key at a time.

    Bar mode counts first (its own listing) so the bar has a total; spinner and
    silent modes list once. Processing stops after `limit` terminal outcomes.
    """
    started = clock()
    mapper = KeyMapper(request.source, request.target)

    total = None
    if request.progress_mode == "bar":
        total = count_prefix_keys(s3_client, request.bucket, request.source, limit=request.limit)
        log.debug("Counted %d object(s) under %s/", total, request.source)
        if total == 0:
            return MigrationResult(stats=RunStats().finish(clock() - started), no_objects=True)

    reporter = make_progress(request.progress_mode, total=total, file=progress_file)
    say = reporter.note if request.narrate else (lambda _msg: None)

    stats = RunStats()
    samples: List[ActionRecord] = []
    limit_reached = False
    try:
        for key in iter_prefix_keys(s3_client, request.bucket, request.source, limit=request.limit):
            stats, records = process_key(s3_client, request, key, mapper.map(key), stats, say)
            room = MAX_SAMPLES - len(samples)
            if room > 0:
                samples.extend(records[:room])
            reporter.advance(stats.processed)
            if request.limit is not None and stats.processed >= request.limit:
                limit_reached = True
                say(f"Limit reached ({request.limit}). Stopping.")
                break
    finally:
        reporter.close()

    return MigrationResult(
        stats=stats.finish(clock() - started),
        samples=samples,
        no_objects=stats.processed == 0,
        limit_reached=limit_reached,
    )
