from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from .errors import ConfigError
from .utils import env_flag, env_value, normalize_prefix, read_yaml

ProgressMode = Literal["bar", "spinner", "silent"]

DEFAULT_CONFIG = "config/config.yaml"
BUCKET_ENV = "AWS_BUCKET"


def load_cfg(config_path: Optional[str]) -> dict:
    """
    Load YAML config if present, otherwise return {}.
    Never crash on missing/empty config.
    """
    path = config_path or DEFAULT_CONFIG
    try:
        cfg = read_yaml(path)
    except FileNotFoundError:
        return {}
    if not cfg:
        return {}
    return cfg


def resolve_bucket(cli_bucket: Optional[str], cfg: dict) -> Optional[str]:
    """--bucket -> AWS_BUCKET env -> normalize.bucket in YAML."""
    if cli_bucket and cli_bucket.strip():
        return cli_bucket.strip()
    from_env = env_value(BUCKET_ENV)
    if from_env:
        return from_env
    ncfg = (cfg.get("normalize") or {}) if cfg else {}
    bucket = str(ncfg.get("bucket") or "").strip()
    return bucket or None


def aws_settings(cfg: dict) -> Dict[str, Any]:
    """
    Client settings from the YAML `aws:` section, falling back to the
    environment used by the web app (.env) for region, endpoint and path style.
    """
    aws = (cfg.get("aws") or {}) if cfg else {}
    path_style = aws.get("use_path_style")
    return {
        "aws_profile": aws.get("profile"),
        "aws_access_key_id": aws.get("access_key_id"),
        "aws_secret_access_key": aws.get("secret_access_key"),
        "region_name": aws.get("region") or env_value("AWS_DEFAULT_REGION") or "us-east-1",
        "endpoint_url": aws.get("endpoint_url") or env_value("AWS_ENDPOINT"),
        "use_path_style": bool(path_style) if path_style is not None else env_flag("AWS_USE_PATH_STYLE_ENDPOINT"),
        "retries_max_attempts": aws.get("retries_max_attempts", 8),
        "retries_mode": aws.get("retries_mode", "standard"),
        "connect_timeout": aws.get("connect_timeout", 10),
        "read_timeout": aws.get("read_timeout", 60),
    }


@dataclass(frozen=True)
class MigrationRequest:
    bucket: str
    source: str
    target: str
    dry_run: bool = False
    overwrite: bool = False
    delete_original: bool = False
    limit: Optional[int] = None
    progress_mode: ProgressMode = "bar"
    progress_only: bool = False
    report_path: Optional[str] = None

    @classmethod
    def build(
        cls,
        bucket: Optional[str],
        source: Optional[str],
        target: Optional[str],
        dry_run: bool = False,
        overwrite: bool = False,
        delete_original: bool = False,
        limit: Optional[int] = None,
        spinner: bool = False,
        progress_only: bool = False,
        summary_only: bool = False,
        report_path: Optional[str] = None,
    ) -> "MigrationRequest":
        """
        Validate raw options and apply the one derived default:
        summary_only forces progress_only on and the spinner off (silent mode).
        """
        src = normalize_prefix(source)
        dst = normalize_prefix(target)
        if not src or not dst:
            raise ConfigError("Both --source and --target are required.")
        if not bucket:
            raise ConfigError(f"Bucket must be specified via --bucket, {BUCKET_ENV} or normalize.bucket in config")
        if limit is not None and limit <= 0:
            raise ConfigError("--limit must be a positive integer")

        if summary_only:
            progress_only = True
            spinner = False
            mode: ProgressMode = "silent"
        elif spinner:
            mode = "spinner"
        else:
            mode = "bar"

        return cls(
            bucket=bucket,
            source=src,
            target=dst,
            dry_run=dry_run,
            overwrite=overwrite,
            delete_original=delete_original,
            limit=limit,
            progress_mode=mode,
            progress_only=progress_only,
            report_path=report_path,
        )

    @property
    def narrate(self) -> bool:
        return not self.progress_only

    def options(self) -> Dict[str, Any]:
        return {
            "delete": self.delete_original,
            "overwrite": self.overwrite,
            "spinner": self.progress_mode == "spinner",
            "progress_only": self.progress_only,
            "limit": self.limit,
        }
