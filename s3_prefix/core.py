from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional
import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .errors import S3ListError, log_and_reraise

log = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass(frozen=True)
class StoreResult:
    """
    Outcome of a single store call. `found` is only meaningful for existence probes.
    """
    ok: bool
    found: bool = False
    error: Optional[str] = None


def get_s3_client(
    aws_profile: Optional[str] = None,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
    region_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    use_path_style: bool = False,
    retries_max_attempts: int = 8,
    retries_mode: str = "standard",
    connect_timeout: int = 10,
    read_timeout: int = 60,
):
    """
    Create a boto3 S3 client with retries and timeouts applied.
    `endpoint_url` + `use_path_style` cover S3-compatible stores such as MinIO.
    """
    cfg = Config(
        retries={"max_attempts": retries_max_attempts, "mode": retries_mode},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        s3={"addressing_style": "path" if use_path_style else "auto"},
    )
    if aws_profile:
        session = boto3.Session(profile_name=aws_profile, region_name=region_name)
    else:
        session = boto3.Session(
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region_name,
        )
    return session.client("s3", config=cfg, endpoint_url=endpoint_url or None)


@log_and_reraise(S3ListError)
def list_key_pages(s3_client, bucket: str, prefix: str) -> Iterator[List[str]]:
    """
    Yield one list of keys per `list_objects_v2` page. Lazy: a page is only
    requested when the previous one has been consumed.
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
        yield [obj["Key"] for obj in page.get("Contents", []) or [] if obj.get("Key")]


def iter_prefix_keys(s3_client, bucket: str, source: str, limit: Optional[int] = None) -> Iterator[str]:
    """
    Yield keys under `source/` in store order, stopping after `limit` keys.
    Every call starts a fresh traversal.
    """
    prefix = f"{source}/"
    yielded = 0
    if limit is not None and limit <= 0:
        return
    for keys in list_key_pages(s3_client, bucket, prefix):
        for key in keys:
            # stores may hand back neighbouring prefixes
            if not key.startswith(prefix):
                log.debug("Ignoring key outside %s: %s", prefix, key)
                continue
            yield key
            yielded += 1
            if limit is not None and yielded >= limit:
                return


def count_prefix_keys(s3_client, bucket: str, source: str, limit: Optional[int] = None) -> int:
    """Full counting pass (capped at `limit`) on its own traversal."""
    return sum(1 for _ in iter_prefix_keys(s3_client, bucket, source, limit=limit))


def object_exists(s3_client, bucket: str, key: str) -> StoreResult:
    """
    HEAD the object. 404/NoSuchKey/NotFound is a successful probe with found=False;
    any other error is a failed probe and the caller decides what it means.
    """
    try:
        s3_client.head_object(Bucket=bucket, Key=key)
        return StoreResult(ok=True, found=True)
    except ClientError as e:
        code = str(e.response.get("Error", {}).get("Code", ""))
        if code in _NOT_FOUND_CODES:
            return StoreResult(ok=True, found=False)
        return StoreResult(ok=False, error=f"{code}: {e}")
    except Exception as e:
        return StoreResult(ok=False, error=str(e))


def copy_object(s3_client, bucket: str, source_key: str, target_key: str) -> StoreResult:
    try:
        s3_client.copy({"Bucket": bucket, "Key": source_key}, bucket, target_key)
        return StoreResult(ok=True)
    except Exception as e:
        return StoreResult(ok=False, error=str(e))


def delete_object(s3_client, bucket: str, key: str) -> StoreResult:
    try:
        s3_client.delete_object(Bucket=bucket, Key=key)
        return StoreResult(ok=True)
    except Exception as e:
        return StoreResult(ok=False, error=str(e))
