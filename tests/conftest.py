"""Shared fixtures: an in-memory stand-in for the boto3 S3 client calls the tool makes."""

from typing import Dict, Iterable, List

import pytest
from botocore.exceptions import ClientError

from s3_prefix.config import MigrationRequest


def _client_error(code: str, op: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


class FakePaginator:
    def __init__(self, store: "FakeS3"):
        self.store = store

    def paginate(self, Bucket: str, Prefix: str = ""):
        self.store.list_calls += 1
        keys = sorted(k for k in self.store.objects if k.startswith(Prefix))
        keys = sorted(keys + list(self.store.stray_keys))
        if not keys:
            self.store.pages_served += 1
            yield {"KeyCount": 0}
            return
        size = self.store.page_size
        for i in range(0, len(keys), size):
            self.store.pages_served += 1
            yield {"Contents": [{"Key": k} for k in keys[i : i + size]]}


class FakeS3:
    """Single-bucket object map with call tracking and injectable failures."""

    def __init__(self, keys: Iterable[str] = (), page_size: int = 1000):
        self.objects: Dict[str, bytes] = {k: k.encode() for k in keys}
        self.page_size = page_size
        self.stray_keys: List[str] = []
        self.fail_head: set = set()
        self.fail_copy: set = set()
        self.fail_delete: set = set()
        self.list_calls = 0
        self.pages_served = 0
        self.head_calls: List[str] = []
        self.copy_calls: List[tuple] = []
        self.delete_calls: List[str] = []

    def get_paginator(self, name: str):
        assert name == "list_objects_v2"
        return FakePaginator(self)

    def head_object(self, Bucket: str, Key: str):
        self.head_calls.append(Key)
        if Key in self.fail_head:
            raise _client_error("500", "HeadObject")
        if Key not in self.objects:
            raise _client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[Key])}

    def copy(self, CopySource: dict, Bucket: str, Key: str):
        self.copy_calls.append((CopySource["Key"], Key))
        if CopySource["Key"] in self.fail_copy:
            raise _client_error("AccessDenied", "CopyObject")
        self.objects[Key] = self.objects[CopySource["Key"]]

    def delete_object(self, Bucket: str, Key: str):
        self.delete_calls.append(Key)
        if Key in self.fail_delete:
            raise _client_error("AccessDenied", "DeleteObject")
        self.objects.pop(Key, None)
        return {}


@pytest.fixture
def abc_store():
    return FakeS3(["src/a.txt", "src/b.txt", "src/c.txt"])


@pytest.fixture
def make_request():
    def _make(**overrides):
        kw = dict(bucket="media", source="src", target="dst", summary_only=True)
        kw.update(overrides)
        return MigrationRequest.build(**kw)

    return _make
