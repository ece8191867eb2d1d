from __future__ import annotations
from s3_prefix.config import MigrationRequest
from s3_prefix.core import get_s3_client
from s3_prefix.migrate import migrate_prefix
from s3_prefix.report import write_report

if __name__ == "__main__":
    s3 = get_s3_client(endpoint_url="http://localhost:9000", use_path_style=True)
    req = MigrationRequest.build(
        bucket="my-bucket",
        source="images/illustrations/",
        target="images/art/",
        dry_run=True,
        spinner=True,
        limit=500,
        report_path="reports",
    )
    res = migrate_prefix(s3, req)
    write_report(req, res)
    print("Processed:", res.stats.processed, "Would copy:", res.stats.processed - res.stats.skipped,
          "Skipped:", res.stats.skipped)
