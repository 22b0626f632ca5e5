"""Cleaning a repository whose pool lives in S3.

Point the pool at a bucket either in .poolkeeper/config.toml:

    pool = "s3://my-bucket/debian/pool"

or for a single run with POOLKEEPER_POOL. Adapters can also be wired by
hand, which is useful when the S3 client needs custom settings.
"""

from pathlib import Path

import boto3

from poolkeeper import (
    LocalRepoCollection,
    Maintenance,
    PackageCollection,
    RemoteRepoCollection,
    S3Pool,
    SnapshotCollection,
    SqliteDatabase,
)


client = boto3.client("s3", region_name="eu-west-1")
database = SqliteDatabase(Path(".poolkeeper/db/poolkeeper.sqlite"))

maintenance = Maintenance(
    database=database,
    packages=PackageCollection(database),
    mirrors=RemoteRepoCollection(database),
    local_repos=LocalRepoCollection(database),
    snapshots=SnapshotCollection(database),
    pool=S3Pool("my-bucket", "debian/pool", client=client),
)

try:
    result = maintenance.cleanup()
    print(f"Freed {result.freed_bytes} bytes in s3://my-bucket/debian/pool")
finally:
    database.close()
