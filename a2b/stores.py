"""Key-value (DynamoDB) and file (S3) stores backing the bridge.

Environment variables (set by CDK):
  STATE_TABLE_NAME   - DynamoDB table used as the key-value state store
  FILE_STORE_BUCKET  - S3 bucket used as the file store
"""
import logging
import os
import time
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

STATE_TABLE_NAME = os.environ.get("STATE_TABLE_NAME", "a2b-state")
FILE_STORE_BUCKET = os.environ.get("FILE_STORE_BUCKET", "a2b-brand-files")

# Partition key and TTL attribute of the state table (see StorageStack)
KEY_ATTRIBUTE = "key"
VALUE_ATTRIBUTE = "value"
EXPIRES_ATTRIBUTE = "expires_at"


class StateStore:
    """get/put/delete of string values in a DynamoDB table with optional TTL."""

    def __init__(self, table=None, table_name: Optional[str] = None):
        self.table = table or boto3.resource("dynamodb").Table(table_name or STATE_TABLE_NAME)

    def get(self, key: str) -> Optional[str]:
        try:
            item = self.table.get_item(Key={KEY_ATTRIBUTE: key}).get("Item")
        except ClientError as error:
            raise RuntimeError(f"Unable to read state key {key}: {error}") from error

        if not item:
            return None

        # DynamoDB removes expired items lazily, so check the TTL ourselves
        expires_at = item.get(EXPIRES_ATTRIBUTE)
        if expires_at is not None and int(expires_at) <= int(time.time()):
            logger.debug("State key %s expired at %s", key, expires_at)
            return None

        return item.get(VALUE_ATTRIBUTE)

    def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        item = {KEY_ATTRIBUTE: key, VALUE_ATTRIBUTE: value}
        if ttl:
            item[EXPIRES_ATTRIBUTE] = int(time.time()) + int(ttl)

        try:
            self.table.put_item(Item=item)
        except ClientError as error:
            raise RuntimeError(f"Unable to write state key {key}: {error}") from error

    def delete(self, key: str) -> None:
        try:
            self.table.delete_item(Key={KEY_ATTRIBUTE: key})
        except ClientError as error:
            raise RuntimeError(f"Unable to delete state key {key}: {error}") from error


class FileStore:
    """read/write/delete/list of objects under a single S3 bucket."""

    def __init__(self, s3_client=None, bucket: Optional[str] = None):
        self.s3 = s3_client or boto3.client("s3")
        self.bucket = bucket or FILE_STORE_BUCKET

    def read(self, path: str) -> bytes:
        try:
            return self.s3.get_object(Bucket=self.bucket, Key=path)["Body"].read()
        except ClientError as error:
            if error.response["Error"]["Code"] in ("NoSuchKey", "404"):
                raise FileNotFoundError(f"s3://{self.bucket}/{path}") from error
            raise RuntimeError(f"Unable to read s3://{self.bucket}/{path}: {error}") from error

    def write(self, path: str, content, content_type: str = "application/json") -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")

        try:
            self.s3.put_object(Bucket=self.bucket, Key=path, Body=content, ContentType=content_type)
        except ClientError as error:
            raise RuntimeError(f"Unable to write s3://{self.bucket}/{path}: {error}") from error
        return f"s3://{self.bucket}/{path}"

    def delete(self, path: str) -> None:
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=path)
        except ClientError as error:
            raise RuntimeError(f"Unable to delete s3://{self.bucket}/{path}: {error}") from error

    def list(self, prefix: str) -> List[str]:
        """List all object keys under a prefix."""
        keys = []
        paginator = self.s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"])
        return keys
