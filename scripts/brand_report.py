"""View registered brands from the file store and cached state.

Usage:
    python scripts/brand_report.py              # Print brand table + save JSON
    python scripts/brand_report.py --state      # Also show which brands are cached in the state table
"""
import json
import os
import sys

import boto3
from botocore.exceptions import ClientError

from config import REGION, BUCKET_NAME, STORAGE_STACK_NAME

BRAND_PREFIX = "brand/"
SCRIPT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
REPORTS_DIR = os.path.join(SCRIPT_DIR, "files", "reports")


def get_stack_output(key: str) -> str:
    """Read one output of the storage stack."""
    cfn = boto3.client("cloudformation", region_name=REGION)
    try:
        resp = cfn.describe_stacks(StackName=STORAGE_STACK_NAME)
        for out in resp["Stacks"][0].get("Outputs", []):
            if out.get("OutputKey") == key:
                return out["OutputValue"]
    except ClientError:
        pass
    return None


def load_brands(bucket: str) -> list:
    """Read every brand/<bid>.json record from the file store."""
    s3 = boto3.client("s3", region_name=REGION)
    brands = []
    paginator = s3.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket, Prefix=BRAND_PREFIX):
        for obj in page.get("Contents", []):
            body = s3.get_object(Bucket=bucket, Key=obj["Key"])["Body"].read()
            try:
                brands.append(json.loads(body))
            except json.JSONDecodeError:
                print(f"  WARNING: skipping unreadable {obj['Key']}")
    return brands


def cached_brand_ids(table_name: str) -> set:
    """Brand ids currently held in the state table."""
    table = boto3.resource("dynamodb", region_name=REGION).Table(table_name)
    resp = table.scan(ProjectionExpression="#k", ExpressionAttributeNames={"#k": "key"})
    keys = [item["key"] for item in resp.get("Items", [])]
    while "LastEvaluatedKey" in resp:
        resp = table.scan(
            ProjectionExpression="#k",
            ExpressionAttributeNames={"#k": "key"},
            ExclusiveStartKey=resp["LastEvaluatedKey"],
        )
        keys.extend(item["key"] for item in resp.get("Items", []))
    return {key[len("BRAND_"):] for key in keys if key.startswith("BRAND_")}


def print_brand_table(brands: list, cached: set = None):
    enabled = sum(1 for b in brands if b.get("enabled"))

    print(f"\n{'='*78}")
    print(f"  REGISTERED BRANDS  ({len(brands)} total, {enabled} enabled)")
    print(f"{'='*78}")
    print(f"  {'Brand ID':<38} {'Name':<20} {'Enabled':<8} Created")
    print(f"  {'─'*74}")
    for b in sorted(brands, key=lambda b: b.get("createdAt") or ""):
        bid = b.get("bid", "?")
        marker = "*" if cached and bid in cached else " "
        created = (b.get("createdAt") or "")[:19]
        print(f" {marker}{bid:<38} {b.get('name', '')[:20]:<20} {str(b.get('enabled')):<8} {created}")
        print(f"    {b.get('endPointUrl', '')}")
    if cached is not None:
        print(f"\n  * cached in state table ({len(cached)} brand(s))")
    print()


def main():
    args = sys.argv[1:]
    bucket = get_stack_output("BucketName") or BUCKET_NAME

    brands = load_brands(bucket)
    if not brands:
        print(f"No brands found in s3://{bucket}/{BRAND_PREFIX}")
        return

    cached = None
    if "--state" in args:
        table_name = get_stack_output("StateTableName")
        if not table_name:
            print(f"ERROR: {STORAGE_STACK_NAME} not found. Deploy it first.")
            sys.exit(1)
        cached = cached_brand_ids(table_name)

    print_brand_table(brands, cached)

    # secrets stay out of the saved report
    os.makedirs(REPORTS_DIR, exist_ok=True)
    json_path = os.path.join(REPORTS_DIR, "brands.json")
    with open(json_path, "w") as f:
        json.dump([{k: v for k, v in b.items() if k != "secret"} for b in brands], f, indent=2)
    print(f"  Saved JSON: {json_path}\n")


if __name__ == "__main__":
    main()
