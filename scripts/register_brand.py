"""Register a brand, or enable/disable one, by invoking the bridge Lambdas.

Usage:
    python scripts/register_brand.py "Acme" https://acme.example.com/a2b    # register
    python scripts/register_brand.py --enable <bid>
    python scripts/register_brand.py --disable <bid>
"""
import json
import sys

import boto3
from botocore.exceptions import ClientError

from config import REGION, RESOURCE_PREFIX

REGISTRATION_FUNCTION = f"{RESOURCE_PREFIX}-new-brand-registration"
ADMIN_FUNCTION = f"{RESOURCE_PREFIX}-brand-admin"


def invoke(function_name: str, payload: dict) -> dict:
    """Invoke a bridge Lambda synchronously and return its decoded result."""
    lambda_client = boto3.client("lambda", region_name=REGION)
    try:
        response = lambda_client.invoke(
            FunctionName=function_name,
            InvocationType="RequestResponse",
            Payload=json.dumps(payload).encode("utf-8"),
        )
    except ClientError as error:
        print(f"ERROR: Could not invoke {function_name}: {error}")
        sys.exit(1)

    result = json.loads(response["Payload"].read() or b"{}")
    if response.get("FunctionError"):
        print(f"ERROR: {function_name} failed: {result.get('errorMessage', result)}")
        sys.exit(1)
    return result


def print_result(result: dict):
    body = result.get("body", {})
    status = result.get("statusCode")
    print(f"\n{'='*60}")
    print(f"  {status}: {body.get('message')}")
    print(f"{'='*60}")
    if body.get("error"):
        print(f"  Error: {body['error']}")

    brand = body.get("brand")
    if brand:
        print(f"  Brand ID:  {brand['bid']}")
        print(f"  Name:      {brand['name']}")
        print(f"  Endpoint:  {brand['endPointUrl']}")
        print(f"  Enabled:   {brand['enabled']}")
        print(f"  Secret:    {brand['secret']}")
    print()


def main():
    args = sys.argv[1:]
    if len(args) != 2:
        print(__doc__)
        sys.exit(1)

    if args[0] in ("--enable", "--disable"):
        operation = args[0].lstrip("-")
        print(f"Sending '{operation}' for brand {args[1]} to {ADMIN_FUNCTION}...")
        result = invoke(ADMIN_FUNCTION, {"operation": operation, "bid": args[1]})
    else:
        name, end_point_url = args
        print(f"Registering brand '{name}' ({end_point_url}) with {REGISTRATION_FUNCTION}...")
        result = invoke(REGISTRATION_FUNCTION, {"name": name, "endPointUrl": end_point_url})

    print_result(result)
    if result.get("statusCode") != 200:
        sys.exit(1)


if __name__ == "__main__":
    main()
