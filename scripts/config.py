"""Shared settings for the operator scripts. Override with environment variables."""
import os

REGION = os.environ.get("AWS_REGION", "us-west-2")
BUCKET_NAME = os.environ.get("FILE_STORE_BUCKET", "a2b-brand-files")
STACK_NAME = os.environ.get("BRIDGE_STACK_NAME", "A2bBridgeStack")
STORAGE_STACK_NAME = os.environ.get("STORAGE_STACK_NAME", "A2bStorageStack")
RESOURCE_PREFIX = os.environ.get("RESOURCE_PREFIX", "a2b")
