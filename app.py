"""CDK app entry point for the A2B brand-to-agency bridge.

Two stacks:
  - A2bStorageStack: S3 file store and DynamoDB state table (persist across redeployments)
  - A2bBridgeStack:  shared layer and the webhook handler Lambdas

Deploy all:    cdk deploy --all
Deploy one:    cdk deploy A2bStorageStack
Destroy all:   cdk destroy --all
"""
import aws_cdk as cdk
from stacks.storage_stack import StorageStack
from stacks.bridge_stack import BridgeStack

app = cdk.App()

storage = StorageStack(app, "A2bStorageStack",
                       description="A2B Bridge - brand file store and state table")

bridge = BridgeStack(app, "A2bBridgeStack",
                     bucket=storage.bucket,
                     table=storage.table,
                     description="A2B Bridge - brand registration and asset sync handlers")

bridge.add_dependency(storage)

tags: dict = app.node.try_get_context("tags") or {}
for tag_key, tag_value in tags.items():
    cdk.Tags.of(app).add(tag_key, tag_value)

app.synth()
