"""Storage stack - state table and file store for the A2B brand bridge.

Separated from the bridge so brand registrations persist across handler
redeployments.

Deploy:   cdk deploy A2bStorageStack
Destroy:  cdk destroy A2bStorageStack
"""
import aws_cdk as cdk
from constructs import Construct
from aws_cdk import aws_dynamodb as dynamodb, aws_s3 as s3


class StorageStack(cdk.Stack):

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        bucket_name = self.node.try_get_context("bucket_name")
        prefix = self.node.try_get_context("resource_prefix")

        # File store: brand/<bid>.json, the rebuild source for the state table
        self.bucket = s3.Bucket(
            self,
            "FileStoreBucket",
            bucket_name=bucket_name,
            removal_policy=cdk.RemovalPolicy.RETAIN,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            versioned=True,
        )

        # State store: BRAND_<bid> records and cached auth tokens
        self.table = dynamodb.Table(
            self,
            "StateTable",
            table_name=f"{prefix}-state",
            partition_key=dynamodb.Attribute(name="key", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            time_to_live_attribute="expires_at",
            removal_policy=cdk.RemovalPolicy.DESTROY,
        )

        cdk.CfnOutput(self, "BucketName", value=self.bucket.bucket_name)
        cdk.CfnOutput(self, "StateTableName", value=self.table.table_name)
