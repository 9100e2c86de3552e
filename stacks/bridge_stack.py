"""Bridge stack - webhook handlers for the A2B brand bridge.

Creates a layer with the shared a2b package and one Lambda per handler.
Webhook facing handlers get a public Function URL, the admin UI backends an
IAM-authorized one. The internal handler is only invoked by the other
handlers. Depends on the StorageStack.

Deploy:   cdk deploy A2bBridgeStack
Destroy:  cdk destroy A2bBridgeStack
"""
import json
import os

import aws_cdk as cdk
from constructs import Construct
from aws_cdk import (
    aws_dynamodb as dynamodb,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
)

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LAMBDA_DIR = os.path.join(os.path.dirname(__file__), "lambda_functions")

# directory name -> (deployed name suffix, Function URL auth type or None for no URL).
# I/O Events webhooks cannot sign requests; the admin UI backends require IAM.
HANDLERS = {
    "adobe_product_event_handler": ("adobe-product-event-handler", lambda_.FunctionUrlAuthType.NONE),
    "agency_event_handler": ("agency-event-handler", lambda_.FunctionUrlAuthType.NONE),
    "agency_assetsync_event_handler": ("agency-assetsync-event-handler", lambda_.FunctionUrlAuthType.NONE),
    "agency_assetsync_internal_handler": ("agency-assetsync-internal-handler", None),
    "new_brand_registration": ("new-brand-registration", lambda_.FunctionUrlAuthType.AWS_IAM),
    "brand_admin": ("brand-admin", lambda_.FunctionUrlAuthType.AWS_IAM),
}

# cdk.json context key -> Lambda environment variable
CONTEXT_ENVIRONMENT = {
    "s2s_client_id": "S2S_CLIENT_ID",
    "s2s_scopes": "S2S_SCOPES",
    "org_id": "ORG_ID",
    "registration_provider_id": "AIO_AGENCY_EVENTS_REGISTRATION_PROVIDER_ID",
    "asset_sync_provider_id": "AIO_AGENCY_EVENTS_AEM_ASSET_SYNC_PROVIDER_ID",
    "aem_auth_type": "AEM_AUTH_TYPE",
    "log_level": "LOG_LEVEL",
}


class BridgeStack(cdk.Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        bucket: s3.IBucket,
        table: dynamodb.ITable,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        prefix = self.node.try_get_context("resource_prefix")
        function_names = {
            directory: f"{prefix}-{suffix}" for directory, (suffix, _) in HANDLERS.items()
        }

        environment = {
            "STATE_TABLE_NAME": table.table_name,
            "FILE_STORE_BUCKET": bucket.bucket_name,
            "APPLICATION_RUNTIME_INFO": json.dumps(self.node.try_get_context("application_runtime_info") or {}),
            # kept out of cdk.json; read from the deploying shell
            "S2S_CLIENT_SECRET": os.environ.get("S2S_CLIENT_SECRET", ""),
            "ASSET_SYNC_EVENT_HANDLER_FUNCTION": function_names["agency_assetsync_event_handler"],
            "ASSET_SYNC_INTERNAL_HANDLER_FUNCTION": function_names["agency_assetsync_internal_handler"],
        }
        for context_key, variable in CONTEXT_ENVIRONMENT.items():
            value = self.node.try_get_context(context_key)
            if value:
                environment[variable] = value if isinstance(value, str) else json.dumps(value)

        # -----------------------------------------------------------
        # Shared code layer (a2b package + requests)
        # -----------------------------------------------------------
        shared_layer = lambda_.LayerVersion(
            self, "SharedLayer",
            layer_version_name=f"{prefix}-shared",
            code=lambda_.Code.from_asset(
                ROOT_DIR,
                exclude=["cdk.out", ".git", "tests", "stacks", "scripts", "*.md"],
                bundling=cdk.BundlingOptions(
                    image=lambda_.Runtime.PYTHON_3_12.bundling_image,
                    command=[
                        "bash", "-c",
                        "pip install requests -t /asset-output/python && cp -r a2b /asset-output/python/",
                    ],
                ),
            ),
            compatible_runtimes=[lambda_.Runtime.PYTHON_3_12],
        )

        # -----------------------------------------------------------
        # Handlers
        # -----------------------------------------------------------
        functions = {}
        admin_origins = self.node.try_get_context("admin_ui_origins") or []
        for directory, (suffix, url_auth_type) in HANDLERS.items():
            function = lambda_.Function(
                self, f"{directory.title().replace('_', '')}Function",
                function_name=function_names[directory],
                runtime=lambda_.Runtime.PYTHON_3_12,
                handler="index.lambda_handler",
                code=lambda_.Code.from_asset(os.path.join(LAMBDA_DIR, directory)),
                layers=[shared_layer],
                memory_size=256,
                timeout=cdk.Duration.seconds(60),
                retry_attempts=0,
                environment=environment,
                log_retention=logs.RetentionDays.ONE_MONTH,
            )
            table.grant_read_write_data(function)
            bucket.grant_read_write(function)
            functions[directory] = function

            if url_auth_type is None:
                continue

            cors = None
            if url_auth_type == lambda_.FunctionUrlAuthType.AWS_IAM and admin_origins:
                # browser access only from the configured admin UI origins
                cors = lambda_.FunctionUrlCorsOptions(
                    allowed_origins=admin_origins,
                    allowed_headers=["authorization", "content-type", "x-amz-date", "x-amz-security-token"],
                )
            url = function.add_function_url(auth_type=url_auth_type, cors=cors)
            cdk.CfnOutput(self, f"{directory.title().replace('_', '')}Url", value=url.url)

        # Routing between handlers (action invoke)
        functions["agency_assetsync_event_handler"].grant_invoke(functions["adobe_product_event_handler"])
        functions["agency_assetsync_internal_handler"].grant_invoke(functions["agency_event_handler"])
