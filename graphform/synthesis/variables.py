"""
Variable and output declarations derived from which node kinds are present.
"""
from typing import Dict, List, Tuple

from graphform.models.declaration import DiagnosticKind, Output, Variable
from graphform.models.graph import ResourceNode
from graphform.models.settings import LambdaSettings, RdsSettings
from graphform.synthesis.context import SynthesisContext
from graphform.synthesis.naming import NameRegistry

DEFAULT_REGIONS = {
    "aws": "us-east-1",
    "gcp": "us-central1",
    "azure": "East US",
}

# (provider, kind) → [(output suffix, attribute, description template)]
_OUTPUTS: Dict[Tuple[str, str], List[Tuple[str, str, str]]] = {
    ("aws", "ec2"): [
        ("public_ip", "public_ip", "Public IP of {label}"),
    ],
    ("gcp", "compute"): [
        ("public_ip", "network_interface.0.access_config.0.nat_ip", "Public IP of {label}"),
    ],
    ("azure", "vm"): [
        ("public_ip", "public_ip_address", "Public IP of {label}"),
    ],
    ("aws", "api_gateway"): [
        ("id", "id", "ID of {label} API Gateway"),
        ("arn", "arn", "ARN of {label} API Gateway"),
        ("execution_arn", "execution_arn", "Execution ARN of {label} API Gateway"),
    ],
    ("aws", "s3"): [
        ("bucket_name", "bucket", "Name of {label} bucket"),
    ],
    ("gcp", "storage"): [
        ("bucket_name", "name", "Name of {label} bucket"),
    ],
    ("azure", "blob"): [
        ("bucket_name", "name", "Name of {label} storage account"),
    ],
    ("aws", "dynamodb"): [
        ("table_name", "name", "Name of {label} DynamoDB table"),
        ("table_arn", "arn", "ARN of {label} DynamoDB table"),
    ],
    ("aws", "rds"): [
        ("endpoint", "endpoint", "Database endpoint for {label}"),
        ("arn", "arn", "ARN of {label} database"),
    ],
    ("gcp", "sql"): [
        ("endpoint", "connection_name", "Database endpoint for {label}"),
    ],
    ("aws", "alb"): [
        ("dns_name", "dns_name", "DNS name of {label}"),
    ],
    ("aws", "lambda"): [
        ("function_name", "function_name", "Name of {label} Lambda function"),
        ("arn", "arn", "ARN of {label} Lambda function"),
    ],
    ("aws", "sqs"): [
        ("queue_url", "url", "URL of {label} queue"),
    ],
    ("aws", "sns"): [
        ("topic_arn", "arn", "ARN of {label} topic"),
    ],
}

_LAMBDA_S3_OUTPUTS = [
    ("s3_bucket", "s3_bucket", "S3 bucket containing {label} Lambda code"),
    ("s3_key", "s3_key", "S3 key for {label} Lambda code"),
]


def _external_code(node: ResourceNode) -> bool:
    return node.service_kind == "lambda" and not LambdaSettings.from_config(node.config).inline_code


def synthesize_variables(nodes: List[ResourceNode], provider: str) -> Dict[str, Variable]:
    variables: Dict[str, Variable] = {
        "environment": Variable("Environment name", default="dev"),
        "region": Variable("Cloud provider region", default=DEFAULT_REGIONS.get(provider, "us-east-1")),
    }
    kinds = {n.service_kind for n in nodes}

    if provider == "gcp":
        variables["project_id"] = Variable("GCP project to deploy into")

    if provider == "aws":
        if any(_external_code(n) for n in nodes):
            variables["lambda_s3_bucket"] = Variable(
                "S3 bucket containing the Lambda function code", default="my-lambda-bucket",
            )
            variables["lambda_s3_key"] = Variable(
                "S3 key (path) to the Lambda function ZIP file", default="lambda-function.zip",
            )
        if "alb" in kinds:
            variables["subnet_ids"] = Variable("Subnets the load balancer is attached to", type="list(string)", default=[])
            variables["security_group_ids"] = Variable("Security groups for the load balancer", type="list(string)", default=[])
        if any(n.service_kind == "rds" and not RdsSettings.from_config(n.config).password for n in nodes):
            variables["db_password"] = Variable("Master password for database instances", sensitive=True)

    if provider == "azure" and "vm" in kinds:
        variables["network_interface_ids"] = Variable(
            "Network interfaces attached to virtual machines", type="list(string)", default=[],
        )
    return variables


def synthesize_outputs(nodes: List[ResourceNode], ctx: SynthesisContext) -> Dict[str, Output]:
    outputs: Dict[str, Output] = {}
    names = NameRegistry()
    for node in nodes:
        primary = ctx.primaries.get(node.id)
        if primary is None:
            continue
        templates = list(_OUTPUTS.get((node.provider, node.service_kind), []))
        if _external_code(node):
            templates += _LAMBDA_S3_OUTPUTS
        for suffix, attribute, description in templates:
            base = f"{primary.name}_{suffix}"
            name = names.claim(base)
            if name != base:
                ctx.warn(DiagnosticKind.NAME_COLLISION, base,
                         f"output name '{base}' is already taken; using '{name}'")
            outputs[name] = Output(
                description=description.format(label=node.label),
                value=primary.ref(attribute),
            )
    return outputs
