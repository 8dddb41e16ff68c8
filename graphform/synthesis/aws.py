"""
AWS field mapping and auxiliary expansion: aws_* resources.
"""
from typing import Any, Callable, Dict, List

from graphform.models.declaration import Declaration
from graphform.models.graph import ResourceNode
from graphform.models.settings import (
    AlbSettings,
    ApiGatewaySettings,
    DynamoDbSettings,
    Ec2Settings,
    LambdaSettings,
    RdsSettings,
    S3Settings,
    ServiceSettings,
    SnsSettings,
    SqsSettings,
    VpcSettings,
)
from graphform.models.values import JsonEncode, Template, literal, var
from graphform.synthesis.context import SynthesisContext, or_default, tags
from graphform.synthesis.naming import hyphenate

_ENGINE_VERSIONS = {
    "mysql": "8.0",
    "postgres": "13.7",
    "mariadb": "10.6",
}

BASIC_EXECUTION_POLICY = "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"

# Placeholder handler packaged when a function has no S3 code location
PLACEHOLDER_HANDLER = """\
exports.handler = async (event) => {
  console.log('Event:', JSON.stringify(event, null, 2));

  return {
    statusCode: 200,
    headers: {
      'Content-Type': 'application/json',
      'Access-Control-Allow-Origin': '*',
      'Access-Control-Allow-Headers': 'Content-Type',
      'Access-Control-Allow-Methods': 'OPTIONS,POST,GET'
    },
    body: JSON.stringify({
      message: 'Hello from Lambda!',
      timestamp: new Date().toISOString(),
      requestId: (event.requestContext && event.requestContext.requestId) || 'local',
      input: event
    })
  };
};"""


def trust_policy(service_principal: str) -> JsonEncode:
    return JsonEncode({
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": service_principal},
                "Action": "sts:AssumeRole",
            }
        ],
    })


def execution_role(node: ResourceNode, ctx: SynthesisContext, service_principal: str) -> Declaration:
    """Create (and remember) the IAM role a compute node runs as."""
    name = ctx.name_of(node)
    role = ctx.auxiliary(node, "aws_iam_role", f"{name}_role", {
        "name": f"{hyphenate(name)}-execution-role",
        "assume_role_policy": trust_policy(service_principal),
        "tags": tags(f"{node.label}-role"),
    })
    ctx.roles[node.id] = role
    return role


# ------------------------------------------------------------------ mappers

def _ec2(s: Ec2Settings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "ami": or_default(s.ami, "ami-0abcdef1234567890"),
        "instance_type": or_default(s.instance_type, "t3.micro"),
        "key_name": s.key_name,
        "tags": tags(s.name or ctx.default_name(node, "instance")),
    }


def _api_gateway(s: ApiGatewaySettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "name": literal(s.name or f"api-{ctx.suffixes.next()}"),
        "description": or_default(s.description, "REST API"),
        "endpoint_configuration": {
            "types": [or_default(s.endpoint_configuration, "REGIONAL")],
        },
    }


def _dynamodb(s: DynamoDbSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    billing_mode = or_default(s.billing_mode, "PAY_PER_REQUEST")
    hash_key = or_default(s.hash_key, "id")
    fields: Dict[str, Any] = {
        "name": literal(s.table_name or ctx.default_name(node, "table")),
        "billing_mode": billing_mode,
        "hash_key": hash_key,
    }
    attributes = [{"name": hash_key, "type": "S"}]
    if s.range_key:
        fields["range_key"] = s.range_key
        attributes.append({"name": s.range_key, "type": "S"})
    if billing_mode == "PROVISIONED":
        fields["read_capacity"] = or_default(s.read_capacity, 5)
        fields["write_capacity"] = or_default(s.write_capacity, 5)
    fields["attribute"] = attributes
    if s.point_in_time_recovery:
        fields["point_in_time_recovery"] = {"enabled": True}
    if s.stream_enabled:
        fields["stream_enabled"] = True
        fields["stream_view_type"] = or_default(s.stream_view_type, "NEW_AND_OLD_IMAGES")
    fields["tags"] = tags(s.name or node.label)
    return fields


def _s3(s: S3Settings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "bucket": literal(s.bucket_name or ctx.default_name(node, "bucket")),
        "force_destroy": s.force_destroy,
        "tags": tags(s.name or node.label),
    }


def _rds(s: RdsSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    engine = or_default(s.engine, "mysql")
    if s.db_name:
        identifier = hyphenate(s.db_name.lower())
        db_name = s.db_name
    else:
        suffix = ctx.suffixes.next()
        identifier = f"{hyphenate(ctx.name_of(node))}-db-{suffix}"
        db_name = f"mydb_{suffix}"
    return {
        "identifier": identifier,
        "engine": engine,
        "engine_version": _ENGINE_VERSIONS.get(engine, "8.0"),
        "instance_class": or_default(s.instance_class, "db.t3.micro"),
        "allocated_storage": or_default(s.allocated_storage, 20),
        "db_name": db_name,
        "username": or_default(s.username, "admin"),
        "password": s.password or var("db_password"),
        "skip_final_snapshot": True,
        "tags": tags(s.name or node.label),
    }


def _lambda(s: LambdaSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "function_name": literal(s.function_name or ctx.default_name(node, "function")),
        "runtime": or_default(s.runtime, "nodejs18.x"),
        "handler": or_default(s.handler, "index.handler"),
    }
    if s.inline_code:
        # filled in by _expand_lambda once the archive exists
        fields["filename"] = None
        fields["source_code_hash"] = None
    else:
        fields["s3_bucket"] = s.s3_bucket or var("lambda_s3_bucket")
        fields["s3_key"] = s.s3_key or var("lambda_s3_key")
    fields["memory_size"] = or_default(s.memory_size, 128)
    fields["timeout"] = or_default(s.timeout, 30)
    fields["role"] = None

    env_vars = dict(s.environment.variables)
    env_vars.update(s.environment_variables)
    fields["environment"] = {"variables": env_vars} if env_vars else None
    fields["tags"] = tags(s.name or node.label)
    return fields


def _vpc(s: VpcSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "cidr_block": or_default(s.cidr_block, "10.0.0.0/16"),
        "enable_dns_hostnames": s.enable_dns_hostnames is not False,
        "enable_dns_support": s.enable_dns_support is not False,
        "tags": tags(s.name or f"{node.label}-vpc"),
    }


def _alb(s: AlbSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "name": literal(s.name or ctx.default_name(node, "alb")),
        "internal": s.scheme == "internal",
        "load_balancer_type": or_default(s.load_balancer_type, "application"),
        "subnets": var("subnet_ids"),
        "security_groups": var("security_group_ids"),
        "tags": tags(s.name or node.label),
    }


def _sqs(s: SqsSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "name": s.name or ctx.default_name(node, "queue"),
        "visibility_timeout_seconds": or_default(s.visibility_timeout_seconds, 30),
        "message_retention_seconds": or_default(s.message_retention_seconds, 1209600),
        "delay_seconds": or_default(s.delay_seconds, 0),
    }
    if s.fifo_queue:
        fields["name"] = f"{fields['name']}.fifo"
        fields["fifo_queue"] = True
        if s.content_based_deduplication:
            fields["content_based_deduplication"] = True
    fields["name"] = literal(fields["name"])
    if s.kms_master_key_id:
        fields["kms_master_key_id"] = s.kms_master_key_id
        if s.kms_data_key_reuse_period_seconds:
            fields["kms_data_key_reuse_period_seconds"] = s.kms_data_key_reuse_period_seconds
    if s.wants_dlq:
        # filled in by _expand_sqs
        fields["redrive_policy"] = None
    fields["tags"] = tags(s.name or node.label)
    return fields


def _sns(s: SnsSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"name": s.topic_name or s.name or ctx.default_name(node, "topic")}
    if s.fifo_topic:
        fields["name"] = f"{fields['name']}.fifo"
        fields["fifo_topic"] = True
    fields["name"] = literal(fields["name"])
    fields["tags"] = tags(s.name or node.label)
    return fields


MAPPERS: Dict[str, Callable[[ServiceSettings, ResourceNode, SynthesisContext], Dict[str, Any]]] = {
    "ec2": _ec2,
    "api_gateway": _api_gateway,
    "dynamodb": _dynamodb,
    "s3": _s3,
    "rds": _rds,
    "lambda": _lambda,
    "vpc": _vpc,
    "alb": _alb,
    "sqs": _sqs,
    "sns": _sns,
}


# ------------------------------------------------------------------ expansion

def _expand_s3(node: ResourceNode, primary: Declaration, s: S3Settings, ctx: SynthesisContext) -> List[Declaration]:
    name = primary.name
    public_access_block = ctx.auxiliary(node, "aws_s3_bucket_public_access_block", f"{name}_public_access_block", {
        "bucket": primary.ref("id"),
        "block_public_acls": True,
        "block_public_policy": True,
        "ignore_public_acls": True,
        "restrict_public_buckets": True,
    }, depends_on=[primary.address])
    versioning = ctx.auxiliary(node, "aws_s3_bucket_versioning", f"{name}_versioning", {
        "bucket": primary.ref("id"),
        "versioning_configuration": {
            "status": "Enabled" if s.versioning else "Disabled",
        },
    }, depends_on=[primary.address])
    return [public_access_block, versioning]


def _expand_lambda(node: ResourceNode, primary: Declaration, s: LambdaSettings, ctx: SynthesisContext) -> List[Declaration]:
    name = primary.name
    role = execution_role(node, ctx, "lambda.amazonaws.com")
    basic_execution = ctx.auxiliary(node, "aws_iam_role_policy_attachment", f"{name}_basic_execution", {
        "role": role.ref("name"),
        "policy_arn": BASIC_EXECUTION_POLICY,
    }, depends_on=[role.address])
    primary.fields["role"] = role.ref("arn")
    primary.add_dependency(role.address)
    extra = [role, basic_execution]

    if s.inline_code:
        archive = ctx.auxiliary(node, "archive_file", f"{name}_lambda_zip", {
            "type": "zip",
            "output_path": Template(f"${{path.module}}/lambda-{name}.zip"),
            "source": {
                "content": PLACEHOLDER_HANDLER,
                "filename": "index.js",
            },
        }, mode="data")
        primary.fields["filename"] = archive.ref("output_path")
        primary.fields["source_code_hash"] = archive.ref("output_base64sha256")
        primary.add_dependency(archive.address)
        extra.append(archive)
    return extra


def _expand_sqs(node: ResourceNode, primary: Declaration, s: SqsSettings, ctx: SynthesisContext) -> List[Declaration]:
    if not s.wants_dlq:
        return []
    dlq_fields: Dict[str, Any] = {
        "name": f"{hyphenate(primary.name)}-dlq",
        "visibility_timeout_seconds": 30,
        "message_retention_seconds": 1209600,
        "delay_seconds": 0,
    }
    if s.fifo_queue:
        dlq_fields["name"] += ".fifo"
        dlq_fields["fifo_queue"] = True
    dlq_fields["tags"] = tags(f"{node.label}-dlq", Type="DeadLetterQueue")
    dlq = ctx.auxiliary(node, "aws_sqs_queue", f"{primary.name}_dlq", dlq_fields)

    primary.fields["redrive_policy"] = JsonEncode({
        "deadLetterTargetArn": dlq.ref("arn"),
        "maxReceiveCount": s.max_receive_count,
    })
    primary.add_dependency(dlq.address)
    return [dlq]


EXPANDERS = {
    "s3": _expand_s3,
    "lambda": _expand_lambda,
    "sqs": _expand_sqs,
}


def expand(node: ResourceNode, primary: Declaration, settings: ServiceSettings, ctx: SynthesisContext) -> List[Declaration]:
    expander = EXPANDERS.get(node.service_kind)
    if expander is None or settings is None:
        return []
    return expander(node, primary, settings, ctx)
