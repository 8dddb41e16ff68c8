"""
Edge-driven wiring: environment variables and scoped IAM policies injected
into compute declarations based on what they are connected to.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from graphform.models.declaration import Declaration
from graphform.models.graph import RelationshipEdge, ResourceNode
from graphform.models.values import JsonEncode, Template
from graphform.synthesis import aws
from graphform.synthesis.context import SynthesisContext, tags
from graphform.synthesis.naming import hyphenate

# target kind → (env var suffix, attribute) pairs
_ENV_VARS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    "dynamodb": (("_TABLE_NAME", "name"), ("_TABLE_ARN", "arn")),
    "s3":       (("_BUCKET_NAME", "bucket"), ("_BUCKET_ARN", "arn")),
    "sqs":      (("_QUEUE_URL", "url"), ("_QUEUE_ARN", "arn")),
    "sns":      (("_TOPIC_ARN", "arn"),),
}

# compute kinds that run under an IAM role → service principal
_ROLE_PRINCIPALS = {
    "lambda": "lambda.amazonaws.com",
    "ec2": "ec2.amazonaws.com",
}

_DATA_ACCESS = {"accesses", "reads", "writes"}


def _s3_resources(target: Declaration) -> List[Any]:
    return [target.ref("arn"), Template(f"${{{target.address}.arn}}/*")]


def _arn(target: Declaration) -> Any:
    return target.ref("arn")


def _rds_resources(target: Declaration) -> Any:
    return Template(f"arn:aws:rds-db:${{var.region}}:*:dbuser:${{{target.address}.resource_id}}/*")


# target kind → (actionable relationships, actions, resource builder)
_STATEMENTS: Dict[str, Tuple[set, List[str], Callable[[Declaration], Any]]] = {
    "s3": (_DATA_ACCESS, [
        "s3:GetObject",
        "s3:PutObject",
        "s3:DeleteObject",
        "s3:ListBucket",
    ], _s3_resources),
    "dynamodb": (_DATA_ACCESS, [
        "dynamodb:GetItem",
        "dynamodb:PutItem",
        "dynamodb:UpdateItem",
        "dynamodb:DeleteItem",
        "dynamodb:Query",
        "dynamodb:Scan",
    ], _arn),
    "sqs": ({"sends_to", "consumes"}, [
        "sqs:SendMessage",
        "sqs:ReceiveMessage",
        "sqs:DeleteMessage",
        "sqs:GetQueueAttributes",
    ], _arn),
    "sns": ({"publishes_to", "subscribes_to"}, [
        "sns:Publish",
        "sns:Subscribe",
        "sns:Unsubscribe",
    ], _arn),
    "rds": ({"connects_to"}, [
        "rds-db:connect",
    ], _rds_resources),
}


def _targets(node: ResourceNode, ctx: SynthesisContext) -> List[Tuple[RelationshipEdge, ResourceNode, Declaration]]:
    out = []
    for edge in ctx.outgoing(node.id):
        target = ctx.nodes_by_id.get(edge.target_id)
        primary = ctx.primaries.get(edge.target_id)
        if target is not None and primary is not None and target.id != node.id:
            out.append((edge, target, primary))
    return out


def inject_environment(node: ResourceNode, primary: Declaration, ctx: SynthesisContext) -> None:
    """Add ``<TARGET>_TABLE_NAME``-style variables for each connected data service."""
    env = primary.fields.get("environment") or {}
    env_vars = dict(env.get("variables") or {})
    for _, target, target_decl in _targets(node, ctx):
        pairs = _ENV_VARS.get(target.service_kind)
        if not pairs:
            continue
        prefix = target_decl.name.upper()
        for suffix, attribute in pairs:
            env_vars[f"{prefix}{suffix}"] = target_decl.ref(attribute)
    if env_vars:
        primary.fields["environment"] = dict(env, variables=env_vars)


def _instance_role(node: ResourceNode, primary: Declaration, ctx: SynthesisContext) -> List[Declaration]:
    """EC2 gets a role and instance profile only once it needs permissions."""
    role = aws.execution_role(node, ctx, _ROLE_PRINCIPALS["ec2"])
    profile = ctx.auxiliary(node, "aws_iam_instance_profile", f"{primary.name}_profile", {
        "name": f"{hyphenate(primary.name)}-instance-profile",
        "role": role.ref("name"),
    })
    primary.fields["iam_instance_profile"] = profile.ref("name")
    primary.add_dependency(profile.address)
    return [role, profile]


def synthesize_policies(node: ResourceNode, primary: Declaration, ctx: SynthesisContext) -> List[Declaration]:
    if node.service_kind not in _ROLE_PRINCIPALS:
        return []

    groups: Dict[str, List[Tuple[RelationshipEdge, Declaration]]] = {}
    for edge, target, target_decl in _targets(node, ctx):
        if target.service_kind in _STATEMENTS:
            groups.setdefault(target.service_kind, []).append((edge, target_decl))

    extra: List[Declaration] = []
    for kind, members in groups.items():
        relationships, actions, resources = _STATEMENTS[kind]
        statements = []
        seen = set()
        for edge, target_decl in members:
            if edge.relationship_kind not in relationships or target_decl.address in seen:
                continue
            seen.add(target_decl.address)
            statements.append({
                "Effect": "Allow",
                "Action": list(actions),
                "Resource": resources(target_decl),
            })
        if not statements:
            continue

        role: Optional[Declaration] = ctx.roles.get(node.id)
        if role is None:
            extra.extend(_instance_role(node, primary, ctx))
            role = ctx.roles[node.id]

        name = primary.name
        policy = ctx.auxiliary(node, "aws_iam_policy", f"{name}_{kind}_policy", {
            "name": f"{hyphenate(name)}-{kind}-access-policy",
            "policy": JsonEncode({
                "Version": "2012-10-17",
                "Statement": statements,
            }),
            "tags": tags(f"{hyphenate(name)}-{kind}-policy"),
        })
        attachment = ctx.auxiliary(node, "aws_iam_role_policy_attachment", f"{name}_{kind}_policy_attachment", {
            "role": role.ref("name"),
            "policy_arn": policy.ref("arn"),
        }, depends_on=[role.address, policy.address])
        extra.extend([policy, attachment])
    return extra


def wire(node: ResourceNode, primary: Declaration, ctx: SynthesisContext) -> List[Declaration]:
    if node.provider != "aws":
        return []
    if node.service_kind == "api_gateway":
        # Lambda integrations (aws_api_gateway_integration) are not synthesized yet
        return []
    if node.service_kind == "lambda":
        inject_environment(node, primary, ctx)
    return synthesize_policies(node, primary, ctx)
