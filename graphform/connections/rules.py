"""
Static per-provider connection rules, plus loading of extra rules from a
``graphform_rules.yaml`` file.
"""
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

import yaml
from rich.console import Console

console = Console(stderr=True)

DEFAULT_RULES_FILE = "graphform_rules.yaml"


@dataclass(frozen=True)
class ConnectionRule:
    source_kind: str
    target_kind: str
    relationship: str
    description: str
    required: bool = False
    bidirectional: bool = False


_R = ConnectionRule

RULES: Dict[str, List[ConnectionRule]] = {
    "aws": [
        _R("ec2", "vpc", "depends_on", "EC2 instances must be deployed within a VPC", required=True),
        _R("ec2", "s3", "accesses", "EC2 can read/write to S3 buckets"),
        _R("ec2", "rds", "connects_to", "EC2 connects to RDS database"),
        _R("alb", "ec2", "load_balances", "Load balancer distributes traffic to EC2 instances"),
        _R("alb", "vpc", "depends_on", "Load balancer requires VPC", required=True),
        _R("lambda", "s3", "accesses", "Lambda function can access S3 buckets"),
        _R("lambda", "rds", "connects_to", "Lambda can connect to RDS database"),
        _R("rds", "vpc", "depends_on", "RDS must be deployed within a VPC", required=True),
        _R("lambda", "sqs", "consumes", "Lambda function can consume messages from SQS queue"),
        _R("ec2", "sqs", "sends_to", "EC2 instances can send messages to SQS queue"),
        _R("sqs", "lambda", "triggers", "SQS queue can trigger Lambda function"),
        _R("lambda", "dynamodb", "accesses", "Lambda function can read/write DynamoDB tables"),
        _R("ec2", "dynamodb", "accesses", "EC2 can read/write DynamoDB tables"),
        _R("lambda", "sns", "publishes_to", "Lambda function can publish to SNS topics"),
        _R("sns", "sqs", "sends_to", "SNS topic can fan out to SQS queues"),
        _R("api_gateway", "lambda", "invokes", "API Gateway invokes Lambda function"),
    ],
    "gcp": [
        _R("compute", "storage", "accesses", "Compute Engine can access Cloud Storage"),
        _R("compute", "sql", "connects_to", "Compute Engine connects to Cloud SQL"),
        _R("lb", "compute", "load_balances", "Load balancer distributes traffic to compute instances"),
        _R("functions", "storage", "accesses", "Cloud Functions can access Cloud Storage"),
        _R("functions", "sql", "connects_to", "Cloud Functions can connect to Cloud SQL"),
    ],
    "azure": [
        _R("vm", "blob", "accesses", "Virtual Machine can access Blob Storage"),
        _R("vm", "sql", "connects_to", "Virtual Machine connects to SQL Database"),
        _R("vm", "vnet", "depends_on", "Virtual Machine requires Virtual Network", required=True),
        _R("lb", "vm", "load_balances", "Load balancer distributes traffic to VMs"),
        _R("functions", "blob", "accesses", "Azure Functions can access Blob Storage"),
    ],
}


def rules_for(provider: str, rules: Optional[Dict[str, List[ConnectionRule]]] = None) -> List[ConnectionRule]:
    table = RULES if rules is None else rules
    return table.get(provider, [])


def load_rules_file(path: str) -> Dict[str, List[ConnectionRule]]:
    """
    Read extra rules from a YAML file of the form::

        rules:
          - provider: aws
            source: lambda
            target: sns
            relationship: publishes_to
            description: ...
            required: false

    Unreadable files and malformed entries are reported and skipped.
    """
    extra: Dict[str, List[ConnectionRule]] = {}
    try:
        with open(path, "r") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        console.print(f"[yellow]Warning:[/yellow] failed to read rules file {path}: {exc}")
        return extra

    entries = data.get("rules", []) if isinstance(data, dict) else []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        provider = entry.get("provider")
        source = entry.get("source")
        target = entry.get("target")
        if not (provider and source and target):
            console.print(f"[yellow]Warning:[/yellow] rule #{i + 1} in {path} needs provider, source and target; skipped")
            continue
        extra.setdefault(str(provider), []).append(ConnectionRule(
            source_kind=str(source),
            target_kind=str(target),
            relationship=str(entry.get("relationship", "connects_to")),
            description=str(entry.get("description", f"{source} connects to {target}")),
            required=bool(entry.get("required", False)),
            bidirectional=bool(entry.get("bidirectional", False)),
        ))
    return extra


def merged_rules(path: Optional[str] = None) -> Dict[str, List[ConnectionRule]]:
    """
    Built-in rules followed by rules from ``path``. When no path is given,
    ``graphform_rules.yaml`` in the working directory is used if it exists.
    """
    if path is None:
        if not os.path.exists(DEFAULT_RULES_FILE):
            return RULES
        path = DEFAULT_RULES_FILE

    table = {provider: list(rules) for provider, rules in RULES.items()}
    for provider, extra in load_rules_file(path).items():
        table.setdefault(provider, []).extend(extra)
    return table
