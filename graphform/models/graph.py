from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_RELATIONSHIP = "connects_to"


class Provider(str, Enum):
    AWS   = "aws"
    GCP   = "gcp"
    AZURE = "azure"


class ServiceKind(str, Enum):
    # aws
    EC2             = "ec2"
    LAMBDA          = "lambda"
    S3              = "s3"
    RDS             = "rds"
    DYNAMODB        = "dynamodb"
    VPC             = "vpc"
    ALB             = "alb"
    SQS             = "sqs"
    SNS             = "sns"
    API_GATEWAY     = "api_gateway"
    CLOUDWATCH      = "cloudwatch"
    COGNITO         = "cognito"
    SECRETS_MANAGER = "secrets_manager"
    STEP_FUNCTIONS  = "step_functions"
    FARGATE         = "fargate"
    # gcp
    COMPUTE         = "compute"
    STORAGE         = "storage"
    SQL             = "sql"
    FUNCTIONS       = "functions"
    LB              = "lb"
    # azure
    VM              = "vm"
    BLOB            = "blob"
    VNET            = "vnet"


def service_kind(value: Optional[str]) -> Optional[ServiceKind]:
    """Return the ServiceKind for a raw string, or None if it is not one."""
    if not value:
        return None
    try:
        return ServiceKind(str(value).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class ResourceNode:
    id: str
    service_kind: str            # a ServiceKind value, e.g. "s3"
    provider: str                # "aws", "gcp", "azure"
    display_name: str = ""
    declaration_type: str = ""   # e.g. "aws_s3_bucket"; filled from the catalog when empty
    config: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # kinds compare as lowercase strings everywhere downstream
        if self.service_kind:
            object.__setattr__(self, "service_kind", str(self.service_kind).strip().lower())

    @property
    def kind(self) -> Optional[ServiceKind]:
        return service_kind(self.service_kind)

    @property
    def label(self) -> str:
        return self.display_name or self.service_kind or self.id


@dataclass(frozen=True)
class RelationshipEdge:
    id: str
    source_id: str
    target_id: str
    relationship_kind: str = DEFAULT_RELATIONSHIP
    description: str = ""
    bidirectional: bool = False


@dataclass
class Graph:
    provider: str
    nodes: List[ResourceNode] = field(default_factory=list)
    edges: List[RelationshipEdge] = field(default_factory=list)
    source_file: str = ""

    def node_map(self) -> Dict[str, ResourceNode]:
        return {n.id: n for n in self.nodes}
