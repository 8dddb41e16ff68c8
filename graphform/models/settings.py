"""
Typed per-service settings.

A node's free-form ``config`` map is validated into one of these pydantic
models before field mapping, so mappers read attributes instead of poking at
string keys. Numeric strings become ints and "Enabled"/"Disabled" count as
switches. A value that still fails validation falls back to the field default
and its key is reported through ``dropped``.
"""
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

_SWITCHES = {"enabled": True, "disabled": False}


class ServiceSettings(BaseModel):
    """Base for the per-service models below."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    _dropped: List[str] = PrivateAttr(default_factory=list)

    @field_validator("*", mode="wrap")
    @classmethod
    def _fall_back_to_default(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        dropped = (info.context or {}).get("dropped")
        mark = len(dropped) if dropped is not None else 0

        candidates = [value]
        if isinstance(value, str) and value.strip().lower() in _SWITCHES:
            candidates.append(_SWITCHES[value.strip().lower()])
        for candidate in candidates:
            if dropped is not None:
                del dropped[mark:]
            try:
                result = handler(candidate)
            except ValidationError:
                continue
            if dropped is not None:
                # keys dropped inside a nested model are reported by full path
                dropped[mark:] = [f"{info.field_name}.{key}" for key in dropped[mark:]]
            return result

        if dropped is not None:
            del dropped[mark:]
            dropped.append(info.field_name)
        return cls.model_fields[info.field_name].get_default(call_default_factory=True)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]):
        dropped: List[str] = []
        settings = cls.model_validate(config or {}, context={"dropped": dropped})
        settings._dropped = dropped
        return settings

    @property
    def dropped(self) -> List[str]:
        """Config keys whose values could not be used."""
        return list(self._dropped)


# ------------------------------------------------------------------ aws

class Ec2Settings(ServiceSettings):
    name: Optional[str] = None
    ami: Optional[str] = None
    instance_type: Optional[str] = None
    key_name: Optional[str] = None


class ApiGatewaySettings(ServiceSettings):
    name: Optional[str] = None
    description: Optional[str] = None
    endpoint_configuration: Optional[str] = None


class DynamoDbSettings(ServiceSettings):
    name: Optional[str] = None
    table_name: Optional[str] = None
    billing_mode: Optional[str] = None
    hash_key: Optional[str] = None
    range_key: Optional[str] = None
    read_capacity: Optional[int] = None
    write_capacity: Optional[int] = None
    point_in_time_recovery: Optional[bool] = None
    stream_enabled: Optional[bool] = None
    stream_view_type: Optional[str] = None


class S3Settings(ServiceSettings):
    name: Optional[str] = None
    bucket_name: Optional[str] = None
    versioning: Optional[bool] = None
    force_destroy: Optional[bool] = None


class RdsSettings(ServiceSettings):
    name: Optional[str] = None
    db_name: Optional[str] = None
    engine: Optional[str] = None
    instance_class: Optional[str] = None
    allocated_storage: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None


class LambdaEnvironment(ServiceSettings):
    variables: Dict[str, Any] = Field(default_factory=dict)


class LambdaSettings(ServiceSettings):
    name: Optional[str] = None
    function_name: Optional[str] = None
    runtime: Optional[str] = None
    handler: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_key: Optional[str] = None
    memory_size: Optional[int] = None
    timeout: Optional[int] = None
    environment: LambdaEnvironment = Field(default_factory=LambdaEnvironment)
    environment_variables: Dict[str, Any] = Field(default_factory=dict)

    @property
    def inline_code(self) -> bool:
        return not self.s3_bucket and not self.s3_key


class VpcSettings(ServiceSettings):
    name: Optional[str] = None
    cidr_block: Optional[str] = None
    enable_dns_hostnames: Optional[bool] = None
    enable_dns_support: Optional[bool] = None


class AlbSettings(ServiceSettings):
    name: Optional[str] = None
    load_balancer_type: Optional[str] = None
    scheme: Optional[str] = None


class SqsSettings(ServiceSettings):
    name: Optional[str] = None
    visibility_timeout_seconds: Optional[int] = None
    message_retention_seconds: Optional[int] = None
    delay_seconds: Optional[int] = None
    fifo_queue: Optional[bool] = None
    content_based_deduplication: Optional[bool] = None
    kms_master_key_id: Optional[str] = None
    kms_data_key_reuse_period_seconds: Optional[int] = None
    dead_letter_queue: Optional[bool] = None
    max_receive_count: Optional[int] = None

    @property
    def wants_dlq(self) -> bool:
        return bool(self.dead_letter_queue and self.max_receive_count)


class SnsSettings(ServiceSettings):
    name: Optional[str] = None
    topic_name: Optional[str] = None
    fifo_topic: Optional[bool] = None


# ------------------------------------------------------------------ gcp

class ComputeSettings(ServiceSettings):
    name: Optional[str] = None
    machine_type: Optional[str] = None
    zone: Optional[str] = None
    image: Optional[str] = None


class StorageSettings(ServiceSettings):
    name: Optional[str] = None
    location: Optional[str] = None
    storage_class: Optional[str] = None


class CloudSqlSettings(ServiceSettings):
    name: Optional[str] = None
    database_version: Optional[str] = None
    tier: Optional[str] = None
    disk_size: Optional[int] = None


# ------------------------------------------------------------------ azure

class VmSettings(ServiceSettings):
    name: Optional[str] = None
    location: Optional[str] = None
    vm_size: Optional[str] = None
    os_disk_type: Optional[str] = None
    admin_username: Optional[str] = None


class BlobSettings(ServiceSettings):
    name: Optional[str] = None
    location: Optional[str] = None
    account_tier: Optional[str] = None
    replication_type: Optional[str] = None


SETTINGS_TYPES: Dict[Tuple[str, str], Type[ServiceSettings]] = {
    ("aws", "ec2"):          Ec2Settings,
    ("aws", "api_gateway"):  ApiGatewaySettings,
    ("aws", "dynamodb"):     DynamoDbSettings,
    ("aws", "s3"):           S3Settings,
    ("aws", "rds"):          RdsSettings,
    ("aws", "lambda"):       LambdaSettings,
    ("aws", "vpc"):          VpcSettings,
    ("aws", "alb"):          AlbSettings,
    ("aws", "sqs"):          SqsSettings,
    ("aws", "sns"):          SnsSettings,
    ("gcp", "compute"):      ComputeSettings,
    ("gcp", "storage"):      StorageSettings,
    ("gcp", "sql"):          CloudSqlSettings,
    ("azure", "vm"):         VmSettings,
    ("azure", "blob"):       BlobSettings,
}


def parse_settings(provider: str, kind: str, config: Dict[str, Any]) -> Optional[ServiceSettings]:
    """Return typed settings for (provider, kind), or None when the pair has no schema."""
    settings_cls = SETTINGS_TYPES.get((provider, kind))
    if settings_cls is None:
        return None
    return settings_cls.from_config(config or {})
