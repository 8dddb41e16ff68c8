"""
GCP field mapping: google_* resources.
"""
from typing import Any, Dict, List

from graphform.models.declaration import Declaration
from graphform.models.graph import ResourceNode
from graphform.models.settings import CloudSqlSettings, ComputeSettings, ServiceSettings, StorageSettings
from graphform.models.values import literal, var
from graphform.synthesis.context import ENVIRONMENT_TAG, SynthesisContext, or_default


def _labels() -> Dict[str, str]:
    return {"environment": ENVIRONMENT_TAG}


def _compute(s: ComputeSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "name": literal(s.name or ctx.default_name(node, "instance")),
        "machine_type": s.machine_type or "e2-micro",
        "zone": s.zone or "us-central1-a",
        "boot_disk": {
            "initialize_params": {
                "image": s.image or "debian-cloud/debian-11",
            },
        },
        "network_interface": {
            "network": "default",
            "access_config": {},
        },
        "labels": _labels(),
    }


def _storage(s: StorageSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "name": literal(s.name or ctx.default_name(node, "bucket")),
        "location": s.location or "US",
        "storage_class": s.storage_class or "STANDARD",
        "labels": _labels(),
    }


def _sql(s: CloudSqlSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "name": literal(s.name or ctx.default_name(node, "db")),
        "database_version": s.database_version or "MYSQL_8_0",
        "region": var("region"),
        "settings": {
            "tier": s.tier or "db-f1-micro",
            "disk_size": or_default(s.disk_size, 10),
            "disk_type": "PD_SSD",
        },
    }


MAPPERS = {
    "compute": _compute,
    "storage": _storage,
    "sql": _sql,
}


def expand(node: ResourceNode, primary: Declaration, settings: ServiceSettings, ctx: SynthesisContext) -> List[Declaration]:
    return []
