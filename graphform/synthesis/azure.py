"""
Azure field mapping: azurerm_* resources.

Every declaration lives in the resource group emitted by the provider
preamble (``azurerm_resource_group.main``).
"""
import re
from typing import Any, Dict, List

from graphform.models.declaration import Declaration
from graphform.models.graph import ResourceNode
from graphform.models.settings import BlobSettings, ServiceSettings, VmSettings
from graphform.models.values import Reference, literal, var
from graphform.synthesis.context import ENVIRONMENT_TAG, SynthesisContext

RESOURCE_GROUP = "azurerm_resource_group.main"
RESOURCE_GROUP_NAME = "main"

# Storage account names: 3-24 lowercase letters and digits
_STORAGE_NAME_RE = re.compile(r"[^a-z0-9]")


def _location(value: Any) -> Any:
    return value or Reference(RESOURCE_GROUP, "location")


def _vm(s: VmSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    return {
        "name": literal(s.name or ctx.default_name(node, "vm")),
        "resource_group_name": Reference(RESOURCE_GROUP, "name"),
        "location": _location(s.location),
        "size": s.vm_size or "Standard_B1s",
        "admin_username": s.admin_username or "adminuser",
        "disable_password_authentication": True,
        "network_interface_ids": var("network_interface_ids"),
        "os_disk": {
            "caching": "ReadWrite",
            "storage_account_type": s.os_disk_type or "Standard_LRS",
        },
        "source_image_reference": {
            "publisher": "Canonical",
            "offer": "0001-com-ubuntu-server-focal",
            "sku": "20_04-lts-gen2",
            "version": "latest",
        },
        "tags": {"environment": ENVIRONMENT_TAG},
    }


def _blob(s: BlobSettings, node: ResourceNode, ctx: SynthesisContext) -> Dict[str, Any]:
    if s.name:
        name = s.name
    else:
        base = _STORAGE_NAME_RE.sub("", ctx.name_of(node))[:16]
        name = f"{base}st{ctx.suffixes.next()}"
    return {
        "name": literal(name),
        "resource_group_name": Reference(RESOURCE_GROUP, "name"),
        "location": _location(s.location),
        "account_tier": s.account_tier or "Standard",
        "account_replication_type": s.replication_type or "LRS",
        "tags": {"environment": ENVIRONMENT_TAG},
    }


MAPPERS = {
    "vm": _vm,
    "blob": _blob,
}


def expand(node: ResourceNode, primary: Declaration, settings: ServiceSettings, ctx: SynthesisContext) -> List[Declaration]:
    return []
