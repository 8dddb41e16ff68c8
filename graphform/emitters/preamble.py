"""
Provider/version preamble (``terraform { required_providers ... }`` and the
provider block), rendered from jinja2 templates.
"""
from jinja2 import Environment

from graphform.models.declaration import SynthesisOutput
from graphform.synthesis.azure import RESOURCE_GROUP_NAME

_AWS = """\
terraform {
  required_providers {
    aws = {
      source  = "hashicorp/aws"
      version = "~> 5.0"
    }
{% if archive %}
    archive = {
      source  = "hashicorp/archive"
      version = "~> 2.0"
    }
{% endif %}
  }
}

provider "aws" {
  region = var.region
}
"""

_GCP = """\
terraform {
  required_providers {
    google = {
      source  = "hashicorp/google"
      version = "~> 4.0"
    }
  }
}

provider "google" {
  project = var.project_id
  region  = var.region
}
"""

_AZURE = """\
terraform {
  required_providers {
    azurerm = {
      source  = "hashicorp/azurerm"
      version = "~> 3.0"
    }
  }
}

provider "azurerm" {
  features {}
}

resource "azurerm_resource_group" "{{ resource_group }}" {
  name     = "rg-${var.environment}"
  location = var.region
}
"""

_TEMPLATES = {
    "aws": _AWS,
    "gcp": _GCP,
    "azure": _AZURE,
}

_env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)


def render_preamble(provider: str, needs_archive: bool = False) -> str:
    """Return the preamble for ``provider``, or "" for an unknown provider."""
    source = _TEMPLATES.get(provider)
    if source is None:
        return ""
    template = _env.from_string(source)
    return template.render(archive=needs_archive, resource_group=RESOURCE_GROUP_NAME)


def preamble_for(output: SynthesisOutput) -> str:
    return render_preamble(output.provider, output.needs_archive)
