"""
Configuration: provider settings, deployment options and serverless.yml
loading.
"""

from fcdeploy.config.provider import (
    DEFAULT_REGION,
    DEFAULT_RUNTIME,
    DEFAULT_STAGE,
    DeployOptions,
    ProviderConfig,
)
from fcdeploy.config.loader import find_service_file, load_service, parse_service

__all__ = [
    "DEFAULT_REGION",
    "DEFAULT_RUNTIME",
    "DEFAULT_STAGE",
    "DeployOptions",
    "ProviderConfig",
    "find_service_file",
    "load_service",
    "parse_service",
]
