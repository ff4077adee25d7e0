"""Service definitions, event classification and validation."""

from fcdeploy.core.service import (
    ServiceDefinition,
    FunctionDefinition,
    HttpEvent,
    OssEvent,
    OssTriggerConfig,
    EventBinding,
)
from fcdeploy.core.events import requires_gateway, requires_storage_trigger
from fcdeploy.core.validation import validate_service

__all__ = [
    "ServiceDefinition",
    "FunctionDefinition",
    "HttpEvent",
    "OssEvent",
    "OssTriggerConfig",
    "EventBinding",
    "requires_gateway",
    "requires_storage_trigger",
    "validate_service",
]
