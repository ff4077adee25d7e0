"""Resource models, the resource graph, and the factory that builds them."""

from fcdeploy.resources.graph import ResourceGraph
from fcdeploy.resources.models import (
    ApiGroupResource,
    BaseResource,
    FunctionResource,
    GatewayApiResource,
    InvocationRoleResource,
    Policy,
    Resource,
    ServiceResource,
    StorageBucketResource,
    StorageObject,
    StorageObjectSetResource,
    StorageTriggerResource,
)

__all__ = [
    "ResourceGraph",
    "ApiGroupResource",
    "BaseResource",
    "FunctionResource",
    "GatewayApiResource",
    "InvocationRoleResource",
    "Policy",
    "Resource",
    "ServiceResource",
    "StorageBucketResource",
    "StorageObject",
    "StorageObjectSetResource",
    "StorageTriggerResource",
]
