"""
fcdeploy: compile and deploy serverless services on Aliyun Function Compute.

fcdeploy takes a function-centric service description (functions, their
HTTP or OSS events, and packaged artifacts) and deploys it in two stages:

- Compile: build a ResourceGraph keyed by logical ID. Shared resources such
  as the API group and the invocation role appear once, however many
  functions need them.
- Deploy: reconcile the graph against a provider in a fixed order, creating
  only what is missing and updating what exists, while narrating progress.

Example:
    from fcdeploy import compile_service, deploy, load_service, validate_service
    from fcdeploy.providers import LocalProvider

    definition = load_service("./my-service", stage="dev")
    validate_service(definition)

    graph = compile_service(definition)
    trace = deploy(graph, LocalProvider(region=definition.region))
"""

from fcdeploy.core.service import (
    ServiceDefinition,
    FunctionDefinition,
    HttpEvent,
    OssEvent,
    OssTriggerConfig,
)
from fcdeploy.core.events import requires_gateway, requires_storage_trigger
from fcdeploy.core.validation import validate_service
from fcdeploy.config.loader import load_service
from fcdeploy.config.provider import DeployOptions, ProviderConfig
from fcdeploy.resources.graph import ResourceGraph
from fcdeploy.compilation.compiler import TemplateCompiler, compile_service
from fcdeploy.deployment.engine import ReconciliationEngine, deploy
from fcdeploy.deployment.progress import DeploymentTrace, ProgressLogger
from fcdeploy.errors import (
    FcDeployError,
    SpecificationError,
    CompilationError,
    ProviderError,
    DeploymentError,
)

__version__ = "0.1.0"
__all__ = [
    "ServiceDefinition",
    "FunctionDefinition",
    "HttpEvent",
    "OssEvent",
    "OssTriggerConfig",
    "requires_gateway",
    "requires_storage_trigger",
    "validate_service",
    "load_service",
    "DeployOptions",
    "ProviderConfig",
    "ResourceGraph",
    "TemplateCompiler",
    "compile_service",
    "ReconciliationEngine",
    "deploy",
    "DeploymentTrace",
    "ProgressLogger",
    "FcDeployError",
    "SpecificationError",
    "CompilationError",
    "ProviderError",
    "DeploymentError",
]
