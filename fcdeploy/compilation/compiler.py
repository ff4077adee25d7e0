"""
Compiler: turns a ServiceDefinition into a ResourceGraph.

The graph is built in one pass over the service's functions. Resources that
several functions need (the API group, the invocation role, the artifact
object set) are merged into a single entry under a fixed logical ID rather
than duplicated.
"""

from abc import ABC, abstractmethod

from fcdeploy import naming
from fcdeploy.core.events import requires_gateway, requires_storage_trigger
from fcdeploy.core.service import FunctionDefinition, HttpEvent, OssEvent, ServiceDefinition
from fcdeploy.deployment.progress import ProgressLogger
from fcdeploy.errors import CompilationError, SpecificationError
from fcdeploy.resources import factory
from fcdeploy.resources.graph import ResourceGraph


class Compiler(ABC):
    """
    Abstract compiler interface.

    Compilers transform a service definition into the resource graph the
    deployment engine reconciles.
    """

    @abstractmethod
    def compile(self, definition: ServiceDefinition) -> ResourceGraph:
        """
        Compile a service definition.

        Args:
            definition: The service to compile

        Returns:
            ResourceGraph keyed by logical ID

        Raises:
            SpecificationError: If the definition cannot be compiled
            CompilationError: If compilation would violate a graph invariant
        """
        pass


class TemplateCompiler(Compiler):
    """
    Compiles a service into Function Compute, OSS, API Gateway and RAM
    resources.

    Example:
        graph = TemplateCompiler().compile(definition)
        graph.get("sls-api-group")
    """

    def __init__(self, logger: ProgressLogger | None = None):
        """
        Args:
            logger: Optional progress logger; receives one
                ``Compiling function "<key>"...`` line per function
        """
        self.logger = logger

    def compile(self, definition: ServiceDefinition) -> ResourceGraph:
        graph = ResourceGraph().merge(
            naming.SERVICE_LOGICAL_ID, factory.service_resource(definition)
        )

        if definition.artifact:
            graph = self._compile_storage(graph, definition, definition.service, definition.artifact)

        for function in definition.functions:
            graph = self._compile_function(graph, definition, function)

        return graph

    def _compile_storage(
        self,
        graph: ResourceGraph,
        definition: ServiceDefinition,
        key: str,
        artifact: str,
    ) -> ResourceGraph:
        """Add one artifact under ``key``, creating the bucket on first use."""
        graph = graph.merge(naming.STORAGE_BUCKET_LOGICAL_ID, factory.bucket_resource(definition))
        return graph.merge(
            naming.STORAGE_OBJECT_LOGICAL_ID,
            factory.object_set_resource(definition, key, artifact),
        )

    def _compile_function(
        self,
        graph: ResourceGraph,
        definition: ServiceDefinition,
        function: FunctionDefinition,
    ) -> ResourceGraph:
        if self.logger is not None:
            self.logger.compiling(function.key)

        if function.artifact and function.artifact != definition.artifact:
            graph = self._compile_storage(graph, definition, function.key, function.artifact)
            code_object = factory.storage_object(definition, function.artifact).object_name
        elif definition.artifact:
            code_object = factory.storage_object(definition, definition.artifact).object_name
        else:
            raise SpecificationError(
                f'Function "{function.key}" has no artifact to deploy.',
                name=function.key,
            )

        graph = graph.merge(
            naming.function_logical_id(function.key),
            factory.function_resource(definition, function, code_object),
        )

        graph = self._compile_gateway(graph, definition, function)
        graph = self._compile_storage_trigger_access(graph, function)
        return self._compile_events(graph, definition, function)

    def _compile_gateway(
        self,
        graph: ResourceGraph,
        definition: ServiceDefinition,
        function: FunctionDefinition,
    ) -> ResourceGraph:
        if not any(requires_gateway(event) for event in function.events):
            return graph

        graph = graph.merge(naming.API_GROUP_LOGICAL_ID, factory.api_group_resource(definition))
        role = factory.invoke_role_resource().grant(naming.GATEWAY_PRINCIPAL)
        return graph.merge(naming.INVOKE_ROLE_LOGICAL_ID, role)

    def _compile_storage_trigger_access(
        self, graph: ResourceGraph, function: FunctionDefinition
    ) -> ResourceGraph:
        if not any(requires_storage_trigger(event) for event in function.events):
            return graph

        role = factory.invoke_role_resource().grant(naming.STORAGE_PRINCIPAL)
        return graph.merge(naming.INVOKE_ROLE_LOGICAL_ID, role)

    def _compile_events(
        self,
        graph: ResourceGraph,
        definition: ServiceDefinition,
        function: FunctionDefinition,
    ) -> ResourceGraph:
        for event in function.events:
            if isinstance(event, HttpEvent):
                api = factory.http_api_resource(definition, function, event)
                graph = graph.merge(api.api_name, api)
            elif isinstance(event, OssEvent):
                trigger = factory.oss_trigger_resource(definition, function, event)
                graph = graph.merge(trigger.trigger_name, trigger)
            else:
                raise CompilationError(
                    f"Unsupported event {type(event).__name__} on function '{function.key}'"
                )
        return graph


def compile_service(
    definition: ServiceDefinition, logger: ProgressLogger | None = None
) -> ResourceGraph:
    """Compile ``definition`` with the default TemplateCompiler."""
    return TemplateCompiler(logger=logger).compile(definition)
