"""
Resource factory: one constructor per resource kind.

Constructors are pure. Calling one twice with the same inputs gives equal
resources, which is what lets the compiler merge repeated contributions to a
shared resource safely. Descriptions embed the service and stage so remote
objects can be traced back to the service that created them.
"""

from pathlib import PurePosixPath

from fcdeploy import naming
from fcdeploy.core.service import FunctionDefinition, HttpEvent, OssEvent, ServiceDefinition
from fcdeploy.resources.models import (
    ApiGroupResource,
    ApiRequestConfig,
    ApiServiceConfig,
    FunctionCode,
    FunctionResource,
    GatewayApiResource,
    InvocationRoleResource,
    Policy,
    ServiceResource,
    StorageBucketResource,
    StorageObject,
    StorageObjectSetResource,
    StorageTriggerResource,
)


def service_resource(definition: ServiceDefinition) -> ServiceResource:
    name = definition.service_name
    return ServiceResource(
        name=name,
        description=f"Service {name} generated by the Serverless framework",
        region=definition.region,
    )


def bucket_resource(definition: ServiceDefinition) -> StorageBucketResource:
    return StorageBucketResource(
        bucket_name=definition.bucket_name,
        region=definition.region,
    )


def storage_object(definition: ServiceDefinition, artifact: str) -> StorageObject:
    """
    Describe where an artifact goes in the deployment bucket.

    The object is stored under the package's artifact directory; the local
    copy is expected in the service's ``.serverless`` directory, where
    packaging leaves it.
    """
    file_name = naming.artifact_file_name(artifact)
    local_path = PurePosixPath(definition.service_path.replace("\\", "/")) / ".serverless" / file_name
    return StorageObject(
        object_name=f"{definition.artifact_directory}/{file_name}",
        local_path=str(local_path),
    )


def object_set_resource(
    definition: ServiceDefinition, key: str, artifact: str
) -> StorageObjectSetResource:
    """An object set holding a single artifact under ``key``."""
    return StorageObjectSetResource(
        bucket_name=definition.bucket_name,
        objects={key: storage_object(definition, artifact)},
    )


def function_resource(
    definition: ServiceDefinition, function: FunctionDefinition, code_object: str
) -> FunctionResource:
    name = definition.function_name(function)
    return FunctionResource(
        service_name=definition.service_name,
        function_name=name,
        description=(
            f"Function {name} of service {definition.service_name} "
            "generated by the Serverless framework"
        ),
        handler=function.handler or "",
        runtime=definition.runtime,
        memory_size=function.memory_size or definition.memory_size,
        timeout=function.timeout or definition.timeout,
        code=FunctionCode(
            oss_bucket_name=definition.bucket_name,
            oss_object_name=code_object,
        ),
    )


def api_group_resource(definition: ServiceDefinition) -> ApiGroupResource:
    return ApiGroupResource(
        group_name=naming.api_group_name(definition.service, definition.stage),
        description=(
            f"API group for Function Compute service {definition.service_name}, "
            "generated by the Serverless framework."
        ),
        region=definition.region,
    )


def invoke_role_resource() -> InvocationRoleResource:
    """The shared invocation role, trusting no service yet."""
    return InvocationRoleResource(
        role_name=naming.INVOKE_ROLE_NAME,
        description=(
            "Allow Function Compute Service to be visited by API Gateway, "
            "generated by the Serverless framework"
        ),
        policies=(
            Policy(
                policy_name=naming.INVOKE_POLICY_NAME,
                policy_type="System",
                role_name=naming.INVOKE_ROLE_NAME,
            ),
        ),
    )


def http_api_resource(
    definition: ServiceDefinition, function: FunctionDefinition, event: HttpEvent
) -> GatewayApiResource:
    name = definition.function_name(function)
    request = ApiRequestConfig(
        http_method=event.method.upper(),
        path=event.path if event.path.startswith("/") else f"/{event.path}",
        parameters=tuple(event.config.get("parameters", ())),
        body_format=event.config.get("bodyFormat", ""),
    )
    return GatewayApiResource(
        group_name=naming.api_group_name(definition.service, definition.stage),
        api_name=naming.api_name(definition.service, definition.stage, function.key),
        description=(
            f"API for Function Compute function {name} of service "
            f"{definition.service_name}, triggered by http event, "
            "generated by the Serverless framework."
        ),
        request_config=request,
        service_config=ApiServiceConfig(
            fc_region=definition.region,
            service_name=definition.service_name,
            function_name=name,
        ),
    )


def oss_trigger_resource(
    definition: ServiceDefinition, function: FunctionDefinition, event: OssEvent
) -> StorageTriggerResource:
    source_arn = event.source_arn or (
        f"acs:oss:{definition.region}:{definition.account_id or ''}:{event.bucket}"
    )
    return StorageTriggerResource(
        service_name=definition.service_name,
        function_name=definition.function_name(function),
        trigger_name=naming.trigger_name(definition.service, definition.stage, function.key),
        source_arn=source_arn,
        trigger_config={
            "events": list(event.trigger_config.events),
            "filter": dict(event.trigger_config.filter),
        },
    )
