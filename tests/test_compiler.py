"""
Tests for the template compiler.
"""

import pytest
from conftest import PACKAGE_TIME, http_function, oss_function

from fcdeploy import naming
from fcdeploy.compilation.compiler import TemplateCompiler, compile_service
from fcdeploy.core.service import FunctionDefinition, ServiceDefinition
from fcdeploy.errors import SpecificationError
from fcdeploy.resources.models import (
    ApiGroupResource,
    FunctionResource,
    GatewayApiResource,
    InvocationRoleResource,
    ServiceResource,
    StorageObjectSetResource,
    StorageTriggerResource,
)


def make_service(*functions, artifact="my-service.zip") -> ServiceDefinition:
    return ServiceDefinition(
        service="my-service",
        stage="dev",
        region="cn-hangzhou",
        account_id="1234567890123456",
        artifact=artifact,
        package_time=PACKAGE_TIME,
        functions=tuple(functions),
    )


class TestCompileBasics:
    """Tests for the overall shape of compiled graphs."""

    def test_logical_ids(self, definition):
        """The HTTP service compiles to the expected logical IDs, in order."""
        graph = compile_service(definition)

        assert graph.logical_ids() == [
            "sls-function-service",
            "sls-storage-bucket",
            "sls-storage-object",
            "sls-currentTime-function",
            "sls-api-group",
            "sls-fc-invoke-role",
            "sls-http-my-service-dev-currentTime",
            "sls-currentTime2-function",
            "sls-http-my-service-dev-currentTime2",
        ]

    def test_service_resource(self, definition):
        """The service resource is always present."""
        graph = compile_service(definition)

        service = graph.get(naming.SERVICE_LOGICAL_ID)
        assert isinstance(service, ServiceResource)
        assert service.name == "my-service-dev"

    def test_service_artifact_object(self, definition):
        """The service-level artifact is keyed by the service name."""
        graph = compile_service(definition)

        objects = graph.get(naming.STORAGE_OBJECT_LOGICAL_ID)
        assert isinstance(objects, StorageObjectSetResource)
        assert list(objects.objects) == ["my-service"]

    def test_deterministic(self, definition):
        """Compiling the same definition twice gives equal graphs."""
        first = compile_service(definition)
        second = compile_service(definition)

        assert first == second
        assert first.logical_ids() == second.logical_ids()

    def test_function_without_event(self):
        """A function without events gets no gateway or role resources."""
        graph = compile_service(make_service(FunctionDefinition(key="worker", handler="index.run")))

        assert naming.API_GROUP_LOGICAL_ID not in graph
        assert naming.INVOKE_ROLE_LOGICAL_ID not in graph
        assert len(graph.of_kind(FunctionResource)) == 1


class TestSharedResources:
    """Tests for deduplication of shared resources."""

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_one_group_and_role_for_many_http_functions(self, count):
        """However many HTTP functions, there is one API group and one role."""
        functions = [http_function(f"fn{i}", f"/fn{i}") for i in range(count)]
        graph = compile_service(make_service(*functions))

        assert len(graph.of_kind(ApiGroupResource)) == 1
        assert len(graph.of_kind(InvocationRoleResource)) == 1
        assert len(graph.of_kind(GatewayApiResource)) == count
        assert len(graph.of_kind(FunctionResource)) == count

    def test_role_trusts_both_trigger_sources(self, mixed_definition):
        """HTTP plus OSS functions leave the single role trusting both services."""
        graph = compile_service(mixed_definition)

        role = graph.get(naming.INVOKE_ROLE_LOGICAL_ID)
        assert role.principals == {naming.GATEWAY_PRINCIPAL, naming.STORAGE_PRINCIPAL}

    def test_storage_grant_survives_later_gateway_grant(self):
        """An OSS grant made first is kept when an HTTP function follows."""
        graph = compile_service(make_service(oss_function("thumb"), http_function("api", "/api")))

        role = graph.get(naming.INVOKE_ROLE_LOGICAL_ID)
        assert role.principals == {naming.GATEWAY_PRINCIPAL, naming.STORAGE_PRINCIPAL}

    def test_oss_only_service_has_no_api_group(self):
        """OSS functions need the role but not the API group."""
        graph = compile_service(make_service(oss_function("thumb")))

        assert naming.API_GROUP_LOGICAL_ID not in graph
        assert graph.get(naming.INVOKE_ROLE_LOGICAL_ID).principals == {naming.STORAGE_PRINCIPAL}
        assert len(graph.of_kind(StorageTriggerResource)) == 1

    def test_function_order_does_not_change_resources(self):
        """Reordering functions changes insertion order only."""
        functions = (http_function("a", "/a"), oss_function("b"), http_function("c", "/c"))
        forward = compile_service(make_service(*functions))
        backward = compile_service(make_service(*reversed(functions)))

        assert forward == backward
        assert forward.logical_ids() != backward.logical_ids()


class TestFunctionArtifacts:
    """Tests for per-function artifacts."""

    def test_function_artifacts_are_merged(self):
        """Each function's own artifact is added next to the service artifact."""
        graph = compile_service(
            make_service(
                http_function("a", "/a", artifact="a.zip"),
                http_function("b", "/b", artifact="b.zip"),
            )
        )

        objects = graph.get(naming.STORAGE_OBJECT_LOGICAL_ID)
        assert list(objects.objects) == ["my-service", "a", "b"]

    def test_function_code_points_at_own_artifact(self):
        """A function with its own artifact deploys that artifact."""
        graph = compile_service(make_service(http_function("a", "/a", artifact="dist/a.zip")))

        function = graph.get(naming.function_logical_id("a"))
        assert function.code.oss_object_name.endswith("/a.zip")

    def test_same_artifact_as_service_is_not_duplicated(self):
        """Repeating the service artifact on a function adds no object."""
        graph = compile_service(make_service(http_function("a", "/a", artifact="my-service.zip")))

        assert list(graph.get(naming.STORAGE_OBJECT_LOGICAL_ID).objects) == ["my-service"]

    def test_function_artifacts_without_service_artifact(self):
        """Function artifacts alone still create the bucket and object set."""
        graph = compile_service(
            make_service(http_function("a", "/a", artifact="a.zip"), artifact=None)
        )

        assert naming.STORAGE_BUCKET_LOGICAL_ID in graph
        assert list(graph.get(naming.STORAGE_OBJECT_LOGICAL_ID).objects) == ["a"]

    def test_missing_artifact_is_an_error(self):
        """A function with nothing to deploy is rejected with its name."""
        with pytest.raises(SpecificationError) as info:
            compile_service(make_service(http_function("a", "/a"), artifact=None))

        assert info.value.name == "a"


class TestCompilerLogging:
    """Tests for compile-time progress lines."""

    def test_logs_each_function(self, definition, logger):
        """One line per function, in definition order."""
        TemplateCompiler(logger=logger).compile(definition)

        assert list(logger.trace) == [
            'Compiling function "currentTime"...',
            'Compiling function "currentTime2"...',
        ]
