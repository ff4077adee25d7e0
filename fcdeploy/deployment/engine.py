"""
Reconciliation engine: applies a ResourceGraph to a provider.

The engine walks a fixed order of steps. Each step looks the resource up
first and only creates (or updates) what the lookup says is missing, so
running the same graph twice converges instead of duplicating.

    service -> bucket -> artifacts -> functions -> API group -> role
            -> policies -> APIs -> API publish -> storage triggers

Only the artifact upload fans out; every other step runs sequentially and
receives what it needs from earlier steps (API group subdomain, role ARN)
through a per-run state object.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from fcdeploy import naming
from fcdeploy.config.provider import DeployOptions
from fcdeploy.deployment.progress import DeploymentTrace, ProgressLogger
from fcdeploy.errors import CompilationError, DeploymentError
from fcdeploy.providers.base import Provider
from fcdeploy.providers.entities import RemoteApi, RemoteApiGroup, RemoteRole, RemoteService
from fcdeploy.resources.graph import ResourceGraph
from fcdeploy.resources.models import (
    ApiGroupResource,
    FunctionResource,
    GatewayApiResource,
    InvocationRoleResource,
    ServiceResource,
    StorageBucketResource,
    StorageObject,
    StorageObjectSetResource,
    StorageTriggerResource,
)


@dataclass
class _DeployState:
    """Values produced by earlier steps and consumed by later ones."""

    service: RemoteService | None = None
    group: RemoteApiGroup | None = None
    role: RemoteRole | None = None
    apis: dict[str, RemoteApi] = field(default_factory=dict)


class ReconciliationEngine:
    """
    Deploys a compiled resource graph through a provider.

    A failing provider call stops the run. Nothing already created is rolled
    back; running the engine again skips whatever now exists.

    Example:
        engine = ReconciliationEngine(LocalProvider(region="cn-hangzhou"))
        trace = engine.deploy(graph)
    """

    STEPS = (
        "service",
        "bucket",
        "artifacts",
        "functions",
        "api_group",
        "role",
        "policies",
        "apis",
        "publish",
        "triggers",
    )

    def __init__(
        self,
        provider: Provider,
        logger: ProgressLogger | None = None,
        options: DeployOptions | None = None,
    ):
        """
        Args:
            provider: Collaborator that reads and changes remote state
            logger: Progress logger (defaults to one echoing to stdout)
            options: Deployment options such as upload concurrency
        """
        self.provider = provider
        self.logger = logger if logger is not None else ProgressLogger()
        self.options = options or DeployOptions()

    def deploy(self, graph: ResourceGraph) -> DeploymentTrace:
        """
        Reconcile ``graph`` against the provider.

        Returns:
            The trace of progress lines emitted by this run

        Raises:
            DeploymentError: On the first failing step; carries the original
                error and the lines emitted before it
        """
        start = self.logger.line_count()
        state = _DeployState()
        for step in self.STEPS:
            setup = getattr(self, f"_setup_{step}")
            try:
                setup(graph, state)
            except Exception as e:
                raise DeploymentError(step, e, self.logger.trace_since(start)) from e
        return self.logger.trace_since(start)

    # Steps

    def _setup_service(self, graph: ResourceGraph, state: _DeployState) -> None:
        service = graph.get(naming.SERVICE_LOGICAL_ID)
        if not isinstance(service, ServiceResource):
            return

        existing = self.provider.get_service(service.name)
        if existing is not None:
            self.logger.exists("service", service.name)
            state.service = existing
            return

        self.logger.creating("service", service.name)
        state.service = self.provider.create_service(service)
        self.logger.created("service", service.name)

    def _setup_bucket(self, graph: ResourceGraph, state: _DeployState) -> None:
        bucket = graph.get(naming.STORAGE_BUCKET_LOGICAL_ID)
        if not isinstance(bucket, StorageBucketResource):
            return

        if self.provider.get_bucket(bucket.bucket_name) is not None:
            self.logger.exists("bucket", bucket.bucket_name)
            return

        self.logger.creating("bucket", bucket.bucket_name)
        self.provider.create_bucket(bucket)
        self.logger.created("bucket", bucket.bucket_name)

    def _setup_artifacts(self, graph: ResourceGraph, state: _DeployState) -> None:
        object_set = graph.get(naming.STORAGE_OBJECT_LOGICAL_ID)
        if not isinstance(object_set, StorageObjectSetResource) or not object_set.objects:
            return

        objects = list(object_set.objects.values())
        workers = min(self.options.upload_concurrency, len(objects))
        failed = threading.Event()
        first_error: Exception | None = None

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._upload, obj, object_set.bucket_name, failed)
                for obj in objects
            ]
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                error = future.exception()
                if error is not None and first_error is None:
                    first_error = error
                    # Uploads still queued never start; running ones finish.
                    for pending in futures:
                        pending.cancel()

        if first_error is not None:
            raise first_error

    def _upload(self, obj: StorageObject, bucket_name: str, failed: threading.Event) -> None:
        if failed.is_set():
            return
        try:
            self.logger.uploading(obj.object_name, bucket_name)
            self.provider.upload_object(obj.object_name, obj.local_path)
            self.logger.uploaded(obj.object_name, bucket_name)
        except Exception:
            failed.set()
            raise

    def _setup_functions(self, graph: ResourceGraph, state: _DeployState) -> None:
        for function in graph.of_kind(FunctionResource):
            existing = self.provider.get_function(function.service_name, function.function_name)
            if existing is not None:
                self.logger.updating("function", function.function_name)
                self.provider.update_function(function)
                self.logger.updated("function", function.function_name)
            else:
                self.logger.creating("function", function.function_name)
                self.provider.create_function(function)
                self.logger.created("function", function.function_name)

    def _setup_api_group(self, graph: ResourceGraph, state: _DeployState) -> None:
        group = graph.get(naming.API_GROUP_LOGICAL_ID)
        if not isinstance(group, ApiGroupResource):
            return

        existing = self.provider.get_api_group(group.group_name)
        if existing is not None:
            self.logger.exists("API group", group.group_name)
            state.group = existing
            return

        self.logger.creating("API group", group.group_name)
        state.group = self.provider.create_api_group(group)
        self.logger.created("API group", group.group_name)

    def _setup_role(self, graph: ResourceGraph, state: _DeployState) -> None:
        role = graph.get(naming.INVOKE_ROLE_LOGICAL_ID)
        if not isinstance(role, InvocationRoleResource):
            return

        existing = self.provider.get_role(role.role_name)
        if existing is not None:
            self.logger.exists("RAM role", role.role_name)
            state.role = existing
            return

        self.logger.creating("RAM role", role.role_name)
        state.role = self.provider.create_role(role)
        self.logger.created("RAM role", role.role_name)

    def _setup_policies(self, graph: ResourceGraph, state: _DeployState) -> None:
        role = graph.get(naming.INVOKE_ROLE_LOGICAL_ID)
        if not isinstance(role, InvocationRoleResource) or not role.policies:
            return

        attached = {p.policy_name for p in self.provider.get_policies(role.role_name)}
        for policy in role.policies:
            if policy.policy_name in attached:
                continue
            self.logger.attaching(policy.policy_name, role.role_name)
            self.provider.create_policy(policy)
            self.logger.attached(policy.policy_name, role.role_name)

    def _setup_apis(self, graph: ResourceGraph, state: _DeployState) -> None:
        apis = graph.of_kind(GatewayApiResource)
        if not apis:
            return
        group, role = self._require_gateway(state)

        existing = {api.name: api for api in self.provider.get_apis(group)}
        for api in apis:
            remote = existing.get(api.api_name)
            if remote is not None:
                self.logger.updating("API", api.api_name)
                self.provider.update_api(group, role, api, remote.id)
                self.logger.updated("API", api.api_name)
            else:
                self.logger.creating("API", api.api_name)
                remote = self.provider.create_api(group, role, api)
                self.logger.created("API", api.api_name)
            state.apis[api.api_name] = remote

    def _setup_publish(self, graph: ResourceGraph, state: _DeployState) -> None:
        for api in graph.of_kind(GatewayApiResource):
            group, _ = self._require_gateway(state)
            remote = state.apis[api.api_name]

            self.logger.deploying(api.api_name)
            self.provider.deploy_api(group.id, remote.id)
            self.logger.deployed(api.api_name)
            self.logger.route(
                api.request_config.http_method,
                group.subdomain,
                api.request_config.path,
                api.service_config.service_name,
                api.service_config.function_name,
            )

    def _setup_triggers(self, graph: ResourceGraph, state: _DeployState) -> None:
        for trigger in graph.of_kind(StorageTriggerResource):
            if state.role is None:
                raise CompilationError(
                    f"Trigger {trigger.trigger_name} needs the invocation role, "
                    "but the graph has none"
                )

            existing = self.provider.get_trigger(
                trigger.service_name, trigger.function_name, trigger.trigger_name
            )
            if existing is not None:
                self.logger.updating("trigger", trigger.trigger_name)
                self.provider.update_trigger(trigger, state.role)
                self.logger.updated("trigger", trigger.trigger_name)
            else:
                self.logger.creating("trigger", trigger.trigger_name)
                self.provider.create_trigger(trigger, state.role)
                self.logger.created("trigger", trigger.trigger_name)

    def _require_gateway(self, state: _DeployState) -> tuple[RemoteApiGroup, RemoteRole]:
        if state.group is None or state.role is None:
            raise CompilationError(
                "APIs need both the API group and the invocation role, "
                "but the graph is missing one of them"
            )
        return state.group, state.role


def deploy(
    graph: ResourceGraph,
    provider: Provider,
    logger: ProgressLogger | None = None,
    options: DeployOptions | None = None,
) -> DeploymentTrace:
    """Reconcile ``graph`` with a default ReconciliationEngine."""
    return ReconciliationEngine(provider, logger=logger, options=options).deploy(graph)
