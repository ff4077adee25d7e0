"""
Local provider for development and testing.

Emulates the remote side in memory. State can be persisted to a JSON file so
that successive deploys from the CLI see what earlier ones created.
"""

import os
import threading
import uuid
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, Field

from fcdeploy.errors import ProviderError
from fcdeploy.providers.base import Provider, ProviderSettings
from fcdeploy.providers.entities import (
    RemoteApi,
    RemoteApiGroup,
    RemoteBucket,
    RemoteFunction,
    RemotePolicy,
    RemoteRole,
    RemoteService,
    RemoteTrigger,
)
from fcdeploy.resources.models import (
    ApiGroupResource,
    FunctionResource,
    GatewayApiResource,
    InvocationRoleResource,
    Policy,
    ServiceResource,
    StorageBucketResource,
    StorageTriggerResource,
)


class LocalState(BaseModel):
    """Everything the local provider has "deployed"."""

    services: dict[str, RemoteService] = Field(default_factory=dict)
    buckets: dict[str, RemoteBucket] = Field(default_factory=dict)
    objects: dict[str, dict[str, str]] = Field(default_factory=dict)
    functions: dict[str, FunctionResource] = Field(default_factory=dict)
    api_groups: dict[str, RemoteApiGroup] = Field(default_factory=dict)
    apis: dict[str, dict[str, RemoteApi]] = Field(default_factory=dict)
    api_specs: dict[str, GatewayApiResource] = Field(default_factory=dict)
    deployed_apis: list[str] = Field(default_factory=list)
    roles: dict[str, RemoteRole] = Field(default_factory=dict)
    role_documents: dict[str, dict[str, Any]] = Field(default_factory=dict)
    policies: dict[str, list[RemotePolicy]] = Field(default_factory=dict)
    triggers: dict[str, StorageTriggerResource] = Field(default_factory=dict)


def _function_key(service_name: str, function_name: str) -> str:
    return f"{service_name}/{function_name}"


class LocalProvider(Provider):
    """
    In-memory provider for development and testing.

    Useful for:
    - Trying a deployment without cloud credentials
    - Testing the deployment engine end to end
    - Checking that a second deploy is a no-op

    Example:
        provider = LocalProvider(region="cn-hangzhou", state_path=".serverless/local-state.json")
        deploy(graph, provider)
        provider.save()
    """

    def __init__(
        self,
        region: str = "cn-shanghai",
        account_id: str | None = None,
        state_path: str | Path | None = None,
        check_files: bool = False,
        id_factory: Callable[[], str] | None = None,
        settings: ProviderSettings | None = None,
        **kwargs,
    ):
        """
        Initialize local provider.

        Args:
            region: Region used for generated subdomains
            account_id: Account ID used for generated role ARNs
            state_path: Optional JSON file to load state from and save it to
            check_files: Require uploaded local files to exist
            id_factory: Generates remote IDs (defaults to random hex)
            settings: Provider settings (optional)
        """
        self.state_path = Path(state_path) if state_path else None
        self.check_files = check_files
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self._lock = threading.Lock()
        self._bucket: str | None = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

        if settings is None:
            settings = ProviderSettings(
                provider_type="local",
                region=region,
                account_id=account_id or "0000000000000000",
            )
        super().__init__(settings, **kwargs)

        if self.state_path is not None and self.state_path.exists():
            self.state = LocalState.model_validate_json(self.state_path.read_text())
        else:
            self.state = LocalState()

    def _load_settings_from_env(self, **kwargs) -> ProviderSettings:
        return ProviderSettings(
            provider_type="local",
            region=os.environ.get("ALIYUN_REGION", "cn-shanghai"),
            account_id=os.environ.get("ALIYUN_ACCOUNT_ID", "0000000000000000"),
        )

    def _validate_settings(self) -> None:
        if not self.settings.region:
            raise ValueError("Local provider requires 'region'")

    def _record(self, operation: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((operation, args))

    def called(self, operation: str) -> list[tuple[Any, ...]]:
        """Arguments of every recorded call to ``operation``."""
        return [args for name, args in self.calls if name == operation]

    def save(self) -> None:
        """Write the state to ``state_path``."""
        if self.state_path is None:
            raise ProviderError("LocalProvider has no state_path to save to")
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(self.state.model_dump_json(indent=2))

    # Function Compute service

    def get_service(self, name: str) -> RemoteService | None:
        self._record("get_service", name)
        return self.state.services.get(name)

    def create_service(self, service: ServiceResource) -> RemoteService:
        self._record("create_service", service.name)
        if service.name in self.state.services:
            raise ProviderError(f"Service {service.name} already exists")
        remote = RemoteService(id=self._new_id(), name=service.name)
        self.state.services[service.name] = remote
        return remote

    # OSS

    def get_bucket(self, name: str) -> RemoteBucket | None:
        self._record("get_bucket", name)
        bucket = self.state.buckets.get(name)
        if bucket is not None:
            self._bucket = name
        return bucket

    def create_bucket(self, bucket: StorageBucketResource) -> None:
        self._record("create_bucket", bucket.bucket_name)
        if bucket.bucket_name in self.state.buckets:
            raise ProviderError(f"Bucket {bucket.bucket_name} already exists")
        self.state.buckets[bucket.bucket_name] = RemoteBucket(
            name=bucket.bucket_name, region=bucket.region
        )
        self.state.objects.setdefault(bucket.bucket_name, {})
        self._bucket = bucket.bucket_name

    def upload_object(self, object_name: str, local_path: str) -> None:
        self._record("upload_object", object_name, local_path)
        if self._bucket is None:
            raise ProviderError(f"No bucket selected for uploading {object_name}")
        if self.check_files and not Path(local_path).is_file():
            raise ProviderError(f"Artifact {local_path} does not exist")
        with self._lock:
            self.state.objects.setdefault(self._bucket, {})[object_name] = local_path

    # Functions

    def get_function(self, service_name: str, function_name: str) -> RemoteFunction | None:
        self._record("get_function", service_name, function_name)
        if _function_key(service_name, function_name) not in self.state.functions:
            return None
        return RemoteFunction(name=function_name, service_name=service_name)

    def create_function(self, function: FunctionResource) -> None:
        self._record("create_function", function.function_name)
        if function.service_name not in self.state.services:
            raise ProviderError(f"Service {function.service_name} does not exist")
        key = _function_key(function.service_name, function.function_name)
        if key in self.state.functions:
            raise ProviderError(f"Function {function.function_name} already exists")
        self.state.functions[key] = function

    def update_function(self, function: FunctionResource) -> None:
        self._record("update_function", function.function_name)
        key = _function_key(function.service_name, function.function_name)
        if key not in self.state.functions:
            raise ProviderError(f"Function {function.function_name} does not exist")
        self.state.functions[key] = function

    # API Gateway

    def get_api_group(self, name: str) -> RemoteApiGroup | None:
        self._record("get_api_group", name)
        return self.state.api_groups.get(name)

    def create_api_group(self, group: ApiGroupResource) -> RemoteApiGroup:
        self._record("create_api_group", group.group_name)
        if group.group_name in self.state.api_groups:
            raise ProviderError(f"API group {group.group_name} already exists")
        group_id = self._new_id()
        remote = RemoteApiGroup(
            id=group_id,
            name=group.group_name,
            subdomain=f"{group_id}-{group.region}.alicloudapi.com",
        )
        self.state.api_groups[group.group_name] = remote
        return remote

    def get_apis(self, group: RemoteApiGroup) -> list[RemoteApi]:
        self._record("get_apis", group.id)
        return list(self.state.apis.get(group.id, {}).values())

    def create_api(
        self, group: RemoteApiGroup, role: RemoteRole, api: GatewayApiResource
    ) -> RemoteApi:
        self._record("create_api", api.api_name)
        apis = self.state.apis.setdefault(group.id, {})
        if api.api_name in apis:
            raise ProviderError(f"API {api.api_name} already exists")
        remote = RemoteApi(id=self._new_id(), name=api.api_name)
        apis[api.api_name] = remote
        self.state.api_specs[remote.id] = api
        return remote

    def update_api(
        self, group: RemoteApiGroup, role: RemoteRole, api: GatewayApiResource, api_id: str
    ) -> None:
        self._record("update_api", api.api_name, api_id)
        if api_id not in self.state.api_specs:
            raise ProviderError(f"API {api.api_name} ({api_id}) does not exist")
        self.state.api_specs[api_id] = api

    def deploy_api(self, group_id: str, api_id: str) -> None:
        self._record("deploy_api", group_id, api_id)
        if api_id not in self.state.api_specs:
            raise ProviderError(f"API {api_id} does not exist")
        if api_id not in self.state.deployed_apis:
            self.state.deployed_apis.append(api_id)

    # RAM

    def get_role(self, name: str) -> RemoteRole | None:
        self._record("get_role", name)
        return self.state.roles.get(name)

    def create_role(self, role: InvocationRoleResource) -> RemoteRole:
        self._record("create_role", role.role_name)
        if role.role_name in self.state.roles:
            raise ProviderError(f"RAM role {role.role_name} already exists")
        remote = RemoteRole(
            id=self._new_id(),
            name=role.role_name,
            arn=f"acs:ram::{self.settings.account_id}:role/{role.role_name}",
        )
        self.state.roles[role.role_name] = remote
        self.state.role_documents[role.role_name] = role.assume_role_policy_document()
        return remote

    def get_policies(self, role_name: str) -> list[RemotePolicy]:
        self._record("get_policies", role_name)
        return list(self.state.policies.get(role_name, []))

    def create_policy(self, policy: Policy) -> RemotePolicy:
        self._record("create_policy", policy.policy_name, policy.role_name)
        if policy.role_name not in self.state.roles:
            raise ProviderError(f"RAM role {policy.role_name} does not exist")
        remote = RemotePolicy(
            policy_name=policy.policy_name,
            policy_type=policy.policy_type,
            role_name=policy.role_name,
        )
        self.state.policies.setdefault(policy.role_name, []).append(remote)
        return remote

    # Triggers

    def get_trigger(
        self, service_name: str, function_name: str, trigger_name: str
    ) -> RemoteTrigger | None:
        self._record("get_trigger", service_name, function_name, trigger_name)
        if trigger_name not in self.state.triggers:
            return None
        return RemoteTrigger(
            name=trigger_name, function_name=function_name, service_name=service_name
        )

    def create_trigger(self, trigger: StorageTriggerResource, role: RemoteRole) -> None:
        self._record("create_trigger", trigger.trigger_name, role.arn)
        key = _function_key(trigger.service_name, trigger.function_name)
        if key not in self.state.functions:
            raise ProviderError(f"Function {trigger.function_name} does not exist")
        if trigger.trigger_name in self.state.triggers:
            raise ProviderError(f"Trigger {trigger.trigger_name} already exists")
        self.state.triggers[trigger.trigger_name] = trigger

    def update_trigger(self, trigger: StorageTriggerResource, role: RemoteRole) -> None:
        self._record("update_trigger", trigger.trigger_name, role.arn)
        if trigger.trigger_name not in self.state.triggers:
            raise ProviderError(f"Trigger {trigger.trigger_name} does not exist")
        self.state.triggers[trigger.trigger_name] = trigger
