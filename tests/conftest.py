"""
Shared fixtures for fcdeploy tests.
"""

import threading
from datetime import datetime, timezone

import pytest

from fcdeploy.core.service import (
    FunctionDefinition,
    HttpEvent,
    OssEvent,
    OssTriggerConfig,
    ServiceDefinition,
)
from fcdeploy.deployment.progress import ProgressLogger
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

PACKAGE_TIME = datetime(2017, 7, 13, 7, 19, 48, 523000, tzinfo=timezone.utc)

GROUP = RemoteApiGroup(
    id="523e8dc7bbe04613b5b1d726c2a7889d",
    name="my-service-dev-api",
    subdomain="523e8dc7bbe04613b5b1d726c2a7889d-cn-hangzhou.alicloudapi.com",
)

ROLE = RemoteRole(
    id="901234567890123",
    name="SLSFCInvocationFromAPIGateway",
    arn="acs:ram::1234567890123456:role/SLSFCInvocationFromAPIGateway",
)


class StubProvider(Provider):
    """
    Provider double that records every call.

    With ``present=False`` every lookup returns nothing; with
    ``present=True`` every lookup finds an existing entity. ``fail_on``
    names one operation that raises ProviderError.
    """

    def __init__(
        self,
        present: bool = False,
        apis: list[RemoteApi] | None = None,
        api_ids: list[str] | None = None,
        fail_on: str | None = None,
        upload_hook=None,
    ):
        self.present = present
        self.apis = apis or []
        self.api_ids = list(api_ids or ["4134134134141", "413243280141"])
        self.fail_on = fail_on
        self.upload_hook = upload_hook
        self.calls: list[tuple] = []
        self._lock = threading.Lock()
        super().__init__(ProviderSettings(provider_type="stub", region="cn-hangzhou"))

    def _load_settings_from_env(self, **kwargs) -> ProviderSettings:
        return ProviderSettings(provider_type="stub", region="cn-hangzhou")

    def _validate_settings(self) -> None:
        pass

    def _call(self, name, *args):
        with self._lock:
            self.calls.append((name, args))
        if name == self.fail_on:
            raise ProviderError(f"{name} failed")

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def creates(self) -> list[str]:
        return [name for name in self.names() if name.startswith("create_")]

    def get_service(self, name):
        self._call("get_service", name)
        return RemoteService(id="svc-1", name=name) if self.present else None

    def create_service(self, service):
        self._call("create_service", service.name)
        return RemoteService(id="svc-1", name=service.name)

    def get_bucket(self, name):
        self._call("get_bucket", name)
        return RemoteBucket(name=name, region="cn-hangzhou") if self.present else None

    def create_bucket(self, bucket):
        self._call("create_bucket", bucket.bucket_name)

    def upload_object(self, object_name, local_path):
        self._call("upload_object", object_name, local_path)
        if self.upload_hook is not None:
            self.upload_hook(object_name)

    def get_function(self, service_name, function_name):
        self._call("get_function", service_name, function_name)
        if not self.present:
            return None
        return RemoteFunction(name=function_name, service_name=service_name)

    def create_function(self, function):
        self._call("create_function", function.function_name)

    def update_function(self, function):
        self._call("update_function", function.function_name)

    def get_api_group(self, name):
        self._call("get_api_group", name)
        return GROUP if self.present else None

    def create_api_group(self, group):
        self._call("create_api_group", group.group_name)
        return GROUP

    def get_apis(self, group):
        self._call("get_apis", group.id)
        return list(self.apis)

    def create_api(self, group, role, api):
        self._call("create_api", api.api_name)
        return RemoteApi(id=self.api_ids.pop(0), name=api.api_name)

    def update_api(self, group, role, api, api_id):
        self._call("update_api", api.api_name, api_id)

    def deploy_api(self, group_id, api_id):
        self._call("deploy_api", group_id, api_id)

    def get_role(self, name):
        self._call("get_role", name)
        return ROLE if self.present else None

    def create_role(self, role):
        self._call("create_role", role.role_name)
        return ROLE

    def get_policies(self, role_name):
        self._call("get_policies", role_name)
        if not self.present:
            return []
        return [RemotePolicy(policy_name="AliyunFCInvocationAccess", role_name=role_name)]

    def create_policy(self, policy):
        self._call("create_policy", policy.policy_name)
        return RemotePolicy(policy_name=policy.policy_name, role_name=policy.role_name)

    def get_trigger(self, service_name, function_name, trigger_name):
        self._call("get_trigger", trigger_name)
        if not self.present:
            return None
        return RemoteTrigger(
            name=trigger_name, function_name=function_name, service_name=service_name
        )

    def create_trigger(self, trigger, role):
        self._call("create_trigger", trigger.trigger_name, role.arn)

    def update_trigger(self, trigger, role):
        self._call("update_trigger", trigger.trigger_name, role.arn)


def http_function(key: str, path: str, method: str = "get", **kwargs) -> FunctionDefinition:
    return FunctionDefinition(
        key=key,
        handler="index.handler",
        event=HttpEvent(method=method, path=path),
        **kwargs,
    )


def oss_function(key: str, bucket: str = "uploads", **kwargs) -> FunctionDefinition:
    return FunctionDefinition(
        key=key,
        handler="index.handler",
        event=OssEvent(
            bucket=bucket,
            trigger_config=OssTriggerConfig(
                events=("oss:ObjectCreated:*",),
                filter={"key": {"prefix": "source/"}},
            ),
        ),
        **kwargs,
    )


@pytest.fixture
def definition() -> ServiceDefinition:
    """The two-function HTTP service used by the end-to-end scenario."""
    return ServiceDefinition(
        service="my-service",
        stage="dev",
        region="cn-hangzhou",
        artifact="my-service.zip",
        package_time=PACKAGE_TIME,
        functions=(
            http_function("currentTime", "/ping"),
            http_function("currentTime2", "/ping2"),
        ),
    )


@pytest.fixture
def mixed_definition() -> ServiceDefinition:
    """One HTTP function and one OSS-triggered function."""
    return ServiceDefinition(
        service="my-service",
        stage="dev",
        region="cn-hangzhou",
        account_id="1234567890123456",
        artifact="my-service.zip",
        package_time=PACKAGE_TIME,
        functions=(
            http_function("currentTime", "/ping"),
            oss_function("thumbnail"),
        ),
    )


@pytest.fixture
def logger() -> ProgressLogger:
    """A progress logger that only records."""
    return ProgressLogger(sink=None)
