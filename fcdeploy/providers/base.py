"""
Base provider abstraction.

A provider is the collaborator that talks to the cloud: Function Compute,
OSS, API Gateway and RAM. The deployment engine only ever reaches the cloud
through this interface, so a real SDK-backed client and the in-memory
LocalProvider are interchangeable.

Lookups return ``None`` when the entity does not exist. Any failure is
raised as an exception; the engine does not retry.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

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


class ProviderSettings(BaseModel):
    """
    Connection settings shared by provider implementations.

    This can be loaded from:
    - Environment variables
    - The service's serverless.yml
    """

    provider_type: str
    region: str | None = None
    account_id: str | None = None
    credentials: dict[str, Any] | None = Field(default=None, repr=False)


class Provider(ABC):
    """
    Base class for cloud providers.

    Example:
        provider = LocalProvider(region="cn-hangzhou")
        engine = ReconciliationEngine(provider)
        engine.deploy(graph)
    """

    def __init__(self, settings: ProviderSettings | None = None, **kwargs):
        """
        Initialize the provider.

        Args:
            settings: Provider settings (optional, can load from env)
            **kwargs: Additional provider-specific settings
        """
        self.settings = settings or self._load_settings_from_env(**kwargs)
        self._validate_settings()

    @abstractmethod
    def _load_settings_from_env(self, **kwargs) -> ProviderSettings:
        pass

    @abstractmethod
    def _validate_settings(self) -> None:
        """Validate that the provider is properly configured."""
        pass

    # Function Compute service

    @abstractmethod
    def get_service(self, name: str) -> RemoteService | None:
        pass

    @abstractmethod
    def create_service(self, service: ServiceResource) -> RemoteService:
        pass

    # OSS

    @abstractmethod
    def get_bucket(self, name: str) -> RemoteBucket | None:
        pass

    @abstractmethod
    def create_bucket(self, bucket: StorageBucketResource) -> None:
        pass

    @abstractmethod
    def upload_object(self, object_name: str, local_path: str) -> None:
        """
        Upload one local file into the deployment bucket.

        May be called from several worker threads at once.
        """
        pass

    # Functions

    @abstractmethod
    def get_function(self, service_name: str, function_name: str) -> RemoteFunction | None:
        pass

    @abstractmethod
    def create_function(self, function: FunctionResource) -> None:
        pass

    @abstractmethod
    def update_function(self, function: FunctionResource) -> None:
        pass

    # API Gateway

    @abstractmethod
    def get_api_group(self, name: str) -> RemoteApiGroup | None:
        pass

    @abstractmethod
    def create_api_group(self, group: ApiGroupResource) -> RemoteApiGroup:
        pass

    @abstractmethod
    def get_apis(self, group: RemoteApiGroup) -> list[RemoteApi]:
        pass

    @abstractmethod
    def create_api(
        self, group: RemoteApiGroup, role: RemoteRole, api: GatewayApiResource
    ) -> RemoteApi:
        pass

    @abstractmethod
    def update_api(
        self, group: RemoteApiGroup, role: RemoteRole, api: GatewayApiResource, api_id: str
    ) -> None:
        pass

    @abstractmethod
    def deploy_api(self, group_id: str, api_id: str) -> None:
        pass

    # RAM

    @abstractmethod
    def get_role(self, name: str) -> RemoteRole | None:
        pass

    @abstractmethod
    def create_role(self, role: InvocationRoleResource) -> RemoteRole:
        pass

    @abstractmethod
    def get_policies(self, role_name: str) -> list[RemotePolicy]:
        pass

    @abstractmethod
    def create_policy(self, policy: Policy) -> RemotePolicy:
        pass

    # Triggers

    @abstractmethod
    def get_trigger(
        self, service_name: str, function_name: str, trigger_name: str
    ) -> RemoteTrigger | None:
        pass

    @abstractmethod
    def create_trigger(self, trigger: StorageTriggerResource, role: RemoteRole) -> None:
        pass

    @abstractmethod
    def update_trigger(self, trigger: StorageTriggerResource, role: RemoteRole) -> None:
        pass

    def get_provider_type(self) -> str:
        return self.settings.provider_type

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type='{self.get_provider_type()}', region='{self.settings.region}')"
