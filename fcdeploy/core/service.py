"""
Service definition: the immutable input to the template compiler.

A ServiceDefinition describes one serverless service: its functions, the
single event bound to each function, and where the packaged artifacts live.
It is normally produced by ``fcdeploy.config.loader.load_service`` from a
``serverless.yml`` file.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from fcdeploy import naming


class HttpEvent(BaseModel):
    """
    An API Gateway route bound to a function.

    Example:
        HttpEvent(method="get", path="/ping")
    """

    type: Literal["http"] = "http"
    method: str = Field(..., description="HTTP method (GET, POST, ...)")
    path: str = Field(..., description="Request path, e.g. /ping")
    config: dict[str, Any] = Field(
        default_factory=dict, description="Extra request settings"
    )

    class Config:
        frozen = True


class OssTriggerConfig(BaseModel):
    """OSS notification settings: which object events fire, and key filters."""

    events: tuple[str, ...] = Field(..., description="OSS events, e.g. oss:ObjectCreated:*")
    filter: dict[str, Any] = Field(default_factory=dict, description="Key prefix/suffix filter")

    class Config:
        frozen = True


class OssEvent(BaseModel):
    """
    An OSS (object storage) trigger bound to a function.

    Either ``source_arn`` or ``bucket`` identifies the watched bucket.
    """

    type: Literal["oss"] = "oss"
    trigger_config: OssTriggerConfig
    source_arn: str | None = None
    bucket: str | None = None

    class Config:
        frozen = True


EventBinding = Annotated[Union[HttpEvent, OssEvent], Field(discriminator="type")]


class FunctionDefinition(BaseModel):
    """
    One function of a service.

    A function carries zero or one event. ``artifact`` overrides the
    service-level artifact when set.
    """

    key: str = Field(..., description="Function key as written in serverless.yml")
    handler: str | None = Field(None, description="Handler, e.g. index.handler")
    artifact: str | None = Field(None, description="Per-function artifact path")
    memory_size: int | None = Field(None, description="Memory in MB")
    timeout: int | None = Field(None, description="Timeout in seconds")
    event: Optional[EventBinding] = None

    class Config:
        frozen = True

    @property
    def events(self) -> tuple[HttpEvent | OssEvent, ...]:
        """The bound event as a tuple of length zero or one."""
        return (self.event,) if self.event is not None else ()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceDefinition(BaseModel):
    """
    Immutable description of a serverless service.

    Example:
        definition = ServiceDefinition(
            service="my-service",
            stage="dev",
            region="cn-hangzhou",
            artifact="my-service.zip",
            functions=(
                FunctionDefinition(
                    key="currentTime",
                    handler="index.ping",
                    event=HttpEvent(method="get", path="/ping"),
                ),
            ),
        )
    """

    service: str = Field(..., description="Service name")
    stage: str = Field(default="dev", description="Deployment stage")
    region: str = Field(default="cn-shanghai", description="Aliyun region")
    runtime: str = Field(default="nodejs6", description="Function runtime")
    functions: tuple[FunctionDefinition, ...] = ()
    artifact: str | None = Field(None, description="Service-level artifact path")
    service_path: str = Field(default=".", description="Directory of serverless.yml")
    account_id: str | None = Field(None, description="Aliyun account ID")
    memory_size: int = Field(default=128, description="Default function memory in MB")
    timeout: int = Field(default=30, description="Default function timeout in seconds")
    package_time: datetime = Field(
        default_factory=_utcnow,
        description="Packaging timestamp; names the artifact directory",
    )

    class Config:
        frozen = True

    @property
    def service_name(self) -> str:
        return naming.service_name(self.service, self.stage)

    @property
    def bucket_name(self) -> str:
        return naming.bucket_name(self.service)

    @property
    def artifact_directory(self) -> str:
        return naming.artifact_directory(self.service, self.stage, self.package_time)

    def function_name(self, function: FunctionDefinition) -> str:
        return naming.function_name(self.service, self.stage, function.key)

    def get_function(self, key: str) -> FunctionDefinition:
        for function in self.functions:
            if function.key == key:
                return function
        raise KeyError(key)
