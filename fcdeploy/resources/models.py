"""
Resource models for the compiled template.

Each resource kind is an immutable pydantic model whose ``kind`` field holds
the Aliyun resource type and discriminates the union. Resources carry no
remote identifiers; those only exist once the engine has reconciled them.

Merging two resources of the same kind (``existing.merge(incoming)``) is a
deep merge: nested mappings are combined key by key, and scalar values the
incoming resource sets explicitly win over the existing ones. Fields the
incoming resource leaves at their defaults keep the existing value. Kinds
with shared semantics override this: the API group keeps the first
definition, and the invocation role unions its principals and policies.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_serializer


def deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``incoming`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class BaseResource(BaseModel):
    """Common behaviour of every resource kind."""

    kind: str

    class Config:
        frozen = True

    def merge(self, other: "BaseResource") -> "BaseResource":
        """Return a new resource combining ``self`` with ``other``."""
        return type(self).model_validate(
            deep_merge(self.model_dump(), other.model_dump(exclude_unset=True))
        )


class ServiceResource(BaseResource):
    kind: Literal["ALIYUN::FC::Service"] = "ALIYUN::FC::Service"
    name: str
    description: str
    region: str


class StorageBucketResource(BaseResource):
    kind: Literal["ALIYUN::OSS::Bucket"] = "ALIYUN::OSS::Bucket"
    bucket_name: str
    region: str


class StorageObject(BaseModel):
    """One artifact to upload: where it goes in the bucket and where it is on disk."""

    object_name: str
    local_path: str

    class Config:
        frozen = True


class StorageObjectSetResource(BaseResource):
    """
    All artifacts uploaded to the deployment bucket, keyed by the service
    name (service-level artifact) or function key (per-function artifacts).
    """

    kind: Literal["ALIYUN::OSS::Object"] = "ALIYUN::OSS::Object"
    bucket_name: str
    objects: dict[str, StorageObject] = Field(default_factory=dict)


class FunctionCode(BaseModel):
    oss_bucket_name: str
    oss_object_name: str

    class Config:
        frozen = True


class FunctionResource(BaseResource):
    kind: Literal["ALIYUN::FC::Function"] = "ALIYUN::FC::Function"
    service_name: str
    function_name: str
    description: str
    handler: str
    runtime: str
    memory_size: int = 128
    timeout: int = 30
    code: FunctionCode


class ApiGroupResource(BaseResource):
    kind: Literal["ALIYUN::API::APIGroup"] = "ALIYUN::API::APIGroup"
    group_name: str
    description: str
    region: str

    def merge(self, other: BaseResource) -> "ApiGroupResource":
        # One group per service; the first definition stands.
        return self


class Policy(BaseModel):
    policy_name: str
    policy_type: str = "System"
    role_name: str

    class Config:
        frozen = True


class InvocationRoleResource(BaseResource):
    """
    The RAM role that API Gateway and OSS assume to invoke functions.

    ``principals`` is the set of trusted services; granting access to another
    trigger source only ever adds to it.
    """

    kind: Literal["ALIYUN::RAM::Role"] = "ALIYUN::RAM::Role"
    role_name: str
    description: str
    principals: frozenset[str] = frozenset()
    policies: tuple[Policy, ...] = ()

    @field_serializer("principals")
    def _sorted_principals(self, principals: frozenset[str]) -> list[str]:
        return sorted(principals)

    def grant(self, principal: str) -> "InvocationRoleResource":
        """Return a copy of the role that also trusts ``principal``."""
        return self.model_copy(update={"principals": self.principals | {principal}})

    def assume_role_policy_document(self) -> dict[str, Any]:
        return {
            "Version": "1",
            "Statement": [
                {
                    "Action": "sts:AssumeRole",
                    "Effect": "Allow",
                    "Principal": {"Service": sorted(self.principals)},
                }
            ],
        }

    def merge(self, other: BaseResource) -> "InvocationRoleResource":
        if not isinstance(other, InvocationRoleResource):
            return self
        known = {policy.policy_name for policy in self.policies}
        extra = tuple(p for p in other.policies if p.policy_name not in known)
        return self.model_copy(
            update={
                "principals": self.principals | other.principals,
                "policies": self.policies + extra,
            }
        )


class ApiRequestConfig(BaseModel):
    protocol: str = "HTTP"
    http_method: str
    path: str
    parameters: tuple[dict[str, Any], ...] = ()
    body_format: str = ""
    post_body_description: str = ""

    class Config:
        frozen = True


class ApiServiceConfig(BaseModel):
    protocol: str = "FunctionCompute"
    mock: str = "FALSE"
    timeout: int = 3000
    content_type: str = "application/json; charset=UTF-8"
    fc_region: str
    service_name: str
    function_name: str

    class Config:
        frozen = True


class GatewayApiResource(BaseResource):
    kind: Literal["ALIYUN::API::API"] = "ALIYUN::API::API"
    group_name: str
    api_name: str
    description: str
    visibility: str = "PUBLIC"
    auth_type: str = "ANONYMOUS"
    request_config: ApiRequestConfig
    service_config: ApiServiceConfig
    result_type: str = "JSON"
    result_sample: str = "{}"


class StorageTriggerResource(BaseResource):
    kind: Literal["ALIYUN::FC::Trigger"] = "ALIYUN::FC::Trigger"
    service_name: str
    function_name: str
    trigger_name: str
    trigger_type: str = "oss"
    source_arn: str
    trigger_config: dict[str, Any] = Field(default_factory=dict)


Resource = Annotated[
    Union[
        ServiceResource,
        StorageBucketResource,
        StorageObjectSetResource,
        FunctionResource,
        ApiGroupResource,
        InvocationRoleResource,
        GatewayApiResource,
        StorageTriggerResource,
    ],
    Field(discriminator="kind"),
]
