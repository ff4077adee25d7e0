"""
Remote entities returned by providers.

These describe what already exists on the provider side. They are owned by
the provider and read-only to the deployment engine.
"""

from pydantic import BaseModel


class RemoteEntity(BaseModel):
    class Config:
        frozen = True


class RemoteService(RemoteEntity):
    id: str
    name: str


class RemoteBucket(RemoteEntity):
    name: str
    region: str | None = None


class RemoteFunction(RemoteEntity):
    name: str
    service_name: str


class RemoteApiGroup(RemoteEntity):
    id: str
    name: str
    subdomain: str


class RemoteRole(RemoteEntity):
    id: str
    name: str
    arn: str


class RemotePolicy(RemoteEntity):
    policy_name: str
    policy_type: str = "System"
    role_name: str


class RemoteApi(RemoteEntity):
    id: str
    name: str


class RemoteTrigger(RemoteEntity):
    name: str
    function_name: str
    service_name: str
