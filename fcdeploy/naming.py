"""
Naming conventions for remote resources and logical IDs.

Every name here is a pure function of the service definition, so two
compilations of the same definition always agree on keys and remote names.
"""

from datetime import datetime, timedelta, timezone
from pathlib import PurePath

SERVICE_LOGICAL_ID = "sls-function-service"
STORAGE_BUCKET_LOGICAL_ID = "sls-storage-bucket"
STORAGE_OBJECT_LOGICAL_ID = "sls-storage-object"
API_GROUP_LOGICAL_ID = "sls-api-group"
INVOKE_ROLE_LOGICAL_ID = "sls-fc-invoke-role"

INVOKE_ROLE_NAME = "SLSFCInvocationFromAPIGateway"
INVOKE_POLICY_NAME = "AliyunFCInvocationAccess"

GATEWAY_PRINCIPAL = "apigateway.aliyuncs.com"
STORAGE_PRINCIPAL = "oss.aliyuncs.com"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def service_name(service: str, stage: str) -> str:
    """Remote Function Compute service name, e.g. ``my-service-dev``."""
    return f"{service}-{stage}"


def function_name(service: str, stage: str, key: str) -> str:
    """Remote function name, e.g. ``my-service-dev-currentTime``."""
    return f"{service_name(service, stage)}-{key}"


def function_logical_id(key: str) -> str:
    return f"sls-{key}-function"


def bucket_name(service: str) -> str:
    return f"sls-{service}"


def api_group_name(service: str, stage: str) -> str:
    return f"{service_name(service, stage)}-api"


def api_name(service: str, stage: str, key: str) -> str:
    return f"sls-http-{function_name(service, stage, key)}"


def trigger_name(service: str, stage: str, key: str) -> str:
    return f"sls-oss-{function_name(service, stage, key)}"


def artifact_directory(service: str, stage: str, package_time: datetime) -> str:
    """
    Directory inside the deployment bucket holding one package's artifacts.

    Example:
        >>> artifact_directory("my-service", "dev", datetime(2017, 7, 13, 7, 19, 48, 523000, tzinfo=timezone.utc))
        'serverless/my-service/dev/1499930388523-2017-07-13T07:19:48.523Z'
    """
    if package_time.tzinfo is None:
        package_time = package_time.replace(tzinfo=timezone.utc)
    utc = package_time.astimezone(timezone.utc)
    millis = (utc - _EPOCH) // timedelta(milliseconds=1)
    iso = utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
    return f"serverless/{service}/{stage}/{millis}-{iso}"


def artifact_file_name(artifact: str) -> str:
    """Final path component of an artifact path (``dist/app.zip`` -> ``app.zip``)."""
    return PurePath(artifact.replace("\\", "/")).name
