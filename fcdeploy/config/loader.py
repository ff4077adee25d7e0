"""
Loading service definitions from serverless.yml.

Example serverless.yml:

    service: my-service
    provider:
      name: aliyun
      runtime: nodejs6
      region: cn-hangzhou
    package:
      artifact: my-service.zip
    functions:
      currentTime:
        handler: index.ping
        events:
          - http:
              path: /ping
              method: get
"""

from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from fcdeploy.config.provider import ProviderConfig
from fcdeploy.core.service import (
    FunctionDefinition,
    HttpEvent,
    OssEvent,
    OssTriggerConfig,
    ServiceDefinition,
)
from fcdeploy.core.validation import validate_event_count, validate_event_type
from fcdeploy.errors import SpecificationError

SERVICE_FILE_NAMES = ("serverless.yml", "serverless.yaml")


def find_service_file(service_dir: str | Path) -> Path:
    """
    Locate the serverless.yml of a service directory.

    Raises:
        SpecificationError: If the directory has no service file
    """
    path = Path(service_dir)
    if path.is_file():
        return path
    for name in SERVICE_FILE_NAMES:
        candidate = path / name
        if candidate.is_file():
            return candidate
    raise SpecificationError(
        "This command can only be run inside a service directory", name=str(path)
    )


def load_service(
    service_dir: str | Path,
    stage: str | None = None,
    region: str | None = None,
    package_time: datetime | None = None,
) -> ServiceDefinition:
    """
    Load a ServiceDefinition from a service directory or serverless.yml.

    Args:
        service_dir: Service directory, or the serverless.yml itself
        stage: Stage override (takes precedence over the file)
        region: Region override (takes precedence over the file)
        package_time: Packaging timestamp (defaults to now)

    Returns:
        The parsed ServiceDefinition (not yet validated)

    Raises:
        SpecificationError: If the file is missing or malformed
    """
    path = find_service_file(service_dir)
    try:
        document = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise SpecificationError(f"Could not parse {path}: {e}", name=str(path)) from e

    return parse_service(
        document,
        service_path=str(path.parent),
        stage=stage,
        region=region,
        package_time=package_time,
    )


def parse_service(
    document: dict[str, Any],
    service_path: str = ".",
    stage: str | None = None,
    region: str | None = None,
    package_time: datetime | None = None,
) -> ServiceDefinition:
    """Build a ServiceDefinition from an already-parsed serverless.yml."""
    if not isinstance(document, dict):
        raise SpecificationError("serverless.yml must contain a mapping")

    service = document.get("service")
    if isinstance(service, dict):
        service = service.get("name")
    if not service:
        raise SpecificationError('Missing "service" property in serverless.yml')

    provider = _section(document.get("provider"), "provider", service)
    config = ProviderConfig.from_env(
        stage=stage or provider.get("stage"),
        region=region or provider.get("region"),
        runtime=provider.get("runtime"),
        credentials=provider.get("credentials"),
        account_id=provider.get("accountId"),
    )

    functions = tuple(
        _parse_function(key, _section(body, f"functions.{key}", key))
        for key, body in _section(document.get("functions"), "functions", service).items()
    )

    values: dict[str, Any] = {
        "service": service,
        "stage": config.stage,
        "region": config.region,
        "runtime": config.runtime,
        "functions": functions,
        "artifact": _section(document.get("package"), "package", service).get("artifact"),
        "service_path": service_path,
        "account_id": config.account_id,
    }
    if provider.get("memorySize"):
        values["memory_size"] = provider["memorySize"]
    if provider.get("timeout"):
        values["timeout"] = provider["timeout"]
    if package_time is not None:
        values["package_time"] = package_time

    try:
        return ServiceDefinition(**values)
    except ValidationError as e:
        raise SpecificationError(f"Invalid service {service}: {e}", name=service) from e


def _parse_function(key: str, body: dict[str, Any]) -> FunctionDefinition:
    events = body.get("events") or []
    if not isinstance(events, list):
        raise SpecificationError(
            f'The "events" property of function "{key}" must be a list.',
            name=key,
        )
    validate_event_count(key, events)

    event = _parse_event(key, events[0]) if events else None
    try:
        return FunctionDefinition(
            key=key,
            handler=body.get("handler"),
            artifact=_section(body.get("package"), "package", key).get("artifact"),
            memory_size=body.get("memorySize"),
            timeout=body.get("timeout"),
            event=event,
        )
    except ValidationError as e:
        raise SpecificationError(f"Invalid function {key}: {e}", name=key) from e


def _parse_event(key: str, raw: Any) -> HttpEvent | OssEvent:
    """Convert a ``{type: settings}`` event entry into a typed binding."""
    if not isinstance(raw, dict) or len(raw) != 1:
        raise SpecificationError(
            f'Events of function "{key}" must be mappings with a single event type.',
            name=key,
        )

    event_type, settings = next(iter(raw.items()))
    validate_event_type(key, event_type)
    settings = _section(settings, event_type, key)

    try:
        if event_type == "http":
            return HttpEvent(
                method=settings.get("method", ""),
                path=settings.get("path", ""),
                config={k: v for k, v in settings.items() if k not in ("method", "path")},
            )
        trigger_config = _section(settings.get("triggerConfig"), "triggerConfig", key)
        return OssEvent(
            source_arn=settings.get("sourceArn"),
            bucket=settings.get("bucket"),
            trigger_config=OssTriggerConfig(
                events=tuple(trigger_config.get("events") or ()),
                filter=trigger_config.get("filter") or {},
            ),
        )
    except ValidationError as e:
        raise SpecificationError(f'Invalid {event_type} event of function "{key}": {e}', name=key) from e


def _section(value: Any, what: str, name: str) -> dict[str, Any]:
    """Return ``value`` as a mapping; a missing section is empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SpecificationError(
            f'The "{what}" property of "{name}" must be a mapping,'
            f" not {type(value).__name__}.",
            name=name,
        )
    return value
