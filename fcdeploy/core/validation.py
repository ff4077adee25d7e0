"""
Validation of service definitions before compilation.

Every check raises SpecificationError naming the offending service or
function; nothing here touches the provider.
"""

import re

from fcdeploy.core.service import FunctionDefinition, HttpEvent, OssEvent, ServiceDefinition
from fcdeploy.errors import SpecificationError

JAVA_RUNTIME = "java8"
NODEJS_RUNTIME = "nodejs6"
SUPPORTED_RUNTIMES = (JAVA_RUNTIME, NODEJS_RUNTIME)
SUPPORTED_EVENTS = ("http", "oss")
MAX_NAME_LENGTH = 128

_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9\-_]*$")
_JAVA_HANDLER = re.compile(r"^(\w+\.)*\w+::\w+$")
_DEFAULT_HANDLER = re.compile(r"^[^.]+\.[^.]+$")


def validate_service(definition: ServiceDefinition) -> None:
    """
    Validate a service definition.

    Checks:
    1. Service and function names are well formed
    2. The runtime is supported
    3. Every function has a handler in the runtime's format
    4. Every event is complete
    5. Every function has an artifact to deploy

    Raises:
        SpecificationError: On the first problem found
    """
    _validate_name("service", definition.service)

    if definition.runtime not in SUPPORTED_RUNTIMES:
        raise SpecificationError(
            f'The "runtime" property "{definition.runtime}" is not supported.'
            f" Only support {' and '.join(SUPPORTED_RUNTIMES)} now.",
            name=definition.service,
        )

    for function in definition.functions:
        _validate_name("function", function.key)
        _validate_handler(function, definition.runtime)
        _validate_event(function)

        if not (function.artifact or definition.artifact):
            raise SpecificationError(
                f'Function "{function.key}" has no artifact to deploy.'
                " Set package.artifact on the service or the function.",
                name=function.key,
            )


def validate_event_count(key: str, events: list) -> None:
    """Reject more than one event on a function."""
    if len(events) > 1:
        raise SpecificationError(
            f'The function "{key}" has more than one event.'
            " Only one event per function is supported.",
            name=key,
        )


def validate_event_type(key: str, event_type: str) -> None:
    if event_type not in SUPPORTED_EVENTS:
        raise SpecificationError(
            f'Event type "{event_type}" of function "{key}" not supported.'
            f" supported event types are: {', '.join(SUPPORTED_EVENTS)}",
            name=key,
        )


def _validate_name(kind: str, name: str) -> None:
    if not name or not _NAME_PATTERN.match(name):
        raise SpecificationError(
            f"The name of your {kind} {name} is invalid. A {kind}"
            " name should consist only of letters, digits, underscores and"
            " dashes, and it can not start with digits or dashes",
            name=name,
        )
    if len(name) > MAX_NAME_LENGTH:
        raise SpecificationError(
            f"The name of your {kind} {name} is invalid. A {kind}"
            f" name should not be longer than {MAX_NAME_LENGTH} characters",
            name=name,
        )


def _validate_handler(function: FunctionDefinition, runtime: str) -> None:
    if not function.handler:
        raise SpecificationError(
            f'Missing "handler" property for function "{function.key}".'
            ' Your function needs a "handler".',
            name=function.key,
        )

    if runtime == JAVA_RUNTIME:
        pattern, example = _JAVA_HANDLER, "${packageName}.${className}::${funcName}"
    else:
        pattern, example = _DEFAULT_HANDLER, "${fileName}.${funcName}"

    if not pattern.match(function.handler):
        raise SpecificationError(
            f'The "handler" property for the function "{function.key}" is invalid.'
            f" Handlers should be specified like {example}",
            name=function.key,
        )


def _validate_event(function: FunctionDefinition) -> None:
    event = function.event
    if event is None:
        return

    if isinstance(event, HttpEvent):
        if not event.path or not event.method:
            raise SpecificationError(
                f'The http event of function "{function.key}" needs both "method" and "path".',
                name=function.key,
            )
    elif isinstance(event, OssEvent):
        if not event.trigger_config.events:
            raise SpecificationError(
                f'The oss event of function "{function.key}" needs "triggerConfig.events".',
                name=function.key,
            )
        if not (event.source_arn or event.bucket):
            raise SpecificationError(
                f'The oss event of function "{function.key}" needs "sourceArn" or "bucket".',
                name=function.key,
            )
    else:
        validate_event_type(function.key, type(event).__name__)
