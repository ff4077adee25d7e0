"""
Event classification.

Maps an event binding to the kind of trigger infrastructure it needs.
Unknown bindings classify as neither; rejecting them is the job of
validation.
"""

from typing import Any

from fcdeploy.core.service import HttpEvent, OssEvent


def requires_gateway(binding: Any) -> bool:
    """True if the binding is routed through API Gateway."""
    return isinstance(binding, HttpEvent)


def requires_storage_trigger(binding: Any) -> bool:
    """True if the binding is fired by OSS object events."""
    return isinstance(binding, OssEvent)
