"""
Tests for event classification.
"""

from fcdeploy.core.events import requires_gateway, requires_storage_trigger
from fcdeploy.core.service import HttpEvent, OssEvent, OssTriggerConfig


class TestEventClassifier:
    """Tests for requires_gateway / requires_storage_trigger."""

    def test_http_event_requires_gateway(self):
        """HTTP events are routed through API Gateway."""
        event = HttpEvent(method="get", path="/ping")

        assert requires_gateway(event) is True
        assert requires_storage_trigger(event) is False

    def test_oss_event_requires_storage_trigger(self):
        """OSS events are routed through a storage trigger."""
        event = OssEvent(
            bucket="uploads",
            trigger_config=OssTriggerConfig(events=("oss:ObjectCreated:*",)),
        )

        assert requires_storage_trigger(event) is True
        assert requires_gateway(event) is False

    def test_unknown_binding_is_neither(self):
        """Anything else classifies as neither kind."""
        for binding in (None, {"timer": {}}, "http"):
            assert requires_gateway(binding) is False
            assert requires_storage_trigger(binding) is False
