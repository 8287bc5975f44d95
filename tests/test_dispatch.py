"""Tests for dispatch hooks."""

import logging

import pytest

from hazardfeed.core.config import DispatchConfig
from hazardfeed.notifications.dispatch import (
    LogDispatchHook,
    WebhookDispatchHook,
    create_dispatch_hook,
)


class TestDispatchHooks:
    @pytest.mark.asyncio
    async def test_log_hook_logs_count(self, make_alert, caplog):
        caplog.set_level(logging.INFO)

        await LogDispatchHook().dispatch([make_alert("a"), make_alert("b")])

        assert "Would send push notifications for 2 alerts" in caplog.text

    def test_webhook_requires_url(self):
        with pytest.raises(ValueError):
            WebhookDispatchHook(DispatchConfig())

    def test_webhook_payload(self, make_alert, fixed_now):
        hook = WebhookDispatchHook(DispatchConfig(webhook_url="http://localhost:9/hook"))

        payload = hook._create_payload([make_alert("a", starts_at=fixed_now)])

        assert payload["count"] == 1
        assert payload["alerts"][0]["id"] == "a"
        assert payload["alerts"][0]["type"] == "EARTHQUAKE"
        assert payload["alerts"][0]["starts_at"].startswith("2025-03-14T15:20:00")

    @pytest.mark.asyncio
    async def test_webhook_connection_error_is_logged(self, make_alert, caplog):
        hook = WebhookDispatchHook(DispatchConfig(webhook_url="http://127.0.0.1:9/hook", timeout=2))

        await hook.dispatch([make_alert()])

        assert "Failed to send webhook" in caplog.text

    def test_factory(self):
        assert isinstance(create_dispatch_hook(DispatchConfig()), LogDispatchHook)
        assert isinstance(
            create_dispatch_hook(DispatchConfig(webhook_url="http://example.org/hook")),
            WebhookDispatchHook,
        )
