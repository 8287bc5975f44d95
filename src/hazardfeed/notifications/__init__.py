"""
Dispatch hooks for aggregated alerts.
"""

from .dispatch import DispatchHook, LogDispatchHook, WebhookDispatchHook, create_dispatch_hook

__all__ = [
    "DispatchHook",
    "LogDispatchHook",
    "WebhookDispatchHook",
    "create_dispatch_hook",
]
