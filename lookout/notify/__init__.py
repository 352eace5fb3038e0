"""Notification sinks for new commits and configuration updates."""

from __future__ import annotations

from .discord import DiscordWebhookError, DiscordWebhookSink
from .logsink import LoggingNotificationSink
from .sink import NotificationSink

__all__ = [
    "DiscordWebhookError",
    "DiscordWebhookSink",
    "LoggingNotificationSink",
    "NotificationSink",
]
