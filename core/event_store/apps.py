"""
BTP Core - Event Store App Configuration
==========================================
Append-only journal of policy events.

This app:
- Persists immutable policy events
- Enforces idempotency
- Maintains a per-project hash chain

This app does NOT interpret event meaning or make decisions.
"""

from django.apps import AppConfig


class EventStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.event_store"
    label = "event_store"
    verbose_name = "BTP Policy Event Store"
