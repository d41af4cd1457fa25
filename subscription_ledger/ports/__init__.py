"""Ports layer - Interfaces for external collaborators."""

from .authorization import AuthorizationPort
from .clock import ClockPort
from .configuration import ConfigurationPort
from .event_publisher import EventPublisherPort
from .logger import LoggerPort
from .metrics import MetricsPort
from .subscription_store import SubscriptionStorePort
from .value_ledger import ValueLedgerPort

__all__ = [
    "AuthorizationPort",
    "ClockPort",
    "ConfigurationPort",
    "EventPublisherPort",
    "LoggerPort",
    "MetricsPort",
    "SubscriptionStorePort",
    "ValueLedgerPort",
]
