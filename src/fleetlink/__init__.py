"""fleetlink - Async resilience layer for fleet mobile clients."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleetlink")
except PackageNotFoundError:
    __version__ = "0+local"
from fleetlink.cache import CacheEntry, CacheStore
from fleetlink.client import FleetClient
from fleetlink.config import FleetConfig
from fleetlink.events import EventBus
from fleetlink.exceptions import (
    BackendUnreachableError,
    FetchFailedError,
    FleetConfigError,
    FleetError,
    NetworkUnavailableError,
)
from fleetlink.models import (
    Balance,
    DriverDocument,
    Notification,
    NotificationPriority,
    NotificationType,
    Transaction,
    TransactionType,
    UserRole,
)
from fleetlink.network import (
    Advisory,
    AdvisoryKind,
    ConnectivityProvider,
    ConnectivityState,
    NetworkMonitor,
    NetworkTransport,
)
from fleetlink.resolver import BackendProber, BackendResolver, ResolvedBackend, ResolverState
from fleetlink.stores import BalanceStore, DocumentStore, NotificationStore
from fleetlink.urls import UrlResolver

__all__ = [
    "__version__",
    "Advisory",
    "AdvisoryKind",
    "BackendProber",
    "BackendResolver",
    "BackendUnreachableError",
    "Balance",
    "BalanceStore",
    "CacheEntry",
    "CacheStore",
    "ConnectivityProvider",
    "ConnectivityState",
    "DocumentStore",
    "DriverDocument",
    "EventBus",
    "FetchFailedError",
    "FleetClient",
    "FleetConfig",
    "FleetConfigError",
    "FleetError",
    "NetworkMonitor",
    "NetworkTransport",
    "NetworkUnavailableError",
    "Notification",
    "NotificationPriority",
    "NotificationStore",
    "NotificationType",
    "ResolvedBackend",
    "ResolverState",
    "Transaction",
    "TransactionType",
    "UrlResolver",
    "UserRole",
]
