"""Sand Global Express back-office public API."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "NotificationRetryStore",
    "SandGlobalConfig",
    "ShipmentNotFoundError",
    "ShipmentStatus",
    "__version__",
    "classify_live_or_exception",
    "compute_on_time_performance",
    "create_logistics_router",
    "estimate_delivery_date",
    "generate_tracking_number",
    "progress_for_status",
    "register_exception_handlers",
]

if TYPE_CHECKING:
    from sandglobal.config import SandGlobalConfig
    from sandglobal.dashboard import compute_on_time_performance
    from sandglobal.exceptions import (
        ShipmentNotFoundError,
        register_exception_handlers,
    )
    from sandglobal.identifiers import (
        estimate_delivery_date,
        generate_tracking_number,
    )
    from sandglobal.lifecycle import (
        ShipmentStatus,
        classify_live_or_exception,
        progress_for_status,
    )
    from sandglobal.protocols import NotificationRetryStore
    from sandglobal.router import create_logistics_router


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    if name == "SandGlobalConfig":
        from sandglobal.config import SandGlobalConfig

        return SandGlobalConfig
    if name == "create_logistics_router":
        from sandglobal.router import create_logistics_router

        return create_logistics_router
    if name in ("ShipmentNotFoundError", "register_exception_handlers"):
        from sandglobal import exceptions

        return getattr(exceptions, name)
    if name in (
        "ShipmentStatus",
        "classify_live_or_exception",
        "progress_for_status",
    ):
        from sandglobal import lifecycle

        return getattr(lifecycle, name)
    if name in ("estimate_delivery_date", "generate_tracking_number"):
        from sandglobal import identifiers

        return getattr(identifiers, name)
    if name == "compute_on_time_performance":
        from sandglobal.dashboard import compute_on_time_performance

        return compute_on_time_performance
    if name == "NotificationRetryStore":
        from sandglobal import protocols

        return getattr(protocols, name)
    raise AttributeError(f"module 'sandglobal' has no attribute {name!r}")
