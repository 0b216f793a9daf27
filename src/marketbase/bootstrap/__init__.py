"""Bootstrap (composition root) for MARKETBASE.

Assembles the application at runtime: wires concrete adapters to service-layer
handlers, composes shared services (message bus, unit of work, password
hasher, schema loader), reads configuration, and runs the startup sequence
(`startup`) and the on-demand repair trigger (`repair_schema`).

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `marketbase.adapters`, `marketbase.service_layer`,
  `marketbase.interfaces`, `marketbase.domain`, and `marketbase.config`.
- Inner layers must not import `marketbase.bootstrap`.

Public surface:
- Re-export composition factories from this module; keep wiring helpers internal.
- No business rules live here; this is assembly and lifecycle only.
"""

from .bootstrap import (
    AppContainer,
    bootstrap,
    build_message_bus,
    build_write_uow,
    inject_dependencies,
)
from .startup import StartupResult, repair_schema, startup

__all__ = [
    "AppContainer",
    "StartupResult",
    "bootstrap",
    "build_message_bus",
    "build_write_uow",
    "inject_dependencies",
    "repair_schema",
    "startup",
]
