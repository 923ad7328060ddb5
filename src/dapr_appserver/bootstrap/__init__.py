"""Bootstrap (composition root) for DAPR-APPSERVER.

Assembles a server at runtime: builds the outbound sidecar client, selects
the transport for the configured protocol and wires the four capability
implementations to it.

Import rules:
- `dapr_appserver.server` imports *this* package (not the adapters).
- This package may import: `dapr_appserver.adapters`,
  `dapr_appserver.interfaces` and `dapr_appserver.config`.
- Inner layers must not import `dapr_appserver.bootstrap`.

No request handling lives here; this is assembly only.
"""

from .bootstrap import (
    PROTOCOL_BUILDERS,
    BuildContext,
    CapabilitySet,
    ProtocolBundle,
    build_client,
    build_protocol,
)

__all__ = [
    "PROTOCOL_BUILDERS",
    "BuildContext",
    "CapabilitySet",
    "ProtocolBundle",
    "build_client",
    "build_protocol",
]
