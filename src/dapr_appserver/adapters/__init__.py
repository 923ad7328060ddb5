"""Adapters (infrastructure) for DAPR-APPSERVER.

Concrete, protocol-specific implementations of the interfaces: the HTTP
(aiohttp) and gRPC (grpc.aio) transport servers, their capability
implementations and the matching outbound sidecar clients.

Dependency rule: may import `dapr_appserver.interfaces`,
`dapr_appserver.actors`, `dapr_appserver.config` and `dapr_appserver.errors`;
must not import `dapr_appserver.bootstrap`.
"""
