"""Entrypoints (inbound adapters) for DAPR-APPSERVER.

Expose the server to the outside world: currently the `dapr-appserver`
command line. Parse and validate inputs, build a `DaprServer` and drive its
lifecycle.

Dependency rule: may import `dapr_appserver.server` and
`dapr_appserver.config`; avoid importing `dapr_appserver.adapters` directly.
"""
