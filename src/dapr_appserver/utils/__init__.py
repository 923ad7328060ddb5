"""Support namespace for small, dependency-light helpers.

Not an architectural layer: nothing here knows about transports, capabilities
or wiring. Import specific helpers from their defining modules.
"""
