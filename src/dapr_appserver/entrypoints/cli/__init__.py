"""The `dapr-appserver` command line."""
