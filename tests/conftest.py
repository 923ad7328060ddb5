"""Global pytest fixtures for dapr-appserver."""

import os
from unittest import mock

import pytest

from dapr_appserver.config import (
    CLIENT_PORT_ENV,
    DAPR_GRPC_PORT_ENV,
    DAPR_HOST_ENV,
    DAPR_HTTP_PORT_ENV,
    PROTOCOL_ENV,
    SERVER_HOST_ENV,
    SERVER_PORT_ENV,
)

from .fakes import FakeDaprClient, FakeTransport

# pylint: disable=redefined-outer-name


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch):
    """Run every test against a copy of the environment with no Dapr variables.

    Building a server writes the ambient port variables; this keeps those
    writes from leaking between tests.
    """
    with mock.patch.dict(os.environ):
        for name in (
            SERVER_HOST_ENV,
            SERVER_PORT_ENV,
            CLIENT_PORT_ENV,
            DAPR_HOST_ENV,
            DAPR_HTTP_PORT_ENV,
            DAPR_GRPC_PORT_ENV,
            PROTOCOL_ENV,
        ):
            monkeypatch.delenv(name, raising=False)
        yield


@pytest.fixture
def fake_client() -> FakeDaprClient:
    """An outbound client that keeps actor state in memory."""
    return FakeDaprClient()


@pytest.fixture
def fake_transport() -> FakeTransport:
    """A transport server that records lifecycle calls."""
    return FakeTransport()
