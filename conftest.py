# Ensure tests import modules from this service directory first, so that
# `import corsproxy.*` resolves to the working tree rather than an installed copy.
import os
import sys

import pytest

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from corsproxy.policy import PolicyConfig  # noqa: E402
from corsproxy.proxy.models import InboundRequest  # noqa: E402
from corsproxy.utils_tests.upstream_mock import ScriptedUpstream  # noqa: E402


@pytest.fixture
def policy():
    """Default policy: every origin allowed, five redirects."""
    return PolicyConfig()


@pytest.fixture
def upstream():
    return ScriptedUpstream()


@pytest.fixture
def make_inbound():
    def _make(
        method="GET",
        url="http://proxy.local/?url=https://api.example.com/data",
        headers=None,
        query=None,
        body=None,
    ):
        return InboundRequest(
            method=method,
            url=url,
            headers=tuple(headers or ()),
            query=tuple(query or ()),
            body=body,
        )

    return _make
