"""
Shared Test Fixtures
"""

import pytest

from fake_rbac import FakeRbacApi


@pytest.fixture
def rbac_api() -> FakeRbacApi:
    """Empty in-memory RBAC store"""
    return FakeRbacApi()


@pytest.fixture
def warnings_seen():
    """Collects advisory warnings handed to a RoleModifier"""
    return []
