"""
Pytest Fixtures for the Falcon E2E Suite

Provides fixtures shared by the unit and e2e test trees.
"""

import pytest


@pytest.fixture
def auth_state_path(tmp_path):
    """Isolated auth state file; never the developer's real .auth/user.json."""
    return tmp_path / ".auth" / "user.json"
