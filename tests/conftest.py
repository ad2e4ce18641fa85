"""
Shared fixtures.
"""

import pytest

from database.monitoring import monitoring_manager


@pytest.fixture(autouse=True)
def audit_file(tmp_path, monkeypatch):
    """Keep audit records out of the working tree."""
    path = tmp_path / "audit.jsonl"
    monkeypatch.setattr(monitoring_manager.audit_logger, "audit_file", path)
    return path
