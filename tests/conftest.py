"""
Shared pytest fixtures for all tests.

Provides the approval/repair sample template and in-memory collaborators.
"""

import pytest

from procflow.domain.templates.models import ProcessTemplate
from tests.helpers.factories import RecordingNotifier, StubUploadStore, sample_template


@pytest.fixture
def template() -> ProcessTemplate:
    return sample_template()


@pytest.fixture
def valid_data() -> dict:
    return {"f_phone": "13800000000", "f_parts": ["内存"]}


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def upload_store() -> StubUploadStore:
    return StubUploadStore()
