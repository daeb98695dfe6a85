"""Общие фикстуры для тестов клиента Edusign."""
import json

import pytest
from unittest.mock import AsyncMock

from edusign_api.client import EdusignClient
from edusign_api.config import Settings


def envelope(status: str = "success", message=None, result=None, code: int = 200):
    """Ответ транспорта (код, тело) с конвертом Edusign."""
    return code, json.dumps({"status": status, "message": message, "result": result})


@pytest.fixture
def ok():
    """Фабрика успешных ответов."""
    return lambda result=None, message=None: envelope("success", message, result)


@pytest.fixture
def err():
    """Фабрика ответов с ошибкой."""
    return lambda message, code=200: envelope("error", message, None, code)


@pytest.fixture
def settings():
    """Настройки без чтения .env."""
    return Settings(_env_file=None, EDUSIGN_API_KEY="test-key")


@pytest.fixture
def lenient_settings():
    """Настройки с выключенным strict-режимом."""
    return Settings(_env_file=None, EDUSIGN_API_KEY="test-key", EDUSIGN_STRICT_ERRORS=False)


@pytest.fixture
def client(settings):
    """Клиент с замоканным транспортом (_send)."""
    client = EdusignClient(settings=settings)
    client._send = AsyncMock()
    return client


@pytest.fixture
def lenient_client(lenient_settings):
    client = EdusignClient(settings=lenient_settings)
    client._send = AsyncMock()
    return client


@pytest.fixture
def sample_group():
    return {"ID": "g1", "NAME": "BTS 1A", "STUDENTS": ["s1", "s2"]}


@pytest.fixture
def sample_course():
    """Незакрытый курс с тремя студентами, один уже расписался."""
    return {
        "ID": "c1",
        "NAME": "Mathématiques",
        "LOCKED": 0,
        "ATTENDANCE_LIST_GENERATED": None,
        "STUDENTS": [
            {"studentId": "s1", "state": True},
            {"studentId": "s2", "state": None},
            {"studentId": "s3"},
        ],
    }
