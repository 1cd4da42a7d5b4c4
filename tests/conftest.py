import pytest
from unittest.mock import Mock

from service_desk.adapters.sms import SMSAdapter
from service_desk.config import Settings
from service_desk.services.store import JsonStore


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        DATA_DIR=str(tmp_path / "data"),
        STATIC_DIR=str(tmp_path / "public"),
        ADMIN_USER="admin",
        ADMIN_PASS="admin123",
        ADMIN_PHONE="+15550001111",
        TWILIO_SID="AC_test",
        TWILIO_AUTH="token",
        TWILIO_PHONE="+15559998888",
        DEFAULT_COUNTRY_CODE="+91",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def twilio_client():
    """Stand-in for twilio.rest.Client"""
    client = Mock()
    client.messages.create.return_value = Mock(sid="SM_test_123", status="queued")
    return client


@pytest.fixture
def sms_adapter(settings, twilio_client):
    return SMSAdapter(settings, client=twilio_client)


@pytest.fixture
def store(settings):
    json_store = JsonStore(settings.DATA_DIR)
    json_store.ensure_data_dir()
    return json_store
