import pytest
from pydantic import ValidationError

from zammad_sdk.core.config import Settings, get_settings
from zammad_sdk.realtime.polling import PollingOptions
from zammad_sdk.realtime.webhook import WebhookOptions


class TestSettings:
    """Environment-driven configuration"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ZAMMAD_WEBHOOK_SECRET", raising=False)
        settings = Settings(_env_file=None)

        assert settings.zammad_webhook_path == "/webhooks/zammad"
        assert settings.zammad_signature_header == "X-Zammad-Signature"
        assert settings.zammad_event_header == "X-Zammad-Event"
        assert settings.zammad_poll_interval == 30.0
        assert settings.zammad_polling_enabled is False
        assert not settings.zammad_webhook_secret_configured

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ZAMMAD_URL", "https://helpdesk.example.com")
        monkeypatch.setenv("ZAMMAD_WEBHOOK_SECRET", "s3cr3t")
        monkeypatch.setenv("ZAMMAD_POLLING_ENABLED", "true")
        monkeypatch.setenv("ZAMMAD_POLL_INTERVAL", "12.5")

        settings = Settings(_env_file=None)

        assert settings.zammad_url == "https://helpdesk.example.com"
        assert settings.zammad_webhook_secret_configured
        assert settings.zammad_polling_enabled is True
        assert settings.zammad_poll_interval == 12.5

    def test_webhook_path_gets_leading_slash(self):
        assert Settings(_env_file=None, zammad_webhook_path="hooks/zammad").zammad_webhook_path == "/hooks/zammad"

    def test_poll_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, zammad_poll_interval=0)

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()

    def test_options_from_settings(self):
        settings = Settings(
            _env_file=None,
            zammad_webhook_secret="s3cr3t",
            zammad_event_header="X-Event",
            zammad_poll_interval=10,
            zammad_poll_page_size=50,
        )

        webhook = WebhookOptions.from_settings(settings)
        polling = PollingOptions.from_settings(settings)

        assert webhook.secret == "s3cr3t"
        assert webhook.event_header_name == "X-Event"
        assert webhook.signature_header_name == "X-Zammad-Signature"
        assert polling.poll_interval == 10
        assert polling.page_size == 50
