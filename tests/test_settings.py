from utils.settings import DEFAULT_QR_API_URL, get_settings


def test_defaults(monkeypatch):
    for name in ("QR_SOURCE", "QR_API_URL", "QR_FETCH_TIMEOUT", "QR_FETCH_RETRIES", "QR_EXPORT_SIZE", "QR_PREVIEW_SIZE"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()
    assert settings.qr_source == "remote"
    assert settings.qr_api_url == DEFAULT_QR_API_URL
    assert settings.fetch_timeout == 10.0
    assert settings.fetch_retries == 1
    assert (settings.export_size, settings.preview_size) == (1024, 200)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("QR_SOURCE", "LOCAL")
    monkeypatch.setenv("QR_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("QR_EXPORT_SIZE", "2048")

    settings = get_settings()
    assert settings.qr_source == "local"
    assert settings.fetch_timeout == 2.5
    assert settings.export_size == 2048


def test_retries_are_capped_at_one(monkeypatch):
    monkeypatch.setenv("QR_FETCH_RETRIES", "5")
    assert get_settings().fetch_retries == 1
    monkeypatch.setenv("QR_FETCH_RETRIES", "0")
    assert get_settings().fetch_retries == 0
