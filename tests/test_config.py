from __future__ import annotations

from tracewire.config import Settings


def test_settings_defaults(monkeypatch) -> None:
    for name in ('TRACEWIRE_TRACKING_URI', 'TRACEWIRE_EXPERIMENT_ID', 'TRACEWIRE_STRICT_DECODING'):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.tracking_uri == 'http://127.0.0.1:5000'
    assert settings.experiment_id == '0'
    assert settings.strict_decoding is False
    assert settings.validate_trace_tree is False


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    # Arrange
    monkeypatch.setenv('TRACEWIRE_TRACKING_URI', 'http://mlflow:5000')
    monkeypatch.setenv('TRACEWIRE_EXPERIMENT_ID', '17')
    monkeypatch.setenv('TRACEWIRE_STRICT_DECODING', 'true')

    # Act
    settings = Settings(_env_file=None)

    # Assert
    assert settings.tracking_uri == 'http://mlflow:5000'
    assert settings.experiment_id == '17'
    assert settings.strict_decoding is True
