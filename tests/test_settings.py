from callqa.settings import PipelineSettings


def test_from_config_defaults_and_normalization():
    settings = PipelineSettings.from_config({
        'OPENAI_BASE_URL': 'https://proxy.local/v1/',
        'STORAGE_PUBLIC_BASE_URL': 'https://files.example.com/',
        'ANALYSIS_MAX_ATTEMPTS': '0',
        'ANALYSIS_TEMPERATURE': '0.1',
        'RETRY_SETTLE_SECONDS': None,
    })
    assert settings.openai_base_url == 'https://proxy.local/v1'
    assert settings.storage_public_base_url == 'https://files.example.com'
    assert settings.analysis_max_attempts == 1
    assert settings.analysis_temperature == 0.1
    assert settings.retry_settle_seconds == 1.0
    assert settings.transcription_model == 'whisper-1'
    assert settings.storage_backend == 'local'


def test_app_builds_settings_once(app):
    settings = app.extensions['pipeline_settings']
    assert settings.openai_api_key == 'test-key'
    assert settings.retry_settle_seconds == 0
    assert settings.analysis_max_attempts == 3
