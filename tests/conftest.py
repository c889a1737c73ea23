import pytest

from generate_test_audio import generate_click_train, write_wav


@pytest.fixture
def click_wav(tmp_path):
    """Three seconds of clicks at 120 BPM."""
    return write_wav(tmp_path / "clicks.wav", generate_click_train(120.0, 3.0))


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """Point the default configuration path into a temporary directory."""
    path = tmp_path / "config" / "config.json"
    monkeypatch.setenv("MOODTAGGER_CONFIG", str(path))
    return path
