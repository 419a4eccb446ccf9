import json
import logging

from pestscan.settings import CONFIG_ENV_VAR, DEFAULT_SETTINGS, config_path, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(str(tmp_path / 'nope.json')) == DEFAULT_SETTINGS


def test_saved_values_override_defaults(tmp_path):
    path = tmp_path / 'cfg.json'
    path.write_text(json.dumps({'variant': 'report', 'top_n': 10}))
    settings = load_settings(str(path))
    assert settings['variant'] == 'report'
    assert settings['top_n'] == 10
    assert settings['show_index'] is True


def test_unknown_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / 'cfg.json'
    path.write_text(json.dumps({'theme': 'dark', 'top_n': 3}))
    with caplog.at_level(logging.WARNING):
        settings = load_settings(str(path))
    assert 'theme' not in settings
    assert settings['top_n'] == 3
    assert 'unknown keys' in caplog.text


def test_corrupt_file_falls_back_to_defaults(tmp_path, caplog):
    path = tmp_path / 'cfg.json'
    path.write_text('{not json')
    with caplog.at_level(logging.WARNING):
        assert load_settings(str(path)) == DEFAULT_SETTINGS
    assert 'Could not load settings' in caplog.text


def test_non_object_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'cfg.json'
    path.write_text('[1, 2]')
    assert load_settings(str(path)) == DEFAULT_SETTINGS


def test_save_merges_into_existing(tmp_path):
    path = tmp_path / 'sub' / 'cfg.json'
    save_settings({'variant': 'report'}, str(path))
    save_settings({'top_n': 7}, str(path))
    assert json.loads(path.read_text()) == {'variant': 'report', 'top_n': 7}
    assert load_settings(str(path))['variant'] == 'report'


def test_config_path_resolution(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / 'env.json'))
    assert config_path() == str(tmp_path / 'env.json')
    assert config_path('explicit.json') == 'explicit.json'
    monkeypatch.delenv(CONFIG_ENV_VAR)
    assert config_path().endswith('.pestscan_config.json')
