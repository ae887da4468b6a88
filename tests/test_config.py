"""Tests for the config package and its project paths."""

import config
from config import get_config


def test_config_file_is_read_from_the_checkout():
    assert config.CONFIG_PATH == config.ROOT_DIR / "config" / "config.yaml"
    assert config.CONFIG_PATH.exists()
    assert (config.ROOT_DIR / "pyproject.toml").exists()


def test_output_directories_live_under_the_project_root():
    for path in [config.RAW_DATA_DIR, config.FIGURES_DIR, config.SUBMISSIONS_DIR, config.MLFLOW_DIR]:
        assert config.ROOT_DIR in path.parents
        assert path.is_dir()


def test_get_config_returns_a_fresh_copy():
    first = get_config()
    first["project"]["random_state"] = -1

    assert get_config()["project"]["random_state"] == 42
