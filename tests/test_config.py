import os

import pytest

pytest.importorskip("gi")

from wyrmlaunch import config  # noqa: E402


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
	directory = tmp_path / "cfg"
	directory.mkdir(mode=0o700)
	os.chmod(directory, 0o700)
	monkeypatch.setattr(config, "default_config_path", lambda: str(tmp_path / "nowhere" / config.CONFIG_NAME))
	monkeypatch.setattr(config, "default_directories", lambda: ("/xdg/applications",))
	return directory


def write_config(directory, text, mode=0o600):
	path = directory / config.CONFIG_NAME
	path.write_text(text, encoding="utf-8")
	os.chmod(path, mode)
	return path


def test_defaults_without_file(config_dir):
	cfg = config.load_config()
	assert cfg == config.LauncherConfig(directories=("/xdg/applications",))


def test_explicit_file(config_dir):
	path = write_config(
		config_dir,
		'directories = ["/opt/apps", "/srv/apps"]\nempty_query = "none"\ncase_matching = "ignore"\nworkers = 3\n',
	)
	cfg = config.load_config(str(path))
	assert cfg.directories == ("/opt/apps", "/srv/apps")
	assert cfg.empty_query == "none"
	assert cfg.case_matching == "ignore"
	assert cfg.workers == 3
	assert cfg.normalization == "smart"


def test_directory_resolves_to_config_toml(config_dir):
	write_config(config_dir, 'directories = ["/opt/apps"]\n')
	assert config.resolve_config_path(str(config_dir)) == str(config_dir / config.CONFIG_NAME)
	assert config.load_config(str(config_dir)).directories == ("/opt/apps",)


def test_missing_explicit_path_falls_back(config_dir, tmp_path):
	assert config.resolve_config_path(str(tmp_path / "absent.toml")) is None
	assert config.load_config(str(tmp_path / "absent.toml")).directories == ("/xdg/applications",)


def test_settings_table_merged(config_dir):
	path = write_config(config_dir, "[settings]\nmax_results = 5\nshow_hidden = true\n")
	cfg = config.load_config(str(path))
	assert cfg.max_results == 5
	assert cfg.show_hidden is True


def test_invalid_values_use_defaults(config_dir):
	path = write_config(config_dir, 'workers = "many"\nshow_hidden = "yes"\ndirectories = [1, 2]\n')
	cfg = config.load_config(str(path))
	assert cfg.workers == 1
	assert cfg.show_hidden is False
	assert cfg.directories == ("/xdg/applications",)


def test_single_directory_string(config_dir):
	path = write_config(config_dir, 'directories = "~/apps"\n')
	assert config.load_config(str(path)).directories == (os.path.expanduser("~/apps"),)


def test_invalid_toml_uses_defaults(config_dir):
	path = write_config(config_dir, "directories = [\n")
	assert config.read_config(str(path)) == {}


def test_open_permissions_rejected(config_dir):
	path = write_config(config_dir, 'directories = ["/opt/apps"]\n', mode=0o644)
	assert config.read_config(str(path)) == {}
	assert config.load_config(str(path)).directories == ("/xdg/applications",)


def test_from_mapping_coerces_and_merges():
	cfg = config.LauncherConfig.from_mapping(
		{"workers": "4", "max_results": 0, "settings": {"workers": "2", "cache_size": "x"}},
		("/default",),
	)
	assert cfg.workers == 2
	assert cfg.max_results == 1
	assert cfg.cache_size == 8192
	assert cfg.directories == ("/default",)


def test_from_mapping_ignores_non_table_settings():
	cfg = config.LauncherConfig.from_mapping({"settings": "loud", "workers": 2}, ("/default",))
	assert cfg.workers == 2


def test_private_directory_required(config_dir):
	path = write_config(config_dir, 'directories = ["/opt/apps"]\n')
	os.chmod(config_dir, 0o755)
	try:
		with pytest.raises(PermissionError):
			config.open_private(str(path))

		assert config.read_config(str(path)) == {}
	finally:
		os.chmod(config_dir, 0o700)
