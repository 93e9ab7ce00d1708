import pytest

from hostinit.errors import InitializerError
from hostinit.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".hostinit.yml"
    config_file.write_text(
        "skip_update: true\nbackup_dir: /srv/backups\nhostname_attempts: 5\n",
        encoding="utf-8",
    )

    loader = ConfigLoader()
    loaded = loader.load(str(config_file))

    assert loaded["skip_update"] is True
    assert loaded["backup_dir"] == "/srv/backups"
    assert loaded["hostname_attempts"] == 5


def test_config_loader_returns_empty_without_path_or_content(tmp_path):
    config_file = tmp_path / ".hostinit.yml"
    config_file.write_text("", encoding="utf-8")

    loader = ConfigLoader()

    assert loader.load(None) == {}
    assert loader.load(str(config_file)) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".hostinit.yml"
    config_file.write_text("root_password: hunter2\n", encoding="utf-8")

    loader = ConfigLoader()

    with pytest.raises(InitializerError, match="Unknown configuration keys: root_password"):
        loader.load(str(config_file))


def test_config_loader_rejects_missing_file(tmp_path):
    with pytest.raises(InitializerError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "absent.yml"))


def test_config_loader_rejects_non_mapping_root(tmp_path):
    config_file = tmp_path / ".hostinit.yml"
    config_file.write_text("- skip_update\n", encoding="utf-8")

    with pytest.raises(InitializerError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))


@pytest.mark.parametrize("value", ["0", "-2", "true", "'eight'"])
def test_config_loader_rejects_non_positive_policy_values(tmp_path, value):
    config_file = tmp_path / ".hostinit.yml"
    config_file.write_text(f"min_password_length: {value}\n", encoding="utf-8")

    with pytest.raises(InitializerError, match="must be a positive integer"):
        ConfigLoader().load(str(config_file))
