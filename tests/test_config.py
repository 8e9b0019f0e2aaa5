import pytest

from netlab.config import LabConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("LINK_DELAY", "DEFAULT_TTL", "PREFIX_LENGTH", "LOG_LEVEL", "SEED"):
        monkeypatch.delenv(f"NETLAB_{name}", raising=False)


def test_defaults():
    assert load_config() == LabConfig()
    assert LabConfig().link_delay == 0.5
    assert LabConfig().default_ttl == 8


def test_yaml_values(tmp_path):
    path = tmp_path / "lab.yaml"
    path.write_text("link_delay: 0.1\ndefault_ttl: 4\ncontainer_image: busybox\n")
    config = load_config(str(path))
    assert config.link_delay == 0.1
    assert config.default_ttl == 4
    assert config.container_image == "busybox"
    assert config.prefix_length == 24


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "lab.yaml"
    path.write_text("default_ttl: 4\n")
    monkeypatch.setenv("NETLAB_DEFAULT_TTL", "16")
    monkeypatch.setenv("NETLAB_SEED", "none")
    config = load_config(str(path))
    assert config.default_ttl == 16
    assert config.seed is None


def test_empty_yaml(tmp_path):
    path = tmp_path / "lab.yaml"
    path.write_text("")
    assert load_config(str(path)) == LabConfig()


def test_invalid_prefix_length(monkeypatch):
    monkeypatch.setenv("NETLAB_PREFIX_LENGTH", "40")
    with pytest.raises(ValueError):
        load_config()
