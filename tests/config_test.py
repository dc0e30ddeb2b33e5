import pytest

from virtimage.core import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LIBVIRT_URI", "STORAGE_POOL", "UPLOAD_CHUNK_SIZE"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = config.Settings.from_sources({})
    assert settings.libvirt_uri == "qemu:///system"
    assert settings.pool == "default"
    assert settings.upload_chunk_size == 2 * 1024 * 1024


def test_yaml_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "libvirt:\n"
        "  uri: qemu+ssh://root@kvm1/system\n"
        "  pool: images\n"
        "storage:\n"
        "  upload_chunk_size: 4096\n"
    )

    settings = config.Settings.from_sources(config.load_yaml_config(str(path)))

    assert settings.libvirt_uri == "qemu+ssh://root@kvm1/system"
    assert settings.pool == "images"
    assert settings.upload_chunk_size == 4096


def test_environment_wins(monkeypatch):
    monkeypatch.setenv("STORAGE_POOL", "fast")
    monkeypatch.setenv("UPLOAD_CHUNK_SIZE", "1024")

    settings = config.Settings.from_sources({"libvirt": {"pool": "images"}})

    assert settings.pool == "fast"
    assert settings.upload_chunk_size == 1024


@pytest.mark.parametrize("value", ["0", "-5", "lots"])
def test_bad_chunk_size(monkeypatch, value):
    monkeypatch.setenv("UPLOAD_CHUNK_SIZE", value)
    settings = config.Settings.from_sources({})
    assert settings.upload_chunk_size == config.DEFAULT_UPLOAD_CHUNK_SIZE


def test_missing_yaml(tmp_path):
    assert config.load_yaml_config(str(tmp_path / "missing.yaml")) == {}


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("libvirt: [unclosed\n")
    assert config.load_yaml_config(str(path)) == {}
