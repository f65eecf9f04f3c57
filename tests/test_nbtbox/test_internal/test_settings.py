import pytest

from nbtbox._internal.settings import NBTBOX_GZIP_LEVEL
from nbtbox._internal.settings import NBTBOX_MAX_DEPTH
from nbtbox._internal.settings import NBTBOX_READ_CHUNK_SIZE
from nbtbox._internal.settings import make_setting


def test_setting_defaults(monkeypatch):
    for name in ("NBTBOX_MAX_DEPTH", "NBTBOX_READ_CHUNK_SIZE", "NBTBOX_GZIP_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    assert NBTBOX_MAX_DEPTH() == 256
    assert NBTBOX_READ_CHUNK_SIZE() == 65536
    assert NBTBOX_GZIP_LEVEL() == 9


def test_settings_read_the_environment(monkeypatch):
    monkeypatch.setenv("NBTBOX_MAX_DEPTH", "8")
    monkeypatch.setenv("NBTBOX_GZIP_LEVEL", "0")
    assert NBTBOX_MAX_DEPTH() == 8
    assert NBTBOX_GZIP_LEVEL() == 0
    custom = make_setting("NBTBOX_TEST_SETTING", "default")
    assert custom() == "default"
    monkeypatch.setenv("NBTBOX_TEST_SETTING", "custom")
    assert custom() == "custom"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("NBTBOX_MAX_DEPTH", "0"),
        ("NBTBOX_READ_CHUNK_SIZE", "-1"),
        ("NBTBOX_GZIP_LEVEL", "10"),
        ("NBTBOX_MAX_DEPTH", "deep"),
    ],
)
def test_invalid_settings(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    setting = {
        "NBTBOX_MAX_DEPTH": NBTBOX_MAX_DEPTH,
        "NBTBOX_READ_CHUNK_SIZE": NBTBOX_READ_CHUNK_SIZE,
        "NBTBOX_GZIP_LEVEL": NBTBOX_GZIP_LEVEL,
    }[name]
    with pytest.raises(ValueError):
        setting()
