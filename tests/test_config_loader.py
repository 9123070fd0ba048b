import pytest

from figpolish.config import ConfigValidationError, load_overrides, resolve
from figpolish.config.loader import read_overrides
from figpolish.utils.dict_merge import deep_update, diff_keys


def test_load_order_and_nested_merge(tmp_path):
    # later files win, sub-records merge key by key
    base = tmp_path / "base.yaml"
    local = tmp_path / "local.json"
    base.write_text("marker_size: 5\nexport_settings: {format: pdf, resolution: 600}\n")
    local.write_text('{"marker_size": 7, "export_settings": {"resolution": 150}}')

    overrides = load_overrides(base, local)
    assert overrides == {"marker_size": 7, "export_settings": {"format": "pdf", "resolution": 150}}

    cfg, issues = resolve(user_overrides=overrides)
    assert issues == []
    assert cfg.export_settings.format == "pdf"
    assert cfg.export_settings.resolution == 150


def test_empty_file_is_empty_mapping(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert read_overrides(p) == {}


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_overrides(tmp_path / "missing.yaml")


@pytest.mark.parametrize("text", ["- a\n- b\n", "key: [unclosed\n"])
def test_bad_documents(tmp_path, text):
    p = tmp_path / "bad.yaml"
    p.write_text(text)
    with pytest.raises(ConfigValidationError):
        read_overrides(p)


def test_deep_update_does_not_mutate():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    out = deep_update(base, {"a": {"b": 5}, "e": 1})
    assert out == {"a": {"b": 5, "c": 2}, "d": 3, "e": 1}
    assert base == {"a": {"b": 1, "c": 2}, "d": 3}


def test_diff_keys():
    assert diff_keys({"a": 1, "b": 2}, {"a": 1, "b": 3, "c": 0}) == ["b", "c"]
