import json

import pytest

from figpolish.cli import _parse_assignment, main


def test_presets_listed(capsys):
    assert main(["presets"]) == 0
    names = capsys.readouterr().out.split()
    assert names[0] == "default"
    assert "publication" in names and "minimalist" in names


def test_parse_assignment():
    assert _parse_assignment("grid_alpha=0.3") == {"grid_alpha": 0.3}
    assert _parse_assignment("export_settings.format=pdf") == {"export_settings": {"format": "pdf"}}
    assert _parse_assignment("axis_color=[1, 0, 0]") == {"axis_color": [1, 0, 0]}
    assert _parse_assignment("legend_title_string=") == {"legend_title_string": ""}


def test_resolve_prints_json(tmp_path, capsys):
    cfg_file = tmp_path / "style.yaml"
    cfg_file.write_text("grid_density: none\nexport_settings:\n  format: svg\n")
    rc = main([
        "resolve",
        "--preset", "publication",
        "--config", str(cfg_file),
        "--set", "export_settings.resolution=150",
    ])
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["style_preset"] == "publication"
    assert data["grid_density"] == "none"
    assert data["export_settings"]["format"] == "svg"
    assert data["export_settings"]["resolution"] == 150
    assert "active_palette" in data


def test_resolve_changed_only_reports_issues(capsys):
    assert main(["resolve", "--set", "marker_size=8", "--set", "bogus=1", "--changed-only"]) == 0
    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert data["marker_size"] == 8.0
    assert "font_name" not in data
    assert "bogus" in captured.err


def test_resolve_missing_file(tmp_path, capsys):
    assert main(["resolve", "--config", str(tmp_path / "nope.yaml")]) == 2
    assert "not found" in capsys.readouterr().err


def test_bad_assignment_exits():
    with pytest.raises(SystemExit):
        main(["resolve", "--set", "no-equals-sign"])
