import matplotlib.pyplot as plt

from figpolish.viz import backend


def test_env_backend_wins(monkeypatch):
    monkeypatch.setenv("MPLBACKEND", "pdf")
    assert backend.choose_backend() == "pdf"


def test_headless_falls_back_to_agg(monkeypatch):
    monkeypatch.delenv("MPLBACKEND", raising=False)
    monkeypatch.setattr(backend, "gui_available", lambda: False)
    assert backend.choose_backend() == "Agg"


def test_no_display_means_no_gui(monkeypatch):
    monkeypatch.setattr(backend.sys, "platform", "linux")
    monkeypatch.delenv("DISPLAY", raising=False)
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    assert backend.gui_available() is False


def test_current_figure_is_pyplot_current():
    # conftest has already imported pyplot under Agg
    fig = plt.figure()
    assert backend.current_figure() is fig
