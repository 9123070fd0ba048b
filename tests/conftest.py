import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from figpolish.config import ConfigRecord, resolve


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture
def rng(): return np.random.default_rng(0)


@pytest.fixture
def cfg(): return ConfigRecord()


@pytest.fixture
def make_cfg():
    """Resolve overrides the way beautify() does; fails on any config issue."""
    def _fn(**overrides):
        record, issues = resolve(user_overrides=overrides)
        assert not issues, [str(i) for i in issues]
        return record
    return _fn


@pytest.fixture
def line_axes():
    """Single axes with ``n`` labelled lines ``s0..s{n-1}``."""
    def _fn(n=3, labels=True):
        fig, ax = plt.subplots()
        x = np.linspace(0, 1, 10)
        for i in range(n):
            ax.plot(x, x * (i + 1), label=f"s{i}" if labels else None)
        return fig, ax
    return _fn
