"""Pytest configuration and fake collaborators for the lossplot test suite."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the project root importable when tests are run from the tests directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lossplot import Configurations  # noqa: E402
from lossplot import RenderDispatcher as rd  # noqa: E402


class FakeREngine(rd.REngine):
    """Captures generated R programs instead of running R."""

    def __init__(self, png_available=False, produce_output=True):
        super().__init__(["R"])
        self.png_available = png_available
        self.produce_output = produce_output
        self.probes = 0
        self.submitted = []
        self._path = None

    def png_backend_available(self):
        self.probes += 1
        return self.png_available

    def render(self, spec, target, png_enhanced=False):
        self._path = target.path
        super().render(spec, target, png_enhanced)

    def submit(self, program, device):
        self.submitted.append((program, device))
        if self.produce_output:
            Path(self._path).write_text("%!fake\n")


class FakeViewer:
    def __init__(self):
        self.shown = []

    def show(self, path, rotate=False):
        self.shown.append((path, rotate))


@pytest.fixture
def fake_engine():
    return FakeREngine()


@pytest.fixture
def fake_viewer():
    return FakeViewer()


@pytest.fixture
def default_output(tmp_path, monkeypatch):
    path = str(tmp_path / "lossplot-default.png")
    monkeypatch.setattr(Configurations, "DEFAULT_OUTPUT", path)
    return path
