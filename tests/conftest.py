"""Pytest configuration and fixtures"""

import io
import os
import tempfile

import pytest
from rich.console import Console

from catalog import Catalog, RunFlag, NAME_PARAM, VOLUME_PARAM, ENV_PARAM
from editor import EditorModel
from exceptions import SessionError


class ScriptedKeySource:
    """Key source that replays a fixed list of key names"""

    def __init__(self, keys, on_read=None):
        self.keys = list(keys)
        self.on_read = on_read
        self.reads = 0

    def read_key(self):
        self.reads += 1
        if self.on_read:
            self.on_read(self.reads)
        if not self.keys:
            raise SessionError("Input closed before the session finished")
        key = self.keys.pop(0)
        if isinstance(key, Exception):
            raise key
        return key


def press(model, *keys):
    """Feed keys to a model, returning the action of the last one"""
    action = None
    for key in keys:
        action = model.update(key)
    return action


@pytest.fixture
def temp_config_file():
    """Create a temporary config file for testing"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write("""
display:
  wrap_width: 100
  program: podman run
editor:
  begin_edit: prefill
output:
  log_level: DEBUG
""")
        temp_path = f.name

    yield temp_path

    # Cleanup
    os.unlink(temp_path)


@pytest.fixture
def default_catalog():
    return Catalog.default()


@pytest.fixture
def demo_catalog():
    """Synthetic catalog with one plain and two composite parameters"""
    return Catalog({
        "demo": {
            "parameters": [
                (NAME_PARAM, ["alpine-test", "evenCoolerName"]),
                (VOLUME_PARAM, ["/a:/b"]),
                (ENV_PARAM, ["KEY=old"]),
            ],
            "flags": [RunFlag.TTY],
        },
        "tiny": {
            "parameters": [(NAME_PARAM, ["web"])],
            "flags": [],
        },
    })


@pytest.fixture
def demo_model(demo_catalog):
    return EditorModel.from_catalog(demo_catalog, "demo")


@pytest.fixture
def output_console():
    """Console writing to an in-memory buffer"""
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def pseudo_terminal():
    """A pty pair: (master fd to type into, slave side opened as stdin)"""
    pty = pytest.importorskip("pty")
    master, slave = pty.openpty()
    stdin = os.fdopen(slave, "r")
    yield master, stdin
    stdin.close()
    os.close(master)
