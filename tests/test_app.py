import io

from rich.console import Console

import app
from config.config_loader import DEFAULT_CONFIG
from simulator.engine import Engine
from simulator.presets import PRESETS, SIGMA_2
from tools.machine_store import MachineStore


def render(renderable):
    console = Console(file=io.StringIO(), width=200)
    console.print(renderable)
    return console.file.getvalue()


def test_render_configuration_shows_counters():
    engine = Engine(SIGMA_2)
    engine.advance(100)
    output = render(app.render_configuration(engine.snapshot(), "two", visible_cells=3))
    assert "Steps: 6" in output
    assert "Score: 4" in output
    assert "HALTED" in output
    assert " 1 " in output


def test_catalog_lists_presets_and_stored_machines(tmp_path):
    store = MachineStore(tmp_path / "custom.json")
    assert len(app.catalog(store)) == len(PRESETS)
    store.save_machine(SIGMA_2.with_rules(SIGMA_2.rules[:2]))
    entries = app.catalog(store)
    assert entries[-1][0] == f"custom: {SIGMA_2.name}"
    assert len(entries[-1][1].rules) == 2


def test_load_runtime_config_falls_back_to_defaults(tmp_path):
    config = app.load_runtime_config(str(tmp_path / "missing.json"))
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG
