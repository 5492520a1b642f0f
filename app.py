# app.py

import argparse
import asyncio
import copy

from rich.console import Console, Group
from rich.live import Live
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from config.config_loader import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH, load_config
from logger.logger import JSONLogger, configure_logging
from simulator.engine import Engine
from simulator.machine import parse_standard_format
from simulator.parser import parse_machine_safe
from simulator.presets import PRESETS, known_score
from simulator.scheduler import FORCED_STOP, HALTED, RunScheduler
from tools.machine_store import MachineStore
from tools.ruleset_generator import generate_optimized_machine
from tools.ruleset_inspect import pretty_print_ruleset, print_validation
from tools.simulate_pool import simulate_pool

console = Console()

# Seconds between screen refreshes while a machine runs
REFRESH_INTERVAL = 0.1


# === Utilities ===
def load_runtime_config(path=DEFAULT_CONFIG_PATH):
    try:
        return load_config(path)
    except FileNotFoundError:
        console.print(f"[yellow]{path} not found, using default settings.[/yellow]")
        return copy.deepcopy(DEFAULT_CONFIG)


def render_configuration(configuration, machine_name="", visible_cells=10):
    """Tape window around the head plus the machine's counters."""
    head = configuration.head_position
    tape = Text()
    marker = Text()
    for offset, value in enumerate(configuration.tape.window(head, visible_cells), start=-visible_cells):
        symbol = str(value)
        cell = f" {symbol} "
        if offset == 0:
            tape.append(cell, style="bold black on yellow")
            marker.append(" ^ ".ljust(len(cell)), style="yellow")
        else:
            tape.append(cell, style="bold" if symbol != "0" else "dim")
            marker.append(" " * len(cell))

    stats = Table.grid(padding=(0, 2))
    stats.add_row(
        f"[bold]{machine_name}[/bold]",
        f"State: [cyan]{configuration.current_state}[/cyan]",
        f"Steps: {configuration.step_count:,}",
        f"Score: [green]{configuration.score:,}[/green]",
        f"Head: {head}",
        "[red]HALTED[/red]" if configuration.is_halted else "",
    )
    return Group(tape, marker, stats)


async def run_live(engine, scheduler, visible_cells):
    """Run the scheduler while redrawing the tape until the run ends."""
    scheduler.run()
    with Live(render_configuration(engine.snapshot(), engine.machine.name, visible_cells), console=console) as live:
        while scheduler.is_running:
            await asyncio.sleep(REFRESH_INTERVAL)
            live.update(render_configuration(engine.snapshot(), engine.machine.name, visible_cells))
    return await scheduler.wait()


def report_outcome(engine, scheduler, outcome):
    if outcome == HALTED:
        console.print(
            f"[green]Halted in state {engine.halt_state} after {engine.step_count:,} steps, "
            f"score {engine.score:,}.[/green]"
        )
    elif outcome == FORCED_STOP:
        console.print(f"[yellow]Forced stop after {scheduler.max_steps:,} steps; the machine has not halted.[/yellow]")
    else:
        console.print(f"[cyan]Stopped at step {engine.step_count:,}.[/cyan]")


def catalog(store):
    """(label, machine) pairs for every machine the app can load."""
    entries = [(f"preset: {key}", machine) for key, machine in PRESETS.items()]
    entries.extend((f"custom: {entry['name']}", entry["machine"]) for entry in store.list_machines())
    return entries


# === Menu Handlers ===
def show_main_menu(engine, scheduler):
    name = engine.machine.name if engine.machine else "none"
    console.print(f"\n[bold cyan]Busy Beaver Simulator[/bold cyan]  machine: [bold]{name}[/bold]  speed: {scheduler.speed:g} steps/s")
    console.print("[1] Load machine")
    console.print("[2] Step")
    console.print("[3] Run")
    console.print("[4] Reset")
    console.print("[5] Set speed")
    console.print("[6] Show rules and validation")
    console.print("[7] Import machine from text file")
    console.print("[8] Generate random machine")
    console.print("[9] Save machine to library")
    console.print("[10] Simulate all presets")
    console.print("[11] Exit")


def handle_load(engine, scheduler, store):
    entries = catalog(store)
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Index", justify="center")
    table.add_column("Machine")
    table.add_column("Rules", justify="right")
    for idx, (label, machine) in enumerate(entries):
        table.add_row(str(idx), label, str(len(machine.rules)))
    console.print(table)

    idx_choice = IntPrompt.ask("Choose a machine by Index", default=0)
    if idx_choice < 0 or idx_choice >= len(entries):
        console.print("[red]Invalid choice.[/red]")
        return
    scheduler.stop()
    engine.load(entries[idx_choice][1])
    console.print(f"[green]Loaded {engine.machine.name}.[/green]")


def handle_step(engine, visible_cells):
    configuration = engine.step()
    console.print(render_configuration(configuration, engine.machine.name, visible_cells))


def handle_run(engine, scheduler, visible_cells, json_logger):
    if engine.is_halted:
        console.print("[yellow]The machine has halted. Reset it first.[/yellow]")
        return
    console.print("[dim]Press Ctrl+C to stop.[/dim]")
    try:
        outcome = asyncio.run(run_live(engine, scheduler, visible_cells))
    except KeyboardInterrupt:
        scheduler.stop()
        outcome = scheduler.outcome
    report_outcome(engine, scheduler, outcome)
    json_logger.log({
        "machine": engine.machine.name,
        "outcome": outcome,
        "steps": engine.step_count,
        "score": engine.score,
        "halt_state": engine.halt_state,
    })


def handle_set_speed(scheduler):
    speed = FloatPrompt.ask("Steps per second", default=scheduler.speed)
    try:
        scheduler.set_speed(speed)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")


def handle_show_rules(engine):
    pretty_print_ruleset(engine.machine, console)
    print_validation(engine.machine.rules, console)
    active_states = {rule.current_state for rule in engine.machine.rules}
    best = known_score(len(active_states))
    if best is not None:
        console.print(f"[dim]Best known score for {len(active_states)} states: {best}[/dim]")


def handle_import(engine, scheduler):
    path = Prompt.ask("Path to rules file")
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        return

    result = parse_machine_safe(text)
    if not result.success:
        # Fall back to the one-line format (e.g. 1RB1LB_1LA1RZ)
        try:
            machine = parse_standard_format(text)
        except ValueError:
            console.print(f"[red]{result.error}[/red]")
            return
    else:
        machine = result.data

    print_validation(machine.rules, console)
    scheduler.stop()
    engine.load(machine)
    console.print(f"[green]Loaded {machine.name}.[/green]")


def handle_generate(engine, scheduler, generator_config):
    states = IntPrompt.ask("Number of States", default=3)
    try:
        machine = generate_optimized_machine(states, config=generator_config)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return
    scheduler.stop()
    engine.load(machine)
    pretty_print_ruleset(machine, console)


def handle_save(engine, store):
    if not Confirm.ask(f"Save '{engine.machine.name}' to {store.path}?", default=True):
        return
    store.save_machine(engine.machine)
    console.print("[green]Machine saved.[/green]")


def handle_simulate_presets(config, json_logger):
    keys = [k for k in PRESETS if k != "sigma5"]
    if Confirm.ask("Include the 5-state champion (47M steps, slow)?", default=False):
        keys.append("sigma5")
    results = simulate_pool([PRESETS[k] for k in keys], max_steps=config["max_steps"], json_logger=json_logger)

    table = Table(title="Simulation Results")
    for column in ("Machine", "Steps", "Score", "Halted", "Time (s)"):
        table.add_column(column)
    for result in results:
        table.add_row(result.name, f"{result.steps:,}", f"{result.score:,}", str(result.halted), f"{result.execution_time:.2f}")
    console.print(table)


def interactive_main(config):
    store = MachineStore(config["store_file"])
    json_logger = JSONLogger(config["output_directory"], config["log_file_prefix"])
    engine = Engine(PRESETS["sigma2"])
    scheduler = RunScheduler(engine, speed=config["default_speed"], max_steps=config["max_steps"])
    visible_cells = config["visible_cells"]

    choices = [str(i) for i in range(1, 12)]
    while True:
        show_main_menu(engine, scheduler)
        choice = Prompt.ask("\nChoose an option", choices=choices, default="11")

        if choice == "1":
            handle_load(engine, scheduler, store)
        elif choice == "2":
            handle_step(engine, visible_cells)
        elif choice == "3":
            handle_run(engine, scheduler, visible_cells, json_logger)
        elif choice == "4":
            scheduler.reset()
            console.print(render_configuration(engine.snapshot(), engine.machine.name, visible_cells))
        elif choice == "5":
            handle_set_speed(scheduler)
        elif choice == "6":
            handle_show_rules(engine)
        elif choice == "7":
            handle_import(engine, scheduler)
        elif choice == "8":
            handle_generate(engine, scheduler, config["generator"])
        elif choice == "9":
            handle_save(engine, store)
        elif choice == "10":
            handle_simulate_presets(config, json_logger)
        elif choice == "11":
            console.print("[bold green]Goodbye![/bold green]")
            break


# === CLI Mode for Automation ===
def cli_main(args, config):
    json_logger = JSONLogger(config["output_directory"], config["log_file_prefix"])
    max_steps = args.max_steps or config["max_steps"]

    if args.simulate:
        keys = [k for k in PRESETS if k != "sigma5"]
        for result in simulate_pool([PRESETS[k] for k in keys], max_steps=max_steps, json_logger=json_logger):
            console.print(f"{result.name}: steps={result.steps:,} score={result.score:,} halted={result.halted}")
        return

    engine = Engine(PRESETS[args.machine])
    scheduler = RunScheduler(engine, speed=args.speed or config["default_speed"], max_steps=max_steps)
    handle_run(engine, scheduler, config["visible_cells"], json_logger)


def main():
    parser = argparse.ArgumentParser(description="Busy Beaver Turing Machine Simulator")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to runtime_config.json")
    parser.add_argument("--machine", choices=list(PRESETS), help="Run a built-in machine immediately")
    parser.add_argument("--speed", type=float, help="Steps per second for --machine")
    parser.add_argument("--max-steps", type=int, help="Safety ceiling for a single run")
    parser.add_argument("--simulate", action="store_true", help="Simulate the built-in machines and exit")
    args = parser.parse_args()

    config = load_runtime_config(args.config)
    configure_logging(config["log_level"], console)

    if args.machine or args.simulate:
        cli_main(args, config)
    else:
        interactive_main(config)


if __name__ == "__main__":
    main()
