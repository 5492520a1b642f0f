# tools/simulate_pool.py

import argparse
import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from logger.logger import JSONLogger
from simulator.engine import Engine
from simulator.presets import PRESETS
from simulator.scheduler import MAX_STEPS

log = logging.getLogger(__name__)

# Steps handed to the engine per call; keeps progress reporting responsive
CHUNK_SIZE = 100_000


@dataclass
class RunResult:
    name: str
    steps: int
    score: int
    halted: bool
    halt_state: object
    forced_stop: bool
    execution_time: float

    def to_dict(self):
        return asdict(self)


# === CPU Simulation ===
def simulate_single(machine, max_steps=MAX_STEPS):
    """Run `machine` from a blank tape until it halts or hits `max_steps`."""
    engine = Engine(machine)
    started = time.perf_counter()
    while not engine.is_halted and engine.step_count < max_steps:
        engine.advance(min(CHUNK_SIZE, max_steps - engine.step_count))
    elapsed = time.perf_counter() - started

    return RunResult(
        name=machine.name,
        steps=engine.step_count,
        score=engine.score,
        halted=engine.is_halted,
        halt_state=engine.halt_state,
        forced_stop=not engine.is_halted,
        execution_time=elapsed,
    )


# === Promotion for Long-Runners ===
def promote_long_runner(machine, pool_file="pools/long_runners.jsonl"):
    Path(pool_file).parent.mkdir(parents=True, exist_ok=True)
    with open(pool_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(machine.to_record(), ensure_ascii=False) + "\n")


# === Checkpoints ===
def load_checkpoint(checkpoint_path):
    checkpoint_path = Path(checkpoint_path)
    if checkpoint_path.exists():
        with open(checkpoint_path, "r", encoding="utf-8") as f:
            checkpoint = json.load(f)
        return checkpoint.get("completed", [])
    return []


def save_checkpoint(completed, checkpoint_path):
    Path(checkpoint_path).parent.mkdir(parents=True, exist_ok=True)
    with open(checkpoint_path, "w", encoding="utf-8") as f:
        json.dump({"completed": completed}, f, indent=4, ensure_ascii=False)


# === Main Simulation Runner ===
def simulate_pool(machines, max_steps=MAX_STEPS, json_logger=None, checkpoint_path=None,
                  long_runner_file="pools/long_runners.jsonl", show_progress=True):
    """Simulate each machine in turn; machines already in the checkpoint are skipped."""
    completed = load_checkpoint(checkpoint_path) if checkpoint_path else []
    pending = [m for m in machines if m.name not in completed]
    log.info("Loaded %d machines, %d pending", len(machines), len(pending))

    results = []
    with Progress(
            SpinnerColumn(),
            BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            TextColumn("{task.completed}/{task.total} Machines"),
            TimeElapsedColumn(),
            disable=not show_progress,
    ) as progress:
        task = progress.add_task("[cyan]Simulating...", total=len(pending))

        for machine in pending:
            result = simulate_single(machine, max_steps=max_steps)
            results.append(result)
            completed.append(machine.name)

            if json_logger is not None:
                json_logger.log_summary([result.to_dict()])
                if result.halted:
                    json_logger.log_halting([{**result.to_dict(), "machine": machine.to_record()}])
                else:
                    json_logger.log_non_halting([{**result.to_dict(), "machine": machine.to_record()}])

            # === Auto-Promote Long Runners ===
            if result.forced_stop and long_runner_file:
                promote_long_runner(machine, long_runner_file)

            if checkpoint_path:
                save_checkpoint(completed, checkpoint_path)
            progress.update(task, advance=1)

    return results


# === CLI ===
def main():
    parser = argparse.ArgumentParser(description="Simulate the built-in Busy Beaver machines to completion.")
    parser.add_argument("--preset", action="append", choices=list(PRESETS), help="Preset to run (repeatable, default all but sigma5)")
    parser.add_argument("--max_steps", type=int, default=MAX_STEPS, help="Maximum steps before a forced stop")
    parser.add_argument("--output", default="logs/", help="Directory for JSON-lines results")
    args = parser.parse_args()

    keys = args.preset or [k for k in PRESETS if k != "sigma5"]
    results = simulate_pool([PRESETS[k] for k in keys], max_steps=args.max_steps, json_logger=JSONLogger(args.output))
    for result in results:
        print(f"{result.name}: steps={result.steps:,} score={result.score:,} halted={result.halted}")


if __name__ == "__main__":
    main()
