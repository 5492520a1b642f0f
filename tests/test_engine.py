import pytest

from simulator.engine import Engine
from simulator.machine import HALT, Rule, TuringMachine
from simulator.presets import SIGMA_2, SIGMA_3, SIGMA_4, SIMPLE_TEST


def machine_of(*rows, **kwargs):
    return TuringMachine("test", [Rule(*row) for row in rows], **kwargs)


def run_to_halt(engine, limit=10_000):
    for _ in range(limit):
        if engine.is_halted:
            break
        engine.step()
    return engine.snapshot()


def test_simple_machine_halts_after_one_step():
    engine = Engine(SIMPLE_TEST)
    configuration = engine.step()
    assert configuration.is_halted
    assert configuration.step_count == 1
    assert configuration.score == 1
    assert configuration.head_position == 1
    assert configuration.halt_state == HALT


@pytest.mark.parametrize("machine, steps, score", [(SIGMA_2, 6, 4), (SIGMA_3, 14, 6), (SIGMA_4, 107, 13)])
def test_champions(machine, steps, score):
    configuration = run_to_halt(Engine(machine))
    assert configuration.is_halted
    assert configuration.step_count == steps
    assert configuration.score == score


def test_sigma2_trace():
    engine = Engine(SIGMA_2)
    heads = [engine.step().head_position for _ in range(6)]
    assert heads == [1, 0, -1, -2, -1, 0]
    assert engine.tape.items() == [(-2, 1), (-1, 1), (0, 1), (1, 1)]


def test_missing_rule_halts_without_counting_a_step():
    engine = Engine(machine_of(("A", 0, 1, "R", "B")))
    before = engine.step()
    configuration = engine.step()
    assert configuration.tape == before.tape
    assert configuration.head_position == before.head_position == 1
    assert configuration.is_halted
    assert configuration.step_count == 1
    assert configuration.halt_state == "B"
    assert configuration.current_state == "B"


def test_starting_in_halt_state():
    engine = Engine(TuringMachine("idle", [], initial_state=HALT))
    configuration = engine.step()
    assert configuration.is_halted
    assert configuration.step_count == 0
    assert configuration.halt_state == HALT


def test_missing_first_rule_leaves_tape_untouched():
    engine = Engine(machine_of(("A", 1, 1, "R", HALT)))
    configuration = engine.step()
    assert configuration.is_halted
    assert configuration.step_count == 0
    assert configuration.halt_state == "A"
    assert configuration.head_position == 0
    assert len(configuration.tape) == 0


def test_steps_after_halt_change_nothing():
    engine = Engine(SIGMA_2)
    halted = run_to_halt(engine)
    for _ in range(5):
        assert engine.step() == halted
    assert engine.step_count == 6
    assert engine.score == 4


def test_engine_without_machine_halts():
    configuration = Engine().step()
    assert configuration.is_halted
    assert configuration.step_count == 0


def test_blank_write_counts_as_visited_but_not_scored():
    engine = Engine(machine_of(("A", 0, 0, "R", HALT)))
    configuration = engine.step()
    assert len(configuration.tape) == 1
    assert configuration.score == 0


def test_unknown_direction_leaves_head_in_place():
    engine = Engine(machine_of(("A", 0, 1, "X", "B"), ("B", 1, 1, "R", HALT)))
    assert engine.step().head_position == 0
    configuration = engine.step()
    assert configuration.head_position == 1
    assert configuration.is_halted


def test_duplicate_rule_first_wins():
    engine = Engine(machine_of(("A", 0, 1, "R", HALT), ("A", 0, 0, "L", HALT)))
    configuration = engine.step()
    assert configuration.head_position == 1
    assert configuration.score == 1


def test_runs_are_deterministic():
    first = run_to_halt(Engine(SIGMA_4))
    second = run_to_halt(Engine(SIGMA_4))
    assert first == second


def test_score_matches_ones_on_tape():
    engine = Engine(SIGMA_4)
    while not engine.is_halted:
        configuration = engine.step()
        assert configuration.score == sum(1 for _, symbol in configuration.tape.items() if symbol == 1)


def test_snapshot_does_not_follow_engine():
    engine = Engine(SIGMA_2)
    before = engine.step()
    engine.step()
    engine.step()
    assert before.step_count == 1
    assert before.tape.items() == [(0, 1)]


def test_reset_restores_initial_configuration():
    engine = Engine(SIGMA_3)
    run_to_halt(engine)
    engine.reset()
    first = engine.snapshot()
    engine.reset()
    assert engine.snapshot() == first
    assert first.step_count == 0
    assert first.current_state == "A"
    assert first.head_position == 0
    assert not first.is_halted
    assert len(first.tape) == 0


def test_load_replaces_machine_and_resets():
    engine = Engine(SIGMA_2)
    engine.step()
    engine.load(SIMPLE_TEST)
    assert engine.machine is SIMPLE_TEST
    assert engine.step_count == 0


def test_update_rules_keeps_configuration():
    engine = Engine(SIGMA_2)
    engine.step()
    engine.update_rules([Rule("B", 0, 1, "R", HALT)])
    assert engine.step_count == 1
    assert engine.head == 1
    configuration = engine.step()
    assert configuration.is_halted
    assert configuration.head_position == 2


def test_advance_stops_at_halt():
    engine = Engine(SIGMA_4)
    assert engine.advance(50) == 50
    assert engine.advance(1_000) == 57
    assert engine.is_halted
    assert engine.advance(10) == 0


def test_advance_does_not_count_missing_rule_halt():
    engine = Engine(machine_of(("A", 0, 1, "R", "B")))
    assert engine.advance(10) == 1
    assert engine.is_halted


def test_subscribers_receive_events():
    engine = Engine()
    events = []
    engine.subscribe(events.append)
    engine.load(SIGMA_2)
    engine.step()
    engine.advance(10)
    engine.reset()
    assert [event.kind for event in events] == ["load", "step", "halt", "reset"]
    assert events[1].rule == Rule("A", 0, 1, "R", "B")
    assert events[2].configuration.step_count == 6


def test_unsubscribe_stops_events():
    engine = Engine(SIGMA_2)
    events = []
    listener = engine.subscribe(events.append)
    engine.step()
    engine.unsubscribe(listener)
    engine.step()
    assert len(events) == 1
