import pytest

from simulator.machine import (
    HALT,
    Rule,
    TransitionTable,
    TuringMachine,
    parse_standard_format,
    to_standard_format,
)
from simulator.presets import SIGMA_2, SIGMA_4


def test_rule_offsets():
    assert Rule("A", 0, 1, "L", "B").offset == -1
    assert Rule("A", 0, 1, "R", "B").offset == 1
    assert Rule("A", 0, 1, "N", "B").offset == 0
    # Unknown tokens do not move the head
    assert Rule("A", 0, 1, "X", "B").offset == 0


def test_rule_from_record_dict_and_list():
    record = {"currentState": "A", "readSymbol": 0, "writeSymbol": 1, "direction": "r", "nextState": "B"}
    assert Rule.from_record(record) == Rule("A", 0, 1, "R", "B")
    assert Rule.from_record(["A", 0, 1, "L", "B"]) == Rule("A", 0, 1, "L", "B")
    assert Rule("A", 0, 1, "R", "B").to_record() == {**record, "direction": "R"}


def test_rule_from_record_rejects_bad_input():
    with pytest.raises(ValueError):
        Rule.from_record({"currentState": "A"})
    with pytest.raises(ValueError):
        Rule.from_record(["A", 0, 1])
    with pytest.raises(ValueError):
        Rule.from_record("A 0 -> 1 R B")


def test_transition_table_first_rule_wins():
    first = Rule("A", 0, 1, "R", "B")
    second = Rule("A", 0, 0, "L", "C")
    table = TransitionTable([first, second])
    assert table.lookup("A", 0) == first
    assert table.lookup("A", 1) is None
    assert table.duplicates == [second]
    assert len(table) == 1


def test_machine_states_in_order_of_appearance():
    assert SIGMA_4.states == ["A", "B", "C", HALT, "D"]


def test_machine_record_round_trip():
    restored = TuringMachine.from_record(SIGMA_2.to_record())
    assert restored == SIGMA_2
    assert restored.halt_states == frozenset({HALT})


def test_machine_record_defaults():
    machine = TuringMachine.from_record({"rules": [["A", 0, 1, "R", "halt"]]})
    assert machine.name == "Unnamed machine"
    assert machine.initial_state == "A"
    assert machine.halt_states == frozenset({HALT})
    assert machine.alphabet == frozenset({0, 1})


def test_with_rules_keeps_metadata():
    changed = SIGMA_2.with_rules(SIGMA_2.rules[:2])
    assert changed.name == SIGMA_2.name
    assert len(changed.rules) == 2
    assert len(SIGMA_2.rules) == 4


def test_parse_standard_format_matches_preset():
    machine = parse_standard_format("1RB1LB_1LA1RZ")
    assert machine.rules == SIGMA_2.rules
    assert machine.initial_state == "A"


def test_parse_standard_format_undefined_transition():
    machine = parse_standard_format("1RB---_1LA1RZ", name="gap")
    assert machine.name == "gap"
    assert len(machine.rules) == 3
    assert TransitionTable(machine.rules).lookup("A", 1) is None


@pytest.mark.parametrize("text", ["", "1RB1L", "1RB1LB_1LA", "1XB1LB_1LA1RZ"])
def test_parse_standard_format_rejects_bad_text(text):
    with pytest.raises(ValueError):
        parse_standard_format(text)


def test_to_standard_format():
    assert to_standard_format(SIGMA_2) == "1RB1LB_1LA1RZ"
    assert to_standard_format(SIGMA_4) == "1RB1LB_1LA0LC_1RZ1LD_1RD0RA"


def test_machine_record_keeps_empty_halt_states():
    record = {**SIGMA_2.to_record(), "haltStates": []}
    machine = TuringMachine.from_record(record)
    assert machine.halt_states == frozenset()
    assert machine.to_record()["haltStates"] == []


def test_to_standard_format_starts_from_initial_state():
    reordered = TuringMachine("reordered", SIGMA_2.rules[2:] + SIGMA_2.rules[:2], initial_state="A")
    assert to_standard_format(reordered) == "1RB1LB_1LA1RZ"

    relabelled = TuringMachine(
        "relabelled",
        [Rule("Q", 0, 1, "R", "P"), Rule("Q", 1, 1, "L", "P"), Rule("P", 0, 1, "L", "Q"), Rule("P", 1, 1, "R", HALT)],
        initial_state="P",
    )
    assert to_standard_format(relabelled) == "1LB1RZ_1RA1LA"
