from simulator.machine import HALT, Rule
from simulator.presets import SIGMA_2
from simulator.validator import find_self_loops, validate_rules, validate_single_rule


def test_champion_is_valid():
    report = validate_rules(SIGMA_2.rules)
    assert report.is_valid
    assert report.warnings == []
    assert "Halt state detected: halt" in report.info
    assert "4 rules, 2 active states, 2 symbols" in report.info


def test_no_rules():
    report = validate_rules([])
    assert not report.is_valid
    assert report.errors == ["No rules defined. The machine cannot run."]


def test_duplicate_rule_is_an_error():
    report = validate_rules([Rule("A", 0, 1, "R", HALT), Rule("A", 0, 0, "L", HALT)])
    assert any(e.startswith("Duplicate rule: state A + symbol 0") for e in report.errors)


def test_invalid_direction_is_an_error():
    report = validate_rules([Rule("A", 0, 1, "X", HALT)])
    assert any("Invalid direction" in e for e in report.errors)


def test_missing_halt_state_is_an_error():
    report = validate_rules([Rule("A", 0, 1, "R", "B"), Rule("B", 0, 1, "L", "A")])
    assert "No halt state detected. The machine may run forever." in report.errors


def test_warnings():
    rules = [
        Rule("A", 0, 1, "R", "A"),
        Rule("A", 1, 1, "L", "H1"),
        Rule("B", 0, 2, "L", "H2"),
    ]
    report = validate_rules(rules)
    assert report.is_valid
    assert "Several halt states detected: H1, H2" in report.warnings
    assert "Missing rule: state B + symbol 1" in report.warnings
    assert any(w.startswith("Non-standard symbols") for w in report.warnings)
    assert "Potential loops in states: A" in report.warnings


def test_findings_order():
    report = validate_rules([Rule("A", 0, 1, "X", "A")])
    severities = [severity for severity, _ in report.findings()]
    assert severities == sorted(severities, key=["error", "warning", "info"].index)


def test_find_self_loops():
    assert find_self_loops(SIGMA_2.rules) == []
    assert find_self_loops([Rule("C", 0, 1, "L", "C"), Rule("C", 1, 1, "L", "C")]) == ["C"]


def test_validate_single_rule():
    report = validate_single_rule(Rule("A", 0, 0, "N", "A"), SIGMA_2.rules)
    assert report.errors == ["Conflicts with existing rule: A 0 -> 1 R B"]
    assert report.warnings == ["This rule loops (the state points to itself)"]

    report = validate_single_rule(Rule("C", 2, 1, "Q", "A"), SIGMA_2.rules)
    assert len(report.errors) == 1
    assert report.warnings == ["Non-standard read symbol: 2"]
