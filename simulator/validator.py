from dataclasses import dataclass, field

from simulator.machine import DIRECTIONS
from simulator.parser import format_rule

BINARY = {0, 1}


@dataclass
class ValidationReport:
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    info: list = field(default_factory=list)

    @property
    def is_valid(self):
        return not self.errors

    def findings(self):
        """(severity, message) pairs, errors first."""
        return (
            [("error", m) for m in self.errors]
            + [("warning", m) for m in self.warnings]
            + [("info", m) for m in self.info]
        )


def find_self_loops(rules):
    loops = []
    for rule in rules:
        if rule.current_state == rule.next_state and rule.current_state not in loops:
            loops.append(rule.current_state)
    return loops


def validate_rules(rules):
    """Check a rule collection without running it. Never raises."""
    report = ValidationReport()
    rules = list(rules)
    if not rules:
        report.errors.append("No rules defined. The machine cannot run.")
        return report

    symbols = []
    sources = []
    targets = []
    seen = {}
    for rule in rules:
        for symbol in (rule.read_symbol, rule.write_symbol):
            if symbol not in symbols:
                symbols.append(symbol)
        if rule.current_state not in sources:
            sources.append(rule.current_state)
        if rule.next_state not in targets:
            targets.append(rule.next_state)

        if rule.key in seen:
            report.errors.append(f"Duplicate rule: state {rule.current_state} + symbol {rule.read_symbol}")
        else:
            seen[rule.key] = rule

        if rule.direction not in DIRECTIONS:
            report.errors.append(
                f'Invalid direction "{rule.direction}" in rule {rule.current_state} -> {rule.next_state}'
            )

    halt_states = [state for state in targets if state not in sources]
    if not halt_states:
        report.errors.append("No halt state detected. The machine may run forever.")
    elif len(halt_states) == 1:
        report.info.append(f"Halt state detected: {halt_states[0]}")
    else:
        report.warnings.append(f"Several halt states detected: {', '.join(map(str, halt_states))}")

    binary_symbols = [s for s in symbols if s in BINARY]
    for state in sources:
        for symbol in binary_symbols:
            if (state, symbol) not in seen:
                report.warnings.append(f"Missing rule: state {state} + symbol {symbol}")

    if set(symbols) != BINARY:
        report.warnings.append(
            f"Non-standard symbols: {', '.join(map(str, symbols))}. Busy Beaver machines normally use 0 and 1."
        )

    loops = find_self_loops(rules)
    if loops:
        report.warnings.append(f"Potential loops in states: {', '.join(map(str, loops))}")

    report.info.append(f"{len(rules)} rules, {len(sources)} active states, {len(symbols)} symbols")
    return report


def validate_single_rule(rule, existing_rules):
    """Check one edited rule against the rules it would join."""
    report = ValidationReport()

    duplicate = next((r for r in existing_rules if r.key == rule.key), None)
    if duplicate is not None:
        report.errors.append(f"Conflicts with existing rule: {format_rule(duplicate)}")

    if rule.direction not in DIRECTIONS:
        report.errors.append(f'Invalid direction "{rule.direction}". Use L (left), R (right) or N (no move).')

    if rule.read_symbol not in BINARY:
        report.warnings.append(f"Non-standard read symbol: {rule.read_symbol}")
    if rule.write_symbol not in BINARY:
        report.warnings.append(f"Non-standard write symbol: {rule.write_symbol}")

    if rule.current_state == rule.next_state:
        report.warnings.append("This rule loops (the state points to itself)")

    return report
