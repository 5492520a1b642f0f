import re
from dataclasses import dataclass

from simulator.machine import DIRECTIONS, Rule, TuringMachine

ARROW = "->"

METADATA_PATTERN = re.compile(r"^(Name|Description|States|Symbols|Initial)\s*:\s*(.*)$", re.IGNORECASE)


@dataclass
class ParseResult:
    success: bool
    data: object = None
    error: str = ""
    line: int | None = None

    @classmethod
    def ok(cls, data):
        return cls(True, data)

    @classmethod
    def fail(cls, error, line=None):
        return cls(False, error=error, line=line)


class ParseError(ValueError):
    def __init__(self, message, line=None):
        super().__init__(message)
        self.line = line


def parse_state(token):
    if token.isdecimal():
        return int(token)
    if not token:
        raise ParseError("Invalid state: empty token")
    return token


def parse_symbol(token):
    if token in ("0", "1"):
        return int(token)
    if not token:
        raise ParseError("Invalid symbol: empty token")
    return token


def parse_direction(token):
    direction = token.upper()
    if direction not in DIRECTIONS:
        raise ParseError(f'Invalid direction. Expected L, R or N, got "{token}"')
    return direction


def parse_rule(line):
    """Parse `STATE SYMBOL -> SYMBOL DIRECTION STATE` into a Rule. Raises ParseError."""
    clean = line.strip()
    if not clean or clean.startswith("#"):
        raise ParseError("Empty line or comment")

    parts = clean.split()
    if len(parts) != 6:
        raise ParseError(f'Invalid format. Expected "state symbol -> symbol direction state", got "{clean}"')

    current_state, read_symbol, arrow, write_symbol, direction, next_state = parts
    if arrow != ARROW:
        raise ParseError(f'Invalid arrow. Expected "{ARROW}", got "{arrow}"')

    return Rule(
        parse_state(current_state),
        parse_symbol(read_symbol),
        parse_symbol(write_symbol),
        parse_direction(direction),
        parse_state(next_state),
    )


def parse_rule_safe(line):
    try:
        return ParseResult.ok(parse_rule(line))
    except ParseError as e:
        return ParseResult.fail(str(e), e.line)


def extract_metadata(text):
    metadata = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.startswith("#"):
            continue
        match = METADATA_PATTERN.match(stripped[1:].strip())
        if not match:
            continue
        key, value = match.group(1).lower(), match.group(2).strip()
        if key in ("states", "symbols"):
            if value.isdecimal():
                metadata[key] = int(value)
        elif key == "initial":
            metadata[key] = parse_state(value) if value else None
        else:
            metadata[key] = value
    return metadata


def infer_halt_states(rules):
    """States reached by some rule but never the source of one."""
    sources = {rule.current_state for rule in rules}
    halt_states = []
    for rule in rules:
        if rule.next_state not in sources and rule.next_state not in halt_states:
            halt_states.append(rule.next_state)
    return halt_states


def parse_machine(text, name=None):
    """Parse a whole machine description. Raises ParseError listing every bad line."""
    rules = []
    errors = []
    first_error_line = None
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            rules.append(parse_rule(stripped))
        except ParseError as e:
            errors.append(f"Line {number}: {e}")
            first_error_line = first_error_line or number

    if errors:
        raise ParseError("Parse errors:\n" + "\n".join(errors), first_error_line)
    if not rules:
        raise ParseError("No rules found in text")

    metadata = extract_metadata(text)
    symbols = {0}
    for rule in rules:
        symbols.update((rule.read_symbol, rule.write_symbol))

    initial_state = metadata.get("initial")
    if initial_state is None:
        initial_state = rules[0].current_state

    active_states = {rule.current_state for rule in rules}
    return TuringMachine(
        name or metadata.get("name") or f"Busy Beaver {len(active_states)} states",
        rules,
        initial_state=initial_state,
        halt_states=infer_halt_states(rules),
        alphabet=symbols,
        description=metadata.get("description", ""),
    )


def parse_machine_safe(text, name=None):
    try:
        return ParseResult.ok(parse_machine(text, name))
    except ParseError as e:
        return ParseResult.fail(str(e), e.line)


def format_rule(rule):
    return f"{rule.current_state} {rule.read_symbol} {ARROW} {rule.write_symbol} {rule.direction} {rule.next_state}"


def format_machine(machine):
    lines = [f"# Name: {machine.name}"]
    if machine.description:
        lines.append(f"# Description: {machine.description}")
    active = [s for s in machine.states if s not in machine.halt_states]
    lines.append(f"# States: {len(active)}")
    lines.append(f"# Symbols: {len(machine.alphabet)}")
    lines.append(f"# Initial: {machine.initial_state}")
    lines.extend(format_rule(rule) for rule in machine.rules)
    return "\n".join(lines) + "\n"
