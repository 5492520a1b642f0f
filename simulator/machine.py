from typing import NamedTuple

# Head offset for each direction token
DIRECTIONS = {"L": -1, "R": 1, "N": 0}

HALT = "halt"


class Rule(NamedTuple):
    current_state: object
    read_symbol: object
    write_symbol: object
    direction: str
    next_state: object

    @property
    def key(self):
        return (self.current_state, self.read_symbol)

    @property
    def offset(self):
        # Unknown direction tokens leave the head in place; validation reports them.
        return DIRECTIONS.get(self.direction, 0)

    def to_record(self):
        return {
            "currentState": self.current_state,
            "readSymbol": self.read_symbol,
            "writeSymbol": self.write_symbol,
            "direction": self.direction,
            "nextState": self.next_state,
        }

    @classmethod
    def from_record(cls, record):
        if isinstance(record, (list, tuple)):
            if len(record) != 5:
                raise ValueError(f"Rule needs 5 fields, got {len(record)}: {record!r}")
            current_state, read_symbol, write_symbol, direction, next_state = record
        elif isinstance(record, dict):
            try:
                current_state = record["currentState"]
                read_symbol = record["readSymbol"]
                write_symbol = record["writeSymbol"]
                direction = record["direction"]
                next_state = record["nextState"]
            except KeyError as e:
                raise ValueError(f"Rule is missing field {e.args[0]!r}: {record!r}") from e
        else:
            raise ValueError(f"Unsupported rule record: {record!r}")
        if isinstance(direction, str):
            direction = direction.upper()
        return cls(current_state, read_symbol, write_symbol, direction, next_state)


class TransitionTable:
    """Rule lookup keyed by (state, symbol). The first rule for a key wins."""

    def __init__(self, rules=()):
        self._rules = {}
        self.duplicates = []
        for rule in rules:
            if rule.key in self._rules:
                self.duplicates.append(rule)
            else:
                self._rules[rule.key] = rule

    def lookup(self, state, symbol):
        return self._rules.get((state, symbol))

    def __len__(self):
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules.values())


class TuringMachine:
    """Read-only machine definition. Editing rules means building a new instance."""

    def __init__(self, name, rules, initial_state="A", halt_states=(HALT,), alphabet=(0, 1), description=""):
        self.name = name
        self.description = description or ""
        self.rules = tuple(rules)
        self.initial_state = initial_state
        self.halt_states = frozenset(halt_states)
        self.alphabet = frozenset(alphabet)

    @property
    def states(self):
        """Every state named by a rule, in order of first appearance."""
        seen = {}
        for rule in self.rules:
            seen.setdefault(rule.current_state, None)
            seen.setdefault(rule.next_state, None)
        return list(seen)

    def with_rules(self, rules):
        return TuringMachine(
            self.name,
            rules,
            initial_state=self.initial_state,
            halt_states=self.halt_states,
            alphabet=self.alphabet,
            description=self.description,
        )

    def to_record(self):
        return {
            "name": self.name,
            "description": self.description,
            "rules": [rule.to_record() for rule in self.rules],
            "initialState": self.initial_state,
            "haltStates": sorted(self.halt_states, key=str),
            "alphabet": sorted(self.alphabet, key=str),
        }

    @classmethod
    def from_record(cls, record):
        if not isinstance(record, dict):
            raise ValueError(f"Machine record must be an object, got {type(record).__name__}")
        rules = record.get("rules") or []
        halt_states = record.get("haltStates")
        if not isinstance(rules, list):
            raise ValueError("Machine record 'rules' must be a list")
        return cls(
            record.get("name") or "Unnamed machine",
            [Rule.from_record(r) for r in rules],
            initial_state=record.get("initialState", "A"),
            halt_states=[HALT] if halt_states is None else halt_states,
            alphabet=record.get("alphabet") or [0, 1],
            description=record.get("description", ""),
        )

    def __eq__(self, other):
        if not isinstance(other, TuringMachine):
            return NotImplemented
        return self.to_record() == other.to_record()

    def __repr__(self):
        return f"TuringMachine({self.name!r}, {len(self.rules)} rules)"


# === Standard one-line format (e.g. 1RB1LB_1LA1RZ) ===
def state_letter(index):
    return chr(ord("A") + index)


def parse_standard_format(text, name=None):
    """Parse the underscore-separated format used by bbchallenge.

    Rows are states A, B, C...; each row holds one `<write><dir><target>` triple
    per read symbol. `---` leaves the transition undefined, and any target
    letter that is not a row of the table is treated as the halt state.
    """
    rows = text.strip().split("_")
    width = len(rows[0])
    if width == 0 or width % 3 or any(len(row) != width for row in rows):
        raise ValueError(f"Not in standard TM text format: {text!r}")

    row_states = [state_letter(i) for i in range(len(rows))]
    rules = []
    for index, row in enumerate(rows):
        for symbol, (write, direction, target) in enumerate(zip(row[::3], row[1::3], row[2::3])):
            if target == "-":
                continue
            if not write.isdigit() or direction.upper() not in DIRECTIONS:
                raise ValueError(f"Bad transition {write}{direction}{target} in row {row_states[index]}")
            next_state = target.upper() if target.upper() in row_states else HALT
            rules.append(Rule(row_states[index], symbol, int(write), direction.upper(), next_state))

    symbols = range(width // 3)
    return TuringMachine(name or text.strip(), rules, initial_state="A", halt_states=(HALT,), alphabet=symbols)


def to_standard_format(machine):
    table = TransitionTable(machine.rules)
    # The initial state is row A, the start row of the format
    row_states = [s for s in machine.states if s not in machine.halt_states and s != machine.initial_state]
    if machine.initial_state not in machine.halt_states:
        row_states.insert(0, machine.initial_state)
    symbols = sorted(s for s in machine.alphabet if isinstance(s, int))
    letters = {state: state_letter(i) for i, state in enumerate(row_states)}

    rows = []
    for state in row_states:
        row = []
        for symbol in symbols:
            rule = table.lookup(state, symbol)
            if rule is None:
                row.append("---")
            else:
                target = letters.get(rule.next_state, "Z")
                row.append(f"{rule.write_symbol}{rule.direction}{target}")
        rows.append("".join(row))
    return "_".join(rows)
