import logging
from dataclasses import dataclass

from simulator.machine import TransitionTable
from simulator.tape import Tape

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MachineConfiguration:
    current_state: object
    tape: Tape
    head_position: int
    step_count: int
    is_halted: bool
    halt_state: object = None

    @property
    def score(self):
        return self.tape.count(1)


@dataclass(frozen=True)
class MachineEvent:
    kind: str  # load, reset, rules, step, halt
    configuration: MachineConfiguration
    rule: object = None


class Engine:
    """Executes one loaded machine, one atomic step at a time.

    The engine owns its configuration. Observers either poll `snapshot()` or
    `subscribe()` to events; they never get the live tape.
    """

    def __init__(self, machine=None):
        self.machine = None
        self.table = TransitionTable()
        self._listeners = []
        self.tape = Tape()
        self.head = 0
        self.current_state = None
        self.step_count = 0
        self.halted = False
        self.halt_state = None
        if machine is not None:
            self.load(machine)

    # === Commands ===
    def load(self, machine):
        self.machine = machine
        self.table = TransitionTable(machine.rules)
        if self.table.duplicates:
            log.debug("Machine %r has %d duplicate rules; first match wins", machine.name, len(self.table.duplicates))
        self._reset_configuration()
        log.info("Loaded machine %r (%d rules)", machine.name, len(machine.rules))
        self._emit("load")

    def reset(self):
        self._reset_configuration()
        self._emit("reset")

    def update_rules(self, rules):
        """Swap the rule set without touching the running configuration."""
        if self.machine is None:
            return
        self.machine = self.machine.with_rules(rules)
        self.table = TransitionTable(self.machine.rules)
        self._emit("rules")

    def step(self):
        if not self.halted:
            rule = self._step()
            self._emit("halt" if self.halted else "step", rule)
        return self.snapshot()

    def advance(self, limit):
        """Apply up to `limit` steps, stopping early on halt. Returns steps applied."""
        applied = 0
        rule = None
        while applied < limit and not self.halted:
            before = self.step_count
            rule = self._step()
            applied += self.step_count - before
        if applied or self.halted:
            self._emit("halt" if self.halted else "step", rule)
        return applied

    # === Queries ===
    @property
    def is_halted(self):
        return self.halted

    @property
    def score(self):
        return self.tape.count(1)

    def snapshot(self):
        return MachineConfiguration(
            current_state=self.current_state,
            tape=self.tape.copy(),
            head_position=self.head,
            step_count=self.step_count,
            is_halted=self.halted,
            halt_state=self.halt_state,
        )

    def subscribe(self, listener):
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # === Internals ===
    def _reset_configuration(self):
        self.tape = Tape()
        self.head = 0
        self.current_state = self.machine.initial_state if self.machine else None
        self.step_count = 0
        self.halted = False
        self.halt_state = None

    def _step(self):
        if self.machine is None or self.current_state in self.machine.halt_states:
            self._halt(self.current_state)
            return None

        current_symbol = self.tape.read(self.head)
        rule = self.table.lookup(self.current_state, current_symbol)
        if rule is None:
            # Undefined transition: terminal, and not counted as a step.
            self._halt(self.current_state)
            return None

        self.tape.write(self.head, rule.write_symbol)
        self.head += rule.offset
        self.current_state = rule.next_state
        self.step_count += 1
        if rule.next_state in self.machine.halt_states:
            self._halt(rule.next_state)
        return rule

    def _halt(self, state):
        self.halted = True
        self.halt_state = state
        log.debug("Halted in state %r after %d steps", state, self.step_count)

    def _emit(self, kind, rule=None):
        if not self._listeners:
            return
        event = MachineEvent(kind, self.snapshot(), rule)
        for listener in list(self._listeners):
            listener(event)
