import argparse
import hashlib
import json
import logging

import numpy as np

from simulator.machine import HALT, Rule, TuringMachine, state_letter
from simulator.parser import format_machine

log = logging.getLogger(__name__)

# === CONFIGURABLE ===
GENERATION_CONFIG = {
    "halt_probability": 0.3,
    "left_probability": 0.4,
    "right_probability": 0.4,
    "no_move_probability": 0.2,
    "max_states": 10,
}

SYMBOLS = [0, 1]
DIRECTION_CHOICES = ["L", "R", "N"]

# Chance of leaving the current state when the halt state was not picked
CHANGE_STATE_PROBABILITY = 0.7
# Halt chance for a state that has no halting transition yet
FIRST_HALT_PROBABILITY = 0.5


def hash_ruleset(rules):
    """Hash a rule list deterministically."""
    rules_json = json.dumps([list(rule) for rule in rules], sort_keys=True, default=str)
    return hashlib.sha256(rules_json.encode("utf-8")).hexdigest()


def generate_states(num_states, config=GENERATION_CONFIG):
    if num_states < 1:
        raise ValueError("Number of states must be at least 1")
    if num_states > config["max_states"]:
        raise ValueError(f"Number of states cannot exceed {config['max_states']}")
    return [state_letter(i) for i in range(num_states)]


def random_direction(rng, config=GENERATION_CONFIG):
    weights = [config["left_probability"], config["right_probability"], config["no_move_probability"]]
    return DIRECTION_CHOICES[rng.choice(len(DIRECTION_CHOICES), p=weights)]


def choose_next_state(rng, current_state, states, config=GENERATION_CONFIG):
    if rng.random() < config["halt_probability"]:
        return HALT

    # Avoid staying in the same state too often
    others = [s for s in states if s != current_state]
    if others and rng.random() < CHANGE_STATE_PROBABILITY:
        return others[rng.integers(len(others))]
    return states[rng.integers(len(states))]


def choose_weighted_next_state(rng, current_state, states, usage, halt_rules, config=GENERATION_CONFIG):
    halt_probability = FIRST_HALT_PROBABILITY if halt_rules[current_state] == 0 else config["halt_probability"]
    if rng.random() < halt_probability:
        return HALT

    # Prefer states that few rules point at yet
    weights = np.array([1.0 / (usage[s] + 1) for s in states])
    return states[rng.choice(len(states), p=weights / weights.sum())]


def _build_machine(num_states, rules, kind):
    return TuringMachine(
        f"Busy Beaver {num_states} states ({kind})",
        rules,
        initial_state="A",
        halt_states=(HALT,),
        alphabet=SYMBOLS,
        description=f"Randomly generated Busy Beaver machine with {num_states} states",
    )


def generate_random_machine(num_states, rng=None, config=GENERATION_CONFIG):
    """One rule for every (state, symbol) pair, with random writes, moves and targets."""
    rng = rng if rng is not None else np.random.default_rng()
    states = generate_states(num_states, config)

    rules = []
    for state in states:
        for symbol in SYMBOLS:
            write_symbol = SYMBOLS[rng.integers(len(SYMBOLS))]
            direction = random_direction(rng, config)
            next_state = choose_next_state(rng, state, states, config)
            rules.append(Rule(state, symbol, write_symbol, direction, next_state))
    return _build_machine(num_states, rules, "generated")


def generate_optimized_machine(num_states, rng=None, config=GENERATION_CONFIG):
    """Like generate_random_machine, but steers away from trivial loops."""
    rng = rng if rng is not None else np.random.default_rng()
    states = generate_states(num_states, config)
    usage = {state: 0 for state in states}
    halt_rules = {state: 0 for state in states}

    rules = []
    for state in states:
        for symbol in SYMBOLS:
            write_symbol = SYMBOLS[rng.integers(len(SYMBOLS))]
            direction = random_direction(rng, config)
            next_state = choose_weighted_next_state(rng, state, states, usage, halt_rules, config)
            rules.append(Rule(state, symbol, write_symbol, direction, next_state))

            if next_state == HALT:
                halt_rules[state] += 1
            else:
                usage[next_state] += 1
    return _build_machine(num_states, rules, "optimized")


def generate_machines(num_states, count, rng=None, optimized=False, config=GENERATION_CONFIG, max_attempts=100):
    """Generate `count` machines with distinct rule sets, numbered #1..#count."""
    rng = rng if rng is not None else np.random.default_rng()
    generate = generate_optimized_machine if optimized else generate_random_machine

    machines = []
    seen_hashes = set()
    attempts = 0
    while len(machines) < count and attempts < count * max_attempts:
        attempts += 1
        machine = generate(num_states, rng, config)
        ruleset_hash = hash_ruleset(machine.rules)
        if ruleset_hash in seen_hashes:
            continue
        seen_hashes.add(ruleset_hash)
        machines.append(TuringMachine(
            f"{machine.name} #{len(machines) + 1}",
            machine.rules,
            initial_state=machine.initial_state,
            halt_states=machine.halt_states,
            alphabet=machine.alphabet,
            description=machine.description,
        ))

    if len(machines) < count:
        log.warning("Only found %d distinct machines out of %d requested", len(machines), count)
    return machines


def validate_generated_machine(machine, num_states):
    """Return (is_valid, warnings, issues) for a generated machine."""
    warnings = []
    issues = []
    if not machine.rules:
        issues.append("No rules defined")
        return False, warnings, issues

    sources = {rule.current_state for rule in machine.rules}
    halt_states = sorted({rule.next_state for rule in machine.rules if rule.next_state not in sources}, key=str)
    if not halt_states:
        issues.append("No halt state reachable")
    elif len(halt_states) > 1:
        warnings.append(f"Several halt states detected: {', '.join(map(str, halt_states))}")

    expected = num_states * len(SYMBOLS)
    if len(machine.rules) != expected:
        warnings.append(f"Unexpected rule count: {len(machine.rules)} instead of {expected}")

    return not issues, warnings, issues


# === CLI WRAPPER ===
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Random Busy Beaver machine generator")
    parser.add_argument("--states", type=int, default=3, help="Number of machine states (default=3)")
    parser.add_argument("--count", type=int, default=1, help="Number of machines to generate (default=1)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--optimized", action="store_true", help="Use the loop-avoiding heuristics")
    args = parser.parse_args()

    for generated in generate_machines(args.states, args.count, np.random.default_rng(args.seed), args.optimized):
        print(format_machine(generated))
