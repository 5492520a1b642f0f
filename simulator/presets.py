from simulator.machine import HALT, Rule, TuringMachine


def _machine(name, description, rows):
    rules = [Rule(*row) for row in rows]
    return TuringMachine(name, rules, initial_state="A", halt_states=(HALT,), alphabet=(0, 1), description=description)


SIMPLE_TEST = _machine(
    "Simple test machine",
    "Writes a single 1 and halts. Useful for checking the simulator.",
    [
        ("A", 0, 1, "R", HALT),
        ("A", 1, 1, "R", HALT),
    ],
)

# Rado, 1962
SIGMA_2 = _machine(
    "Σ(2) - 2 states (6 steps, 4 ones)",
    "Optimal 2-state Busy Beaver: 4 ones in exactly 6 steps.",
    [
        ("A", 0, 1, "R", "B"),
        ("A", 1, 1, "L", "B"),
        ("B", 0, 1, "L", "A"),
        ("B", 1, 1, "R", HALT),
    ],
)

# Lin & Rado, 1965
SIGMA_3 = _machine(
    "Σ(3) - 3 states (14 steps, 6 ones)",
    "Optimal 3-state Busy Beaver: 6 ones in exactly 14 steps.",
    [
        ("A", 0, 1, "R", "B"),
        ("A", 1, 1, "R", HALT),
        ("B", 0, 0, "R", "C"),
        ("B", 1, 1, "R", "B"),
        ("C", 0, 1, "L", "C"),
        ("C", 1, 1, "L", "A"),
    ],
)

# Brady, 1975
SIGMA_4 = _machine(
    "Σ(4) - 4 states (107 steps, 13 ones)",
    "Optimal 4-state Busy Beaver: 13 ones in exactly 107 steps.",
    [
        ("A", 0, 1, "R", "B"),
        ("A", 1, 1, "L", "B"),
        ("B", 0, 1, "L", "A"),
        ("B", 1, 0, "L", "C"),
        ("C", 0, 1, "R", HALT),
        ("C", 1, 1, "L", "D"),
        ("D", 0, 1, "R", "D"),
        ("D", 1, 0, "R", "A"),
    ],
)

# Marxen & Buntrock, 1989; proven optimal in 2024
SIGMA_5 = _machine(
    "Σ(5) - 5 states (47M steps, 4098 ones)",
    "Optimal 5-state Busy Beaver: 4098 ones in exactly 47,176,870 steps.",
    [
        ("A", 0, 1, "R", "B"),
        ("A", 1, 1, "L", "C"),
        ("B", 0, 1, "R", "C"),
        ("B", 1, 1, "R", "B"),
        ("C", 0, 1, "R", "D"),
        ("C", 1, 0, "L", "E"),
        ("D", 0, 1, "L", "A"),
        ("D", 1, 1, "L", "D"),
        ("E", 0, 1, "R", HALT),
        ("E", 1, 0, "L", "A"),
    ],
)

PRESETS = {
    "simple": SIMPLE_TEST,
    "sigma2": SIGMA_2,
    "sigma3": SIGMA_3,
    "sigma4": SIGMA_4,
    "sigma5": SIGMA_5,
}

KNOWN_SCORES = {
    1: {"score": 1, "year": 1962, "discoverer": "Tibor Radó"},
    2: {"score": 4, "year": 1962, "discoverer": "Tibor Radó"},
    3: {"score": 6, "year": 1965, "discoverer": "Lin & Rado"},
    4: {"score": 13, "year": 1975, "discoverer": "Brady"},
    5: {"score": 4098, "year": 1989, "discoverer": "Marxen & Buntrock"},
    # Lower bound, kept as text
    6: {"score": "≈4.6e1439", "year": 1997, "discoverer": "Marxen & Buntrock"},
}


def get_preset(key):
    if key not in PRESETS:
        raise KeyError(f"Unknown preset {key!r}. Choose from: {', '.join(PRESETS)}")
    return PRESETS[key]


def known_score(num_states):
    info = KNOWN_SCORES.get(num_states)
    return info["score"] if info else None


def known_score_info(num_states):
    return KNOWN_SCORES.get(num_states)
