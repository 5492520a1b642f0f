import argparse

from rich.console import Console
from rich.table import Table

from simulator.machine import TransitionTable
from simulator.parser import parse_machine_safe
from simulator.presets import PRESETS
from simulator.validator import validate_rules

SEVERITY_STYLES = {"error": "red", "warning": "yellow", "info": "cyan"}


def transition_rows(machine):
    """State x symbol grid in compact Busy Beaver notation (e.g. 1RB), HALT for undefined."""
    table = TransitionTable(machine.rules)
    symbols = sorted(machine.alphabet, key=str)
    rows = []
    for state in machine.states:
        if state in machine.halt_states:
            continue
        row = [str(state)]
        for symbol in symbols:
            rule = table.lookup(state, symbol)
            if rule is None:
                row.append("HALT")
            else:
                next_state = "H" if rule.next_state in machine.halt_states else rule.next_state
                row.append(f"{rule.write_symbol}{rule.direction}{next_state}")
        rows.append(row)
    return symbols, rows


def pretty_print_ruleset(machine, console=None):
    """Print the transition table of `machine` as a rich table."""
    console = console or Console()
    symbols, rows = transition_rows(machine)

    table = Table(title=f"Transition Table: {machine.name}")
    table.add_column("State", justify="center")
    for symbol in symbols:
        table.add_column(str(symbol), justify="center")
    for row in rows:
        table.add_row(*row)
    console.print(table)


def latex_table(machine):
    symbols, rows = transition_rows(machine)
    lines = [r"\begin{array}{c|" + "c" * len(symbols) + "}"]
    lines.append("State/Symbol & " + " & ".join(f"\\text{{{s}}}" for s in symbols) + r" \\ \hline")
    for row in rows:
        lines.append(" & ".join(row) + r" \\")
    lines.append(r"\end{array}")
    return "\n".join(lines)


def print_validation(rules, console=None):
    console = console or Console()
    report = validate_rules(rules)
    for severity, message in report.findings():
        style = SEVERITY_STYLES[severity]
        console.print(f"[{style}]{severity.upper()}[/{style}] {message}")
    if report.is_valid:
        console.print("[green]All rules are valid.[/green]")
    return report


def main():
    parser = argparse.ArgumentParser(description="Busy Beaver Ruleset Inspector")
    parser.add_argument("--preset", choices=list(PRESETS), help="Built-in machine to inspect")
    parser.add_argument("--file", help="Text file with one rule per line")
    parser.add_argument("--latex", action="store_true", help="Also print the table as a LaTeX array")
    args = parser.parse_args()

    console = Console()
    if args.preset:
        machine = PRESETS[args.preset]
    elif args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            result = parse_machine_safe(f.read())
        if not result.success:
            console.print(f"[red]{result.error}[/red]")
            raise SystemExit(1)
        machine = result.data
    else:
        raise ValueError("You must specify either --preset or --file.")

    pretty_print_ruleset(machine, console)
    print_validation(machine.rules, console)
    if args.latex:
        print("\n=== LaTeX Table ===")
        print(latex_table(machine))


if __name__ == "__main__":
    main()
