import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from simulator.machine import TuringMachine

log = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


@dataclass
class ImportReport:
    imported: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    @property
    def count(self):
        return len(self.imported)

    def message(self):
        lines = [f"Imported {self.count} machine(s)."]
        lines.extend(self.errors)
        return "\n".join(lines)


def _now():
    return datetime.now(timezone.utc).isoformat()


class MachineStore:
    """User-authored machines kept in one JSON file."""

    def __init__(self, path="machines/custom_machines.json"):
        self.path = Path(path)

    # === Persistence ===
    def _load_entries(self):
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except json.JSONDecodeError as e:
            log.error("Could not read custom machines from %s: %s", self.path, e)
            return []
        if not isinstance(entries, list):
            log.error("Custom machines file %s does not hold a list", self.path)
            return []
        return entries

    def _save_entries(self, entries):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2, ensure_ascii=False)

    # === Queries ===
    def list_machines(self):
        """Stored entries with their machine records decoded; unreadable entries are skipped."""
        machines = []
        for entry in self._load_entries():
            try:
                machines.append({**entry, "machine": TuringMachine.from_record(entry["machine"])})
            except (KeyError, TypeError, ValueError) as e:
                log.warning("Skipping unreadable stored machine %r: %s", entry.get("name"), e)
        return machines

    def get_machine(self, name):
        for entry in self.list_machines():
            if entry["name"] == name:
                return entry["machine"]
        return None

    def stats(self):
        machines = self.list_machines()
        rule_counts = [len(m["machine"].rules) for m in machines]
        return {
            "total": len(machines),
            "total_rules": sum(rule_counts),
            "average_rules": round(sum(rule_counts) / len(rule_counts)) if rule_counts else 0,
            "oldest": min(machines, key=lambda m: m["createdAt"])["name"] if machines else None,
            "newest": max(machines, key=lambda m: m["createdAt"])["name"] if machines else None,
        }

    # === Commands ===
    def save_machine(self, machine):
        """Insert `machine`, or replace the stored machine with the same name."""
        entries = self._load_entries()
        now = _now()
        existing = next((i for i, e in enumerate(entries) if e.get("name") == machine.name), None)

        entry = {
            "id": entries[existing]["id"] if existing is not None else uuid.uuid4().hex,
            "name": machine.name,
            "description": machine.description,
            "machine": machine.to_record(),
            "createdAt": entries[existing]["createdAt"] if existing is not None else now,
            "lastModified": now,
        }
        if existing is not None:
            entries[existing] = entry
        else:
            entries.append(entry)

        self._save_entries(entries)
        log.info("Saved machine %r to %s", machine.name, self.path)
        return entry

    def delete_machine(self, machine_id):
        entries = self._load_entries()
        kept = [e for e in entries if e.get("id") != machine_id]
        self._save_entries(kept)
        return len(kept) != len(entries)

    def clear(self):
        if self.path.exists():
            self.path.unlink()

    # === Exchange ===
    def export_machines(self, export_path):
        data = {
            "exportDate": _now(),
            "version": EXPORT_VERSION,
            "machines": self._load_entries(),
        }
        export_path = Path(export_path)
        export_path.parent.mkdir(parents=True, exist_ok=True)
        with open(export_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return len(data["machines"])

    def import_machines(self, import_path):
        """Import every readable machine; bad entries are reported, not raised."""
        report = ImportReport()
        try:
            with open(import_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            report.errors.append(f"Could not read {import_path}: {e}")
            return report

        if not isinstance(data, dict) or not isinstance(data.get("machines"), list):
            report.errors.append("Invalid file format: expected an object with a 'machines' list")
            return report

        taken = {e.get("name") for e in self._load_entries()}
        for index, item in enumerate(data["machines"], start=1):
            try:
                machine = self._machine_from_export(item)
            except (KeyError, TypeError, ValueError) as e:
                report.errors.append(f"Machine {index}: {e}")
                continue

            name = machine.name
            counter = 1
            while name in taken:
                name = f"{machine.name} ({counter})"
                counter += 1
            if name != machine.name:
                machine = TuringMachine(
                    name,
                    machine.rules,
                    initial_state=machine.initial_state,
                    halt_states=machine.halt_states,
                    alphabet=machine.alphabet,
                    description=machine.description,
                )

            self.save_machine(machine)
            taken.add(name)
            report.imported.append(name)

        if report.errors:
            log.warning("Import from %s finished with %d error(s)", import_path, len(report.errors))
        return report

    @staticmethod
    def _machine_from_export(item):
        if not isinstance(item, dict):
            raise ValueError("entry is not an object")
        record = dict(item.get("machine") or item)
        record.setdefault("name", item.get("name"))
        if not record.get("description"):
            record["description"] = item.get("description", "")
        return TuringMachine.from_record(record)
