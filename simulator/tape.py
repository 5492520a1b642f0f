BLANK = 0


class Tape:
    """Sparse, unbounded tape. Positions never written read as the default symbol."""

    def __init__(self, cells=None, default=BLANK):
        self.default = default
        self._cells = dict(cells) if cells else {}

    def read(self, position):
        if position in self._cells:
            return self._cells[position]
        return self.default

    def write(self, position, symbol):
        # Blank writes are stored too; len() reports every visited cell.
        self._cells[position] = symbol

    def count(self, symbol):
        """Count stored positions holding `symbol`."""
        return sum(1 for value in self._cells.values() if value == symbol)

    def items(self):
        return sorted(self._cells.items())

    def bounds(self):
        if not self._cells:
            return None
        return min(self._cells), max(self._cells)

    def window(self, center, radius=10):
        """Symbols from center - radius to center + radius, blanks included."""
        return [self.read(pos) for pos in range(center - radius, center + radius + 1)]

    def copy(self):
        return Tape(self._cells, self.default)

    def __len__(self):
        return len(self._cells)

    def __contains__(self, position):
        return position in self._cells

    def __eq__(self, other):
        if not isinstance(other, Tape):
            return NotImplemented
        return self.default == other.default and self._cells == other._cells

    def __repr__(self):
        return f"Tape({self.items()!r}, default={self.default!r})"
