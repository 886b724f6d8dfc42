"""Terminal display of ranges, equities and texture frequencies."""

from dataclasses import dataclass
from typing import Mapping, Optional

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from rangecalc.game.equity import Equity
from rangecalc.game.evaluator import HandCategory
from rangecalc.game.groups import HandGroup, get_all_hands, hand_group


# Standard hand matrix layout (13x13)
RANKS = "AKQJT98765432"

# Pre-computed hand matrix positions
# Pairs on diagonal, suited above, offsuit below
HAND_MATRIX = []
for i, r1 in enumerate(RANKS):
    row = []
    for j, r2 in enumerate(RANKS):
        if i == j:
            row.append(f"{r1}{r2}")  # Pair
        elif i < j:
            row.append(f"{r1}{r2}s")  # Suited (above diagonal)
        else:
            row.append(f"{r2}{r1}o")  # Offsuit (below diagonal)
    HAND_MATRIX.append(row)


def format_percent(value: float, digits: int = 2) -> str:
    """Format a fraction as a percentage, e.g. 0.8259 -> '82.59%'."""
    return f"{value * 100:.{digits}f}%"


@dataclass
class CellData:
    """Weight of one canonical hand within a range."""
    hand: str
    frequency: float = 0.0  # mean weight over the hand's combos
    combos: int = 0         # combos present in the range


class RangeDisplay:
    """Display a range as a 13x13 matrix of canonical hands."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.cells: dict[str, CellData] = {
            hand: CellData(hand=hand) for hand in get_all_hands()
        }

    def load(self, group: HandGroup) -> "RangeDisplay":
        """Fill the matrix from a range or hand group."""
        for name, cell in self.cells.items():
            combos = hand_group(name).all()
            weights = [group.weight(h) for h in combos]
            cell.frequency = sum(weights) / len(combos)
            cell.combos = sum(1 for w in weights if w > 0)
        return self

    def display_terminal(self, title: str = "Range") -> None:
        """Display range in terminal using rich."""
        table = Table(title=title, show_header=True, header_style="bold")

        # Add column headers
        table.add_column("", style="bold")
        for rank in RANKS:
            table.add_column(rank, justify="center")

        # Add rows
        for i, rank in enumerate(RANKS):
            row = [rank]
            for j in range(13):
                data = self.cells[HAND_MATRIX[i][j]]

                # Color based on frequency
                if data.frequency > 0.8:
                    style = Style(bgcolor="green", color="white")
                elif data.frequency > 0.5:
                    style = Style(bgcolor="yellow", color="black")
                elif data.frequency > 0.2:
                    style = Style(bgcolor="orange3", color="black")
                elif data.frequency > 0:
                    style = Style(bgcolor="red", color="white")
                else:
                    style = Style(bgcolor="grey30", color="grey50")

                cell = f"{data.frequency*100:.0f}" if data.frequency > 0 else ""
                row.append(Text(cell.center(3), style=style))

            table.add_row(*row)

        self.console.print(table)


def display_equities(
    results: Mapping[object, Equity],
    title: str = "Equity",
    console: Optional[Console] = None,
) -> None:
    """Print a table of equities, one row per participant."""
    console = console or Console()
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Participant", style="cyan")
    table.add_column("Win", justify="right")
    table.add_column("Tie", justify="right")
    table.add_column("Loss", justify="right")
    table.add_column("Share", justify="right", style="bold")

    for participant, eq in results.items():
        table.add_row(
            str(participant),
            format_percent(eq.win),
            format_percent(eq.tie),
            format_percent(eq.loss),
            format_percent(eq.share),
        )

    console.print(table)
    trials = next(iter(results.values())).trials if results else 0
    console.print(f"[dim]{trials} trials[/]")


def display_frequencies(
    frequencies: Mapping[HandCategory, float],
    title: str = "Texture",
    console: Optional[Console] = None,
) -> None:
    """Print hand category frequencies, strongest category first."""
    console = console or Console()
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Hand", style="cyan")
    table.add_column("Frequency", justify="right")

    for category in sorted(frequencies, reverse=True):
        freq = frequencies[category]
        style = "bold" if freq > 0 else "dim"
        table.add_row(category.label, Text(format_percent(freq), style=style))

    console.print(table)
