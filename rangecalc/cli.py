"""Command line equity and texture calculator."""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from rangecalc.game.cards import Board, Hand
from rangecalc.game.equity import EquityCalculationBuilder, Participant
from rangecalc.game.evaluator import DefaultEvaluator, TreysEvaluator
from rangecalc.game.exceptions import RangeCalcError
from rangecalc.game.groups import Range, range_from_string
from rangecalc.game.texture import TextureAnalysisBuilder
from rangecalc.viz import RangeDisplay, display_equities, display_frequencies

EVALUATORS = {
    "default": DefaultEvaluator,
    "treys": TreysEvaluator,
}


def parse_participant(text: str) -> Participant:
    """A concrete hand like 'AcAh', otherwise a range like 'AA,72o'."""
    compact = text.replace(" ", "")
    if len(compact) == 4 and compact[1].lower() in "cdhs" and compact[3].lower() in "cdhs":
        return Hand.from_string(compact)
    return range_from_string(compact)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rangecalc",
        description="Hold'em equity and board texture calculator",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    eq = sub.add_parser("equity", help="Equity between hands and ranges")
    eq.add_argument(
        "participants",
        nargs="+",
        help="Hands (e.g. 'AcAh') or ranges (e.g. 'AA,72o' or 'KK:0.5,QQ')",
    )
    eq.add_argument(
        "-b", "--board",
        default="",
        help="Board cards (e.g., 'Ks7h6d' or 'Ks 7h 6d')",
    )
    eq.add_argument(
        "-n", "--samples",
        type=int,
        default=EquityCalculationBuilder.DEFAULT_SAMPLE_SIZE,
        help=f"Monte Carlo trials (default: {EquityCalculationBuilder.DEFAULT_SAMPLE_SIZE})",
    )
    eq.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Worker threads (default: 1)",
    )
    eq.add_argument(
        "--seed",
        type=int,
        help="Extra seed mixed into the input-derived one",
    )
    eq.add_argument(
        "--evaluator",
        choices=sorted(EVALUATORS),
        default="default",
        help="Hand evaluator (default: default)",
    )
    eq.add_argument(
        "--show-ranges",
        action="store_true",
        help="Print each range as a 13x13 grid",
    )

    tex = sub.add_parser("texture", help="Hand categories a range makes on a board")
    tex.add_argument("range", help="Range (e.g. 'AA,KK,AKs:0.5')")
    tex.add_argument(
        "-b", "--board",
        required=True,
        help="Flop, turn or river board",
    )
    tex.add_argument(
        "-n", "--samples",
        type=int,
        default=TextureAnalysisBuilder.DEFAULT_SAMPLE_SIZE,
        help=f"Frequency divisor (default: {TextureAnalysisBuilder.DEFAULT_SAMPLE_SIZE})",
    )
    return parser


def main(argv: Optional[list[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    console = console or Console()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )

    try:
        if args.command == "equity":
            return _run_equity(args, console)
        return _run_texture(args, console)
    except RangeCalcError as e:
        console.print(f"[red]{e}[/]")
        return 1


def _run_equity(args: argparse.Namespace, console: Console) -> int:
    participants = [parse_participant(p) for p in args.participants]
    board = Board.from_string(args.board)

    if board.cards:
        console.print(f"[bold]Board:[/] {' '.join(str(c) for c in board)}")

    if args.show_ranges:
        for p in participants:
            if isinstance(p, Range):
                RangeDisplay(console).load(p).display_terminal(title=str(p))

    calc = (
        EquityCalculationBuilder()
        .use_board(board)
        .use_sample_size(args.samples)
        .use_workers(args.workers)
        .use_seed(args.seed)
        .use_evaluator(EVALUATORS[args.evaluator]())
    )
    results = calc.calculate(*participants)
    display_equities(results, console=console)
    return 0


def _run_texture(args: argparse.Namespace, console: Console) -> int:
    group = range_from_string(args.range)
    builder = (
        TextureAnalysisBuilder()
        .use_board(Board.from_string(args.board))
        .use_sample_size(args.samples)
    )
    display_frequencies(builder.frequencies(group), title=f"{group} on {args.board}", console=console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
