"""Text reports for Press Your Luck searches.

Formatting helpers (return strings):

    format_payoff(payoff)        — ``(0.250 0.500 0.250 )`` or ``(nil)``
    format_decision(decision)    — ``play`` / ``pass`` / ``undecided``
    format_node(node)            — one-line node summary

Printing functions (write to stdout):

    print_search_summary(search, root) — decision, branch payoffs, pass history
    print_board(board)                 — spin outcomes by ascending weight
    print_cache(search, limit)         — cached nodes, one per line
    print_sweep(rows, title)           — table of SweepRows
"""

from __future__ import annotations

from collections.abc import Sequence

from pyl_solver.analysis.sweeps import SweepRow
from pyl_solver.engine.interval import format_interval
from pyl_solver.engine.operators import SpinOperator
from pyl_solver.engine.outcomes import format_spin_value
from pyl_solver.engine.state import format_state
from pyl_solver.solvers.nodes import Decision, Node, NodeKind
from pyl_solver.solvers.search import Search, format_payoff

__all__ = [
    "format_decision",
    "format_node",
    "format_payoff",
    "print_board",
    "print_cache",
    "print_search_summary",
    "print_sweep",
]


def format_decision(decision: Decision) -> str:
    return decision.value


def format_node(node: Node) -> str:
    """``<kind> <state> <payoff>`` plus the successor count."""
    if node.kind is NodeKind.CHANCE:
        succ = f" branches={len(node.branches)}"
    elif node.kind is NodeKind.DECISION:
        succ = f" play={node.if_play} pass={node.if_pass}"
    else:
        succ = ""
    return f"{node.kind.value:<6} {format_state(node.state)} {format_payoff(node.payoff)}{succ}"


# ─── Printing ─────────────────────────────────────────────────────────────────


def print_search_summary(search: Search, root: Node) -> None:
    """Print the root decision, both branches and the pass history.

    Args:
        search: The Search that produced ``root``.
        root:   Decision node returned by Search.run().
    """
    up = root.state.up
    print("=" * 56)
    print(f"Position  {format_state(root.state)}")
    print("=" * 56)

    play_node = search.play_branch(root)
    pass_node = search.pass_branch(root)
    if play_node is not None:
        payoff = search.payoff(play_node)
        print(f"  play:  {format_payoff(payoff)} -> {format_interval(payoff.range(up))}")
    else:
        print("  play:  not allowed")
    if pass_node is not None:
        payoff = search.payoff(pass_node)
        print(f"  pass:  {format_payoff(payoff)} -> {format_interval(payoff.range(up))}")
    else:
        print("  pass:  not allowed")

    print(f"  decision: {format_decision(search.decision(root))}")
    print()
    print(f"  {'Depth':>5}  {'Solved':>6}  {'Uncert.':>7}  {'Cache':>8}")
    print(f"  {'-----':>5}  {'------':>6}  {'-------':>7}  {'--------':>8}")
    for record in search.history:
        print(
            f"  {record.depth:>5}  {'yes' if record.solved else 'no':>6}  "
            f"{record.payoff.uncertainty():>7.3f}  {record.cache_size:>8,}"
        )
    print(f"  final-spin nodes: {search.cache.final_spin_nodes:,}")
    print()


def print_board(board: SpinOperator) -> None:
    """Print each spin outcome with its probability, least likely first."""
    print(f"  {'Prob':>6}  Value")
    for value, weight in board.expr.sorted_items():
        print(f"  {weight:>6.3f}  {format_spin_value(value)}")
    print(f"  {len(board)} outcomes, total {board.expr.total_weight():.3f}")


def print_cache(search: Search, limit: int | None = None) -> None:
    """Print cached nodes in creation order (at most ``limit``)."""
    for n, node in enumerate(search.cache):
        if limit is not None and n >= limit:
            print(f"  ... {len(search.cache) - limit:,} more")
            break
        print(f"  {node.handle:>6}  {format_node(node)}")


def print_sweep(rows: Sequence[SweepRow], title: str = "Sweep") -> None:
    """Print one line per sweep point: decision, payoffs and win ranges."""
    print("=" * 72)
    print(title)
    print("=" * 72)
    for row in rows:
        print(f"  {row.label:<12} {format_decision(row.decision):<9} {format_state(row.state)}")
        print(f"      play: {format_payoff(row.play_payoff)} {format_interval(row.play_range)}")
        print(f"      pass: {format_payoff(row.pass_payoff)} {format_interval(row.pass_range)}")
    print()
