"""Interactive Plotly decision lookup for the Press Your Luck search.

Three public functions:

    build_grid_hover(search, leads, spins, base)
        — decision grid plus per-cell hover strings (payoffs, win ranges).
    build_decision_lookup_figure(search, leads, spins, base)
        — interactive PLAY/PASS heatmap over (lead, earned spins).
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.

Hover over any cell to see the position, the recommended choice, and both
branches' payoffs and win ranges for the player up.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import plotly.graph_objects as go

from pyl_solver.analysis.sweeps import DEFAULT_BASE, lead_state
from pyl_solver.engine.interval import format_interval
from pyl_solver.engine.state import format_state
from pyl_solver.solvers.nodes import Decision
from pyl_solver.solvers.payoff import Payoff
from pyl_solver.solvers.search import Search, format_payoff

# ─── Constants ────────────────────────────────────────────────────────────────

# Discrete red→green colorscale: 0.0 = PASS (red), 1.0 = PLAY (green).
# The step at 0.5 creates a hard binary cutoff.
_DECISION_COLORSCALE: list[list] = [
    [0.0, "#d62728"],
    [0.499, "#d62728"],
    [0.501, "#2ca02c"],
    [1.0, "#2ca02c"],
]


# ─── Hover text builders ──────────────────────────────────────────────────────


def _branch_line(name: str, payoff: Payoff, up: int) -> str:
    if payoff.is_null():
        return f"{name}: not allowed"
    return f"{name}: {format_payoff(payoff)} {format_interval(payoff.range(up))}"


def build_grid_hover(
    search: Search,
    leads: Sequence[int],
    spins: Sequence[int],
    base: int = DEFAULT_BASE,
) -> tuple[np.ndarray, list[list[str]]]:
    """Search every grid cell; return the decision matrix and hover strings.

    Returns:
        (grid, hover) where grid has shape (len(spins), len(leads)) with
        1.0=PLAY, 0.0=PASS, NaN=undecided, and hover is a matching nested
        list of HTML strings.
    """
    grid = np.full((len(spins), len(leads)), np.nan)
    hover: list[list[str]] = []
    for r, n in enumerate(spins):
        row: list[str] = []
        for c, lead in enumerate(leads):
            root = search.run(lead_state(lead, n, base))
            decision = search.decision(root)
            if decision is Decision.PLAY:
                grid[r, c] = 1.0
            elif decision is Decision.PASS:
                grid[r, c] = 0.0

            up = root.state.up
            play_node = search.play_branch(root)
            pass_node = search.pass_branch(root)
            lines = [
                f"Lead: <b>{lead}</b>",
                f"Spins: {n}",
                f"State: {format_state(root.state)}",
                f"Decision: <b>{decision.value}</b>",
                _branch_line("play", search.payoff(play_node) if play_node is not None else Payoff.null(), up),
                _branch_line("pass", search.payoff(pass_node) if pass_node is not None else Payoff.null(), up),
            ]
            row.append("<br>".join(lines))
        hover.append(row)
    return grid, hover


# ─── Public figure builders ───────────────────────────────────────────────────


def build_decision_lookup_figure(
    search: Search,
    leads: Sequence[int],
    spins: Sequence[int],
    base: int = DEFAULT_BASE,
) -> go.Figure:
    """Build an interactive heatmap of the play/pass decision.

    Rows are earned spins, columns the lead over the passee. Undecided
    cells are left blank.

    Returns:
        go.Figure with one heatmap trace.
    """
    grid, hover = build_grid_hover(search, leads, spins, base)
    z = [[None if np.isnan(v) else v for v in row] for row in grid.tolist()]

    fig = go.Figure(
        go.Heatmap(
            z=z,
            x=[str(lead) for lead in leads],
            y=[str(n) for n in spins],
            colorscale=_DECISION_COLORSCALE,
            zmin=0.0,
            zmax=1.0,
            text=hover,
            hovertemplate="%{text}<extra></extra>",
            colorbar={"title": "PASS / PLAY"},
            name="Decision",
        )
    )
    fig.update_layout(
        title_text=f"Play / Pass Lookup, passee on {base}",
        title_font_size=15,
        height=420,
        width=900,
    )
    fig.update_xaxes(title_text="Lead over passee")
    fig.update_yaxes(title_text="Earned spins")
    return fig


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from pyl_solver.engine.boards import get_board

    search = Search(get_board("test"))
    fig = build_decision_lookup_figure(search, list(range(-3000, 3001, 250)), list(range(1, 6)))
    save_lookup_html(fig, "decision_lookup.html")
    print("Saved: decision_lookup.html")
