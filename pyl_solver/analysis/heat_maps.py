"""Decision heat maps and sweep plots for the Press Your Luck search.

One data builder (re-exported from sweeps for convenience):

    build_decision_grid(search, leads, spins)  — PLAY/PASS matrix

Three public plot functions render matplotlib figures:

    plot_decision_grid(grid, leads, spins, title, ...)  — one heat-map panel
    plot_search_decision_grid(search, leads, spins, ...) — convenience wrapper
    plot_lead_sweep(rows, leads, ...)                    — win ranges vs lead

Matrix convention:
    Shape  : (len(spins), len(leads)) — rows = earned spins, cols = lead
    Values : 1.0 = PLAY, 0.0 = PASS, np.nan = undecided
    Labels : cells read "PL" (play) or "PA" (pass); undecided cells stay blank
"""

from __future__ import annotations

from collections.abc import Sequence

import matplotlib
import matplotlib.axes
import matplotlib.colors
import matplotlib.figure
import matplotlib.image
import matplotlib.pyplot as plt
import numpy as np

from pyl_solver.analysis.sweeps import SweepRow, build_decision_grid
from pyl_solver.solvers.search import Search

__all__ = [
    "build_decision_grid",
    "plot_decision_grid",
    "plot_lead_sweep",
    "plot_search_decision_grid",
]

# ─── Constants ────────────────────────────────────────────────────────────────

_NAN_COLOR: str = "#cccccc"
_PLAY_COLOR: str = "#2ca02c"
_PASS_COLOR: str = "#d62728"

# Cell annotations.
_PLAY_LABEL: str = "PL"
_PASS_LABEL: str = "PA"


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_decision_cmap() -> matplotlib.colors.ListedColormap:
    """Red=PASS (0), Green=PLAY (1), grey=undecided (NaN)."""
    cmap = matplotlib.colors.ListedColormap([_PASS_COLOR, _PLAY_COLOR])
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_DECISION_CMAP: matplotlib.colors.Colormap = _make_decision_cmap()


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    leads: Sequence[int],
    spins: Sequence[int],
) -> matplotlib.image.AxesImage:
    """Render the decision grid onto *ax* with PL/PA cell annotations.

    Lead tick labels are thinned to at most ~12 so wide sweeps stay legible.
    """
    masked = np.ma.masked_invalid(data)
    im = ax.imshow(masked, cmap=_DECISION_CMAP, vmin=0.0, vmax=1.0, aspect="auto", origin="lower")

    step = max(1, len(leads) // 12)
    ax.set_xticks(range(0, len(leads), step))
    ax.set_xticklabels([str(leads[c]) for c in range(0, len(leads), step)], fontsize=8, rotation=45)
    ax.set_yticks(range(len(spins)))
    ax.set_yticklabels([str(n) for n in spins], fontsize=9)

    # Annotate only when cells are wide enough to hold a letter.
    if len(leads) <= 24:
        for r in range(data.shape[0]):
            for c in range(data.shape[1]):
                val = data[r, c]
                if np.isnan(val):
                    continue
                ax.text(
                    c,
                    r,
                    _PLAY_LABEL if val >= 0.5 else _PASS_LABEL,
                    ha="center",
                    va="center",
                    fontsize=8,
                    color="white",
                    fontweight="bold",
                )
    return im


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_decision_grid(
    grid: np.ndarray,
    leads: Sequence[int],
    spins: Sequence[int],
    title: str = "Play / Pass decision",
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot a decision grid as a single heat map.

    Args:
        grid:      (len(spins), len(leads)) array: 1.0=PLAY, 0.0=PASS, NaN=undecided.
        leads:     Column coordinates (lead over the passee).
        spins:     Row coordinates (earned spins).
        title:     Axes title.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    if grid.shape != (len(spins), len(leads)):
        raise ValueError(f"Grid shape {grid.shape} does not match ({len(spins)}, {len(leads)}).")

    fig, ax = plt.subplots(1, 1, figsize=(10, 4.5))
    _render_panel(ax, grid, leads, spins)
    ax.set_title(title, fontsize=12, fontweight="bold")
    ax.set_xlabel("Lead over passee", fontsize=9)
    ax.set_ylabel("Earned spins", fontsize=9)

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


def plot_search_decision_grid(
    search: Search,
    leads: Sequence[int],
    spins: Sequence[int],
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Convenience: build the grid with ``search`` and render it."""
    grid = build_decision_grid(search, leads, spins)
    return plot_decision_grid(
        grid,
        leads,
        spins,
        "Play (green) / Pass (red) by lead and earned spins",
        show=show,
        save_path=save_path,
    )


def plot_lead_sweep(
    rows: Sequence[SweepRow],
    leads: Sequence[int],
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot the up player's win range for play and pass against the lead.

    Each branch is drawn as a band from its guaranteed win probability to
    that plus its uncertainty. Missing branches are left out.

    Args:
        rows:      Output of sweeps.sweep_lead().
        leads:     The leads the rows were computed for (same order).
        show:      If True, call plt.show().
        save_path: If not None, save to path.

    Returns:
        matplotlib.figure.Figure.
    """
    if len(rows) != len(leads):
        raise ValueError(f"Got {len(rows)} rows for {len(leads)} leads.")

    x = np.asarray(leads, dtype=float)
    play_lo = np.array([np.nan if r.play_payoff.is_null() else r.play_range.min for r in rows])
    play_hi = np.array([np.nan if r.play_payoff.is_null() else r.play_range.max for r in rows])
    pass_lo = np.array([np.nan if r.pass_payoff.is_null() else r.pass_range.min for r in rows])
    pass_hi = np.array([np.nan if r.pass_payoff.is_null() else r.pass_range.max for r in rows])

    fig, ax = plt.subplots(1, 1, figsize=(9, 5))
    ax.fill_between(x, play_lo, play_hi, color=_PLAY_COLOR, alpha=0.3)
    ax.plot(x, play_lo, color=_PLAY_COLOR, label="play")
    ax.fill_between(x, pass_lo, pass_hi, color=_PASS_COLOR, alpha=0.3)
    ax.plot(x, pass_lo, color=_PASS_COLOR, label="pass")

    ax.set_title("Win probability of the player up", fontsize=12, fontweight="bold")
    ax.set_xlabel("Lead over passee", fontsize=9)
    ax.set_ylabel("P(win)", fontsize=9)
    ax.set_ylim(0.0, 1.0)
    ax.legend(loc="best", fontsize=9)
    ax.grid(alpha=0.3)

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from pyl_solver.analysis.sweeps import sweep_lead
    from pyl_solver.engine.boards import get_board

    board_name = sys.argv[1] if len(sys.argv) > 1 else "test"
    search = Search(get_board(board_name))
    leads = list(range(-3000, 3001, 250))

    print(f"Building decision grid on board '{board_name}' …")
    plot_search_decision_grid(search, leads, list(range(1, 6)), show=False, save_path="decision_grid.png")
    plot_lead_sweep(sweep_lead(search, leads=leads), leads, show=False, save_path="lead_sweep.png")
    print("Saved: decision_grid.png, lead_sweep.png")
