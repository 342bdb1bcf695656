"""Press Your Luck Play/Pass Solver — Streamlit Dashboard.

Two-tab interactive dashboard:
  Tab 1 — Decision     (one position: decision, branch payoffs, pass history)
  Tab 2 — Lead Sweep   (matplotlib heat map + Plotly lookup over lead/spins)

Run:
    PYTHONPATH=. streamlit run app.py
"""

from __future__ import annotations

import contextlib
import io
import threading

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import streamlit as st

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Press Your Luck Solver",
    page_icon="🎰",
    layout="wide",
)

# ─── Cached resources ─────────────────────────────────────────────────────────


@st.cache_resource
def _get_search(
    board_name: str,
    max_uncertainty: float,
    max_lead: int,
    always_spin_third_place: bool,
    merge_passed_spins: bool,
):
    """One Search per board + option set, so its node cache survives reruns.

    The Search is shared by every browser session; hold the returned lock
    around each run and the reads of its result.
    """
    from pyl_solver.engine.boards import get_board
    from pyl_solver.solvers.search import Search, SearchOptions

    options = SearchOptions(
        max_uncertainty=max_uncertainty,
        max_lead=max_lead,
        always_spin_third_place=always_spin_third_place,
        merge_passed_spins=merge_passed_spins,
    )
    return Search(get_board(board_name), options), threading.Lock()


# ─── Sidebar controls ─────────────────────────────────────────────────────────

from pyl_solver.engine.boards import BOARDS  # noqa: E402

with st.sidebar:
    st.title("🎰 Press Your Luck Solver")
    st.markdown("---")

    board_names = list(BOARDS)
    board_name = st.selectbox("Board", options=board_names, index=board_names.index("test"))

    max_uncertainty = st.slider(
        "Max uncertainty",
        min_value=0.005,
        max_value=0.2,
        value=0.03,
        step=0.005,
    )
    max_lead = st.slider(
        "Max lead for playing (0 = no cap)",
        min_value=0,
        max_value=20000,
        value=15000,
        step=250,
    )
    always_spin_third_place = st.checkbox("Always spin from third place", value=True)
    merge_passed_spins = st.checkbox("Merge passed spins", value=True)

    st.markdown("---")
    st.caption("Iterative-deepening play/pass search")

search, search_lock = _get_search(board_name, max_uncertainty, max_lead, always_spin_third_place, merge_passed_spins)

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2 = st.tabs(["Decision", "Lead Sweep"])

# ── Tab 1: Decision ───────────────────────────────────────────────────────────

with tab1:
    import pandas as pd

    from pyl_solver.analysis.report import format_decision, print_search_summary
    from pyl_solver.engine.interval import format_interval
    from pyl_solver.engine.state import MAX_WHAMMIES, make_state
    from pyl_solver.solvers.search import format_payoff

    st.header("Play or Pass?")
    st.caption("Player order is seating order. The first player with spins is up.")

    defaults = [(0, 0, 0, 0), (3000, 1, 0, 0), (2000, 0, 0, 0)]
    players = []
    for n, (score, earned, passed, whammies) in enumerate(defaults):
        c1, c2, c3, c4 = st.columns(4)
        players.append(
            (
                c1.number_input(f"P{n} score", 0, 20000, score, step=250, key=f"score{n}"),
                c2.number_input(f"P{n} earned", 0, 20, earned, key=f"earned{n}"),
                c3.number_input(f"P{n} passed", 0, 20, passed, key=f"passed{n}"),
                c4.number_input(f"P{n} whammies", 0, MAX_WHAMMIES, whammies, key=f"whammies{n}"),
            )
        )

    init = make_state([tuple(int(v) for v in p) for p in players])
    if init.total_spins() == 0:
        st.warning("Nobody has spins left: the game is already over.")
    else:
        # Everything read from the shared Search is taken under its lock.
        with search_lock, st.spinner("Searching …"):
            root = search.run(init)
            decision = search.decision(root)
            play_node = search.play_branch(root)
            pass_node = search.pass_branch(root)
            play = search.payoff(play_node) if play_node is not None else None
            pass_ = search.payoff(pass_node) if pass_node is not None else None
            history = list(search.history)
            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                print_search_summary(search, root)

        up = root.state.up
        col1, col2, col3 = st.columns(3)
        col1.metric("Decision", format_decision(decision))
        if play is not None:
            col2.metric(f"P{up} wins if playing", format_interval(play.range(up)))
        else:
            col2.metric(f"P{up} wins if playing", "not allowed")
        if pass_ is not None:
            col3.metric(f"P{up} wins if passing", format_interval(pass_.range(up)))
        else:
            col3.metric(f"P{up} wins if passing", "not allowed")

        st.subheader("Pass history")
        history_df = pd.DataFrame(
            [
                {
                    "Depth": r.depth,
                    "Payoff": format_payoff(r.payoff),
                    "Uncertainty": f"{r.payoff.uncertainty():.3f}",
                    "Decision": format_decision(r.decision),
                    "Solved": "yes" if r.solved else "no",
                    "Cache": r.cache_size,
                }
                for r in history
            ]
        )
        st.dataframe(history_df, use_container_width=True, hide_index=True)

        st.subheader("Search report (stdout capture)")
        st.code(buf.getvalue(), language=None)

# ── Tab 2: Lead Sweep ─────────────────────────────────────────────────────────

with tab2:
    st.header("Lead Sweep")
    st.caption(
        "Rows = earned spins | Cols = lead over the passee | "
        "Green = PLAY, Red = PASS, Grey = undecided"
    )

    c1, c2, c3 = st.columns(3)
    lead_span = c1.slider("Lead range (±)", min_value=500, max_value=5000, value=2000, step=250)
    lead_step = c2.select_slider("Lead step", options=[250, 500, 1000], value=500)
    max_spins = c3.slider("Max earned spins", min_value=1, max_value=6, value=2)
    run_sweep = st.button("Run sweep", type="primary")

    if run_sweep:
        from pyl_solver.analysis.heat_maps import plot_decision_grid, plot_lead_sweep
        from pyl_solver.analysis.plotly_lookup import build_decision_lookup_figure
        from pyl_solver.analysis.sweeps import build_decision_grid, sweep_lead

        leads = list(range(-lead_span, lead_span + 1, lead_step))
        spins = list(range(1, max_spins + 1))

        with search_lock, st.spinner(f"Searching {len(leads) * len(spins)} positions …"):
            grid = build_decision_grid(search, leads, spins)
            rows = sweep_lead(search, leads=leads)
            lookup_fig = build_decision_lookup_figure(search, leads, spins)

        st.subheader("Decision heat map")
        st.pyplot(plot_decision_grid(grid, leads, spins, show=False))

        st.subheader("Win ranges with one earned spin")
        st.pyplot(plot_lead_sweep(rows, leads, show=False))

        st.markdown("---")
        st.subheader("Interactive lookup")
        st.plotly_chart(lookup_fig, use_container_width=True)
    else:
        st.info("Press **Run sweep** to search every position in the grid.")
