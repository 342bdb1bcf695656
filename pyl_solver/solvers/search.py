"""
Iterative-deepening search for the play/pass decision.

The search grows a DAG of terminal, chance and decision nodes (see
nodes.py) under a single decision node for the starting position, and
propagates win probabilities from terminal states back to the root.

Each pass of Search.run():
    1. Start a new generation, so every node counts as unvisited.
    2. Scan the root to a depth limit. Scanning materialises successors
       (through the NodeCache, so shared positions share a node), throws
       away the payoff of every node it expands, and stops early at nodes
       whose payoff is already certain enough.
    3. Recompute the root payoff bottom-up; only discarded payoffs are
       recomputed.
    4. Test convergence (Search.solved) and stop, or deepen and repeat.

Depth schedule: 4, 12, 20, 28, then +4 per pass, below max_depth.

Two policies prune the graph:
    - A player leading the passee by more than ``max_lead`` may not play.
    - A player strictly in third place may not pass
      (``always_spin_third_place``).

Payoff of a decision node: the branch that gives the player up the higher
win probability. On an exact tie, the per-player minimum of both branches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

from pyl_solver.engine.interval import Interval, format_interval
from pyl_solver.engine.operators import PassOperator, SpinOperator
from pyl_solver.engine.state import NUM_PLAYERS, State, change_player, format_state
from pyl_solver.solvers.node_cache import NodeCache
from pyl_solver.solvers.nodes import Decision, Node, NodeKind
from pyl_solver.solvers.payoff import Payoff, merge_min

logger = logging.getLogger(__name__)

# ─── Constants ────────────────────────────────────────────────────────────────

MAX_PASSED_SPINS: int = 7
"""Largest batch of passed spins that may be resolved by one operator."""

FIRST_DEPTH: int = 4
"""Depth limit of the first iterative-deepening pass."""


# ─── Configuration and result types ───────────────────────────────────────────


@dataclass(frozen=True)
class SearchOptions:
    """Immutable search configuration.

    Attributes:
        max_uncertainty:            A payoff this certain is not expanded further,
                                    and the root converges once both branches are.
        max_lead:                   Lead over the passee beyond which playing is
                                    disallowed. 0 disables the cap.
        max_depth:                  Hard ceiling on the scan depth.
        max_passed_spins_optimized: Largest batch of passed spins resolved at once.
        always_spin_third_place:    Disallow passing from strict third place.
        merge_passed_spins:         Resolve runs of passed spins in batches.
        optimize_final_spin:        Reserved.
        debug:                      Trace every scan and decision at DEBUG level.

    Raises:
        ValueError: If a field is out of range.
    """

    max_uncertainty: float = 0.03
    max_lead: int = 15000
    max_depth: int = 64
    max_passed_spins_optimized: int = MAX_PASSED_SPINS
    always_spin_third_place: bool = True
    merge_passed_spins: bool = True
    optimize_final_spin: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.max_uncertainty <= 1.0:
            raise ValueError(f"max_uncertainty must be in [0, 1], got {self.max_uncertainty}.")
        if self.max_lead < 0:
            raise ValueError(f"max_lead must be >= 0, got {self.max_lead}.")
        if not 1 <= self.max_passed_spins_optimized <= MAX_PASSED_SPINS:
            raise ValueError(
                f"max_passed_spins_optimized must be in [1, {MAX_PASSED_SPINS}], "
                f"got {self.max_passed_spins_optimized}."
            )
        if self.max_depth <= FIRST_DEPTH:
            raise ValueError(f"max_depth must exceed {FIRST_DEPTH}, got {self.max_depth}.")


class StopCondition(NamedTuple):
    """Remaining scan depth below the current node."""

    depth: int

    def deeper(self) -> StopCondition:
        return StopCondition(self.depth - 1)


@dataclass
class SearchResult:
    """Win ranges of the player up at the root, per branch."""

    play_win: Interval = Interval(0.0, 1.0)
    pass_win: Interval = Interval(0.0, 1.0)


@dataclass(frozen=True)
class PassRecord:
    """Summary of one iterative-deepening pass."""

    depth: int
    payoff: Payoff
    solved: bool
    decision: Decision
    cache_size: int


def depth_schedule(max_depth: int) -> Iterator[int]:
    """Depth limits for successive passes.

    Examples:
        >>> list(depth_schedule(40))
        [4, 12, 20, 28, 32, 36]
    """
    depth = FIRST_DEPTH
    while depth < max_depth:
        yield depth
        depth += 8 if depth < 32 else 4


def terminal_payoff(state: State) -> Payoff:
    """Win probabilities at the end of the game.

    The highest score among players still in the game wins; players tied at
    the top split the win equally. If every player is out, the win is split
    across all of them.
    """
    best = 0
    count = 0
    for player in state.players:
        if player.out():
            continue
        if player.score == best:
            count += 1
        elif player.score > best:
            best = player.score
            count = 1

    if count == 0:
        return Payoff((1.0 / NUM_PLAYERS,) * NUM_PLAYERS)
    return Payoff(
        tuple(
            1.0 / count if not player.out() and player.score == best else 0.0
            for player in state.players
        )
    )


def format_payoff(payoff: Payoff) -> str:
    """Render as ``(0.250 0.500 0.250 )``, or ``(nil)`` when null."""
    if payoff.is_null():
        return "(nil)"
    return "(" + "".join(f"{p:.3f} " for p in payoff.prob) + ")"


# ─── Search ───────────────────────────────────────────────────────────────────


NodeRef = Node | int


class Search:
    """One search session over one board.

    The NodeCache, and with it every node, lives as long as the Search;
    run() may be called repeatedly and reuses whatever earlier runs built.

    Args:
        board:   Normalised single-spin operator.
        options: Search configuration (defaults if omitted).
    """

    def __init__(self, board: SpinOperator, options: SearchOptions | None = None) -> None:
        self.options = options if options is not None else SearchOptions()
        self.pass_op = PassOperator()
        self.cache = NodeCache()
        self.generation = 0
        self.result = SearchResult()
        self.history: list[PassRecord] = []

        # spin_ops[n - 1] resolves n spins at once.
        max_batch = self.options.max_passed_spins_optimized if self.options.merge_passed_spins else 1
        self.spin_ops: list[SpinOperator] = [board]
        for _ in range(max_batch - 1):
            self.spin_ops.append(board.compose(self.spin_ops[-1]))

    def spin_op(self, n: int) -> SpinOperator:
        return self.spin_ops[n - 1]

    def _node(self, ref: NodeRef) -> Node:
        return ref if isinstance(ref, Node) else self.cache.get(ref)

    # ─── Driver ───────────────────────────────────────────────────────────────

    def run(self, init: State) -> Node:
        """Search the decision at ``init`` and return the root decision node.

        The up player is advanced first, so the root never belongs to a
        player without spins while another player still has some. The
        returned node may still be uncertain if the depth ceiling was hit.
        """
        init = change_player(init)
        logger.info("Searching %s", format_state(init))
        root = self.cache.get(self.cache.create_decision_node(init))
        self.result = SearchResult()
        self.history = []

        for depth in depth_schedule(self.options.max_depth):
            payoff = self.deepen(root, depth)
            solved = self.solved(root)
            decision = self.decision(root)
            self.history.append(PassRecord(depth, payoff, solved, decision, self.cache.size()))
            self._log_pass(root, depth, solved, decision)

            if solved:
                break
            if not root.expanded():
                logger.warning("No legal choice at %s", format_state(root.state))
                break
        return root

    def deepen(self, ref: NodeRef, depth: int) -> Payoff:
        """Run one pass: new generation, scan to ``depth``, recompute the payoff."""
        node = self._node(ref)
        self.reset_visited()
        self.scan(node.handle, StopCondition(depth))
        return self.payoff(node.handle)

    def _log_pass(self, root: Node, depth: int, solved: bool, decision: Decision) -> None:
        logger.info("depth %d", depth)
        if root.if_play is not None:
            logger.info(
                "   play: %s -> %s",
                format_payoff(self.payoff(root.if_play)),
                format_interval(self.result.play_win),
            )
        if root.if_pass is not None:
            logger.info(
                "   pass: %s -> %s",
                format_payoff(self.payoff(root.if_pass)),
                format_interval(self.result.pass_win),
            )
        if solved:
            logger.info("   solved: %s : %s", decision.value, format_payoff(root.payoff))
        logger.info(
            "   cache: total %d, final %d", self.cache.size(), self.cache.final_spin_nodes
        )

    # ─── Scanning ─────────────────────────────────────────────────────────────

    def scan(self, handle: int, stop: StopCondition) -> None:
        """Scan a node and, within the depth limit, everything below it.

        Scanning the same node twice in one generation is a no-op. A node
        whose payoff is already within ``max_uncertainty`` is left alone,
        which is how later passes avoid re-expanding settled subtrees.
        """
        node = self.cache.get(handle)
        if node.generation == self.generation:
            return
        node.generation = self.generation

        if stop.depth == 0:
            return
        if node.payoff.uncertainty() <= self.options.max_uncertainty:
            return

        if self.options.debug:
            logger.debug("Scanning %s %s at depth %d", node.kind.value, format_state(node.state), stop.depth)

        if node.kind is NodeKind.CHANCE:
            self._scan_chance(node, stop.deeper())
        elif node.kind is NodeKind.DECISION:
            self._scan_decision(node, stop.deeper())

    def _scan_chance(self, node: Node, stop: StopCondition) -> None:
        """Expand every spin outcome.

        While the up player still holds passed spins there is no choice to
        make, so up to ``max_passed_spins_optimized`` of them are resolved
        by a single precomposed operator. Outcomes that leave the state
        unchanged are dropped and the remaining branches renormalised.
        """
        node.payoff = Payoff.null()

        if not node.branches:
            state = node.state
            passed = state.up_player().passed
            if self.options.merge_passed_spins and passed > 0:
                n_spins = min(passed, len(self.spin_ops))
            else:
                n_spins = 1

            coverage = 1.0
            branches: list[tuple[float, int]] = []
            for next_state, weight in self.spin_op(n_spins).apply(state).items():
                if next_state == state:
                    coverage -= weight
                else:
                    branches.append((weight, self.cache.create_node(next_state)))
            if 0.0 < coverage < 1.0:
                branches = [(weight / coverage, handle) for weight, handle in branches]
            node.branches = branches

        for _, handle in node.branches:
            self.scan(handle, stop)

    def _scan_decision(self, node: Node, stop: StopCondition) -> None:
        """Create the legal branches (once) and scan them."""
        node.payoff = Payoff.null()

        if not node.expanded():
            state = node.state
            options = self.options
            lead_capped = options.max_lead and state.lead() > options.max_lead
            if not lead_capped and state.up_player().spins() > 0:
                node.if_play = self.cache.create_chance_node(state)
            if state.can_pass() and not (options.always_spin_third_place and state.third_place()):
                node.if_pass = self.cache.create_node(self.pass_op.apply(state))

        if node.if_play is not None:
            self.scan(node.if_play, stop)
        if node.if_pass is not None:
            self.scan(node.if_pass, stop)

    # ─── Payoffs ──────────────────────────────────────────────────────────────

    def payoff(self, ref: NodeRef) -> Payoff:
        """The node's payoff, computed from its successors if not cached."""
        node = self._node(ref)
        if node.payoff.is_null():
            node.payoff = self._calc_payoff(node)
        return node.payoff

    def _calc_payoff(self, node: Node) -> Payoff:
        if node.kind is NodeKind.TERMINAL:
            return terminal_payoff(node.state)

        if node.kind is NodeKind.CHANCE:
            total = Payoff.zeros()
            for prob, handle in node.branches:
                total = total + self.payoff(handle).scaled(prob)
            return total

        if node.if_play is None and node.if_pass is None:
            return Payoff.zeros()
        if node.if_play is None:
            return self.payoff(node.if_pass)
        if node.if_pass is None:
            return self.payoff(node.if_play)

        up = node.state.up
        play = self.payoff(node.if_play)
        pass_ = self.payoff(node.if_pass)
        if play[up] > pass_[up]:
            res = play
        elif pass_[up] > play[up]:
            res = pass_
        else:
            res = merge_min(pass_, play)

        if self.options.debug:
            logger.debug(
                "Decided between %s and %s on %s -> %s",
                format_payoff(play),
                format_payoff(pass_),
                format_state(node.state),
                format_payoff(res),
            )
        return res

    # ─── Queries ──────────────────────────────────────────────────────────────

    def decision(self, ref: NodeRef) -> Decision:
        """Which branch the decision node's payoff came from."""
        node = self._node(ref)
        if node.kind is not NodeKind.DECISION or not node.expanded():
            return Decision.UNDECIDED
        payoff = self.payoff(node)
        if node.if_play is not None and payoff == self.payoff(node.if_play):
            return Decision.PLAY
        if node.if_pass is not None and payoff == self.payoff(node.if_pass):
            return Decision.PASS
        return Decision.UNDECIDED

    def play_branch(self, ref: NodeRef) -> Node | None:
        node = self._node(ref)
        return None if node.if_play is None else self.cache.get(node.if_play)

    def pass_branch(self, ref: NodeRef) -> Node | None:
        node = self._node(ref)
        return None if node.if_pass is None else self.cache.get(node.if_pass)

    def solved(self, ref: NodeRef) -> bool:
        """Convergence test for a decision node; updates ``self.result``.

        Converged when only one branch exists, when the two branches' win
        ranges for the player up do not overlap, or when both branches are
        within ``max_uncertainty``.
        """
        node = self._node(ref)
        if node.payoff.is_null() or not node.expanded():
            return False

        up = node.state.up
        if node.if_play is not None:
            self.result.play_win = self.payoff(node.if_play).range(up)
        if node.if_pass is not None:
            self.result.pass_win = self.payoff(node.if_pass).range(up)

        if node.if_play is None or node.if_pass is None:
            return True
        if not self.result.play_win.overlaps(self.result.pass_win):
            return True

        max_uncertainty = self.options.max_uncertainty
        return (
            self.payoff(node.if_play).uncertainty() <= max_uncertainty
            and self.payoff(node.if_pass).uncertainty() <= max_uncertainty
        )

    def reset_visited(self) -> None:
        """Mark every cached node unvisited (payoffs are kept)."""
        self.generation += 1


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import time

    from pyl_solver.analysis.report import print_search_summary
    from pyl_solver.engine.boards import feb85_board
    from pyl_solver.engine.state import make_state

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("Press Your Luck decision search, February 1985 board")
    search = Search(feb85_board())

    positions = [
        make_state([(0,), (2000, 3), (3500, 2)]),
        make_state([(0, 3, 0, 2), (2000, 2), (3500, 1)]),  # third place: must play
        make_state([(2000,), (3000, 3), (6000,)]),
        make_state([(0,), (1000, 10, 0, 3), (0, 0, 0, 3)]),
        make_state([(0,), (10000, 2), (7000, 1)]),
        make_state([(0,), (10000, 1), (7000, 0)]),
    ]

    for position in positions:
        t0 = time.time()
        root = search.run(position)
        elapsed = time.time() - t0
        print_search_summary(search, root)
        print(f"  solved in {elapsed:.2f}s")
