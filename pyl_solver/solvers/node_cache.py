"""
NodeCache — the arena that owns every node of one search.

At most one node exists per (kind, state) pair. Looking a state up before
creating it is what turns the recursive game tree into a finite DAG: the
same position reached by different spin/pass sequences shares one node and
one payoff.

Nodes live in a single list and are addressed by their index (handle).
Nothing is ever removed; dropping the cache releases the whole graph.
"""

from __future__ import annotations

from collections.abc import Iterator

from pyl_solver.engine.state import State
from pyl_solver.solvers.nodes import Node, NodeKind


class NodeCache:
    """Arena of nodes with one lookup table per node kind."""

    def __init__(self) -> None:
        self._nodes: list[Node] = []
        self._index: dict[NodeKind, dict[State, int]] = {kind: {} for kind in NodeKind}
        self.final_spin_nodes: int = 0

    # ─── Creation ─────────────────────────────────────────────────────────────

    def _lookup_or_insert(self, kind: NodeKind, state: State) -> int:
        table = self._index[kind]
        handle = table.get(state)
        if handle is None:
            handle = len(self._nodes)
            self._nodes.append(Node(handle, kind, state))
            table[state] = handle
        return handle

    def create_terminal_node(self, state: State) -> int:
        return self._lookup_or_insert(NodeKind.TERMINAL, state)

    def create_chance_node(self, state: State) -> int:
        table = self._index[NodeKind.CHANCE]
        if state not in table and state.total_spins() == 1:
            self.final_spin_nodes += 1
        return self._lookup_or_insert(NodeKind.CHANCE, state)

    def create_decision_node(self, state: State) -> int:
        return self._lookup_or_insert(NodeKind.DECISION, state)

    def create_node(self, state: State) -> int:
        """Create (or fetch) the node of the right kind for ``state``.

        Terminal if the game is over, decision if the up player may pass,
        chance otherwise.
        """
        if state.terminal():
            return self.create_terminal_node(state)
        if state.can_pass():
            return self.create_decision_node(state)
        return self.create_chance_node(state)

    # ─── Access ───────────────────────────────────────────────────────────────

    def get(self, handle: int) -> Node:
        return self._nodes[handle]

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def size(self) -> int:
        """Number of non-terminal nodes (chance + decision)."""
        return self.count(NodeKind.CHANCE) + self.count(NodeKind.DECISION)

    def count(self, kind: NodeKind) -> int:
        return len(self._index[kind])
