"""
Game state for a three-player Press Your Luck endgame.

A State is three Player records plus the index of the player who is up.
Both are NamedTuples: hashable, compared field by field, and used directly
as memoization keys by the node cache. Two states are the same node only if
every field of every player matches, so anything that cannot affect the
outcome (see operators.apply_spin) must be normalised away before a state is
looked up.

Per-player spins come in two kinds:
    earned — spins the player won on the board; may be played or passed.
    passed — spins passed to this player by an opponent; must be played.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from .outcomes import MAX_SCORE

# ─── Constants ────────────────────────────────────────────────────────────────

NUM_PLAYERS: int = 3

MAX_WHAMMIES: int = 4
"""Four whammies and you're out."""


# ─── Player ───────────────────────────────────────────────────────────────────


class Player(NamedTuple):
    """One contestant.

    Attributes:
        score:    Current score, 0..MAX_SCORE.
        earned:   Earned spins not yet taken.
        passed:   Spins passed to this player by an opponent.
        whammies: Whammies hit so far, 0..MAX_WHAMMIES.
    """

    score: int = 0
    earned: int = 0
    passed: int = 0
    whammies: int = 0

    def spins(self) -> int:
        return self.earned + self.passed

    def can_pass(self) -> bool:
        """Only a player holding earned spins and no passed spins may pass."""
        return self.earned > 0 and self.passed == 0

    def out(self) -> bool:
        return self.whammies >= MAX_WHAMMIES


def take_spins(player: Player, count: int) -> Player:
    """Consume ``count`` spins, passed spins first.

    Examples:
        >>> take_spins(Player(earned=2, passed=1), 2)
        Player(score=0, earned=1, passed=0, whammies=0)
    """
    if player.passed >= count:
        return player._replace(passed=player.passed - count)
    return player._replace(earned=player.earned - (count - player.passed), passed=0)


# ─── State ────────────────────────────────────────────────────────────────────


class State(NamedTuple):
    """All three players plus whose turn it is.

    ``up`` is meaningless once the state is terminal.
    """

    players: tuple[Player, Player, Player]
    up: int = 0

    # -- player access --

    def up_player(self) -> Player:
        return self.players[self.up]

    def opponent_num(self, n: int) -> int:
        """Index of the n-th opponent (0 or 1) in seating order after ``up``."""
        return (self.up + n + 1) % NUM_PLAYERS

    def opponent(self, n: int) -> Player:
        return self.players[self.opponent_num(n)]

    def passee_num(self) -> int:
        """The opponent who receives passed spins: the higher score, first seat on a tie."""
        if self.opponent(0).score >= self.opponent(1).score:
            return self.opponent_num(0)
        return self.opponent_num(1)

    def with_player(self, n: int, player: Player) -> State:
        players = list(self.players)
        players[n] = player
        return State(tuple(players), self.up)

    # -- predicates --

    def total_spins(self) -> int:
        return sum(p.spins() for p in self.players)

    def can_pass(self) -> bool:
        return self.up_player().can_pass()

    def terminal(self) -> bool:
        """No spins left for the up player, or both opponents are out.

        When both opponents are out the remaining player would be playing
        against the house; that is treated as the end of the game.
        """
        return self.up_player().spins() == 0 or (self.opponent(0).out() and self.opponent(1).out())

    def third_place(self) -> bool:
        """Up player strictly trails both opponents."""
        score = self.up_player().score
        return score < self.opponent(0).score and score < self.opponent(1).score

    def lead(self) -> int:
        """Up player's score minus the passee's score (negative when trailing)."""
        return self.up_player().score - self.players[self.passee_num()].score


def change_player(state: State) -> State:
    """Hand control to the next player with spins if the up player has none.

    Players are searched in seating order. If nobody has spins, ``up`` is left
    unchanged and the state is terminal.
    """
    if state.up_player().spins() > 0:
        return state
    for n, player in enumerate(state.players):
        if player.spins() > 0:
            return State(state.players, n)
    return state


def make_state(players: Sequence[Sequence[int] | Player], up: int = 0) -> State:
    """Build a validated State from per-player field sequences.

    Each entry is ``(score, earned, passed, whammies)``; trailing fields may
    be omitted and default to 0.

    Raises:
        ValueError: On a wrong player count or an out-of-range field.

    Examples:
        >>> make_state([(0,), (2000, 3), (3500, 2)]).players[1]
        Player(score=2000, earned=3, passed=0, whammies=0)
    """
    if len(players) != NUM_PLAYERS:
        raise ValueError(f"Expected {NUM_PLAYERS} players, got {len(players)}.")
    if not 0 <= up < NUM_PLAYERS:
        raise ValueError(f"Up player index {up} out of range.")

    built: list[Player] = []
    for n, fields in enumerate(players):
        player = fields if isinstance(fields, Player) else Player(*fields)
        if min(player) < 0:
            raise ValueError(f"Player {n} has a negative field: {player}.")
        if player.score > MAX_SCORE:
            raise ValueError(f"Player {n} score {player.score} exceeds {MAX_SCORE}.")
        if player.whammies > MAX_WHAMMIES:
            raise ValueError(f"Player {n} has {player.whammies} whammies (max {MAX_WHAMMIES}).")
        built.append(player)
    return State(tuple(built), up)


def format_state(state: State) -> str:
    """Render a state as ``[P1 (0) (2000 E3) (3500 E2 W1) ]``.

    The up marker is omitted once the state is terminal.
    """
    parts: list[str] = []
    if not state.terminal():
        parts.append(f"[P{state.up} ")
    else:
        parts.append("[")
    for player in state.players:
        text = f"({player.score}"
        if player.earned > 0:
            text += f" E{player.earned}"
        if player.passed > 0:
            text += f" P{player.passed}"
        if player.whammies > 0:
            text += f" W{player.whammies}"
        parts.append(text + ") ")
    parts.append("]")
    return "".join(parts)
