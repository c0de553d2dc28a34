"""Dependency graph between cell names with recalculation ordering."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from sheetcalc.calc._protocol import TraversalResult

_IN_PROGRESS = 1
_DONE = 2


class DependencyGraph:
    """Set of ordered pairs ``(s, t)`` meaning "t depends on s".

    Both directions are indexed: ``dependents[s]`` holds every t, and
    ``dependees[t]`` holds every s. The two dicts always mirror each other
    and empty sets are dropped. The graph knows names only, never cells.

    For example, with pairs ``{("a", "b"), ("a", "c"), ("b", "d")}``::

        get_dependents("a") == {"b", "c"}
        get_dependees("d") == {"b"}
    """

    __slots__ = ("dependents", "dependees", "_size")

    def __init__(self) -> None:
        # s -> cells whose formulas read s
        self.dependents: dict[str, set[str]] = {}
        # t -> cells that t's formula reads
        self.dependees: dict[str, set[str]] = {}
        self._size = 0

    @property
    def size(self) -> int:
        """Number of ordered pairs in the graph."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def dependee_count(self, s: str) -> int:
        return len(self.dependees.get(s, ()))

    def has_dependents(self, s: str) -> bool:
        return bool(self.dependents.get(s))

    def has_dependees(self, s: str) -> bool:
        return bool(self.dependees.get(s))

    def get_dependents(self, s: str) -> set[str]:
        return set(self.dependents.get(s, ()))

    def get_dependees(self, s: str) -> set[str]:
        return set(self.dependees.get(s, ()))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_dependency(self, s: str, t: str) -> None:
        """Add the pair (s, t); adding an existing pair changes nothing."""
        targets = self.dependents.setdefault(s, set())
        if t in targets:
            return
        targets.add(t)
        self.dependees.setdefault(t, set()).add(s)
        self._size += 1

    def remove_dependency(self, s: str, t: str) -> None:
        """Remove the pair (s, t) if present."""
        targets = self.dependents.get(s)
        if not targets or t not in targets:
            return
        self._discard(self.dependents, s, t)
        self._discard(self.dependees, t, s)
        self._size -= 1

    def replace_dependents(self, s: str, new_dependents: Iterable[str]) -> None:
        """Make the dependents of *s* exactly *new_dependents*."""
        replacement = set(new_dependents)
        for t in self.get_dependents(s):
            self.remove_dependency(s, t)
        for t in replacement:
            self.add_dependency(s, t)

    def replace_dependees(self, s: str, new_dependees: Iterable[str]) -> None:
        """Make the dependees of *s* exactly *new_dependees*."""
        replacement = set(new_dependees)
        for t in self.get_dependees(s):
            self.remove_dependency(t, s)
        for t in replacement:
            self.add_dependency(t, s)

    @staticmethod
    def _discard(index: dict[str, set[str]], key: str, member: str) -> None:
        members = index.get(key)
        if members is None:
            return
        members.discard(member)
        if not members:
            del index[key]

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def affected_cells(self, name: str) -> TraversalResult:
        """Order *name* and everything that transitively depends on it.

        Iterative depth-first walk over dependents, marking each node as in
        progress while its descendants are explored and done afterwards.
        Meeting an in-progress node again means a cycle; the chain that
        closes it is returned instead of an order. Otherwise the reverse
        postorder is returned: *name* first, and every cell after all the
        cells it reads from.
        """
        state: dict[str, int] = {name: _IN_PROGRESS}
        path: list[str] = [name]
        stack: list[Iterator[str]] = [iter(sorted(self.dependents.get(name, ())))]
        postorder: list[str] = []

        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                done = path.pop()
                state[done] = _DONE
                postorder.append(done)
                continue
            mark = state.get(nxt)
            if mark == _IN_PROGRESS:
                start = path.index(nxt)
                return TraversalResult(cycle=(*path[start:], nxt))
            if mark == _DONE:
                continue
            state[nxt] = _IN_PROGRESS
            path.append(nxt)
            stack.append(iter(sorted(self.dependents.get(nxt, ()))))

        postorder.reverse()
        return TraversalResult(order=tuple(postorder))

    def __repr__(self) -> str:
        return f"<DependencyGraph pairs={self._size}>"
