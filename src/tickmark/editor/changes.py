"""Change sets and position mapping.

A :class:`ChangeSet` is a sorted, non-overlapping list of edits expressed
in the coordinates of the document it applies to ("A" side). Applying it
yields the "B" side. :class:`PositionMap` is the single primitive used to
carry an offset from one side to the other.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from tickmark.editor.text import Text


@dataclass(frozen=True)
class ChangeSpec:
    """One requested edit: replace ``start..end`` with *insert*."""

    start: int
    end: int
    insert: str = ""


@dataclass(frozen=True)
class ChangeRange:
    """One applied edit seen from both sides of a change set."""

    from_a: int
    to_a: int
    from_b: int
    to_b: int
    inserted: str

    @property
    def is_insertion(self) -> bool:
        return self.from_a == self.to_a and self.inserted != ""

    @property
    def is_deletion(self) -> bool:
        return self.to_a > self.from_a and self.inserted == ""


@dataclass(frozen=True)
class _Section:
    from_a: int
    to_a: int
    length_b: int


class PositionMap:
    """Map offsets through a list of edits.

    Rules for ``map(pos, assoc)``:

    - before an edit (or at the start of a non-empty replaced range): unchanged
      apart from earlier edits' length deltas;
    - strictly inside a replaced range, or exactly at a pure insertion point:
      the start of the replacement when ``assoc < 0``, its end otherwise;
    - at the end of a non-empty replaced range: the end of the replacement.
    """

    __slots__ = ("_sections",)

    def __init__(self, sections: Iterable[tuple[int, int, int]]) -> None:
        self._sections = tuple(_Section(a, b, n) for a, b, n in sections)

    def __repr__(self) -> str:
        parts = ", ".join(f"{s.from_a}-{s.to_a}->{s.length_b}" for s in self._sections)
        return f"PositionMap({parts})"

    @property
    def empty(self) -> bool:
        return not self._sections

    def map(self, pos: int, assoc: int = -1) -> int:
        delta = 0
        for sec in self._sections:
            replaced = sec.to_a > sec.from_a
            if pos < sec.from_a or (pos == sec.from_a and (replaced or assoc < 0)):
                break
            if pos > sec.to_a or (pos == sec.to_a and (replaced or assoc > 0)):
                delta += sec.length_b - (sec.to_a - sec.from_a)
                continue
            # strictly inside a replaced range
            from_b = sec.from_a + delta
            return from_b if assoc < 0 else from_b + sec.length_b
        return pos + delta

    def inverted(self) -> PositionMap:
        """Return the map from the B side back to the A side."""
        sections: list[tuple[int, int, int]] = []
        delta = 0
        for sec in self._sections:
            from_b = sec.from_a + delta
            sections.append((from_b, from_b + sec.length_b, sec.to_a - sec.from_a))
            delta += sec.length_b - (sec.to_a - sec.from_a)
        return PositionMap(sections)


class ChangeSet:
    """Normalised set of edits against a document of known length."""

    __slots__ = ("_changes", "_length")

    def __init__(self, changes: tuple[ChangeSpec, ...], length: int) -> None:
        self._changes = changes
        self._length = length

    @classmethod
    def empty(cls, length: int) -> ChangeSet:
        return cls((), length)

    @classmethod
    def of(cls, specs: Iterable[ChangeSpec], length: int) -> ChangeSet:
        """Build a change set from *specs* in start-document coordinates.

        Specs are ordered by position (stable, so insertions sharing an
        offset keep their given order). No-op specs are dropped.

        Raises:
            ValueError: A spec is out of range, inverted, or overlaps another.
        """
        indexed = [
            (spec.start, spec.end, i, spec)
            for i, spec in enumerate(specs)
            if not (spec.start == spec.end and spec.insert == "")
        ]
        for start, end, _, _ in indexed:
            if start < 0 or end > length or start > end:
                msg = f"Change {start}-{end} out of range (document length {length})"
                raise ValueError(msg)
        indexed.sort(key=lambda item: (item[0], item[1] > item[0], item[2]))
        ordered: list[ChangeSpec] = []
        last_end = 0
        for start, end, _, spec in indexed:
            if start < last_end:
                prev = ordered[-1]
                msg = f"Change {start}-{end} overlaps change {prev.start}-{prev.end}"
                raise ValueError(msg)
            ordered.append(spec)
            last_end = max(last_end, end)
        return cls(tuple(ordered), length)

    def __len__(self) -> int:
        return len(self._changes)

    def __bool__(self) -> bool:
        return bool(self._changes)

    def __repr__(self) -> str:
        return f"ChangeSet({list(self._changes)!r})"

    @property
    def length(self) -> int:
        """Length of the document the set applies to."""
        return self._length

    @property
    def new_length(self) -> int:
        return self._length + sum(len(c.insert) - (c.end - c.start) for c in self._changes)

    def specs(self) -> list[ChangeSpec]:
        """The edits as start-document specs, in order."""
        return list(self._changes)

    def iter_changes(self) -> Iterator[ChangeRange]:
        delta = 0
        for c in self._changes:
            from_b = c.start + delta
            yield ChangeRange(
                from_a=c.start,
                to_a=c.end,
                from_b=from_b,
                to_b=from_b + len(c.insert),
                inserted=c.insert,
            )
            delta += len(c.insert) - (c.end - c.start)

    def apply(self, doc: Text) -> Text:
        if doc.length != self._length:
            msg = f"Change set for length {self._length} applied to document of length {doc.length}"
            raise ValueError(msg)
        content = str(doc)
        parts: list[str] = []
        pos = 0
        for c in self._changes:
            parts.append(content[pos : c.start])
            parts.append(c.insert)
            pos = c.end
        parts.append(content[pos:])
        return Text("".join(parts))

    def position_map(self) -> PositionMap:
        return PositionMap((c.start, c.end, len(c.insert)) for c in self._changes)

    def map_pos(self, pos: int, assoc: int = -1) -> int:
        """Map a start-document offset into the changed document."""
        return self.position_map().map(pos, assoc)

    def invert(self, doc: Text) -> ChangeSet:
        """Return the change set that undoes this one, given the start *doc*."""
        content = str(doc)
        inverse = [
            ChangeSpec(ch.from_b, ch.to_b, content[ch.from_a : ch.to_a])
            for ch in self.iter_changes()
        ]
        return ChangeSet(tuple(inverse), self.new_length)
