"""Typed document paths.

A path is a tuple of segments and is only turned into the store's path
syntax (``gallery[_key=="abc"].asset``) at the adapter boundary.
"""

from __future__ import annotations

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldSegment:
    name: str

    def render(self, first: bool) -> str:
        return self.name if first else f".{self.name}"


@dataclass(frozen=True)
class IndexSegment:
    index: int

    def render(self, first: bool) -> str:
        return f"[{self.index}]"


@dataclass(frozen=True)
class KeySegment:
    key: str

    def render(self, first: bool) -> str:
        return f"[_key=={json.dumps(self.key)}]"


Segment = FieldSegment | IndexSegment | KeySegment


@dataclass(frozen=True)
class DocumentPath:
    segments: tuple[Segment, ...] = ()

    @classmethod
    def of(cls, *segments: Segment | str | int) -> DocumentPath:
        """Build a path from segments, plain strings (fields) and ints (indexes)."""
        coerced: list[Segment] = []
        for seg in segments:
            if isinstance(seg, str):
                coerced.append(FieldSegment(seg))
            elif isinstance(seg, int):
                coerced.append(IndexSegment(seg))
            else:
                coerced.append(seg)
        return cls(tuple(coerced))

    def child(self, segment: Segment) -> DocumentPath:
        return DocumentPath((*self.segments, segment))

    @property
    def parent(self) -> DocumentPath:
        return DocumentPath(self.segments[:-1])

    @property
    def last(self) -> Segment | None:
        return self.segments[-1] if self.segments else None

    def sibling(self, name: str) -> DocumentPath:
        """Replace the trailing field segment with ``name``."""
        if not isinstance(self.last, FieldSegment):
            raise ValueError(f"path {self} does not end in a field")
        return self.parent.child(FieldSegment(name))

    def render(self) -> str:
        return "".join(seg.render(i == 0) for i, seg in enumerate(self.segments))

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self.segments)
