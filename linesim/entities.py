"""Core data structures for the line simulator."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

from .distributions import Distribution, service_from_definition

logger = logging.getLogger(__name__)

SegmentId = Hashable


class TopologyError(ValueError):
    """Raised when a line specification does not describe a single simple chain."""


@dataclass(frozen=True)
class Segment:
    """One unit-capacity slot of the chain as it stands during a single tick."""

    segment_id: SegmentId
    next_id: Optional[SegmentId] = None
    occupant: Any = None
    remaining_service: Optional[int] = None

    def __post_init__(self) -> None:
        if (self.occupant is None) != (self.remaining_service is None):
            raise ValueError(
                f"Segment {self.segment_id!r} must have a remaining service time exactly when it holds an item."
            )
        if self.remaining_service is not None and self.remaining_service < 0:
            raise ValueError(f"Segment {self.segment_id!r} has negative remaining service.")

    @property
    def is_terminal(self) -> bool:
        return self.next_id is None

    @property
    def is_empty(self) -> bool:
        return self.occupant is None

    @property
    def is_ready(self) -> bool:
        """True when the occupant has finished service and may move on."""

        return self.occupant is not None and self.remaining_service == 0

    def holding(self, item: Any, service: int) -> "Segment":
        return Segment(self.segment_id, self.next_id, item, service)

    def emptied(self) -> "Segment":
        return Segment(self.segment_id, self.next_id)


@dataclass
class SegmentRecord:
    """One entry of a line specification."""

    id: SegmentId
    to: Optional[SegmentId] = None
    from_: Optional[SegmentId] = None
    service: Optional[Dict[str, float]] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SegmentRecord":
        if "id" not in data:
            raise TopologyError("Segment record requires an 'id'.")
        return cls(id=data["id"], to=data.get("to"), from_=data.get("from"), service=data.get("service"))


@dataclass
class LineSpec:
    """Adjacency description of a line, consumed once by :func:`build_line`."""

    segments: Sequence[SegmentRecord]
    entry: Optional[SegmentId] = None
    terminal: Optional[SegmentId] = None
    name: str = "Line"

    @classmethod
    def from_dict(cls, data: dict) -> "LineSpec":
        segments = [SegmentRecord.from_dict(item) for item in data.get("segments", [])]
        placer = data.get("placer") or {}
        ejector = data.get("ejector") or {}
        return cls(
            segments=segments,
            entry=placer.get("to"),
            terminal=ejector.get("from"),
            name=data.get("name", "Line"),
        )


@dataclass(frozen=True)
class Line:
    """A validated serial chain of segments, entry first and ejecting segment last."""

    name: str
    segment_ids: Tuple[SegmentId, ...]
    services: Tuple[Distribution, ...] = field(compare=False, default=())

    def __post_init__(self) -> None:
        if len(self.services) != len(self.segment_ids) - 1:
            raise ValueError(
                f"Line '{self.name}' expected {len(self.segment_ids) - 1} service distributions "
                f"but received {len(self.services)}."
            )

    @property
    def entry_id(self) -> SegmentId:
        return self.segment_ids[0]

    @property
    def terminal_id(self) -> SegmentId:
        return self.segment_ids[-1]

    def __len__(self) -> int:
        return len(self.segment_ids)

    def initial_chain(self) -> Tuple[Segment, ...]:
        successors = self.segment_ids[1:] + (None,)
        return tuple(Segment(seg_id, next_id) for seg_id, next_id in zip(self.segment_ids, successors))

    def describe(self) -> str:
        return " -> ".join(str(seg_id) for seg_id in self.segment_ids) + " [eject]"


def build_line(spec: LineSpec) -> Line:
    """Validate ``spec`` and order its segments from entry to ejector.

    Every way the records can fail to form exactly one simple path raises
    :class:`TopologyError` here, before any simulation runs.
    """

    records = list(spec.segments)
    if not records:
        raise TopologyError(f"Line '{spec.name}' has no segments.")
    if len(records) < 2:
        raise TopologyError(
            f"Line '{spec.name}' needs at least one holding segment ahead of the ejector."
        )

    by_id: Dict[SegmentId, SegmentRecord] = {}
    for record in records:
        if record.id is None:
            raise TopologyError("Segment ids must not be None.")
        if record.id in by_id:
            raise TopologyError(f"Duplicate segment id {record.id!r}.")
        by_id[record.id] = record

    predecessor: Dict[SegmentId, SegmentId] = {}
    for record in records:
        if record.to is None:
            continue
        if record.to == record.id:
            raise TopologyError(f"Segment {record.id!r} names itself as its successor.")
        if record.to not in by_id:
            raise TopologyError(f"Segment {record.id!r} points to unknown segment {record.to!r}.")
        if record.to in predecessor:
            raise TopologyError(
                f"Segments {predecessor[record.to]!r} and {record.id!r} both feed segment {record.to!r}."
            )
        predecessor[record.to] = record.id

    terminals = [record.id for record in records if record.to is None]
    if len(terminals) != 1:
        raise TopologyError(f"Line '{spec.name}' must have exactly one terminal segment, found {len(terminals)}.")
    if spec.terminal is not None and spec.terminal != terminals[0]:
        raise TopologyError(f"Declared ejector segment {spec.terminal!r} is not the terminal segment.")

    entry = records[0].id if spec.entry is None else spec.entry
    if entry not in by_id:
        raise TopologyError(f"Entry segment {entry!r} does not exist.")
    if entry in predecessor:
        raise TopologyError(f"Entry segment {entry!r} has an upstream segment {predecessor[entry]!r}.")

    for record in records:
        if record.from_ is not None and predecessor.get(record.id) != record.from_:
            raise TopologyError(
                f"Segment {record.id!r} declares predecessor {record.from_!r} "
                f"but is fed by {predecessor.get(record.id)!r}."
            )

    ordered: List[SegmentId] = []
    seen = set()
    current: Optional[SegmentId] = entry
    while current is not None:
        if current in seen:
            raise TopologyError(f"Cycle detected at segment {current!r}.")
        seen.add(current)
        ordered.append(current)
        current = by_id[current].to
    if len(ordered) != len(records):
        unreachable = [record.id for record in records if record.id not in seen]
        raise TopologyError(
            f"Segments {unreachable!r} are not reachable from entry {entry!r} (disconnected or cyclic)."
        )

    services = tuple(service_from_definition(by_id[seg_id].service) for seg_id in ordered[:-1])
    line = Line(name=spec.name, segment_ids=tuple(ordered), services=services)
    logger.debug("Built line %s: %s", line.name, line.describe())
    return line


def serial_line_spec(
    count: int,
    service: Optional[Dict[str, float]] = None,
    name: str = "Line",
) -> LineSpec:
    """Specification for a plain chain ``0 -> 1 -> ... -> count - 1``."""

    if count < 2:
        raise ValueError("A line needs a holding segment and an ejector.")
    segments = [
        SegmentRecord(
            id=idx,
            to=idx + 1 if idx + 1 < count else None,
            from_=idx - 1 if idx > 0 else None,
            service=service,
        )
        for idx in range(count)
    ]
    return LineSpec(segments=segments, entry=0, terminal=count - 1, name=name)
