"""
Frequency Assignment Problem Model

Emitters, the interference table and the derived caches every decoder reads
from. A ProblemBuilder accumulates data; finalize() computes the caches once
and returns a read-only ProblemModel that may be shared across threads.
"""

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from .errors import NotFoundError

logger = logging.getLogger(__name__)

# Tolerance applied to every distance comparison
EPSILON = 1e-8

# Returned by minimum_separation_for when no finite separation qualifies
UNBOUNDED = math.inf


@dataclass(frozen=True)
class Emitter:
    """Emitter at a fixed 3D position demanding a number of frequencies"""
    id: str
    x: float
    y: float
    z: float
    demand: int

    def __post_init__(self):
        if self.demand < 0:
            raise ValueError(f"Emitter {self.id} demand must be non-negative, got {self.demand}")

    def distance(self, other: 'Emitter') -> float:
        """Euclidean distance to another emitter"""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def __str__(self) -> str:
        return f"{self.id}({self.x}, {self.y}, {self.z}): {self.demand}"


class ProblemModel:
    """
    Immutable FAP instance with precomputed performance caches.

    Build instances with ProblemBuilder; the constructor expects already
    validated data and computes every cache exactly once.

    Attributes:
        emitters: Read-only mapping id -> Emitter
        interference: Read-only mapping separation -> minimum distance
        emitter_order: Sorted emitter ids; all index-based caches align to it
        demands: Demand per emitter, aligned with emitter_order
        distance_matrix: Dense symmetric distances (read-only numpy array)
        neighbors_within: threshold -> per-emitter neighbour indices within
            that distance, closest first
    """

    def __init__(self, emitters: Dict[str, Emitter], interference: Dict[int, float]):
        self.emitters: Mapping[str, Emitter] = MappingProxyType(dict(emitters))
        self.interference: Mapping[int, float] = MappingProxyType(dict(interference))

        self.emitter_order: Tuple[str, ...] = tuple(sorted(self.emitters))
        self._index = {emitter_id: i for i, emitter_id in enumerate(self.emitter_order)}
        self.demands: Tuple[int, ...] = tuple(
            self.emitters[emitter_id].demand for emitter_id in self.emitter_order
        )
        self.separations: Tuple[int, ...] = tuple(sorted(self.interference))

        self.distance_matrix = self._compute_distance_matrix()
        # Plain tuples for the per-candidate hot loops
        self.distance_rows: Tuple[Tuple[float, ...], ...] = tuple(
            tuple(row) for row in self.distance_matrix.tolist()
        )
        self.neighbors_within: Mapping[float, Tuple[Tuple[int, ...], ...]] = MappingProxyType(
            self._compute_neighbor_lists()
        )

        self.total_demand = sum(self.demands)
        self.max_threshold = max(self.interference.values(), default=0.0)

        logger.debug(
            "Finalized problem model: %d emitters, %d interference entries, total demand %d",
            len(self.emitter_order), len(self.interference), self.total_demand
        )

    def _compute_distance_matrix(self) -> np.ndarray:
        n = len(self.emitter_order)
        if n == 0:
            matrix = np.zeros((0, 0), dtype=float)
        else:
            positions = np.array(
                [[self.emitters[e].x, self.emitters[e].y, self.emitters[e].z]
                 for e in self.emitter_order],
                dtype=float
            )
            deltas = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
            matrix = np.sqrt((deltas ** 2).sum(axis=-1))
            # Exact symmetry and zero diagonal regardless of rounding
            matrix = np.triu(matrix, k=1)
            matrix = matrix + matrix.T
        matrix.flags.writeable = False
        return matrix

    def _compute_neighbor_lists(self) -> Dict[float, Tuple[Tuple[int, ...], ...]]:
        n = len(self.emitter_order)
        neighbors = {}
        for threshold in sorted(set(self.interference.values())):
            per_emitter = []
            for i in range(n):
                row = self.distance_matrix[i]
                # Stable sort keeps ties in emitter order
                ranked = np.argsort(row, kind='stable')
                within = tuple(
                    int(j) for j in ranked
                    if j != i and row[j] <= threshold + EPSILON
                )
                per_emitter.append(within)
            neighbors[threshold] = tuple(per_emitter)
        return neighbors

    @property
    def num_emitters(self) -> int:
        return len(self.emitter_order)

    def emitter(self, emitter_id: str) -> Emitter:
        try:
            return self.emitters[emitter_id]
        except KeyError:
            raise NotFoundError(emitter_id) from None

    def index_of(self, emitter_id: str) -> int:
        """Index of an emitter in emitter_order"""
        try:
            return self._index[emitter_id]
        except KeyError:
            raise NotFoundError(emitter_id) from None

    def distance(self, id1: str, id2: str) -> float:
        """Distance between two emitters given their ids"""
        return self.distance_rows[self.index_of(id1)][self.index_of(id2)]

    def neighbors(self, index: int, threshold: Optional[float] = None) -> Tuple[int, ...]:
        """
        Neighbour indices of an emitter within a distance threshold.

        Args:
            index: Emitter index in emitter_order
            threshold: A distance value present in the interference table
                (defaults to the largest one, beyond which nothing interferes)

        Returns:
            Indices sorted from closest to furthest
        """
        if threshold is None:
            threshold = self.max_threshold
        if threshold not in self.neighbors_within:
            return ()
        return self.neighbors_within[threshold][index]

    @property
    def frequency_step(self) -> int:
        """Separation at which frequencies never interfere, even on one emitter"""
        separation = minimum_separation_for(self, 0.0)
        if separation != UNBOUNDED:
            return int(separation)
        if self.separations:
            return self.separations[-1] + 1
        return 1

    @property
    def max_frequency(self) -> int:
        """Upper bound for the span required, assuming no frequency is reused"""
        return self.total_demand * self.frequency_step

    @property
    def frequency_cap(self) -> int:
        """Highest frequency value the greedy decoders may try"""
        return max(self.max_frequency, self.total_demand)

    def __str__(self) -> str:
        lines = ["Emitters:"]
        for emitter_id in self.emitter_order:
            lines.append(f"\t{self.emitters[emitter_id]}")
        lines.append("Interferences:")
        for separation in self.separations:
            lines.append(f"\t{separation} -> {self.interference[separation]}")
        return "\n".join(lines) + "\n"


def minimum_separation_for(model: ProblemModel, distance: float) -> float:
    """
    Smallest separation whose required distance is met at ``distance``.

    Scans separations in increasing order. Assumes the table's required
    distance does not grow with separation; malformed tables are not detected.

    Returns:
        The separation, or UNBOUNDED if none qualifies
    """
    for separation in model.separations:
        if model.interference[separation] <= distance + EPSILON:
            return separation
    return UNBOUNDED


class ProblemBuilder:
    """Accumulates emitters and interference entries for a ProblemModel"""

    def __init__(self):
        self._emitters: Dict[str, Emitter] = {}
        self._interference: Dict[int, float] = {}

    def add_emitter(self, emitter: Emitter) -> 'ProblemBuilder':
        if emitter.id in self._emitters:
            raise ValueError(f"Duplicate emitter id: {emitter.id}")
        self._emitters[emitter.id] = emitter
        return self

    def add_interference(self, separation: int, distance: float) -> 'ProblemBuilder':
        """Add or replace the minimum distance required at a separation"""
        if isinstance(separation, bool) or int(separation) != separation or separation < 0:
            raise ValueError(f"Separation must be a non-negative integer, got {separation}")
        self._interference[int(separation)] = float(distance)
        return self

    def add_emitters(self, emitters: List[Emitter]) -> 'ProblemBuilder':
        for emitter in emitters:
            self.add_emitter(emitter)
        return self

    @property
    def num_emitters(self) -> int:
        return len(self._emitters)

    def finalize(self) -> ProblemModel:
        """
        Produce a frozen ProblemModel from the accumulated data.

        The builder keeps its data; adding more and finalizing again yields a
        new model and leaves earlier models untouched.
        """
        return ProblemModel(self._emitters, self._interference)
