"""
Feasibility Checking

Separation and feasibility queries over a ProblemModel. Every decoder and
the full-assignment validation share these so that all of them apply the
same constraint semantics, including the EPSILON tolerance on distances.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from .model import EPSILON, ProblemModel, minimum_separation_for

logger = logging.getLogger(__name__)

Assignment = Dict[str, Set[int]]


class FeasibilityChecker:
    """Pure separation queries over a finalized ProblemModel"""

    def __init__(self, model: ProblemModel):
        self.model = model
        self._table = model.interference

    def minimum_distance_for(self, separation: int) -> float:
        """Required distance for an exact separation, 0.0 if unconstrained"""
        return self._table.get(separation, 0.0)

    def minimum_separation_for(self, distance: float) -> float:
        return minimum_separation_for(self.model, distance)

    def check_separation(self, f1: int, f2: int, distance: float) -> bool:
        """True iff f1 and f2 may be used by emitters ``distance`` apart"""
        return distance + EPSILON >= self._table.get(abs(f1 - f2), 0.0)

    def is_feasible(self, assignment: Mapping[str, Iterable[int]]) -> bool:
        """
        Check a complete assignment against demand and separation constraints.

        Stops at the first violation. Ids unknown to the model make the
        assignment infeasible; missing ids count as empty frequency sets.
        """
        model = self.model
        unknown = set(assignment) - set(model.emitters)
        if unknown:
            logger.debug("Assignment references unknown emitters: %s", sorted(unknown))
            return False

        freq_lists = [sorted(assignment.get(e, ())) for e in model.emitter_order]

        for i, emitter_id in enumerate(model.emitter_order):
            freqs = freq_lists[i]
            if len(set(freqs)) != model.demands[i] or len(freqs) != model.demands[i]:
                logger.debug(
                    "Emitter %s has %d frequencies instead of %d",
                    emitter_id, len(freqs), model.demands[i]
                )
                return False
            for a in range(len(freqs)):
                for b in range(a + 1, len(freqs)):
                    if not self.check_separation(freqs[a], freqs[b], 0.0):
                        logger.debug(
                            "Separation violated in %s (%d and %d)",
                            emitter_id, freqs[a], freqs[b]
                        )
                        return False

        rows = model.distance_rows
        n = model.num_emitters
        for i in range(n):
            for j in range(i + 1, n):
                distance = rows[i][j]
                for f1 in freq_lists[i]:
                    for f2 in freq_lists[j]:
                        if not self.check_separation(f1, f2, distance):
                            logger.debug(
                                "Separation violated between %s and %s (%d and %d) at distance %s",
                                model.emitter_order[i], model.emitter_order[j], f1, f2, distance
                            )
                            return False
        return True

    def can_assign(self, index: int, frequency: int, partial: Sequence[Sequence[int]]) -> bool:
        """
        Whether emitter ``index`` may take ``frequency`` given a partial assignment.

        ``partial`` is indexed like emitter_order. Only neighbours within the
        largest interference distance are inspected, closest first; emitters
        further away can never conflict.
        """
        own = partial[index]
        if frequency in own:
            return False
        table = self._table
        for f2 in own:
            if EPSILON < table.get(abs(frequency - f2), 0.0):
                return False
        row = self.model.distance_rows[index]
        for j in self.model.neighbors(index):
            others = partial[j]
            if not others:
                continue
            reach = row[j] + EPSILON
            for f2 in others:
                if reach < table.get(abs(frequency - f2), 0.0):
                    return False
        return True

    def find_violations(self, assignment: Mapping[str, Iterable[int]]) -> List[Dict]:
        """
        List every separation violation in an assignment.

        Diagnostic counterpart of is_feasible: does not stop at the first
        violation and ignores demand counts.
        """
        model = self.model
        violations = []
        ids = [e for e in model.emitter_order if e in assignment]
        freq_map = {e: sorted(assignment[e]) for e in ids}

        for emitter_id in ids:
            freqs = freq_map[emitter_id]
            for a in range(len(freqs)):
                for b in range(a + 1, len(freqs)):
                    if not self.check_separation(freqs[a], freqs[b], 0.0):
                        violations.append(self._violation(emitter_id, emitter_id, freqs[a], freqs[b], 0.0))

        for pos, id1 in enumerate(ids):
            for id2 in ids[pos + 1:]:
                distance = model.distance(id1, id2)
                for f1 in freq_map[id1]:
                    for f2 in freq_map[id2]:
                        if not self.check_separation(f1, f2, distance):
                            violations.append(self._violation(id1, id2, f1, f2, distance))
        return violations

    def _violation(self, id1: str, id2: str, f1: int, f2: int, distance: float) -> Dict:
        return {
            'emitters': (id1, id2),
            'frequencies': (f1, f2),
            'distance': distance,
            'required_distance': self.minimum_distance_for(abs(f1 - f2)),
            'minimum_separation': self.minimum_separation_for(distance),
        }


def frequency_span(assignment: Mapping[str, Iterable[int]]) -> int:
    """Highest minus lowest frequency used; 0 when nothing or one value is used"""
    used = [f for freqs in assignment.values() for f in freqs]
    if not used:
        return 0
    return max(used) - min(used)


def number_of_frequencies(assignment: Mapping[str, Iterable[int]]) -> int:
    """Number of distinct frequency values used across the assignment"""
    distinct = set()
    for freqs in assignment.values():
        distinct.update(freqs)
    return len(distinct)


def missing_demand(model: ProblemModel, assignment: Mapping[str, Iterable[int]]) -> Tuple[int, int]:
    """
    Total shortfall and surplus of assigned counts against demand.

    Returns:
        Tuple of (missing, excess) frequency counts
    """
    missing = 0
    excess = 0
    for emitter_id, demand in zip(model.emitter_order, model.demands):
        have = len(set(assignment.get(emitter_id, ())))
        if have < demand:
            missing += demand - have
        elif have > demand:
            excess += have - demand
    return missing, excess
