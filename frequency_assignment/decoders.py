"""
Genotype Decoders

Three interchangeable strategies turning an opaque, indexable genotype into a
frequency assignment:

- BitmapDecoder: one gene per (emitter, frequency) pair
- PriorityGreedyDecoder: emitter priority ranking, frequency-major or
  emitter-major greedy sweep
- PermutationSlotDecoder: priority ranking over a universe of total-demand
  frequency slots

All decoders are deterministic and never place a frequency that breaks a
separation constraint against frequencies already placed (the bitmap decoder
places exactly what the genotype says). Unmet demand is returned as an
incomplete assignment, never raised.
"""

import logging
import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set, Tuple

from .errors import InvalidGenotypeError
from .feasibility import FeasibilityChecker
from .model import ProblemModel

logger = logging.getLogger(__name__)

Assignment = Dict[str, Set[int]]


class DecoderKind(Enum):
    """Available genotype encodings"""
    BITMAP = "bitmap"
    PRIORITY_GREEDY = "priority_greedy"
    PERMUTATION_SLOT = "permutation_slot"


class SweepOrder(Enum):
    """Greedy sweep order of the priority decoder"""
    FREQUENCY_MAJOR = "frequency_major"  # first available emitter
    EMITTER_MAJOR = "emitter_major"      # first available frequency


class ScratchArena:
    """
    Per-worker scratch buffers for decoding.

    Holds one frequency list per emitter. An arena must only be used by one
    decode call at a time; reset() clears it between calls.
    """

    def __init__(self, num_emitters: int):
        self.num_emitters = num_emitters
        self.placed: List[List[int]] = [[] for _ in range(num_emitters)]

    def reset(self) -> List[List[int]]:
        for freqs in self.placed:
            freqs.clear()
        return self.placed

    @classmethod
    def for_model(cls, model: ProblemModel) -> 'ScratchArena':
        return cls(model.num_emitters)


class Decoder(Protocol):
    """Capability shared by every decoder variant"""
    kind: DecoderKind
    model: ProblemModel

    @property
    def declared_length(self) -> int: ...

    @property
    def frequency_limit(self) -> int: ...

    def decode(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> Assignment: ...

    def count_excess(self, genotype: Sequence[Any]) -> int: ...


def gene_sort_key(gene: Any) -> Tuple:
    """
    Deterministic sort key for a gene of arbitrary type.

    Numbers sort by value; NaN sorts after every number; anything else sorts
    after numbers by its string form.
    """
    if isinstance(gene, numbers.Real):
        value = float(gene)
        if math.isnan(value):
            return (1, 0.0, "")
        return (0, value, "")
    return (2, 0.0, str(gene))


def priority_order(genotype: Sequence[Any]) -> List[int]:
    """
    Positions of the genotype sorted by gene value.

    The sort is stable, so equal genes keep their original relative order.
    A permutation genotype [2, 0, 1] yields [1, 2, 0].
    """
    keys = [gene_sort_key(genotype[i]) for i in range(len(genotype))]
    return sorted(range(len(keys)), key=keys.__getitem__)


def _check_length(genotype: Sequence[Any], expected: int, kind: DecoderKind) -> None:
    if len(genotype) != expected:
        raise InvalidGenotypeError(expected, len(genotype), kind.value)


def _prepare_scratch(model: ProblemModel, scratch: Optional[ScratchArena]) -> List[List[int]]:
    if scratch is None:
        scratch = ScratchArena.for_model(model)
    elif scratch.num_emitters != model.num_emitters:
        raise ValueError(
            f"Scratch arena sized for {scratch.num_emitters} emitters, "
            f"model has {model.num_emitters}"
        )
    return scratch.reset()


def _to_assignment(model: ProblemModel, placed: List[List[int]]) -> Assignment:
    return {emitter_id: set(placed[i]) for i, emitter_id in enumerate(model.emitter_order)}


def _log_incomplete(kind: str, model: ProblemModel, placed: List[List[int]]) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        missing = sum(d - len(p) for d, p in zip(model.demands, placed) if len(p) < d)
        if missing:
            logger.debug("%s decoding left %d frequencies unassigned", kind, missing)


@dataclass
class BitmapDecoder:
    """
    Direct 0/1 matrix encoding.

    Gene ``e * frequency_domain_size + f`` is truthy iff emitter ``e`` (in
    stable order) uses frequency ``f``. Frequencies are collected in
    increasing order and scanning stops once the demand is met, so excess
    truthy genes are ignored here and reported by count_excess().
    """
    model: ProblemModel
    frequency_domain_size: Optional[int] = None
    kind: DecoderKind = field(default=DecoderKind.BITMAP, init=False)

    def __post_init__(self):
        if self.frequency_domain_size is None:
            self.frequency_domain_size = self.model.max_frequency + 1
        if isinstance(self.frequency_domain_size, bool) or not isinstance(self.frequency_domain_size, int):
            raise ValueError(f"frequency_domain_size must be an integer, got {self.frequency_domain_size!r}")
        if self.frequency_domain_size <= 0:
            raise ValueError(f"frequency_domain_size must be positive, got {self.frequency_domain_size}")

    @property
    def declared_length(self) -> int:
        return self.model.num_emitters * self.frequency_domain_size

    @property
    def frequency_limit(self) -> int:
        return self.frequency_domain_size - 1

    def decode(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> Assignment:
        _check_length(genotype, self.declared_length, self.kind)
        placed = _prepare_scratch(self.model, scratch)
        domain = self.frequency_domain_size

        for e, demand in enumerate(self.model.demands):
            freqs = placed[e]
            base = e * domain
            for f in range(domain):
                if len(freqs) >= demand:
                    break
                if genotype[base + f]:
                    freqs.append(f)

        _log_incomplete("Bitmap", self.model, placed)
        return _to_assignment(self.model, placed)

    def count_excess(self, genotype: Sequence[Any]) -> int:
        """Truthy genes beyond each emitter's demand"""
        _check_length(genotype, self.declared_length, self.kind)
        domain = self.frequency_domain_size
        excess = 0
        for e, demand in enumerate(self.model.demands):
            base = e * domain
            ones = sum(1 for f in range(domain) if genotype[base + f])
            if ones > demand:
                excess += ones - demand
        return excess


@dataclass
class PriorityGreedyDecoder:
    """
    Greedy placement driven by an emitter priority ranking.

    The genotype has one gene per emitter; the visit order is the stable sort
    of gene values (see priority_order). Placements are irrevocable.

    FREQUENCY_MAJOR: for f = 0, 1, ... give f to every emitter, in priority
    order, that still needs frequencies and can take it.
    EMITTER_MAJOR: for each emitter in priority order, take every feasible
    f = 0, 1, ... until its demand is met.

    Both stop at model.frequency_cap.
    """
    model: ProblemModel
    sweep_order: SweepOrder = SweepOrder.FREQUENCY_MAJOR
    kind: DecoderKind = field(default=DecoderKind.PRIORITY_GREEDY, init=False)

    def __post_init__(self):
        self.sweep_order = SweepOrder(self.sweep_order)
        self._checker = FeasibilityChecker(self.model)

    @property
    def declared_length(self) -> int:
        return self.model.num_emitters

    @property
    def frequency_limit(self) -> int:
        return self.model.frequency_cap

    def decode(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> Assignment:
        _check_length(genotype, self.declared_length, self.kind)
        placed = _prepare_scratch(self.model, scratch)
        order = priority_order(genotype)

        if self.sweep_order is SweepOrder.FREQUENCY_MAJOR:
            self._sweep_frequencies(order, placed)
        else:
            self._sweep_emitters(order, placed)

        _log_incomplete(f"Priority ({self.sweep_order.value})", self.model, placed)
        return _to_assignment(self.model, placed)

    def _sweep_frequencies(self, order: List[int], placed: List[List[int]]) -> None:
        demands = self.model.demands
        can_assign = self._checker.can_assign
        remaining = self.model.total_demand
        cap = self.model.frequency_cap
        f = 0
        while remaining > 0 and f <= cap:
            for e in order:
                if len(placed[e]) >= demands[e]:
                    continue
                if can_assign(e, f, placed):
                    placed[e].append(f)
                    remaining -= 1
                    if remaining == 0:
                        break
            f += 1

    def _sweep_emitters(self, order: List[int], placed: List[List[int]]) -> None:
        demands = self.model.demands
        can_assign = self._checker.can_assign
        cap = self.model.frequency_cap
        for e in order:
            f = 0
            while len(placed[e]) < demands[e] and f <= cap:
                if can_assign(e, f, placed):
                    placed[e].append(f)
                f += 1

    def count_excess(self, genotype: Sequence[Any]) -> int:
        return 0


@dataclass
class PermutationSlotDecoder:
    """
    Greedy placement driven by a ranking over frequency slots.

    The genotype has one gene per slot of a universe of size
    U = total demand; slot k stands for frequency k. Emitters are processed
    in stable order and each scans the ranked slots, keeping every feasible
    frequency until its demand is met.
    """
    model: ProblemModel
    kind: DecoderKind = field(default=DecoderKind.PERMUTATION_SLOT, init=False)

    def __post_init__(self):
        self._checker = FeasibilityChecker(self.model)

    @property
    def declared_length(self) -> int:
        return self.model.total_demand

    @property
    def frequency_limit(self) -> int:
        return max(self.model.total_demand - 1, 0)

    def decode(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> Assignment:
        _check_length(genotype, self.declared_length, self.kind)
        placed = _prepare_scratch(self.model, scratch)
        ranked_slots = priority_order(genotype)
        can_assign = self._checker.can_assign

        for e, demand in enumerate(self.model.demands):
            for slot in ranked_slots:
                if len(placed[e]) >= demand:
                    break
                if can_assign(e, slot, placed):
                    placed[e].append(slot)

        _log_incomplete("Permutation slot", self.model, placed)
        return _to_assignment(self.model, placed)

    def count_excess(self, genotype: Sequence[Any]) -> int:
        return 0


def create_decoder(kind, model: ProblemModel, sweep_order=SweepOrder.FREQUENCY_MAJOR,
                   frequency_domain_size: Optional[int] = None) -> Decoder:
    """
    Build a decoder variant by kind.

    Args:
        kind: DecoderKind or its string value
        model: Finalized problem model
        sweep_order: SweepOrder (or value) for the priority decoder
        frequency_domain_size: Domain size for the bitmap decoder

    Returns:
        Decoder instance
    """
    kind = DecoderKind(kind)
    if kind is DecoderKind.BITMAP:
        return BitmapDecoder(model, frequency_domain_size)
    if kind is DecoderKind.PRIORITY_GREEDY:
        return PriorityGreedyDecoder(model, SweepOrder(sweep_order))
    return PermutationSlotDecoder(model)
