"""
Objective Evaluation

Composes a decoder with the feasibility checker and one penalty policy to
turn a genotype into a minimisation fitness value.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .decoders import Assignment, Decoder, ScratchArena
from .feasibility import FeasibilityChecker, frequency_span, missing_demand

DEFAULT_LARGE_PENALTY = 1e9
DEFAULT_PENALTY_SCALE = 1e6

MINIMIZATION = "minimization"


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating one genotype"""
    assignment: Assignment
    fitness: float
    missing: int
    excess: int
    feasible: bool

    @property
    def span(self) -> Optional[int]:
        """Frequency span, only meaningful for feasible results"""
        return frequency_span(self.assignment) if self.feasible else None


class ObjectiveEvaluator:
    """
    Fitness function for one decoder and one penalty policy.

    Penalty policy (identical for every encoding):
        - count mismatch: large_penalty + penalty_scale * (missing + excess)
        - complete but infeasible: large_penalty
        - feasible: frequency span

    large_penalty must exceed the largest span the decoder can produce, so
    infeasible candidates always rank behind feasible ones.
    """

    optimization_sense = MINIMIZATION

    def __init__(self,
                 decoder: Decoder,
                 large_penalty: float = DEFAULT_LARGE_PENALTY,
                 penalty_scale: float = DEFAULT_PENALTY_SCALE):
        if penalty_scale <= 0:
            raise ValueError(f"penalty_scale must be positive, got {penalty_scale}")
        if large_penalty <= decoder.frequency_limit:
            raise ValueError(
                f"large_penalty ({large_penalty}) must exceed the largest achievable "
                f"span ({decoder.frequency_limit})"
            )
        self.decoder = decoder
        self.model = decoder.model
        self.checker = FeasibilityChecker(self.model)
        self.large_penalty = float(large_penalty)
        self.penalty_scale = float(penalty_scale)

    @property
    def declared_length(self) -> int:
        return self.decoder.declared_length

    def decode(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> Assignment:
        return self.decoder.decode(genotype, scratch)

    def evaluate(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> float:
        return self.evaluate_detailed(genotype, scratch).fitness

    def evaluate_detailed(self, genotype: Sequence[Any],
                          scratch: Optional[ScratchArena] = None) -> EvaluationResult:
        """
        Decode and score a genotype.

        Args:
            genotype: Indexable genotype of the decoder's declared length
            scratch: Optional arena owned by the calling worker

        Returns:
            EvaluationResult with the decoded assignment and its fitness

        Raises:
            InvalidGenotypeError: If the genotype length is wrong
        """
        assignment = self.decoder.decode(genotype, scratch)
        missing, _ = missing_demand(self.model, assignment)
        excess = self.decoder.count_excess(genotype)

        if missing or excess:
            fitness = self.large_penalty + self.penalty_scale * (missing + excess)
            return EvaluationResult(assignment, fitness, missing, excess, False)

        if not self.checker.is_feasible(assignment):
            return EvaluationResult(assignment, self.large_penalty, 0, 0, False)

        return EvaluationResult(assignment, float(frequency_span(assignment)), 0, 0, True)

    def is_penalized(self, fitness: float) -> bool:
        return fitness >= self.large_penalty
