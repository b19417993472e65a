"""
Objective interface for external search drivers.

Thin wrapper around the frequency_assignment evaluator exposing what a
generic optimisation engine asks of a problem: number of variables, the
alphabet of each variable, optimisation sense and a fitness function.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from frequency_assignment.config_loader import create_evaluator, load_config
from frequency_assignment.decoders import Assignment, DecoderKind, ScratchArena
from frequency_assignment.evaluator import EvaluationResult, ObjectiveEvaluator
from frequency_assignment.model import ProblemModel


class FAPObjective:
    """
    Search-engine facing view of one configured ObjectiveEvaluator.

    Alphabet sizes per encoding:
        bitmap: 2 for every gene
        priority_greedy: number of emitters (a permutation of indices)
        permutation_slot: total demand (a permutation of slots)
    """

    def __init__(self, evaluator: ObjectiveEvaluator):
        self.evaluator = evaluator
        self.decoder = evaluator.decoder
        self.model: ProblemModel = evaluator.model

    @classmethod
    def from_config(cls, config_path: str = "config.yaml") -> "FAPObjective":
        """
        Build the objective described by a main configuration file.

        Args:
            config_path: Path to main configuration file
        """
        config = load_config(config_path)
        return cls(create_evaluator(config))

    @property
    def num_vars(self) -> int:
        return self.evaluator.declared_length

    @property
    def optimization_sense(self) -> str:
        return self.evaluator.optimization_sense

    @property
    def decoder_name(self) -> str:
        name = self.decoder.kind.value
        sweep = getattr(self.decoder, "sweep_order", None)
        if sweep is not None:
            name = f"{name}/{sweep.value}"
        return name

    def alphabet_size(self) -> int:
        """Number of distinct values each gene may take."""
        kind = self.decoder.kind
        if kind is DecoderKind.BITMAP:
            return 2
        if kind is DecoderKind.PRIORITY_GREEDY:
            return self.model.num_emitters
        return self.model.total_demand

    def alphabet_sizes(self) -> List[int]:
        return [self.alphabet_size()] * self.num_vars

    def genotype_to_assignment(self, genotype: Sequence[Any],
                               scratch: Optional[ScratchArena] = None) -> Assignment:
        return self.evaluator.decode(genotype, scratch)

    def evaluate(self, genotype: Sequence[Any], scratch: Optional[ScratchArena] = None) -> float:
        return self.evaluator.evaluate(genotype, scratch)

    def evaluate_detailed(self, genotype: Sequence[Any],
                          scratch: Optional[ScratchArena] = None) -> EvaluationResult:
        return self.evaluator.evaluate_detailed(genotype, scratch)

    def random_genotype(self, rng: np.random.Generator) -> List[int]:
        """
        Draw a random genotype of the declared length.

        Bitmap genotypes are uniform 0/1; the ranking encodings draw a
        uniform permutation of their alphabet.

        Args:
            rng: numpy random generator

        Returns:
            List of int genes
        """
        if self.decoder.kind is DecoderKind.BITMAP:
            return [int(g) for g in rng.integers(0, 2, size=self.num_vars)]
        return [int(g) for g in rng.permutation(self.num_vars)]

    def describe(self) -> Dict[str, Any]:
        """Summary used in run metadata."""
        return {
            "decoder": self.decoder_name,
            "num_vars": self.num_vars,
            "alphabet_size": self.alphabet_size(),
            "optimization_sense": self.optimization_sense,
            "emitters": self.model.num_emitters,
            "total_demand": self.model.total_demand,
            "frequency_limit": self.decoder.frequency_limit,
            "large_penalty": self.evaluator.large_penalty,
            "penalty_scale": self.evaluator.penalty_scale,
        }
