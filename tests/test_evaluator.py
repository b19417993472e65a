"""
Tests for objective evaluation and the penalty policy
"""

import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from frequency_assignment.decoders import (
    BitmapDecoder, PermutationSlotDecoder, PriorityGreedyDecoder, ScratchArena, SweepOrder
)
from frequency_assignment.errors import InvalidGenotypeError
from frequency_assignment.evaluator import (
    DEFAULT_LARGE_PENALTY, DEFAULT_PENALTY_SCALE, MINIMIZATION, ObjectiveEvaluator
)
from frequency_assignment.feasibility import frequency_span
from frequency_assignment.model import Emitter, ProblemBuilder


def two_emitter_model():
    builder = ProblemBuilder()
    builder.add_emitter(Emitter("A", 0.0, 0.0, 0.0, 1))
    builder.add_emitter(Emitter("B", 2.0, 0.0, 0.0, 1))
    builder.add_interference(0, 5.0)
    builder.add_interference(1, 3.0)
    return builder.finalize()


class TestPenaltyPolicy(unittest.TestCase):
    """Test fitness values for complete, incomplete and infeasible decodings"""

    def setUp(self):
        self.model = two_emitter_model()
        # Domain 3: A and B each get a row of three genes
        self.evaluator = ObjectiveEvaluator(BitmapDecoder(self.model, 3))

    def test_defaults(self):
        self.assertEqual(self.evaluator.large_penalty, DEFAULT_LARGE_PENALTY)
        self.assertEqual(self.evaluator.penalty_scale, DEFAULT_PENALTY_SCALE)
        self.assertEqual(self.evaluator.optimization_sense, MINIMIZATION)
        self.assertEqual(self.evaluator.declared_length, 6)

    def test_feasible_fitness_is_span(self):
        genotype = [1, 0, 0,
                    0, 0, 1]
        result = self.evaluator.evaluate_detailed(genotype)

        self.assertTrue(result.feasible)
        self.assertEqual(result.fitness, 2.0)
        self.assertEqual(result.span, 2)
        self.assertEqual(self.evaluator.evaluate(genotype), 2.0)
        self.assertFalse(self.evaluator.is_penalized(result.fitness))

    def test_excess_genes_are_penalised(self):
        genotype = [1, 1, 0,
                    0, 0, 1]
        result = self.evaluator.evaluate_detailed(genotype)

        self.assertFalse(result.feasible)
        self.assertEqual(result.excess, 1)
        self.assertEqual(result.missing, 0)
        self.assertEqual(result.fitness, DEFAULT_LARGE_PENALTY + DEFAULT_PENALTY_SCALE)
        self.assertIsNone(result.span)

    def test_missing_demand_is_penalised(self):
        genotype = [0, 0, 0,
                    0, 0, 0]
        fitness = self.evaluator.evaluate(genotype)
        self.assertEqual(fitness, DEFAULT_LARGE_PENALTY + 2 * DEFAULT_PENALTY_SCALE)
        self.assertTrue(self.evaluator.is_penalized(fitness))

    def test_complete_but_infeasible_gets_flat_penalty(self):
        # Same frequency at distance 2 < 5
        genotype = [1, 0, 0,
                    1, 0, 0]
        result = self.evaluator.evaluate_detailed(genotype)
        self.assertFalse(result.feasible)
        self.assertEqual(result.fitness, DEFAULT_LARGE_PENALTY)

    def test_penalties_rank_behind_every_feasible_value(self):
        feasible = self.evaluator.evaluate([1, 0, 0, 0, 0, 1])
        infeasible = self.evaluator.evaluate([1, 0, 0, 1, 0, 0])
        incomplete = self.evaluator.evaluate([1, 0, 0, 0, 0, 0])
        more_incomplete = self.evaluator.evaluate([0, 0, 0, 0, 0, 0])
        self.assertLess(feasible, infeasible)
        self.assertLess(infeasible, incomplete)
        self.assertLess(incomplete, more_incomplete)

    def test_custom_constants(self):
        evaluator = ObjectiveEvaluator(BitmapDecoder(self.model, 3), 100.0, 10.0)
        self.assertEqual(evaluator.evaluate([0, 0, 0, 0, 0, 0]), 120.0)
        self.assertEqual(evaluator.evaluate([1, 0, 0, 1, 0, 0]), 100.0)

    def test_large_penalty_must_exceed_achievable_span(self):
        with self.assertRaises(ValueError):
            ObjectiveEvaluator(BitmapDecoder(self.model, 3), large_penalty=2.0)

    def test_penalty_scale_must_be_positive(self):
        with self.assertRaises(ValueError):
            ObjectiveEvaluator(BitmapDecoder(self.model, 3), penalty_scale=0.0)

    def test_wrong_length_raises(self):
        with self.assertRaises(InvalidGenotypeError):
            self.evaluator.evaluate([1, 0, 0])


class TestRankingEncodings(unittest.TestCase):
    """Test evaluation through the greedy decoders"""

    def setUp(self):
        self.model = two_emitter_model()

    def test_priority_greedy_fitness(self):
        for sweep in SweepOrder:
            evaluator = ObjectiveEvaluator(PriorityGreedyDecoder(self.model, sweep))
            result = evaluator.evaluate_detailed([0, 1])
            # A takes 0; B needs separation 2 at distance 2
            self.assertEqual(result.assignment, {"A": {0}, "B": {2}})
            self.assertEqual(result.fitness, 2.0)

    def test_permutation_slot_incomplete_is_penalised(self):
        # Slots 0 and 1 only: B cannot be placed
        evaluator = ObjectiveEvaluator(PermutationSlotDecoder(self.model))
        result = evaluator.evaluate_detailed([0, 1])
        self.assertEqual(result.missing, 1)
        self.assertEqual(result.fitness, DEFAULT_LARGE_PENALTY + DEFAULT_PENALTY_SCALE)

    def test_fitness_matches_span_of_decoded_assignment(self):
        builder = ProblemBuilder()
        for i, demand in enumerate([2, 1, 3, 1]):
            builder.add_emitter(Emitter(f"E{i}", float(i), 0.0, 0.0, demand))
        builder.add_interference(0, 2.5).add_interference(1, 1.5)
        model = builder.finalize()

        evaluator = ObjectiveEvaluator(PriorityGreedyDecoder(model))
        scratch = ScratchArena.for_model(model)
        for genotype in ([0, 1, 2, 3], [3, 2, 1, 0], [1, 3, 0, 2]):
            result = evaluator.evaluate_detailed(genotype, scratch)
            self.assertTrue(result.feasible)
            self.assertEqual(result.fitness, frequency_span(result.assignment))


if __name__ == '__main__':
    unittest.main()
