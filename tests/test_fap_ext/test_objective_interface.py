"""
Tests for the search-engine facing objective.
"""

import unittest
import numpy as np

from frequency_assignment.decoders import (
    BitmapDecoder, PermutationSlotDecoder, PriorityGreedyDecoder
)
from frequency_assignment.evaluator import ObjectiveEvaluator
from frequency_assignment.model import Emitter, ProblemBuilder
from fap_ext.objective_interface import FAPObjective


def three_emitter_model():
    builder = ProblemBuilder()
    builder.add_emitter(Emitter("A", 0.0, 0.0, 0.0, 2))
    builder.add_emitter(Emitter("B", 1.0, 0.0, 0.0, 1))
    builder.add_emitter(Emitter("C", 8.0, 0.0, 0.0, 1))
    builder.add_interference(0, 4.0)
    builder.add_interference(1, 2.0)
    return builder.finalize()


class TestFAPObjective(unittest.TestCase):
    """Test num_vars, alphabets and fitness through FAPObjective."""

    def setUp(self):
        self.model = three_emitter_model()

    def test_priority_greedy_alphabet(self):
        objective = FAPObjective(ObjectiveEvaluator(PriorityGreedyDecoder(self.model)))
        self.assertEqual(objective.num_vars, 3)
        self.assertEqual(objective.alphabet_sizes(), [3, 3, 3])
        self.assertEqual(objective.optimization_sense, "minimization")
        self.assertEqual(objective.decoder_name, "priority_greedy/frequency_major")

    def test_permutation_slot_alphabet(self):
        objective = FAPObjective(ObjectiveEvaluator(PermutationSlotDecoder(self.model)))
        self.assertEqual(objective.num_vars, 4)
        self.assertEqual(objective.alphabet_size(), 4)
        self.assertEqual(objective.decoder_name, "permutation_slot")

    def test_bitmap_alphabet(self):
        objective = FAPObjective(ObjectiveEvaluator(BitmapDecoder(self.model, 5)))
        self.assertEqual(objective.num_vars, 15)
        self.assertEqual(set(objective.alphabet_sizes()), {2})

    def test_random_genotypes(self):
        rng = np.random.default_rng(3)
        for decoder in (PriorityGreedyDecoder(self.model),
                        PermutationSlotDecoder(self.model),
                        BitmapDecoder(self.model, 5)):
            objective = FAPObjective(ObjectiveEvaluator(decoder))
            genes = objective.random_genotype(rng)

            self.assertEqual(len(genes), objective.num_vars)
            self.assertTrue(all(0 <= g < objective.alphabet_size() for g in genes))
            # Every random genotype is evaluable
            self.assertIsInstance(objective.evaluate(genes), float)

    def test_random_permutation(self):
        objective = FAPObjective(ObjectiveEvaluator(PermutationSlotDecoder(self.model)))
        genes = objective.random_genotype(np.random.default_rng(0))
        self.assertEqual(sorted(genes), [0, 1, 2, 3])

    def test_seeded_sampling_is_reproducible(self):
        objective = FAPObjective(ObjectiveEvaluator(PriorityGreedyDecoder(self.model)))
        first = objective.random_genotype(np.random.default_rng(11))
        second = objective.random_genotype(np.random.default_rng(11))
        self.assertEqual(first, second)

    def test_evaluate_matches_evaluator(self):
        evaluator = ObjectiveEvaluator(PriorityGreedyDecoder(self.model))
        objective = FAPObjective(evaluator)
        genotype = [2, 0, 1]

        self.assertEqual(objective.evaluate(genotype), evaluator.evaluate(genotype))
        self.assertEqual(objective.genotype_to_assignment(genotype), evaluator.decode(genotype))

    def test_describe(self):
        objective = FAPObjective(ObjectiveEvaluator(PriorityGreedyDecoder(self.model)))
        description = objective.describe()
        self.assertEqual(description["num_vars"], 3)
        self.assertEqual(description["total_demand"], 4)
        self.assertEqual(description["large_penalty"], 1e9)


if __name__ == '__main__':
    unittest.main()
