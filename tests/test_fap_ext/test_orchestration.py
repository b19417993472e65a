"""
Tests for batch evaluation, run modes and run configuration.
"""

import logging
import unittest
import tempfile
import shutil
from pathlib import Path

import yaml

from frequency_assignment.decoders import PriorityGreedyDecoder
from frequency_assignment.errors import InvalidGenotypeError
from frequency_assignment.evaluator import ObjectiveEvaluator
from frequency_assignment.logging_config import PACKAGE_LOGGERS
from frequency_assignment.model import Emitter, ProblemBuilder
from fap_ext.cli import ConfigValidationError, load_run_config, main, run_from_config, validate_run_config
from fap_ext.data_models import Candidate, CandidateBatch
from fap_ext.io_utils import load_evaluation_log, save_candidates_csv
from fap_ext.objective_interface import FAPObjective
from fap_ext.orchestration import evaluate_batch, summarize_records

PROBLEM = """3
A 0 0 0 2
B 1 0 0 1
C 8 0 0 1
0 4.0
1 2.0
"""


def make_objective():
    builder = ProblemBuilder()
    builder.add_emitter(Emitter("A", 0.0, 0.0, 0.0, 2))
    builder.add_emitter(Emitter("B", 1.0, 0.0, 0.0, 1))
    builder.add_emitter(Emitter("C", 8.0, 0.0, 0.0, 1))
    builder.add_interference(0, 4.0)
    builder.add_interference(1, 2.0)
    return FAPObjective(ObjectiveEvaluator(PriorityGreedyDecoder(builder.finalize())))


class TestEvaluateBatch(unittest.TestCase):
    """Test batch evaluation with and without a thread pool."""

    def setUp(self):
        self.objective = make_objective()
        genotypes = [[0, 1, 2], [2, 1, 0], [1, 0, 2], [0.5, 0.1, 0.9],
                     [2, 0, 1], [1, 2, 0]]
        self.batch = CandidateBatch(candidates=[
            Candidate(id=f"c{i}", genes=g) for i, g in enumerate(genotypes)
        ])

    def test_sequential(self):
        records = evaluate_batch(self.objective, self.batch, workers=1)

        self.assertEqual([r.candidate_id for r in records], [c.id for c in self.batch.candidates])
        for record, candidate in zip(records, self.batch.candidates):
            self.assertEqual(record.fitness, candidate.fitness)
            self.assertTrue(record.feasible)
            self.assertEqual(record.fitness, float(record.span))

    def test_thread_pool_matches_sequential(self):
        sequential = [r.fitness for r in evaluate_batch(self.objective, self.batch, workers=1)]
        pooled = [r.fitness for r in evaluate_batch(self.objective, self.batch, workers=3)]
        self.assertEqual(sequential, pooled)

    def test_invalid_worker_count(self):
        with self.assertRaises(ValueError):
            evaluate_batch(self.objective, self.batch, workers=0)

    def test_wrong_length_propagates(self):
        batch = CandidateBatch(candidates=[Candidate(id="bad", genes=[0, 1])])
        with self.assertRaises(InvalidGenotypeError):
            evaluate_batch(self.objective, batch)

    def test_summary(self):
        records = evaluate_batch(self.objective, self.batch)
        summary = summarize_records(records)
        self.assertEqual(summary["evaluated"], 6)
        self.assertEqual(summary["feasible"], 6)
        self.assertEqual(summary["best_fitness"], float(summary["best_span"]))


class TestRunConfig(unittest.TestCase):
    """Test run configuration loading, validation and dispatch."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / "problem.fap").write_text(PROBLEM)
        self.config_path = self.temp_dir / "config.yaml"
        with open(self.config_path, 'w') as f:
            yaml.safe_dump({
                'problem': {'path': 'problem.fap'},
                'decoder': {'kind': 'priority_greedy', 'sweep_order': 'emitter_major'},
            }, f)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write_run_config(self, config):
        path = self.temp_dir / "run.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump(config, f)
        return str(path)

    def test_missing_mode(self):
        with self.assertRaises(ConfigValidationError):
            validate_run_config({'output': {'root': 'x'}})

    def test_invalid_mode(self):
        with self.assertRaises(ConfigValidationError):
            validate_run_config({'mode': 'evolve', 'output': {'root': 'x'}})

    def test_batch_requires_candidates(self):
        with self.assertRaises(ConfigValidationError):
            validate_run_config({
                'mode': 'batch',
                'config': str(self.config_path),
                'output': {'root': str(self.temp_dir / 'out')},
                'input': {},
            })

    def test_sample_requires_positive_samples(self):
        with self.assertRaises(ConfigValidationError):
            validate_run_config({
                'mode': 'sample',
                'config': str(self.config_path),
                'output': {'root': str(self.temp_dir / 'out')},
                'generation': {'samples': 0},
            })

    def test_empty_run_config(self):
        path = self.temp_dir / "empty.yaml"
        path.write_text("")
        with self.assertRaises(ConfigValidationError):
            load_run_config(str(path))

    def test_batch_run(self):
        candidates = [Candidate(id=f"c{i}", genes=g)
                      for i, g in enumerate([[0, 1, 2], [2, 1, 0], [1, 2, 0]])]
        candidates_path = save_candidates_csv(candidates, self.temp_dir / "candidates.csv")
        output_root = self.temp_dir / "batch_out"

        summary = run_from_config(self.write_run_config({
            'mode': 'batch',
            'config': str(self.config_path),
            'input': {'candidates': str(candidates_path)},
            'output': {'root': str(output_root)},
            'workers': 2,
        }))

        self.assertEqual(summary["evaluated"], 3)
        self.assertEqual(len(load_evaluation_log(output_root / "evaluation_log.csv")), 3)
        self.assertTrue((output_root / "best_assignment.json").exists())
        self.assertTrue((output_root / "run_metadata.yaml").exists())

    def test_sample_run_is_reproducible(self):
        def run(name):
            output_root = self.temp_dir / name
            run_from_config(self.write_run_config({
                'mode': 'sample',
                'config': str(self.config_path),
                'random_seed': 5,
                'generation': {'samples': 8},
                'output': {'root': str(output_root)},
            }))
            return [r.fitness for r in load_evaluation_log(output_root / "evaluation_log.csv")]

        self.assertEqual(run("first"), run("second"))

    def test_existing_output_refused(self):
        output_root = self.temp_dir / "taken"
        output_root.mkdir()
        with self.assertRaises(FileExistsError):
            run_from_config(self.write_run_config({
                'mode': 'sample',
                'config': str(self.config_path),
                'generation': {'samples': 2},
                'output': {'root': str(output_root)},
            }))

class TestCliMain(unittest.TestCase):
    """Test the command-line entry point."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / "problem.fap").write_text(PROBLEM)
        config_path = self.temp_dir / "config.yaml"
        with open(config_path, 'w') as f:
            yaml.safe_dump({'problem': {'path': 'problem.fap'}}, f)
        self.output_root = self.temp_dir / "out"
        self.run_path = self.temp_dir / "run.yaml"
        with open(self.run_path, 'w') as f:
            yaml.safe_dump({
                'mode': 'sample',
                'config': str(config_path),
                'random_seed': 3,
                'generation': {'samples': 4},
                'output': {'root': str(self.output_root)},
            }, f)

    def tearDown(self):
        for name in PACKAGE_LOGGERS:
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.setLevel(logging.NOTSET)
            logger.propagate = True
        shutil.rmtree(self.temp_dir)

    def test_no_arguments(self):
        self.assertEqual(main([]), 1)

    def test_positional_config(self):
        self.assertEqual(main([str(self.run_path)]), 0)
        self.assertTrue((self.output_root / "evaluation_log.csv").exists())

    def test_config_option(self):
        self.assertEqual(main(['--config', str(self.run_path)]), 0)
        self.assertEqual(len(load_evaluation_log(self.output_root / "evaluation_log.csv")), 4)

    def test_errors_give_nonzero_exit(self):
        self.assertEqual(main([str(self.temp_dir / "missing.yaml")]), 1)
        self.output_root.mkdir()
        self.assertEqual(main([str(self.run_path)]), 1)


if __name__ == '__main__':
    unittest.main()
