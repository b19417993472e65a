"""
Tests for the command-line helper tools
"""

import shutil
import tempfile
import unittest
import sys
from unittest import mock
from pathlib import Path

import yaml

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from fap_ext.io_utils import save_candidates_csv
from fap_ext.objective_interface import FAPObjective
from fap_ext.orchestration import evaluate_batch
from generate_random_genotype import generate_candidates
from main import run_evaluation, run_sampling
from validate_config import ConfigValidator

ROOT = Path(__file__).parent.parent


class TestConfigValidator(unittest.TestCase):
    """Test detailed configuration validation"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write_config(self, config):
        path = self.temp_dir / "config.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump(config, f)
        return str(path)

    def test_bundled_config_is_valid(self):
        result = ConfigValidator().validate_comprehensive(str(ROOT / "config.yaml"))
        self.assertTrue(result['valid'], result['errors'])
        self.assertEqual(result['summary']['problem']['emitters'], 6)
        self.assertEqual(result['summary']['encoding']['decoder'], 'priority_greedy')

    def test_missing_file(self):
        result = ConfigValidator().validate_comprehensive(str(self.temp_dir / "missing.yaml"))
        self.assertFalse(result['valid'])

    def test_missing_problem_file(self):
        path = self.write_config({'problem': {'path': 'nowhere.fap'}, 'decoder': {}})
        result = ConfigValidator().validate_comprehensive(path)
        self.assertFalse(result['valid'])
        self.assertTrue(any("Failed to load problem" in e for e in result['errors']))

    def test_small_penalty_is_error(self):
        shutil.copy(ROOT / "examples" / "small.fap", self.temp_dir / "small.fap")
        path = self.write_config({
            'problem': {'path': 'small.fap'},
            'decoder': {'kind': 'bitmap'},
            'penalty': {'large_constant': 3.0},
        })
        result = ConfigValidator().validate_comprehensive(path)
        self.assertFalse(result['valid'])
        self.assertTrue(any("large_constant" in e for e in result['errors']))


class TestGenerateCandidates(unittest.TestCase):
    """Test random candidate generation"""

    def test_candidates_match_encoding(self):
        objective = FAPObjective.from_config(str(ROOT / "config.yaml"))
        candidates = generate_candidates(objective, 4, seed=1)

        self.assertEqual([c.id for c in candidates], ["cand_000", "cand_001", "cand_002", "cand_003"])
        for candidate in candidates:
            self.assertEqual(len(candidate.genes), objective.num_vars)
            self.assertEqual(sorted(candidate.genes), list(range(objective.num_vars)))

    def test_seeded(self):
        objective = FAPObjective.from_config(str(ROOT / "config.yaml"))
        first = [c.genes for c in generate_candidates(objective, 3, seed=9)]
        second = [c.genes for c in generate_candidates(objective, 3, seed=9)]
        self.assertEqual(first, second)

class TestMainModes(unittest.TestCase):
    """Test sampling and candidate evaluation from main.py"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        shutil.copy(ROOT / "examples" / "small.fap", self.temp_dir / "small.fap")
        self.output_dir = self.temp_dir / "out"
        self.config_path = str(self.temp_dir / "config.yaml")
        with open(self.config_path, 'w') as f:
            yaml.safe_dump({
                'problem': {'path': 'small.fap'},
                'decoder': {'kind': 'priority_greedy'},
                'evaluation': {'workers': 2, 'samples': 5, 'random_seed': 3},
                'output': {'directory': str(self.output_dir)},
            }, f)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_zero_samples_reports_nothing(self):
        self.assertEqual(run_sampling(self.config_path, num_samples=0, save_plots=False), (None, None))
        self.assertFalse(self.output_dir.exists())

    def test_sampling_uses_configured_workers(self):
        with mock.patch('main.evaluate_batch', wraps=evaluate_batch) as spy:
            genes, fitness = run_sampling(self.config_path, output_name="best", save_plots=False)

        self.assertEqual(spy.call_count, 1)
        batch, workers = spy.call_args[0][1], spy.call_args[0][2]
        self.assertEqual(workers, 2)
        self.assertEqual(len(batch), 5)
        self.assertEqual(fitness, min(c.fitness for c in batch.candidates))
        self.assertEqual(len(genes), 6)
        self.assertTrue((self.output_dir / "best.csv").exists())

    def test_evaluation_uses_configured_workers(self):
        objective = FAPObjective.from_config(self.config_path)
        candidates_path = save_candidates_csv(generate_candidates(objective, 3, seed=2),
                                              self.temp_dir / "candidates.csv")

        with mock.patch('main.evaluate_batch', wraps=evaluate_batch) as spy:
            batch = run_evaluation(str(candidates_path), self.config_path,
                                   output_name="best", save_plots=False)

        self.assertEqual(spy.call_args[0][2], 2)
        self.assertTrue(all(c.is_evaluated for c in batch.candidates))



if __name__ == '__main__':
    unittest.main()
