#!/usr/bin/env python3
"""
Test runner for the frequency assignment system
"""

import unittest
import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))


def run_all_tests():
    """Discover and run every test module under tests/"""
    loader = unittest.TestLoader()
    suite = loader.discover(str(Path(__file__).parent / "tests"), top_level_dir=str(Path(__file__).parent))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


def run_integration_test():
    """Evaluate the bundled example problem end to end"""
    print("\n" + "=" * 50)
    print("INTEGRATION TEST")
    print("=" * 50)

    from frequency_assignment.config_loader import create_evaluator_from_config
    from frequency_assignment.assignment_metrics import AssignmentMetrics

    config_path = Path(__file__).parent / "config.yaml"
    print("Creating evaluator from config...")
    evaluator = create_evaluator_from_config(str(config_path))

    print("Evaluating identity genotype...")
    genotype = list(range(evaluator.declared_length))
    result = evaluator.evaluate_detailed(genotype)

    metrics = AssignmentMetrics(evaluator.model).analyze_assignment(result.assignment)
    print(f"Fitness: {result.fitness}")
    print(f"Span: {metrics['span']} (lower bound {metrics['span_lower_bound']})")
    print(f"Missing demand: {metrics['missing']}")

    success = result.feasible and metrics['feasible'] and result.fitness == metrics['span']

    if success:
        print("✓ Integration test PASSED")
    else:
        print("✗ Integration test FAILED")

    return success


if __name__ == "__main__":
    print("Running Frequency Assignment System Tests")
    print("=" * 60)

    print("Running unit tests...")
    unit_success = run_all_tests()

    integration_success = run_integration_test()

    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)
    print(f"Unit tests: {'PASSED' if unit_success else 'FAILED'}")
    print(f"Integration test: {'PASSED' if integration_success else 'FAILED'}")

    overall_success = unit_success and integration_success
    print(f"Overall: {'PASSED' if overall_success else 'FAILED'}")

    sys.exit(0 if overall_success else 1)
