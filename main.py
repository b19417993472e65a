#!/usr/bin/env python3
"""
Frequency Assignment - Span Minimisation Toolkit

Main entry point for the frequency assignment system.
Loads the configured problem, decoder and penalty policy and supports
various modes for inspecting and evaluating genotypes.
"""

import sys
import argparse
import time
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

import numpy as np

from frequency_assignment.config_loader import (
    create_evaluator,
    get_evaluation_config,
    get_visualization_config,
    load_config,
    print_config_summary,
)
from frequency_assignment.assignment_metrics import AssignmentMetrics, print_assignment_report
from frequency_assignment.assignment_exporter import create_assignment_file, format_assignment
from frequency_assignment.logging_config import setup_logging
from fap_ext.data_models import Candidate, CandidateBatch
from fap_ext.io_utils import load_candidates_csv
from fap_ext.objective_interface import FAPObjective
from fap_ext.orchestration import evaluate_batch


def run_summary(config_path="config.yaml"):
    """Show configuration and problem summary"""
    print("=" * 60)
    print("FREQUENCY ASSIGNMENT SYSTEM")
    print("=" * 60)
    print_config_summary(config_path)

    config = load_config(config_path)
    objective = FAPObjective(create_evaluator(config))
    model = objective.model

    print("\nProblem:")
    print(f"  Emitters: {model.num_emitters}")
    print(f"  Total demand: {model.total_demand}")
    print(f"  Separation table: {dict(sorted(model.interference.items()))}")
    print(f"  Largest threshold: {model.max_threshold:.3f}")
    print(f"  Frequency step: {model.frequency_step}")
    print(f"  Maximum frequency: {model.max_frequency}")

    print("\nEncoding:")
    for key, value in objective.describe().items():
        print(f"  {key}: {value}")

    return objective


def report_best(objective, genes, fitness, config_path, output_name=None, save_plots=True):
    """Print, export and plot the assignment decoded from the best genotype"""
    assignment = objective.genotype_to_assignment(genes)

    metrics = AssignmentMetrics(objective.model).analyze_assignment(assignment)
    print("\n" + print_assignment_report(metrics, detailed=False))
    print("\nAssignment:")
    print(format_assignment(assignment), end="")

    config = load_config(config_path)
    output_dir = (config.get("output", {}) or {}).get("directory", "output")

    if output_name is None:
        timestamp = int(time.time())
        output_name = f"assignment_{timestamp}"

    print(f"\nExporting assignment file as '{output_name}.csv'...")
    try:
        file_path = create_assignment_file(objective.model, assignment, output_name,
                                           output_dir=output_dir, fitness=fitness)
        print(f"  ✓ CSV: {file_path}")
    except OSError as e:
        print(f"  ✗ CSV: Failed - {e}")

    if save_plots:
        print("\nGenerating visualization plot...")
        # Set matplotlib to non-interactive backend to avoid display issues
        import matplotlib
        matplotlib.use('Agg')
        from frequency_assignment.visualization import AssignmentVisualizer

        vis_config = get_visualization_config(config_path) or {}
        Path(output_dir).mkdir(parents=True, exist_ok=True)
        plot_path = f"{output_dir}/{output_name}_plot.png"
        AssignmentVisualizer(objective.model).plot_comprehensive_analysis(
            assignment,
            metrics,
            figsize=tuple(vis_config.get('figure_size', [14, 6])),
            save_path=plot_path,
            dpi=vis_config.get('dpi', 150)
        )
        print(f"  ✓ Plot: {plot_path}")

    return assignment, metrics


def run_sampling(config_path="config.yaml", num_samples=None, seed=None,
                 output_name=None, save_plots=True):
    """Evaluate random genotypes and report the best one"""
    config = load_config(config_path)
    objective = FAPObjective(create_evaluator(config))

    evaluation_config = get_evaluation_config(config_path) or {}
    workers = evaluation_config.get('workers', 1)
    if num_samples is None:
        num_samples = evaluation_config.get('samples', 100)
    if seed is None:
        seed = evaluation_config.get('random_seed')
    if seed is None:
        seed = int(np.random.randint(0, 2**31))

    print("=" * 60)
    print(f"SAMPLING {num_samples} RANDOM GENOTYPES ({objective.decoder_name})")
    print("=" * 60)

    if num_samples <= 0:
        print("No samples requested, nothing to evaluate.")
        return None, None

    print(f"Random seed: {seed}")
    print(f"Workers: {workers}")

    rng = np.random.default_rng(seed)
    batch = CandidateBatch(candidates=[
        Candidate(id=f"sample_{i:03d}", genes=objective.random_genotype(rng))
        for i in range(num_samples)
    ])

    start_time = time.time()
    records = evaluate_batch(objective, batch, workers)
    elapsed_time = time.time() - start_time
    print(f"Evaluation completed in {elapsed_time:.3f} seconds")

    best = batch.best()
    print(f"\nResults Summary:")
    print(f"  Feasible samples: {sum(1 for r in records if r.feasible)}/{num_samples}")
    print(f"  Best fitness: {best.fitness}")

    report_best(objective, best.genes, best.fitness, config_path, output_name, save_plots)
    return best.genes, best.fitness


def run_evaluation(candidates_path, config_path="config.yaml", output_name=None, save_plots=True):
    """Evaluate every genotype of a candidates CSV file"""
    config = load_config(config_path)
    objective = FAPObjective(create_evaluator(config))
    workers = (get_evaluation_config(config_path) or {}).get('workers', 1)

    print("=" * 60)
    print(f"EVALUATING CANDIDATES ({objective.decoder_name})")
    print("=" * 60)

    batch = load_candidates_csv(candidates_path)
    print(f"Loaded {len(batch)} candidates from {candidates_path}\n")

    records = evaluate_batch(objective, batch, workers)

    print("Candidate    | Fitness         | Feasible | Span")
    print("-------------|-----------------|----------|-----")
    for record in records:
        span = record.span if record.span is not None else "-"
        print(f"{record.candidate_id:12} | {record.fitness:15.1f} | {'yes' if record.feasible else 'no':8} | {span}")

    best = batch.best()
    print(f"\nBest candidate: {best.id} (fitness {best.fitness})")
    report_best(objective, best.genes, best.fitness, config_path, output_name, save_plots)
    return batch


def main():
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Frequency Assignment - Span Minimisation Toolkit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py                                  # Configuration and problem summary
  python3 main.py --sample 500                     # Best of 500 random genotypes (CSV + plot)
  python3 main.py --evaluate examples/candidates.csv
  python3 main.py --sample 100 --seed 7 --no-plot  # Reproducible, no plot
  python3 main.py --config custom.yaml             # Custom config file
        """
    )

    parser.add_argument(
        '--config', '-c',
        default='config.yaml',
        help='Configuration file path (default: config.yaml)'
    )

    parser.add_argument(
        '--sample', '-s',
        type=int,
        metavar='N',
        nargs='?',
        const=-1,
        help='Evaluate N random genotypes (default: evaluation.samples)'
    )

    parser.add_argument(
        '--evaluate', '-e',
        metavar='CSV',
        help='Evaluate the genotypes in a candidates CSV file'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for sampling (default: evaluation.random_seed)'
    )

    parser.add_argument(
        '--output-name', '-n',
        type=str,
        metavar='NAME',
        help='Base name for CSV file (default: assignment_TIMESTAMP)'
    )

    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip the visualization plot'
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        setup_logging((config.get('logging', {}) or {}).get('level', 'INFO'))

        if args.evaluate:
            run_evaluation(args.evaluate, args.config, args.output_name, not args.no_plot)
        elif args.sample is not None:
            num_samples = None if args.sample < 0 else args.sample
            run_sampling(args.config, num_samples, args.seed, args.output_name, not args.no_plot)
        else:
            run_summary(args.config)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
