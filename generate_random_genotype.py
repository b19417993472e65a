#!/usr/bin/env python3
"""
Write random candidate genotypes for the configured encoding.

The output is a candidates CSV (id,genes) that fap_cli.py batch mode and
main.py --evaluate accept.
"""

import sys
import argparse
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

import numpy as np

from fap_ext.data_models import Candidate
from fap_ext.io_utils import save_candidates_csv
from fap_ext.objective_interface import FAPObjective


def generate_candidates(objective, count, seed=0, prefix="cand"):
    """Draw count random genotypes from a seeded generator"""
    rng = np.random.default_rng(seed)
    return [
        Candidate(id=f"{prefix}_{i:03d}", genes=objective.random_genotype(rng),
                  metadata={"seed": seed})
        for i in range(count)
    ]


def main():
    parser = argparse.ArgumentParser(description="Generate random candidate genotypes")
    parser.add_argument('--config', '-c', default='config.yaml',
                        help='Configuration file path (default: config.yaml)')
    parser.add_argument('--count', '-n', type=int, default=10,
                        help='Number of candidates (default: 10)')
    parser.add_argument('--seed', type=int, default=0, help='Random seed (default: 0)')
    parser.add_argument('--output', '-o', default='output/candidates.csv',
                        help='Output CSV path (default: output/candidates.csv)')
    parser.add_argument('--overwrite', action='store_true', help='Overwrite an existing file')
    args = parser.parse_args()

    if args.count <= 0:
        parser.error("--count must be positive")

    objective = FAPObjective.from_config(args.config)
    candidates = generate_candidates(objective, args.count, args.seed)
    path = save_candidates_csv(candidates, args.output, overwrite=args.overwrite)

    print(f"Decoder: {objective.decoder_name}")
    print(f"Genotype length: {objective.num_vars}")
    print(f"Wrote {len(candidates)} candidates to {path}")


if __name__ == "__main__":
    main()
