"""
Search-Engine Boundary for Frequency Assignment

This package exposes the frequency assignment objective to external
optimisation drivers and evaluates candidate genotypes in batches.

Key Features:
- Fitness is computed by frequency_assignment (no search operators here)
- Candidate genotypes exchanged as CSV
- Two modes: batch (evaluate a candidates file) and sample (random genotypes)
- Thread-pool evaluation with one scratch arena per worker

Modules:
- data_models: Core data structures (Candidate, CandidateBatch, EvaluationRecord)
- io_utils: Candidate CSV I/O, evaluation logs, run metadata
- objective_interface: num_vars / alphabet / fitness view of an evaluator
- orchestration: Batch and sample workflows
- cli: Run configuration loading and mode dispatch
"""

__version__ = "1.0.0"
__author__ = "Frequency Planning Team"

from .data_models import Candidate, CandidateBatch, EvaluationRecord

__all__ = [
    "Candidate",
    "CandidateBatch",
    "EvaluationRecord",
]
