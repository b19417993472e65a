"""
Orchestration module for the search-engine boundary.

Implements batch evaluation (candidates from CSV) and sample evaluation
(random genotypes) workflows.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from frequency_assignment.assignment_exporter import AssignmentExporter
from frequency_assignment.decoders import ScratchArena

from .data_models import Candidate, CandidateBatch, EvaluationRecord
from .io_utils import (
    load_candidates_csv,
    save_candidates_csv,
    save_evaluation_log,
    save_metadata,
)
from .objective_interface import FAPObjective

logger = logging.getLogger(__name__)


def evaluate_batch(
    objective: FAPObjective,
    batch: CandidateBatch,
    workers: int = 1
) -> List[EvaluationRecord]:
    """
    Evaluate every candidate of a batch, optionally on a thread pool.

    Each worker thread owns its own ScratchArena; the problem model and the
    evaluator are shared read-only. Candidate fitness is written back onto
    the Candidate objects.

    Args:
        objective: Configured objective
        batch: Candidates to evaluate
        workers: Number of worker threads (1 evaluates inline)

    Returns:
        EvaluationRecords in batch order

    Raises:
        InvalidGenotypeError: If any candidate has the wrong genotype length
    """
    if workers <= 0:
        raise ValueError(f"workers must be positive, got {workers}")

    local = threading.local()

    def evaluate_one(candidate: Candidate) -> EvaluationRecord:
        scratch = getattr(local, "scratch", None)
        if scratch is None:
            scratch = ScratchArena.for_model(objective.model)
            local.scratch = scratch
        result = objective.evaluate_detailed(candidate.genes, scratch)
        candidate.fitness = result.fitness
        return EvaluationRecord(
            candidate_id=candidate.id,
            decoder=objective.decoder_name,
            fitness=result.fitness,
            feasible=result.feasible,
            span=result.span,
            missing=result.missing,
            excess=result.excess,
            timestamp=datetime.now().isoformat(),
        )

    if workers == 1:
        records = [evaluate_one(c) for c in batch.candidates]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            records = list(pool.map(evaluate_one, batch.candidates))

    logger.debug("Evaluated %d candidates with %d worker(s)", len(records), workers)
    return records


def summarize_records(records: List[EvaluationRecord]) -> Dict:
    """Aggregate statistics over evaluation records."""
    fitnesses = np.array([r.fitness for r in records], dtype=float)
    feasible = [r for r in records if r.feasible]
    summary = {
        "evaluated": len(records),
        "feasible": len(feasible),
        "best_fitness": float(fitnesses.min()) if len(records) else None,
        "mean_fitness": float(fitnesses.mean()) if len(records) else None,
        "best_span": min(r.span for r in feasible) if feasible else None,
    }
    return summary


def _prepare_output(run_config: Dict) -> Tuple[Path, bool]:
    output_root = Path(run_config['output']['root'])
    overwrite = run_config['output'].get('overwrite', False)

    if output_root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {output_root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    output_root.mkdir(parents=True, exist_ok=overwrite)
    return output_root, overwrite


def _write_results(
    run_config: Dict,
    objective: FAPObjective,
    batch: CandidateBatch,
    records: List[EvaluationRecord],
    output_root: Path,
    overwrite: bool,
    seed: Optional[int] = None
) -> Dict:
    log_path = save_evaluation_log(records, output_root / 'evaluation_log.csv', overwrite=overwrite)

    summary = summarize_records(records)
    best = batch.best()
    if best is not None and run_config['output'].get('export_best', True):
        assignment = objective.genotype_to_assignment(best.genes)
        exporter = AssignmentExporter(objective.model)
        document = exporter.create_document(assignment, fitness=best.fitness,
                                            decoder=objective.decoder_name)
        exporter.export_json(document, str(output_root / 'best_assignment.json'))
        summary["best_candidate"] = best.id

    metadata = {
        "mode": run_config['mode'],
        "config": str(run_config.get('config', 'config.yaml')),
        "created": datetime.now().isoformat(),
        "random_seed": seed,
        "objective": objective.describe(),
        "summary": summary,
    }
    save_metadata(metadata, output_root / 'run_metadata.yaml', overwrite=overwrite)

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Evaluated: {summary['evaluated']} candidates")
    print(f"Feasible: {summary['feasible']}")
    print(f"Best fitness: {summary['best_fitness']}")
    if summary['best_span'] is not None:
        print(f"Best span: {summary['best_span']}")
    print(f"Output directory: {output_root}")
    print(f"Evaluation log: {log_path}")

    return summary


def run_batch_mode(run_config: Dict) -> Dict:
    """
    Evaluate candidates read from a CSV file.

    Args:
        run_config: Run configuration dict from YAML

    Algorithm:
        1. Build the objective from run_config['config']
        2. Load candidates from run_config['input']['candidates']
        3. Evaluate on run_config['workers'] threads
        4. Write evaluation_log.csv, best_assignment.json, run_metadata.yaml

    Returns:
        Summary statistics
    """
    print("=" * 70)
    print("BATCH MODE")
    print("=" * 70)

    config_path = run_config.get('config', 'config.yaml')
    print(f"Loading problem config from: {config_path}")
    objective = FAPObjective.from_config(config_path)
    print(f"Decoder: {objective.decoder_name} ({objective.num_vars} genes)")

    candidates_path = run_config['input']['candidates']
    print(f"Loading candidates from: {candidates_path}")
    batch = load_candidates_csv(candidates_path)
    print(f"Candidates: {len(batch)}")

    output_root, overwrite = _prepare_output(run_config)
    print(f"Output directory: {output_root}\n")

    workers = run_config.get('workers', 1)
    records = evaluate_batch(objective, batch, workers)

    return _write_results(run_config, objective, batch, records, output_root, overwrite)


def run_sample_mode(run_config: Dict) -> Dict:
    """
    Evaluate randomly drawn genotypes.

    Useful as a baseline for an external search driver: the best of N
    uniform samples under the configured decoder.

    Args:
        run_config: Run configuration dict from YAML

    Returns:
        Summary statistics
    """
    print("=" * 70)
    print("SAMPLE MODE")
    print("=" * 70)

    config_path = run_config.get('config', 'config.yaml')
    print(f"Loading problem config from: {config_path}")
    objective = FAPObjective.from_config(config_path)
    print(f"Decoder: {objective.decoder_name} ({objective.num_vars} genes)")

    seed = run_config.get('random_seed')
    if seed is None:
        seed = int(np.random.randint(0, 2**31))
    print(f"Random seed: {seed}")
    rng = np.random.default_rng(seed)

    num_samples = run_config['generation']['samples']
    candidates = [
        Candidate(id=f"sample_{i:03d}", genes=objective.random_genotype(rng),
                  metadata={"seed": seed})
        for i in range(num_samples)
    ]
    batch = CandidateBatch(candidates=candidates, metadata={"random_seed": seed})

    output_root, overwrite = _prepare_output(run_config)
    print(f"Output directory: {output_root}\n")

    if run_config['output'].get('save_candidates', True):
        save_candidates_csv(candidates, output_root / 'candidates.csv', overwrite=overwrite)

    workers = run_config.get('workers', 1)
    records = evaluate_batch(objective, batch, workers)

    return _write_results(run_config, objective, batch, records, output_root, overwrite, seed)
