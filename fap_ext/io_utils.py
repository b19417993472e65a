"""
I/O utilities for the search-engine boundary.

Handles candidate CSV parsing/serialization, evaluation logs, run folders
and YAML metadata sidecars.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .data_models import Candidate, CandidateBatch, EvaluationRecord

EVALUATION_FIELDS = ['candidate_id', 'decoder', 'fitness', 'feasible',
                     'span', 'missing', 'excess', 'timestamp']


def parse_gene(token: str) -> Any:
    """Parse a gene token as int, then float, otherwise keep the string."""
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return token


def load_candidates_csv(csv_path: Union[str, Path]) -> CandidateBatch:
    """
    Load a candidates CSV file.

    CSV format:
        id,genes
        cand_000,3 0 2 1
        cand_001,0.25 0.75 0.5 0.1

    Args:
        csv_path: Path to CSV file

    Returns:
        CandidateBatch with one Candidate per row

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid or it has no rows
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    candidates = []
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)

        # Validate header
        if not reader.fieldnames or not all(col in reader.fieldnames for col in ['id', 'genes']):
            raise ValueError(f"Invalid CSV format in {csv_path}. Expected columns: id,genes")

        for row in reader:
            genes = [parse_gene(token) for token in (row['genes'] or '').split()]
            candidates.append(Candidate(
                id=row['id'],
                genes=genes,
                metadata={"source_file": str(csv_path)}
            ))

    if not candidates:
        raise ValueError(f"No candidates found in {csv_path}")

    return CandidateBatch(
        candidates=candidates,
        metadata={
            "source_file": str(csv_path),
            "loaded_at": datetime.now().isoformat(),
            "count": len(candidates),
        }
    )


def save_candidates_csv(
    candidates: list[Candidate],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save candidates to CSV file.

    Args:
        candidates: Candidates to save
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['id', 'genes'])
        for candidate in candidates:
            writer.writerow([candidate.id, " ".join(str(g) for g in candidate.genes)])

    return output_path


def save_evaluation_log(
    records: list[EvaluationRecord],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save evaluation records to CSV file.

    Args:
        records: List of EvaluationRecord objects
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved evaluation log

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Evaluation log already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=EVALUATION_FIELDS)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_dict())

    return output_path


def load_evaluation_log(log_path: Union[str, Path]) -> list[EvaluationRecord]:
    """
    Load evaluation records written by save_evaluation_log.

    Raises:
        FileNotFoundError: If log file doesn't exist
    """
    log_path = Path(log_path)

    if not log_path.exists():
        raise FileNotFoundError(f"Evaluation log not found: {log_path}")

    with open(log_path, 'r') as f:
        return [EvaluationRecord.from_dict(row) for row in csv.DictReader(f)]


def create_run_folder(
    root: Union[str, Path],
    run_name: Optional[str] = None
) -> Path:
    """
    Create a run folder with standard naming.

    Args:
        root: Root directory for run outputs
        run_name: Folder name (defaults to run_<timestamp>)

    Returns:
        Path to created run folder

    Raises:
        FileExistsError: If folder already exists
    """
    root = Path(root)
    if run_name is None:
        run_name = datetime.now().strftime("run_%Y%m%d_%H%M%S")
    run_folder = root / run_name

    if run_folder.exists():
        raise FileExistsError(f"Run folder already exists: {run_folder}")

    run_folder.mkdir(parents=True, exist_ok=False)

    return run_folder


def save_metadata(
    metadata: dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save metadata to YAML sidecar file.

    Args:
        metadata: Metadata dictionary
        output_path: Path for output YAML
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved metadata file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Metadata file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def validate_candidates_csv(csv_path: Union[str, Path],
                            expected_length: Optional[int] = None) -> tuple[bool, Optional[str]]:
    """
    Validate that a candidates CSV file has correct format.

    Args:
        csv_path: Path to CSV file
        expected_length: Required genotype length, if known

    Returns:
        Tuple of (is_valid, error_message)
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        return False, f"File not found: {csv_path}"

    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)

        required_cols = {'id', 'genes'}
        if not required_cols.issubset(set(reader.fieldnames or [])):
            return False, f"Missing required columns. Expected: {required_cols}"

        row_count = 0
        for row in reader:
            row_count += 1
            length = len((row['genes'] or '').split())
            if expected_length is not None and length != expected_length:
                return False, (
                    f"Candidate {row['id']} in row {row_count} has {length} genes, "
                    f"expected {expected_length}"
                )

        if row_count == 0:
            return False, "CSV file is empty (no candidates)"

    return True, None
