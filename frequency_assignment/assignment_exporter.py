"""
Assignment Export System

Renders frequency assignments as text and exports them to CSV or JSON for
downstream tooling.
"""

import csv
import json
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .feasibility import frequency_span, number_of_frequencies
from .model import ProblemModel


def format_assignment(assignment: Mapping[str, Iterable[int]]) -> str:
    """One line per emitter id (sorted): ``id: f1 f2 ...`` ascending"""
    lines = []
    for emitter_id in sorted(assignment):
        freqs = " ".join(str(f) for f in sorted(assignment[emitter_id]))
        lines.append(f"{emitter_id}: {freqs}".rstrip())
    return "\n".join(lines) + ("\n" if lines else "")


@dataclass
class AssignmentRow:
    """Single emitter/frequency pair in an exported assignment"""
    emitter: str
    frequency: int
    x: float
    y: float
    z: float


@dataclass
class AssignmentDocument:
    """Exportable assignment with run metadata"""
    rows: List[AssignmentRow]
    metadata: Dict[str, Any]


class AssignmentExporter:
    """Exports assignments to CSV and JSON"""

    def __init__(self, model: ProblemModel):
        self.model = model

    def create_document(self,
                        assignment: Mapping[str, Iterable[int]],
                        fitness: Optional[float] = None,
                        decoder: Optional[str] = None) -> AssignmentDocument:
        """
        Convert an assignment to an exportable document.

        Args:
            assignment: Emitter id -> frequencies
            fitness: Optional fitness of the candidate that produced it
            decoder: Optional decoder name

        Returns:
            AssignmentDocument with one row per emitter/frequency pair
        """
        rows = []
        for emitter_id in sorted(assignment):
            e = self.model.emitter(emitter_id)
            for f in sorted(assignment[emitter_id]):
                rows.append(AssignmentRow(emitter_id, f, e.x, e.y, e.z))

        metadata = {
            'timestamp': datetime.now().isoformat(),
            'generator': 'frequency_assignment',
            'emitters': self.model.num_emitters,
            'total_demand': self.model.total_demand,
            'span': frequency_span(assignment),
            'distinct_frequencies': number_of_frequencies(assignment),
        }
        if fitness is not None:
            metadata['fitness'] = fitness
        if decoder is not None:
            metadata['decoder'] = decoder

        return AssignmentDocument(rows=rows, metadata=metadata)

    def export_csv(self, document: AssignmentDocument, output_path: str) -> str:
        """Export assignment rows to CSV"""
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['emitter', 'frequency', 'x', 'y', 'z'])
            for row in document.rows:
                writer.writerow([row.emitter, row.frequency, row.x, row.y, row.z])

        return str(output_file)

    def export_json(self, document: AssignmentDocument, output_path: str) -> str:
        """Export assignment and metadata to JSON"""
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        assignment = {}
        for row in document.rows:
            assignment.setdefault(row.emitter, []).append(row.frequency)

        payload = {
            'metadata': document.metadata,
            'assignment': assignment,
            'rows': [asdict(row) for row in document.rows],
        }
        with open(output_file, 'w') as f:
            json.dump(payload, f, indent=2)

        return str(output_file)


def load_assignment_csv(csv_path: str) -> Dict[str, set]:
    """
    Load an assignment exported by AssignmentExporter.export_csv.

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    assignment: Dict[str, set] = {}
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or not {'emitter', 'frequency'}.issubset(reader.fieldnames):
            raise ValueError(f"Invalid CSV format in {csv_path}. Expected columns: emitter,frequency")
        for row in reader:
            assignment.setdefault(row['emitter'], set()).add(int(row['frequency']))
    return assignment


def create_assignment_file(model: ProblemModel,
                           assignment: Mapping[str, Iterable[int]],
                           output_name: Optional[str] = None,
                           output_dir: str = "output",
                           fitness: Optional[float] = None) -> str:
    """
    Convenience function to write an assignment CSV file.

    Returns:
        Path to generated CSV file
    """
    if output_name is None:
        timestamp = int(time.time())
        output_name = f"assignment_{timestamp}"

    exporter = AssignmentExporter(model)
    document = exporter.create_document(assignment, fitness=fitness)

    return exporter.export_csv(document, f"{output_dir}/{output_name}.csv")
