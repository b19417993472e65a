"""
Data models for the search-engine boundary.

Core data structures representing candidates, candidate batches and
evaluation records.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Candidate:
    """
    Represents a single genotype handed over by an external search driver.

    Attributes:
        id: Unique identifier for this candidate
        genes: Genotype values, interpreted by the configured decoder
        metadata: Additional information (source file, generation, etc.)
        fitness: Fitness once evaluated (None before evaluation)
    """
    id: str
    genes: list[Any]
    metadata: dict[str, Any] = field(default_factory=dict)
    fitness: Optional[float] = None

    def __post_init__(self):
        """Store genes as a plain list."""
        if not isinstance(self.genes, list):
            self.genes = list(self.genes)

    def copy(self) -> "Candidate":
        """
        Create a deep copy of this candidate.

        Returns:
            New Candidate with copied genes and metadata
        """
        return Candidate(
            id=self.id,
            genes=self.genes.copy(),
            metadata=self.metadata.copy(),
            fitness=self.fitness
        )

    def __len__(self) -> int:
        return len(self.genes)

    def __getitem__(self, index: int) -> Any:
        return self.genes[index]

    @property
    def is_evaluated(self) -> bool:
        return self.fitness is not None


@dataclass
class CandidateBatch:
    """
    Represents a set of candidates submitted for evaluation together.

    Attributes:
        candidates: List of Candidate objects
        metadata: Additional information (source, generation number, etc.)
    """
    candidates: list[Candidate]
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate batch."""
        if not self.candidates:
            raise ValueError("CandidateBatch must contain at least one candidate")

    def get_candidate_by_id(self, candidate_id: str) -> Optional[Candidate]:
        """
        Retrieve candidate by ID.

        Args:
            candidate_id: ID of candidate to retrieve

        Returns:
            Candidate if found, None otherwise
        """
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate
        return None

    def best(self) -> Optional[Candidate]:
        """Evaluated candidate with the lowest fitness (minimisation)."""
        evaluated = [c for c in self.candidates if c.is_evaluated]
        if not evaluated:
            return None
        return min(evaluated, key=lambda c: c.fitness)

    def __len__(self) -> int:
        """Number of candidates in batch."""
        return len(self.candidates)


@dataclass
class EvaluationRecord:
    """
    Outcome of evaluating one candidate.

    Attributes:
        candidate_id: ID of the evaluated candidate
        decoder: Decoder kind used (plus sweep order where relevant)
        fitness: Scalar fitness (minimisation)
        feasible: Whether the decoded assignment is feasible
        span: Frequency span (None when infeasible)
        missing: Unassigned demand after decoding
        excess: Genes beyond demand (bitmap encoding only)
        timestamp: When the evaluation ran
    """
    candidate_id: str
    decoder: str
    fitness: float
    feasible: bool
    span: Optional[int] = None
    missing: int = 0
    excess: int = 0
    timestamp: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert record to dictionary for CSV export.

        Returns:
            Dictionary with string-serializable values
        """
        return {
            "candidate_id": self.candidate_id,
            "decoder": self.decoder,
            "fitness": self.fitness,
            "feasible": "yes" if self.feasible else "no",
            "span": "" if self.span is None else self.span,
            "missing": self.missing,
            "excess": self.excess,
            "timestamp": self.timestamp or "",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvaluationRecord":
        """
        Create record from dictionary (e.g., from CSV).

        Args:
            data: Dictionary with record fields

        Returns:
            EvaluationRecord instance
        """
        span = data.get("span")
        return cls(
            candidate_id=data["candidate_id"],
            decoder=data["decoder"],
            fitness=float(data["fitness"]),
            feasible=str(data["feasible"]).lower() in ("yes", "true", "1"),
            span=int(span) if span not in (None, "") else None,
            missing=int(data.get("missing") or 0),
            excess=int(data.get("excess") or 0),
            timestamp=data.get("timestamp") or None,
        )
