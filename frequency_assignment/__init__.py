"""
Frequency Assignment - Problem Model, Decoders and Objective Evaluation

Assigns integer frequencies to emitters under distance-dependent separation
constraints while minimising the span of frequencies used.
"""

__version__ = "1.0.0"
__author__ = "Frequency Planning Team"

# Export main classes for easy importing
from .errors import FAPError, ParseError, NotFoundError, InvalidGenotypeError
from .model import (
    EPSILON,
    UNBOUNDED,
    Emitter,
    ProblemBuilder,
    ProblemModel,
)
from .feasibility import (
    FeasibilityChecker,
    frequency_span,
    number_of_frequencies,
    missing_demand,
)
from .decoders import (
    DecoderKind,
    SweepOrder,
    ScratchArena,
    BitmapDecoder,
    PriorityGreedyDecoder,
    PermutationSlotDecoder,
    create_decoder,
    priority_order,
)
from .evaluator import ObjectiveEvaluator, EvaluationResult
from .problem_io import load_problem, parse_problem, write_problem
from .assignment_exporter import AssignmentExporter, format_assignment, create_assignment_file
from .assignment_metrics import AssignmentMetrics, print_assignment_report
from .config_loader import (
    ConfigurationError,
    create_evaluator,
    create_evaluator_from_config,
    load_config,
)

__all__ = [
    'FAPError',
    'ParseError',
    'NotFoundError',
    'InvalidGenotypeError',
    'EPSILON',
    'UNBOUNDED',
    'Emitter',
    'ProblemBuilder',
    'ProblemModel',
    'FeasibilityChecker',
    'frequency_span',
    'number_of_frequencies',
    'missing_demand',
    'DecoderKind',
    'SweepOrder',
    'ScratchArena',
    'BitmapDecoder',
    'PriorityGreedyDecoder',
    'PermutationSlotDecoder',
    'create_decoder',
    'priority_order',
    'ObjectiveEvaluator',
    'EvaluationResult',
    'load_problem',
    'parse_problem',
    'write_problem',
    'AssignmentExporter',
    'format_assignment',
    'create_assignment_file',
    'AssignmentMetrics',
    'print_assignment_report',
    'ConfigurationError',
    'create_evaluator',
    'create_evaluator_from_config',
    'load_config',
]
