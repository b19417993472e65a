"""
Configuration Loading System

Loads YAML configuration files and builds the problem model, decoder and
objective evaluator they describe.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .decoders import DecoderKind, SweepOrder, create_decoder
from .errors import FAPError
from .evaluator import DEFAULT_LARGE_PENALTY, DEFAULT_PENALTY_SCALE, ObjectiveEvaluator
from .logging_config import LOG_LEVELS
from .model import ProblemModel
from .problem_io import load_problem


class ConfigurationError(FAPError):
    """Raised when configuration is invalid"""
    pass


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigurationError(f"Configuration file is empty: {config_path}")
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    # Relative paths inside the file resolve against its directory
    config.setdefault('_base_dir', str(Path(config_path).resolve().parent))
    return config


def resolve_path(config: Dict[str, Any], path: str) -> Path:
    """Resolve a path from the configuration against the config directory"""
    candidate = Path(path)
    if candidate.is_absolute() or candidate.exists():
        return candidate
    base_dir = config.get('_base_dir')
    if base_dir:
        return Path(base_dir) / candidate
    return candidate


def create_problem_from_config(config: Dict[str, Any]) -> ProblemModel:
    """Load the problem file named in the ``problem.path`` key"""
    problem_config = config.get("problem", {}) or {}
    path = problem_config.get("path")
    if not path:
        raise ConfigurationError("Missing required field: problem.path")
    return load_problem(resolve_path(config, path))


def get_decoder_settings(config: Dict[str, Any]) -> Tuple[DecoderKind, SweepOrder, Optional[int]]:
    """Decoder kind, sweep order and bitmap domain size from configuration"""
    decoder_config = config.get("decoder", {}) or {}
    try:
        kind = DecoderKind(decoder_config.get("kind", DecoderKind.PRIORITY_GREEDY.value))
    except ValueError:
        raise ConfigurationError(f"Unknown decoder kind: {decoder_config.get('kind')}")
    try:
        sweep_order = SweepOrder(decoder_config.get("sweep_order", SweepOrder.FREQUENCY_MAJOR.value))
    except ValueError:
        raise ConfigurationError(f"Unknown sweep order: {decoder_config.get('sweep_order')}")
    domain_size = decoder_config.get("frequency_domain_size")
    return kind, sweep_order, domain_size


def create_evaluator(config: Dict[str, Any], model: Optional[ProblemModel] = None) -> ObjectiveEvaluator:
    """
    Create an ObjectiveEvaluator from a configuration dictionary

    Args:
        config: Parsed configuration
        model: Problem model to use instead of loading ``problem.path``

    Returns:
        Configured ObjectiveEvaluator instance
    """
    if model is None:
        model = create_problem_from_config(config)

    kind, sweep_order, domain_size = get_decoder_settings(config)
    penalty_config = config.get("penalty", {}) or {}
    large_penalty = penalty_config.get("large_constant", DEFAULT_LARGE_PENALTY)
    penalty_scale = penalty_config.get("scale", DEFAULT_PENALTY_SCALE)

    try:
        decoder = create_decoder(kind, model, sweep_order, domain_size)
        return ObjectiveEvaluator(decoder, float(large_penalty), float(penalty_scale))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid evaluator settings: {e}")


def create_evaluator_from_config(config_path: str = "config.yaml") -> ObjectiveEvaluator:
    """
    Create a configured ObjectiveEvaluator from YAML configuration

    Args:
        config_path: Path to the configuration file

    Returns:
        Configured ObjectiveEvaluator instance
    """
    config = load_config(config_path)
    return create_evaluator(config)


def get_visualization_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Get visualization configuration"""
    config = load_config(config_path)
    return config.get("visualization", {})


def get_evaluation_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Get evaluation configuration"""
    config = load_config(config_path)
    return config.get("evaluation", {})


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    # Check required sections
    required_sections = ["problem", "decoder"]
    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    if "problem" in config:
        if not config["problem"] or not config["problem"].get("path"):
            issues.append("problem.path must name a problem-definition file")

    if "decoder" in config:
        decoder_config = config["decoder"] or {}
        kind = decoder_config.get("kind", DecoderKind.PRIORITY_GREEDY.value)
        if kind not in [k.value for k in DecoderKind]:
            issues.append(f"Unknown decoder kind: {kind}")

        sweep = decoder_config.get("sweep_order", SweepOrder.FREQUENCY_MAJOR.value)
        if sweep not in [s.value for s in SweepOrder]:
            issues.append(f"Unknown sweep order: {sweep}")

        domain_size = decoder_config.get("frequency_domain_size")
        if domain_size is not None and (isinstance(domain_size, bool) or not isinstance(domain_size, int) or domain_size <= 0):
            issues.append("decoder.frequency_domain_size must be a positive integer")

    penalty_config = config.get("penalty", {}) or {}
    large_penalty = penalty_config.get("large_constant", DEFAULT_LARGE_PENALTY)
    scale = penalty_config.get("scale", DEFAULT_PENALTY_SCALE)
    if not isinstance(large_penalty, (int, float)) or large_penalty <= 0:
        issues.append("penalty.large_constant must be a positive number")
    if not isinstance(scale, (int, float)) or scale <= 0:
        issues.append("penalty.scale must be a positive number")

    evaluation_config = config.get("evaluation", {}) or {}
    workers = evaluation_config.get("workers", 1)
    if not isinstance(workers, int) or workers <= 0:
        issues.append("evaluation.workers must be a positive integer")
    samples = evaluation_config.get("samples", 1)
    if not isinstance(samples, int) or samples <= 0:
        issues.append("evaluation.samples must be a positive integer")

    level = (config.get("logging", {}) or {}).get("level", "INFO")
    if str(level).upper() not in LOG_LEVELS:
        issues.append(f"Unknown logging level: {level}")

    return issues


def print_config_summary(config_path: str = "config.yaml"):
    """Print a summary of the configuration"""
    try:
        config = load_config(config_path)

        print("=" * 50)
        print("CONFIGURATION SUMMARY")
        print("=" * 50)

        problem_config = config.get("problem", {}) or {}
        print(f"Problem file: {problem_config.get('path', 'N/A')}")

        decoder_config = config.get("decoder", {}) or {}
        kind = decoder_config.get("kind", DecoderKind.PRIORITY_GREEDY.value)
        print(f"Decoder: {kind}")
        if kind == DecoderKind.PRIORITY_GREEDY.value:
            print(f"Sweep order: {decoder_config.get('sweep_order', SweepOrder.FREQUENCY_MAJOR.value)}")
        if kind == DecoderKind.BITMAP.value:
            print(f"Frequency domain: {decoder_config.get('frequency_domain_size') or 'Auto'}")

        penalty_config = config.get("penalty", {}) or {}
        print(f"\nLarge penalty: {penalty_config.get('large_constant', DEFAULT_LARGE_PENALTY)}")
        print(f"Penalty scale: {penalty_config.get('scale', DEFAULT_PENALTY_SCALE)}")

        evaluation_config = config.get("evaluation", {}) or {}
        print(f"\nWorkers: {evaluation_config.get('workers', 1)}")
        print(f"Samples: {evaluation_config.get('samples', 1)}")
        print(f"Random seed: {evaluation_config.get('random_seed', 'random')}")

        # Validation
        issues = validate_config(config)
        if issues:
            print(f"\nValidation Issues ({len(issues)}):")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print("\nConfiguration is valid ✓")

        print("=" * 50)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}")
