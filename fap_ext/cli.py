"""
CLI module for the search-engine boundary.

Handles run configuration loading, validation, and mode dispatching.
"""

import argparse
from typing import Any, Dict, List, Optional
from pathlib import Path

import yaml

from frequency_assignment.errors import FAPError
from frequency_assignment.logging_config import setup_logging

RUN_MODES = ('batch', 'sample')


class ConfigValidationError(FAPError):
    """Raised when run configuration is invalid."""
    pass


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    return config


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ConfigValidationError("Run configuration must be a mapping")

    # Check mode field
    if 'mode' not in config:
        raise ConfigValidationError("Missing required field: 'mode'")

    mode = config['mode']
    if mode not in RUN_MODES:
        raise ConfigValidationError(
            f"Invalid mode: '{mode}'. Must be 'batch' or 'sample'"
        )

    # Validate output section
    if 'output' not in config:
        raise ConfigValidationError("Missing required field: 'output'")

    if not isinstance(config['output'], dict):
        raise ConfigValidationError("'output' must be a dictionary")

    if 'root' not in config['output']:
        raise ConfigValidationError("Missing required field: 'output.root'")

    config_path = Path(config.get('config', 'config.yaml'))
    if not config_path.exists():
        raise ConfigValidationError(f"Problem configuration not found: {config_path}")

    workers = config.get('workers', 1)
    if not isinstance(workers, int) or workers <= 0:
        raise ConfigValidationError(f"'workers' must be a positive integer, got: {workers}")

    # Mode-specific validation
    if mode == 'batch':
        _validate_batch_config(config)
    elif mode == 'sample':
        _validate_sample_config(config)


def _validate_batch_config(config: Dict[str, Any]) -> None:
    """
    Validate batch mode configuration.

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config.get('input'), dict):
        raise ConfigValidationError("Batch mode requires an 'input' dictionary")

    if 'candidates' not in config['input']:
        raise ConfigValidationError("Batch mode requires 'input.candidates' field")

    candidates_path = Path(config['input']['candidates'])
    if not candidates_path.exists():
        raise ConfigValidationError(f"Candidates file not found: {candidates_path}")


def _validate_sample_config(config: Dict[str, Any]) -> None:
    """
    Validate sample mode configuration.

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config.get('generation'), dict):
        raise ConfigValidationError("Sample mode requires a 'generation' dictionary")

    if 'samples' not in config['generation']:
        raise ConfigValidationError("Sample mode requires 'generation.samples' field")

    num_samples = config['generation']['samples']
    if not isinstance(num_samples, int) or num_samples <= 0:
        raise ConfigValidationError(
            f"'generation.samples' must be a positive integer, got: {num_samples}"
        )

    seed = config.get('random_seed')
    if seed is not None and not isinstance(seed, int):
        raise ConfigValidationError(f"'random_seed' must be an integer, got: {seed}")


def run_from_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration and execute appropriate mode.

    This is the main entry point called by fap_cli.py.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Summary statistics from the executed mode

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    print(f"Loading configuration from: {config_path}")
    config = load_run_config(config_path)

    print("Validating configuration...")
    validate_run_config(config)

    mode = config['mode']
    print(f"Mode: {mode}\n")

    if mode == 'batch':
        from .orchestration import run_batch_mode
        summary = run_batch_mode(config)
    else:
        from .orchestration import run_sample_mode
        summary = run_sample_mode(config)

    print("\nRun completed successfully!")
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line entry point used by fap_cli.py.

    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(
        prog="fap_cli.py",
        description="Evaluate candidate genotypes for external search drivers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 fap_cli.py examples/batch_run.yaml    # Evaluate a file of candidate genotypes
  python3 fap_cli.py examples/sample_run.yaml   # Random genotypes as a baseline
        """
    )
    parser.add_argument('run_config', nargs='?', help='Run configuration YAML file')
    parser.add_argument('--config', dest='config_option', metavar='RUN_CONFIG',
                        help='Run configuration YAML file (alternative to the positional form)')
    parser.add_argument('--log-level', default='WARNING',
                        help='Logging level for library messages (default: WARNING)')

    args = parser.parse_args(argv)
    config_path = args.config_option or args.run_config
    if config_path is None:
        parser.print_help()
        return 1

    try:
        setup_logging(args.log_level)
        run_from_config(config_path)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 1
    except (FAPError, OSError, ValueError) as e:
        print(f"\nError: {e}")
        return 1
    return 0
