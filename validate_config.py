#!/usr/bin/env python3
"""
Configuration Validation Tool

Validates YAML configuration files for the frequency assignment system
and provides detailed feedback about parameter values and potential issues.
"""

import sys
import argparse
from pathlib import Path
from typing import Dict, List, Any

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from frequency_assignment.config_loader import (
    create_problem_from_config,
    get_decoder_settings,
    load_config,
    validate_config,
    ConfigurationError,
)
from frequency_assignment.decoders import DecoderKind, create_decoder
from frequency_assignment.errors import FAPError
from frequency_assignment.evaluator import DEFAULT_LARGE_PENALTY, DEFAULT_PENALTY_SCALE


class ConfigValidator:
    """Advanced configuration validator with detailed feedback"""

    def __init__(self):
        self.warnings: List[str] = []
        self.errors: List[str] = []
        self.recommendations: List[str] = []

    def validate_comprehensive(self, config_path: str) -> Dict[str, Any]:
        """Perform comprehensive validation with detailed feedback"""
        try:
            config = load_config(config_path)
        except ConfigurationError as e:
            return {
                'valid': False,
                'errors': [f"Failed to load configuration: {e}"],
                'warnings': [],
                'recommendations': [],
                'summary': {}
            }

        self.warnings = []
        self.errors = []
        self.recommendations = []

        # Basic validation
        self.errors.extend(validate_config(config))

        # Problem-dependent validation
        summary = {}
        model = self._load_problem(config)
        if model is not None:
            summary['problem'] = self._validate_problem(model)
            if not self.errors:
                summary['encoding'] = self._validate_encoding(config, model)

        self._validate_evaluation(config.get('evaluation', {}) or {})
        self._validate_visualization(config.get('visualization', {}) or {})

        return {
            'valid': len(self.errors) == 0,
            'errors': self.errors,
            'warnings': self.warnings,
            'recommendations': self.recommendations,
            'summary': summary
        }

    def _load_problem(self, config: Dict[str, Any]):
        try:
            return create_problem_from_config(config)
        except (FAPError, OSError) as e:
            self.errors.append(f"Failed to load problem: {e}")
            return None

    def _validate_problem(self, model) -> Dict[str, Any]:
        """Check the loaded problem for degenerate inputs"""
        if model.num_emitters == 0:
            self.warnings.append("Problem has no emitters; every evaluation is trivially feasible")
        if not model.interference:
            self.warnings.append("Separation table is empty; any assignment without repeats is feasible")
        zero_demand = [e for e, d in zip(model.emitter_order, model.demands) if d == 0]
        if zero_demand:
            self.warnings.append(f"{len(zero_demand)} emitter(s) have zero demand: {', '.join(zero_demand[:5])}")
        if model.total_demand > 2000:
            self.warnings.append(f"Large total demand ({model.total_demand}) makes greedy decoding slow")

        return {
            'emitters': model.num_emitters,
            'total_demand': model.total_demand,
            'separations': len(model.interference),
            'frequency_step': model.frequency_step,
            'max_frequency': model.max_frequency,
        }

    def _validate_encoding(self, config: Dict[str, Any], model) -> Dict[str, Any]:
        """Check decoder and penalty settings against the problem"""
        kind, sweep_order, domain_size = get_decoder_settings(config)
        try:
            decoder = create_decoder(kind, model, sweep_order, domain_size)
        except ValueError as e:
            self.errors.append(f"Invalid decoder settings: {e}")
            return {}

        penalty_config = config.get('penalty', {}) or {}
        large_penalty = penalty_config.get('large_constant', DEFAULT_LARGE_PENALTY)
        scale = penalty_config.get('scale', DEFAULT_PENALTY_SCALE)

        if large_penalty <= decoder.frequency_limit:
            self.errors.append(
                f"penalty.large_constant ({large_penalty}) must exceed the largest "
                f"achievable span ({decoder.frequency_limit})"
            )
        if scale < 1:
            self.warnings.append(f"penalty.scale ({scale}) below 1 barely separates incomplete candidates")

        if kind is DecoderKind.BITMAP:
            if domain_size is not None and domain_size <= model.max_frequency:
                self.warnings.append(
                    f"frequency_domain_size ({domain_size}) is below the frequency bound "
                    f"({model.max_frequency + 1}); some problems become unsatisfiable"
                )
            if decoder.declared_length > 100000:
                self.warnings.append(f"Bitmap genotype is very long ({decoder.declared_length} genes)")
            self.recommendations.append(
                "Ranking encodings (priority_greedy, permutation_slot) never produce infeasible assignments"
            )
        elif kind is DecoderKind.PERMUTATION_SLOT:
            self.recommendations.append(
                "permutation_slot can only use frequencies below the total demand; "
                "priority_greedy is less restrictive"
            )

        return {
            'decoder': kind.value,
            'genotype_length': decoder.declared_length,
            'frequency_limit': decoder.frequency_limit,
            'large_penalty': large_penalty,
            'penalty_scale': scale,
        }

    def _validate_evaluation(self, evaluation_config: Dict[str, Any]):
        """Validate evaluation settings"""
        workers = evaluation_config.get('workers', 1)
        if isinstance(workers, int) and workers > 16:
            self.warnings.append(f"Many workers ({workers}); decoding is CPU bound under the GIL")

        samples = evaluation_config.get('samples', 1)
        if isinstance(samples, int) and samples < 10:
            self.recommendations.append("Use at least 10 samples for a meaningful random baseline")

        if evaluation_config.get('random_seed') is None:
            self.recommendations.append("Set evaluation.random_seed for reproducible sampling")

    def _validate_visualization(self, vis_config: Dict[str, Any]):
        """Validate visualization settings"""
        figure_size = vis_config.get('figure_size')
        if figure_size is not None:
            if not isinstance(figure_size, (list, tuple)) or len(figure_size) != 2:
                self.errors.append("visualization.figure_size must be [width, height]")
            elif min(figure_size) <= 0:
                self.errors.append("visualization.figure_size values must be positive")

        dpi = vis_config.get('dpi', 150)
        if not isinstance(dpi, int) or dpi <= 0:
            self.errors.append("visualization.dpi must be a positive integer")
        elif dpi > 600:
            self.warnings.append(f"High dpi ({dpi}) produces very large images")


def main():
    """Main validation entry point"""
    parser = argparse.ArgumentParser(
        description="Validate frequency assignment configuration files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 validate_config.py config.yaml
  python3 validate_config.py config.yaml --verbose
        """
    )

    parser.add_argument(
        'config_file',
        nargs='?',
        default='config.yaml',
        help='Configuration file to validate (default: config.yaml)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed validation information'
    )

    parser.add_argument(
        '--warnings-only', '-w',
        action='store_true',
        help='Show only warnings and errors (no recommendations)'
    )

    args = parser.parse_args()

    validator = ConfigValidator()
    result = validator.validate_comprehensive(args.config_file)

    # Print results
    print("=" * 60)
    print("CONFIGURATION VALIDATION REPORT")
    print("=" * 60)
    print(f"File: {args.config_file}")
    print(f"Status: {'✅ VALID' if result['valid'] else '❌ INVALID'}")
    print()

    if result['errors']:
        print("ERRORS:")
        for error in result['errors']:
            print(f"  • {error}")
        print()

    if result['warnings']:
        print("WARNINGS:")
        for warning in result['warnings']:
            print(f"  • {warning}")
        print()

    if result['recommendations'] and not args.warnings_only:
        print("RECOMMENDATIONS:")
        for rec in result['recommendations']:
            print(f"  • {rec}")
        print()

    if result['summary'] and args.verbose:
        print("SUMMARY:")
        for section, data in result['summary'].items():
            print(f"  {section.title()}:")
            for key, value in data.items():
                print(f"    {key}: {value}")
        print()

    if not args.verbose and 'problem' in result['summary']:
        problem = result['summary']['problem']
        print(f"Emitters: {problem['emitters']}, Total demand: {problem['total_demand']}, "
              f"Separations: {problem['separations']}")

    print("=" * 60)

    sys.exit(0 if result['valid'] else 1)


if __name__ == "__main__":
    main()
