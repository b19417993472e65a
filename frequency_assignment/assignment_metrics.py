"""
Assignment Metrics and Reporting

Summarises a frequency assignment: span, frequency reuse, demand
satisfaction and every separation violation.
"""

from collections import Counter
from typing import Any, Dict, Iterable, Mapping

from .feasibility import FeasibilityChecker, frequency_span, missing_demand, number_of_frequencies
from .model import ProblemModel


class AssignmentMetrics:
    """Metrics calculator for frequency assignments"""

    def __init__(self, model: ProblemModel):
        self.model = model
        self.checker = FeasibilityChecker(model)

    def analyze_assignment(self, assignment: Mapping[str, Iterable[int]]) -> Dict[str, Any]:
        """
        Analysis of an assignment

        Returns:
            Dictionary containing all metrics
        """
        assignment = {e: set(freqs) for e, freqs in assignment.items()}
        violations = self.checker.find_violations(assignment)
        missing, excess = missing_demand(self.model, assignment)

        return {
            'span': frequency_span(assignment),
            'distinct_frequencies': number_of_frequencies(assignment),
            'demand_summary': self._analyze_demand(assignment),
            'missing': missing,
            'excess': excess,
            'demand_satisfaction_rate': self._satisfaction_rate(missing),
            'violations': violations,
            'frequency_usage': self._frequency_usage(assignment),
            'span_lower_bound': self.span_lower_bound(),
            'feasible': self.checker.is_feasible(assignment),
        }

    def _analyze_demand(self, assignment: Dict[str, set]) -> Dict[str, Dict[str, int]]:
        summary = {}
        for emitter_id, demand in zip(self.model.emitter_order, self.model.demands):
            summary[emitter_id] = {
                'assigned': len(assignment.get(emitter_id, ())),
                'demand': demand,
            }
        return summary

    def _satisfaction_rate(self, missing: int) -> float:
        total = self.model.total_demand
        if total == 0:
            return 1.0
        return 1.0 - missing / total

    def _frequency_usage(self, assignment: Dict[str, set]) -> Dict[int, int]:
        """How many emitters use each frequency"""
        usage = Counter()
        for freqs in assignment.values():
            usage.update(freqs)
        return dict(sorted(usage.items()))

    def span_lower_bound(self) -> int:
        """
        Span no feasible assignment can beat.

        An emitter with demand d needs d frequencies, consecutive ones at
        least the smallest gap allowed at distance 0 apart.
        """
        if not self.model.demands:
            return 0
        largest = max(self.model.demands)
        if largest <= 1:
            return 0
        gap = 1
        while not self.checker.check_separation(0, gap, 0.0):
            gap += 1
        return (largest - 1) * gap


def print_assignment_report(metrics: Dict[str, Any], detailed: bool = True) -> str:
    """Generate a human-readable assignment report"""
    lines = []
    lines.append("=" * 60)
    lines.append("FREQUENCY ASSIGNMENT REPORT")
    lines.append("=" * 60)
    lines.append(f"Span: {metrics['span']} (lower bound {metrics['span_lower_bound']})")
    lines.append(f"Distinct frequencies: {metrics['distinct_frequencies']}")
    lines.append(f"Demand satisfaction: {metrics['demand_satisfaction_rate']:.3f} "
                 f"(missing {metrics['missing']}, excess {metrics['excess']})")
    lines.append("")

    if detailed:
        lines.append("EMITTERS:")
        for emitter_id, data in metrics['demand_summary'].items():
            marker = "" if data['assigned'] == data['demand'] else "  <-- unmet"
            lines.append(f"  {emitter_id}: {data['assigned']}/{data['demand']}{marker}")
        lines.append("")

    violations = metrics['violations']
    if violations:
        lines.append(f"SEPARATION VIOLATIONS ({len(violations)}):")
        shown = violations if detailed else violations[:10]
        for v in shown:
            id1, id2 = v['emitters']
            f1, f2 = v['frequencies']
            lines.append(
                f"  {id1}/{id2}: {f1} and {f2} at distance {v['distance']:.2f} "
                f"(required {v['required_distance']:.2f})"
            )
        if len(shown) < len(violations):
            lines.append(f"  ... {len(violations) - len(shown)} more")
    else:
        lines.append("SEPARATION: All constraints satisfied")

    lines.append("")
    lines.append(f"FEASIBLE: {'yes' if metrics['feasible'] else 'no'}")
    lines.append("=" * 60)

    return "\n".join(lines)
