"""
Instrumentation Score - how well does your telemetry follow the rules?

Evaluates a fixed catalogue of OpenTelemetry data quality rules against a
telemetry backend and combines the verdicts into a single 0-100 score,
weighted by each rule's impact.

Example usage:
    from instrumentation_score import calculate_score
    from instrumentation_score.backends import create_backend

    with create_backend("elasticsearch") as backend:
        print(calculate_score(backend))
"""

__version__ = "0.1.0"
__all__ = [
    "Impact",
    "RULE_CATALOGUE",
    "ScoreCalculator",
    "ScoreReport",
    "calculate_score",
    "__version__",
]


# Lazy imports to avoid loading OTel and pydantic at import time
def __getattr__(name: str):
    if name == "Impact":
        from instrumentation_score.impact import Impact
        return Impact
    if name == "RULE_CATALOGUE":
        from instrumentation_score.rules import RULE_CATALOGUE
        return RULE_CATALOGUE
    if name in ("ScoreCalculator", "ScoreReport", "calculate_score"):
        from instrumentation_score import calculator
        return getattr(calculator, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
