"""
Instrumentation Score CLI.

Commands:
    instrumentation-score score   Score a telemetry backend
    instrumentation-score rules   List the rule catalogue

Usage::

    instrumentation-score score --endpoint http://localhost:9200
    instrumentation-score score --format json
    instrumentation-score rules
"""

from __future__ import annotations

import json
from typing import Optional

import click

from instrumentation_score import __version__
from instrumentation_score.backends import BackendType, create_backend
from instrumentation_score.calculator import ScoreCalculator, ScoreReport
from instrumentation_score.config import get_config
from instrumentation_score.errors import InstrumentationScoreError
from instrumentation_score.impact import Impact
from instrumentation_score.logger import configure_logging
from instrumentation_score.rules import RULE_CATALOGUE


class ScoringError(click.ClickException):
    """A scoring run failed."""

    exit_code = 1


def render_text_report(report: ScoreReport, verbose: bool = False) -> str:
    lines = [f"Instrumentation score: {report.score:.2f}"]
    for impact in Impact:
        tally = report.tallies[impact]
        if tally.total:
            lines.append(f"  {impact.value:<10} {tally.passed}/{tally.total} passed")
    if verbose:
        lines.append("")
        for outcome in report.outcomes:
            mark = "✓" if outcome.compliant else "✗"
            lines.append(f"  {mark} {outcome.rule_id} ({outcome.impact.value})")
    elif report.violations:
        lines.append("")
        lines.append("Violated: " + ", ".join(o.rule_id for o in report.violations))
    return "\n".join(lines)


@click.group()
@click.version_option(__version__)
def main():
    """Instrumentation Score - rate how well telemetry follows the rules."""
    pass


@main.command("score")
@click.option(
    "--backend", "-b",
    "backend_type",
    type=click.Choice([t.value for t in BackendType]),
    default=None,
    help="Telemetry backend (default from INSTRUMENTATION_SCORE_BACKEND)",
)
@click.option("--endpoint", envvar="INSTRUMENTATION_SCORE_ELASTICSEARCH_ENDPOINT", default=None, help="Backend URL")
@click.option("--api-key", envvar="INSTRUMENTATION_SCORE_ELASTICSEARCH_API_KEY", default=None, help="Backend API key")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.option("--verbose", "-v", is_flag=True, help="List every rule outcome")
def score_cmd(
    backend_type: Optional[str],
    endpoint: Optional[str],
    api_key: Optional[str],
    output_format: str,
    verbose: bool,
):
    """Evaluate every rule against a backend and print the score.

    Examples:
        instrumentation-score score --endpoint http://localhost:9200
        instrumentation-score score -f json
    """
    overrides = {}
    if endpoint:
        overrides["elasticsearch_endpoint"] = endpoint
    if api_key:
        overrides["elasticsearch_api_key"] = api_key
    config = get_config(**overrides)
    configure_logging(config.log_level, config.log_format)

    try:
        with create_backend(backend_type or config.backend, config) as backend:
            report = ScoreCalculator().calculate(backend)
    except InstrumentationScoreError as e:
        raise ScoringError(str(e)) from e

    if output_format == "json":
        click.echo(report.model_dump_json(indent=2))
    else:
        click.echo(render_text_report(report, verbose=verbose))


@main.command("rules")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text")
def rules_cmd(output_format: str):
    """List the rules that make up the score."""
    if output_format == "json":
        data = [
            {
                "id": rule.rule_id,
                "impact": rule.impact.value,
                "weight": rule.impact.weight,
                "description": rule.description,
                "reference": rule.reference,
            }
            for rule in RULE_CATALOGUE
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for rule in RULE_CATALOGUE:
        click.echo(f"{rule.rule_id}  {rule.impact.value:<10} {rule.description}")


if __name__ == "__main__":
    main()
