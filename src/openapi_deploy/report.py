"""Outcome reporter — turns a PipelineOutcome into a message and exit code."""

import logging
from collections.abc import Callable

import click

from openapi_deploy.models import PipelineOutcome, PipelineState

logger = logging.getLogger(__name__)

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_HALTED = 3


class OutcomeReporter:
    """Prints the result of a run; rejections and halts go to stderr."""

    def __init__(self, echo: Callable[..., None] = click.echo):
        self.echo = echo

    def report(self, outcome: PipelineOutcome) -> int:
        """Emit the status line and return the process exit code."""
        if outcome.state is PipelineState.ACCEPTED:
            result = outcome.result
            self.echo(f"Imported REST API {result.api_id}")
            for warning in result.warnings:
                self.echo(f"  warning: {warning}")
            logger.info("Import accepted: %s", result.api_id)
            return EXIT_ACCEPTED

        if outcome.state is PipelineState.REJECTED:
            diagnostic = outcome.result.diagnostic if outcome.result else outcome.reason
            self.echo(f"AWS API Gateway import failed: {diagnostic}", err=True)
            self.echo("Please check the OpenAPI spec.", err=True)
            logger.error("Import rejected: %s", diagnostic)
            return EXIT_REJECTED

        stage = outcome.stage.value if outcome.stage else "start"
        self.echo(f"Deployment halted after {stage} ({outcome.error_kind}): {outcome.reason}", err=True)
        return EXIT_HALTED
