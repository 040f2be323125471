"""Deployment pipeline: load -> convert -> validate -> encode -> import.

Stages run strictly in order. Any failure before the import halts the run
without touching the gateway; a gateway rejection is a normal terminal
state, not an exception.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from openapi_deploy.config import DeployConfig
from openapi_deploy.errors import ArtifactError, ConfigError, DeployError
from openapi_deploy.gateway.importer import GatewayImporter
from openapi_deploy.models import (
    ConvertedArtifact,
    EncodedPayload,
    ImportResult,
    PipelineOutcome,
    PipelineState,
    SpecDocument,
)
from openapi_deploy.spec.converter import Converter, YamlJsonConverter
from openapi_deploy.spec.encoder import encode_artifact
from openapi_deploy.spec.inspect import format_operations, list_operations, missing_integrations
from openapi_deploy.spec.loader import load_spec
from openapi_deploy.spec.validator import validate_artifact

logger = logging.getLogger(__name__)

PostStep = Callable[[PipelineOutcome], None]


class DeployPipeline:
    """Runs one specification document through to the gateway.

    The stage methods can be used on their own; ``run`` needs an importer.
    """

    def __init__(
        self,
        config: DeployConfig,
        importer: GatewayImporter | None,
        converter: Converter | None = None,
        post_steps: list[PostStep] | None = None,
    ):
        self.config = config
        self.importer = importer
        self.converter = converter or YamlJsonConverter()
        self.post_steps = list(post_steps or [])

    def run(self) -> PipelineOutcome:
        """Execute every stage and return the terminal outcome."""
        stage = None
        try:
            if self.importer is None:
                raise ConfigError("No gateway importer configured")
            document = self.load()
            stage = PipelineState.LOADED
            artifact = self.convert(document)
            stage = PipelineState.CONVERTED
            self.validate(artifact)
            stage = PipelineState.VALIDATED
            payload = self.encode(artifact)
            stage = PipelineState.ENCODED
            result = self.importer.submit(payload)
        except DeployError as e:
            logger.error("Halted after %s: %s", stage.value if stage else "start", e)
            return PipelineOutcome(state=PipelineState.HALTED, stage=stage, error_kind=e.kind, reason=str(e))
        except KeyboardInterrupt:
            logger.error("Cancelled after %s", stage.value if stage else "start")
            return PipelineOutcome(
                state=PipelineState.HALTED, stage=stage, error_kind="cancelled", reason="Run was cancelled"
            )

        outcome = _outcome_for(result)
        self._run_post_steps(outcome)
        return outcome

    def load(self) -> SpecDocument:
        logger.info("Loading %s", self.config.spec_path)
        return load_spec(self.config.spec_path)

    def convert(self, document: SpecDocument) -> ConvertedArtifact:
        artifact = self.converter.convert(document)
        if self.config.write_artifacts:
            _write(self.config.json_path, artifact.text)
            artifact = artifact.model_copy(update={"path": self.config.json_path})
            logger.info("Converted OpenAPI spec to JSON: %s", self.config.json_path)
        return artifact

    def validate(self, artifact: ConvertedArtifact) -> dict:
        doc = validate_artifact(artifact)
        operations = list_operations(doc)
        logger.info("Validated %d operations:\n%s", len(operations), format_operations(operations))
        for op in missing_integrations(operations):
            logger.warning("%s %s has no x-amazon-apigateway-integration", op.method, op.path)
        return doc

    def encode(self, artifact: ConvertedArtifact) -> EncodedPayload:
        payload = encode_artifact(artifact)
        if self.config.write_artifacts:
            _write(self.config.encoded_path, payload.data)
            payload = payload.model_copy(update={"path": self.config.encoded_path})
            logger.info("Base64 encoded OpenAPI JSON: %s", self.config.encoded_path)
        return payload

    def _run_post_steps(self, outcome: PipelineOutcome) -> None:
        if outcome.state is PipelineState.REJECTED and not self.config.run_post_steps_on_rejection:
            logger.info("Skipping %d post steps after rejection", len(self.post_steps))
            return
        for step in self.post_steps:
            try:
                step(outcome)
            except Exception:
                logger.exception("Post step %s failed", getattr(step, "__name__", step))


def remove_artifacts(config: DeployConfig) -> PostStep:
    """Post step deleting the JSON and base64 intermediates."""

    def cleanup(outcome: PipelineOutcome) -> None:
        for path in (config.json_path, config.encoded_path):
            if path is not None and path.exists():
                path.unlink()
                logger.info("Removed %s", path)

    return cleanup


def _outcome_for(result: ImportResult) -> PipelineOutcome:
    state = PipelineState.ACCEPTED if result.accepted else PipelineState.REJECTED
    return PipelineOutcome(state=state, stage=PipelineState.ENCODED, result=result)


def _write(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ArtifactError(f"Cannot write {path}: {e.strerror or e}") from e
