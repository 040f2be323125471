"""Artifacts passed between pipeline stages.

Each stage produces a new immutable model derived from exactly one
predecessor; nothing is mutated in place.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from openapi_deploy.errors import GatewayRejection


class SpecDocument(BaseModel):
    """Raw authoring-format (YAML) text of an OpenAPI document."""

    model_config = ConfigDict(frozen=True)

    path: Path
    text: str


class ConvertedArtifact(BaseModel):
    """Wire-format (JSON) rendering of a SpecDocument."""

    model_config = ConfigDict(frozen=True)

    source_path: Path
    text: str
    path: Path | None = None  # where it was written, if persisted


class EncodedPayload(BaseModel):
    """Base64 transport encoding of a ConvertedArtifact."""

    model_config = ConfigDict(frozen=True)

    data: str
    path: Path | None = None


class ImportResult(BaseModel):
    """Outcome of submitting a payload: Accepted(api_id) or Rejected(diagnostic)."""

    model_config = ConfigDict(frozen=True)

    accepted: bool
    api_id: str | None = None
    diagnostic: str = ""
    warnings: tuple[str, ...] = ()

    @classmethod
    def accept(cls, api_id: str, warnings: list[str] | None = None) -> "ImportResult":
        return cls(accepted=True, api_id=api_id, warnings=tuple(warnings or ()))

    @classmethod
    def reject(cls, diagnostic: str) -> "ImportResult":
        return cls(accepted=False, diagnostic=diagnostic)

    def raise_for_rejection(self) -> None:
        if not self.accepted:
            raise GatewayRejection(self.diagnostic)


class PipelineState(str, Enum):
    LOADED = "loaded"
    CONVERTED = "converted"
    VALIDATED = "validated"
    ENCODED = "encoded"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    HALTED = "halted"


class PipelineOutcome(BaseModel):
    """Terminal state of one pipeline run.

    ``stage`` is the last state reached before the run ended, which for a
    halted run tells where it stopped.
    """

    model_config = ConfigDict(frozen=True)

    state: PipelineState
    stage: PipelineState | None = None
    result: ImportResult | None = None
    error_kind: str = ""
    reason: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.ACCEPTED


class GatewayOperation(BaseModel):
    """A single route/method of the document and its gateway integration."""

    method: str  # GET / POST / ...
    path: str  # /sequences/_doc/{sequenceId}/_update
    operation_id: str = ""
    summary: str = ""
    integration_type: str = ""  # http / aws_proxy / mock ...
    integration_uri: str = ""
    integration_method: str = ""
    auth_required: bool = False
