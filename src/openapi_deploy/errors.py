"""Error taxonomy for the deployment pipeline.

Every error carries a stable ``kind`` so the reporter can tell
pre-submission failures apart from gateway-side outcomes.
"""


class DeployError(RuntimeError):
    """Base class for all pipeline errors."""

    kind = "error"


class ConfigError(DeployError):
    kind = "config"


class ReadError(DeployError):
    """The specification file is missing or unreadable."""

    kind = "read"


class EmptySpecError(ReadError):
    """The specification file exists but holds no content."""


class ConversionError(DeployError):
    """The authoring-format text is not valid YAML or not JSON-representable."""

    kind = "conversion"


class ValidationError(DeployError):
    """The converted artifact is not well-formed JSON."""

    kind = "validation"


class EncodingError(DeployError):
    kind = "encoding"


class ArtifactError(DeployError):
    """An intermediate artifact could not be written."""

    kind = "artifact"


class GatewayTimeoutError(DeployError):
    """The gateway call exceeded its deadline."""

    kind = "timeout"


class GatewayTransportError(DeployError):
    """The gateway could not be reached or the request could not be signed."""

    kind = "transport"


class GatewayRejection(DeployError):
    """The gateway answered with a diagnostic instead of an API id."""

    kind = "rejected"

    def __init__(self, diagnostic: str):
        super().__init__(diagnostic)
        self.diagnostic = diagnostic
