"""Gateway importer — submits the encoded payload and classifies the response."""

import logging

from botocore.exceptions import BotoCoreError, ClientError, ConnectTimeoutError, ReadTimeoutError

from openapi_deploy.config import DeployConfig
from openapi_deploy.errors import GatewayTimeoutError, GatewayTransportError
from openapi_deploy.gateway.client import GatewayClient
from openapi_deploy.models import EncodedPayload, ImportResult
from openapi_deploy.spec.encoder import decode_payload

logger = logging.getLogger(__name__)


class GatewayImporter:
    """Submits one payload per call; never retries."""

    def __init__(
        self,
        client: GatewayClient,
        rest_api_id: str | None = None,
        mode: str = "overwrite",
        fail_on_warnings: bool = False,
        endpoint_type: str | None = None,
    ):
        self.client = client
        self.rest_api_id = rest_api_id
        self.mode = mode
        self.fail_on_warnings = fail_on_warnings
        self.endpoint_type = endpoint_type

    @classmethod
    def from_config(cls, client: GatewayClient, config: DeployConfig) -> "GatewayImporter":
        return cls(
            client,
            rest_api_id=config.rest_api_id,
            mode=config.mode,
            fail_on_warnings=config.fail_on_warnings,
            endpoint_type=config.endpoint_type,
        )

    def submit(self, payload: EncodedPayload) -> ImportResult:
        """Submit the payload and return Accepted or Rejected.

        Timeouts raise GatewayTimeoutError and other transport failures raise
        GatewayTransportError; neither is a rejection.
        """
        body = decode_payload(payload)
        parameters = {}
        if self.endpoint_type:
            parameters["endpointConfigurationTypes"] = self.endpoint_type

        try:
            if self.rest_api_id:
                response = self.client.put_rest_api(
                    self.rest_api_id,
                    body,
                    mode=self.mode,
                    fail_on_warnings=self.fail_on_warnings,
                    parameters=parameters,
                )
            else:
                response = self.client.import_rest_api(
                    body,
                    fail_on_warnings=self.fail_on_warnings,
                    parameters=parameters,
                )
        except ClientError as e:
            return ImportResult.reject(_diagnostic(e))
        except (ConnectTimeoutError, ReadTimeoutError) as e:
            raise GatewayTimeoutError(f"Gateway call timed out: {e}") from e
        except BotoCoreError as e:
            raise GatewayTransportError(f"Gateway call failed: {e}") from e

        api_id = response.get("id")
        if not api_id:
            return ImportResult.reject("Gateway response did not include an API id")

        warnings = list(response.get("warnings") or [])
        for warning in warnings:
            logger.warning("Gateway warning: %s", warning)
        return ImportResult.accept(api_id, warnings)


def _diagnostic(error: ClientError) -> str:
    details = error.response.get("Error", {})
    code = details.get("Code") or "Error"
    message = details.get("Message") or str(error)
    return f"{code}: {message}"
