"""API Gateway client wrapper around boto3.

This module is the only place that talks to AWS. The pipeline depends on
the GatewayClient protocol so tests can substitute a fake.
"""

import logging
from typing import Protocol

import boto3
from botocore.config import Config

from openapi_deploy.config import GatewayCredentials

logger = logging.getLogger(__name__)


class GatewayClient(Protocol):
    """The two import operations the pipeline needs from the gateway."""

    def import_rest_api(self, body: bytes, *, fail_on_warnings: bool, parameters: dict[str, str]) -> dict: ...

    def put_rest_api(
        self,
        rest_api_id: str,
        body: bytes,
        *,
        mode: str,
        fail_on_warnings: bool,
        parameters: dict[str, str],
    ) -> dict: ...


class ApiGatewayClient:
    """GatewayClient backed by ``boto3.client("apigateway")``.

    Requests are made once with explicit connect/read timeouts; botocore's
    own retry handling is disabled.
    """

    def __init__(
        self,
        region: str,
        timeout: float,
        credentials: GatewayCredentials | None = None,
    ):
        self.region = region
        self.timeout = timeout
        self._client = boto3.client(
            "apigateway",
            config=Config(
                region_name=region,
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={"total_max_attempts": 1, "mode": "standard"},
            ),
            **_credential_kwargs(credentials),
        )

    def import_rest_api(self, body: bytes, *, fail_on_warnings: bool, parameters: dict[str, str]) -> dict:
        logger.info("Importing REST API into %s (%d bytes)", self.region, len(body))
        return self._client.import_rest_api(
            body=body,
            failOnWarnings=fail_on_warnings,
            parameters=parameters,
        )

    def put_rest_api(
        self,
        rest_api_id: str,
        body: bytes,
        *,
        mode: str,
        fail_on_warnings: bool,
        parameters: dict[str, str],
    ) -> dict:
        logger.info("Updating REST API %s in %s (mode=%s)", rest_api_id, self.region, mode)
        return self._client.put_rest_api(
            restApiId=rest_api_id,
            mode=mode,
            body=body,
            failOnWarnings=fail_on_warnings,
            parameters=parameters,
        )


def _credential_kwargs(credentials: GatewayCredentials | None) -> dict[str, str]:
    # Without explicit keys boto3 falls back to its default credential chain.
    if credentials is None or not credentials.explicit:
        return {}
    kwargs = {
        "aws_access_key_id": credentials.access_key_id,
        "aws_secret_access_key": credentials.secret_access_key.get_secret_value(),
    }
    if credentials.session_token is not None:
        kwargs["aws_session_token"] = credentials.session_token.get_secret_value()
    return kwargs
