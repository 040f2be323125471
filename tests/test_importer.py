import base64
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from openapi_deploy.config import DeployConfig
from openapi_deploy.errors import GatewayTimeoutError, GatewayTransportError
from openapi_deploy.gateway.importer import GatewayImporter
from openapi_deploy.models import EncodedPayload

BODY = b'{"openapi": "3.0.1", "paths": {}}'
PAYLOAD = EncodedPayload(data=base64.b64encode(BODY).decode("ascii"))
ENDPOINT = "https://apigateway.us-east-1.amazonaws.com"


def _client_error(code: str, message: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "ImportRestApi")


class TestGatewayImporterAccepted:
    def test_new_api(self):
        client = MagicMock()
        client.import_rest_api.return_value = {"id": "a1b2c3", "name": "Central Sequence Service API"}

        result = GatewayImporter(client).submit(PAYLOAD)

        assert result.accepted is True
        assert result.api_id == "a1b2c3"
        client.import_rest_api.assert_called_once_with(BODY, fail_on_warnings=False, parameters={})
        client.put_rest_api.assert_not_called()

    def test_warnings_surface(self):
        client = MagicMock()
        client.import_rest_api.return_value = {"id": "a1b2c3", "warnings": ["Unsupported keyword 'examples'"]}

        result = GatewayImporter(client).submit(PAYLOAD)

        assert result.warnings == ("Unsupported keyword 'examples'",)

    def test_update_existing_api(self):
        client = MagicMock()
        client.put_rest_api.return_value = {"id": "existing1"}

        importer = GatewayImporter(client, rest_api_id="existing1", mode="merge", endpoint_type="REGIONAL")
        result = importer.submit(PAYLOAD)

        assert result.api_id == "existing1"
        client.put_rest_api.assert_called_once_with(
            "existing1",
            BODY,
            mode="merge",
            fail_on_warnings=False,
            parameters={"endpointConfigurationTypes": "REGIONAL"},
        )
        client.import_rest_api.assert_not_called()

    def test_from_config(self):
        config = DeployConfig(rest_api_id="r1", mode="merge", fail_on_warnings=True, endpoint_type="EDGE")
        importer = GatewayImporter.from_config(MagicMock(), config)
        assert importer.rest_api_id == "r1"
        assert importer.mode == "merge"
        assert importer.fail_on_warnings is True
        assert importer.endpoint_type == "EDGE"


class TestGatewayImporterRejected:
    def test_client_error_is_rejection(self):
        client = MagicMock()
        client.import_rest_api.side_effect = _client_error(
            "BadRequestException", "Errors found during import: Unable to parse API definition"
        )

        result = GatewayImporter(client).submit(PAYLOAD)

        assert result.accepted is False
        assert result.diagnostic == (
            "BadRequestException: Errors found during import: Unable to parse API definition"
        )

    def test_called_once_no_retry(self):
        client = MagicMock()
        client.import_rest_api.side_effect = _client_error("TooManyRequestsException", "Rate exceeded")

        GatewayImporter(client).submit(PAYLOAD)

        assert client.import_rest_api.call_count == 1

    def test_missing_id_is_rejection(self):
        client = MagicMock()
        client.import_rest_api.return_value = {}

        result = GatewayImporter(client).submit(PAYLOAD)

        assert result.accepted is False
        assert "API id" in result.diagnostic


class TestGatewayImporterFailures:
    def test_read_timeout(self):
        client = MagicMock()
        client.import_rest_api.side_effect = ReadTimeoutError(endpoint_url=ENDPOINT)
        with pytest.raises(GatewayTimeoutError):
            GatewayImporter(client).submit(PAYLOAD)

    def test_connect_timeout(self):
        client = MagicMock()
        client.import_rest_api.side_effect = ConnectTimeoutError(endpoint_url=ENDPOINT)
        with pytest.raises(GatewayTimeoutError):
            GatewayImporter(client).submit(PAYLOAD)

    def test_no_credentials(self):
        client = MagicMock()
        client.import_rest_api.side_effect = NoCredentialsError()
        with pytest.raises(GatewayTransportError, match="credentials"):
            GatewayImporter(client).submit(PAYLOAD)

    def test_endpoint_unreachable(self):
        client = MagicMock()
        client.import_rest_api.side_effect = EndpointConnectionError(endpoint_url=ENDPOINT)
        with pytest.raises(GatewayTransportError):
            GatewayImporter(client).submit(PAYLOAD)
