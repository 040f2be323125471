"""End-to-end tests with a mocked boto3 API Gateway client."""

import base64
import json
import shutil
from pathlib import Path
from unittest.mock import patch, MagicMock

from click.testing import CliRunner

from openapi_deploy.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestEndToEnd:
    @patch("openapi_deploy.gateway.client.boto3")
    def test_full_deploy(self, mock_boto3, tmp_path):
        sdk = MagicMock()
        sdk.import_rest_api.return_value = {
            "id": "9x8y7z",
            "name": "Central Sequence Service API",
            "warnings": [],
        }
        mock_boto3.client.return_value = sdk

        spec = tmp_path / "api" / "openapi.yml"
        spec.parent.mkdir()
        shutil.copy(FIXTURES / "openapi.yml", spec)

        runner = CliRunner()
        result = runner.invoke(
            main,
            ["deploy", str(spec)],
            env={
                "AWS_ACCESS_KEY_ID": "AKIAEXAMPLE",
                "AWS_SECRET_ACCESS_KEY": "secret",
                "AWS_DEFAULT_REGION": "us-east-1",
            },
        )

        assert result.exit_code == 0
        assert "9x8y7z" in result.output
        assert "secret" not in result.output

        client_kwargs = mock_boto3.client.call_args[1]
        assert client_kwargs["aws_access_key_id"] == "AKIAEXAMPLE"

        # The SDK receives the raw JSON; the base64 artifact decodes to the same bytes.
        body = sdk.import_rest_api.call_args[1]["body"]
        encoded = (tmp_path / "api" / "openapi_base64.json").read_text(encoding="utf-8")
        assert base64.b64decode(encoded) == body
        assert json.loads(body)["info"]["version"] == "1.0.0"
