"""Pipeline configuration and the credential store.

Configuration is built once and passed into the pipeline; nothing here is
module-level mutable state.
"""

import os
from pathlib import Path
from typing import Literal

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from openapi_deploy.errors import ConfigError

DEFAULT_SPEC_PATH = Path("api/openapi.yml")
DEFAULT_REGION = "us-east-1"
DEFAULT_TIMEOUT = 60.0


class DeployConfig(BaseModel):
    """Paths, gateway target and run policy for one deployment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    spec_path: Path = DEFAULT_SPEC_PATH
    json_path: Path | None = None  # defaults to <spec>.json
    encoded_path: Path | None = None  # defaults to <spec>_base64.json
    write_artifacts: bool = True

    region: str = DEFAULT_REGION
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    rest_api_id: str | None = None  # update this API instead of creating one
    mode: Literal["overwrite", "merge"] = "overwrite"
    fail_on_warnings: bool = False
    endpoint_type: Literal["REGIONAL", "EDGE", "PRIVATE"] | None = None

    run_post_steps_on_rejection: bool = True

    @model_validator(mode="before")
    @classmethod
    def _derive_artifact_paths(cls, data):
        if not isinstance(data, dict):
            return data
        spec_path = data.get("spec_path") or DEFAULT_SPEC_PATH
        if not isinstance(spec_path, (str, os.PathLike)):
            return data  # field validation reports the bad type
        data = dict(data)
        stem = Path(spec_path).with_suffix("")
        if data.get("json_path") is None:
            data["json_path"] = stem.parent / f"{stem.name}.json"
        if data.get("encoded_path") is None:
            data["encoded_path"] = stem.parent / f"{stem.name}_base64.json"
        return data


class GatewayCredentials(BaseModel):
    """Auth material read from the credential store. Never written back."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str | None = None
    secret_access_key: SecretStr | None = None
    session_token: SecretStr | None = None
    region: str | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "GatewayCredentials":
        env = os.environ if environ is None else environ
        return cls(
            access_key_id=env.get("AWS_ACCESS_KEY_ID") or None,
            secret_access_key=env.get("AWS_SECRET_ACCESS_KEY") or None,
            session_token=env.get("AWS_SESSION_TOKEN") or None,
            region=env.get("AWS_DEFAULT_REGION") or env.get("AWS_REGION") or None,
        )

    @property
    def explicit(self) -> bool:
        """True when both key parts are set; otherwise boto3's default chain applies."""
        return bool(self.access_key_id and self.secret_access_key)


def load_config(config_path: Path | None = None, defaults: dict | None = None, **overrides) -> DeployConfig:
    """Build a DeployConfig from defaults, an optional YAML file and overrides.

    Later layers win. Values set to None are ignored in ``defaults`` and
    ``overrides`` so unset CLI options keep file values.
    """
    values = {k: v for k, v in (defaults or {}).items() if v is not None}
    if config_path is not None:
        values.update(_read_config_file(Path(config_path)))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return DeployConfig(**values)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _read_config_file(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data
