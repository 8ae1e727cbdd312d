# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/codequiz_eval

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from codequiz_eval.utils.vault import VaultIntegrator

FILENAME_PLACEHOLDER = "{filename}"


class LanguageSandboxConfig(BaseModel):
    """How one language is executed inside the sandbox."""

    docker_image: str
    command: str
    file_extension: str
    argument_template: list[str] = Field(default_factory=lambda: [FILENAME_PLACEHOLDER])
    code_prefix: str | None = None

    def get_arguments(self, filename: str) -> list[str]:
        return [arg.replace(FILENAME_PLACEHOLDER, filename) for arg in self.argument_template]

    def prepare_code(self, code: str) -> str:
        return f"{self.code_prefix}{code}" if self.code_prefix else code


def default_language_configs() -> dict[str, LanguageSandboxConfig]:
    return {
        "csharp": LanguageSandboxConfig(
            docker_image="mcr.microsoft.com/dotnet/sdk:10.0",
            command="dotnet",
            file_extension=".cs",
            argument_template=["run", "/sandbox/{filename}"],
            code_prefix="#pragma warning disable\n",
        ),
        "python": LanguageSandboxConfig(
            docker_image="python:3.12-slim",
            command="python -u",
            file_extension=".py",
            argument_template=["/sandbox/{filename}"],
        ),
    }


class VaultSettingsSource(PydanticBaseSettingsSource):
    """
    Custom Pydantic Settings Source that reads secrets from Vault.
    """

    mapping = {
        "ai_api_key": "AI_API_KEY",
        "notification_token": "NOTIFICATION_TOKEN",
    }

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        # Required by the abstract base class; __call__ supplies the values.
        return None, field_name, False  # pragma: no cover

    def __call__(self) -> dict[str, Any]:
        vault = VaultIntegrator()
        secrets: dict[str, Any] = {}
        for field, key in self.mapping.items():
            val = vault.get_secret(key)
            if val:
                secrets[field] = val
        return secrets


class EvaluationConfig(BaseSettings):
    """
    Configuration for code execution, evaluation and the background services.
    """

    # Staging and sandbox limits
    temp_code_path: Path = Path("/tmp/code")
    timeout_seconds: int = 10
    memory_limit_bytes: int = 128 * 1024 * 1024
    cpu_quota: int = 50000
    cpu_period: int = 100000
    pids_limit: int = 64
    # Container start-up latency (the .NET SDK image needs ~15s)
    startup_grace_seconds: float = 15.0
    container_work_dir: str = "/sandbox"
    network_disabled: bool = True
    language_configs: dict[str, LanguageSandboxConfig] = Field(default_factory=default_language_configs)

    # Unsandboxed runners
    python_interpreter_path: str = "python3"
    csharp_compiler_path: str = "dotnet"

    # Background services
    expiry_check_interval: float = 10.0
    expiry_grace_seconds: float = 30.0
    quiz_end_check_interval: float = 60.0
    quiz_end_email_delay: float = 120.0
    worker_consumers: int = 1

    # Collaborators
    notification_webhook_url: str | None = None
    notification_token: str | None = None
    ai_assessment_url: str | None = None
    ai_api_key: str | None = None
    ai_model: str = "llama-3.3-70b-versatile"
    http_timeout: float = 60.0

    enable_audit_logging: bool = True

    model_config = SettingsConfigDict(
        env_prefix="CODEQUIZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("language_configs", mode="after")
    @classmethod
    def normalize_language_keys(cls, v: dict[str, LanguageSandboxConfig]) -> dict[str, LanguageSandboxConfig]:
        return {name.lower(): config for name, config in v.items()}

    @field_validator("worker_consumers")
    @classmethod
    def validate_consumers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("worker_consumers must be at least 1")
        return v

    def get_language_config(self, language: str) -> LanguageSandboxConfig | None:
        return self.language_configs.get(language.lower())

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            VaultSettingsSource(settings_cls),
            file_secret_settings,
        )
