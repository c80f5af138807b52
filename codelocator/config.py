"""Configuration loading for codelocator (.codelocator.yml plus environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".codelocator.yml"

MOCK_PROVIDER = "mock"
PROVIDER_IDS: tuple[str, ...] = (MOCK_PROVIDER, "openai", "gemini", "claude", "ollama")

DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-pro",
    "claude": "claude-3-haiku-20240307",
    "ollama": "llama3.1:8b",
}
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

# Placeholder key shipped in sample .env files; never a usable credential.
_PLACEHOLDER_OPENAI_KEY = "test_key_for_validation"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProviderCredentials:
    """Credential/endpoint bundle for one backend kind."""

    api_key: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None


@dataclass
class LLMConfig:
    """Backend selection and shared completion limits.

    ``provider`` is the only thing that decides which backend runs; having
    credentials for another backend never activates it.
    """

    provider: str = MOCK_PROVIDER
    max_tokens: int = 4000
    temperature: float = 0.1
    request_timeout: float = 60.0
    openai: ProviderCredentials = field(default_factory=ProviderCredentials)
    gemini: ProviderCredentials = field(default_factory=ProviderCredentials)
    claude: ProviderCredentials = field(default_factory=ProviderCredentials)
    ollama: ProviderCredentials = field(
        default_factory=lambda: ProviderCredentials(base_url=DEFAULT_OLLAMA_BASE_URL)
    )

    def credentials_for(self, provider: str) -> ProviderCredentials:
        if provider not in DEFAULT_MODELS:
            raise ConfigError(f"No credentials block for provider '{provider}'")
        return getattr(self, provider)

    def model_for(self, provider: str) -> str:
        return self.credentials_for(provider).model or DEFAULT_MODELS[provider]


@dataclass
class StorageConfig:
    """Scratch locations and upload ceiling."""

    upload_dir: Path = Path("uploads")
    temp_dir: Path = Path("temp")
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES


@dataclass
class CodeLocatorConfig:
    """Represents the settings defined in .codelocator.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> CodeLocatorConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CodeLocatorConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm = LLMConfig()
    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        provider = _as_str(llm_data.get("provider"))
        if provider:
            llm.provider = _validate_provider(provider)
        max_tokens = _as_int(llm_data.get("max_tokens"))
        if max_tokens is not None:
            llm.max_tokens = max_tokens
        temperature = _as_float(llm_data.get("temperature"))
        if temperature is not None:
            llm.temperature = temperature
        timeout = _as_float(llm_data.get("request_timeout"))
        if timeout is not None:
            llm.request_timeout = timeout
        for provider_id in DEFAULT_MODELS:
            block = _as_dict(llm_data.get(provider_id))
            if not block:
                continue
            current = llm.credentials_for(provider_id)
            setattr(
                llm,
                provider_id,
                ProviderCredentials(
                    api_key=_as_str(block.get("api_key")) or current.api_key,
                    model=_as_str(block.get("model")) or current.model,
                    base_url=_as_str(block.get("base_url")) or current.base_url,
                ),
            )

    storage = StorageConfig()
    storage_data = _as_dict(data.get("storage"))
    if storage_data:
        upload_dir = _as_str(storage_data.get("upload_dir"))
        temp_dir = _as_str(storage_data.get("temp_dir"))
        max_bytes = _as_int(storage_data.get("max_upload_bytes"))
        if upload_dir:
            storage.upload_dir = root / upload_dir
        if temp_dir:
            storage.temp_dir = root / temp_dir
        if max_bytes is not None:
            storage.max_upload_bytes = max_bytes

    return CodeLocatorConfig(
        root=root,
        llm=llm,
        storage=storage,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def apply_env_overrides(
    config: CodeLocatorConfig, environ: Mapping[str, str] | None = None
) -> CodeLocatorConfig:
    """Return a copy of ``config`` with environment variables layered on top."""
    env = os.environ if environ is None else environ
    llm = replace(config.llm)
    storage = replace(config.storage)

    provider = _env(env, "AI_PROVIDER")
    if provider:
        llm.provider = _validate_provider(provider)

    openai_key = _env(env, "OPENAI_API_KEY")
    if openai_key == _PLACEHOLDER_OPENAI_KEY:
        openai_key = None
    llm.openai = _overlay(llm.openai, openai_key, _env(env, "OPENAI_MODEL"), _env(env, "OPENAI_BASE_URL"))
    llm.gemini = _overlay(llm.gemini, _env(env, "GEMINI_API_KEY"), _env(env, "GEMINI_MODEL"), None)
    llm.claude = _overlay(llm.claude, _env(env, "ANTHROPIC_API_KEY"), _env(env, "CLAUDE_MODEL"), None)
    llm.ollama = _overlay(llm.ollama, None, _env(env, "OLLAMA_MODEL"), _env(env, "OLLAMA_BASE_URL"))

    max_tokens = _as_int(_env(env, "MAX_TOKENS"))
    if max_tokens is not None:
        llm.max_tokens = max_tokens
    timeout = _as_float(_env(env, "LLM_REQUEST_TIMEOUT"))
    if timeout is not None:
        llm.request_timeout = timeout

    upload_dir = _env(env, "UPLOAD_DIR")
    if upload_dir:
        storage.upload_dir = Path(upload_dir)
    temp_dir = _env(env, "TEMP_DIR")
    if temp_dir:
        storage.temp_dir = Path(temp_dir)
    max_bytes = _as_int(_env(env, "MAX_FILE_SIZE"))
    if max_bytes is not None:
        storage.max_upload_bytes = max_bytes

    return replace(config, llm=llm, storage=storage)


def load_settings(config_path: Path | None = None) -> CodeLocatorConfig:
    """Load the config file (defaults to the working directory) and apply the environment."""
    config = load_config(config_path or Path.cwd())
    return apply_env_overrides(config)


def _overlay(
    current: ProviderCredentials,
    api_key: Optional[str],
    model: Optional[str],
    base_url: Optional[str],
) -> ProviderCredentials:
    return ProviderCredentials(
        api_key=api_key or current.api_key,
        model=model or current.model,
        base_url=base_url or current.base_url,
    )


def _validate_provider(value: str) -> str:
    provider = value.strip().lower()
    if provider not in PROVIDER_IDS:
        choices = ", ".join(PROVIDER_IDS)
        raise ConfigError(f"Unknown provider '{value}'. Expected one of: {choices}")
    return provider


def _env(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
