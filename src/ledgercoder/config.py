"""Configuration for coding sessions and the suggestion service."""

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os

from ledgercoder.domain.errors import SettingsError

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TIMEOUT = 30.0
DEFAULT_TEMPERATURE = 0.2

API_KEY_ENV = "OPENAI_API_KEY"
MODEL_ENV = "LEDGERCODER_OPENAI_MODEL"
BASE_URL_ENV = "LEDGERCODER_OPENAI_BASE_URL"
TIMEOUT_ENV = "LEDGERCODER_SUGGESTION_TIMEOUT"
TEMPERATURE_ENV = "LEDGERCODER_SUGGESTION_TEMPERATURE"


@dataclass(frozen=True)
class SuggestionSettings:
    api_key: Optional[str]
    model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT
    temperature: float = DEFAULT_TEMPERATURE

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)


@dataclass
class CodingOptions:
    """Options of one ``code`` run."""

    use_ai_suggestions: bool = True
    auto_apply_ai: bool = False
    response_file: Optional[Path] = None
    save_responses_file: Optional[Path] = None
    reconcile_file: Optional[Path] = None


def load_suggestion_settings(
    api_key: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> SuggestionSettings:
    """Read suggestion service settings from the environment.

    Args:
        api_key: Explicit API key; overrides OPENAI_API_KEY
        environ: Environment to read (default: os.environ)

    Raises:
        SettingsError: If a numeric variable cannot be parsed or is negative
    """
    env = os.environ if environ is None else environ
    return SuggestionSettings(
        api_key=api_key or env.get(API_KEY_ENV) or None,
        model=env.get(MODEL_ENV) or DEFAULT_MODEL,
        base_url=env.get(BASE_URL_ENV) or None,
        timeout_seconds=_parse_float(env.get(TIMEOUT_ENV), DEFAULT_TIMEOUT, TIMEOUT_ENV),
        temperature=_parse_float(env.get(TEMPERATURE_ENV), DEFAULT_TEMPERATURE, TEMPERATURE_ENV),
    )


def _parse_float(raw: Optional[str], default: float, env_name: str) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise SettingsError(f"{env_name} must be a number, got '{raw}'") from e
    if value < 0:
        raise SettingsError(f"{env_name} must not be negative, got '{raw}'")
    return value
