"""Runtime configuration read from the environment (and .env)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError


PROVIDERS = ('openai', 'anthropic')
DEFAULT_MODELS = {
    'openai': 'gpt-4o',
    'anthropic': 'claude-3-5-sonnet-latest',
}
MODEL_VARS = {
    'openai': 'OPENAI_MODEL',
    'anthropic': 'ANTHROPIC_MODEL',
}


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


@dataclass
class AnalyzerConfig:
    """Settings for one analysis run, built once at process entry."""
    api_key: str
    provider: str = 'openai'
    model: str = 'gpt-4o'
    temperature: float = 0.7
    max_tokens: int = 1000
    max_retries: int = 3
    rate_limit_delay_ms: int = 500
    data_dir: str = 'data'
    log_level: str = 'INFO'

    @property
    def rate_limit_delay(self) -> float:
        """Delay between pair analyses, in seconds."""
        return self.rate_limit_delay_ms / 1000

    @classmethod
    def from_env(cls, dotenv: bool = True) -> 'AnalyzerConfig':
        """Build config from environment variables, raising ConfigError on bad values."""
        if dotenv:
            load_dotenv()

        provider = os.getenv('LLM_PROVIDER', 'openai').strip().lower()
        if provider not in PROVIDERS:
            raise ConfigError(f"LLM_PROVIDER must be one of {', '.join(PROVIDERS)}, got {provider!r}")

        key_name = 'ANTHROPIC_API_KEY' if provider == 'anthropic' else 'OPENAI_API_KEY'
        api_key: Optional[str] = os.getenv(key_name)
        if not api_key or not api_key.strip():
            raise ConfigError(f"{key_name} not set. Set it in .env file or environment")

        # LLM_MODEL wins over the provider-specific variable
        model = (
            os.getenv('LLM_MODEL', '').strip()
            or os.getenv(MODEL_VARS[provider], '').strip()
            or DEFAULT_MODELS[provider]
        )
        max_retries = _env_number('MAX_RETRIES', cls.max_retries, int)
        if max_retries < 1:
            raise ConfigError("MAX_RETRIES must be at least 1")

        return cls(
            api_key=api_key.strip(),
            provider=provider,
            model=model,
            temperature=_env_number('OPENAI_TEMPERATURE', cls.temperature, float),
            max_tokens=_env_number('OPENAI_MAX_TOKENS', cls.max_tokens, int),
            max_retries=max_retries,
            rate_limit_delay_ms=_env_number('RATE_LIMIT_DELAY', cls.rate_limit_delay_ms, int),
            data_dir=os.getenv('DATA_DIR', cls.data_dir),
            log_level=os.getenv('LOG_LEVEL', cls.log_level).upper(),
        )
