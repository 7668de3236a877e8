"""Configuration loading with pydantic-settings.

Sources, highest precedence first:
1. Direct kwargs
2. Environment variables (VAULTSEEK__SECTION__KEY)
3. Vault config (<vault>/.vaultseek/config.yaml)
4. Global config (~/.config/vaultseek/config.yaml)
5. Built-in defaults
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from vaultseek.config.models import (
    FieldWeightsConfig,
    HeadingJumpConfig,
    LoggingConfig,
    MatcherConfig,
    RankingConfig,
    SearchConfig,
    VaultSeekConfig,
)
from vaultseek.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/vaultseek/config.yaml").expanduser()
VAULT_CONFIG_DIR = ".vaultseek"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class bound to one YAML snapshot."""

    class VaultSeekSettings(BaseSettings):
        """Root config. Env vars: VAULTSEEK__SEARCH__MAX_RESULTS, etc."""

        model_config = SettingsConfigDict(
            env_prefix="VAULTSEEK__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        field_weights: FieldWeightsConfig = FieldWeightsConfig()
        matcher: MatcherConfig = MatcherConfig()
        ranking: RankingConfig = RankingConfig()
        search: SearchConfig = SearchConfig()
        heading_jump: HeadingJumpConfig = HeadingJumpConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return VaultSeekSettings


def load_config(
    vault_root: Path | None = None, config_path: Path | None = None, **kwargs: Any
) -> VaultSeekConfig:
    """Load config: defaults < global yaml < vault yaml < env vars < kwargs.

    Args:
        vault_root: Vault whose .vaultseek/config.yaml is read.
                    Defaults to current working directory.
        config_path: Explicit YAML file used in place of the vault config.
                     Unlike the implicit files it must exist.
        **kwargs: Override values (highest precedence), keyed by section.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing explicit config file, invalid YAML syntax
            or validation errors.
    """
    vault_root = vault_root or Path.cwd()
    if config_path is None:
        config_path = vault_root / VAULT_CONFIG_DIR / "config.yaml"
    elif not config_path.is_file():
        raise ConfigError.file_not_found(str(config_path))

    yaml_config = _deep_merge(_load_yaml(GLOBAL_CONFIG_PATH), _load_yaml(config_path))

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return VaultSeekConfig.model_validate(settings.model_dump())
