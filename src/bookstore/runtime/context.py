from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from src.bookstore.runtime.config.config_data import ConfigData
from src.bookstore.runtime.config.config_template import load_templated_yaml
from src.bookstore.runtime.config.settings import EnvironmentVariables


@dataclass
class AppContext:
    """Process-wide state visible to request handlers and startup code."""

    config: ConfigData


def load_default_config() -> ConfigData:
    """Load the config file named by the environment, or built-in defaults."""
    env = EnvironmentVariables()
    path = Path(env.config_file)
    if not path.exists():
        logger.warning("Config file {} not found; using built-in defaults", path)
        config = ConfigData()
        config.app.environment = env.environment
        return config
    return load_templated_yaml(path, env_mode=env.environment)


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Install ``context`` for the current task; the token undoes it."""
    return _app_context.set(context)


def _explicit_fields(model: BaseModel) -> dict:
    """Fields the caller actually set, at any depth of nested models."""
    explicit = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                explicit[name] = nested
            elif name in model.model_fields_set:
                explicit[name] = value.model_dump()
        elif name in model.model_fields_set:
            explicit[name] = value
    return explicit


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    merged = _deep_merge(base_config.model_dump(), _explicit_fields(override_config))
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Run a block under a partially overridden configuration.

    Only the fields set on ``config_override`` replace the current values;
    the previous configuration is restored on exit, even after an error.

    Example:
        with with_context(ConfigData(database=DatabaseConfig(url="sqlite://"))):
            assert get_config().database.url == "sqlite://"
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    current = get_context()
    token = set_context(replace(current, config=_merge_configs(current.config, config_override)))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the configuration of the current task outright."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    return get_context().config
