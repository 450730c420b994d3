"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationValueError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from enum import StrEnum


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value.strip()

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    return require_env_vars([name])[name]


def optional_env_var(name: str) -> str | None:
    """Return the stripped value of ``name`` or ``None`` when unset or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_int(name: str, *, default: int, minimum: int | None = None) -> int:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidConfigurationValueError(name, raw, "an integer") from None
    if minimum is not None and value < minimum:
        raise InvalidConfigurationValueError(name, raw, f"an integer >= {minimum}")
    return value


def env_float(name: str, *, default: float | None = None) -> float | None:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidConfigurationValueError(name, raw, "a number") from None
    if value <= 0:
        raise InvalidConfigurationValueError(name, raw, "a positive number")
    return value


def env_choice[E: StrEnum](name: str, enum_cls: type[E], *, default: E) -> E:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        return enum_cls(raw.upper())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise InvalidConfigurationValueError(name, raw, f"one of {choices}") from None
