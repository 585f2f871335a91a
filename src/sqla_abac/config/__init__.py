"""Configuration module for sqla-abac."""

from __future__ import annotations

from sqla_abac.config._config import AuthzConfig, configure, get_global_config

__all__ = ["AuthzConfig", "configure", "get_global_config"]
