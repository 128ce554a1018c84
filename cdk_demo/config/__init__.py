"""
Configuration Module
Environment records and environment resolution
"""

from .environments import (
    ENVIRONMENTS,
    ENVIRONMENT_OVERRIDES_CONTEXT_KEY,
    EnvironmentConfig,
    load_environment_table,
    load_project_environment_table,
    parse_environment_overrides,
    read_project_overrides,
    resolve_environment,
)

__all__ = [
    'ENVIRONMENTS',
    'ENVIRONMENT_OVERRIDES_CONTEXT_KEY',
    'EnvironmentConfig',
    'load_environment_table',
    'load_project_environment_table',
    'parse_environment_overrides',
    'read_project_overrides',
    'resolve_environment'
]
