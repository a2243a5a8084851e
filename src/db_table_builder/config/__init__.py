"""Configuration management: profiles, builder settings and TOML loading.

Usage:
    >>> from db_table_builder.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from db_table_builder.config.loader import load_db_config
from db_table_builder.config.models import BuilderSettings, DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "BuilderSettings", "DatabaseConfig", "DatabaseProfile"]
