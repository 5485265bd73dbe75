"""
CORE LAYER CONTRACT

This package contains the SQL command primitive and its provider abstractions.

RULES:
- One operation shape: run one command once, release the connection always
- Driver errors are never wrapped
- No retries, pooling, transactions or schema knowledge

LAYER RESPONSIBILITY:
- DbOperation (scalar / non-query / reader / async non-query)
- DbParameter and cloning against a provider
- Provider protocols and the DB-API / psycopg2 providers
- Exception hierarchy

If you need schema-specific queries, you are in the wrong layer.
"""

from core.db_operation import DbOperation
from core.exceptions import (
    SqlCommandError,
    ConfigurationError,
    ProviderError,
    UnsupportedParameterError,
)
from core.interfaces import CommandType
from core.parameters import DbParameter, ParameterDirection
from core.providers import DbApiProviderFactory
from core.psycopg_provider import PsycopgProviderFactory, default_provider_factory

__all__ = [
    "DbOperation",
    "DbParameter",
    "ParameterDirection",
    "CommandType",
    "DbApiProviderFactory",
    "PsycopgProviderFactory",
    "default_provider_factory",
    "SqlCommandError",
    "ConfigurationError",
    "ProviderError",
    "UnsupportedParameterError",
]
