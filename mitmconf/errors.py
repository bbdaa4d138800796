from __future__ import annotations


class ConfigError(Exception):
    """Fatal configuration error.

    Not a ``ValueError`` subclass, so raising it inside a pydantic
    validator propagates unchanged instead of being wrapped.
    """
