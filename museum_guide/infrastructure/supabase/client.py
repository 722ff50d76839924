"""Supabase client construction.

Why: One place that knows how to build a service-role client; stores get the
     client injected and stay testable with fakes.
"""

from __future__ import annotations

import logging
from importlib import import_module
from typing import Any

from museum_guide.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_supabase_client(url: str, service_role_key: str, timeout_s: float = 30.0) -> Any:
    """Build a supabase-py client bounded by `timeout_s` for PostgREST calls."""
    if not url or not service_role_key:
        raise ConfigurationError("SUPABASE_URL and SERVICE_ROLE_KEY are required")
    try:
        supabase = import_module("supabase")
        options = supabase.ClientOptions(postgrest_client_timeout=timeout_s)
        client = supabase.create_client(url, service_role_key, options=options)
    except Exception as ex:  # noqa: BLE001
        raise ConfigurationError(f"Supabase client init failed: {ex}") from ex
    logger.info("Supabase client created for %s", url)
    return client
