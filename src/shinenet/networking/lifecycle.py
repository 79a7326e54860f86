"""Process-wide shared HttpClient.

The shared client owns the one production connection pool. It is built on
first use from the staged configuration and lives until ``reset()``.
Configuration changes take effect by staging a new config with
``configure()`` and calling ``reset()``; a live client is never mutated.
"""

from __future__ import annotations

import logging
import threading

from .client import HttpClient
from .config import HttpClientConfig
from .pipeline import Interceptor

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_instance: HttpClient | None = None
_config: HttpClientConfig | None = None
_interceptors: list[Interceptor] = []


def configure(config: HttpClientConfig | None = None) -> None:
    """Stage the config used the next time the shared client is built.

    ``None`` restores the defaults. A live shared client keeps its config
    until ``reset()``.
    """
    global _config
    with _lock:
        _config = config
        if _instance is not None:
            logger.debug("Staged new shared client config; reset() to apply")


def register_interceptor(interceptor: Interceptor) -> None:
    """Add a hook to the shared client's pipeline.

    Raises:
        RuntimeError: The shared client has already been built.
    """
    with _lock:
        if _instance is not None:
            raise RuntimeError(
                "shared client already built; register interceptors before "
                "first use or call reset() first"
            )
        _interceptors.append(interceptor)


def clear_interceptors() -> None:
    """Drop staged interceptors; applies to the next built client."""
    with _lock:
        _interceptors.clear()


def shared() -> HttpClient:
    """Return the shared client, building it on first access."""
    global _instance
    instance = _instance
    if instance is not None:
        return instance
    with _lock:
        if _instance is None:
            config = _config if _config is not None else HttpClientConfig()
            _instance = HttpClient(config, interceptors=tuple(_interceptors))
            logger.debug("Built shared HttpClient")
        return _instance


def reset() -> None:
    """Close the shared client's connections and forget it.

    Safe to call when no shared client exists.
    """
    global _instance
    with _lock:
        instance, _instance = _instance, None
    if instance is not None:
        instance.close()
        logger.debug("Reset shared HttpClient")
