# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
import threading
from unittest.mock import patch

import pytest

import shinenet.networking.lifecycle as lifecycle
from shinenet.networking.client import HttpClient
from shinenet.networking.config import HttpClientConfig
from shinenet.networking.lifecycle import (
    clear_interceptors,
    configure,
    register_interceptor,
    reset,
    shared,
)
from shinenet.networking.pipeline import CallbackInterceptor


@pytest.fixture(autouse=True)
def clean_shared_state():
    reset()
    configure()
    clear_interceptors()
    yield
    reset()
    configure()
    clear_interceptors()


def test_shared_is_lazy_and_stable():
    assert lifecycle._instance is None

    first = shared()

    assert isinstance(first, HttpClient)
    assert shared() is first


def test_concurrent_first_access_builds_one_instance():
    workers = 16
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def access():
        barrier.wait()
        client = shared()
        with lock:
            results.append(client)

    with patch.object(
        lifecycle, "HttpClient", wraps=HttpClient
    ) as constructor:
        threads = [threading.Thread(target=access) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert len(results) == workers
    assert all(client is results[0] for client in results)
    assert constructor.call_count == 1


def test_reset_closes_instance_and_next_access_rebuilds():
    first = shared()

    with patch.object(first, "close") as close:
        reset()

    close.assert_called_once_with()
    second = shared()
    assert second is not first


def test_reset_without_instance_is_noop():
    reset()
    reset()

    assert lifecycle._instance is None


def test_reset_applies_latest_config():
    first = shared()
    configure(HttpClientConfig(receive_timeout_seconds=30.0))

    assert shared().config.receive_timeout_seconds == 10.0

    reset()

    assert shared() is not first
    assert shared().config.receive_timeout_seconds == 30.0


def test_interceptors_registered_before_first_access_are_used():
    interceptor = CallbackInterceptor()
    register_interceptor(interceptor)

    assert interceptor in shared().interceptors


def test_register_after_construction_raises():
    shared()

    with pytest.raises(RuntimeError):
        register_interceptor(CallbackInterceptor())


def test_package_exports_lifecycle_functions():
    import shinenet.networking as networking

    assert networking.shared is lifecycle.shared
    assert networking.reset is lifecycle.reset
    assert networking.clear_interceptors is lifecycle.clear_interceptors
    assert "clear_interceptors" in networking.__all__


def test_clear_interceptors_drops_staged_hooks():
    interceptor = CallbackInterceptor()
    register_interceptor(interceptor)

    clear_interceptors()

    assert interceptor not in shared().interceptors
