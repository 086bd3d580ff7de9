# pylint: skip-file
# type: ignore

# Standard library
import sys; sys.path.append("../../")
import threading
import time

import pytest

from eviltransform.core_geometry import core_geometry_context
from eviltransform.core_geometry.core_geometry_context import (
    EngineContext,
    EngineOptions,
    get_engine_context,
)
from eviltransform.core_geometry.core_geometry_engine import OgrGeometryEngine
from eviltransform.utils import utils_gdal


def test_lazy_singleton():
    assert core_geometry_context._context is None

    context = get_engine_context()

    assert isinstance(context, EngineContext)
    assert isinstance(context.engine, OgrGeometryEngine)
    assert get_engine_context() is context


def test_options_only_apply_on_first_build():
    first = get_engine_context(EngineOptions(allocator=bytearray))
    second = get_engine_context(EngineOptions(allocator=lambda size: None))

    assert second is first
    assert first.allocate(3) == bytearray(3)


def test_concurrent_first_use_builds_once(monkeypatch):
    calls = []
    original = core_geometry_context._create_engine_context

    def slow_create(options=None):
        calls.append(1)
        time.sleep(0.05)
        return original(options)

    monkeypatch.setattr(core_geometry_context, "_create_engine_context", slow_create)

    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(get_engine_context())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_failed_build_is_retried(monkeypatch):
    monkeypatch.setattr(utils_gdal, "_get_gdal_version", lambda: 1000000)

    with pytest.raises(RuntimeError):
        get_engine_context()

    assert core_geometry_context._context is None

    monkeypatch.undo()

    assert isinstance(get_engine_context(), EngineContext)


def test_failing_allocator_fails_build():
    def broken(size):
        raise MemoryError("no memory")

    with pytest.raises(MemoryError):
        get_engine_context(EngineOptions(allocator=broken))

    assert core_geometry_context._context is None


class TestEngineOptions:
    def test_defaults(self):
        options = EngineOptions()

        assert options.on_error is utils_gdal._noop_reporter
        assert options.on_notice is utils_gdal._noop_reporter
        assert options.allocator is bytearray

    @pytest.mark.parametrize("name", ["on_error", "on_notice", "allocator"])
    def test_must_be_callable(self, name):
        with pytest.raises(TypeError):
            EngineOptions(**{name: "not callable"})


class TestAllocate:
    def test_allocate(self):
        context = EngineContext(OgrGeometryEngine(), EngineOptions())

        buffer = context.allocate(16)

        assert isinstance(buffer, bytearray)
        assert len(buffer) == 16

    @pytest.mark.parametrize("allocator", [
        lambda size: None,
        lambda size: bytes(size),
        lambda size: bytearray(size + 1),
    ])
    def test_bad_allocator(self, allocator):
        context = EngineContext(OgrGeometryEngine(), EngineOptions(allocator=allocator))

        with pytest.raises(MemoryError):
            context.allocate(4)
