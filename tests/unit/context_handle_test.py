"""Unit tests for ApplicationContextHandle using stub registries and loaders."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from app_context_util import get_bean
from app_context_util.context_handle import ApplicationContextHandle
from app_context_util.core.errors import (
    ApplicationContextError,
    BeanResolutionError,
    ContextDisposalError,
    ContextLoadError,
    HandleDisposedError,
    InvalidArgumentError,
    NoSuchBeanError,
    NoUniqueBeanError,
)
from registry_stubs import CloseableRegistry, InMemoryRegistry, OverridingLoader, RecordingLoader
from sample_beans import ConnectionPool, DataSource, MonsterDao, ReadReplicaPool


class TestHandleConstruction:
    """Construction, validation and all-or-nothing behaviour."""

    def test_resolves_single_matching_bean(self, recording_loader, connection_pool) -> None:
        # Given
        sources = ("datasource.yaml",)

        # When
        handle = ApplicationContextHandle(ConnectionPool, *sources, loader=recording_loader)

        # Then
        assert handle.bean is connection_pool
        assert handle.context is recording_loader.registries[0]
        assert recording_loader.calls == [sources]
        assert not handle.closed

    def test_resolves_by_interface(self, recording_loader, connection_pool) -> None:
        # Given/When
        handle = ApplicationContextHandle(DataSource, "datasource.yaml", loader=recording_loader)

        # Then
        assert handle.bean is connection_pool

    def test_empty_sources_fail_before_loading(self, recording_loader) -> None:
        # Given/When
        with pytest.raises(InvalidArgumentError, match="at least one configuration source"):
            ApplicationContextHandle(ConnectionPool, loader=recording_loader)

        # Then
        assert recording_loader.load_count == 0

    def test_missing_bean_type_fails_before_loading(self, recording_loader) -> None:
        # Given/When
        with pytest.raises(InvalidArgumentError, match="bean_type"):
            ApplicationContextHandle(None, "datasource.yaml", loader=recording_loader)

        # Then
        assert recording_loader.load_count == 0

    @pytest.mark.parametrize("bean_type", ["sample_beans:ConnectionPool", 42, ConnectionPool("x")])
    def test_non_class_bean_type_is_rejected(self, recording_loader, bean_type) -> None:
        # Given/When/Then
        with pytest.raises(InvalidArgumentError):
            ApplicationContextHandle(bean_type, "datasource.yaml", loader=recording_loader)
        assert recording_loader.load_count == 0

    @pytest.mark.parametrize("source", ["", "   ", None, 3])
    def test_invalid_source_is_rejected(self, recording_loader, source) -> None:
        # Given/When/Then
        with pytest.raises(InvalidArgumentError):
            ApplicationContextHandle(ConnectionPool, "datasource.yaml", source, loader=recording_loader)
        assert recording_loader.load_count == 0

    def test_invalid_argument_is_a_value_error(self, recording_loader) -> None:
        # Given/When/Then
        with pytest.raises(ValueError):
            ApplicationContextHandle(ConnectionPool, loader=recording_loader)

    def test_path_like_sources_are_passed_as_strings(self, recording_loader, tmp_path) -> None:
        # Given
        source = tmp_path / "datasource.yaml"

        # When
        ApplicationContextHandle(ConnectionPool, source, loader=recording_loader)

        # Then
        assert recording_loader.calls == [(str(source),)]
        assert isinstance(recording_loader.calls[0][0], str)
        assert not isinstance(recording_loader.calls[0][0], Path)

    def test_no_match_closes_registry_exactly_once(self, recording_loader, closeable_registry) -> None:
        # Given
        # The registry only holds a ConnectionPool

        # When
        with pytest.raises(NoSuchBeanError):
            ApplicationContextHandle(MonsterDao, "datasource.yaml", loader=recording_loader)

        # Then
        assert closeable_registry.close_calls == 1

    def test_multiple_matches_close_registry_exactly_once(self) -> None:
        # Given
        registry = CloseableRegistry({
            "primaryPool": ConnectionPool("sqlite:///a.db"),
            "replicaPool": ReadReplicaPool("sqlite:///b.db"),
        })
        loader = RecordingLoader(lambda sources: registry)

        # When
        with pytest.raises(NoUniqueBeanError) as exc_info:
            ApplicationContextHandle(ConnectionPool, "pools.yaml", loader=loader)

        # Then
        assert registry.close_calls == 1
        assert exc_info.value.candidates == ["primaryPool", "replicaPool"]
        assert isinstance(exc_info.value, BeanResolutionError)
        assert isinstance(exc_info.value, LookupError)

    def test_resolution_failure_surfaces_even_if_cleanup_close_fails(self, caplog) -> None:
        # Given
        registry = CloseableRegistry({}, close_error=RuntimeError("pool stuck"))
        loader = RecordingLoader(lambda sources: registry)

        # When
        with caplog.at_level(logging.WARNING, logger="app_context_util.context_handle"):
            with pytest.raises(NoSuchBeanError):
                ApplicationContextHandle(ConnectionPool, "empty.yaml", loader=loader)

        # Then
        assert registry.close_calls == 1
        assert "pool stuck" in caplog.text

    def test_registry_returning_none_is_treated_as_missing_bean(self) -> None:
        # Given
        class NoneRegistry(CloseableRegistry):
            def get_bean(self, bean_type):
                return None

        registry = NoneRegistry()
        loader = RecordingLoader(lambda sources: registry)

        # When/Then
        with pytest.raises(NoSuchBeanError):
            ApplicationContextHandle(ConnectionPool, "empty.yaml", loader=loader)
        assert registry.close_calls == 1

    def test_load_failure_propagates_unchanged(self) -> None:
        # Given
        error = ContextLoadError("malformed source")

        def failing_factory(sources):
            raise error

        loader = RecordingLoader(failing_factory)

        # When/Then
        with pytest.raises(ContextLoadError) as exc_info:
            ApplicationContextHandle(ConnectionPool, "broken.yaml", loader=loader)
        assert exc_info.value is error
        assert loader.load_count == 1

    def test_invalid_loader_settings_in_environment_raise_load_error(self, write_source) -> None:
        # Given
        source = write_source("datasource.yaml", "beans: []\n")

        # When/Then
        with patch.dict(os.environ, {"APP_CONTEXT__EAGER_INIT": "maybe"}):
            with pytest.raises(ContextLoadError, match="APP_CONTEXT__"):
                get_bean(ConnectionPool, source)

    def test_later_source_overrides_earlier_definition(self) -> None:
        # Given
        first_dao = MonsterDao(ConnectionPool("sqlite:///first.db"), table="first")
        second_dao = MonsterDao(ConnectionPool("sqlite:///second.db"), table="second")
        loader = OverridingLoader({
            "first.yaml": {"monsterDao": first_dao},
            "second.yaml": {"monsterDao": second_dao},
        })

        # When
        handle = ApplicationContextHandle(MonsterDao, "first.yaml", "second.yaml", loader=loader)

        # Then
        assert loader.calls == [("first.yaml", "second.yaml")]
        assert handle.bean is second_dao


class TestHandleAccessors:
    """Accessors are stable while open and fail once closed."""

    def test_accessors_return_same_references(self, recording_loader) -> None:
        # Given
        handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=recording_loader)

        # When
        first = (handle.context, handle.bean)
        second = (handle.context, handle.bean)

        # Then
        assert first[0] is second[0]
        assert first[1] is second[1]
        assert handle.bean_type is ConnectionPool

    def test_context_gives_access_to_other_beans(self, connection_pool) -> None:
        # Given
        dao = MonsterDao(connection_pool)
        registry = CloseableRegistry({"dataSource": connection_pool, "monsterDao": dao})
        handle = ApplicationContextHandle(MonsterDao, "dao.yaml", loader=RecordingLoader(lambda s: registry))

        # When
        data_source = handle.context.get_bean_by_name("dataSource", DataSource)

        # Then
        assert data_source is connection_pool
        assert handle.bean.data_source is data_source

    def test_accessors_after_close_raise(self, recording_loader) -> None:
        # Given
        handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=recording_loader)
        handle.close()

        # When/Then
        with pytest.raises(HandleDisposedError):
            _ = handle.bean
        with pytest.raises(HandleDisposedError):
            _ = handle.context
        with pytest.raises(RuntimeError):
            _ = handle.bean


class TestHandleClose:
    """Disposal through the optional close() capability."""

    def test_close_closes_registry_once(self, recording_loader, closeable_registry) -> None:
        # Given
        handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=recording_loader)

        # When
        handle.close()
        handle.close()

        # Then
        assert closeable_registry.close_calls == 1
        assert handle.closed

    def test_close_without_capability_is_a_no_op(self, connection_pool) -> None:
        # Given
        registry = InMemoryRegistry({"dataSource": connection_pool})
        handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=RecordingLoader(lambda s: registry))

        # When
        handle.close()

        # Then
        assert handle.closed
        assert connection_pool.close_calls == 0

    def test_context_manager_closes_on_exit(self, recording_loader, closeable_registry) -> None:
        # Given/When
        with ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=recording_loader) as handle:
            assert closeable_registry.close_calls == 0

        # Then
        assert handle.closed
        assert closeable_registry.close_calls == 1

    def test_context_manager_closes_when_body_raises(self, recording_loader, closeable_registry) -> None:
        # Given/When
        with pytest.raises(KeyError):
            with ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=recording_loader):
                raise KeyError("body failure")

        # Then
        assert closeable_registry.close_calls == 1

    def test_close_failure_is_wrapped_in_disposal_error(self, connection_pool) -> None:
        # Given
        registry = CloseableRegistry({"dataSource": connection_pool}, close_error=OSError("socket busy"))
        handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=RecordingLoader(lambda s: registry))

        # When
        with pytest.raises(ContextDisposalError) as exc_info:
            handle.close()

        # Then
        assert isinstance(exc_info.value.__cause__, OSError)
        assert handle.closed

    def test_disposal_error_from_registry_is_not_rewrapped(self, connection_pool) -> None:
        # Given
        error = ContextDisposalError("bean destroy failed")
        registry = CloseableRegistry({"dataSource": connection_pool}, close_error=error)
        handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=RecordingLoader(lambda s: registry))

        # When/Then
        with pytest.raises(ContextDisposalError) as exc_info:
            handle.close()
        assert exc_info.value is error


class TestOneShotResolve:
    """ApplicationContextHandle.resolve and the module-level get_bean."""

    def test_resolve_returns_bean_and_closes_registry(self, recording_loader, closeable_registry, connection_pool) -> None:
        # Given/When
        bean = ApplicationContextHandle.resolve(ConnectionPool, "datasource.yaml", loader=recording_loader)

        # Then
        assert bean is connection_pool
        assert closeable_registry.close_calls == 1

    def test_resolve_matches_constructed_handle(self, connection_pool) -> None:
        # Given
        registry = CloseableRegistry({"dataSource": connection_pool})
        loader = RecordingLoader(lambda s: registry)

        # When
        via_handle = ApplicationContextHandle(ConnectionPool, "datasource.yaml", loader=loader).bean
        via_resolve = get_bean(ConnectionPool, "datasource.yaml", loader=loader)

        # Then
        assert via_resolve is via_handle
        assert registry.close_calls == 1

    def test_resolve_failure_closes_registry(self, recording_loader, closeable_registry) -> None:
        # Given/When
        with pytest.raises(NoSuchBeanError):
            get_bean(MonsterDao, "datasource.yaml", loader=recording_loader)

        # Then
        assert closeable_registry.close_calls == 1

    def test_resolve_wraps_disposal_failure_in_generic_error(self, connection_pool) -> None:
        # Given
        registry = CloseableRegistry({"dataSource": connection_pool}, close_error=RuntimeError("pool stuck"))
        loader = RecordingLoader(lambda s: registry)

        # When
        with pytest.raises(ApplicationContextError) as exc_info:
            ApplicationContextHandle.resolve(ConnectionPool, "datasource.yaml", loader=loader)

        # Then
        assert type(exc_info.value) is ApplicationContextError
        assert isinstance(exc_info.value.__cause__, ContextDisposalError)
        assert registry.close_calls == 1

    def test_resolve_validates_before_loading(self, recording_loader) -> None:
        # Given/When/Then
        with pytest.raises(InvalidArgumentError):
            get_bean(ConnectionPool, loader=recording_loader)
        assert recording_loader.load_count == 0

    def test_resolve_reports_loader_disposal_error_unchanged(self) -> None:
        # Given
        error = ContextDisposalError("partially loaded registry could not be released")

        def failing_factory(sources):
            raise error

        loader = RecordingLoader(failing_factory)

        # When
        with pytest.raises(ContextDisposalError) as exc_info:
            ApplicationContextHandle.resolve(ConnectionPool, "datasource.yaml", loader=loader)

        # Then
        assert exc_info.value is error
