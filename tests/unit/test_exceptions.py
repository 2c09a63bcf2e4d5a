import pytest

from gvgwatch.exceptions import (
    FetchError,
    GvgWatchError,
    IndexFetchError,
    StepFailedError,
    StorageError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_base(self):
        for exc in (FetchError, IndexFetchError, StorageError, StepFailedError):
            assert issubclass(exc, GvgWatchError)

    def test_index_failure_is_fetch_failure(self):
        """인덱스 실패도 FetchError로 잡을 수 있어야 한다."""
        assert issubclass(IndexFetchError, FetchError)
        with pytest.raises(FetchError):
            raise IndexFetchError("worlds unavailable")

    def test_step_attribute(self):
        assert FetchError.step == "fetch"
        assert IndexFetchError.step == "index"
        assert StorageError.step == "storage"

    def test_step_failed_error_wraps_cause(self):
        cause = IndexFetchError("wgroups timeout")
        err = StepFailedError(step="global", cause=cause)
        assert err.step == "global"
        assert err.cause is cause
        assert str(err) == "Collection failed at 'global': wgroups timeout"
