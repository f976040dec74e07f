"""Tests for session data types."""

import pytest

from progress_indicator.types import (
    PhaseStatus,
    Session,
    SessionConfig,
    SessionUpdate,
    clamp_progress,
    is_duration_value,
    is_progress_value,
)


class TestSessionConfigFromOptions:
    """Test option normalization."""

    def test_empty_options_give_defaults(self):
        """No options produces the default config."""
        assert SessionConfig.from_options({}) == SessionConfig()

    def test_none_options_give_defaults(self):
        """A missing options mapping is treated as empty."""
        assert SessionConfig.from_options(None) == SessionConfig()

    def test_phases_normalized_to_tuple(self):
        """Phase sequences become tuples of strings."""
        config = SessionConfig.from_options({"phases": ["scan", 2]})

        assert config.phases == ("scan", "2")

    @pytest.mark.parametrize("phases", [[], "abc", 12, None])
    def test_unusable_phases_become_none(self, phases):
        """Empty or non-sequence phases mean no phases."""
        config = SessionConfig.from_options({"phases": phases})

        assert config.phases is None

    def test_defaults_used_as_base(self):
        """Provided defaults fill in missing options."""
        defaults = SessionConfig(title="Importing", cancellable=True)

        config = SessionConfig.from_options({"message": "Step 1"}, defaults)

        assert config.title == "Importing"
        assert config.cancellable is True
        assert config.message == "Step 1"

    def test_callable_on_cancel_kept(self):
        """A callable on_cancel is kept as-is."""

        def on_cancel():
            pass

        config = SessionConfig.from_options({"on_cancel": on_cancel})

        assert config.on_cancel is on_cancel


class TestProgressHelpers:
    """Test progress value helpers."""

    @pytest.mark.parametrize(
        "value,expected", [(-1, 0), (0, 0), (55.5, 55.5), (100, 100), (101, 100)]
    )
    def test_clamp_progress(self, value, expected):
        assert clamp_progress(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(1, True), (2.5, True), (True, False), ("3", False), (float("nan"), False)],
    )
    def test_is_progress_value(self, value, expected):
        assert is_progress_value(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [(0, True), (1500.0, True), (float("inf"), False), (False, False), ("20", False)],
    )
    def test_is_duration_value(self, value, expected):
        assert is_duration_value(value) is expected


class TestSession:
    """Test Session state helpers."""

    def test_phase_statuses_without_current_phase(self):
        """All phases are pending before any phase is active."""
        config = SessionConfig(phases=("a", "b"))
        session = Session.create("s", config, start_time=0.0, generation=1)

        assert session.phase_statuses() == (PhaseStatus.PENDING, PhaseStatus.PENDING)

    def test_phase_statuses_last_phase(self):
        """Last phase active means all earlier phases completed."""
        config = SessionConfig(phases=("a", "b", "c"))
        session = Session.create("s", config, start_time=0.0, generation=1)
        session.current_phase = 2

        assert session.phase_statuses() == (
            PhaseStatus.COMPLETED,
            PhaseStatus.COMPLETED,
            PhaseStatus.ACTIVE,
        )

    def test_elapsed_seconds_floors(self):
        """Elapsed time is whole seconds, never negative."""
        session = Session.create("s", SessionConfig(), start_time=10.0, generation=1)

        assert session.elapsed_seconds(15.9) == 5
        assert session.elapsed_seconds(9.0) == 0


class TestSessionUpdate:
    """Test SessionUpdate."""

    def test_is_empty(self):
        assert SessionUpdate().is_empty is True
        assert SessionUpdate(progress=0.0).is_empty is False
        assert SessionUpdate(details="").is_empty is False
