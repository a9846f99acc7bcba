"""Unit tests for per-stage request timing."""

from pipeline.utils.timing import StageTimers


class TestStageTimers:
    """Tests for StageTimers."""

    def test_stages_recorded(self):
        timers = StageTimers()

        with timers.timer("figma"):
            pass
        with timers.timer("llm"):
            pass

        assert list(timers.stages_ms) == ["figma", "llm"]

    def test_repeated_stage_accumulates(self):
        timers = StageTimers()

        with timers.timer("parse"):
            pass
        first = timers.stages_ms["parse"]
        with timers.timer("parse"):
            pass

        assert timers.stages_ms["parse"] >= first

    def test_stage_recorded_when_block_raises(self):
        timers = StageTimers()

        try:
            with timers.timer("llm"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert "llm" in timers.stages_ms

    def test_telemetry_fields(self):
        timers = StageTimers()
        with timers.timer("flatten"):
            pass

        fields = timers.telemetry()

        assert set(fields) == {"duration_ms", "timings_ms"}
        assert fields["duration_ms"] >= 0
        assert set(fields["timings_ms"]) == {"flatten"}
