"""
Tests for OutputService: ordered execution and per-action failure isolation.
"""
from picsorter.core.models import OutputAction, SelectionReason, TransferMode
from picsorter.services.output_service import OutputService


class TestOutputService:

    def test_materializes_all_actions_in_order(self, test_images, temp_dir):
        out = temp_dir / "out"
        actions = [
            OutputAction(str(test_images["a"]), str(out)),
            OutputAction(str(test_images["c"]), str(out), SelectionReason.UNIQUE),
        ]

        results = OutputService().materialize(actions)

        assert [r.ok for r in results] == [True, True]
        assert [r.action for r in results] == actions
        assert results[0].destination == str(out / "a.jpg")
        assert results[0].size == test_images["a"].stat().st_size

    def test_failure_does_not_stop_later_actions(self, test_images, temp_dir):
        out = temp_dir / "out"
        actions = [
            OutputAction(str(temp_dir / "vanished.jpg"), str(out)),
            OutputAction(str(test_images["c"]), str(out)),
        ]

        results = OutputService().materialize(actions)

        assert results[0].ok is False
        assert "vanished.jpg" in results[0].error
        assert results[1].ok is True
        assert (out / "c.jpg").exists()

    def test_move_mode(self, test_images, temp_dir):
        out = temp_dir / "out"
        results = OutputService(TransferMode.MOVE).materialize(
            [OutputAction(str(test_images["b"]), str(out))])

        assert results[0].ok
        assert not test_images["b"].exists()

    def test_stopped_flag_halts_before_next_action(self, test_images, temp_dir):
        out = temp_dir / "out"
        actions = [OutputAction(str(test_images[k]), str(out)) for k in ("a", "b", "c")]
        calls = []

        def stop_after_first():
            return len(calls) >= 1

        results = OutputService().materialize(
            actions, stopped_flag=stop_after_first,
            progress_callback=lambda *a: calls.append(a))

        assert len(results) == 1
        assert calls == [("Materializing", 1, 3)]

    def test_empty_action_list(self):
        assert OutputService().materialize([]) == []
