from __future__ import annotations

from unittest.mock import Mock, patch

from student_import.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:

    def test_init_with_tty_enabled(self):
        with patch("student_import.services.progress.is_tty_enabled", return_value=True), \
             patch("student_import.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(10, description="Rows")

            assert tracker.enabled is True
            assert tracker.processed == 0
            mock_tqdm.assert_called_once_with(
                total=10,
                desc="Rows",
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("student_import.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(10)
            assert tracker.enabled is False
            assert tracker.pbar is None
            # updates are tracked even without a bar
            tracker.update(3, 10)
            assert tracker.processed == 3

    def test_update_converts_absolute_count_to_steps(self):
        mock_pbar = Mock()
        with patch("student_import.services.progress.is_tty_enabled", return_value=True), \
             patch("student_import.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(3)
            for done in (1, 2, 3):
                tracker.update(done, 3)

        assert [c.args[0] for c in mock_pbar.update.call_args_list] == [1, 1, 1]
        assert tracker.processed == 3

    def test_update_adjusts_total(self):
        mock_pbar = Mock()
        with patch("student_import.services.progress.is_tty_enabled", return_value=True), \
             patch("student_import.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(5)
            tracker.update(1, 4)

        assert tracker.total_rows == 4
        assert mock_pbar.total == 4

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch("student_import.services.progress.is_tty_enabled", return_value=True), \
             patch("student_import.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(2) as tracker:
                tracker.set_postfix(failed=0)

        mock_pbar.set_postfix.assert_called_once_with(failed=0)
        mock_pbar.close.assert_called_once()
        assert tracker.pbar is None
