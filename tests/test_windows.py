# tests/test_windows.py

import pytest

from dsm_dispatch.optimization.windows import delay_window, shift_pairs


class TestDelayWindow:

    @pytest.mark.parametrize(
        "t, expected",
        [
            (1, [1, 2, 3, 4]),
            (2, [1, 2, 3, 4, 5]),
            (10, [7, 8, 9, 10, 11, 12, 13]),
            (24, [21, 22, 23, 24]),
        ],
    )
    def test_clipped_to_horizon(self, t, expected):
        assert list(delay_window(t, 3, 24)) == expected

    def test_zero_delay_is_single_hour(self):
        assert list(delay_window(5, 0, 24)) == [5]

    def test_delay_beyond_horizon_covers_everything(self):
        assert list(delay_window(3, 30, 24)) == list(range(1, 25))

    def test_symmetric(self):
        T, L = 12, 2
        for t in range(1, T + 1):
            for tt in range(1, T + 1):
                assert (tt in delay_window(t, L, T)) == (t in delay_window(tt, L, T))


class TestShiftPairs:

    def test_count(self):
        # 7 hours per window, minus the clipped edges (3 + 2 + 1 on each side)
        assert len(shift_pairs(3, 24)) == 24 * 7 - 2 * 6

    def test_full_matrix_when_window_covers_horizon(self):
        assert len(shift_pairs(10, 5)) == 25

    def test_pairs_within_window(self):
        for t, tt in shift_pairs(3, 24):
            assert abs(t - tt) <= 3
