"""
Tests for cache-line resolution.
"""

import pytest


class TestCacheLine:
    """Tests for cache_line()."""

    def test_two_element_lines(self):
        """Test a line of two elements pairs even and odd indices."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [8], element_size=4)

        for i in range(8):
            line = cache_line(container, (i,), 8)
            start = i - i % 2
            assert line == [(start,), (start + 1,)]

    def test_disabled(self):
        """Test non-positive or missing line sizes disable grouping."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [8], element_size=4)

        assert cache_line(container, (1,), 0) == []
        assert cache_line(container, (1,), -8) == []
        assert cache_line(container, (1,), None) == []

    def test_unresolved_index(self):
        """Test unresolved or mis-ranked indices resolve to nothing."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [2, 4], element_size=4)

        assert cache_line(container, (1, None), 16) == []
        assert cache_line(container, (1,), 16) == []

    def test_tail_dropped(self):
        """Test line slots past the end of the container are dropped."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [5], element_size=4)

        assert cache_line(container, (4,), 16) == [(4,)]

    def test_alignment_shifts_lines(self):
        """Test the byte alignment moves line boundaries."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [4], element_size=4, alignment=4)

        assert cache_line(container, (0,), 8) == [(0,)]
        assert cache_line(container, (1,), 8) == [(1,), (2,)]
        assert cache_line(container, (2,), 8) == [(1,), (2,)]

    def test_row_major_2d(self):
        """Test lines follow rows of a row-major container."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [2, 4], element_size=8)

        assert cache_line(container, (0, 1), 32) == [(0, 0), (0, 1), (0, 2), (0, 3)]
        assert cache_line(container, (1, 2), 32) == [(1, 0), (1, 1), (1, 2), (1, 3)]

    def test_column_major_2d(self):
        """Test lines follow columns of a column-major container."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [2, 4], element_size=8, inverse=True)

        assert cache_line(container, (1, 1), 16) == [(0, 1), (1, 1)]

    def test_target_included(self):
        """Test the target is always part of its own line."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import cache_line

        container = DataContainer("A", [3, 5], element_size=4, start_offset=1)

        for index in container.iter_indices():
            assert index in cache_line(container, index, 16)


class TestLineKey:
    """Tests for line_key()."""

    def test_siblings_share_key(self):
        """Test elements of one line map to the same key."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import line_key

        container = DataContainer("A", [8], element_size=4)

        assert line_key(container, (2,), 16) == line_key(container, (3,), 16)
        assert line_key(container, (3,), 16) != line_key(container, (4,), 16)

    def test_containers_never_share(self):
        """Test identical positions in two containers differ."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import line_key

        a = DataContainer("A", [8], element_size=4)
        b = DataContainer("B", [8], element_size=4)

        assert line_key(a, (0,), 32) != line_key(b, (0,), 32)

    def test_element_granularity_when_disabled(self):
        """Test a line size of 0 keys every element separately."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import line_key

        container = DataContainer("A", [8], element_size=4)

        assert line_key(container, (3,), 0) == ("A", (3,))

    def test_out_of_bounds(self):
        """Test accesses outside the container have no key."""
        from locality_sim.data import DataContainer
        from locality_sim.simulation import line_key

        container = DataContainer("A", [8], element_size=4)

        assert line_key(container, (8,), 16) is None
        assert line_key(container, (-1,), 0) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
