"""
Tests for the container addressing model.
"""

import pytest


class TestComputeStrides:
    """Tests for stride derivation."""

    def test_row_major(self):
        """Test row-major strides end in a unit stride."""
        from locality_sim.data import compute_strides

        strides = compute_strides([2, 3, 4])

        assert [s.value for s in strides] == [12, 4, 1]

    def test_column_major(self):
        """Test column-major strides start with a unit stride."""
        from locality_sim.data import compute_strides

        strides = compute_strides([2, 3, 4], inverse=True)

        assert [s.value for s in strides] == [1, 2, 6]

    def test_symbolic_names(self):
        """Test stride names are products of dimension names."""
        from locality_sim.data import Dimension, compute_strides

        strides = compute_strides([Dimension("M", 2), Dimension("N", 3)])

        assert [s.name for s in strides] == ["N", "1"]

    def test_empty_shape(self):
        """Test a scalar has no strides."""
        from locality_sim.data import compute_strides

        assert compute_strides([]) == []


class TestDataContainer:
    """Tests for DataContainer addressing."""

    def test_unit_stride_byte_offset(self):
        """Test byte offset of a 1-D container is base + i * element size."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [8], element_size=4, start_offset=2, alignment=3)

        assert container.base_offset == 2 * 4 + 3
        for i in range(8):
            assert container.byte_offset([i]) == container.base_offset + i * 4

    def test_flat_index_includes_start_offset(self):
        """Test flat index adds the start offset in elements."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [3, 4], start_offset=5)

        assert container.flat_index([2, 1]) == 5 + 2 * 4 + 1

    def test_rank_mismatch(self):
        """Test an index of the wrong rank is rejected."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [3, 4])

        with pytest.raises(ValueError):
            container.flat_index([1])

    def test_stride_length_mismatch(self):
        """Test explicit strides must match the shape."""
        from locality_sim.data import DataContainer

        with pytest.raises(ValueError):
            DataContainer("A", [3, 4], strides=[1])

    @pytest.mark.parametrize("inverse", [False, True])
    def test_unflatten_round_trip(self, inverse):
        """Test every index is reconstructed from its own flat position."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [2, 3, 4], start_offset=7, inverse=inverse)

        for index in container.iter_indices():
            assert container.unflatten(container.flat_index(index)) == index

    @pytest.mark.parametrize("shape", [[1, 4], [4, 1], [3, 1, 2], [1, 1, 3]])
    @pytest.mark.parametrize("inverse", [False, True])
    def test_unflatten_unit_dimensions(self, shape, inverse):
        """Test size-1 dimensions sharing a stride still round-trip."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", shape, inverse=inverse)

        for index in container.iter_indices():
            assert container.unflatten(container.flat_index(index)) == index

    def test_unflatten_explicit_strides(self):
        """Test padded explicit strides round-trip and reject padding."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [2, 3], strides=[4, 1])

        for index in container.iter_indices():
            assert container.unflatten(container.flat_index(index)) == index
        assert container.unflatten(3) is None  # padding slot

    def test_unflatten_out_of_range(self):
        """Test positions before the base or past the end are rejected."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [4], start_offset=2)

        assert container.unflatten(1) is None
        assert container.unflatten(6) is None
        assert container.unflatten(5) == (3,)

    def test_contains(self):
        """Test bounds and concreteness checks."""
        from locality_sim.data import DataContainer

        container = DataContainer("A", [2, 3])

        assert container.contains((1, 2))
        assert not container.contains((2, 0))
        assert not container.contains((0, None))
        assert not container.contains((0,))

    def test_dict_round_trip(self):
        """Test from_dict and to_dict agree."""
        from locality_sim.data import DataContainer

        container = DataContainer("B", [4, 2], element_size=8, alignment=16, storage="Global")
        restored = DataContainer.from_dict(container.to_dict())

        assert restored == container
        assert restored.size == 8


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
