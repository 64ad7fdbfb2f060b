"""
Tests for the LRU access stack.
"""

import pytest


class TestAccessStack:
    """Tests for AccessStack."""

    def test_reference_sequence(self):
        """Test distances for A,B,C,A,B,A and the final stack order."""
        from locality_sim.simulation import AccessStack

        stack = AccessStack()
        distances = [stack.touch(k) for k in ["A", "B", "C", "A", "B", "A"]]

        assert distances == [-1, -1, -1, 2, 2, 1]
        assert stack.to_list() == ["A", "B", "C"]

    def test_repeated_top_is_zero(self):
        """Test touching the top again has distance 0."""
        from locality_sim.simulation import AccessStack

        stack = AccessStack()
        stack.touch("A")

        assert stack.touch("A") == 0
        assert len(stack) == 1

    def test_tuple_keys(self):
        """Test structured keys compare by value."""
        from locality_sim.simulation import AccessStack

        stack = AccessStack()
        stack.touch(("A", (0, 0)))
        stack.touch(("B", (0, 0)))

        assert stack.touch(("A", (0, 0))) == 1

    def test_distance_counts_distinct_keys(self):
        """Test the distance is the number of distinct keys in between."""
        from locality_sim.simulation import AccessStack

        stack = AccessStack()
        for key in ["X", "Y", "Y", "Z", "Y", "Z"]:
            stack.touch(key)

        assert stack.touch("X") == 2


class TestLinkedStack:
    """Tests for LinkedStack."""

    def test_push_pop(self):
        """Test LIFO order."""
        from locality_sim.simulation import LinkedStack

        stack = LinkedStack()
        stack.push(1)
        stack.push(2)

        assert stack.pop() == 2
        assert stack.pop() == 1
        assert len(stack) == 0

    def test_pop_empty(self):
        """Test popping an empty stack raises."""
        from locality_sim.simulation import LinkedStack

        with pytest.raises(IndexError):
            LinkedStack().pop()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
