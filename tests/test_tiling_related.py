"""
Tests for tiling regions and related accesses.
"""

import pytest


def _copy_graph():
    """B[j, i] = A[i, j] over a 2x2 map, with A's memory node wired to the map."""
    from locality_sim.data import AccessMode, DataContainer, Range, SymbolicAccess
    from locality_sim.graph import Graph

    graph = Graph("copy")
    graph.add_container(DataContainer("A", [2, 2]))
    graph.add_container(DataContainer("B", [2, 2]))
    a_node = graph.add_memory("A")
    b_node = graph.add_memory("B")
    map_id = graph.add_map([Range("i", 0, 1), Range("j", 0, 1)], label="copy")
    graph.add_computation(
        [
            SymbolicAccess("A", AccessMode.READ_ONLY, ("i", "j")),
            SymbolicAccess("B", AccessMode.WRITE, ("j", "i")),
        ],
        parent=map_id,
        label="assign",
    )
    graph.add_edge(a_node, map_id)
    graph.add_edge(map_id, b_node)
    return graph, map_id


class TestTilingRegions:
    """Tests for tiling_regions()."""

    def test_single_tile(self):
        """Test exactly one iteration touches each element."""
        from locality_sim import simulate
        from locality_sim.simulation import tiling_regions

        graph, _ = _copy_graph()
        result = simulate(graph)
        regions = tiling_regions(graph, result.traces, "A", (1, 0))

        assert len(regions) == 1
        scope, access_map = regions[0]
        assert (scope["i"], scope["j"]) == (1, 0)
        assert access_map.contains("B", (0, 1))

    def test_broadcast_tiles(self):
        """Test an element read by several iterations yields several tiles."""
        from locality_sim import simulate
        from locality_sim.data import AccessMode, DataContainer, Range, SymbolicAccess
        from locality_sim.graph import Graph
        from locality_sim.simulation import tiling_regions

        graph = Graph()
        graph.add_container(DataContainer("A", [2]))
        memory = graph.add_memory("A")
        map_id = graph.add_map([Range("i", 0, 1), Range("j", 0, 2)])
        graph.add_computation(
            [SymbolicAccess("A", AccessMode.READ_ONLY, ("i",))], parent=map_id
        )
        graph.add_edge(memory, map_id)

        regions = tiling_regions(graph, simulate(graph).traces, "A", (1,))

        assert [s["j"] for s, _ in regions] == [0, 1, 2]

    def test_unconnected_map_ignored(self):
        """Test maps without an edge to the container are not considered."""
        from locality_sim import simulate
        from locality_sim.data import AccessMode, DataContainer, Range, SymbolicAccess
        from locality_sim.graph import Graph
        from locality_sim.simulation import tiling_regions

        graph = Graph()
        graph.add_container(DataContainer("A", [2]))
        graph.add_memory("A")
        map_id = graph.add_map([Range("i", 0, 1)])
        graph.add_computation(
            [SymbolicAccess("A", AccessMode.READ_ONLY, ("i",))], parent=map_id
        )

        assert tiling_regions(graph, simulate(graph).traces, "A", (0,)) == []

    def test_mark_and_clear(self):
        """Test matched regions colour the cells they touch."""
        from locality_sim import simulate
        from locality_sim.simulation import KELLY_COLORS, tiling_regions
        from locality_sim.simulation.tiling import clear_tiling_marks, mark_tiling_regions

        graph, _ = _copy_graph()
        result = simulate(graph)
        ctx = result.context
        regions = tiling_regions(graph, result.traces, "A", (0, 1))

        marked = mark_tiling_regions(ctx, regions)

        assert marked == 2
        assert ctx.cell("A", (0, 1)).border_colors == [KELLY_COLORS[0]]
        assert ctx.cell("B", (1, 0)).border_colors == [KELLY_COLORS[0]]
        assert ctx.cell("A", (0, 0)).border_colors == []

        clear_tiling_marks(ctx)
        assert ctx.cell("A", (0, 1)).border_colors == []


class TestRelatedAccesses:
    """Tests for related_accesses()."""

    def test_transposed_write(self):
        """Test the read of A[i, j] relates to the write of B[j, i]."""
        from locality_sim.analysis.related import related_accesses
        from locality_sim.data import AccessMode

        graph, _ = _copy_graph()
        related = related_accesses(graph, "A", (1, 0))

        assert (AccessMode.WRITE, (0, 1)) in related["B"]
        assert (AccessMode.READ_ONLY, (1, 0)) in related["A"]

    def test_enclosing_accesses_first(self):
        """Test accesses of the enclosing body come before the direct ones."""
        from locality_sim.analysis.related import related_accesses

        graph, _ = _copy_graph()
        related = related_accesses(graph, "A", (1, 0))

        assert related["B"][-1][1] == (0, 1)
        assert len(related["B"]) == 2

    def test_top_level_computation(self):
        """Test a top-level computation relates only its own accesses."""
        from locality_sim.analysis.related import related_accesses
        from locality_sim.data import AccessMode, DataContainer, Range, SymbolicAccess
        from locality_sim.graph import Graph

        graph = Graph("flat")
        for name in ("A", "B", "C"):
            graph.add_container(DataContainer(name, [4]))
        graph.add_computation(
            [
                SymbolicAccess("A", AccessMode.READ_ONLY, ("k",)),
                SymbolicAccess("B", AccessMode.WRITE, ("k",)),
            ],
            label="scale",
        )
        fill = graph.add_map([Range("i", 0, 3)], label="fill")
        graph.add_computation(
            [SymbolicAccess("C", AccessMode.WRITE, ("i",))], parent=fill
        )

        related = related_accesses(graph, "A", (1,))

        assert "C" not in related
        assert related["A"] == [(AccessMode.READ_ONLY, (1,))]
        assert related["B"] == [(AccessMode.WRITE, (1,)), (AccessMode.WRITE, (1,))]

    def test_unknown_container(self):
        """Test a container no computation accesses relates to nothing."""
        from locality_sim.analysis.related import related_accesses
        from locality_sim.data import DataContainer

        graph, _ = _copy_graph()
        graph.add_container(DataContainer("C", [2]))

        assert related_accesses(graph, "C", (0,)) == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
