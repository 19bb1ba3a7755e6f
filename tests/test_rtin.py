"""Tests for model.rtin module."""

import numpy as np
import pytest

from model.rtin import (
    build_terrain,
    get_errors_vec,
    is_power_of_2,
    sample_corner,
    select_nodes,
    TerrainSizeError,
)

from conftest import ArraySampler, ConstantSampler


class TestHelpers:
    """Tests for the small helpers."""

    @pytest.mark.parametrize("value", [1, 2, 4, 64, 1024])
    def test_powers_of_two(self, value):
        assert is_power_of_2(value)

    @pytest.mark.parametrize("value", [0, -4, 3, 6, 100])
    def test_not_powers_of_two(self, value):
        assert not is_power_of_2(value)

    def test_sample_corner_clamps(self):
        """Test points outside the grid are clamped to the last row and column."""
        sampler = ArraySampler(range(9), 3)
        assert sample_corner(sampler, 3, (5.0, 5.0)) == 8
        assert sample_corner(sampler, 3, (1.0, 0.0)) == 1


class TestErrorsVec:
    """Tests for get_errors_vec."""

    def test_length(self, flat_sampler):
        """Test the error grid has one slot per grid point."""
        assert len(get_errors_vec(flat_sampler, 4)) == 16
        assert len(get_errors_vec(flat_sampler, 5)) == 25

    def test_flat_terrain_has_no_error(self, flat_sampler):
        """Test a flat plane produces zero errors everywhere."""
        assert not np.any(get_errors_vec(flat_sampler, 9))

    def test_tiny_grid(self, flat_sampler):
        """Test grids without any splittable triangle return zeros."""
        errors = get_errors_vec(flat_sampler, 2)
        assert errors.shape == (4,)
        assert not np.any(errors)

    def test_single_bump(self):
        """Test a raised center point shows up in the root slot."""
        heights = [0.0] * 25
        heights[12] = 1.0
        errors = get_errors_vec(ArraySampler(heights, 5), 5)
        assert errors[12] == pytest.approx(1.0)

    def test_errors_are_monotonic(self, bumpy_sampler):
        """Test a parent's slot is never smaller than its children's slots."""
        from model.binary_node import BinaryNode

        errors = get_errors_vec(bumpy_sampler, 5)
        for node_id in range(2, 32):
            node = BinaryNode(node_id)
            for child in node.children_ids():
                if child.triangle_index() < 30:
                    assert errors[node.errors_vec_index(5)] >= errors[child.errors_vec_index(5)]


class TestSelectNodes:
    """Tests for select_nodes."""

    def test_flat_selects_roots(self):
        """Test zero errors keep the two root triangles."""
        errors = np.zeros(25, dtype=np.float32)
        assert [node.node_id for node in select_nodes(4, errors, 0.4)] == [2, 3]

    def test_center_error_splits_roots(self):
        """Test an error at the root slot splits both roots once."""
        errors = np.zeros(25, dtype=np.float32)
        errors[12] = 0.5
        errors[13] = 0.5
        assert [node.node_id for node in select_nodes(4, errors, 0.4)] == [4, 5, 6, 7]

    def test_nested_split(self):
        """Test an error on the right edge splits one second-level triangle again."""
        errors = np.zeros(25, dtype=np.float32)
        errors[12] = 0.5
        errors[14] = 0.5
        assert [node.node_id for node in select_nodes(4, errors, 0.4)] == [4, 5, 6, 14, 15]

    def test_negative_threshold_selects_leaves(self):
        """Test a negative threshold descends to the finest level."""
        errors = np.zeros(25, dtype=np.float32)
        nodes = select_nodes(4, errors, -1.0)
        assert len(nodes) == 32
        assert all(node.level == 5 for node in nodes)


class TestBuildTerrain:
    """Tests for build_terrain."""

    @pytest.mark.parametrize("size", [0, 1, 3, 6, 12])
    def test_invalid_size_raises(self, flat_sampler, size):
        with pytest.raises(TerrainSizeError):
            build_terrain(flat_sampler, 1.0, size, 0.1)

    def test_flat_terrain(self, flat_sampler):
        """Test a flat plane collapses into two triangles."""
        mesh = build_terrain(flat_sampler, 10.0, 8, 0.01)
        assert mesh.triangle_count == 2
        assert len(mesh.vertices) == 4
        assert mesh.vertices.dtype == np.float32
        assert mesh.indices.dtype == np.uint32

    def test_full_resolution(self, flat_sampler):
        """Test a negative threshold emits every cell as two triangles."""
        mesh = build_terrain(flat_sampler, 1.0, 4, -1.0)
        assert mesh.triangle_count == 32
        assert len(mesh.vertices) == 25

    def test_vertices_are_unique(self, bumpy_sampler):
        """Test shared corners are emitted once."""
        mesh = build_terrain(bumpy_sampler, 1.0, 4, 0.05)
        keys = {(float(v[0]), float(v[2])) for v in mesh.vertices}
        assert len(keys) == len(mesh.vertices)
        assert int(mesh.indices.max()) < len(mesh.vertices)

    def test_height_multiplier(self):
        """Test vertex heights are scaled by the multiplier."""
        mesh = build_terrain(ConstantSampler(0.5), 20.0, 4, 0.1)
        assert np.allclose(mesh.vertices[:, 1], 10.0)

    def test_lower_threshold_adds_triangles(self, bumpy_sampler):
        """Test a stricter threshold never produces fewer triangles."""
        coarse = build_terrain(bumpy_sampler, 1.0, 4, 0.5)
        fine = build_terrain(bumpy_sampler, 1.0, 4, 0.01)
        assert fine.triangle_count >= coarse.triangle_count

    def test_triangles_cover_the_square(self, bumpy_sampler):
        """Test the selected triangles always add up to the full terrain area."""
        mesh = build_terrain(bumpy_sampler, 1.0, 4, 0.1)
        total = 0.0
        for a, b, c in mesh.indices.reshape(-1, 3):
            pa, pb, pc = mesh.vertices[a], mesh.vertices[b], mesh.vertices[c]
            total += abs((pb[0] - pa[0]) * (pc[2] - pa[2]) - (pc[0] - pa[0]) * (pb[2] - pa[2])) / 2
        assert total == pytest.approx(16.0)


class TestMeshBuffers:
    """Tests for TerrainMeshData.to_buffers."""

    def test_flat_normals_point_up(self, flat_sampler):
        """Test a flat plane has upward normals."""
        buffers = build_terrain(flat_sampler, 1.0, 4, -1.0).to_buffers(4)
        assert buffers.normals is not None
        assert np.allclose(buffers.normals, [0.0, 1.0, 0.0])
        assert not buffers.wireframe

    def test_uvs_in_unit_range(self, bumpy_sampler):
        """Test uv coordinates span [0, 1]."""
        buffers = build_terrain(bumpy_sampler, 1.0, 4, -1.0).to_buffers(4)
        assert buffers.uvs.shape == (25, 2)
        assert buffers.uvs.min() == pytest.approx(0.0)
        assert buffers.uvs.max() == pytest.approx(1.0)

    def test_wireframe_indices(self, flat_sampler):
        """Test wireframe buffers contain three edges per triangle."""
        mesh = build_terrain(flat_sampler, 1.0, 4, 0.1)
        buffers = mesh.to_buffers(4, wireframe=True)
        assert buffers.wireframe
        assert buffers.normals is None
        assert len(buffers.indices) == 6 * mesh.triangle_count
        a, b, c = mesh.indices[:3]
        assert buffers.indices[:6].tolist() == [a, b, b, c, c, a]
