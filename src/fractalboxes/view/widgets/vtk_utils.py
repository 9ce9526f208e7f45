"""
VTK and Geometry Utilities
Helper functions converting render sets and wireframes into PyVista data.
"""
import numpy as np
import numpy.typing as npt
import pyvista as pv

from fractalboxes.model.geometry_primitives import UNIT_CUBE_CORNERS, UNIT_CUBE_FACES

COLOR_ARRAY = "rgb"


class VtkUtils:
    @staticmethod
    def to_rgb_bytes(colors: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
        """(N, 3) floats in [0, 1] -> (N, 3) uint8, the layout `rgb=True` expects."""
        return np.round(np.clip(colors, 0.0, 1.0) * 255.0).astype(np.uint8)

    @staticmethod
    def segments_to_polydata(segments: npt.NDArray[np.float64]) -> pv.PolyData:
        """
        Create line cells from a (K, 2, 3) array of segments.

        Args:
            segments: Start and end point of each segment.

        Returns:
            A PyVista PolyData with one 2-point line cell per segment.
        """
        segments = np.asarray(segments, dtype=np.float64).reshape(-1, 2, 3)
        n_lines = segments.shape[0]
        if n_lines == 0:
            return pv.PolyData()

        points = segments.reshape(-1, 3)
        cells = np.empty((n_lines, 3), dtype=np.int_)
        cells[:, 0] = 2
        cells[:, 1] = np.arange(0, 2 * n_lines, 2)
        cells[:, 2] = cells[:, 1] + 1

        return pv.PolyData(points, lines=cells.ravel())

    @staticmethod
    def boxes_to_polydata(transforms: npt.NDArray[np.float64], colors: npt.NDArray[np.float64]) -> pv.PolyData:
        """
        Merge transformed unit cubes into a single quad mesh.

        Args:
            transforms: (M, 4, 4) full transforms.
            colors: (M, 3) per-box colors, stored as cell data (6 faces each).

        Returns:
            PolyData with 8*M points, 6*M quads and an 'rgb' cell array.
        """
        transforms = np.asarray(transforms, dtype=np.float64).reshape(-1, 4, 4)
        count = transforms.shape[0]
        if count == 0:
            return pv.PolyData()

        # (M, 8, 3): every corner through every transform
        points = np.einsum("mab,cb->mca", transforms[:, :3, :3], UNIT_CUBE_CORNERS) + transforms[:, None, :3, 3]

        offsets = (np.arange(count) * len(UNIT_CUBE_CORNERS))[:, None, None]
        quads = UNIT_CUBE_FACES[None, :, :] + offsets  # (M, 6, 4)
        faces = np.concatenate(
            (np.full((count, len(UNIT_CUBE_FACES), 1), 4, dtype=np.int_), quads),
            axis=2,
        )

        mesh = pv.PolyData(points.reshape(-1, 3), faces=faces.ravel())
        mesh.cell_data[COLOR_ARRAY] = np.repeat(VtkUtils.to_rgb_bytes(colors), len(UNIT_CUBE_FACES), axis=0)
        return mesh

    @staticmethod
    def points_to_polydata(points: npt.NDArray[np.float64], colors: npt.NDArray[np.float64]) -> pv.PolyData:
        """Vertex cloud with an 'rgb' point array."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if points.shape[0] == 0:
            return pv.PolyData()

        cloud = pv.PolyData(points)
        cloud.point_data[COLOR_ARRAY] = VtkUtils.to_rgb_bytes(colors)
        return cloud
