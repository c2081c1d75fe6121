"""KD-tree candidate sampler over a set of contact surfaces."""

from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .data_types import ContactPlacement, ContactSurface, State
from .geometry_utils import clamp_to_surface, rotation_from_normal


def build_contact_surface_grid(
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
    x_step: float,
    y_step: float,
    radius: float,
    height: float
) -> List[ContactSurface]:
    """Build a regular grid of circular contact surfaces (stepping stones).

    Args:
        x_range: (x_min, x_max) range for the grid in world frame (meters).
        y_range: (y_min, y_max) range for the grid in world frame (meters).
        x_step: Spacing between surface centers along x-axis (meters).
        y_step: Spacing between surface centers along y-axis (meters).
        radius: Surface radius (meters).
        height: Height of the surfaces above ground (meters).

    Returns:
        surfaces: List of horizontal circular ContactSurface.
    """
    x_min, x_max = x_range
    y_min, y_max = y_range

    x_positions = np.arange(x_min, x_max + x_step / 2, x_step)
    y_positions = np.arange(y_min, y_max + y_step / 2, y_step)

    return [
        ContactSurface(center=np.array([x, y, height]), radius=radius, region_type='circle')
        for x in x_positions
        for y in y_positions
    ]


class SurfaceCandidateSampler:
    """Return placements on the surfaces nearest to a requested position.

    Surface centers are indexed in a KD-tree; a query collects the surfaces
    whose center lies within ``search_radius`` of the requested position and
    projects the position onto each of them.
    """

    def __init__(
        self,
        surfaces: Sequence[ContactSurface],
        search_radius: float = 0.3,
        max_candidates: Optional[int] = None,
    ):
        """Initialize the sampler.

        Args:
            surfaces: Admissible contact surfaces.
            search_radius: Maximum distance between the requested position and
                           a surface center (meters).
            max_candidates: Optional cap on the number of placements returned.
        """
        if len(surfaces) == 0:
            raise ValueError("SurfaceCandidateSampler requires at least one surface")
        if search_radius <= 0.0:
            raise ValueError(f"search_radius must be positive, got {search_radius}")
        self.surfaces = list(surfaces)
        self.search_radius = search_radius
        self.max_candidates = max_candidates
        self._tree = cKDTree(np.stack([surface.center for surface in self.surfaces]))

    def query(self, limb: str, position: np.ndarray, state: State) -> List[ContactPlacement]:
        position = np.asarray(position, dtype=float)
        indices = self._tree.query_ball_point(position, r=self.search_radius)
        indices = sorted(indices, key=lambda i: np.linalg.norm(self.surfaces[i].center - position))
        if self.max_candidates is not None:
            indices = indices[:self.max_candidates]

        placements = []
        for index in indices:
            surface = self.surfaces[index]
            point = clamp_to_surface(np.array([position[0], position[1], surface.center[2]]), surface)
            placements.append(ContactPlacement(
                position=point,
                normal=surface.normal,
                rotation=rotation_from_normal(surface.normal),
                surface_id=index,
            ))
        return placements
