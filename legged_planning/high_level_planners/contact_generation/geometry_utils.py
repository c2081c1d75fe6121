"""Geometry utilities for contact placement."""

from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation


def _planar_offset(point: np.ndarray, center: np.ndarray) -> np.ndarray:
    return np.asarray(point[:2], dtype=float) - np.asarray(center[:2], dtype=float)


def point_in_circle(point: np.ndarray, center: np.ndarray, radius: float) -> bool:
    """True if ``point`` lies in the disc of ``radius`` around ``center`` (XY only)."""
    return bool(np.linalg.norm(_planar_offset(point, center)) <= radius)


def point_in_box(point: np.ndarray, center: np.ndarray, half_size: Tuple[float, float]) -> bool:
    """True if ``point`` lies in the axis-aligned box around ``center`` (XY only)."""
    return bool(np.all(np.abs(_planar_offset(point, center)) <= np.asarray(half_size)))


def clamp_to_surface(point: np.ndarray, surface) -> np.ndarray:
    """Closest point of ``surface`` to ``point`` in the XY plane.

    Args:
        point: (3,) point; its Z coordinate is kept.
        surface: ContactSurface (circle or box region).

    Returns:
        (3,) point inside the surface region. Points already inside keep
        their XY coordinates.
    """
    offset = _planar_offset(point, surface.center)
    if surface.region_type == 'circle':
        distance = np.linalg.norm(offset)
        if distance > surface.radius:
            offset = offset * (surface.radius / distance)
    else:
        half_size = np.asarray(surface.box_half_size, dtype=float)
        offset = np.clip(offset, -half_size, half_size)
    return np.array([surface.center[0] + offset[0], surface.center[1] + offset[1], point[2]])


def rotation_from_normal(normal: np.ndarray, yaw: float = 0.0) -> np.ndarray:
    """Orientation whose z axis is aligned with ``normal``.

    Args:
        normal: (3,) surface normal, not necessarily unit length.
        yaw: Rotation about the normal applied before alignment (radians).

    Returns:
        (3, 3) rotation matrix.
    """
    n = np.asarray(normal, dtype=float)
    n = n / np.linalg.norm(n)
    z = np.array([0.0, 0.0, 1.0])
    axis = np.cross(z, n)
    sin_angle = np.linalg.norm(axis)
    cos_angle = np.dot(z, n)
    if sin_angle < 1e-12:
        align = Rotation.identity() if cos_angle > 0 else Rotation.from_rotvec([np.pi, 0.0, 0.0])
    else:
        align = Rotation.from_rotvec(axis / sin_angle * np.arctan2(sin_angle, cos_angle))
    return (align * Rotation.from_euler('z', yaw)).as_matrix()


def foot_support_points(
    position: np.ndarray,
    rotation: np.ndarray,
    half_x: float,
    half_y: float,
    rectangular: bool = True
) -> np.ndarray:
    """Support points of a foot in world frame.

    A rectangular foot contributes its four corners; a point foot contributes
    its contact position only.

    Args:
        position: (3,) contact position.
        rotation: (3, 3) foot orientation.
        half_x: Half length of the sole along the foot x axis.
        half_y: Half width of the sole along the foot y axis.
        rectangular: False to model the contact as a single point.

    Returns:
        points: (4, 3) corners, or (1, 3) for a point contact.
    """
    position = np.asarray(position, dtype=float)
    if not rectangular:
        return position.reshape(1, 3)
    corners = np.array([
        [half_x, half_y, 0.0],
        [half_x, -half_y, 0.0],
        [-half_x, -half_y, 0.0],
        [-half_x, half_y, 0.0],
    ])
    return position + corners @ np.asarray(rotation, dtype=float).T
