"""Affine transformation matrices for scene assembly.

Shapes and cameras carry 4x4 float64 matrices built on the host with NumPy.
They are converted to float32 only when a scene is uploaded to Taichi fields.
Matrices compose right-to-left: ``translation(...) @ scaling(...)`` scales
first, then translates.

Example:
    >>> from src.raycast.core.transform import scaling, transform_point, translation
    >>> m = translation(0.0, 1.0, 0.0) @ scaling(2.0, 2.0, 2.0)
    >>> transform_point(m, (1.0, 0.0, 0.0))
    array([2., 1., 0.])
"""

import math

import numpy as np
import numpy.typing as npt

Matrix4 = npt.NDArray[np.float64]


def identity() -> Matrix4:
    """Return the 4x4 identity matrix."""
    return np.identity(4, dtype=np.float64)


def translation(x: float, y: float, z: float) -> Matrix4:
    """Return a matrix translating points by (x, y, z)."""
    m = identity()
    m[:3, 3] = (x, y, z)
    return m


def scaling(x: float, y: float, z: float) -> Matrix4:
    """Return a matrix scaling each axis independently."""
    return np.diag([x, y, z, 1.0]).astype(np.float64)


def rotation_x(radians: float) -> Matrix4:
    """Return a rotation about the x axis (left-handed, as seen from +x)."""
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[1, 1], m[1, 2] = c, -s
    m[2, 1], m[2, 2] = s, c
    return m


def rotation_y(radians: float) -> Matrix4:
    """Return a rotation about the y axis."""
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def rotation_z(radians: float) -> Matrix4:
    """Return a rotation about the z axis."""
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def shearing(xy: float, xz: float, yx: float, yz: float, zx: float, zy: float) -> Matrix4:
    """Return a shearing matrix; ``xy`` moves x in proportion to y, etc."""
    m = identity()
    m[0, 1], m[0, 2] = xy, xz
    m[1, 0], m[1, 2] = yx, yz
    m[2, 0], m[2, 1] = zx, zy
    return m


def view_transform(from_point, to_point, up) -> Matrix4:
    """Build the world-to-camera (look-at) matrix.

    The camera sits at ``from_point`` looking toward ``to_point``; ``up``
    only needs to be roughly upward. In camera space the eye looks down -z.

    Args:
        from_point: Eye position in world space.
        to_point: Point the eye looks at.
        up: Approximate up direction.

    Returns:
        The 4x4 world-to-camera transform.

    Raises:
        ValueError: If the eye and target coincide, or up is zero or
            parallel to the view direction.
    """
    eye = np.asarray(from_point, dtype=np.float64)
    forward = np.asarray(to_point, dtype=np.float64) - eye
    forward_len = np.linalg.norm(forward)
    if forward_len == 0.0:
        raise ValueError("view_transform: from and to points coincide")
    forward = forward / forward_len

    up_vec = np.asarray(up, dtype=np.float64)
    up_len = np.linalg.norm(up_vec)
    if up_len == 0.0:
        raise ValueError("view_transform: up vector is zero")
    up_vec = up_vec / up_len
    left = np.cross(forward, up_vec)
    if np.linalg.norm(left) < 1e-12:
        raise ValueError("view_transform: up vector is parallel to the view direction")
    true_up = np.cross(left, forward)

    orientation = identity()
    orientation[0, :3] = left
    orientation[1, :3] = true_up
    orientation[2, :3] = -forward
    return orientation @ translation(-eye[0], -eye[1], -eye[2])


def transform_point(m: Matrix4, point) -> npt.NDArray[np.float64]:
    """Apply ``m`` to a point (w = 1) on the host."""
    p = np.append(np.asarray(point, dtype=np.float64), 1.0)
    return (m @ p)[:3]


def transform_vector(m: Matrix4, vector) -> npt.NDArray[np.float64]:
    """Apply ``m`` to a direction (w = 0) on the host."""
    v = np.append(np.asarray(vector, dtype=np.float64), 0.0)
    return (m @ v)[:3]
