"""Relative rotation between the camera sensor and the current display."""

QUADRANTS = (0, 90, 180, 270)

# display rotation index (ROTATION_0, ROTATION_90, ...) -> degrees
_ROTATION_DEGREES = {0: 0, 1: 90, 2: 180, 3: 270}


def rotation_to_degrees(rotation_index: int) -> int:
    """Unknown rotation indices count as upright."""
    return _ROTATION_DEGREES.get(rotation_index, 0)


def normalize(degrees: int) -> int:
    """Reduce any integer angle to the nearest of 0/90/180/270."""
    return (round((degrees % 360) / 90) % 4) * 90


def resolve(screen_rotation_degrees: int, sensor_orientation_degrees: int) -> int:
    """sensor - screen, normalized. resolve(90, 0) == 270."""
    return normalize(sensor_orientation_degrees - screen_rotation_degrees)
