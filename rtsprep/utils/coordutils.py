"""Coordinate utilities for the uvfits antenna table.

The geodetic and sidereal time calculations are done by ERFA so that ARRAYX/Y/Z and GSTIA0 match what other
ERFA-based uvfits writers produce.
"""
import logging
import math

import erfa
import numpy as np
from astropy.coordinates import EarthLocation
from astropy.time import Time

from rtsprep.errors import ConversionError

log = logging.getLogger(__name__)


def geodetic_to_geocentric(location: EarthLocation) -> np.ndarray:
    """Geocentric XYZ in meters of a location on the WGS84 ellipsoid.

    Raises:
        ConversionError: If ERFA reports an error status.
    """
    lon = location.lon.rad
    lat = location.lat.rad
    height = location.height.to_value('m')
    try:
        xyz = erfa.gd2gc(erfa.WGS84, lon, lat, height)
    except erfa.ErfaError as e:
        log.error(f'eraGd2gc failed for lon={lon}, lat={lat}, height={height}.')
        raise ConversionError('eraGd2gc', 'non-zero', str(e)) from e
    return np.asarray(xyz, dtype=np.float64)


def greenwich_mean_sidereal_time_deg(epoch: Time) -> float:
    """GMST in degrees at 0h UTC of the epoch's MJD day.
    """
    mjd = math.floor(epoch.utc.mjd)
    return math.degrees(erfa.gmst06(erfa.DJM0, mjd, erfa.DJM0, mjd))


def ecef_to_local_xyz(positions: np.ndarray, array_xyz: np.ndarray, longitude_rad: float) -> np.ndarray:
    """Convert geocentric positions to the local station frame of the array.

    The array reference position is subtracted, and the result is rotated about the Z axis by the array longitude,
    so that X points to the array meridian and Z stays along the Earth's rotation axis.

    Args:
        positions: (n_antennas, 3) geocentric positions in meters.
        array_xyz: (3,) geocentric array reference position in meters.
        longitude_rad: Array longitude, east positive.

    Returns: (n_antennas, 3) station positions in meters.
    """
    positions = np.atleast_2d(np.asarray(positions, dtype=np.float64))
    assert positions.shape[-1] == 3, 'positions must have shape (n_antennas, 3)'
    relative = positions - np.asarray(array_xyz, dtype=np.float64)
    sin_lon, cos_lon = math.sin(longitude_rad), math.cos(longitude_rad)
    local = np.empty_like(relative)
    local[:, 0] = cos_lon * relative[:, 0] + sin_lon * relative[:, 1]
    local[:, 1] = -sin_lon * relative[:, 0] + cos_lon * relative[:, 1]
    local[:, 2] = relative[:, 2]
    return local
