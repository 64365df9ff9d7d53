"""Physical and observational constants.

Contains the speed of light, the uvfits random group layout and the MWA
array reference position used for the antenna table.

Note:
    The MWA position is the one the RTS and cotter use. A different array
    position can be set through the telescope section of the configuration.
"""
import math

from astropy import units as u
from astropy.coordinates import EarthLocation

from rtsprep.configmanager import telescope_config

SPEED_OF_LIGHT_M_S = 299792458.0
TAU = 2 * math.pi

# uvfits random group layout: (re, im, weight) for XX, YY, XY, YX per channel.
N_POLS = 4
FLOATS_PER_POL = 3
GROUP_PARAM_NAMES = ('UU', 'VV', 'WW', 'BASELINE', 'DATE')
NUM_GROUP_PARAMS = len(GROUP_PARAM_NAMES)

EARTH_ROTATION_DEG_PER_DAY = 3.60985e2
IAT_UTC_S = 33.0

# casacore timestamps are compared after rounding to this many seconds.
MJD_TIME_QUANTUM_S = 1e-3

MWA_LONGITUDE_DEG = telescope_config.longitude_deg
MWA_LATITUDE_DEG = telescope_config.latitude_deg
MWA_ALTITUDE_M = telescope_config.altitude_m
MWA_LOCATION = EarthLocation.from_geodetic(lon=MWA_LONGITUDE_DEG * u.deg, lat=MWA_LATITUDE_DEG * u.deg,
                                           height=MWA_ALTITUDE_M * u.m)
TELESCOPE_NAME = telescope_config.name
