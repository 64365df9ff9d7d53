"""Utilities for timestamps.

casacore stores times as UTC seconds since the MJD epoch (1858-11-17T00:00:00). Everything else here works on
astropy Time objects.
"""
import math
from typing import Union

import numpy as np
from astropy.time import Time

from rtsprep.utils.constants import MJD_TIME_QUANTUM_S

SECONDS_PER_DAY = 86400.0


def casacore_utc_to_time(utc_seconds: Union[float, np.ndarray]) -> Time:
    return Time(np.asarray(utc_seconds, dtype=np.float64) / SECONDS_PER_DAY, format='mjd', scale='utc')


def truncate_date(epoch: Time) -> str:
    """The calendar date of the epoch with the time of day set to zero, e.g. 2013-10-15T00:00:00.0
    """
    return f"{epoch.utc.to_value('iso', subfmt='date')}T00:00:00.0"


def truncated_jd(epoch: Time) -> float:
    """floor(JD) + 0.5 of the epoch in UTC. uvfits DATE parameters are offsets from this.
    """
    return math.floor(epoch.utc.jd) + 0.5


def count_time_steps(utc_seconds: np.ndarray) -> int:
    """Number of distinct timestamps, after rounding them to milliseconds.
    """
    quantised = np.round(np.asarray(utc_seconds) / MJD_TIME_QUANTUM_S).astype(np.int64)
    return len(np.unique(quantised))
