"""metafits files.

The primary header of a metafits file holds the observation metadata (GPSTIME is the obsid, DELAYS the
comma-separated beamformer delays of the 16 dipoles). The TILEDATA extension has one row per RF input, i.e. two per
tile, with the input's Flag and its 16 Delays.
"""
import logging
from typing import List, Optional, Sequence

import numpy as np
from astropy.io import fits

from rtsprep.errors import FormatError

log = logging.getLogger(__name__)

TILEDATA_EXTNAME = 'TILEDATA'
N_DIPOLES = 16
# A delay of 32 marks a dead dipole. DELAYS all 32 marks a bad observation.
DEAD_DIPOLE_DELAY = 32


def _tiledata(hdul: fits.HDUList) -> fits.BinTableHDU:
    try:
        return hdul[TILEDATA_EXTNAME]
    except KeyError as e:
        raise FormatError(f'{hdul.filename()} has no {TILEDATA_EXTNAME} extension.') from e


def get_obsid(metafits: str) -> int:
    with fits.open(metafits) as hdul:
        try:
            return int(hdul[0].header['GPSTIME'])
        except KeyError as e:
            raise FormatError(f'{metafits} has no GPSTIME.') from e


def get_flagged_inputs(metafits: str) -> np.ndarray:
    """Indices of the TILEDATA rows (RF inputs) that are flagged."""
    with fits.open(metafits) as hdul:
        flags = np.asarray(_tiledata(hdul).data['Flag'])
    return np.flatnonzero(flags)


def has_flagged_tiles(metafits: str) -> bool:
    return len(get_flagged_inputs(metafits)) > 0


def get_tile_delays(metafits: str) -> List[int]:
    """Dipole delays that the observation used, from the RF inputs in TILEDATA.

    A dipole can be dead (delay 32) on some tiles, so each dipole takes the first delay that is not 32 over the RF
    inputs in file order. Dipoles that are dead on every input stay 32.

    Returns: 16 delays.
    """
    with fits.open(metafits) as hdul:
        input_delays = np.asarray(_tiledata(hdul).data['Delays'])
    if input_delays.ndim != 2 or input_delays.shape[1] != N_DIPOLES:
        raise FormatError(f'Expected {N_DIPOLES} delays per RF input in {metafits}, found shape {input_delays.shape}.')
    delays = [DEAD_DIPOLE_DELAY] * N_DIPOLES
    for row in input_delays:
        for i, d in enumerate(row):
            if delays[i] == DEAD_DIPOLE_DELAY and d != DEAD_DIPOLE_DELAY:
                delays[i] = int(d)
        if DEAD_DIPOLE_DELAY not in delays:
            break
    return delays


def check_delays(delays: Sequence[int]):
    if len(delays) != N_DIPOLES:
        raise ValueError(f'{N_DIPOLES} delays must be given, got {len(delays)}.')
    if any(not 0 <= d <= 255 for d in delays):
        raise ValueError(f'Delays must fit in a byte, got {list(delays)}.')


def overwrite_delays(metafits: str, delays: Optional[Sequence[int]] = None) -> str:
    """Replace DELAYS in the primary header of a metafits file.

    Args:
        metafits: Path to the metafits file. Modified in place.
        delays: The 16 delays to write. Defaults to the delays listed against the tiles, see :func:`get_tile_delays`.

    Returns: The new DELAYS value.
    """
    if delays is None:
        delays = get_tile_delays(metafits)
    check_delays(delays)
    value = ','.join(str(d) for d in delays)
    with fits.open(metafits, mode='update') as hdul:
        header = hdul[0].header
        log.info(f'Replacing DELAYS {header.get("DELAYS")} with {value} in {metafits}.')
        # Assigning a bare value keeps the existing comment.
        header['DELAYS'] = value
    return value
