"""Measurement set readers.

Only what the uvfits conversion needs: the main table's rows, the SPECTRAL_WINDOW and ANTENNA tables, and the MWA
specific MWA_SUBBAND and MWA_TILE_POINTING tables written by cotter.
"""
import logging
from collections import namedtuple
from typing import Dict, Iterator, List, Tuple

import numpy as np
from astropy.time import Time
from casacore.tables import table

from rtsprep.configmanager import conversion_config
from rtsprep.errors import FormatError
from rtsprep.utils.datetimeutils import casacore_utc_to_time

log = logging.getLogger(__name__)

SpectralWindow = namedtuple('SpectralWindow', ['chan_freqs', 'chan_width', 'total_bandwidth'])

ROW_COLUMNS = ('UVW', 'ANTENNA1', 'ANTENNA2', 'TIME')
WEIGHT_COLUMN = 'WEIGHT_SPECTRUM'


def get_num_rows(ms: str) -> int:
    with table(ms, ack=False) as t:
        return t.nrows()


def get_times(ms: str) -> np.ndarray:
    with table(ms, ack=False) as t:
        return t.getcol('TIME')


def get_start_time(ms: str) -> Time:
    with table(ms, ack=False) as t:
        return casacore_utc_to_time(t.getcell('TIME', 0))


def get_coarse_bands(ms: str) -> List[int]:
    """1-indexed coarse band numbers from the MWA_SUBBAND table.
    """
    with table(f'{ms}/MWA_SUBBAND', ack=False) as t:
        return [int(b) + 1 for b in t.getcol('NUMBER')]


def get_spectral_window(ms: str) -> SpectralWindow:
    """Fine channel frequencies, width and total bandwidth of the (single) spectral window.

    Raises:
        FormatError: If there are fewer than 2 channels or the channel widths are not all equal.
    """
    with table(f'{ms}/SPECTRAL_WINDOW', ack=False) as t:
        widths = t.getcell('CHAN_WIDTH', 0)
        chan_freqs = t.getcell('CHAN_FREQ', 0)
        total_bandwidth = t.getcell('TOTAL_BANDWIDTH', 0)
    if len(widths) <= 1:
        raise FormatError(f'Found {len(widths)} fine channels in {ms}; not continuing.')
    if np.any(np.abs(widths - widths[0]) > 1e-3):
        raise FormatError(f'Not all fine channel widths in the SPECTRAL_WINDOW table of {ms} are equal.')
    return SpectralWindow(np.asarray(chan_freqs, dtype=np.float64), float(chan_freqs[1] - chan_freqs[0]),
                          float(total_bandwidth))


def get_pointing(ms: str) -> Tuple[float, float]:
    """RA and Dec of the tile pointing in radians.
    """
    with table(f'{ms}/MWA_TILE_POINTING', ack=False) as t:
        ra, dec = t.getcell('DIRECTION', 0)[:2]
    return float(ra), float(dec)


def get_positions(ms: str) -> np.ndarray:
    """(n_antennas, 3) geocentric antenna positions in meters.
    """
    with table(f'{ms}/ANTENNA', ack=False) as t:
        return t.getcol('POSITION')


def get_antenna_names(ms: str) -> List[str]:
    """Antenna names. Empty names are replaced by the configured fallback name.
    """
    with table(f'{ms}/ANTENNA', ack=False) as t:
        names = list(t.getcol('NAME'))
    return fill_missing_names(names)


def fill_missing_names(names: List[str]) -> List[str]:
    filled = []
    for i, name in enumerate(names):
        if not name:
            log.warning(f'Antenna {i} has no name; using {conversion_config.fallback_antenna_name}.')
            name = conversion_config.fallback_antenna_name
        filled.append(name)
    return filled


def iter_row_chunks(ms: str, vis_column: str, chunk_size: int) -> Iterator[Dict[str, np.ndarray]]:
    """Read the main table in row order, ``chunk_size`` rows at a time.

    Yields: Dictionaries with the UVW, ANTENNA1, ANTENNA2, TIME, WEIGHT_SPECTRUM and ``vis_column`` columns.
    """
    with table(ms, ack=False) as t:
        n_rows = t.nrows()
        for startrow in range(0, n_rows, chunk_size):
            nrow = min(chunk_size, n_rows - startrow)
            chunk = {col: t.getcol(col, startrow, nrow) for col in ROW_COLUMNS + (WEIGHT_COLUMN, vis_column)}
            chunk['startrow'] = startrow
            yield chunk
