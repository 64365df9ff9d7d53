"""uvfits random group files.

A uvfits file written here has two HDUs. The primary HDU holds one random group per visibility row: the UU, VV, WW,
BASELINE and DATE parameters followed by (real, imag, weight) for the XX, YY, XY and YX polarisations of every fine
channel. The second HDU is the AIPS AN antenna table.

The primary header is written once with the number of groups known up front, and the body is pre-allocated, so rows
can be written in any order.
"""
import logging
import math
import os
from os import path
from typing import List, Optional, Sequence

import numpy as np
from astropy.coordinates import EarthLocation
from astropy.io import fits
from astropy.time import Time

import rtsprep
from rtsprep.utils import coordutils
from rtsprep.utils.constants import (N_POLS, FLOATS_PER_POL, GROUP_PARAM_NAMES, NUM_GROUP_PARAMS, MWA_LOCATION,
                                     TELESCOPE_NAME, EARTH_ROTATION_DEG_PER_DAY, IAT_UTC_S)
from rtsprep.utils.datetimeutils import truncate_date, truncated_jd
from rtsprep.utils.validationutils import check_same_length

log = logging.getLogger(__name__)

FITS_BLOCK_BYTES = 2880
BYTES_PER_FLOAT = 4
ANTENNA_TABLE_EXTNAME = 'AIPS AN'
ANTENNA_NAME_LENGTH = 8


def encode_baseline(ant1: int, ant2: int) -> int:
    """Encode a baseline the way uvfits readers expect. Antenna indices start at 1.

    Uses the miriad convention to handle more than 255 antennas (up to 2048), which is backwards compatible with the
    standard convention.
    """
    if ant2 > 255:
        return ant1 * 2048 + ant2 + 65536
    else:
        return ant1 * 256 + ant2


def _padded(n_bytes: int) -> int:
    return int(math.ceil(n_bytes / FITS_BLOCK_BYTES)) * FITS_BLOCK_BYTES


def primary_header(row_count: int, channel_count: int, reference_epoch: Time, channel_width: float,
                   center_freq: float, center_channel: int, ra_rad: float, dec_rad: float,
                   name: Optional[str] = None) -> fits.Header:
    header = fits.Header()
    header['SIMPLE'] = True
    header['BITPIX'] = -32
    header['NAXIS'] = 6
    for i, n in enumerate((0, FLOATS_PER_POL, N_POLS, channel_count, 1, 1)):
        header[f'NAXIS{i + 1}'] = n
    header['EXTEND'] = True
    header['GROUPS'] = True
    header['PCOUNT'] = NUM_GROUP_PARAMS
    header['GCOUNT'] = row_count
    header['BSCALE'] = 1.0

    for i, param in enumerate(GROUP_PARAM_NAMES):
        header[f'PTYPE{i + 1}'] = param
        header[f'PSCAL{i + 1}'] = 1.0
        # Only DATE has a zero point.
        header[f'PZERO{i + 1}'] = truncated_jd(reference_epoch) if param == 'DATE' else 0.0
    header['DATE-OBS'] = truncate_date(reference_epoch)

    header['CTYPE2'] = 'COMPLEX'
    header['CRVAL2'] = 1.0
    header['CRPIX2'] = 1.0
    header['CDELT2'] = 1.0

    # Linear polarisations.
    header['CTYPE3'] = 'STOKES'
    header['CRVAL3'] = -5
    header['CDELT3'] = -1
    header['CRPIX3'] = 1.0

    header['CTYPE4'] = 'FREQ'
    header['CRVAL4'] = center_freq
    header['CDELT4'] = channel_width
    header['CRPIX4'] = center_channel + 1

    header['CTYPE5'] = 'RA'
    header['CRVAL5'] = math.degrees(ra_rad)
    header['CDELT5'] = 1
    header['CRPIX5'] = 1

    header['CTYPE6'] = 'DEC'
    header['CRVAL6'] = math.degrees(dec_rad)
    header['CDELT6'] = 1
    header['CRPIX6'] = 1

    header['OBSRA'] = math.degrees(ra_rad)
    header['OBSDEC'] = math.degrees(dec_rad)
    header['EPOCH'] = 2000.0

    header['OBJECT'] = name if name else 'Undefined'
    header['TELESCOP'] = TELESCOPE_NAME
    header['INSTRUME'] = TELESCOPE_NAME

    header.add_history('AIPS WTSCAL =  1.0')
    header.add_comment(f'Created by rtsprep v{rtsprep.__version__}')
    header['SOFTWARE'] = 'rtsprep'
    header['GITLABEL'] = f'v{rtsprep.__version__}'
    return header


class UvContainer:
    """Writer for one uvfits file.

    The container owns its open file handle until :meth:`close`. Use :meth:`create` to make one.

    Attributes:
        path: Path to the uvfits file.
        row_count: Number of random groups.
        channel_count: Number of fine channels per group.
        reference_epoch: Epoch that DATE-OBS and the DATE zero point are derived from.
    """

    def __init__(self, path_: str, fh, header: fits.Header, data_offset: int, reference_epoch: Time):
        self.path = path_
        self._fh = fh
        self.header = header
        self.row_count = header['GCOUNT']
        self.channel_count = header['NAXIS4']
        self.reference_epoch = reference_epoch
        self._data_offset = data_offset

    @property
    def samples_per_row(self) -> int:
        return self.channel_count * N_POLS * FLOATS_PER_POL

    @property
    def group_bytes(self) -> int:
        return (NUM_GROUP_PARAMS + self.samples_per_row) * BYTES_PER_FLOAT

    @property
    def closed(self) -> bool:
        return self._fh is None or self._fh.closed

    @classmethod
    def create(cls, path_: str, row_count: int, channel_count: int, reference_epoch: Time, channel_width: float,
               center_freq: float, center_channel: int, ra_rad: float, dec_rad: float,
               name: Optional[str] = None) -> 'UvContainer':
        """Create a new uvfits file with every group zeroed.

        Args:
            path_: Path to the new file. An existing file is deleted.
            row_count: Number of random groups (visibility rows).
            channel_count: Number of fine channels.
            reference_epoch: The first time going into the file.
            channel_width: Fine channel width in Hz.
            center_freq: Frequency of the centre channel in Hz.
            center_channel: 0-indexed centre channel.
            ra_rad: Phase centre right ascension in radians.
            dec_rad: Phase centre declination in radians.
            name: Object name. Defaults to "Undefined".

        Returns: The open container.
        """
        if path.exists(path_):
            os.remove(path_)
        header = primary_header(row_count, channel_count, reference_epoch, channel_width, center_freq,
                                center_channel, ra_rad, dec_rad, name)
        header_bytes = header.tostring().encode('ascii')
        fh = open(path_, 'w+b')
        container = cls(path_, fh, header, len(header_bytes), reference_epoch)
        try:
            fh.write(header_bytes)
            fh.truncate(len(header_bytes) + _padded(row_count * container.group_bytes))
        except OSError:
            fh.close()
            raise
        log.info('Created %s with %i rows of %i channels.', path_, row_count, channel_count)
        return container

    def write_row(self, row_index: int, params: Sequence[float], samples: Sequence[float]):
        """Write one random group.

        Args:
            row_index: 0-indexed group number.
            params: u, v, w in seconds, encoded baseline and DATE offset from PZERO5 in days.
            samples: channel_count * 4 * 3 floats, see :func:`rtsprep.transform.phasetracking.reorder_polarizations`.
        """
        if len(params) != NUM_GROUP_PARAMS:
            raise ValueError(f'Expected {NUM_GROUP_PARAMS} group parameters, got {len(params)}.')
        if len(samples) != self.samples_per_row:
            raise ValueError(f'Expected {self.samples_per_row} floats for {self.channel_count} channels, '
                             f'got {len(samples)}.')
        if not 0 <= row_index < self.row_count:
            raise IndexError(f'Row {row_index} is outside of {self.path} which has {self.row_count} rows.')
        group = np.empty(NUM_GROUP_PARAMS + self.samples_per_row, dtype='>f4')
        group[:NUM_GROUP_PARAMS] = params
        group[NUM_GROUP_PARAMS:] = samples
        self._fh.seek(self._data_offset + row_index * self.group_bytes)
        self._fh.write(group.tobytes())

    def append_antenna_table(self, epoch: Time, center_freq: float, antenna_names: List[str],
                             antenna_positions_ecef: np.ndarray, location: EarthLocation = MWA_LOCATION):
        """Append the AIPS AN antenna table.

        Args:
            epoch: The first time in the file.
            center_freq: Centre frequency of the coarse band in Hz.
            antenna_names: Antenna names, in station number order.
            antenna_positions_ecef: (n_antennas, 3) geocentric antenna positions in meters.
            location: Array reference position.
        """
        check_same_length(antenna_names, antenna_positions_ecef, 'Antenna names and positions')
        array_xyz = coordutils.geodetic_to_geocentric(location)
        station_xyz = coordutils.ecef_to_local_xyz(antenna_positions_ecef, array_xyz, location.lon.rad)
        n_ant = len(antenna_names)

        hdu = fits.BinTableHDU.from_columns(fits.ColDefs([
            fits.Column(name='ANNAME', format=f'{ANTENNA_NAME_LENGTH}A', array=np.array(antenna_names)),
            fits.Column(name='STABXYZ', format='3D', unit='METERS', array=station_xyz),
            fits.Column(name='NOSTA', format='1J', array=np.arange(1, n_ant + 1, dtype=np.int32)),
            fits.Column(name='MNTSTA', format='1J', array=np.zeros(n_ant, dtype=np.int32)),
            fits.Column(name='STAXOF', format='1E', unit='METERS', array=np.zeros(n_ant, dtype=np.float32)),
            fits.Column(name='POLTYA', format='1A', array=np.array(['X'] * n_ant)),
            fits.Column(name='POLAA', format='1E', unit='DEGREES', array=np.zeros(n_ant, dtype=np.float32)),
            fits.Column(name='POLCALA', format='3E', array=np.zeros((n_ant, 3), dtype=np.float32)),
            fits.Column(name='POLTYB', format='1A', array=np.array(['Y'] * n_ant)),
            fits.Column(name='POLAB', format='1E', unit='DEGREES', array=np.full(n_ant, 90.0, dtype=np.float32)),
            fits.Column(name='POLCALB', format='3E', array=np.zeros((n_ant, 3), dtype=np.float32)),
        ]), name=ANTENNA_TABLE_EXTNAME)

        header = hdu.header
        header['ARRAYX'] = array_xyz[0]
        header['ARRAYY'] = array_xyz[1]
        header['ARRAYZ'] = array_xyz[2]
        header['FREQ'] = center_freq
        header['GSTIA0'] = coordutils.greenwich_mean_sidereal_time_deg(epoch)
        header['DEGPDY'] = (EARTH_ROTATION_DEG_PER_DAY, 'rotation rate of the earth (deg/day)')
        header['RDATE'] = truncate_date(epoch)
        header['POLARX'] = 0.0
        header['POLARY'] = 0.0
        header['UT1UTC'] = 0.0
        header['DATUTC'] = 0.0
        header['TIMSYS'] = 'UTC'
        header['ARRNAM'] = TELESCOPE_NAME
        header['NUMORB'] = (0, 'number of orbital parameters')
        header['NOPCAL'] = (3, 'number of pol calibration values per IF')
        header['FREQID'] = (-1, 'frequency setup number')
        header['IATUTC'] = IAT_UTC_S
        # Station coordinates are right handed.
        header['XYZHAND'] = 'RIGHT'

        self._fh.flush()
        with fits.open(self.path, mode='append', memmap=False) as hdul:
            hdul.append(hdu)
        log.info('Wrote an antenna table of %i antennas to %s.', n_ant, self.path)

    def close(self):
        if not self.closed:
            self._fh.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
