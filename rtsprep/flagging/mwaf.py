"""mwaf flag files.

An mwaf file is a FITS file whose primary header carries NCHANS, NANTENNA and
NSCANS, and whose first binary table extension holds one row of packed flag
bits per (scan, baseline). Auto-correlations are included, so there are
NANTENNA * (NANTENNA + 1) / 2 baselines.
"""
import logging
import shutil
from os import path
from typing import TYPE_CHECKING

import numpy as np
from astropy.io import fits

from rtsprep.errors import FormatError

if TYPE_CHECKING:
    from rtsprep.flagging.occupancy import ReflagDirective

log = logging.getLogger(__name__)

FLAG_HDU_INDEX = 1
REQUIRED_KEYS = ('NCHANS', 'NANTENNA', 'NSCANS')

# _BIT_SET[bit] selects the byte values with ``bit`` set.
_BIT_SET = ((np.arange(256)[np.newaxis, :] >> np.arange(8)[:, np.newaxis]) & 1).astype(bool)


def channel_index(byte_column: int, bit: int) -> int:
    """Fine channel flagged by ``bit`` (0 is the LSB) of the byte in ``byte_column`` of a flag row.

    This is the mapping mwaf writers use. Do not re-derive it.
    """
    return 7 * (byte_column + 1) + byte_column - bit


def num_baselines(n_antennas: int) -> int:
    return n_antennas * (n_antennas + 1) // 2


class BitFlagArchive:
    """The packed flag bits of an mwaf file.

    Instances are immutable once loaded. Reflagging writes a new file through
    :meth:`write_with_reflag` instead of modifying the archive.

    Attributes:
        path: Absolute path to the mwaf file the archive was loaded from.
        channel_count: Number of fine channels (NCHANS).
        antenna_count: Number of antennas (NANTENNA).
        scan_count: Number of time steps (NSCANS).
        row_width_bytes: Bytes per flag row (NAXIS1 of the flag table).
        raw_bits: Read-only uint8 buffer of all the flag rows.
    """

    def __init__(self, path_: str, channel_count: int, antenna_count: int, scan_count: int,
                 row_width_bytes: int, raw_bits: np.ndarray):
        for name, value in (('channel_count', channel_count), ('antenna_count', antenna_count),
                            ('scan_count', scan_count), ('row_width_bytes', row_width_bytes)):
            if value <= 0:
                raise FormatError(f'{name} must be positive, got {value}.')
        if channel_count > row_width_bytes * 8:
            raise FormatError(f'{channel_count} channels do not fit in flag rows of {row_width_bytes} bytes.')
        expected = num_baselines(antenna_count) * scan_count * row_width_bytes
        if raw_bits.size != expected:
            raise FormatError(f'Expected {expected} bytes of flags, found {raw_bits.size}.')
        self.path = path_
        self.channel_count = channel_count
        self.antenna_count = antenna_count
        self.scan_count = scan_count
        self.row_width_bytes = row_width_bytes
        raw_bits = np.array(raw_bits, dtype=np.uint8)
        raw_bits.setflags(write=False)
        self.raw_bits = raw_bits

    @property
    def baseline_count(self) -> int:
        return num_baselines(self.antenna_count)

    @property
    def row_count(self) -> int:
        return self.baseline_count * self.scan_count

    @classmethod
    def load(cls, mwaf_file: str) -> 'BitFlagArchive':
        """Read the header values and the packed flags of an mwaf file.

        Args:
            mwaf_file: Path to the mwaf file.

        Returns: The archive.

        Raises:
            FormatError: If a required header value is missing, or the flag table does not hold exactly
                NANTENNA * (NANTENNA + 1) / 2 * NSCANS rows.
        """
        mwaf_file = path.abspath(mwaf_file)
        with fits.open(mwaf_file, memmap=False) as hdul:
            if len(hdul) <= FLAG_HDU_INDEX:
                raise FormatError(f'{mwaf_file} has no flag table extension.')
            header = hdul[0].header
            missing = [k for k in REQUIRED_KEYS if k not in header]
            if missing:
                raise FormatError(f'{mwaf_file} is missing required header keys {missing}.')
            flag_header = hdul[FLAG_HDU_INDEX].header
            try:
                width = int(flag_header['NAXIS1'])
                n_rows = int(flag_header['NAXIS2'])
                n_chans, n_antennas, n_scans = (int(header[k]) for k in REQUIRED_KEYS)
            except (KeyError, ValueError, TypeError) as e:
                raise FormatError(f'Malformed header in {mwaf_file}: {e}') from e
            data_offset = hdul.fileinfo(FLAG_HDU_INDEX)['datLoc']

        available = width * n_rows
        expected = num_baselines(n_antennas) * n_scans * width
        if available != expected:
            raise FormatError(f'{mwaf_file} has {available} bytes of flags but its header implies {expected}.')
        with open(mwaf_file, 'rb') as f:
            f.seek(data_offset)
            raw_bits = np.frombuffer(f.read(available), dtype=np.uint8)
        log.info('Loaded %i flag rows of %i bytes from %s.', n_rows, width, mwaf_file)
        return cls(mwaf_file, n_chans, n_antennas, n_scans, width, raw_bits)

    def decode_channel_histograms(self) -> np.ndarray:
        """Count the flagged samples of every fine channel.

        Each byte column gets a histogram of its 256 possible values, and only then are the bits of those values
        unpacked into channel totals.

        Returns: An array of length ``channel_count`` with the number of flag rows that have each channel flagged.
        """
        rows = self.raw_bits.reshape(self.row_count, self.row_width_bytes)
        totals = np.zeros(self.channel_count, dtype=np.int64)
        padding_flags = 0
        for s in range(self.row_width_bytes):
            histogram = np.bincount(rows[:, s], minlength=256)
            for bit in range(8):
                count = int(histogram[_BIT_SET[bit]].sum())
                chan = channel_index(s, bit)
                if chan < self.channel_count:
                    totals[chan] += count
                else:
                    padding_flags += count
        if padding_flags:
            log.warning('%s has %i flag bits set beyond channel %i; they were ignored.',
                        self.path, padding_flags, self.channel_count - 1)
        return totals

    def write_with_reflag(self, destination: str, directive: 'ReflagDirective') -> str:
        """Copy the mwaf file to ``destination`` and add the reflag keys to its flag table header.

        Args:
            destination: Path to the new mwaf file. Overwritten if it exists.
            directive: The channels to flag entirely.

        Returns: The destination path.

        Raises:
            ValueError: If ``destination`` is the archive's own file.
        """
        if path.exists(destination) and path.samefile(self.path, destination):
            raise ValueError(f'Refusing to reflag {self.path} in place; give a different destination.')
        shutil.copyfile(self.path, destination)
        with fits.open(destination, mode='update', memmap=False) as hdul:
            flag_header = hdul[FLAG_HDU_INDEX].header
            for key, chan in directive.header_keys().items():
                flag_header[key] = chan
        log.info('Wrote %s with %i reflagged channels.', destination, len(directive))
        return destination
