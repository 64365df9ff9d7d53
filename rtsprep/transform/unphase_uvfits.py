#!/usr/bin/env python
"""Convert the phase-tracked visibilities of a uvfits file to non-phase-tracked ones, so the RTS reads them correctly.
"""
import argparse
import logging
import shutil
from os import path
from typing import Optional

import numpy as np
from astropy.io import fits

from rtsprep.configmanager import conversion_config
from rtsprep.transform.phasetracking import apply_phase_rotor, REMOVE

log = logging.getLogger(__name__)


def get_channel_freqs(header: fits.Header) -> np.ndarray:
    """Fine channel frequencies in Hz from the FREQ axis of a uvfits primary header."""
    base_index = int(round(header['CRPIX4']))
    return header['CRVAL4'] + (np.arange(header['NAXIS4']) - base_index + 1) * header['CDELT4']


def unphase_uvfits(uvfits: str, output: Optional[str] = None, overwrite: bool = False,
                   chunk_size: int = conversion_config.chunk_size) -> str:
    """Remove phase tracking from every group of a uvfits file.

    Exactly one of ``output`` and ``overwrite`` must be given.

    Args:
        uvfits: Path to the uvfits file.
        output: Path of the converted copy. The input file is left alone.
        overwrite: Convert the input file in place.
        chunk_size: Number of groups processed at a time.

    Returns: Path to the converted file.
    """
    if output is None and not overwrite:
        raise ValueError('No output given, nor told to overwrite. Specify one or the other.')
    if output is not None and overwrite:
        raise ValueError('An output was given, but also told to overwrite. Specify one or the other.')
    if output is not None:
        shutil.copyfile(uvfits, output)
        target = output
    else:
        target = uvfits

    with fits.open(target, mode='update') as hdul:
        header = hdul[0].header
        freqs = get_channel_freqs(header)
        # The RTS expects frequencies half a fine channel lower than the uvfits standard.
        header['CRVAL4'] = header['CRVAL4'] - header['CDELT4'] / 2

        groups = hdul[0].data
        n_rows = len(groups)
        w_seconds = groups.par('WW')
        # (group, ra, dec, channel, pol, re/im/weight)
        samples = groups.data
        for start in range(0, n_rows, chunk_size):
            rows = slice(start, min(start + chunk_size, n_rows))
            block = samples[rows, 0, 0]
            vis = apply_phase_rotor(block[..., 0] + 1j * block[..., 1], w_seconds[rows], freqs, REMOVE)
            block[..., 0] = vis.real
            block[..., 1] = vis.imag
            log.debug('Unphased groups %i to %i of %s.', rows.start, rows.stop, target)
    log.info('Removed phase tracking from %i groups of %s.', n_rows, target)
    return path.abspath(target)


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    parser = argparse.ArgumentParser(description='Convert the phase-tracked visibilities in a uvfits file to '
                                                 'non-phase-tracked, such that the RTS can read them correctly.')
    parser.add_argument('uvfits', help='The uvfits file to be converted.')
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--overwrite', action='store_true', help='Alter the input uvfits file.')
    group.add_argument('--output', help='The path of the output uvfits file. Preserves the input uvfits file.')
    args = parser.parse_args()
    unphase_uvfits(args.uvfits, output=args.output, overwrite=args.overwrite)


if __name__ == '__main__':
    main()
