#!/usr/bin/env python
"""Convert a measurement set to RTS-readable uvfits files.

By default one uvfits file is written per coarse band listed in the MWA_SUBBAND table.
"""
import argparse
import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

import numpy as np

from rtsprep.configmanager import conversion_config
from rtsprep.transform.phasetracking import (apply_phase_rotor, ms_vis_to_uvfits, compute_num_baselines,
                                            compute_num_antennas, REMOVE)
from rtsprep.utils import msutils, paths
from rtsprep.utils.constants import SPEED_OF_LIGHT_M_S, N_POLS, FLOATS_PER_POL
from rtsprep.utils.datetimeutils import casacore_utc_to_time, truncated_jd, count_time_steps
from rtsprep.utils.uvfitsutils import UvContainer, encode_baseline

log = logging.getLogger(__name__)

BandLayout = namedtuple('BandLayout', ['band', 'center_freq', 'center_channel', 'n_chans', 'chan_width'])


def get_band_layouts(chan_freqs: np.ndarray, total_bandwidth: float, coarse_bands: Sequence[int]) -> List[BandLayout]:
    """Split the fine channels of a measurement set into coarse bands.

    Args:
        chan_freqs: Fine channel frequencies in Hz, for all coarse bands.
        total_bandwidth: Total bandwidth of the measurement set in Hz.
        coarse_bands: 1-indexed coarse band numbers.

    Returns: One layout per coarse band. The centre frequency is half a fine channel below the middle of the band,
        which is what the RTS expects.
    """
    coarse_width = total_bandwidth / len(coarse_bands)
    fine_width = float(chan_freqs[1] - chan_freqs[0])
    n_chans = len(chan_freqs) // len(coarse_bands)
    center_channel = int(round(coarse_width / fine_width / 2))
    return [BandLayout(band,
                       chan_freqs[0] + (band - 1) * coarse_width + coarse_width / 2 - fine_width / 2,
                       center_channel, n_chans, fine_width)
            for band in coarse_bands]


def ms_to_uvfits(ms: str, output: str, one_to_one: bool = False, vis_column: str = conversion_config.vis_column,
                 undo_phase_tracking: bool = False, reset_weights: bool = False,
                 chunk_size: int = conversion_config.chunk_size,
                 n_workers: int = conversion_config.n_workers) -> List[str]:
    """Convert a measurement set into uvfits files.

    Args:
        ms: Path to the measurement set.
        output: Stem of the uvfits files, e.g. /tmp/rts gives /tmp/rts_band01.uvfits, /tmp/rts_band02.uvfits etc.
            With ``one_to_one`` this is the path to the single uvfits file.
        one_to_one: Write everything into a single uvfits file instead of one per coarse band.
        vis_column: Main table column containing the visibilities.
        undo_phase_tracking: Remove phase tracking from the visibilities. The RTS expects non-phase-tracked data.
        reset_weights: Set all weights to 1 instead of carrying WEIGHT_SPECTRUM over.
        chunk_size: Number of measurement set rows read at a time.
        n_workers: Number of threads creating the uvfits files.

    Returns: Paths to the uvfits files, in band order.
    """
    num_rows = msutils.get_num_rows(ms)
    start_time = msutils.get_start_time(ms)
    coarse_bands = [1] if one_to_one else msutils.get_coarse_bands(ms)
    spw = msutils.get_spectral_window(ms)
    ra_rad, dec_rad = msutils.get_pointing(ms)
    layouts = get_band_layouts(spw.chan_freqs, spw.total_bandwidth, coarse_bands)

    n_time_steps = count_time_steps(msutils.get_times(ms))
    n_baselines = compute_num_baselines(num_rows, n_time_steps)
    n_antennas = compute_num_antennas(n_baselines)
    names = msutils.get_antenna_names(ms)
    positions = msutils.get_positions(ms)
    if len(names) != n_antennas:
        raise ValueError(f'{ms} has {n_baselines} baselines, i.e. {n_antennas} antennas, but its ANTENNA table lists '
                         f'{len(names)}.')
    log.info('%s has %i rows, %i time steps and %i baselines; writing %i uvfits files.',
             ms, num_rows, n_time_steps, n_baselines, len(layouts))

    def create(layout: BandLayout) -> UvContainer:
        filename = output if one_to_one else paths.get_band_uvfits_name(output, layout.band)
        return UvContainer.create(filename, num_rows, layout.n_chans, start_time, round(layout.chan_width),
                                  layout.center_freq, layout.center_channel, ra_rad, dec_rad)

    containers = _create_containers(create, layouts, n_workers)
    try:
        _write_rows(ms, containers, spw.chan_freqs, start_time, vis_column, undo_phase_tracking, reset_weights,
                    chunk_size)
        for layout, container in zip(layouts, containers):
            container.append_antenna_table(start_time, layout.center_freq, names, positions)
    finally:
        for container in containers:
            container.close()

    log.info('Finished writing %i uvfits files.', len(containers))
    return [c.path for c in containers]


def _create_containers(create, layouts: List[BandLayout], n_workers: int) -> List[UvContainer]:
    """Create one container per band in parallel. If any creation fails, the ones that succeeded are closed."""
    with ThreadPoolExecutor(max(1, min(n_workers, len(layouts)))) as pool:
        futures = [pool.submit(create, layout) for layout in layouts]
    errors = [f.exception() for f in futures if f.exception() is not None]
    if errors:
        for f in futures:
            if f.exception() is None:
                f.result().close()
        raise errors[0]
    return [f.result() for f in futures]


def _write_rows(ms: str, containers: List[UvContainer], chan_freqs: np.ndarray, start_time, vis_column: str,
                undo_phase_tracking: bool, reset_weights: bool, chunk_size: int):
    jd_trunc = truncated_jd(start_time)
    step = containers[0].channel_count * N_POLS * FLOATS_PER_POL
    row_num = 0
    for chunk in msutils.iter_row_chunks(ms, vis_column, chunk_size):
        uvw_s = chunk['UVW'] / SPEED_OF_LIGHT_M_S
        date_offsets = casacore_utc_to_time(chunk['TIME']).jd - jd_trunc
        vis = chunk[vis_column]
        if undo_phase_tracking:
            vis = apply_phase_rotor(vis, uvw_s[:, 2], chan_freqs, REMOVE)
        weights = np.ones(vis.shape, dtype=np.float32) if reset_weights else chunk[msutils.WEIGHT_COLUMN]
        samples = ms_vis_to_uvfits(vis, weights)

        for i in range(len(samples)):
            baseline = encode_baseline(int(chunk['ANTENNA1'][i]) + 1, int(chunk['ANTENNA2'][i]) + 1)
            params = (uvw_s[i, 0], uvw_s[i, 1], uvw_s[i, 2], baseline, date_offsets[i])
            # Each file gets its own coarse band's slice of the row.
            for band, container in enumerate(containers):
                container.write_row(row_num, params, samples[i, band * step:(band + 1) * step])
            row_num += 1
            if row_num % conversion_config.log_every == 0:
                log.info('Wrote %i rows.', row_num)


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    parser = argparse.ArgumentParser(description='Convert an input measurement set to RTS-readable uvfits files.')
    parser.add_argument('ms', help='The measurement set to be converted.')
    parser.add_argument('-o', '--output', required=True,
                        help='The stem of the uvfits files to be written, e.g. "/tmp/rts" will generate files named '
                             '"/tmp/rts_band01.uvfits", "/tmp/rts_band02.uvfits", etc. With --one-to-one this is the '
                             'path to the output uvfits file.')
    parser.add_argument('--one-to-one', action='store_true', default=False,
                        help='Convert the input ms into a single uvfits file instead of one per coarse band.')
    parser.add_argument('-v', '--vis-col', default=conversion_config.vis_column,
                        help='The main table column containing the visibilities.')
    parser.add_argument('-u', '--undo-phase-tracking', action='store_true', default=False,
                        help='Convert phase-tracked visibilities to non-phase-tracked.')
    parser.add_argument('-r', '--reset-weights', action='store_true', default=False,
                        help='Set all weights to 1 instead of carrying them over from the measurement set.')
    args = parser.parse_args()
    ms_to_uvfits(args.ms, args.output, one_to_one=args.one_to_one, vis_column=args.vis_col,
                 undo_phase_tracking=args.undo_phase_tracking, reset_weights=args.reset_weights)


if __name__ == '__main__':
    main()
