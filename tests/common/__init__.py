from os import path

import numpy as np
import yaml
from astropy.io import fits

CONFIG = yaml.safe_load(open(f'{path.dirname(__file__)}/../resources/test_config.yml'))

# Per channel flag counts of a 128 tile, 224 scan observation (8256 baselines, 1849344 flag rows).
OBS_ANTENNAS = 128
OBS_SCANS = 224
OBS_FLAG_COUNTS = [1849343, 1849343, 155462, 152424, 150517, 149608, 149075, 149136, 149204, 149260, 149317, 149354,
                   149279, 149515, 149632, 149908, 1849343, 149780, 149466, 149242, 149163, 148877, 148873, 148811,
                   148693, 148713, 148771, 149406, 150996, 152602, 1849343, 1849343]
OBS_REFLAGGED_CHANNELS = [0, 1, 16, 30, 31]


def write_mwaf(filename: str, flags: np.ndarray, n_antennas: int, n_scans: int, extra_keys: dict = None) -> str:
    """Write an mwaf file from a (rows, channels) boolean flag array.

    Channels are packed most significant bit first, 8 to a byte.
    """
    n_rows, n_chans = flags.shape
    packed = np.packbits(flags, axis=1)
    primary = fits.PrimaryHDU()
    primary.header['NCHANS'] = n_chans
    primary.header['NANTENNA'] = n_antennas
    primary.header['NSCANS'] = n_scans
    for k, v in (extra_keys or {}).items():
        primary.header[k] = v
    table = fits.BinTableHDU.from_columns([fits.Column(name='FLAGS', format=f'{packed.shape[1]}B', array=packed)])
    fits.HDUList([primary, table]).writeto(filename, overwrite=True)
    return filename


def flags_from_counts(counts, n_rows: int) -> np.ndarray:
    """Flags where channel i is flagged in the first counts[i] rows."""
    flags = np.zeros((n_rows, len(counts)), dtype=bool)
    for chan, count in enumerate(counts):
        flags[:count, chan] = True
    return flags


def write_observation_mwaf(filename: str) -> str:
    n_rows = OBS_ANTENNAS * (OBS_ANTENNAS + 1) // 2 * OBS_SCANS
    return write_mwaf(filename, flags_from_counts(OBS_FLAG_COUNTS, n_rows), OBS_ANTENNAS, OBS_SCANS)


def write_metafits(filename: str, flags, input_delays, obsid: int = 1065880128,
                   delays: str = ','.join(['32'] * 16)) -> str:
    """Write a metafits file with one TILEDATA row per RF input."""
    primary = fits.PrimaryHDU()
    primary.header['GPSTIME'] = (obsid, '[s] GPS time of observation start')
    primary.header['DELAYS'] = (delays, 'Beamformer delays')
    tiledata = fits.BinTableHDU.from_columns([
        fits.Column(name='Flag', format='I', array=np.asarray(flags, dtype=np.int16)),
        fits.Column(name='Delays', format='16I', array=np.asarray(input_delays, dtype=np.int16)),
    ], name='TILEDATA')
    fits.HDUList([primary, tiledata]).writeto(filename, overwrite=True)
    return filename
