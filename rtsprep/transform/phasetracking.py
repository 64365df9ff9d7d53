"""Phase tracking and polarisation layout of visibilities.

Measurement sets hold phase-tracked visibilities with correlations ordered XX, XY, YX, YY. The RTS expects
non-phase-tracked visibilities laid out as (real, imag, weight) for XX, YY, XY, YX.
"""
import numpy as np

from rtsprep.utils.constants import TAU, N_POLS, FLOATS_PER_POL

ADD = 'add'
REMOVE = 'remove'
_DIRECTION_SIGN = {ADD: -1.0, REMOVE: 1.0}

# Index of each correlation in the measurement set DATA and WEIGHT_SPECTRUM columns.
MS_XX, MS_XY, MS_YX, MS_YY = range(N_POLS)


def apply_phase_rotor(vis: np.ndarray, w_seconds, channel_freqs: np.ndarray, direction: str) -> np.ndarray:
    """Add or remove phase tracking.

    Every sample of channel i is multiplied by cos(theta_i) + sign * 1j * sin(theta_i), with
    theta_i = 2 pi w freq_i. ``sign`` is +1 to remove phase tracking and -1 to add it.

    Args:
        vis: Complex visibilities of one row, shape (n_chan, n_pol), or of many rows, shape (n_row, n_chan, n_pol).
        w_seconds: w in seconds (i.e. w / c). A scalar for one row, or an array of shape (n_row,).
        channel_freqs: (n_chan,) channel frequencies in Hz.
        direction: 'add' or 'remove'.

    Returns: The rotated visibilities, with the dtype of ``vis``.
    """
    try:
        sign = _DIRECTION_SIGN[direction]
    except KeyError:
        raise ValueError(f'direction must be {ADD!r} or {REMOVE!r}, got {direction!r}.')
    channel_freqs = np.asarray(channel_freqs, dtype=np.float64)
    assert vis.shape[-2] == channel_freqs.shape[-1], 'vis is assumed to be ordered by channel and then polarisation'
    theta = TAU * np.multiply.outer(np.asarray(w_seconds, dtype=np.float64), channel_freqs)
    rotor = np.cos(theta) + sign * 1j * np.sin(theta)
    return (vis * rotor[..., np.newaxis]).astype(vis.dtype, copy=False)


def reorder_polarizations(xx: np.ndarray, xy: np.ndarray, yx: np.ndarray, yy: np.ndarray,
                          weights: np.ndarray) -> np.ndarray:
    """Interleave (real, imag, weight) for XX, YY, XY, YX of every channel.

    Args:
        xx, xy, yx, yy: Complex visibilities of each correlation, shape (..., n_chan).
        weights: Weights of shape (..., n_chan, 4) in measurement set order (XX, XY, YX, YY).

    Returns: float32 array of shape (..., n_chan * 12).
    """
    out = np.empty(xx.shape + (N_POLS, FLOATS_PER_POL), dtype=np.float32)
    for k, (vis, weight_index) in enumerate(((xx, MS_XX), (yy, MS_YY), (xy, MS_XY), (yx, MS_YX))):
        out[..., k, 0] = vis.real
        out[..., k, 1] = vis.imag
        out[..., k, 2] = weights[..., weight_index]
    return out.reshape(xx.shape[:-1] + (-1,))


def ms_vis_to_uvfits(vis: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Split (..., n_chan, 4) measurement set visibilities into correlations and reorder them for uvfits.
    """
    return reorder_polarizations(vis[..., MS_XX], vis[..., MS_XY], vis[..., MS_YX], vis[..., MS_YY], weights)


def compute_num_baselines(total_rows: int, time_step_count: int) -> int:
    """Number of baselines in a measurement set with ``time_step_count`` distinct timestamps.
    """
    if time_step_count <= 0:
        raise ValueError(f'Number of time steps must be positive, got {time_step_count}.')
    if total_rows % time_step_count:
        raise ValueError(f'{total_rows} rows cannot be split evenly into {time_step_count} time steps.')
    return total_rows // time_step_count


def compute_num_antennas(num_baselines: int) -> int:
    """Inverse of n * (n + 1) / 2, i.e. cross-correlations and auto-correlations.
    """
    n = int(round((np.sqrt(1 + 8 * num_baselines) - 1) / 2))
    if n <= 0 or n * (n + 1) // 2 != num_baselines:
        raise ValueError(f'{num_baselines} baselines does not correspond to a whole number of antennas.')
    return n
