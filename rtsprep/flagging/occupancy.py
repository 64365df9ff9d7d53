"""RFI occupancy of mwaf flag files.

Occupancy is the fraction of the samples of a fine channel that are flagged, over all baselines and scans. Channels
with occupancy above a threshold are "reflagged": their indices are written as REFLG_NN header keys in a copy of the
mwaf file, which the RTS reads to flag those channels entirely.
"""
import logging
from dataclasses import dataclass, field
from os import path
from typing import Dict, List, Optional, Tuple

import numpy as np

from rtsprep.configmanager import reflag_config
from rtsprep.flagging.mwaf import BitFlagArchive
from rtsprep.utils import paths

log = logging.getLogger(__name__)

REFLAG_KEY_FORMAT = 'REFLG_{:02d}'


@dataclass
class OccupancyStats:
    mwaf_file: str
    flag_counts_per_channel: np.ndarray
    flag_fraction_per_channel: np.ndarray
    total_samples: int


@dataclass
class ReflagDirective:
    """Channels to flag entirely, as (ordinal, channel index) pairs in ascending channel order."""
    entries: List[Tuple[int, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def channels(self) -> List[int]:
        return [chan for _, chan in self.entries]

    def header_keys(self) -> Dict[str, int]:
        return {REFLAG_KEY_FORMAT.format(ordinal): chan for ordinal, chan in self.entries}


def compute_occupancy(archive: BitFlagArchive) -> OccupancyStats:
    counts = archive.decode_channel_histograms()
    total_samples = archive.row_count
    return OccupancyStats(mwaf_file=archive.path,
                          flag_counts_per_channel=counts,
                          flag_fraction_per_channel=counts / total_samples,
                          total_samples=total_samples)


def check_threshold(threshold: float):
    if not 0 < threshold <= 1:
        raise ValueError(f'The reflag threshold must be in (0, 1], got {threshold}.')


def reflag(archive: BitFlagArchive, stats: OccupancyStats, destination: str, threshold: float) -> ReflagDirective:
    """Write a copy of the mwaf file that flags every channel with occupancy above the threshold.

    Args:
        archive: The archive the statistics were computed from.
        stats: Occupancy statistics of ``archive``.
        destination: Path of the new mwaf file.
        threshold: Channels whose flagged fraction is strictly greater than this are reflagged.

    Returns: The reflag directive that was written.
    """
    check_threshold(threshold)
    directive = ReflagDirective()
    for chan, fraction in enumerate(stats.flag_fraction_per_channel):
        if fraction > threshold:
            directive.entries.append((len(directive.entries), chan))
    log.info('Reflagging channels %s of %s.', directive.channels, archive.path)
    archive.write_with_reflag(destination, directive)
    return directive


def reflag_mwaf(mwaf_file: str, output: Optional[str] = None, threshold: float = reflag_config.threshold) -> str:
    """Reflag one mwaf file.

    Args:
        mwaf_file: Path to the mwaf file.
        output: Path to the reflagged file. Defaults to RTS_<name> in the same directory as ``mwaf_file``.
        threshold: See :func:`reflag`.

    Returns: The path to the reflagged file.
    """
    check_threshold(threshold)
    if output is None:
        output = paths.get_rts_mwaf_name(mwaf_file)
    archive = BitFlagArchive.load(mwaf_file)
    reflag(archive, compute_occupancy(archive), output, threshold)
    return path.abspath(output)
