#!/usr/bin/env python
"""Detect channels with high occupancy and flag them entirely.

The input files are named like 1?????????_??.mwaf, and the reflagged files are written next to them as
RTS_1?????????_??.mwaf.
"""
import argparse
import logging
from glob import glob
from os import path
from typing import List

from rtsprep.configmanager import reflag_config
from rtsprep.flagging.occupancy import reflag_mwaf

log = logging.getLogger(__name__)


def find_mwaf_files(directory: str, pattern: str) -> List[str]:
    mwaf_files = sorted(glob(path.join(directory, pattern)))
    if not mwaf_files:
        raise FileNotFoundError(f'No files found matching: {path.join(directory, pattern)}')
    return mwaf_files


def reflag_mwaf_files(directory: str = '.', pattern: str = reflag_config.pattern,
                      threshold: float = reflag_config.threshold) -> List[str]:
    return [reflag_mwaf(mwaf_file, threshold=threshold) for mwaf_file in find_mwaf_files(directory, pattern)]


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    parser = argparse.ArgumentParser(description="Detect channels with high occupancy and flag them entirely. Input "
                                                 "files are named 1?????????_??.mwaf, and the results are written to "
                                                 "RTS_1?????????_??.mwaf.")
    parser.add_argument('-t', '--threshold', type=float, default=reflag_config.threshold,
                        help='The fraction of a channel that must be flagged before the entire channel is flagged. '
                             'Must be greater than 0 and at most 1.')
    parser.add_argument('-d', '--directory', default='.', help='Directory containing the mwaf files.')
    parser.add_argument('--pattern', default=reflag_config.pattern, help='Glob pattern of the mwaf files.')
    args = parser.parse_args()
    if args.threshold <= 0:
        parser.error('Not running with a threshold of 0 or less.')
    elif args.threshold > 1:
        parser.error('The threshold cannot be bigger than 1.')
    for out in reflag_mwaf_files(args.directory, args.pattern, args.threshold):
        log.info('Reflagged %s', out)


if __name__ == '__main__':
    main()
