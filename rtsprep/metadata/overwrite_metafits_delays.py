#!/usr/bin/env python
"""Overwrite the DELAYS of a metafits file.

MWA metafits files can list the delays of an observation as all 32, which marks the observation as bad. To use it
anyway, this replaces those delays with the ones listed against the tiles, i.e. what the observation actually used.
"""
import argparse
import logging

from rtsprep.metadata import metafits

log = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    parser = argparse.ArgumentParser(description='Overwrite the DELAYS of a metafits file with the delays listed '
                                                 'against its tiles, or with the given delays.')
    parser.add_argument('metafits', help='The metafits file to be altered.')
    parser.add_argument('-d', '--delays', type=int, nargs='+',
                        help='Manually specify the 16 delays to use. The default is to use the delays in the '
                             'TILEDATA HDU.')
    args = parser.parse_args()
    if args.delays is not None and len(args.delays) != metafits.N_DIPOLES:
        parser.error(f'When supplying delays, {metafits.N_DIPOLES} must be given.')
    metafits.overwrite_delays(args.metafits, args.delays)


if __name__ == '__main__':
    main()
