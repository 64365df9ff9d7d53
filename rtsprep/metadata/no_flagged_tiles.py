#!/usr/bin/env python
"""Given a metafits file, print its obsid if it has no flagged tiles.
"""
import argparse
import logging

from rtsprep.metadata import metafits

log = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.WARNING, format='%(asctime)s [%(levelname)s] %(message)s')
    parser = argparse.ArgumentParser(description='Print the obsid of a metafits file if none of its tiles are '
                                                 'flagged. Prints nothing otherwise.')
    parser.add_argument('metafits', help='The metafits file.')
    args = parser.parse_args()
    if metafits.has_flagged_tiles(args.metafits):
        log.info(f'{args.metafits} has flagged tiles.')
        return
    print(metafits.get_obsid(args.metafits))


if __name__ == '__main__':
    main()
