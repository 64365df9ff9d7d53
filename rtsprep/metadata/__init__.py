"""MWA observation metadata.

Modules:
    metafits: Reading tile flags and dipole delays from metafits files, and rewriting DELAYS.
    no_flagged_tiles: Script printing the obsid of observations without flagged tiles.
    overwrite_metafits_delays: Script replacing the DELAYS of a metafits file.
"""
