"""Utility functions and helpers for rtsprep.

Modules:
    constants: Physical and observational constants.
    coordutils: Geodetic, sidereal time and station frame conversions.
    datetimeutils: Date/time conversion and truncation.
    msutils: Measurement set readers.
    paths: Output file naming and beam file lookup.
    uvfitsutils: The uvfits random group container writer.
    validationutils: Input validation utilities.
"""
