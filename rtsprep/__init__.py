"""rtsprep: data preparation tools for the Real-Time System (RTS) calibration pipeline.

The rtsprep package converts MWA visibility data into the formats the RTS
expects and cleans up RFI flag files before calibration. It provides tools for:

- Per-channel RFI flag occupancy analysis of mwaf flag files
- Reflagging heavily occupied channels through mwaf header keys
- Measurement set to uvfits conversion, one file per coarse band
- Removing phase tracking from uvfits visibilities
- Checking metafits tile flags and repairing metafits DELAYS

Subpackages
-----------
flagging
    mwaf flag file model, occupancy statistics and the reflag script.
tasks
    Celery task definitions for distributed processing.
metadata
    metafits tile flags and dipole delays.
transform
    Visibility transforms and format conversions.
utils
    Constants, the uvfits container writer, coordinate, time and
    measurement set helpers.
"""
__version__ = '0.2.3'
