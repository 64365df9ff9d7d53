"""Flagging operations for mwaf flag files.

This subpackage provides:

- A model of the packed flag bits in an mwaf file
- Per-channel flag occupancy statistics
- Reflagging of channels whose occupancy exceeds a threshold
"""
