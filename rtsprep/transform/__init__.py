"""Visibility transforms.

Modules:
    phasetracking: Phase rotor, polarisation reordering and baseline bookkeeping.
    ms2uvfits: Measurement set to uvfits conversion.
    unphase_uvfits: Removing phase tracking from existing uvfits files.
"""
