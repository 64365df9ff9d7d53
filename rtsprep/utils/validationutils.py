"""Validation utilities.
"""
from typing import Collection


def check_same_length(a: Collection, b: Collection, what: str = 'Collections'):
    if len(a) != len(b):
        raise ValueError(f'{what} have different lengths: {len(a)} and {len(b)}.')
