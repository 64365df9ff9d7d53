"""Output file naming and the beam file lookup.
"""
import os
from os import path
from typing import Optional

from rtsprep.configmanager import reflag_config, beam_config


def get_rts_mwaf_name(mwaf_file: str, output_dir: Optional[str] = None) -> str:
    """RTS_<name> next to the mwaf file, or in ``output_dir``."""
    directory = output_dir if output_dir is not None else path.dirname(mwaf_file)
    return path.join(directory, f'{reflag_config.prefix}{path.basename(mwaf_file)}')


def get_band_uvfits_name(stem: str, band: int) -> str:
    return f'{stem}_band{band:02d}.uvfits'


def resolve_beam_file(explicit: Optional[str] = None) -> str:
    """Beam file from the argument, else from the environment variable in the beam config (MWA_BEAM_FILE).

    Raises:
        ValueError: If neither is set.
    """
    if explicit:
        return explicit
    from_env = os.environ.get(beam_config.env_var)
    if from_env:
        return from_env
    raise ValueError(f'No beam file was supplied, and the {beam_config.env_var} environment variable is not set.')
