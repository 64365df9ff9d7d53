# rtsprep/tasks/pipeline_tasks.py
"""
Celery adapter on top of the flagging and transform modules.
"""
import logging
from typing import List, Optional

from rtsprep.celery import app
from rtsprep.configmanager import reflag_config, conversion_config
from rtsprep.flagging import occupancy
from rtsprep.transform import ms2uvfits, unphase_uvfits

log = logging.getLogger(__name__)


@app.task
def reflag_mwaf_task(mwaf_file: str, output: Optional[str] = None,
                     threshold: float = reflag_config.threshold) -> str:
    return occupancy.reflag_mwaf(mwaf_file, output, threshold)


@app.task
def ms_to_uvfits_task(ms: str, output: str, one_to_one: bool = False,
                      vis_column: str = conversion_config.vis_column, undo_phase_tracking: bool = False,
                      reset_weights: bool = False) -> List[str]:
    """Convert a measurement set to uvfits files.

    Returns: The uvfits paths, in coarse band order.
    """
    log.info(f'Converting {ms} to uvfits with stem {output}.')
    return ms2uvfits.ms_to_uvfits(ms, output, one_to_one=one_to_one, vis_column=vis_column,
                                  undo_phase_tracking=undo_phase_tracking, reset_weights=reset_weights)


@app.task
def unphase_uvfits_task(uvfits: str, output: Optional[str] = None, overwrite: bool = False) -> str:
    return unphase_uvfits.unphase_uvfits(uvfits, output, overwrite)
