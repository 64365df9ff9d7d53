import pytest
from mock import patch

pytest.importorskip('casacore.tables')

from rtsprep.tasks import pipeline_tasks


# Test import so that celery workers wouldn't fail silently on shutdown.
def test_import():
    import rtsprep.celery
    assert 'rtsprep.tasks.pipeline_tasks.reflag_mwaf_task' in rtsprep.celery.app.tasks


def test_reflag_mwaf_task():
    with patch.object(pipeline_tasks.occupancy, 'reflag_mwaf', return_value='/data/RTS_1065880128_01.mwaf') as m:
        assert pipeline_tasks.reflag_mwaf_task('/data/1065880128_01.mwaf') == '/data/RTS_1065880128_01.mwaf'
    m.assert_called_once_with('/data/1065880128_01.mwaf', None, 0.8)


def test_ms_to_uvfits_task():
    with patch.object(pipeline_tasks.ms2uvfits, 'ms_to_uvfits', return_value=['/tmp/rts_band01.uvfits']) as m:
        assert pipeline_tasks.ms_to_uvfits_task('/data/obs.ms', '/tmp/rts', undo_phase_tracking=True) == \
               ['/tmp/rts_band01.uvfits']
    m.assert_called_once_with('/data/obs.ms', '/tmp/rts', one_to_one=False, vis_column='OFFSET_DATA',
                              undo_phase_tracking=True, reset_weights=False)


def test_unphase_uvfits_task():
    with patch.object(pipeline_tasks.unphase_uvfits, 'unphase_uvfits', return_value='/tmp/out.uvfits') as m:
        assert pipeline_tasks.unphase_uvfits_task('/tmp/in.uvfits', output='/tmp/out.uvfits') == '/tmp/out.uvfits'
    m.assert_called_once_with('/tmp/in.uvfits', '/tmp/out.uvfits', False)
