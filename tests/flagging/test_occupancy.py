import pytest
import numpy as np
from astropy.io import fits

from ..common import (write_mwaf, flags_from_counts, write_observation_mwaf, OBS_FLAG_COUNTS,
                      OBS_REFLAGGED_CHANNELS)

from rtsprep.flagging import occupancy
from rtsprep.flagging.mwaf import BitFlagArchive


@pytest.fixture(scope='module')
def observation_mwaf(tmpdir_factory):
    return write_observation_mwaf(str(tmpdir_factory.mktemp('mwaf').join('1065880128_01.mwaf')))


def test_observation_occupancy(observation_mwaf):
    stats = occupancy.compute_occupancy(BitFlagArchive.load(observation_mwaf))
    assert stats.total_samples == 1849344
    np.testing.assert_array_equal(stats.flag_counts_per_channel, OBS_FLAG_COUNTS)
    assert stats.flag_counts_per_channel.sum() <= stats.total_samples * 32
    np.testing.assert_array_equal(stats.flag_fraction_per_channel, np.array(OBS_FLAG_COUNTS) / 1849344)


def test_observation_reflag(observation_mwaf, tmpdir):
    out = occupancy.reflag_mwaf(observation_mwaf, f'{tmpdir}/RTS_1065880128_01.mwaf', threshold=0.8)
    with fits.open(out) as hdul:
        header = hdul[1].header
        assert [header[f'REFLG_{i:02d}'] for i in range(5)] == OBS_REFLAGGED_CHANNELS
        assert 'REFLG_05' not in header


def test_threshold_is_strict(tmpdir):
    # Channel 0 is flagged in exactly half of the rows.
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', flags_from_counts([3, 6, 0, 0, 0, 0, 0, 0], 6), 3, 1)
    archive = BitFlagArchive.load(f)
    directive = occupancy.reflag(archive, occupancy.compute_occupancy(archive), f'{tmpdir}/out.mwaf', 0.5)
    assert directive.channels == [1]
    assert directive.header_keys() == {'REFLG_00': 1}


def test_nothing_to_reflag(tmpdir):
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', np.zeros((3, 8), dtype=bool), 2, 1)
    out = occupancy.reflag_mwaf(f, f'{tmpdir}/out.mwaf', threshold=1)
    with fits.open(out) as hdul:
        assert not [k for k in hdul[1].header if k.startswith('REFLG')]


def test_threshold_of_one_never_reflags_fully_flagged(tmpdir):
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', np.ones((3, 8), dtype=bool), 2, 1)
    archive = BitFlagArchive.load(f)
    directive = occupancy.reflag(archive, occupancy.compute_occupancy(archive), f'{tmpdir}/out.mwaf', 1)
    assert len(directive) == 0


def test_default_output_name(tmpdir):
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', np.ones((3, 8), dtype=bool), 2, 1)
    out = occupancy.reflag_mwaf(f, threshold=0.5)
    assert out == f'{tmpdir}/RTS_1065880128_01.mwaf'
    with fits.open(out) as hdul:
        assert [hdul[1].header[f'REFLG_{i:02d}'] for i in range(8)] == list(range(8))


@pytest.mark.parametrize('threshold', [0, -0.1, 1.01])
def test_bad_threshold(threshold):
    with pytest.raises(ValueError):
        occupancy.check_threshold(threshold)
