import pytest
import numpy as np
from astropy.io import fits

from ..common import write_mwaf, flags_from_counts

from rtsprep.errors import FormatError
from rtsprep.flagging import mwaf
from rtsprep.flagging.mwaf import BitFlagArchive
from rtsprep.flagging.occupancy import ReflagDirective


@pytest.mark.parametrize('byte_column, bit, expected', [
    (0, 7, 0),
    (0, 0, 7),
    (1, 7, 8),
    (3, 0, 31),
])
def test_channel_index(byte_column, bit, expected):
    assert mwaf.channel_index(byte_column, bit) == expected


def test_num_baselines_includes_autos():
    assert mwaf.num_baselines(128) == 8256
    assert mwaf.num_baselines(1) == 1


def test_load(tmpdir):
    flags = flags_from_counts([3, 0, 1, 0, 0, 0, 0, 2, 6, 0], 6)
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', flags, 3, 1)
    archive = BitFlagArchive.load(f)
    assert archive.channel_count == 10
    assert archive.antenna_count == 3
    assert archive.scan_count == 1
    assert archive.row_width_bytes == 2
    assert archive.row_count == 6
    assert not archive.raw_bits.flags.writeable


def test_decode_channel_histograms(tmpdir):
    counts = [3, 0, 1, 0, 0, 0, 0, 2, 6, 0]
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', flags_from_counts(counts, 6), 3, 1)
    np.testing.assert_array_equal(BitFlagArchive.load(f).decode_channel_histograms(), counts)


def test_decode_matches_unpacked_bits():
    rng = np.random.default_rng(42)
    flags = rng.random((10 * 4, 24)) > 0.7
    raw = np.packbits(flags, axis=1)
    archive = BitFlagArchive('dummy.mwaf', 24, 4, 4, 3, raw.ravel())
    np.testing.assert_array_equal(archive.decode_channel_histograms(), flags.sum(axis=0))


def test_padding_bits_are_ignored():
    flags = np.zeros((1, 16), dtype=bool)
    flags[0, 0] = True
    # Channels 10 to 15 are padding.
    flags[0, 12] = True
    archive = BitFlagArchive('dummy.mwaf', 10, 1, 1, 2, np.packbits(flags, axis=1).ravel())
    counts = archive.decode_channel_histograms()
    assert len(counts) == 10
    assert counts[0] == 1
    assert counts.sum() == 1


def test_wrong_buffer_size():
    with pytest.raises(FormatError):
        BitFlagArchive('dummy.mwaf', 8, 2, 1, 1, np.zeros(2, dtype=np.uint8))


def test_channels_do_not_fit():
    with pytest.raises(FormatError):
        BitFlagArchive('dummy.mwaf', 9, 1, 1, 1, np.zeros(1, dtype=np.uint8))


@pytest.mark.parametrize('key', ['NCHANS', 'NANTENNA', 'NSCANS'])
def test_missing_key(tmpdir, key):
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', np.zeros((3, 8), dtype=bool), 2, 1)
    with fits.open(f, mode='update') as hdul:
        del hdul[0].header[key]
    with pytest.raises(FormatError):
        BitFlagArchive.load(f)


def test_row_count_mismatch(tmpdir):
    # 2 antennas and 2 scans need 6 rows.
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', np.zeros((5, 8), dtype=bool), 2, 2)
    with pytest.raises(FormatError):
        BitFlagArchive.load(f)


def test_no_flag_table(tmpdir):
    f = f'{tmpdir}/1065880128_01.mwaf'
    hdu = fits.PrimaryHDU()
    hdu.header['NCHANS'] = 8
    hdu.header['NANTENNA'] = 1
    hdu.header['NSCANS'] = 1
    hdu.writeto(f)
    with pytest.raises(FormatError):
        BitFlagArchive.load(f)


def test_write_with_reflag(tmpdir):
    flags = flags_from_counts([1, 0, 1, 0, 0, 0, 0, 0], 3)
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', flags, 2, 1)
    archive = BitFlagArchive.load(f)
    out = f'{tmpdir}/RTS_1065880128_01.mwaf'
    archive.write_with_reflag(out, ReflagDirective([(0, 2), (1, 5)]))
    with fits.open(out) as hdul, fits.open(f) as original:
        assert hdul[1].header['REFLG_00'] == 2
        assert hdul[1].header['REFLG_01'] == 5
        assert 'REFLG_00' not in original[1].header
        np.testing.assert_array_equal(hdul[1].data['FLAGS'], original[1].data['FLAGS'])
        assert hdul[0].header['NCHANS'] == 8


def test_decode_is_idempotent():
    rng = np.random.default_rng(3)
    raw = np.packbits(rng.random((3, 16)) > 0.5, axis=1).ravel()
    archive = BitFlagArchive('dummy.mwaf', 16, 2, 1, 2, raw)
    np.testing.assert_array_equal(archive.decode_channel_histograms(), archive.decode_channel_histograms())


def test_write_with_reflag_onto_itself(tmpdir):
    f = write_mwaf(f'{tmpdir}/1065880128_01.mwaf', np.ones((3, 8), dtype=bool), 2, 1)
    archive = BitFlagArchive.load(f)
    with pytest.raises(ValueError):
        archive.write_with_reflag(f, ReflagDirective([(0, 0)]))
    with fits.open(f) as hdul:
        assert 'REFLG_00' not in hdul[1].header
