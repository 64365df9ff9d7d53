import pytest
import numpy as np
from mock import patch
from astropy.io import fits
from astropy.time import Time

from rtsprep.transform import unphase_uvfits
from rtsprep.utils.uvfitsutils import UvContainer

FREQ = 1e8
W = 1 / (4 * FREQ)


def write_uvfits(filename):
    # Channel 0 is at 100 MHz and channel 1 at 200 MHz, so W is a quarter and a half turn.
    with UvContainer.create(filename, 2, 2, Time(56580.5, format='mjd', scale='utc'), FREQ, FREQ, 0,
                            0.0, 0.0) as container:
        samples = np.tile([1, 0, 1], 8).astype(np.float32)
        container.write_row(0, (0, 0, W, 258, 0), samples)
        container.write_row(1, (0, 0, 0, 259, 0), samples)
    return filename


def test_channel_freqs():
    header = fits.Header()
    header['NAXIS4'] = 3
    header['CRVAL4'] = 1.5e8
    header['CRPIX4'] = 2
    header['CDELT4'] = 1e4
    np.testing.assert_allclose(unphase_uvfits.get_channel_freqs(header), [1.5e8 - 1e4, 1.5e8, 1.5e8 + 1e4])


def test_unphase_to_output(tmpdir):
    original = write_uvfits(f'{tmpdir}/in.uvfits')
    out = unphase_uvfits.unphase_uvfits(original, output=f'{tmpdir}/out.uvfits')
    assert out == f'{tmpdir}/out.uvfits'

    with fits.open(out) as hdul:
        assert hdul[0].header['CRVAL4'] == pytest.approx(FREQ / 2)
        data = hdul[0].data.data[:, 0, 0]
        # Quarter turn in channel 0, half turn in channel 1, for every polarisation.
        np.testing.assert_allclose(data[0, 0, :, 0], 0, atol=1e-5)
        np.testing.assert_allclose(data[0, 0, :, 1], 1, atol=1e-5)
        np.testing.assert_allclose(data[0, 1, :, 0], -1, atol=1e-5)
        np.testing.assert_allclose(data[0, 1, :, 1], 0, atol=1e-5)
        np.testing.assert_array_equal(data[:, :, :, 2], 1)
        # w is 0
        np.testing.assert_allclose(data[1, :, :, 0], 1)
        np.testing.assert_array_equal(hdul[0].data.par('BASELINE'), [258, 259])

    with fits.open(original) as hdul:
        assert hdul[0].header['CRVAL4'] == FREQ
        np.testing.assert_array_equal(hdul[0].data.data[0, 0, 0, :, :, 0], 1)


def test_unphase_overwrite(tmpdir):
    original = write_uvfits(f'{tmpdir}/in.uvfits')
    unphase_uvfits.unphase_uvfits(original, overwrite=True, chunk_size=1)
    with fits.open(original) as hdul:
        assert hdul[0].header['CRVAL4'] == pytest.approx(FREQ / 2)
        np.testing.assert_allclose(hdul[0].data.data[0, 0, 0, 0, :, 1], 1, atol=1e-5)


@pytest.mark.parametrize('output, overwrite', [(None, False), ('out.uvfits', True)])
def test_output_or_overwrite(tmpdir, output, overwrite):
    original = write_uvfits(f'{tmpdir}/in.uvfits')
    with pytest.raises(ValueError):
        unphase_uvfits.unphase_uvfits(original, output=output, overwrite=overwrite)


def test_main_needs_output_or_overwrite():
    with patch('sys.argv', ['unphase_uvfits.py', 'in.uvfits']), \
            patch.object(unphase_uvfits, 'unphase_uvfits') as mocked:
        with pytest.raises(SystemExit):
            unphase_uvfits.main()
        mocked.assert_not_called()
