import io
import logging
import os

import numpy as np
import pytest

import twixread.common.cfl as cfl
import twixread.common.constants as constants
import twixread.common.multind as multind
import twixread.common.twix_convert as twix_convert

from twixread.common.exceptions import TwixError, TwixFormatError, TwixIOError


def make_dims(**sizes):
    dims = multind.md_singleton_dims()
    for name, size in sizes.items():
        dims[getattr(constants, name.upper() + "_DIM")] = size
    return dims


def test_vb_two_lines(twix, write_dat, tmp_path):
    line0 = np.array([1 + 1j, 2 + 2j, 3 + 3j, 4 + 4j], dtype=np.complex64)
    line1 = np.array([5 + 5j, 6 + 6j, 7 + 7j, 8 + 8j], dtype=np.complex64)
    datfile = write_dat(twix.vb_file([
        twix.vb_adc([line0], [twix.counters(lin=0)]),
        twix.vb_adc([line1], [twix.counters(lin=1)]),
    ]))
    output = str(tmp_path / "out")

    result = twix_convert.convert(datfile, output, make_dims(read=4, phs1=2))

    assert result.adcs == 2
    assert result.output == output
    assert result.header.layout.name == "VB"

    with open(output + ".hdr") as f:
        assert f.read() == "# Dimensions\n4 2 1 1 1 1 1 1 1 1 1 1 1 1 1 1 \n"

    raw = np.fromfile(output + ".cfl", dtype="<c8")
    assert np.array_equal(raw, np.concatenate([line0, line1]))


def test_vd_round_trip(twix, write_dat, tmp_path):
    nread, ncoil = 8, 3
    dims = make_dims(read=nread, phs1=3, phs2=2, coil=ncoil, slice=2)

    placed = [(1, 0, 0), (2, 1, 0), (0, 0, 1), (1, 1, 1), (0, 1, 0), (2, 0, 1)]
    expected = np.zeros(dims, dtype=np.complex64, order="F")
    adcs = []
    for seed, (lin, par, sli) in enumerate(placed):
        chans = [twix.samples(nread, seed * ncoil + icoil) for icoil in range(ncoil)]
        adcs.append(twix.vd_adc(chans, twix.counters(lin=lin, par=par, sli=sli)))
        for icoil, chan in enumerate(chans):
            index = [0] * constants.DIMS
            index[constants.PHS1_DIM] = lin
            index[constants.PHS2_DIM] = par
            index[constants.SLICE_DIM] = sli
            index[constants.COIL_DIM] = icoil
            index[constants.READ_DIM] = slice(None)
            expected[tuple(index)] = chan

    datfile = write_dat(twix.vd_file(adcs))
    output = str(tmp_path / "vd")

    result = twix_convert.convert(datfile, output, dims, adcs=len(placed))

    assert result.header.layout.name == "VD"
    back = cfl.readcfl(output)
    assert back.shape == tuple(dims)
    # untouched positions stay zero
    assert np.array_equal(back, expected)


def test_default_adc_count():
    dims = make_dims(read=8, phs1=4, phs2=3, slice=2, coil=5)
    assert twix_convert.default_adc_count(dims) == 24
    assert twix_convert.TwixConverter(dims).adcs == 24
    assert twix_convert.TwixConverter(dims, adcs=5).adcs == 5


@pytest.mark.parametrize("dims", [[1] * 15, [0] + [1] * 15])
def test_converter_rejects_bad_dims(dims):
    with pytest.raises(ValueError):
        twix_convert.TwixConverter(dims)


def test_explicit_adc_count_reads_fewer(twix, write_dat, tmp_path):
    lines = [twix.samples(4, i) for i in range(3)]
    datfile = write_dat(twix.vb_file([
        twix.vb_adc([line], [twix.counters(lin=i)]) for i, line in enumerate(lines)
    ]))
    output = str(tmp_path / "out")

    result = twix_convert.convert(datfile, output, make_dims(read=4, phs1=3), adcs=2)

    assert result.adcs == 2
    back = cfl.readcfl(output)
    assert np.array_equal(back[:, 0].ravel(), lines[0])
    assert np.array_equal(back[:, 1].ravel(), lines[1])
    assert not back[:, 2].any()


def test_later_adc_overwrites(twix, write_dat, tmp_path):
    first, second = twix.samples(4, 1), twix.samples(4, 2)
    datfile = write_dat(twix.vb_file([
        twix.vb_adc([first], [twix.counters()]),
        twix.vb_adc([second], [twix.counters()]),
    ]))
    output = str(tmp_path / "out")

    twix_convert.convert(datfile, output, make_dims(read=4), adcs=2)

    assert np.array_equal(cfl.readcfl(output).ravel(), second)


def test_sample_mismatch_removes_output(twix, write_dat, tmp_path):
    datfile = write_dat(twix.vb_file([twix.vb_adc([twix.samples(4, 1)], [twix.counters()])]))
    output = str(tmp_path / "out")

    with pytest.raises(TwixFormatError):
        twix_convert.convert(datfile, output, make_dims(read=8))

    assert not os.path.exists(output + ".hdr")
    assert not os.path.exists(output + ".cfl")


def test_out_of_bounds_removes_output(twix, write_dat, tmp_path):
    datfile = write_dat(twix.vd_file([twix.vd_adc([twix.samples(4, 1)], twix.counters(lin=3))]))
    output = str(tmp_path / "out")

    with pytest.raises(TwixFormatError):
        twix_convert.convert(datfile, output, make_dims(read=4, phs1=2), adcs=1)

    assert not os.path.exists(output + ".cfl")


def test_short_file_warns_then_fails(twix, write_dat, tmp_path, caplog):
    datfile = write_dat(twix.vb_file([twix.vb_adc([twix.samples(4, 1)], [twix.counters()])]))
    output = str(tmp_path / "out")

    with caplog.at_level(logging.WARNING, logger="twixread"):
        with pytest.raises(TwixIOError):
            twix_convert.convert(datfile, output, make_dims(read=4, phs1=2))

    assert "bytes short" in caplog.text
    assert not os.path.exists(output + ".cfl")


def test_trailing_bytes_are_fine(twix, write_dat, tmp_path):
    datfile = write_dat(twix.vb_file([
        twix.vb_adc([twix.samples(4, 1)], [twix.counters()]),
        b"\0" * 100,
    ]))

    result = twix_convert.convert(datfile, str(tmp_path / "out"), make_dims(read=4))

    assert result.adcs == 1


def test_check_file_size(twix):
    content = twix.vb_file([twix.vb_adc([twix.samples(4, 1)], [twix.counters()])])
    infile = io.BytesIO(content)

    converter = twix_convert.TwixConverter(make_dims(read=4), adcs=1)
    header = twix_convert.twix_parser.detect_layout(infile)

    assert converter.check_file_size(infile, header) == 0
    assert infile.tell() == header.scan_start

    converter.adcs = 3
    assert converter.check_file_size(infile, header) == -2 * (128 + 32)


def test_missing_input(tmp_path):
    with pytest.raises(TwixIOError, match="error opening file"):
        twix_convert.convert(str(tmp_path / "nope.dat"), str(tmp_path / "out"), make_dims(read=4))

    assert not os.path.exists(str(tmp_path / "out.hdr"))


def test_errors_share_a_base():
    assert issubclass(TwixIOError, TwixError)
    assert issubclass(TwixFormatError, TwixError)


def test_place_block_ignores_read_and_coil():
    dims = make_dims(read=2, phs1=2, coil=2)
    out = multind.md_alloc(dims)
    buf = multind.md_alloc(multind.md_select_dims(constants.READ_FLAG | constants.COIL_FLAG, dims))
    buf.reshape(-1, order="F")[:] = [1, 2, 3, 4]

    pos = [0] * constants.DIMS
    pos[constants.PHS1_DIM] = 1
    pos[constants.COIL_DIM] = 1
    pos[constants.READ_DIM] = 1

    twix_convert.place_block(out, pos, dims, buf)

    index = [0] * constants.DIMS
    index[constants.PHS1_DIM] = 1
    index[constants.READ_DIM] = slice(None)
    index[constants.COIL_DIM] = 1
    assert list(out[tuple(index)]) == [3, 4]
    # caller's pos is left alone
    assert pos[constants.COIL_DIM] == 1


def test_inspect(twix, write_dat):
    datfile = write_dat(twix.vd_file([twix.vd_adc([twix.samples(6, 1)] * 2, twix.counters(lin=4))]))

    header, mdh = twix_convert.inspect(datfile)

    assert header.is_vd
    assert mdh.samples_in_scan == 6
    assert mdh.used_channels == 2
    assert mdh.lin == 4
