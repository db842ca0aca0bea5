"""Shared fixtures: builders for small synthetic twix files."""

import logging
import struct

import numpy as np
import pytest

import twixread.common.util.logging_ as util_logging


MDH_FORMAT = "<2I2H14H2HH5HHH"


def pack_mdh(samples, channels, counters=(), centers=(0, 0, 0)):
    """Packs the 60 byte MDH section; counters are given in sLC order."""
    counters = list(counters) + [0] * (14 - len(counters))
    column, line, partition = centers
    return struct.pack(
        MDH_FORMAT,
        0, 0,
        samples, channels,
        *counters,
        0, 0,
        column,
        0, 0, 0, 0, 0,
        line, partition,
    )


def counters(lin=0, sli=0, par=0, eco=0, rep=0, set_=0):
    """Loop counter list with the ones we place by set, the rest zero."""
    lc = [0] * 14
    lc[0] = lin
    lc[2] = sli
    lc[3] = par
    lc[4] = eco
    lc[6] = rep
    lc[7] = set_
    return lc


def samples(nread, seed):
    """Distinct, exactly representable complex64 samples."""
    base = np.arange(nread, dtype=np.float32) + 1000 * seed
    return (base + 1j * (base + 0.5)).astype(np.complex64)


class SyntheticTwix:
    """Byte builders for VB and VD style twix files."""

    counters = staticmethod(counters)
    samples = staticmethod(samples)
    pack_mdh = staticmethod(pack_mdh)

    @staticmethod
    def vb_adc(channel_data, channel_counters, nsamples=None):
        """One VB ADC: a 128 byte MDH in front of every channel."""
        nchan = len(channel_data)
        out = b""
        for data, lc in zip(channel_data, channel_counters):
            hdr = bytearray(128)
            nread = len(data) if nsamples is None else nsamples
            hdr[20:80] = pack_mdh(nread, nchan, lc)
            out += bytes(hdr) + np.asarray(data, dtype="<c8").tobytes()
        return out

    @staticmethod
    def vd_adc(channel_data, lc, nsamples=None):
        """One VD ADC: 192 byte scan header, then 32 byte channel headers."""
        nchan = len(channel_data)
        nread = len(channel_data[0]) if nsamples is None else nsamples
        scan = bytearray(192)
        scan[40:100] = pack_mdh(nread, nchan, lc)
        out = bytes(scan)
        for data in channel_data:
            out += bytes(32) + np.asarray(data, dtype="<c8").tobytes()
        return out

    @staticmethod
    def vb_file(adcs, header_size=10240):
        lead = struct.pack("<4IQ", header_size, 3, 0, 0, 0)
        return lead.ljust(header_size, b"\0") + b"".join(adcs)

    @staticmethod
    def vd_file(adcs, data_offset=10240, header_size=512, scan_count=1,
                measurement_id=42, file_id=7):
        lead = struct.pack("<4IQ", 0, scan_count, measurement_id, file_id, data_offset)
        meas = struct.pack("<I", header_size).ljust(header_size, b"\0")
        return lead.ljust(data_offset, b"\0") + meas + b"".join(adcs)


@pytest.fixture
def twix():
    return SyntheticTwix


@pytest.fixture
def write_dat(tmp_path):
    def _write(content, name="meas.dat"):
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Keeps config and log files out of the real home directory."""
    data_dir = tmp_path / "data_dir"
    data_dir.mkdir()
    monkeypatch.setenv("TWIXREAD_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    for handler in util_logging._installed_handlers:
        util_logging.logger.removeHandler(handler)
        handler.close()
    del util_logging._installed_handlers[:]
    util_logging.logger.setLevel(logging.WARNING)
    util_logging.logger.propagate = True
