"""Test GridDefinitionDecoder field offsets and default fallback."""

import struct

import pytest

from rala.grib.grid_definition import GridDefinitionDecoder
from tests.helpers.fake_grib import grid_section

pytestmark = pytest.mark.unit


def test_decodes_latlon_fields(internal_config):
    payload = grid_section(2, 3, la1=40000000, lo1=-100000000, dx=100000, dy=250000)

    outcome = GridDefinitionDecoder(internal_config).decode(payload)

    assert not outcome.defaulted
    g = outcome.value
    assert (g.nx, g.ny) == (2, 3)
    assert (g.la1, g.lo1) == (40000000, -100000000)
    assert (g.la2, g.lo2) == (39500000, -99900000)
    assert (g.dx, g.dy) == (100000, 250000)
    assert g.npoints == 6


def test_mrms_conus_grid(internal_config):
    payload = grid_section(7000, 3500, la1=54995000, lo1=230005000, dx=10000, dy=10000)

    g = GridDefinitionDecoder(internal_config).decode(payload).value

    assert (g.nx, g.ny) == (7000, 3500)
    assert g.lo1 == 230005000


def test_unknown_template_still_decoded(internal_config, caplog):
    payload = grid_section(4, 4, template=90)

    outcome = GridDefinitionDecoder(internal_config).decode(payload)

    assert not outcome.defaulted
    assert outcome.value.nx == 4
    assert "not supported" in caplog.text


def test_short_section_uses_default(internal_config):
    outcome = GridDefinitionDecoder(internal_config).decode(grid_section(2, 2, length=40))

    assert outcome.defaulted
    assert "too short" in outcome.reason
    assert outcome.value.nx == 7000
    assert outcome.value.ny == 3500
    assert outcome.value.la1 == 54500000


def test_absent_section_uses_default(internal_config):
    outcome = GridDefinitionDecoder(internal_config).decode(None)

    assert outcome.defaulted
    assert outcome.value.lo1 == -127000000


def test_empty_grid_uses_default(internal_config):
    payload = bytearray(grid_section(2, 2))
    struct.pack_into(">I", payload, 30, 0)

    outcome = GridDefinitionDecoder(internal_config).decode(bytes(payload))

    assert outcome.defaulted
    assert outcome.value.nx == 7000


def test_default_grid_is_configurable(make_config):
    config = make_config(default_grid={"nx": 10, "ny": 20})

    outcome = GridDefinitionDecoder(config).decode(None)

    assert (outcome.value.nx, outcome.value.ny) == (10, 20)


def test_point_count_mismatch_uses_default(internal_config):
    payload = bytearray(grid_section(2, 2))
    struct.pack_into(">II", payload, 30, 0x7FFFFFFF, 0x7FFFFFFF)

    outcome = GridDefinitionDecoder(internal_config).decode(bytes(payload))

    assert outcome.defaulted
    assert "declares 4 points" in outcome.reason
    assert (outcome.value.nx, outcome.value.ny) == (7000, 3500)


def test_zero_declared_points_uses_default(internal_config):
    payload = bytearray(grid_section(3, 2))
    struct.pack_into(">I", payload, 6, 0)

    outcome = GridDefinitionDecoder(internal_config).decode(bytes(payload))

    assert outcome.defaulted
    assert outcome.value.nx == 7000
