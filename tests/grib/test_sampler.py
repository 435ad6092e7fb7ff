"""Test GeoSampler stride, threshold, coordinates and determinism."""

import numpy as np
import pytest

from rala.grib.sampler import GeoSampler, samples_to_frame
from rala.grib.types import DenseValueGrid, GeoSample, GridGeometry

pytestmark = pytest.mark.unit


def make_grid(values, nx, ny):
    arr = np.array([np.nan if v is None else v for v in values], dtype=np.float64)
    return DenseValueGrid(nx, ny, arr)


def geometry(nx, ny, la1=40000000, lo1=-100000000, dx=100000, dy=100000):
    return GridGeometry(nx=nx, ny=ny, la1=la1, lo1=lo1, la2=la1 - (ny - 1) * dy,
                        lo2=lo1 + (nx - 1) * dx, dx=dx, dy=dy)


def test_stride_one_keeps_present_values(make_config):
    sampler = GeoSampler(make_config(stride=1))
    grid = make_grid([30.0, None, 50.0, None], 2, 2)

    samples = sampler.sample(grid, geometry(2, 2))

    assert len(samples) == 2
    assert samples[0] == GeoSample(40.0, -100.0, 30.0)
    assert samples[1].lat == pytest.approx(39.9)
    assert samples[1].lon == pytest.approx(-100.0)
    assert samples[1].value == 50.0


def test_threshold_drops_values_at_or_below(make_config):
    sampler = GeoSampler(make_config(stride=1))
    grid = make_grid([-30.0, -29.9, -45.0, 10.0], 4, 1)

    values = [s.value for s in sampler.sample(grid, geometry(4, 1))]

    assert values == [-29.9, 10.0]


def test_custom_threshold(make_config):
    sampler = GeoSampler(make_config(stride=1, threshold=20))
    grid = make_grid([10.0, 20.0, 30.0], 3, 1)

    assert [s.value for s in sampler.sample(grid, geometry(3, 1))] == [30.0]


def test_default_stride_thins_both_axes(internal_config):
    sampler = GeoSampler(internal_config)
    nx, ny = 9, 9
    grid = make_grid([10.0] * (nx * ny), nx, ny)

    samples = sampler.sample(grid, geometry(nx, ny))

    # rows and cols 0, 4, 8
    assert len(samples) == 9
    assert samples[1].lon == pytest.approx(-100.0 + 4 * 0.1)
    assert samples[3].lat == pytest.approx(40.0 - 4 * 0.1)


def test_stride_argument_overrides_config(internal_config):
    grid = make_grid([10.0] * 16, 4, 4)

    samples = GeoSampler(internal_config).sample(grid, geometry(4, 4), stride=2)

    assert len(samples) == 4


def test_invalid_stride(internal_config):
    with pytest.raises(ValueError):
        GeoSampler(internal_config).sample(make_grid([1.0], 1, 1), geometry(1, 1), stride=0)


def test_longitude_normalized_from_0_360(make_config):
    sampler = GeoSampler(make_config(stride=1))
    # 179.9, 180.0, 180.1 degrees east
    geo = geometry(3, 1, lo1=179900000, dx=100000)
    grid = make_grid([5.0, 5.0, 5.0], 3, 1)

    lons = [s.lon for s in sampler.sample(grid, geo)]

    assert lons[0] == pytest.approx(179.9)
    assert lons[1] == pytest.approx(-180.0)
    assert lons[2] == pytest.approx(-179.9)
    assert all(-180.0 <= lon < 180.0 for lon in lons)


def test_mrms_origin_maps_to_western_hemisphere(make_config):
    sampler = GeoSampler(make_config(stride=1))
    geo = geometry(1, 1, la1=54995000, lo1=230005000, dx=10000, dy=10000)

    (sample,) = sampler.sample(make_grid([25.0], 1, 1), geo)

    assert sample.lat == pytest.approx(54.995)
    assert sample.lon == pytest.approx(-129.995)


def test_sampling_is_deterministic(internal_config):
    rng = np.random.default_rng(7)
    values = rng.uniform(-40, 70, size=40 * 30)
    values[rng.random(values.size) < 0.3] = np.nan
    grid = DenseValueGrid(40, 30, values)
    sampler = GeoSampler(internal_config)

    first = sampler.sample(grid, geometry(40, 30))
    second = sampler.sample(grid, geometry(40, 30))

    assert first == second
    assert len(first) > 0


def test_row_major_order(make_config):
    sampler = GeoSampler(make_config(stride=1))
    grid = make_grid([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], 3, 2)

    assert [s.value for s in sampler.sample(grid, geometry(3, 2))] == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


def test_samples_to_frame():
    samples = [GeoSample(40.0, -100.0, 30.0), GeoSample(39.9, -100.0, 50.0)]

    df = samples_to_frame(samples)

    assert list(df.columns) == ["lat", "lon", "value"]
    assert df["value"].tolist() == [30.0, 50.0]


def test_samples_to_frame_empty():
    df = samples_to_frame([])

    assert df.empty
    assert list(df.columns) == ["lat", "lon", "value"]
