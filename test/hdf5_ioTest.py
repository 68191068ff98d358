import h5py
import numpy as np
import pytest

from alsam_xml import Reason, SchemaViolation, decode
from alsam_xml.hdf5_io import TURN_TIME, HDF5Writer, layer_data


def test_layer_data(make_layer):
    data = layer_data(make_layer())

    # segments (0,0)->(3,4), (3,4)->(3,0) on Hatch1, then a jump (3,0)->(0.0001,1e-7)
    assert data.points.shape == (6, 2)
    np.testing.assert_array_equal(data.edges, [[0, 1], [2, 3], [4, 5]])
    np.testing.assert_array_equal(data.points[:4], [[0, 0], [3, 4], [3, 4], [3, 0]])
    np.testing.assert_array_equal(data.power, [150.0, 150.0, 0.0])
    np.testing.assert_array_equal(data.velocity, [500.0, 500.0, 5000.0])
    np.testing.assert_allclose(data.length[:2], [5.0, 4.0])

    assert data.time[0] == 0.0
    assert data.time[1] == pytest.approx(5.0 / 500.0)
    assert data.time[2] == pytest.approx(5.0 / 500.0 + TURN_TIME)
    assert data.layer_time == pytest.approx(data.time[-1])


def test_layer_data_empty(make_layer):
    layer = make_layer()
    layer.Trajectories = []
    data = layer_data(layer)
    assert data.points.shape == (0, 2)
    assert data.time.shape == (0,)
    assert data.layer_time == 0.0


def test_layer_data_needs_references(make_layer):
    layer = make_layer()
    del layer.SegmentStyles["Jump"]
    with pytest.raises(SchemaViolation) as e:
        layer_data(layer)
    assert e.value.reason is Reason.UnknownReference


def test_write(tmp_path, make_layer, sample_xml):
    layers = [make_layer(LayerNum=1), make_layer(LayerNum=2, AbsoluteHeight=5.0), decode(sample_xml)]
    out = str(tmp_path / "build.hdf5")
    assert HDF5Writer(out).write(layers) == 3

    with h5py.File(out, "r") as f:
        assert sorted(k for k in f.keys() if k.isdigit()) == ["0", "1", "2"]
        assert f["0"].attrs["LayerNum"] == 1
        assert f["0/points"].shape == (6, 2)
        assert f["0/edgeData/power"].shape == (3,)
        assert f["2/pointData/time"].shape == (10,)
        np.testing.assert_allclose(f["layer_thickness"][:], [0.03, 0.03, 0.03])
        np.testing.assert_allclose(f["layer_height"][:], [0.03, 5.0, 5.03])
        times = f["data_layer_times"][:]
        np.testing.assert_allclose(f["layer_start_times"][:], [0.0, times[0], times[0] + times[1]])
