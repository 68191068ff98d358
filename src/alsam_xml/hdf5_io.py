"""
HDF5 export of decoded layers for use in an external simulator.

One group per layer (``"0"``, ``"1"``, ... in firing order) holding:

    points              (2n, 2)  start and end point of every segment
    edges               (n, 2)   point indices of every segment
    edgeData/power      (n,)     lead traveler power, 0 for jump styles [W]
    edgeData/velocity   (n,)     velocity of the style's profile [mm/s]
    edgeData/length     (n,)     segment length [mm]
    pointData/time      (2n,)    time the beam reaches each point [s]

and file level ``data_layer_times``, ``layer_height``, ``layer_thickness`` and
``layer_start_times`` datasets.
"""
from dataclasses import dataclass
from typing import Iterable

import h5py
import numpy as np

from .validation import check_references
from .xml_config import Layer

# Pause between consecutive segments [s]
TURN_TIME = 5*(10**-4)


@dataclass
class LayerData():
    points : np.ndarray
    edges : np.ndarray
    power : np.ndarray
    velocity : np.ndarray
    length : np.ndarray
    time : np.ndarray

    @property
    def layer_time(self) -> float:
        return float(np.amax(self.time)) if len(self.time) else 0.0


def layer_data(layer: Layer) -> LayerData:
    """Flattens a layer's segments, in firing order, into simulator arrays.

    :raises SchemaViolation: UnknownReference if a segment's style or profile is missing
    """
    check_references(layer)
    segments = [segment for _, _, segment in layer.segments()]
    n = len(segments)

    points = np.empty((2 * n, 2), dtype='d')
    power = np.empty(n, dtype='d')
    velocity = np.empty(n, dtype='d')
    for i, segment in enumerate(segments):
        points[2 * i] = segment.start
        points[2 * i + 1] = segment.end
        style = layer.SegmentStyles[segment.SegStyle]
        # jump vectors have no traveler and so no power
        power[i] = style.Travelers[0].Power if style.Travelers else 0.0
        velocity[i] = layer.VelocityProfiles[style.VelocityProfileID].Velocity

    edges = np.arange(2 * n, dtype='i').reshape(-1, 2)
    length = np.linalg.norm(points[1::2] - points[0::2], axis=1)
    duration = length / velocity
    if n:
        starts = np.concatenate(([0.0], np.cumsum(duration + TURN_TIME)[:-1]))
    else:
        starts = np.empty(0, dtype='d')
    time = np.column_stack((starts, starts + duration)).reshape(-1)

    return LayerData(points, edges, power, velocity, length, time)


'''
Writes a whole build to one HDF5 file
out_path needs to be full path with .hdf5 extension
'''
class HDF5Writer():

    def __init__(self, out_path: str):
        self.out = out_path

    def write_layer(self, f: h5py.File, index: int, layer: Layer) -> LayerData:
        data = layer_data(layer)
        grp = f.create_group(str(index))
        if layer.Header.LayerNum is not None:
            grp.attrs['LayerNum'] = layer.Header.LayerNum
        grp.create_dataset('points', data=data.points)
        grp.create_dataset('edges', data=data.edges)

        subgrp1 = grp.create_group('edgeData')
        subgrp1.create_dataset('power', data=data.power)
        subgrp1.create_dataset('velocity', data=data.velocity)
        subgrp1.create_dataset('length', data=data.length)

        subgrp2 = grp.create_group('pointData')
        subgrp2.create_dataset('time', data=data.time)
        return data

    def write(self, layers: Iterable[Layer]) -> int:
        """Writes every layer, overwriting the file.

        :return: number of layers written
        """
        layer_times = []
        layer_thickness = []
        layer_height = []
        height = 0.0
        with h5py.File(self.out, "w") as f:
            for index, layer in enumerate(layers):
                data = self.write_layer(f, index, layer)
                layer_times.append(data.layer_time)
                layer_thickness.append(layer.Header.LayerThickness)
                # Absolute height wins when the layer states it
                height += layer.Header.LayerThickness
                if layer.Header.AbsoluteHeight is not None:
                    height = layer.Header.AbsoluteHeight
                layer_height.append(height)

            data_layer_times = np.array(layer_times, dtype='d')
            start_times = np.concatenate(([0.0], np.cumsum(data_layer_times)[:-1])) if layer_times \
                else np.empty(0, dtype='d')
            f.create_dataset("/data_layer_times", data=data_layer_times, dtype='d')
            f.create_dataset("/layer_height", data=np.array(layer_height, dtype='d'), dtype='d')
            f.create_dataset("/layer_start_times", data=start_times, dtype='d')
            f.create_dataset("/layer_thickness", data=np.array(layer_thickness, dtype='d'), dtype='d')
        return len(layer_times)
