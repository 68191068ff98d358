import numpy as np
from lxml.etree import Comment, Element, SubElement, tostring
from typing import Dict, List, Optional

from . import rules
from .fields import Kind
from .rules import Rule
from .xml_config import Header, Layer, Path, SegmentStyle, Trajectory, VelocityProfile


def format_value(value, kind: Kind) -> str:
    """Wire text for a model value.

    Floats are written positionally (never with an exponent) using the shortest digits
    that read back to the same float, so they always match the decoder's float form.
    """
    if kind is Kind.FLOAT:
        return np.format_float_positional(float(value), trim='-')
    if kind is Kind.INTEGER:
        return str(int(value))
    return str(value)


def _add_fields(parent: Element, entity, entity_rules: List[Rule]):
    # Optional fields that are absent are left out entirely
    for rule in entity_rules:
        value = getattr(entity, rule.name)
        if value is not None:
            SubElement(parent, rule.tag).text = format_value(value, rule.kind)


'''
Writes ALSAM controller XML for one layer
Assumes the layer is valid; nothing is checked here (see validation.validate_layer)
'''
class XMLWriter():

    def __init__(self, comment: Optional[str] = None):
        self.comment = comment

    def make_header(self, header: Header):
        h = Element('Header')
        _add_fields(h, header, rules.HEADER)
        return h

    def make_segment_styles(self, styles: Dict[str, SegmentStyle]):
        xsl_root = Element('SegmentStyleList')

        for sl in styles.values():
            xsl = SubElement(xsl_root, 'SegmentStyle')
            _add_fields(xsl, sl, rules.SEGMENT_STYLE)
            if sl.LaserMode is not None:
                SubElement(xsl, 'LaserMode').text = sl.LaserMode

            for traveler in sl.Travelers:
                xtl = SubElement(xsl, 'Traveler')
                _add_fields(xtl, traveler, rules.TRAVELER)
                if traveler.Wobble is not None:
                    xwb = SubElement(xtl, 'Wobble')
                    _add_fields(xwb, traveler.Wobble, rules.WOBBLE)

        return xsl_root

    def make_velocity_profiles(self, profiles: Dict[str, VelocityProfile]):
        vpl = Element('VelocityProfileList')

        for vl in profiles.values():
            xvl = SubElement(vpl, 'VelocityProfile')
            _add_fields(xvl, vl, rules.VELOCITY_PROFILE)

        return vpl

    def make_path(self, path: Path):
        xpath = Element('Path')
        _add_fields(xpath, path, rules.PATH)

        # Only the start point and each endpoint go on the wire; a segment's start is
        # always the previous segment's end
        if path.Segments:
            start = SubElement(xpath, 'Start')
            SubElement(start, 'X').text = format_value(path.Segments[0].X1, Kind.FLOAT)
            SubElement(start, 'Y').text = format_value(path.Segments[0].Y1, Kind.FLOAT)

        for segment in path.Segments:
            seg = SubElement(xpath, 'Segment')
            if segment.SegmentID is not None:
                SubElement(seg, 'SegmentID').text = segment.SegmentID
            SubElement(seg, 'SegStyle').text = segment.SegStyle
            end = SubElement(seg, 'End')
            SubElement(end, 'X').text = format_value(segment.X2, Kind.FLOAT)
            SubElement(end, 'Y').text = format_value(segment.Y2, Kind.FLOAT)

        return xpath

    def make_traj_list(self, trajectories: List[Trajectory]):
        xtraj_root = Element('TrajectoryList')

        for trajectory in trajectories:
            traj = SubElement(xtraj_root, 'Trajectory')
            _add_fields(traj, trajectory, rules.TRAJECTORY)
            for path in trajectory.Paths:
                traj.append(self.make_path(path))

        return xtraj_root

    def make_layer(self, layer: Layer):
        root = Element('Layer')
        root.append(self.make_header(layer.Header))
        root.append(self.make_segment_styles(layer.SegmentStyles))
        root.append(self.make_velocity_profiles(layer.VelocityProfiles))
        root.append(self.make_traj_list(layer.Trajectories))
        if self.comment:
            root.addprevious(Comment(self.comment))
        return root

    def to_bytes(self, layer: Layer) -> bytes:
        root = self.make_layer(layer)
        return tostring(root.getroottree(), xml_declaration=True, encoding='UTF-8', pretty_print=True)

    def to_string(self, layer: Layer) -> str:
        return self.to_bytes(layer).decode('utf-8')


def encode(layer: Layer, comment: Optional[str] = None) -> str:
    """Canonical ALSAM XML text for `layer`. Never validates; see `validate_layer()`."""
    return XMLWriter(comment).to_string(layer)
