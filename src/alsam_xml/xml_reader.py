"""
Reads ALSAM layer XML into a validated `Layer`.

Decoding is fail-fast and all-or-nothing: the first field that breaks a rule raises
`SchemaViolation` and no partial layer is returned.
"""
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from lxml import etree

from . import rules
from .errors import Reason, SchemaViolation
from .load_parameters import REJECT, DecodeOptions, default_config
from .rules import read_field, read_fields
from .validation import check_references, check_segment_count
from .xml_config import (Header, Layer, Path, Segment, SegmentStyle, Trajectory, Traveler,
                         VelocityProfile, Wobble)

# Called as on_entity(kind, entity) for each Header, VelocityProfile, SegmentStyle and
# Trajectory once it has been validated, in document order
EntityHook = Callable[[str, Any], None]


class DecodeResult(NamedTuple):
    layer : Optional[Layer]
    error : Optional[SchemaViolation]

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_document(text: Union[str, bytes]) -> etree._Element:
    """Parses the markup and returns its <Layer> root element.

    Bytes are decoded as their XML declaration says. Text is already decoded, so any
    encoding it declares is ignored.
    """
    encoding = None
    if isinstance(text, str):
        # lxml refuses str input that carries an encoding declaration
        text = text.encode("utf-8")
        encoding = "utf-8"
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True,
                             encoding=encoding)
    try:
        root = etree.fromstring(text, parser)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise SchemaViolation("Layer", Reason.MalformedDocument, detail=str(e)) from None
    if root.tag != "Layer":
        raise SchemaViolation("Layer", Reason.MalformedDocument, root.tag, detail="root element must be <Layer>")
    return root


class XMLReader():

    def __init__(self, options: Optional[DecodeOptions] = None, on_entity: Optional[EntityHook] = None):
        self.options = options or default_config()
        self.on_entity = on_entity

    def _emit(self, kind: str, entity):
        if self.on_entity is not None:
            self.on_entity(kind, entity)

    def _insert(self, table: Dict[str, Any], entity, where: str, field: str):
        if entity.ID in table and self.options.duplicate_ids == REJECT:
            raise SchemaViolation(where + ".ID", Reason.DuplicateID, entity.ID, field)
        # last-wins otherwise
        table[entity.ID] = entity

    def load_header(self, root: etree._Element) -> Header:
        h = root.find("Header")
        if h is None:
            raise SchemaViolation("Layer.Header", Reason.MissingMandatoryField, field="Layer.Header")
        header = Header(**read_fields(h, rules.HEADER, "Header"))
        self._emit("Header", header)
        return header

    def load_velocity_profiles(self, root: etree._Element) -> Dict[str, VelocityProfile]:
        profiles = {}
        for i, node in enumerate(root.findall("VelocityProfileList/VelocityProfile")):
            where = "VelocityProfileList.VelocityProfile[{}]".format(i)
            profile = VelocityProfile(**read_fields(node, rules.VELOCITY_PROFILE, where))
            self._insert(profiles, profile, where, "VelocityProfile.ID")
            self._emit("VelocityProfile", profile)
        return profiles

    def load_traveler(self, node: etree._Element, where: str) -> Traveler:
        values = read_fields(node, rules.TRAVELER, where)
        wobbles = node.findall("Wobble")
        if len(wobbles) > 1:
            raise SchemaViolation(where + ".Wobble", Reason.MalformedDocument, len(wobbles),
                                  "Traveler.Wobble", "a traveler has at most one Wobble")
        wobble = None
        if wobbles:
            # Once the tag is there, all of its fields are mandatory
            wobble = Wobble(**read_fields(wobbles[0], rules.WOBBLE, where + ".Wobble"))
        return Traveler(Wobble=wobble, **values)

    def load_segment_styles(self, root: etree._Element) -> Dict[str, SegmentStyle]:
        styles = {}
        for i, node in enumerate(root.findall("SegmentStyleList/SegmentStyle")):
            where = "SegmentStyleList.SegmentStyle[{}]".format(i)
            values = read_fields(node, rules.SEGMENT_STYLE, where)
            travelers = [self.load_traveler(t, "{}.Traveler[{}]".format(where, j))
                         for j, t in enumerate(node.findall("Traveler"))]

            # Required if a Traveler exists (i.e. not a jump style), never read otherwise
            laser_mode = None
            if travelers:
                try:
                    laser_mode = read_field(node, rules.LASER_MODE, where)
                except SchemaViolation as e:
                    if e.reason not in (Reason.MissingMandatoryField, Reason.EmptyField):
                        raise
                    raise SchemaViolation(e.path, Reason.ConditionalFieldMissing, field=e.field,
                                          detail="LaserMode is required when the style has travelers") from None

            style = SegmentStyle(Travelers=travelers, LaserMode=laser_mode, **values)
            self._insert(styles, style, where, "SegmentStyle.ID")
            self._emit("SegmentStyle", style)
        return styles

    def load_path(self, node: etree._Element, where: str) -> Path:
        values = read_fields(node, rules.PATH, where)
        segments: List[Segment] = []

        segment_nodes = node.findall("Segment")
        if segment_nodes:
            start = node.find("Start")
            if start is None:
                raise SchemaViolation(where + ".Start", Reason.MissingMandatoryField, field="Path.Start")
            # First segment goes from <Start> to the first endpoint, each later one from
            # the previous endpoint, so segments must be read strictly in document order
            x = read_field(start, rules.START_X, where + ".Start")
            y = read_field(start, rules.START_Y, where + ".Start")
            for k, segment_node in enumerate(segment_nodes):
                fields = read_fields(segment_node, rules.SEGMENT, "{}.Segment[{}]".format(where, k))
                segment = Segment(X1=x, Y1=y, **fields)
                segments.append(segment)
                x, y = segment.X2, segment.Y2

        path = Path(Segments=segments, **values)
        if self.options.check_num_segments:
            check_segment_count(path, where)
        return path

    def load_trajectories(self, root: etree._Element) -> List[Trajectory]:
        trajectories = []
        for i, node in enumerate(root.findall("TrajectoryList/Trajectory")):
            where = "TrajectoryList.Trajectory[{}]".format(i)
            values = read_fields(node, rules.TRAJECTORY, where)
            paths = [self.load_path(p, "{}.Path[{}]".format(where, j))
                     for j, p in enumerate(node.findall("Path"))]
            trajectory = Trajectory(Paths=paths, **values)
            self._emit("Trajectory", trajectory)
            trajectories.append(trajectory)
        return trajectories

    def read_element(self, root: etree._Element) -> Layer:
        loaders = {
            "Header": self.load_header,
            "VelocityProfileList": self.load_velocity_profiles,
            "SegmentStyleList": self.load_segment_styles,
            "TrajectoryList": self.load_trajectories,
        }
        # Sections are decoded in the order the document first lists them; absent ones
        # come last (empty lists, or MissingMandatoryField for the header)
        order = []
        for child in root:
            if child.tag in loaders and child.tag not in order:
                order.append(child.tag)
        order += [tag for tag in loaders if tag not in order]
        sections = {tag: loaders[tag](root) for tag in order}

        layer = Layer(
            Header=sections["Header"],
            VelocityProfiles=sections["VelocityProfileList"],
            SegmentStyles=sections["SegmentStyleList"],
            Trajectories=sections["TrajectoryList"],
        )
        if self.options.check_references:
            check_references(layer)
        return layer

    def read(self, text: Union[str, bytes]) -> Layer:
        return self.read_element(parse_document(text))


def decode(text: Union[str, bytes], options: Optional[DecodeOptions] = None,
           on_entity: Optional[EntityHook] = None) -> Layer:
    """Decodes one layer document.

    :param text: the XML document, as text or UTF-8 bytes
    :param options: duplicate-ID policy and optional cross-checks
    :param on_entity: observer called with each validated entity
    :raises SchemaViolation: on the first broken rule
    :return: the validated layer
    """
    return XMLReader(options, on_entity).read(text)


def try_decode(text: Union[str, bytes], options: Optional[DecodeOptions] = None,
               on_entity: Optional[EntityHook] = None) -> DecodeResult:
    """Like `decode()`, but returns the violation instead of raising it"""
    try:
        return DecodeResult(decode(text, options, on_entity), None)
    except SchemaViolation as e:
        return DecodeResult(None, e)
