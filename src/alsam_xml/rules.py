"""
Validation rule table

Every field of the layer schema has exactly one ``Rule``: its tag, kind,
whether it is required, and its numeric bound, allowed values or date format.
The decoder reads fields through ``read_field()`` and the layer validator checks
model values through ``check_value()``; both go through ``Rule.check()`` so the
two sides cannot disagree.

Enumerated values are case-sensitive and use the casing listed here.
"""
import math
import numbers
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from lxml import etree

from .errors import Reason, SchemaViolation
from .fields import Kind, mandatory, optional

DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
# Characters outside the XML 1.0 Char production; lxml refuses to serialize them
NON_XML_CHAR_RE = re.compile(r"[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")

VELOCITY_MODES = ("Delay", "Auto")
LASER_MODES = ("Independent", "FollowMe")
PATH_PROCESSING_MODES = ("sequential", "concurrent")
PATH_TYPES = ("hatch", "contour")
SKY_WRITING_MODES = (0, 1, 2, 3)
WOBBLE_ON = (0, 1)
WOBBLE_SHAPES = (-1, 0, 1)


@dataclass(frozen=True)
class Rule():
    entity : str
    tag : str # child element path, relative to the entity's element
    kind : Kind
    required : bool = True
    minimum : Optional[float] = None
    exclusive : bool = False # True means value > minimum, else value >= minimum
    choices : Optional[Tuple] = None
    date : bool = False
    attr : Optional[str] = None # model attribute when it differs from the tag

    @property
    def name(self) -> str:
        return self.attr or self.tag

    @property
    def field(self) -> str:
        return self.entity + "." + self.tag.replace("/", ".")

    def check(self, value: Any, path: Optional[str] = None) -> Any:
        """Applies the bound/enum/date constraints to a present, typed value."""
        path = path or self.field
        if self.choices is not None and value not in self.choices:
            raise SchemaViolation(path, Reason.InvalidEnumValue, value, self.field,
                                  "must be one of {}".format(", ".join(repr(c) for c in self.choices)))
        if self.minimum is not None:
            ok = value > self.minimum if self.exclusive else value >= self.minimum
            if not ok:
                raise SchemaViolation(path, Reason.OutOfRange, value, self.field,
                                      "must be {} {}".format(">" if self.exclusive else ">=", self.minimum))
        if self.date:
            if not DATE_RE.match(value):
                raise SchemaViolation(path, Reason.MalformedDate, value, self.field)
            try:
                datetime.strptime(value, "%Y-%m-%d")
            except ValueError:
                raise SchemaViolation(path, Reason.MalformedDate, value, self.field,
                                      "not a calendar date") from None
        return value


HEADER = [
    Rule("Header", "AmericaMakesSchemaVersion", Kind.TEXT, date=True),
    Rule("Header", "LayerNum", Kind.INTEGER, required=False, minimum=0),
    Rule("Header", "LayerThickness", Kind.FLOAT, minimum=0, exclusive=True),
    Rule("Header", "AbsoluteHeight", Kind.FLOAT, required=False, minimum=0, exclusive=True),
    Rule("Header", "DosingFactor", Kind.FLOAT, required=False, minimum=0, exclusive=True),
    Rule("Header", "BuildDescription", Kind.TEXT, required=False),
]

VELOCITY_PROFILE = [
    Rule("VelocityProfile", "ID", Kind.TEXT),
    Rule("VelocityProfile", "Velocity", Kind.FLOAT, minimum=0, exclusive=True),
    Rule("VelocityProfile", "Mode", Kind.TEXT, choices=VELOCITY_MODES),
    # microseconds
    Rule("VelocityProfile", "LaserOnDelay", Kind.FLOAT),
    Rule("VelocityProfile", "LaserOffDelay", Kind.FLOAT),
    Rule("VelocityProfile", "JumpDelay", Kind.FLOAT),
    Rule("VelocityProfile", "MarkDelay", Kind.FLOAT),
    Rule("VelocityProfile", "PolygonDelay", Kind.FLOAT),
]

SEGMENT_STYLE = [
    Rule("SegmentStyle", "ID", Kind.TEXT),
    Rule("SegmentStyle", "VelocityProfileID", Kind.TEXT),
]

# Required only when the style has travelers; not in SEGMENT_STYLE for that reason
LASER_MODE = Rule("SegmentStyle", "LaserMode", Kind.TEXT, choices=LASER_MODES)

TRAVELER = [
    Rule("Traveler", "ID", Kind.INTEGER, minimum=0),
    Rule("Traveler", "SyncDelay", Kind.INTEGER, required=False),
    Rule("Traveler", "Power", Kind.FLOAT, minimum=0),
    Rule("Traveler", "SpotSize", Kind.FLOAT, required=False),
]

WOBBLE = [
    Rule("Wobble", "On", Kind.INTEGER, choices=WOBBLE_ON),
    Rule("Wobble", "Freq", Kind.INTEGER, minimum=0),
    Rule("Wobble", "Shape", Kind.INTEGER, choices=WOBBLE_SHAPES),
    Rule("Wobble", "TransAmp", Kind.FLOAT),
    Rule("Wobble", "LongAmp", Kind.FLOAT),
]

TRAJECTORY = [
    Rule("Trajectory", "TrajectoryID", Kind.TEXT),
    Rule("Trajectory", "PathProcessingMode", Kind.TEXT, choices=PATH_PROCESSING_MODES),
]

PATH = [
    Rule("Path", "Type", Kind.TEXT, choices=PATH_TYPES),
    Rule("Path", "Tag", Kind.TEXT),
    Rule("Path", "NumSegments", Kind.INTEGER, minimum=0),
    Rule("Path", "SkyWritingMode", Kind.INTEGER, choices=SKY_WRITING_MODES),
]

START_X = Rule("Start", "X", Kind.FLOAT, attr="X1")
START_Y = Rule("Start", "Y", Kind.FLOAT, attr="Y1")

SEGMENT = [
    Rule("Segment", "SegmentID", Kind.TEXT, required=False),
    Rule("Segment", "SegStyle", Kind.TEXT),
    Rule("Segment", "End/X", Kind.FLOAT, attr="X2"),
    Rule("Segment", "End/Y", Kind.FLOAT, attr="Y2"),
]

RULES: Dict[Tuple[str, str], Rule] = {
    (rule.entity, rule.tag): rule
    for group in (HEADER, VELOCITY_PROFILE, SEGMENT_STYLE, [LASER_MODE], TRAVELER,
                  WOBBLE, TRAJECTORY, PATH, [START_X, START_Y], SEGMENT)
    for rule in group
}


def read_field(node: etree._Element, rule: Rule, where: Optional[str] = None) -> Any:
    """Reads one field of `node` and applies its rule.

    :param node: the entity's element
    :param rule: the field's rule
    :param where: qualified location of `node`, prefixed to the field's tag in errors
    :return: the coerced value, or None for an absent optional field
    """
    path = "{}.{}".format(where, rule.tag.replace("/", ".")) if where else rule.field
    try:
        if rule.required:
            value = mandatory(node, rule.tag, rule.kind, path)
        else:
            value = optional(node, rule.tag, rule.kind, path)
    except SchemaViolation as e:
        e.field = rule.field
        raise
    if value is None:
        return None
    return rule.check(value, path)


def read_fields(node: etree._Element, rules: List[Rule], where: Optional[str] = None) -> Dict[str, Any]:
    """Reads every field in `rules`, keyed by model attribute name."""
    return {rule.name: read_field(node, rule, where) for rule in rules}


def _type_ok(value: Any, kind: Kind) -> bool:
    if isinstance(value, bool):
        return False
    if kind is Kind.INTEGER:
        return isinstance(value, numbers.Integral)
    if kind is Kind.FLOAT:
        return isinstance(value, numbers.Real) and math.isfinite(value)
    return isinstance(value, str)


def check_value(value: Any, rule: Rule, where: Optional[str] = None) -> Any:
    """Model-side counterpart of ``read_field()``, used on hand-built layers."""
    path = "{}.{}".format(where, rule.name) if where else rule.field
    if value is None:
        if rule.required:
            raise SchemaViolation(path, Reason.MissingMandatoryField, field=rule.field)
        return None
    if not _type_ok(value, rule.kind):
        raise SchemaViolation(path, Reason.TypeMismatch, value, rule.field,
                              "must be {}".format(rule.kind.value))
    if rule.kind is Kind.TEXT:
        if not value.strip():
            raise SchemaViolation(path, Reason.EmptyField, value, rule.field)
        bad = NON_XML_CHAR_RE.search(value)
        if bad:
            raise SchemaViolation(path, Reason.TypeMismatch, value, rule.field,
                                  "character {!r} cannot be written to XML".format(bad.group()))
    return rule.check(value, path)
