"""
Layer validation
================

Provides:

1. The structural checks shared with the decoder: segment counts (`check_segment_count()`)
   and referential integrity (`check_references()`).
2. `validate_layer()`, a dry run of every decoder check on a model that was built by
   hand, to be used before encoding it.

Every field check goes through the rule table (`rules.check_value()`), the same rules the
decoder applies while reading.
"""

# Standard Library Imports
from typing import Optional

# Local Imports
from . import rules
from .errors import Reason, SchemaViolation
from .load_parameters import DecodeOptions, default_config
from .rules import check_value
from .xml_config import Layer, Path, SegmentStyle


def check_segment_count(path: Path, where: str):
    """Raises SegmentCountMismatch unless `path.NumSegments` equals its number of segments."""
    if path.NumSegments != len(path.Segments):
        raise SchemaViolation(where + ".NumSegments", Reason.SegmentCountMismatch, path.NumSegments,
                              "Path.NumSegments", "path has {} segments".format(len(path.Segments)))


def check_references(layer: Layer):
    """Every style must name an existing velocity profile, and every segment an existing style.

    :raises SchemaViolation: UnknownReference on the first dangling ID
    """
    for i, style in enumerate(layer.SegmentStyles.values()):
        if style.VelocityProfileID not in layer.VelocityProfiles:
            raise SchemaViolation("SegmentStyleList.SegmentStyle[{}].VelocityProfileID".format(i),
                                  Reason.UnknownReference, style.VelocityProfileID,
                                  "SegmentStyle.VelocityProfileID")
    for i, trajectory in enumerate(layer.Trajectories):
        for j, path in enumerate(trajectory.Paths):
            for k, segment in enumerate(path.Segments):
                if segment.SegStyle not in layer.SegmentStyles:
                    raise SchemaViolation(
                        "TrajectoryList.Trajectory[{}].Path[{}].Segment[{}].SegStyle".format(i, j, k),
                        Reason.UnknownReference, segment.SegStyle, "Segment.SegStyle")


def _check_entity(entity, entity_rules, where: str):
    for rule in entity_rules:
        check_value(getattr(entity, rule.name), rule, where)


def _check_segment_style(style: SegmentStyle, where: str):
    _check_entity(style, rules.SEGMENT_STYLE, where)
    for j, traveler in enumerate(style.Travelers):
        traveler_where = "{}.Traveler[{}]".format(where, j)
        _check_entity(traveler, rules.TRAVELER, traveler_where)
        if traveler.Wobble is not None:
            _check_entity(traveler.Wobble, rules.WOBBLE, traveler_where + ".Wobble")

    if style.Travelers:
        if style.LaserMode is None:
            raise SchemaViolation(where + ".LaserMode", Reason.ConditionalFieldMissing,
                                  field=rules.LASER_MODE.field,
                                  detail="LaserMode is required when the style has travelers")
        check_value(style.LaserMode, rules.LASER_MODE, where)
    elif style.LaserMode is not None:
        # Would be dropped on decode, as jump styles have no laser mode
        raise SchemaViolation(where + ".LaserMode", Reason.UnexpectedField, style.LaserMode,
                              rules.LASER_MODE.field, "jump styles (no travelers) have no LaserMode")


def _check_path(path: Path, where: str, options: DecodeOptions):
    _check_entity(path, rules.PATH, where)
    previous = None
    for k, segment in enumerate(path.Segments):
        segment_where = "{}.Segment[{}]".format(where, k)
        if previous is None:
            check_value(segment.X1, rules.START_X, where + ".Start")
            check_value(segment.Y1, rules.START_Y, where + ".Start")
        elif segment.start != previous.end:
            raise SchemaViolation(segment_where, Reason.DiscontinuousPath, segment.start, "Segment",
                                  "previous segment ended at {}".format(previous.end))
        _check_entity(segment, rules.SEGMENT, segment_where)
        previous = segment
    if options.check_num_segments:
        check_segment_count(path, where)


def validate_layer(layer: Layer, options: Optional[DecodeOptions] = None) -> Layer:
    """Checks a hand-built layer against everything `decode()` would enforce.

    A layer that passes encodes to text that decodes back to an equal layer.

    :param layer: the layer to check
    :type layer: Layer
    :param options: the same options the layer will later be decoded with
    :type options: DecodeOptions
    :raises SchemaViolation: on the first violation found
    :return: `layer`, unchanged
    :rtype: Layer
    """
    options = options or default_config()

    if layer.Header is None:
        raise SchemaViolation("Layer.Header", Reason.MissingMandatoryField, field="Layer.Header")
    _check_entity(layer.Header, rules.HEADER, "Header")

    for i, (key, profile) in enumerate(layer.VelocityProfiles.items()):
        where = "VelocityProfileList.VelocityProfile[{}]".format(i)
        _check_entity(profile, rules.VELOCITY_PROFILE, where)
        if profile.ID != key:
            raise SchemaViolation(where + ".ID", Reason.DuplicateID, profile.ID, "VelocityProfile.ID",
                                  "stored under key {!r}".format(key))

    for i, (key, style) in enumerate(layer.SegmentStyles.items()):
        where = "SegmentStyleList.SegmentStyle[{}]".format(i)
        _check_segment_style(style, where)
        if style.ID != key:
            raise SchemaViolation(where + ".ID", Reason.DuplicateID, style.ID, "SegmentStyle.ID",
                                  "stored under key {!r}".format(key))

    for i, trajectory in enumerate(layer.Trajectories):
        where = "TrajectoryList.Trajectory[{}]".format(i)
        _check_entity(trajectory, rules.TRAJECTORY, where)
        for j, path in enumerate(trajectory.Paths):
            _check_path(path, "{}.Path[{}]".format(where, j), options)

    if options.check_references:
        check_references(layer)
    return layer
