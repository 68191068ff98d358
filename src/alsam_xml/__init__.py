"""
Reads and writes ALSAM (America Makes) laser scan layer XML, as of schema 2020-03-23.

    layer = decode(text)        # validated Layer, or SchemaViolation
    text = encode(layer)        # canonical XML, no validation
    validate_layer(layer)       # decoder's checks on a hand-built layer
"""
__version__ = "0.2.0"

from .errors import Reason, SchemaViolation
from .load_parameters import DecodeOptions, default_config, load_config, parse_config
from .validation import validate_layer
from .xml_config import (Header, Layer, Path, Segment, SegmentStyle, Trajectory, Traveler,
                         VelocityProfile, Wobble)
from .xml_io import XMLWriter, encode
from .xml_reader import DecodeResult, XMLReader, decode, try_decode
