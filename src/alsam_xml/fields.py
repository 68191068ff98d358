"""
Field Accessors
===============

Mandatory/optional readers for the text of a child element, with lexical
validation and coercion to the field's kind.

``optional()`` returns ``None`` when the field is absent (missing tag or empty
text). Callers must treat ``None`` as "absent", never as zero.
"""

# Standard Library Imports
import math
import re
from enum import Enum
from typing import Optional, Union

# Third-Party Imports
from lxml import etree

# Local Imports
from .errors import Reason, SchemaViolation

# Integers are deliberately strict: "1.0" is not an integer even though it is integral
INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
# Also matches integers, as integers are also floats
FLOAT_RE = re.compile(r"^[+-]?([0-9]*[.])?[0-9]+$")

Value = Union[str, int, float]


class Kind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"


def coerce(text: str, kind: Kind, path: str) -> Value:
    """Checks `text` against the lexical form of `kind` and converts it.

    Text fields are returned untouched; numbers may carry surrounding whitespace.

    :param text: raw element text
    :type text: str
    :param kind: target kind
    :type kind: Kind
    :param path: field location used in the error
    :type path: str
    :raises SchemaViolation: TypeMismatch if the text is not of the right form
    :return: the coerced value
    """
    if kind is not Kind.TEXT:
        text = text.strip()
    if kind is Kind.INTEGER:
        if not INTEGER_RE.match(text):
            raise SchemaViolation(path, Reason.TypeMismatch, text, detail="must be an integer")
        return int(text)
    if kind is Kind.FLOAT:
        if not FLOAT_RE.match(text):
            raise SchemaViolation(path, Reason.TypeMismatch, text, detail="must be a real number")
        value = float(text)
        # Long enough digit runs overflow to inf, which cannot be written back
        if not math.isfinite(value):
            raise SchemaViolation(path, Reason.TypeMismatch, text, detail="must be a finite real number")
        return value
    return text


def _text_of(node: etree._Element, name: str) -> Optional[str]:
    child = node.find(name)
    if child is None:
        return None
    # Whitespace-only text counts as empty
    if not child.text or not child.text.strip():
        return ""
    return child.text


def optional(node: etree._Element, name: str, kind: Kind = Kind.TEXT,
             path: Optional[str] = None) -> Optional[Value]:
    """Reads an optional field; ``None`` if the tag is missing or empty."""
    text = _text_of(node, name)
    if not text:
        return None
    return coerce(text, kind, path or name)


def mandatory(node: etree._Element, name: str, kind: Kind = Kind.TEXT,
              path: Optional[str] = None) -> Value:
    """Reads a mandatory field.

    :raises SchemaViolation: MissingMandatoryField if there is no such tag,
        EmptyField if the tag has no text, TypeMismatch if the text is malformed
    """
    path = path or name
    text = _text_of(node, name)
    if text is None:
        raise SchemaViolation(path, Reason.MissingMandatoryField)
    if not text:
        raise SchemaViolation(path, Reason.EmptyField)
    return coerce(text, kind, path)
