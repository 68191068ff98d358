"""
Schema violation raised by the decoder and the layer validator
"""
from enum import Enum
from typing import Any, Optional


class Reason(Enum):
    MissingMandatoryField = "mandatory field missing"
    EmptyField = "field is empty"
    TypeMismatch = "type mismatch"
    OutOfRange = "value out of range"
    InvalidEnumValue = "value not in allowed set"
    ConditionalFieldMissing = "conditionally required field missing"
    MalformedDate = "date must be in YYYY-MM-DD format"
    MalformedDocument = "malformed document"
    DuplicateID = "duplicate ID"
    UnknownReference = "reference to unknown ID"
    SegmentCountMismatch = "NumSegments does not match segment count"
    DiscontinuousPath = "segment does not start where the previous one ended"
    UnexpectedField = "field not allowed here"


class SchemaViolation(Exception):
    """Raised on the first field that breaks the layer schema.

    :param path: location of the offending field, e.g.
        ``TrajectoryList.Trajectory[0].Path[1].Segment[3].X``
    :param reason: what went wrong
    :param value: the offending raw or model value, if there was one
    :param field: rule table name of the field (``Entity.Field``); defaults to ``path``
    :param detail: free text appended to the message
    """

    def __init__(self, path: str, reason: Reason, value: Any = None,
                 field: Optional[str] = None, detail: Optional[str] = None):
        self.path = path
        self.reason = reason
        self.value = value
        self.field = field if field is not None else path
        self.detail = detail
        super().__init__(self._message())

    def _message(self) -> str:
        msg = "INVALID SCHEMA: {}: {}".format(self.path, self.reason.value)
        if self.value is not None:
            msg += " (got {!r})".format(self.value)
        if self.detail:
            msg += "; " + self.detail
        return msg

    def within(self, source: str) -> "SchemaViolation":
        """Same violation, located inside `source` (e.g. a layer file name)"""
        return SchemaViolation("{}:{}".format(source, self.path), self.reason, self.value,
                               self.field, self.detail)
