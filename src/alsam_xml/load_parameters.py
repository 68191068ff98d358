# Handles creating the decode options object from defaults or a JSON file
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

REJECT = "reject"
LAST_WINS = "last-wins"


@dataclass(frozen=True)
class DecodeOptions():
    duplicate_ids : str = REJECT # reject or last-wins, for VelocityProfile/SegmentStyle IDs
    check_num_segments : bool = True # Path.NumSegments must equal the number of segments
    check_references : bool = True # styles and profiles referenced must exist


# Our standardized source of option fields; "name" is what appears in options files
SCHEMA = [
    {"name": "Duplicate IDs", "key": "duplicate_ids", "type": "str", "default": REJECT,
     "choices": [REJECT, LAST_WINS]},
    {"name": "Check Segment Count", "key": "check_num_segments", "type": "bool", "default": "Yes"},
    {"name": "Check References", "key": "check_references", "type": "bool", "default": "Yes"},
]


def default_config() -> DecodeOptions:
    return parse_config({})


def parse_config(config: Dict[str, Any]) -> DecodeOptions:
    """Parses everything into the data type specified in the schema, filling in defaults.

    Keys may be either the display name ("Check References") or the attribute name
    ("check_references").

    :raises ValueError: on an unknown key or a value that doesn't parse
    """
    known = {}
    for attribute in SCHEMA:
        known[attribute["name"]] = attribute
        known[attribute["key"]] = attribute
    unknown = [k for k in config if k not in known]
    if unknown:
        raise ValueError("Unknown option(s): {}".format(", ".join(sorted(unknown))))

    values = {}
    for attribute in SCHEMA:
        if attribute["name"] in config:
            raw = config[attribute["name"]]
        else:
            raw = config.get(attribute["key"], attribute["default"])
        value = get_value_of_attribute(raw, attribute["type"])
        if "choices" in attribute and value not in attribute["choices"]:
            raise ValueError("Option {} must be one of {}, got {!r}".format(
                attribute["name"], attribute["choices"], value))
        values[attribute["key"]] = value
    return DecodeOptions(**values)


def load_config(path: Optional[str]) -> DecodeOptions:
    if path is None:
        return default_config()
    with open(path, "r") as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError("Options file {} must hold a JSON object".format(path))
    return parse_config(config)


# Provided a value (possibly stringified) and a data type for it, correctly parse it
def get_value_of_attribute(value, data_type):
    if data_type == "int":
        return int(value)
    elif data_type == "float":
        return float(value)
    elif data_type == "bool":
        if isinstance(value, bool):
            return value
        if value in ("Yes", "No"):
            return value == "Yes"
        raise ValueError("Expected Yes/No or a boolean, got {!r}".format(value))
    else:
        return str(value)
