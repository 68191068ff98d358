"""
Layer files and .scn archives

A build is a folder of ``scan_<n>.xml`` layer files, or the same files zipped into a
``.scn`` archive. Layer files are numbered from 1 in firing order.
"""
import os
import re
from typing import Iterable, List, Optional
from zipfile import ZIP_DEFLATED, ZipFile

from .errors import SchemaViolation
from .load_parameters import DecodeOptions
from .xml_config import Layer
from .xml_io import XMLWriter
from .xml_reader import XMLReader

LAYER_FILE_RE = re.compile(r"^scan_([0-9]+)\.xml$")


def layer_file_name(layer_num: int) -> str:
    return 'scan_' + str(layer_num) + '.xml'


def _ordered_members(names: Iterable[str]) -> List[str]:
    """Layer file names sorted by layer number; anything else is ignored"""
    numbered = []
    for name in names:
        m = LAYER_FILE_RE.match(os.path.basename(name))
        if m:
            numbered.append((int(m.group(1)), name))
    return [name for _, name in sorted(numbered)]


def write_layers(out_dir: str, layers: Iterable[Layer], comment: Optional[str] = None) -> List[str]:
    """Writes one XML file per layer, creating `out_dir` if needed.

    :return: the written file paths, in layer order
    """
    os.makedirs(out_dir, exist_ok=True)
    writer = XMLWriter(comment)
    written = []
    for i, layer in enumerate(layers):
        file_path = os.path.join(out_dir, layer_file_name(i + 1))
        with open(file_path, 'wb') as f:
            f.write(writer.to_bytes(layer))
        written.append(file_path)
    return written


def read_layers(in_dir: str, options: Optional[DecodeOptions] = None, on_entity=None) -> List[Layer]:
    reader = XMLReader(options, on_entity)
    layers = []
    for name in _ordered_members(os.listdir(in_dir)):
        with open(os.path.join(in_dir, name), 'rb') as f:
            text = f.read()
        try:
            layers.append(reader.read(text))
        except SchemaViolation as e:
            raise e.within(name) from None
    return layers


def write_scn(out_path: str, layers: Iterable[Layer], comment: Optional[str] = None) -> int:
    """Zips the layers into a .scn archive.

    :return: number of layers written
    """
    writer = XMLWriter(comment)
    count = 0
    with ZipFile(out_path, 'w', ZIP_DEFLATED) as zip_file:
        for i, layer in enumerate(layers):
            zip_file.writestr(layer_file_name(i + 1), writer.to_bytes(layer))
            count += 1
    return count


def pack_dir(in_dir: str, out_path: str) -> int:
    """Zips the scan_<n>.xml files of a folder as they are, without decoding them"""
    members = _ordered_members(os.listdir(in_dir))
    with ZipFile(out_path, 'w', ZIP_DEFLATED) as zip_file:
        for name in members:
            zip_file.write(os.path.join(in_dir, name), os.path.basename(name))
    return len(members)


def scn_members(in_path: str) -> List[str]:
    with ZipFile(in_path, 'r') as zip_file:
        return _ordered_members(zip_file.namelist())


def read_scn(in_path: str, options: Optional[DecodeOptions] = None, on_entity=None) -> List[Layer]:
    """Decodes every layer of a .scn archive, in layer order.

    :raises SchemaViolation: on the first invalid layer
    """
    reader = XMLReader(options, on_entity)
    layers = []
    with ZipFile(in_path, 'r') as zip_file:
        for name in _ordered_members(zip_file.namelist()):
            try:
                layers.append(reader.read(zip_file.read(name)))
            except SchemaViolation as e:
                raise e.within(name) from None
    return layers
