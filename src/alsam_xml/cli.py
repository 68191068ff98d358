"""ALSAM layer XML command line tool: check, reformat, pack, unpack and export builds."""
import os
import sys
from typing import List

import click
from tqdm import tqdm

from . import __version__
from .errors import SchemaViolation
from .hdf5_io import HDF5Writer
from .load_parameters import load_config
from .scn import pack_dir, read_layers, read_scn, write_layers, write_scn
from .xml_io import encode
from .xml_reader import decode

COMMENT = "Scan file written by alsam-xml."


def _describe(kind: str, entity) -> str:
    if kind == "Header":
        return "Header (schema {}, layer {})".format(entity.AmericaMakesSchemaVersion, entity.LayerNum)
    if kind == "Trajectory":
        return "Trajectory {} ({} paths)".format(entity.TrajectoryID, len(entity.Paths))
    return "{} {}".format(kind, entity.ID)


def _print_entity(kind: str, entity):
    print("  " + _describe(kind, entity), flush=True)


def _options(options_path):
    try:
        return load_config(options_path)
    except ValueError as e:
        raise click.ClickException("Bad options file {}: {}".format(options_path, e))


def _load(source: str, options, hook=None) -> List:
    """Layers from a .scn archive, a folder of scan_<n>.xml files or a single layer file"""
    if os.path.isdir(source):
        return read_layers(source, options, hook)
    if source.lower().endswith(".scn"):
        return read_scn(source, options, hook)
    with open(source, "rb") as f:
        return [decode(f.read(), options, hook)]


@click.group()
@click.version_option(__version__)
def cli():
    """Read, check and write ALSAM layer XML files."""


@cli.command()
@click.argument("sources", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--options", "options_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON file of decode options.")
@click.option("-v", "--verbose", is_flag=True, help="Print every entity as it is decoded.")
def check(sources, options_path, verbose):
    """Decode and validate layer files, folders or .scn archives."""
    options = _options(options_path)
    failed = 0
    for source in sources:
        print("Checking " + source, flush=True)
        try:
            layers = _load(source, options, _print_entity if verbose else None)
        except SchemaViolation as e:
            failed += 1
            print("  " + str(e), flush=True)
            continue
        print("  OK: {} layer(s)".format(len(layers)), flush=True)
    if failed:
        raise click.ClickException("{} of {} source(s) invalid".format(failed, len(sources)))


@cli.command("format")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("dest", type=click.Path(dir_okay=False))
@click.option("--options", "options_path", type=click.Path(exists=True, dir_okay=False))
def format_(source, dest, options_path):
    """Rewrite one layer file in canonical form."""
    options = _options(options_path)
    try:
        with open(source, "rb") as f:
            layer = decode(f.read(), options)
    except SchemaViolation as e:
        raise click.ClickException(str(e))
    with open(dest, "w", encoding="utf-8") as f:
        f.write(encode(layer, COMMENT))
    print(dest + " was created successfully", flush=True)


@cli.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False))
@click.argument("dest", type=click.Path(dir_okay=False))
@click.option("--raw", is_flag=True, help="Zip the files as they are, without checking or reformatting.")
@click.option("--options", "options_path", type=click.Path(exists=True, dir_okay=False))
def pack(source, dest, raw, options_path):
    """Zip a folder of scan_<n>.xml files into a .scn archive."""
    if raw:
        count = pack_dir(source, dest)
    else:
        try:
            layers = read_layers(source, _options(options_path))
        except SchemaViolation as e:
            raise click.ClickException(str(e))
        count = write_scn(dest, tqdm(layers, desc="Packing", unit="layers", file=sys.stdout), COMMENT)
    print("{} was created successfully ({} layers)".format(dest, count), flush=True)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("dest", type=click.Path(file_okay=False))
@click.option("--options", "options_path", type=click.Path(exists=True, dir_okay=False))
def unpack(source, dest, options_path):
    """Check a .scn archive and write its layers to a folder."""
    try:
        layers = read_scn(source, _options(options_path))
    except SchemaViolation as e:
        raise click.ClickException(str(e))
    written = write_layers(dest, tqdm(layers, desc="Unpacking", unit="layers", file=sys.stdout), COMMENT)
    print("{} layer files written to {}".format(len(written), dest), flush=True)


@cli.command()
@click.argument("source", type=click.Path(exists=True))
@click.argument("dest", type=click.Path(dir_okay=False))
@click.option("--options", "options_path", type=click.Path(exists=True, dir_okay=False))
def hdf5(source, dest, options_path):
    """Export a build (.scn, folder or single layer) to HDF5 for simulation."""
    if not dest.lower().endswith(".hdf5"):
        raise click.BadParameter("output must be a .hdf5 file", param_hint="DEST")
    try:
        layers = _load(source, _options(options_path))
        # NOTE: file=* is b/c tqdm prints to stderr by default
        count = HDF5Writer(dest).write(tqdm(layers, desc="Writing HDF5", unit="layers", file=sys.stdout))
    except SchemaViolation as e:
        raise click.ClickException(str(e))
    print("{} was created successfully ({} layers)".format(dest, count), flush=True)
