import os
from zipfile import ZipFile

import pytest

from alsam_xml import Reason, SchemaViolation, decode
from alsam_xml.scn import (layer_file_name, pack_dir, read_layers, read_scn, scn_members,
                           write_layers, write_scn)


@pytest.fixture
def layers(make_layer):
    return [make_layer(LayerNum=n, LayerThickness=0.03) for n in range(1, 12)]


def test_layer_file_name():
    assert layer_file_name(3) == "scan_3.xml"


def test_scn_round_trip(tmp_path, layers):
    out = str(tmp_path / "build.scn")
    assert write_scn(out, layers) == 11
    # numeric, not lexical, ordering (scan_10 after scan_9)
    assert scn_members(out)[8:] == ["scan_9.xml", "scan_10.xml", "scan_11.xml"]
    assert read_scn(out) == layers


def test_layer_dir_round_trip(tmp_path, layers):
    written = write_layers(str(tmp_path / "xml"), layers)
    assert os.path.basename(written[0]) == "scan_1.xml"
    (tmp_path / "xml" / "notes.txt").write_text("not a layer")
    assert read_layers(str(tmp_path / "xml")) == layers


def test_pack_dir_keeps_files(tmp_path, sample_xml):
    src = tmp_path / "xml"
    src.mkdir()
    (src / "scan_1.xml").write_text(sample_xml, encoding="utf-8")
    (src / "scan_2.xml").write_text(sample_xml, encoding="utf-8")
    (src / "readme.txt").write_text("skip me")
    out = str(tmp_path / "raw.scn")
    assert pack_dir(str(src), out) == 2
    with ZipFile(out) as z:
        assert sorted(z.namelist()) == ["scan_1.xml", "scan_2.xml"]
        assert z.read("scan_1.xml").decode("utf-8") == sample_xml
    assert read_scn(out) == [decode(sample_xml)] * 2


def test_invalid_member_is_named(tmp_path, sample_xml):
    out = str(tmp_path / "bad.scn")
    with ZipFile(out, "w") as z:
        z.writestr("scan_1.xml", sample_xml)
        z.writestr("scan_2.xml", sample_xml.replace("<Mode>Delay</Mode>", "<Mode>Fast</Mode>"))
    with pytest.raises(SchemaViolation) as e:
        read_scn(out)
    assert e.value.reason is Reason.InvalidEnumValue
    assert e.value.path.startswith("scan_2.xml:VelocityProfileList")
