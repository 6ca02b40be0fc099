"""Tests for dxf_exporter module."""
import os

import ezdxf
import pytest

from dxf_exporter import DXFExportConfig, result_to_dxf, sheet_to_dxf


def _polylines(doc, layer):
    return [e for e in doc.modelspace().query("LWPOLYLINE") if e.dxf.layer == layer]


class TestSheetToDXF:
    """Test single sheet DXF export."""

    def test_layers_and_entities(self, result, tmp_path):
        usage = result.sheet_usages[0]
        filepath = str(tmp_path / "sheet.dxf")
        assert sheet_to_dxf(usage, filepath) == filepath

        doc = ezdxf.readfile(filepath)
        assert len(_polylines(doc, "SHEET")) == 1
        assert len(_polylines(doc, "CUT")) == len(usage.placements)
        labels = [e.dxf.text for e in doc.modelspace().query("TEXT")]
        assert sorted(labels) == ["Floor", "Long A", "Short A"]
        assert doc.units == ezdxf.units.IN

    def test_cut_outline_matches_placement(self, result, tmp_path):
        usage = result.sheet_usages[0]
        filepath = str(tmp_path / "sheet.dxf")
        sheet_to_dxf(usage, filepath, DXFExportConfig(add_part_labels=False))

        doc = ezdxf.readfile(filepath)
        floor = usage.placements[2]
        outlines = [
            [(round(x, 3), round(y, 3)) for x, y in e.get_points("xy")]
            for e in _polylines(doc, "CUT")
        ]
        assert [(0.0, 60.0), (24.0, 60.0), (24.0, 96.0), (0.0, 96.0)] == outlines[2]
        assert (floor.x, floor.y) == (0, 60)
        assert not doc.modelspace().query("TEXT")

    def test_millimeters(self, result, tmp_path):
        filepath = str(tmp_path / "sheet_mm.dxf")
        sheet_to_dxf(result.sheet_usages[0], filepath, DXFExportConfig(units="mm"))

        doc = ezdxf.readfile(filepath)
        sheet = _polylines(doc, "SHEET")[0]
        xs = [x for x, _ in sheet.get_points("xy")]
        assert max(xs) == pytest.approx(48 * 25.4)
        assert doc.units == ezdxf.units.MM

    def test_bad_units(self, result, tmp_path):
        with pytest.raises(ValueError):
            sheet_to_dxf(result.sheet_usages[0], str(tmp_path / "x.dxf"), DXFExportConfig(units="ft"))


class TestResultToDXF:
    def test_one_file_per_sheet(self, result, tmp_path):
        out_dir = str(tmp_path / "dxf")
        paths = result_to_dxf(result, out_dir)
        assert len(paths) == 2
        for path in paths:
            assert os.path.isfile(path)
            assert os.path.getsize(path) > 0
