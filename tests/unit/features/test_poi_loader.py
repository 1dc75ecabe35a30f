"""
대피소 데이터 로더 단위 테스트
"""

import pytest
import openpyxl
from escape.core.models import HazardType
from escape.features.poi_loader import load_points_of_interest


CSV_CONTENT = """id,name,latitude,longitude,address,is_earthquake,is_flood
s1,중앙공원,35.6812,139.7671,도쿄,1,0
s2,시민회관,35.6900,139.7000,,0,1
,,,,,,
s3,잘못된 좌표,north,139.7,,1,1
s1,중복,35.0,139.0,,1,1
"""


class TestCsvLoader:
    """CSV 로드 테스트"""

    def test_load_csv(self, tmp_path):
        path = tmp_path / "shelters.csv"
        path.write_text(CSV_CONTENT, encoding="utf-8")

        points = load_points_of_interest(str(path))

        # 빈 행, 잘못된 좌표, 중복 id는 건너뜀
        assert [p.id for p in points] == ["s1", "s2"]
        assert points[0].address == "도쿄"
        assert points[0].hazard_support == {HazardType.EARTHQUAKE}
        assert points[1].hazard_support == {HazardType.FLOOD}

    def test_missing_required_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("id,name,latitude\ns1,A,35.0\n", encoding="utf-8")

        with pytest.raises(ValueError, match="longitude"):
            load_points_of_interest(str(path))

    def test_missing_id_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("name,latitude,longitude\nA,35.0,139.0\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_points_of_interest(str(path))


class TestExcelLoader:
    """엑셀 로드 테스트"""

    def test_load_xlsx(self, tmp_path):
        path = tmp_path / "shelters.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["common_id", "name", "latitude", "longitude", "is_tsunami"])
        ws.append([101, "해안 대피소", 35.3, 139.5, 1])
        ws.append([102, "고지대", 35.4, 139.6, 0])
        wb.save(path)

        points = load_points_of_interest(str(path))

        assert [p.id for p in points] == ["101", "102"]
        assert points[0].supports(HazardType.TSUNAMI)
        assert not points[1].supports(HazardType.TSUNAMI)


def test_unsupported_extension(tmp_path):
    path = tmp_path / "shelters.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_points_of_interest(str(path))
