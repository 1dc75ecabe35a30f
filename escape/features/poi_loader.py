"""
Point of interest loading for the escape mission engine.

This module loads shelter snapshots from CSV or Excel exports of
the shelter table and converts them into PointOfInterest models.
"""

import os
import csv
from typing import Any, Dict, Iterable, List
import openpyxl
from escape.core.models import PointOfInterest
from escape.core.normalize import to_point_of_interest
from escape.observability.logging_setup import get_logger

log = get_logger("escape.poi_loader")

def _convert_rows(rows: Iterable[Dict[str, Any]], first_row: int) -> List[PointOfInterest]:
    points: List[PointOfInterest] = []
    seen = set()

    for row_num, row in enumerate(rows, start=first_row):
        # 빈 행 건너뛰기
        if not any(v not in (None, "") for v in row.values()):
            continue

        try:
            poi = to_point_of_interest(row)
        except ValueError as e:
            log.warning(f"행 {row_num} 데이터 변환 오류 건너뜀 error:{e}")
            continue

        if poi.id in seen:
            log.warning(f"행 {row_num} 중복 id 건너뜀 id:{poi.id}")
            continue

        seen.add(poi.id)
        points.append(poi)

    return points

def load_points_of_interest(path: str) -> List[PointOfInterest]:
    """
    대피소 데이터를 파일에서 로드합니다.

    Args:
        path: .csv 또는 .xlsx/.xls 파일 경로

    Returns:
        파일 순서를 유지한 관심 지점 목록

    Raises:
        ValueError: 지원하지 않는 파일 형식 또는 필수 컬럼 누락
    """
    ext = os.path.splitext(path)[1].lower()

    if ext == ".csv":
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            _require_columns(reader.fieldnames or [])
            points = _convert_rows(reader, first_row=2)
    elif ext in (".xlsx", ".xls"):
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        try:
            ws = wb.active
            rows = ws.iter_rows(values_only=True)
            headers = [str(h).strip() if h is not None else "" for h in next(rows, [])]
            log.info(f"엑셀 헤더 확인: {headers}")
            _require_columns(headers)
            points = _convert_rows((dict(zip(headers, r)) for r in rows), first_row=2)
        finally:
            wb.close()
    else:
        raise ValueError(f"지원하지 않는 파일 형식: {ext}")

    log.info(f"대피소 데이터 로드됨 path:{path} count:{len(points)}")
    return points

def _require_columns(headers: List[str]) -> None:
    # 필수 컬럼 검증
    for col in ("name", "latitude", "longitude"):
        if col not in headers:
            raise ValueError(f"필수 컬럼을 찾을 수 없습니다: {col}. 사용 가능한 컬럼: {headers}")
    if "id" not in headers and "common_id" not in headers:
        raise ValueError(f"id 컬럼을 찾을 수 없습니다. 사용 가능한 컬럼: {headers}")
