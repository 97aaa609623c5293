"""
공용 테스트 픽스처
- KASI 응답은 httpx.MockTransport로 흉내 (네트워크 없음)
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest

from fourpillars.services.kasi_api import KasiApiClient


def kasi_payload(item):
    """data.go.kr 응답 봉투"""
    return {
        "response": {
            "header": {"resultCode": "00", "resultMsg": "NORMAL SERVICE."},
            "body": {"items": {"item": item} if item else "", "numOfRows": 10, "pageNo": 1, "totalCount": 1},
        }
    }


# 1990-05-15 (양력) = 1990-04-21 (음력 평달)
LUN_1990_05_15 = {
    "lunYear": "1990", "lunMonth": "04", "lunDay": "21", "lunLeapmonth": "평",
    "lunSecha": "경오(庚午)", "lunWolgeon": "신사(辛巳)", "lunIljin": "경진(庚辰)",
    "solYear": "1990", "solMonth": "05", "solDay": "15",
}

# 음력 2020-04-01 윤달 = 양력 2020-05-23
SOL_2020_LEAP_4_1 = {
    "lunYear": "2020", "lunMonth": "04", "lunDay": "01", "lunLeapmonth": "윤",
    "lunSecha": "경자(庚子)", "lunWolgeon": "", "lunIljin": "기미(己未)",
    "solYear": "2020", "solMonth": "05", "solDay": "23",
}


# 음력 1989-12-24 = 양력 1990-01-20 (설 이전이라 세차는 기사년)
SOL_1989_12_24 = {
    "lunYear": "1989", "lunMonth": "12", "lunDay": "24", "lunLeapmonth": "평",
    "lunSecha": "기사(己巳)", "lunWolgeon": "정축(丁丑)", "lunIljin": "을유(乙酉)",
    "solYear": "1990", "solMonth": "01", "solDay": "20",
}

class FakeKasi:
    """
    operation → item 매핑으로 KASI 흉내
    - lunar: (solYear, solMonth, solDay) → item
    - solar: (lunYear, lunMonth, lunDay, leapMonth) → item
    - fail: True면 모든 요청 500
    """

    def __init__(self, lunar=None, solar=None, fail=False):
        self.lunar = lunar or {}
        self.solar = solar or {}
        self.fail = fail
        self.calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        operation = request.url.path.rsplit("/", 1)[-1]
        params = request.url.params
        self.calls.append((operation, dict(params)))

        if self.fail:
            return httpx.Response(500, text="Internal Server Error")

        if operation == "getLunCalInfo":
            key = (params["solYear"], params["solMonth"], params["solDay"])
            item = self.lunar.get(key)
        elif operation == "getSolCalInfo":
            key = (params["lunYear"], params["lunMonth"], params["lunDay"], params["leapMonth"])
            item = self.solar.get(key)
        else:
            return httpx.Response(404)

        return httpx.Response(200, json=kasi_payload(item))

    def client(self) -> KasiApiClient:
        return KasiApiClient(api_key="test-key", transport=httpx.MockTransport(self.handler))

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)


@pytest.fixture
def fake_kasi():
    return FakeKasi(
        lunar={
            ("1990", "05", "15"): LUN_1990_05_15,
            ("2020", "05", "23"): SOL_2020_LEAP_4_1,
        },
        solar={
            ("2020", "04", "01", "윤"): SOL_2020_LEAP_4_1,
            ("1989", "12", "24", "평"): SOL_1989_12_24,
        },
    )


@pytest.fixture
def failing_kasi():
    return FakeKasi(fail=True)
