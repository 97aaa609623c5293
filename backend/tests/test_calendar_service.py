"""
음양력 변환 서비스 테스트 (KASI MockTransport)
"""
import logging
from datetime import date

import httpx
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fourpillars.services.calendar_service import (
    SOURCE_APPROXIMATE,
    SOURCE_KASI,
    CalendarService,
    LunarDate,
    approximate_lunar_to_solar,
    approximate_solar_to_lunar,
)
from fourpillars.services.errors import KasiApiError
from fourpillars.services.kasi_api import KasiApiClient


class TestKasiClient:
    @pytest.mark.asyncio
    async def test_get_lunar_info(self, fake_kasi):
        info = await fake_kasi.client().get_lunar_info(1990, 5, 15)
        assert (info["lunar_year"], info["lunar_month"], info["lunar_day"]) == (1990, 4, 21)
        assert info["is_leap_month"] is False
        assert info["day_ganji"] == "경진(庚辰)"

        operation, params = fake_kasi.calls[0]
        assert operation == "getLunCalInfo"
        assert params["_type"] == "json"
        assert params["serviceKey"] == "test-key"
        assert params["solMonth"] == "05"

    @pytest.mark.asyncio
    async def test_get_solar_info_leap(self, fake_kasi):
        info = await fake_kasi.client().get_solar_info(2020, 4, 1, is_leap_month=True)
        assert (info["solar_year"], info["solar_month"], info["solar_day"]) == (2020, 5, 23)
        assert info["is_leap_month"] is True
        assert fake_kasi.calls[0][1]["leapMonth"] == "윤"

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = KasiApiClient(api_key="", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with pytest.raises(KasiApiError):
            await client.get_lunar_info(1990, 5, 15)

    @pytest.mark.asyncio
    async def test_empty_items(self, fake_kasi):
        with pytest.raises(KasiApiError):
            await fake_kasi.client().get_lunar_info(1990, 5, 16)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<OpenAPI_ServiceResponse>SERVICE KEY IS NOT REGISTERED</OpenAPI_ServiceResponse>")

        client = KasiApiClient(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(KasiApiError):
            await client.get_lunar_info(1990, 5, 15)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = KasiApiClient(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(KasiApiError, match="timeout"):
            await client.get_solar_info(2020, 4, 1)

    @pytest.mark.asyncio
    async def test_error_result_code(self):
        def handler(request):
            return httpx.Response(200, json={"response": {"header": {"resultCode": "99", "resultMsg": "ERR"}}})

        client = KasiApiClient(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(KasiApiError, match="resultCode=99"):
            await client.get_lunar_info(1990, 5, 15)

    @pytest.mark.asyncio
    async def test_item_list(self):
        from conftest import LUN_1990_05_15, kasi_payload

        def handler(request):
            return httpx.Response(200, json=kasi_payload([LUN_1990_05_15]))

        client = KasiApiClient(api_key="k", transport=httpx.MockTransport(handler))
        info = await client.get_lunar_info(1990, 5, 15)
        assert info["lunar_day"] == 21


class TestApproximate:
    def test_solar_to_lunar(self):
        conv = approximate_solar_to_lunar(date(1990, 5, 25))
        assert conv.lunar_date == LunarDate(1990, 5, 7)
        assert conv.is_leap_month is False
        assert conv.source == SOURCE_APPROXIMATE
        assert conv.degraded

    def test_solar_to_lunar_clamps_to_first(self):
        assert approximate_solar_to_lunar(date(1990, 5, 3)).lunar_date.day == 1

    def test_lunar_to_solar(self):
        conv = approximate_lunar_to_solar(LunarDate(1990, 4, 21))
        assert conv.solar_date == date(1990, 5, 9)
        assert conv.official_ganji is None
        assert conv.source == SOURCE_APPROXIMATE

    def test_lunar_30th_in_short_month(self):
        # 음력 2월 30일 → 양력 2월 길이로 자른 뒤 +18일
        assert approximate_lunar_to_solar(LunarDate(2023, 2, 30)).solar_date == date(2023, 3, 18)

    def test_not_a_round_trip(self):
        """근사 변환 쌍은 왕복이 성립하지 않는다"""
        solar = date(1990, 5, 15)
        lunar = approximate_solar_to_lunar(solar).lunar_date
        assert approximate_lunar_to_solar(lunar).solar_date != solar

    def test_lunar_date_validation(self):
        with pytest.raises(ValueError):
            LunarDate(2020, 13, 1)
        with pytest.raises(ValueError):
            LunarDate(2020, 1, 31)
        with pytest.raises(ValueError):
            LunarDate(0, 1, 1)

    def test_lunar_to_solar_stops_at_max_date(self):
        assert approximate_lunar_to_solar(LunarDate(9999, 12, 25)).solar_date == date.max
        assert approximate_lunar_to_solar(LunarDate(9999, 12, 1)).solar_date == date(9999, 12, 19)


class TestCalendarService:
    @pytest.mark.asyncio
    async def test_solar_to_lunar_kasi(self, fake_kasi):
        conv = await CalendarService(fake_kasi.client()).solar_to_lunar(date(1990, 5, 15))
        assert conv.lunar_date == LunarDate(1990, 4, 21)
        assert conv.source == SOURCE_KASI
        assert not conv.degraded

    @pytest.mark.asyncio
    async def test_lunar_leap_round_trip(self, fake_kasi):
        service = CalendarService(fake_kasi.client())
        conv = await service.lunar_to_solar(LunarDate(2020, 4, 1), is_leap_month=True)
        assert conv.solar_date == date(2020, 5, 23)
        assert conv.is_leap_month is True
        assert conv.official_ganji.day.ganji_kor == "기미"
        assert conv.official_ganji.month is None

        back = await service.solar_to_lunar(conv.solar_date)
        assert back.lunar_date == LunarDate(2020, 4, 1)
        assert back.is_leap_month is True
        assert back.source == SOURCE_KASI

    @pytest.mark.asyncio
    async def test_fallback_never_raises(self, failing_kasi, caplog):
        service = CalendarService(failing_kasi.client())
        with caplog.at_level(logging.WARNING):
            lunar = await service.solar_to_lunar(date(1990, 5, 15))
            solar = await service.lunar_to_solar(LunarDate(1990, 4, 21))
        assert lunar.source == SOURCE_APPROXIMATE
        assert solar.source == SOURCE_APPROXIMATE
        assert "[Calendar]" in caplog.text

    @pytest.mark.asyncio
    async def test_fallback_on_missing_date(self, fake_kasi):
        conv = await CalendarService(fake_kasi.client()).lunar_to_solar(LunarDate(2020, 4, 1), is_leap_month=False)
        assert conv.source == SOURCE_APPROXIMATE
        assert conv.solar_date == date(2020, 4, 19)

    @pytest.mark.asyncio
    async def test_fallback_at_last_representable_year(self, failing_kasi):
        conv = await CalendarService(failing_kasi.client()).lunar_to_solar(LunarDate(9999, 12, 30))
        assert conv.source == SOURCE_APPROXIMATE
        assert conv.solar_date == date.max
