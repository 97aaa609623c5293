"""
CALC 모듈 테스트 - 연/월/일/시주
"""
import logging
from datetime import date, timedelta

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fourpillars.services.calc_module import (
    PillarCalculator,
    calc_hour_pillar,
    calc_month_pillar,
    calc_month_stem,
    calc_year_pillar,
)
from fourpillars.services.calendar_service import OfficialGanji
from fourpillars.services.day_pillar import (
    AnchorDaySexagenaryLookup,
    KasiDaySexagenaryLookup,
    build_day_lookup,
)
from fourpillars.services.errors import DayPillarUnavailableError, InvalidBirthInputError
from fourpillars.services.ganji import STEMS, Branch, Stem, StemBranchPair, parse_ganji


class TestYearPillar:
    @pytest.mark.parametrize("year, expected", [
        (1984, "갑자"),
        (1990, "경오"),
        (1978, "무오"),
        (2024, "갑진"),
        (2025, "을사"),
    ])
    def test_known_years(self, year, expected):
        assert calc_year_pillar(year).ganji_kor == expected

    def test_period_sixty(self):
        for year in range(1800, 2200):
            assert calc_year_pillar(year) == calc_year_pillar(year + 60)


class TestMonthPillar:
    def test_table_lookup(self):
        assert calc_month_pillar(Stem.GYEONG, Branch.SA) == StemBranchPair(Stem.SIN, Branch.SA)
        assert calc_month_pillar(Stem.GAP, Branch.IN).ganji == "丙寅"

    def test_table_miss_uses_default(self, caplog, monkeypatch):
        from fourpillars.services import calc_module
        monkeypatch.setattr(calc_module, "YEAR_STEM_BRANCH_TO_MONTH_STEM", {})
        with caplog.at_level(logging.WARNING):
            assert calc_month_stem(Stem.GAP, Branch.IN) is Stem.BYEONG
        assert "month stem table miss" in caplog.text


class TestHourPillar:
    @pytest.mark.parametrize("hour, branch", [
        (23, Branch.JA), (0, Branch.JA), (1, Branch.CHUK), (2, Branch.CHUK),
        (13, Branch.MI), (14, Branch.MI), (22, Branch.HAE),
    ])
    def test_branch_windows(self, hour, branch):
        assert calc_hour_pillar(Stem.GAP, hour).branch is branch

    def test_gap_day_starts_gapja(self):
        # 갑기일 → 갑자시
        assert calc_hour_pillar(Stem.GAP, 0).ganji_kor == "갑자"
        assert calc_hour_pillar(Stem.GI, 0).ganji_kor == "갑자"
        # 을경일 → 병자시
        assert calc_hour_pillar(Stem.GYEONG, 0).ganji_kor == "병자"

    def test_periodicity_over_day_stems(self):
        """일간이 5칸 차이면 같은 시주"""
        for i in range(5):
            for hour in range(24):
                assert calc_hour_pillar(STEMS[i], hour) == calc_hour_pillar(STEMS[i + 5], hour)

    def test_always_valid_sexagenary(self):
        for stem in STEMS:
            for hour in range(24):
                assert calc_hour_pillar(stem, hour).sexagenary_index is not None

    @pytest.mark.parametrize("hour", [-1, 24, 99])
    def test_out_of_range(self, hour):
        with pytest.raises(InvalidBirthInputError):
            calc_hour_pillar(Stem.GAP, hour)


class TestDayPillarLookup:
    @pytest.mark.asyncio
    async def test_anchor(self):
        lookup = AnchorDaySexagenaryLookup()
        assert (await lookup.lookup_day_sexagenary(date(2000, 1, 1))).ganji == "戊午"
        assert (await lookup.lookup_day_sexagenary(date(1990, 5, 15))).ganji == "庚辰"
        assert (await lookup.lookup_day_sexagenary(date(1978, 5, 16))).ganji_kor == "무인"

    def test_anchor_consecutive_days(self):
        lookup = AnchorDaySexagenaryLookup()
        d = date(1999, 12, 1)
        for _ in range(120):
            today = lookup.calc_day_pillar(d).sexagenary_index
            tomorrow = lookup.calc_day_pillar(d + timedelta(days=1)).sexagenary_index
            assert tomorrow == (today + 1) % 60
            d += timedelta(days=1)

    @pytest.mark.asyncio
    async def test_kasi_lunIljin(self, fake_kasi):
        lookup = KasiDaySexagenaryLookup(fake_kasi.client())
        pair = await lookup.lookup_day_sexagenary(date(1990, 5, 15))
        assert pair == StemBranchPair(Stem.GYEONG, Branch.JIN)

    @pytest.mark.asyncio
    async def test_kasi_failure_is_hard(self, failing_kasi):
        lookup = KasiDaySexagenaryLookup(failing_kasi.client())
        with pytest.raises(DayPillarUnavailableError) as exc_info:
            await lookup.lookup_day_sexagenary(date(1990, 5, 15))
        assert "1990-05-15" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_kasi_garbled_lunIljin(self):
        from conftest import FakeKasi, LUN_1990_05_15
        item = dict(LUN_1990_05_15, lunIljin="??")
        lookup = KasiDaySexagenaryLookup(FakeKasi(lunar={("1990", "05", "15"): item}).client())
        with pytest.raises(DayPillarUnavailableError):
            await lookup.lookup_day_sexagenary(date(1990, 5, 15))

    def test_build_day_lookup(self):
        assert build_day_lookup("anchor").source == "anchor"
        assert build_day_lookup("kasi").source == "kasi"
        with pytest.raises(ValueError):
            build_day_lookup("ephem")


class TestComputePillars:
    @pytest.mark.asyncio
    async def test_1990_05_15_14h(self):
        calc = PillarCalculator(AnchorDaySexagenaryLookup())
        pillars = await calc.compute_pillars(date(1990, 5, 15), 14)
        assert pillars.year.ganji == "庚午"
        assert pillars.month.ganji == "辛巳"
        assert pillars.day.ganji == "庚辰"
        assert pillars.hour.ganji == "癸未"
        assert pillars.year_source == "formula"
        assert pillars.day_source == "lookup"

    @pytest.mark.asyncio
    async def test_prefetched_day_pillar_skips_lookup(self):
        class Exploding:
            async def lookup_day_sexagenary(self, solar_date):
                raise AssertionError("lookup should not be called")

        calc = PillarCalculator(Exploding())
        pillars = await calc.compute_pillars(date(1990, 5, 15), 14, day_pillar=parse_ganji("경진"))
        assert pillars.day.ganji == "庚辰"

    @pytest.mark.asyncio
    async def test_official_ganji_preferred(self):
        class Exploding:
            async def lookup_day_sexagenary(self, solar_date):
                raise AssertionError("lookup should not be called")

        official = OfficialGanji(year=parse_ganji("기사"), month=None, day=parse_ganji("갑자"))
        calc = PillarCalculator(Exploding())
        pillars = await calc.compute_pillars(date(1990, 1, 20), 0, official_ganji=official)
        assert pillars.year.ganji_kor == "기사"
        assert pillars.day.ganji_kor == "갑자"
        # 월주는 내부 공식: 1990년 연간(庚) 기준 丑월 = 己
        assert pillars.month.ganji == "己丑"
        assert pillars.hour.ganji_kor == "갑자"
        assert pillars.year_source == "kasi_conversion"
        assert pillars.day_source == "kasi_conversion"

    @pytest.mark.asyncio
    async def test_ipchun_year_boundary_option(self):
        plain = PillarCalculator(AnchorDaySexagenaryLookup())
        adjusted = PillarCalculator(AnchorDaySexagenaryLookup(), ipchun_year_boundary=True)
        d = date(2025, 2, 3)
        assert (await plain.compute_pillars(d, 12)).year.ganji_kor == "을사"
        assert (await adjusted.compute_pillars(d, 12)).year.ganji_kor == "갑진"

    @pytest.mark.asyncio
    async def test_day_pillar_failure_propagates(self, failing_kasi):
        calc = PillarCalculator(KasiDaySexagenaryLookup(failing_kasi.client()))
        with pytest.raises(DayPillarUnavailableError):
            await calc.compute_pillars(date(1990, 5, 15), 14)
