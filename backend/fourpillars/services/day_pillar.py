"""
일주(日柱) 조회
- 일주는 모든 파생 속성(십성/12운성)의 기준이므로 틀린 값으로 대체하지 않는다
- KasiDaySexagenaryLookup: KASI 일진(lunIljin) 조회, 실패 시 DayPillarUnavailableError
- AnchorDaySexagenaryLookup: 2000-01-01 = 무오일 기준 오프라인 계산 (네트워크 불가 환경용)
"""
import logging
from datetime import date
from typing import Optional, Protocol

from fourpillars.services.errors import DayPillarUnavailableError, KasiApiError
from fourpillars.services.ganji import StemBranchPair, parse_ganji
from fourpillars.services.kasi_api import KasiApiClient

logger = logging.getLogger(__name__)


class DaySexagenaryLookup(Protocol):
    async def lookup_day_sexagenary(self, solar_date: date) -> StemBranchPair:
        ...


class KasiDaySexagenaryLookup:
    """KASI getLunCalInfo의 일진으로 일주 결정"""

    source = "kasi"

    def __init__(self, client: Optional[KasiApiClient] = None):
        self.client = client or KasiApiClient()

    async def lookup_day_sexagenary(self, solar_date: date) -> StemBranchPair:
        try:
            info = await self.client.get_lunar_info(solar_date.year, solar_date.month, solar_date.day)
        except KasiApiError as e:
            logger.error(f"[DayPillar] KASI lookup failed for {solar_date.isoformat()}: {e}")
            raise DayPillarUnavailableError(solar_date, str(e)) from e

        raw = info.get("day_ganji", "")
        pair = parse_ganji(raw)
        if pair is None or pair.sexagenary_index is None:
            logger.error(f"[DayPillar] unusable lunIljin {raw!r} for {solar_date.isoformat()}")
            raise DayPillarUnavailableError(solar_date, f"unusable lunIljin {raw!r}")

        logger.info(f"[DayPillar] {solar_date.isoformat()} → {pair.ganji_kor}({pair.ganji})")
        return pair


class AnchorDaySexagenaryLookup:
    """
    기준일 오프셋 방식 일주 계산
    - Anchor: 2000년 1월 1일 = 무오일 (60갑자 중 54번째)
    """

    source = "anchor"

    ANCHOR_DATE = date(2000, 1, 1)
    ANCHOR_IDX = 54

    async def lookup_day_sexagenary(self, solar_date: date) -> StemBranchPair:
        return self.calc_day_pillar(solar_date)

    def calc_day_pillar(self, solar_date: date) -> StemBranchPair:
        days_diff = (solar_date - self.ANCHOR_DATE).days
        curr_day_idx = (self.ANCHOR_IDX + days_diff) % 60
        return StemBranchPair.from_indices(curr_day_idx % 10, curr_day_idx % 12)


def build_day_lookup(source: str, client: Optional[KasiApiClient] = None) -> DaySexagenaryLookup:
    """설정값(day_pillar_source) → 조회기"""
    if source == "anchor":
        return AnchorDaySexagenaryLookup()
    if source == "kasi":
        return KasiDaySexagenaryLookup(client)
    raise ValueError(f"unknown day pillar source: {source}")
