"""
음양력 변환 서비스
- KASI 우선, 실패 시 로컬 근사 변환 (예외를 밖으로 던지지 않음)
- 근사 변환은 천문학적 계산이 아님: 고정 일수 이동 + 윤달 판정 없음
  → source="approximate"로 표시하고 WARNING 로그를 남긴다
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import Optional

from fourpillars.services.errors import KasiApiError
from fourpillars.services.ganji import StemBranchPair, parse_ganji
from fourpillars.services.kasi_api import KasiApiClient

logger = logging.getLogger(__name__)

SOURCE_KASI = "kasi"
SOURCE_APPROXIMATE = "approximate"

# 근사 변환 이동 일수
APPROX_DAY_SHIFT = 18


@dataclass(frozen=True)
class LunarDate:
    """음력 날짜 (30일이 있을 수 있어 datetime.date로 표현하지 않음)"""
    year: int
    month: int
    day: int

    def __post_init__(self):
        if not MINYEAR <= self.year <= MAXYEAR:
            raise ValueError(f"lunar year out of range: {self.year}")
        if not 1 <= self.month <= 12:
            raise ValueError(f"lunar month out of range: {self.month}")
        if not 1 <= self.day <= 30:
            raise ValueError(f"lunar day out of range: {self.day}")

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class OfficialGanji:
    """KASI가 돌려준 세차/월건/일진 (연/월/일주)"""
    year: StemBranchPair
    month: Optional[StemBranchPair]
    day: StemBranchPair


@dataclass(frozen=True)
class LunarConversion:
    lunar_date: LunarDate
    is_leap_month: bool
    source: str

    @property
    def degraded(self) -> bool:
        return self.source != SOURCE_KASI


@dataclass(frozen=True)
class SolarConversion:
    solar_date: date
    official_ganji: Optional[OfficialGanji]
    source: str
    is_leap_month: bool = False

    @property
    def degraded(self) -> bool:
        return self.source != SOURCE_KASI


def approximate_solar_to_lunar(solar: date) -> LunarConversion:
    """근사 양력→음력: 같은 연/월, 일자 -18 (최소 1일), 윤달 없음"""
    lunar = LunarDate(solar.year, solar.month, max(1, solar.day - APPROX_DAY_SHIFT))
    return LunarConversion(lunar_date=lunar, is_leap_month=False, source=SOURCE_APPROXIMATE)


def approximate_lunar_to_solar(lunar: LunarDate) -> SolarConversion:
    """근사 음력→양력: 일자를 해당 양력 월 길이로 자른 뒤 +18일 (date.max에서 멈춤)"""
    last_day = calendar.monthrange(lunar.year, lunar.month)[1]
    base = date(lunar.year, lunar.month, min(lunar.day, last_day))
    shift = min(APPROX_DAY_SHIFT, (date.max - base).days)
    return SolarConversion(
        solar_date=base + timedelta(days=shift),
        official_ganji=None,
        source=SOURCE_APPROXIMATE,
    )


def _official_ganji(info: dict) -> Optional[OfficialGanji]:
    year = parse_ganji(info.get("year_ganji"))
    day = parse_ganji(info.get("day_ganji"))
    if not year or not day:
        return None
    return OfficialGanji(year=year, month=parse_ganji(info.get("month_ganji")), day=day)


class CalendarService:
    """양력 ↔ 음력 변환 (KASI → 근사 fallback)"""

    def __init__(self, client: Optional[KasiApiClient] = None):
        self.client = client or KasiApiClient()

    async def solar_to_lunar(self, solar: date) -> LunarConversion:
        try:
            info = await self.client.get_lunar_info(solar.year, solar.month, solar.day)
            lunar = LunarDate(info["lunar_year"], info["lunar_month"], info["lunar_day"])
            return LunarConversion(lunar_date=lunar, is_leap_month=info["is_leap_month"], source=SOURCE_KASI)
        except (KasiApiError, ValueError) as e:
            logger.warning(f"[Calendar] solar→lunar degraded to approximate for {solar.isoformat()}: {e}")
            return approximate_solar_to_lunar(solar)

    async def lunar_to_solar(self, lunar: LunarDate, is_leap_month: bool = False) -> SolarConversion:
        try:
            info = await self.client.get_solar_info(lunar.year, lunar.month, lunar.day, is_leap_month)
            solar = date(info["solar_year"], info["solar_month"], info["solar_day"])
            return SolarConversion(
                solar_date=solar,
                official_ganji=_official_ganji(info),
                source=SOURCE_KASI,
                is_leap_month=info["is_leap_month"],
            )
        except (KasiApiError, ValueError) as e:
            logger.warning(f"[Calendar] lunar→solar degraded to approximate for {lunar.isoformat()}: {e}")
            return approximate_lunar_to_solar(lunar)
