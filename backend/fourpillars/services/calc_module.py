"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
1️⃣ CALC 모듈 - 사주 8글자 계산
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
연주: (연도 - 4) mod 10 / mod 12
월주: 절기 월지 + (연간:월지) 조합표
일주: 외부 일진 조회 (실패 = 계산 중단)
시주: 일간 + 시지 공식
KASI 세차/일진이 있으면 연주/일주는 그 값을 우선 사용
월주/시주는 항상 내부 공식 (월간은 양력 연도 연간 기준)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fourpillars.services.calendar_service import OfficialGanji
from fourpillars.services.day_pillar import DaySexagenaryLookup
from fourpillars.services.errors import InvalidBirthInputError
from fourpillars.services.ganji import (
    DEFAULT_MONTH_STEM,
    YEAR_STEM_BRANCH_TO_MONTH_STEM,
    Branch,
    Stem,
    StemBranchPair,
)
from fourpillars.services.solar_terms import SolarTermsEngine, solar_terms_engine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pillars:
    """사주 8글자 (4기둥)"""
    year: StemBranchPair
    month: StemBranchPair
    day: StemBranchPair
    hour: StemBranchPair
    year_source: str = "formula"
    day_source: str = "lookup"


# ===== 개별 기둥 공식 =====

def calc_year_pillar(year: int) -> StemBranchPair:
    """연주: 서기 4년 = 갑자년 기준"""
    return StemBranchPair.from_indices((year - 4) % 10, (year - 4) % 12)


def calc_month_stem(year_stem: Stem, month_branch: Branch) -> Stem:
    """연간 + 월지 → 월간 (조합표, 누락 시 기본값)"""
    key = f"{year_stem.value}:{month_branch.value}"
    stem = YEAR_STEM_BRANCH_TO_MONTH_STEM.get(key)
    if stem is None:
        logger.warning(f"[CalcModule] month stem table miss: {key} → default {DEFAULT_MONTH_STEM.value}")
        return DEFAULT_MONTH_STEM
    return stem


def calc_month_pillar(year_stem: Stem, month_branch: Branch) -> StemBranchPair:
    return StemBranchPair(calc_month_stem(year_stem, month_branch), month_branch)


def get_hour_ji_index(hour: int) -> int:
    """시간 → 지지 인덱스 (23시 = 자시)"""
    if not 0 <= hour <= 23:
        raise InvalidBirthInputError(f"hour out of range: {hour}")
    return ((hour + 1) // 2) % 12


def calc_hour_pillar(day_stem: Stem, hour: int) -> StemBranchPair:
    """
    시주 계산

    시지: 2시간 단위 (23:00~00:59 자시, 01:00~02:59 축시, ...)
    시간: 일간 기준 자시 천간 (갑기일 → 갑자시, 을경일 → 병자시, ...) + 시지 인덱스
    """
    hour_ji_idx = get_hour_ji_index(hour)
    hour_gan_idx = ((day_stem.idx % 5) * 2 + hour_ji_idx) % 10
    return StemBranchPair.from_indices(hour_gan_idx, hour_ji_idx)


class PillarCalculator:
    """
    사주 4기둥 계산기
    - 연/월/시주: 내부 공식
    - 일주: DaySexagenaryLookup (KASI 또는 anchor)
    """

    def __init__(
        self,
        day_lookup: DaySexagenaryLookup,
        terms: Optional[SolarTermsEngine] = None,
        ipchun_year_boundary: bool = False,
    ):
        self.day_lookup = day_lookup
        self.terms = terms or solar_terms_engine
        self.ipchun_year_boundary = ipchun_year_boundary

    def pillar_year(self, solar_date: date) -> int:
        if self.ipchun_year_boundary:
            return self.terms.lichun_adjusted_year(solar_date)
        return solar_date.year

    def calc_local_pillars(self, solar_date: date, hour: int, day_stem: Stem):
        """연/월/시주 (외부 조회 없음)"""
        year_pillar = calc_year_pillar(self.pillar_year(solar_date))
        month_branch = self.terms.resolve_month_branch(solar_date)
        month_pillar = calc_month_pillar(year_pillar.stem, month_branch)
        hour_pillar = calc_hour_pillar(day_stem, hour)
        return year_pillar, month_pillar, hour_pillar

    async def compute_pillars(
        self,
        solar_date: date,
        hour: int,
        official_ganji: Optional[OfficialGanji] = None,
        day_pillar: Optional[StemBranchPair] = None,
    ) -> Pillars:
        """
        4기둥 계산

        Args:
            solar_date: 양력 생년월일
            hour: 출생 시 (0-23)
            official_ganji: KASI 음력→양력 변환이 돌려준 세차/일진 (있으면 연주/일주 우선)
            day_pillar: 이미 조회한 일주 (동시 조회 결과 재사용)

        Raises:
            DayPillarUnavailableError: 일주 조회 실패
        """
        logger.info(f"[CalcModule] 사주 계산: {solar_date.isoformat()} {hour:02d}시")

        day_source = "lookup"
        if official_ganji is not None:
            day_pillar = official_ganji.day
            day_source = "kasi_conversion"
        elif day_pillar is None:
            day_pillar = await self.day_lookup.lookup_day_sexagenary(solar_date)

        year_pillar, month_pillar, hour_pillar = self.calc_local_pillars(solar_date, hour, day_pillar.stem)

        year_source = "formula"
        if official_ganji is not None:
            year_pillar = official_ganji.year
            year_source = "kasi_conversion"

        result = Pillars(
            year=year_pillar,
            month=month_pillar,
            day=day_pillar,
            hour=hour_pillar,
            year_source=year_source,
            day_source=day_source,
        )
        logger.info(
            f"[CalcModule] 완료: {year_pillar.ganji_kor} {month_pillar.ganji_kor} "
            f"{day_pillar.ganji_kor} {hour_pillar.ganji_kor}"
        )
        return result
