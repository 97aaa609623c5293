"""
12절(節) 기준 월지 판정
- 월주 계산의 첫 단계: 어느 절기 구간인지 판단해서 월지(月支)만 결정
- 월간(月干)은 calc_module에서 연간+월지 조합표로 따로 결정
- 절입일은 양력 고정 근사일 (실제 절입 시각과 ±1일 오차 가능)
"""
import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import List, Tuple

from fourpillars.services.ganji import Branch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolarTermInfo:
    """절기 기준 정보"""
    name: str           # 절기 이름
    branch: Branch      # 이 절기로 시작하는 월지
    approx_month: int   # 대략적인 양력 월
    approx_day: int     # 대략적인 양력 일


@dataclass(frozen=True)
class SolarTerm:
    """특정 연도의 절기 (절입일)"""
    name: str
    branch: Branch
    date: date


@dataclass(frozen=True)
class TermWindow:
    """절기 구간 [start, end] (양끝 포함)"""
    term: SolarTerm
    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


# 월주에 쓰는 12절만 사용 (양력 순서)
SOLAR_TERMS_ENTRY: Tuple[SolarTermInfo, ...] = (
    SolarTermInfo("소한", Branch.CHUK, 1, 6),
    SolarTermInfo("입춘", Branch.IN, 2, 4),
    SolarTermInfo("경칩", Branch.MYO, 3, 6),
    SolarTermInfo("청명", Branch.JIN, 4, 5),
    SolarTermInfo("입하", Branch.SA, 5, 5),
    SolarTermInfo("망종", Branch.O, 6, 6),
    SolarTermInfo("소서", Branch.MI, 7, 7),
    SolarTermInfo("입추", Branch.SHIN, 8, 7),
    SolarTermInfo("백로", Branch.YU, 9, 8),
    SolarTermInfo("한로", Branch.SUL, 10, 8),
    SolarTermInfo("입동", Branch.HAE, 11, 7),
    SolarTermInfo("대설", Branch.JA, 12, 7),
)

IPCHUN = SOLAR_TERMS_ENTRY[1]

# 구간 판정 실패 시 기본 월지
DEFAULT_MONTH_BRANCH = Branch.MI


class SolarTermsEngine:
    """
    절기 엔진
    - 연도별 12절 구간 생성
    - 양력 날짜 → 월지
    - 입춘 보정 연도 / 절기 경계 근접 여부
    """

    def terms_for_year(self, year: int) -> List[SolarTerm]:
        """해당 연도의 12절 (소한 ~ 대설)"""
        return [
            SolarTerm(info.name, info.branch, date(year, info.approx_month, info.approx_day))
            for info in SOLAR_TERMS_ENTRY
        ]

    def windows_for_year(self, year: int) -> List[TermWindow]:
        """
        절기 구간 생성
        - 각 구간: 절입일 ~ 다음 절입일 전날
        - 마지막 대설 구간은 다음 해 소한 전날(1월 5일)까지
        """
        terms = self.terms_for_year(year)
        if year < MAXYEAR:
            year_end = self.terms_for_year(year + 1)[0].date - timedelta(days=1)
        else:
            year_end = date(MAXYEAR, 12, 31)

        windows = []
        for i, term in enumerate(terms):
            end = terms[i + 1].date - timedelta(days=1) if i + 1 < len(terms) else year_end
            windows.append(TermWindow(term, term.date, end))
        return windows

    def find_term(self, d: date) -> SolarTerm:
        """날짜가 속한 절기. 1월 초(소한 전)는 전년도 대설 구간"""
        for year in (d.year - 1, d.year):
            if year < MINYEAR:
                continue
            for window in self.windows_for_year(year):
                if window.contains(d):
                    return window.term
        raise LookupError(f"no solar term window contains {d.isoformat()}")

    def resolve_month_branch(self, d: date) -> Branch:
        """
        양력 날짜 → 월지

        Returns:
            절기 구간의 월지. 구간 판정 실패 시 DEFAULT_MONTH_BRANCH
        """
        try:
            return self.find_term(d).branch
        except LookupError as e:
            logger.warning(f"[SolarTerm] data integrity: {e} → default {DEFAULT_MONTH_BRANCH.value}")
            return DEFAULT_MONTH_BRANCH

    def lichun_adjusted_year(self, d: date) -> int:
        """입춘(근사일) 전이면 전년도"""
        ipchun = date(d.year, IPCHUN.approx_month, IPCHUN.approx_day)
        return d.year - 1 if d < ipchun else d.year

    def is_near_boundary(self, d: date, threshold_days: int = 1) -> Tuple[bool, str]:
        """
        절입 근사일 ±threshold_days 이내인지

        Returns:
            (경계여부, 경계사유) - 사유: "near_ipchun" | "near_term_change" | ""
        """
        for year in range(max(d.year - 1, MINYEAR), min(d.year + 1, MAXYEAR) + 1):
            for term in self.terms_for_year(year):
                if abs((d - term.date).days) <= threshold_days:
                    reason = "near_ipchun" if term.name == IPCHUN.name else "near_term_change"
                    return True, reason
        return False, ""


# 싱글톤
solar_terms_engine = SolarTermsEngine()
