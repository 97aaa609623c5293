"""
사주 계산 엔진 (파이프라인)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
입력 파싱 → 음양력 변환 → 4기둥 계산 → 파생 속성 → 결과 조립
- 양력 입력: 음력 변환과 일주 조회를 동시에 실행
- 음력 입력: KASI가 세차/일진을 주면 일주 조회 생략
- 일주 조회 실패(DayPillarUnavailableError)는 그대로 호출자에게 전파
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple, Union

from fourpillars.config import Settings, get_settings
from fourpillars.models.schemas import (
    AnnotatedPillar,
    BirthInput,
    ElementAnalysis,
    FourPillars,
    QualityInfo,
)
from fourpillars.services.cache import SajuCache
from fourpillars.services.calc_module import PillarCalculator, Pillars
from fourpillars.services.calendar_service import CalendarService, LunarDate
from fourpillars.services.day_pillar import build_day_lookup
from fourpillars.services.derive_module import PillarContext, PillarRole, annotate
from fourpillars.services.errors import InvalidBirthInputError
from fourpillars.services.five_elements import calculate_five_elements
from fourpillars.services.kasi_api import KasiApiClient
from fourpillars.services.solar_terms import solar_terms_engine

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")
_TIME_PATTERN = re.compile(r"^(\d{2}):?(\d{2})$")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 입력 파싱
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _split_date(value: str) -> Tuple[int, int, int]:
    match = _DATE_PATTERN.match(str(value).strip())
    if not match:
        raise InvalidBirthInputError(f"birth date must be YYYY-MM-DD or YYYYMMDD: {value!r}")
    return tuple(int(g) for g in match.groups())


def parse_birth_date(value: str) -> date:
    """양력 생년월일 ("YYYY-MM-DD" / "YYYYMMDD")"""
    year, month, day = _split_date(value)
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidBirthInputError(f"invalid birth date {value!r}: {e}") from e


def parse_lunar_date(value: str) -> LunarDate:
    """음력 생년월일 (30일은 모든 달에서 허용)"""
    year, month, day = _split_date(value)
    try:
        return LunarDate(year, month, day)
    except ValueError as e:
        raise InvalidBirthInputError(f"invalid lunar date {value!r}: {e}") from e


def parse_birth_time(value: str) -> Tuple[int, int]:
    """출생 시각 ("HH:MM" / "HHMM") → (시, 분)"""
    match = _TIME_PATTERN.match(str(value).strip())
    if not match:
        raise InvalidBirthInputError(f"birth time must be HH:MM or HHMM: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidBirthInputError(f"birth time out of range: {value!r}")
    return hour, minute


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 결과 조립
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def assemble_four_pillars(
    annotated: Dict[PillarRole, AnnotatedPillar],
    solar_date: date,
    lunar_date: LunarDate,
    is_leap_month: bool,
    calendar_source: str,
) -> FourPillars:
    return FourPillars(
        year=annotated[PillarRole.YEAR],
        month=annotated[PillarRole.MONTH],
        day=annotated[PillarRole.DAY],
        hour=annotated[PillarRole.HOUR],
        solar_date=solar_date.isoformat(),
        lunar_date=lunar_date.isoformat(),
        is_leap_month=is_leap_month,
        calendar_source=calendar_source,
    )


def annotate_pillars(pillars: Pillars) -> Dict[PillarRole, AnnotatedPillar]:
    out = {}
    for role in PillarRole:
        context = PillarContext(day_stem=pillars.day.stem, year_branch=pillars.year.branch, role=role)
        out[role] = annotate(getattr(pillars, role.value), context)
    return out


@dataclass(frozen=True)
class CalculationResult:
    """계산 결과"""
    four_pillars: FourPillars
    five_elements: ElementAnalysis
    quality: QualityInfo


def cache_key(birth: BirthInput, hour: int, minute: int) -> tuple:
    is_leap = birth.is_leap_month if birth.calendar_type == "lunar" else False
    return (birth.birth_date.replace("-", ""), f"{hour:02d}:{minute:02d}", birth.calendar_type, is_leap)


async def _gather_or_cancel(*coros):
    """동시 실행, 하나라도 실패하면 남은 작업 취소 후 예외 전파"""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class SajuEngine:
    """
    사주 계산 엔진

    구성요소는 모두 주입 가능 (테스트: MockTransport 클라이언트, anchor 조회, 가짜 시계 캐시)
    """

    def __init__(
        self,
        calendar_service: Optional[CalendarService] = None,
        calculator: Optional[PillarCalculator] = None,
        cache: Optional[SajuCache] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        client = None
        if calendar_service is None or calculator is None:
            client = KasiApiClient()

        self.calendar = calendar_service or CalendarService(client)
        self.calculator = calculator or PillarCalculator(
            build_day_lookup(settings.day_pillar_source, client),
            ipchun_year_boundary=settings.ipchun_year_boundary,
        )
        self.cache = cache

    async def calculate(self, birth: BirthInput) -> CalculationResult:
        """BirthInput → 4기둥 + 오행 + 품질 정보"""
        hour, minute = parse_birth_time(birth.birth_time)

        key = cache_key(birth, hour, minute)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        logger.info(
            f"[SajuEngine] 계산 시작: {birth.birth_date} {birth.birth_time} "
            f"({birth.calendar_type}{', 윤달' if birth.is_leap_month else ''})"
        )

        if birth.calendar_type == "solar":
            solar_date = parse_birth_date(birth.birth_date)
            conversion, day_pillar = await _gather_or_cancel(
                self.calendar.solar_to_lunar(solar_date),
                self.calculator.day_lookup.lookup_day_sexagenary(solar_date),
            )
            lunar_date = conversion.lunar_date
            is_leap_month = conversion.is_leap_month
            calendar_source = conversion.source
            pillars = await self.calculator.compute_pillars(solar_date, hour, day_pillar=day_pillar)
        else:
            lunar_date = parse_lunar_date(birth.birth_date)
            conversion = await self.calendar.lunar_to_solar(lunar_date, birth.is_leap_month)
            solar_date = conversion.solar_date
            is_leap_month = birth.is_leap_month if conversion.degraded else conversion.is_leap_month
            calendar_source = conversion.source
            pillars = await self.calculator.compute_pillars(
                solar_date, hour, official_ganji=conversion.official_ganji
            )

        four_pillars = assemble_four_pillars(
            annotate_pillars(pillars), solar_date, lunar_date, is_leap_month, calendar_source
        )

        is_boundary, reason = solar_terms_engine.is_near_boundary(solar_date)
        quality = QualityInfo(
            solar_term_boundary=is_boundary,
            boundary_reason=reason or None,
            calendar_source=calendar_source,
            year_source=pillars.year_source,
            day_source=pillars.day_source,
        )

        result = CalculationResult(
            four_pillars=four_pillars,
            five_elements=calculate_five_elements(four_pillars),
            quality=quality,
        )
        if self.cache is not None:
            self.cache.set(key, result)

        logger.info(f"[SajuEngine] 완료: {solar_date.isoformat()} (calendar={calendar_source})")
        return result

    async def compute_four_pillars(self, birth: BirthInput) -> FourPillars:
        return (await self.calculate(birth)).four_pillars


async def compute_four_pillars(
    birth: Union[BirthInput, dict],
    engine: Optional[SajuEngine] = None,
) -> FourPillars:
    """
    외부 진입점

    Args:
        birth: BirthInput 또는 dict (camelCase / snake_case 키 모두 허용)
        engine: 미지정 시 공용 엔진

    Raises:
        InvalidBirthInputError: 날짜/시각 형식 오류
        DayPillarUnavailableError: 일주 확정 불가
    """
    if not isinstance(birth, BirthInput):
        try:
            birth = BirthInput.model_validate(birth)
        except ValueError as e:
            raise InvalidBirthInputError(str(e)) from e

    if engine is None:
        from fourpillars.services import get_saju_engine
        engine = get_saju_engine()
    return await engine.compute_four_pillars(birth)
