"""
/saju 엔드포인트 - 사주 4기둥 계산

Source of Truth 우선순위:
1. KASI API (한국천문연구원) - 음양력 변환, 일진
2. 근사 변환 - 음양력 변환 fallback (일주는 fallback 없음)

특징:
- 음양력 변환 실패시 자동 근사 변환 (quality.calendarSource = approximate)
- 일주 확정 실패시 503 (틀린 사주를 돌려주지 않음)
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging

from fourpillars.models.schemas import (
    BirthInput,
    CalculateResponse,
    ErrorResponse,
    HourOption
)
from fourpillars.services import get_cache_service, get_saju_engine
from fourpillars.services.cache import SajuCache
from fourpillars.services.errors import CalculationError, DayPillarUnavailableError, InvalidBirthInputError
from fourpillars.services.ganji import HOUR_OPTIONS
from fourpillars.services.saju_engine import SajuEngine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/saju/calculate",
    response_model=CalculateResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse}
    },
    summary="사주 4기둥 계산",
    description="""
생년월일시(양력/음력)를 입력받아 사주 원국과 기둥별 파생 속성을 계산합니다.

**파생 속성:** 십성, 지지 십성, 지장간, 지장간 십성, 12운성, 12신살

**고가용성:**
- KASI 음양력 변환 실패시 근사 변환으로 계속 진행
- 일주 조회 실패시 503 (analysis temporarily unavailable)
    """
)
async def calculate_saju(
    request: BirthInput,
    engine: SajuEngine = Depends(get_saju_engine),
):
    """사주 계산 API"""
    try:
        result = await engine.calculate(request)

    except InvalidBirthInputError as e:
        logger.warning(f"[Calculate] invalid input: {e}")
        raise HTTPException(
            status_code=400,
            detail={
                "error_code": "INVALID_INPUT",
                "message": "생년월일/시간 형식이 올바르지 않습니다.",
                "detail": str(e)
            }
        )
    except DayPillarUnavailableError as e:
        logger.error(f"[Calculate] day pillar unavailable: {e}")
        raise HTTPException(
            status_code=503,
            detail={
                "error_code": "DAY_PILLAR_UNAVAILABLE",
                "message": "analysis temporarily unavailable",
                "detail": str(e)
            }
        )
    except CalculationError as e:
        logger.error(f"[Calculate] calculation error: {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=500,
            detail={
                "error_code": "CALCULATION_ERROR",
                "message": "사주 계산에 실패했습니다.",
                "detail": str(e)
            }
        )

    fp = result.four_pillars
    logger.info(
        f"[Calculate] {request.birth_date} {request.birth_time} → "
        f"{fp.year.stem}{fp.year.branch} {fp.month.stem}{fp.month.branch} "
        f"{fp.day.stem}{fp.day.branch} {fp.hour.stem}{fp.hour.branch} | calendar={fp.calendar_source}"
    )
    return CalculateResponse(
        four_pillars=fp,
        five_elements=result.five_elements,
        quality=result.quality,
    )


@router.get(
    "/saju/hour-options",
    response_model=List[HourOption],
    summary="시간대 선택 옵션",
    description="출생 시간 입력을 위한 시간대(2시간 단위) 선택 옵션 목록"
)
async def get_hour_options():
    """시간대 선택 옵션 목록"""
    return [
        {
            "index": h["index"],
            "ji": h["ji"],
            "ji_hanja": h["ji_hanja"],
            "range_start": h["start"],
            "range_end": h["end"],
            "label": f"{h['ji_hanja']}시 ({h['ji']}시) - {h['start']}~{h['end']}"
        }
        for h in HOUR_OPTIONS
    ]


@router.get(
    "/saju/cache-stats",
    summary="캐시 통계"
)
async def get_cache_stats(cache: SajuCache = Depends(get_cache_service)):
    """캐시 통계 조회"""
    return cache.get_stats()
