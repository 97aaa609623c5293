"""
사주 계산 오류 분류
- CalculationError: 계산 실패 공통 베이스
- InvalidBirthInputError: 입력 형식 오류
- DayPillarUnavailableError: 일주 조회 실패 (대체값 없이 호출자에게 전파)
- KasiApiError: KASI 호출 실패 (변환 서비스 내부에서 fallback 처리)
"""
from datetime import date
from typing import Optional


class CalculationError(Exception):
    """계산 오류"""
    pass


class InvalidBirthInputError(CalculationError, ValueError):
    """생년월일/시간 입력 오류"""
    pass


class DayPillarUnavailableError(CalculationError):
    """일주(日柱)를 외부 조회로 확정하지 못함"""

    def __init__(self, solar_date: date, reason: Optional[str] = None):
        self.solar_date = solar_date
        self.reason = reason
        message = f"day pillar unavailable for {solar_date.isoformat()}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class KasiApiError(Exception):
    """KASI API 호출/응답 오류"""
    pass
