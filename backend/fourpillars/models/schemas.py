"""
Pydantic 스키마 정의
API 요청/응답 모델 - 사주 4기둥 + 파생 속성
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal, Dict


class CamelModel(BaseModel):
    """camelCase 직렬화 (snake_case 입력도 허용)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============ 입력 ============

class BirthInput(CamelModel):
    """사주 계산 입력"""
    birth_date: str = Field(..., description="생년월일 (YYYY-MM-DD 또는 YYYYMMDD)")
    birth_time: str = Field(..., description="출생 시각 (HH:MM 또는 HHMM)")
    calendar_type: Literal["solar", "lunar"] = Field("solar", description="양력/음력")
    is_leap_month: bool = Field(False, description="음력 윤달 여부")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "birthDate": "1990-05-15",
                "birthTime": "14:30",
                "calendarType": "solar",
                "isLeapMonth": False,
            }
        },
    )


# ============ 결과 ============

class AnnotatedPillar(CamelModel):
    """기둥 하나 + 파생 속성"""
    model_config = ConfigDict(frozen=True)

    stem: str = Field(..., description="천간 (甲~癸)")
    branch: str = Field(..., description="지지 (子~亥)")
    stem_kor: str = Field(..., description="천간 한글")
    branch_kor: str = Field(..., description="지지 한글")
    ten_star: str = Field(..., description="천간 십성 (일주는 '일간')")
    ground_ten_star: str = Field(..., description="지지 대표 십성")
    hidden_stems: List[str] = Field(default_factory=list, description="지장간")
    hidden_ten_stars: List[str] = Field(default_factory=list, description="지장간 십성")
    twelve_stage: str = Field(..., description="12운성")
    twelve_sin_sal: List[str] = Field(default_factory=list, description="12신살")


class FourPillars(CamelModel):
    """사주 원국 (4기둥)"""
    model_config = ConfigDict(frozen=True)

    year: AnnotatedPillar
    month: AnnotatedPillar
    day: AnnotatedPillar
    hour: AnnotatedPillar
    solar_date: str = Field(..., description="양력 날짜 (ISO)")
    lunar_date: str = Field(..., description="음력 날짜 (ISO 형식, 윤달 여부는 is_leap_month)")
    is_leap_month: bool = False
    calendar_source: Literal["kasi", "approximate"] = Field("kasi", description="음양력 변환 출처")


class ElementAnalysis(CamelModel):
    """오행 분포"""
    primary: str = Field(..., description="가장 많은 오행")
    secondary: str = Field(..., description="두 번째 오행")
    weakness: str = Field(..., description="가장 적은 오행")
    element_counts: Dict[str, int] = Field(..., description="오행별 개수")
    total_elements: int = Field(..., description="집계한 글자 수")


class QualityInfo(CamelModel):
    """계산 품질 정보 (정확도 배지용)"""
    solar_term_boundary: bool = Field(..., description="절기 경계 여부")
    boundary_reason: Optional[str] = Field(None, description="경계 사유 (near_ipchun/near_term_change)")
    calendar_source: str = Field("kasi", description="음양력 변환 출처 (kasi/approximate)")
    year_source: str = Field("formula", description="연주 출처")
    day_source: str = Field("lookup", description="일주 출처")
    calculation_method: str = Field("solar_term_based", description="계산 방식")


class CalculateResponse(CamelModel):
    """사주 계산 응답"""
    success: bool = True
    four_pillars: FourPillars
    five_elements: ElementAnalysis
    quality: QualityInfo


class HourOption(BaseModel):
    """시간대 선택 옵션"""
    index: int = Field(..., description="지지 인덱스 (0-11)")
    ji: str = Field(..., description="지지 한글 (자~해)")
    ji_hanja: str = Field(..., description="지지 한자 (子~亥)")
    range_start: str = Field(..., description="시작 시간 (HH:MM)")
    range_end: str = Field(..., description="종료 시간 (HH:MM)")
    label: str = Field(..., description="표시 라벨")


# ============ 에러 응답 ============

class ErrorResponse(BaseModel):
    """에러 응답"""
    success: bool = False
    error_code: str
    message: str
    detail: Optional[str] = None
