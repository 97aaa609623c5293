"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
2️⃣ DERIVE 모듈 - 기둥별 파생 속성
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
(일간, 지지) / (연지, 지지) → 십성, 지지십성, 지장간, 12운성, 12신살
모든 함수는 순수 함수: 기둥 순서와 무관하게 같은 결과
표 누락은 예외 대신 WARNING + '미상' / []
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from fourpillars.models.schemas import AnnotatedPillar
from fourpillars.services.ganji import (
    BRANCH_GROUPS,
    CONTROLS,
    GENERATES,
    GROUND_TEN_STAR_TABLE,
    HIDDEN_STEMS,
    SELF_MARKER,
    SIN_SAL_TABLE,
    TWELVE_STAGE_TABLE,
    UNKNOWN,
    Branch,
    Stem,
    StemBranchPair,
)

logger = logging.getLogger(__name__)


class PillarRole(str, Enum):
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"


@dataclass(frozen=True)
class PillarContext:
    """파생 속성 계산 기준 (일간, 연지, 기둥 위치)"""
    day_stem: Stem
    year_branch: Branch
    role: PillarRole


# 십성(十星) 관계 - 일간 기준, (음양 같음, 음양 다름)
TEN_STAR_RELATION = {
    "same": ("비견", "겁재"),
    "i_generate": ("식신", "상관"),
    "i_control": ("편재", "정재"),
    "controls_me": ("편관", "정관"),
    "generates_me": ("편인", "정인"),
}


def _relation(me: str, other: str) -> str:
    if me == other:
        return "same"
    if GENERATES[me] == other:
        return "i_generate"
    if CONTROLS[me] == other:
        return "i_control"
    if CONTROLS[other] == me:
        return "controls_me"
    return "generates_me"


def calc_ten_star(day_stem: Stem, target_stem: Stem) -> str:
    """
    천간 십성

    일간과 대상 천간의 오행 관계(생/극)로 쌍을 고르고,
    음양이 같으면 첫 번째(비견/식신/편재/편관/편인), 다르면 두 번째
    """
    same_polarity = day_stem.polarity == target_stem.polarity
    pair = TEN_STAR_RELATION[_relation(day_stem.element, target_stem.element)]
    return pair[0] if same_polarity else pair[1]


def get_ground_ten_star(day_stem: Stem, branch: Branch) -> str:
    """지지 대표 십성 (고정표)"""
    star = GROUND_TEN_STAR_TABLE.get(day_stem, {}).get(branch)
    if star is None:
        logger.warning(f"[Derive] ground ten star table miss: {day_stem.value}:{branch.value}")
        return UNKNOWN
    return star


def get_hidden_stems(branch: Branch) -> List[Stem]:
    """지장간 (1~3개, 표 순서 유지)"""
    stems = HIDDEN_STEMS.get(branch)
    if stems is None:
        logger.warning(f"[Derive] hidden stem table miss: {branch.value}")
        return []
    return list(stems)


def calc_hidden_ten_stars(day_stem: Stem, branch: Branch) -> List[str]:
    return [calc_ten_star(day_stem, s) for s in get_hidden_stems(branch)]


def calc_twelve_stage(day_stem: Stem, branch: Branch) -> str:
    """12운성 (일간 기준 고정표)"""
    stage = TWELVE_STAGE_TABLE.get(day_stem, {}).get(branch)
    if stage is None:
        logger.warning(f"[Derive] twelve stage table miss: {day_stem.value}:{branch.value}")
        return UNKNOWN
    return stage


def calc_twelve_sin_sal(year_branch: Branch, branch: Branch) -> List[str]:
    """
    12신살 (연지 삼합 그룹 기준)

    Returns:
        해당 지지에 걸리는 신살 이름 (표 순서). 그룹 판정 실패 시 []
    """
    group = BRANCH_GROUPS.get(year_branch)
    if group is None:
        logger.warning(f"[Derive] sin-sal group miss for year branch {year_branch.value}")
        return []
    return [name for name, targets in SIN_SAL_TABLE.items() if targets.get(group) == branch]


def annotate(pillar: StemBranchPair, context: PillarContext) -> AnnotatedPillar:
    """기둥 하나에 파생 속성 부여"""
    day_stem = context.day_stem
    if context.role == PillarRole.DAY:
        ten_star = SELF_MARKER
    else:
        ten_star = calc_ten_star(day_stem, pillar.stem)

    return AnnotatedPillar(
        stem=pillar.stem.hanja,
        branch=pillar.branch.hanja,
        stem_kor=pillar.stem.kor,
        branch_kor=pillar.branch.kor,
        ten_star=ten_star,
        ground_ten_star=get_ground_ten_star(day_stem, pillar.branch),
        hidden_stems=[s.hanja for s in get_hidden_stems(pillar.branch)],
        hidden_ten_stars=calc_hidden_ten_stars(day_stem, pillar.branch),
        twelve_stage=calc_twelve_stage(day_stem, pillar.branch),
        twelve_sin_sal=calc_twelve_sin_sal(context.year_branch, pillar.branch),
    )
