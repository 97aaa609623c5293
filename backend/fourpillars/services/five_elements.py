"""
오행 분포 분석
- 4천간 + 4지지 = 8글자의 목/화/토/금/수 개수
- 동점은 목화토금수 순서 유지
"""
import logging
from typing import Optional

from fourpillars.models.schemas import ElementAnalysis, FourPillars
from fourpillars.services.ganji import ELEMENTS, Branch, Stem

logger = logging.getLogger(__name__)

# 사주 데이터가 불완전할 때의 기본 분석
DEFAULT_ANALYSIS = ElementAnalysis(
    primary="화",
    secondary="토",
    weakness="수",
    element_counts={"목": 0, "화": 1, "토": 1, "금": 0, "수": 0},
    total_elements=2,
)


def calculate_five_elements(four_pillars: Optional[FourPillars]) -> ElementAnalysis:
    if four_pillars is None:
        return DEFAULT_ANALYSIS.model_copy(deep=True)

    counts = {e: 0 for e in ELEMENTS}
    for pillar in (four_pillars.year, four_pillars.month, four_pillars.day, four_pillars.hour):
        for parse, symbol in ((Stem.parse, pillar.stem), (Branch.parse, pillar.branch)):
            try:
                counts[parse(symbol).element] += 1
            except ValueError:
                logger.warning(f"[FiveElements] unknown symbol skipped: {symbol!r}")

    present = sorted((e for e in ELEMENTS if counts[e] > 0), key=lambda e: -counts[e])
    weakness = min(ELEMENTS, key=lambda e: counts[e])

    return ElementAnalysis(
        primary=present[0] if present else DEFAULT_ANALYSIS.primary,
        secondary=present[1] if len(present) > 1 else DEFAULT_ANALYSIS.secondary,
        weakness=weakness,
        element_counts=counts,
        total_elements=sum(counts.values()),
    )
