"""
60갑자 기초 데이터
- 천간(10개) × 지지(12개) 심볼 (한자 값 + 한글 라벨)
- 연간+월지 → 월간 조합표
- 지지 대표 십성 / 지장간 / 12운성 / 12신살 고정 테이블

모든 조회 테이블은 이 모듈 한 곳에서만 정의한다.
"""
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

# 천간/지지 한글 라벨 (Enum 순서와 동일)
CHEONGAN = ("갑", "을", "병", "정", "무", "기", "경", "신", "임", "계")
JIJI = ("자", "축", "인", "묘", "진", "사", "오", "미", "신", "유", "술", "해")

# 오행 (천간 인덱스 순)
_GAN_ELEMENTS = ("목", "목", "화", "화", "토", "토", "금", "금", "수", "수")

# 오행 (지지 인덱스 순)
_JI_ELEMENTS = ("수", "토", "목", "목", "토", "화", "화", "토", "금", "금", "토", "수")

_JI_ANIMALS = ("쥐", "소", "호랑이", "토끼", "용", "뱀", "말", "양", "원숭이", "닭", "개", "돼지")

ELEMENTS = ("목", "화", "토", "금", "수")


class Stem(str, Enum):
    """천간. 값은 한자, kor는 한글 라벨"""
    GAP = "甲"
    EUL = "乙"
    BYEONG = "丙"
    JEONG = "丁"
    MU = "戊"
    GI = "己"
    GYEONG = "庚"
    SIN = "辛"
    IM = "壬"
    GYE = "癸"

    @property
    def idx(self) -> int:
        return _STEM_INDEX[self]

    @property
    def hanja(self) -> str:
        return self.value

    @property
    def kor(self) -> str:
        return CHEONGAN[self.idx]

    @property
    def element(self) -> str:
        return _GAN_ELEMENTS[self.idx]

    @property
    def polarity(self) -> str:
        return "양" if self.idx % 2 == 0 else "음"

    @classmethod
    def from_index(cls, idx: int) -> "Stem":
        return STEMS[idx % 10]

    @classmethod
    def parse(cls, symbol: str) -> "Stem":
        """한자('甲') 또는 한글('갑') 모두 허용"""
        if symbol in _STEM_BY_KOR:
            return _STEM_BY_KOR[symbol]
        return cls(symbol)


class Branch(str, Enum):
    """지지. 값은 한자, kor는 한글 라벨"""
    JA = "子"
    CHUK = "丑"
    IN = "寅"
    MYO = "卯"
    JIN = "辰"
    SA = "巳"
    O = "午"
    MI = "未"
    SHIN = "申"
    YU = "酉"
    SUL = "戌"
    HAE = "亥"

    @property
    def idx(self) -> int:
        return _BRANCH_INDEX[self]

    @property
    def hanja(self) -> str:
        return self.value

    @property
    def kor(self) -> str:
        return JIJI[self.idx]

    @property
    def element(self) -> str:
        return _JI_ELEMENTS[self.idx]

    @property
    def animal(self) -> str:
        return _JI_ANIMALS[self.idx]

    @classmethod
    def from_index(cls, idx: int) -> "Branch":
        return BRANCHES[idx % 12]

    @classmethod
    def parse(cls, symbol: str) -> "Branch":
        """한자('子') 또는 한글('자') 모두 허용"""
        if symbol in _BRANCH_BY_KOR:
            return _BRANCH_BY_KOR[symbol]
        return cls(symbol)


STEMS: Tuple[Stem, ...] = tuple(Stem)
BRANCHES: Tuple[Branch, ...] = tuple(Branch)

_STEM_INDEX = {s: i for i, s in enumerate(STEMS)}
_BRANCH_INDEX = {b: i for i, b in enumerate(BRANCHES)}
_STEM_BY_KOR = {kor: STEMS[i] for i, kor in enumerate(CHEONGAN)}
_BRANCH_BY_KOR = {kor: BRANCHES[i] for i, kor in enumerate(JIJI)}


@dataclass(frozen=True)
class StemBranchPair:
    """기둥 하나 (천간 + 지지)"""
    stem: Stem
    branch: Branch

    @property
    def ganji(self) -> str:
        return f"{self.stem.hanja}{self.branch.hanja}"

    @property
    def ganji_kor(self) -> str:
        return f"{self.stem.kor}{self.branch.kor}"

    @property
    def sexagenary_index(self) -> Optional[int]:
        return sexagenary_index(self.stem, self.branch)

    @classmethod
    def from_indices(cls, stem_idx: int, branch_idx: int) -> "StemBranchPair":
        return cls(Stem.from_index(stem_idx), Branch.from_index(branch_idx))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 십성 / 12운성 / 12신살 라벨
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SELF_MARKER = "일간"
UNKNOWN = "미상"

TEN_STARS = (
    "비견", "겁재",
    "식신", "상관",
    "편재", "정재",
    "편관", "정관",
    "편인", "정인",
)

TWELVE_STAGES = (
    "장생", "목욕", "관대", "건록", "제왕", "쇠",
    "병", "사", "묘", "절", "태", "양",
)

# 오행 상생 / 상극
GENERATES = MappingProxyType({"목": "화", "화": "토", "토": "금", "금": "수", "수": "목"})
CONTROLS = MappingProxyType({"목": "토", "화": "금", "토": "수", "금": "목", "수": "화"})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 연간 + 월지 → 월간 (키: "{연간}:{월지}")
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _month_stem_table() -> Mapping[str, Stem]:
    raw = {
        "甲": "丙丁戊己庚辛壬癸甲乙丙丁",
        "乙": "戊己庚辛壬癸甲乙丙丁戊己",
        "丙": "庚辛壬癸甲乙丙丁戊己庚辛",
        "丁": "壬癸甲乙丙丁戊己庚辛壬癸",
        "戊": "甲乙丙丁戊己庚辛壬癸甲乙",
        "己": "丙丁戊己庚辛壬癸甲乙丙丁",
        "庚": "戊己庚辛壬癸甲乙丙丁戊己",
        "辛": "庚辛壬癸甲乙丙丁戊己庚辛",
        "壬": "壬癸甲乙丙丁戊己庚辛壬癸",
        "癸": "甲乙丙丁戊己庚辛壬癸甲乙",
    }
    # 월지 순서: 寅卯辰巳午未申酉戌亥子丑
    month_order = "寅卯辰巳午未申酉戌亥子丑"
    table = {}
    for year_stem, stems in raw.items():
        for branch, stem in zip(month_order, stems):
            table[f"{year_stem}:{branch}"] = Stem(stem)
    return MappingProxyType(table)


YEAR_STEM_BRANCH_TO_MONTH_STEM = _month_stem_table()

# 조합표 누락 시 기본 월간
DEFAULT_MONTH_STEM = Stem.BYEONG


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 일간 + 지지 → 대표 십성 (암기표, 상생상극으로 재계산하지 않음)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _freeze_nested(raw: Dict[str, Dict[str, str]], key_parse, inner_parse) -> Mapping:
    return MappingProxyType({
        key_parse(k): MappingProxyType({inner_parse(b): v for b, v in inner.items()})
        for k, inner in raw.items()
    })


GROUND_TEN_STAR_TABLE = _freeze_nested({
    "甲": {"寅": "비견", "卯": "겁재", "巳": "식신", "午": "상관", "辰": "편재", "戌": "편재",
          "丑": "정재", "未": "정재", "申": "편관", "酉": "정관", "亥": "편인", "子": "정인"},
    "乙": {"卯": "비견", "寅": "겁재", "午": "식신", "巳": "상관", "丑": "편재", "未": "편재",
          "辰": "정재", "戌": "정재", "酉": "정관", "申": "편관", "子": "편인", "亥": "정인"},
    "丙": {"巳": "비견", "午": "겁재", "辰": "식신", "未": "상관", "戌": "식신", "丑": "상관",
          "申": "편재", "酉": "정재", "亥": "편관", "子": "정관", "寅": "편인", "卯": "정인"},
    "丁": {"午": "비견", "巳": "겁재", "未": "식신", "申": "정재", "丑": "식신", "辰": "상관",
          "戌": "상관", "酉": "편재", "亥": "편관", "子": "편관", "寅": "정인", "卯": "편인"},
    "戊": {"巳": "편인", "午": "정", "申": "식신", "丑": "겁재", "辰": "비견", "戌": "비견",
          "未": "겁재", "酉": "상관", "亥": "편재", "子": "정재", "寅": "편관", "卯": "정관"},
    "己": {"午": "편인", "巳": "정인", "未": "비견", "申": "상관", "丑": "비견", "子": "편재",
          "辰": "겁재", "戌": "겁재", "酉": "식신", "亥": "정재", "寅": "정관", "卯": "편관"},
    "庚": {"申": "비견", "酉": "겁재", "亥": "식신", "子": "상관", "寅": "편재", "卯": "정재",
          "巳": "편관", "午": "정관", "辰": "편인", "戌": "편인", "丑": "정인", "未": "정인"},
    "辛": {"酉": "비견", "申": "겁재", "子": "식신", "亥": "상관", "卯": "편재", "寅": "정재",
          "午": "편관", "巳": "정관", "丑": "편인", "未": "편인", "辰": "정인", "戌": "정인"},
    "壬": {"亥": "비견", "子": "겁재", "寅": "식신", "卯": "상관", "巳": "편재", "午": "정재",
          "辰": "편관", "戌": "편관", "丑": "정관", "未": "정관", "申": "편인", "酉": "정인"},
    "癸": {"子": "비견", "亥": "겁재", "卯": "식신", "寅": "상관", "午": "편재", "巳": "정재",
          "丑": "편관", "未": "편관", "辰": "정관", "戌": "정관", "酉": "편인", "申": "정인"},
}, Stem, Branch)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 지장간 (지지 → 숨은 천간 1~3개, 순서 유지)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

HIDDEN_STEMS: Mapping[Branch, Tuple[Stem, ...]] = MappingProxyType({
    Branch(b): tuple(Stem(s) for s in stems)
    for b, stems in {
        "子": "癸",
        "丑": "己癸辛",
        "寅": "甲丙戊",
        "卯": "乙",
        "辰": "戊乙癸",
        "巳": "丙戊庚",
        "午": "丁己",
        "未": "己丁乙",
        "申": "庚壬戊",
        "酉": "辛",
        "戌": "戊辛丁",
        "亥": "壬甲",
    }.items()
})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 12운성 (일간 × 지지)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

TWELVE_STAGE_TABLE = _freeze_nested({
    "갑": {"해": "장생", "자": "목욕", "축": "관대", "인": "건록", "묘": "제왕", "진": "쇠",
          "사": "병", "오": "사", "미": "묘", "신": "절", "유": "태", "술": "양"},
    "을": {"오": "장생", "사": "목욕", "진": "관대", "묘": "건록", "인": "제왕", "축": "쇠",
          "자": "병", "해": "사", "술": "묘", "유": "절", "신": "태", "미": "양"},
    "병": {"인": "장생", "묘": "목욕", "진": "관대", "사": "건록", "오": "제왕", "미": "쇠",
          "신": "병", "유": "사", "술": "묘", "해": "절", "자": "태", "축": "양"},
    "정": {"유": "장생", "신": "목욕", "미": "관대", "오": "건록", "사": "제왕", "진": "쇠",
          "묘": "병", "인": "사", "축": "묘", "자": "절", "해": "태", "술": "양"},
    "무": {"인": "장생", "묘": "목욕", "진": "관대", "사": "건록", "오": "제왕", "미": "쇠",
          "신": "병", "유": "사", "술": "묘", "해": "절", "자": "태", "축": "양"},
    "기": {"유": "장생", "신": "목욕", "미": "관대", "오": "건록", "사": "제왕", "진": "쇠",
          "묘": "병", "인": "사", "축": "묘", "자": "절", "해": "태", "술": "양"},
    "경": {"사": "장생", "오": "목욕", "미": "관대", "신": "건록", "유": "제왕", "술": "쇠",
          "해": "병", "자": "사", "축": "묘", "인": "절", "묘": "태", "진": "양"},
    "신": {"자": "장생", "해": "목욕", "술": "관대", "유": "건록", "신": "제왕", "미": "쇠",
          "오": "병", "사": "사", "묘": "묘", "인": "절", "축": "태", "진": "양"},
    "임": {"신": "장생", "유": "목욕", "술": "관대", "해": "건록", "자": "제왕", "축": "쇠",
          "인": "병", "묘": "사", "진": "묘", "사": "절", "오": "태", "미": "양"},
    "계": {"묘": "장생", "인": "목욕", "축": "관대", "자": "건록", "해": "제왕", "술": "쇠",
          "유": "병", "신": "사", "미": "묘", "진": "절", "사": "태", "오": "양"},
}, Stem.parse, Branch.parse)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 12신살 (연지 삼합 그룹 → 신살별 대상 지지)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SIN_SAL_GROUPS = ("인오술", "사유축", "신자진", "해묘미")

# 신살 순서가 결과 리스트 순서
SIN_SAL_TABLE: Mapping[str, Mapping[str, Branch]] = MappingProxyType({
    name: MappingProxyType(dict(zip(SIN_SAL_GROUPS, (Branch(t) for t in targets))))
    for name, targets in (
        ("지살", "寅巳申亥"),
        ("년살", "卯午酉子"),
        ("월살", "辰未戌丑"),
        ("망신살", "巳申亥寅"),
        ("장성살", "午酉子卯"),
        ("반안살", "未戌丑辰"),
        ("역마살", "申亥寅巳"),
        ("육해살", "酉子卯午"),
        ("화개살", "戌丑辰未"),
        ("겁살", "亥寅巳申"),
        ("재살", "子卯午酉"),
        ("천살", "丑辰未戌"),
    )
})

BRANCH_GROUPS: Mapping[Branch, str] = MappingProxyType({
    Branch.IN: "인오술", Branch.O: "인오술", Branch.SUL: "인오술",
    Branch.SA: "사유축", Branch.YU: "사유축", Branch.CHUK: "사유축",
    Branch.SHIN: "신자진", Branch.JA: "신자진", Branch.JIN: "신자진",
    Branch.HAE: "해묘미", Branch.MYO: "해묘미", Branch.MI: "해묘미",
})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 시간대 옵션 (2시간 단위 지지)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

HOUR_OPTIONS = [
    {"index": i, "ji": b.kor, "ji_hanja": b.hanja, "start": start, "end": end}
    for i, (b, start, end) in enumerate(zip(
        BRANCHES,
        ("23:00", "01:00", "03:00", "05:00", "07:00", "09:00",
         "11:00", "13:00", "15:00", "17:00", "19:00", "21:00"),
        ("00:59", "02:59", "04:59", "06:59", "08:59", "10:59",
         "12:59", "14:59", "16:59", "18:59", "20:59", "22:59"),
    ))
]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 간지 문자열 파싱
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def norm_ganji(x) -> str:
    """
    간지 문자열 정규화
    - KASI: '무인(戊寅)' → '무인'
    - 괄호+한자, invisible chars 제거
    """
    s = str(x)
    s = re.sub(r"\([^)]*\)", "", s)
    for ch in ("\u200b", "\ufeff", "\xa0"):
        s = s.replace(ch, "")
    s = re.sub(r"\s+", "", s)

    hangul_match = re.match(r"[가-힣]{2}", s)
    if hangul_match:
        return hangul_match.group(0)
    return s


def parse_ganji(x) -> Optional[StemBranchPair]:
    """'경진(庚辰)' / '경진' / '庚辰' → StemBranchPair. 해석 불가면 None"""
    if not x:
        return None
    s = norm_ganji(x)
    if len(s) < 2:
        return None
    try:
        return StemBranchPair(Stem.parse(s[0]), Branch.parse(s[1]))
    except ValueError:
        return None


def sexagenary_index(stem: Stem, branch: Branch) -> Optional[int]:
    """60갑자 순번 (갑자=0). 음양이 맞지 않는 조합이면 None"""
    if stem.idx % 2 != branch.idx % 2:
        return None
    return (6 * stem.idx - 5 * branch.idx) % 60


def get_sixty_ganji_list() -> List[str]:
    """60갑자 표준 순서 (갑자부터 1칸씩 증가)"""
    return [f"{CHEONGAN[i % 10]}{JIJI[i % 12]}" for i in range(60)]


SIXTY_GANJI = tuple(get_sixty_ganji_list())
