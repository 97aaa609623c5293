# services package - lazy imports so settings are read on first use
from fourpillars.services.errors import CalculationError, DayPillarUnavailableError, InvalidBirthInputError

# Lazy import: 실제 사용할 때 생성
saju_engine = None
cache_service = None


def get_cache_service():
    global cache_service
    if cache_service is None:
        from fourpillars.services.cache import SajuCache
        cache_service = SajuCache()
    return cache_service


def get_saju_engine():
    global saju_engine
    if saju_engine is None:
        from fourpillars.services.saju_engine import SajuEngine
        saju_engine = SajuEngine(cache=get_cache_service())
    return saju_engine


def reset_services():
    """공용 엔진/캐시 초기화 (설정 변경 후 재생성용)"""
    global saju_engine, cache_service
    saju_engine = None
    cache_service = None
