"""
Four Pillars Engine - Main App
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
생년월일시 → 사주 4기둥 + 기둥별 파생 속성
- /api/v1/saju/calculate
- /api/v1/saju/hour-options
- /api/v1/saju/cache-stats
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fourpillars.config import get_settings
from fourpillars.routers import calculate

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# App 선언
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
app = FastAPI(title="Four Pillars Engine", version="1.0.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# /health - 무조건 즉시 OK
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {
        "service": "Four Pillars Engine",
        "status": "running",
        "day_pillar_source": settings.day_pillar_source,
    }


app.include_router(calculate.router, prefix="/api/v1", tags=["Saju"])


@app.on_event("startup")
async def startup():
    logger.info("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
    logger.info("🚀 Four Pillars Engine 가동 시작")
    logger.info(f"   day_pillar_source: {settings.day_pillar_source}")
    logger.info(f"   ipchun_year_boundary: {settings.ipchun_year_boundary}")
    logger.info(f"   KASI key: {'설정됨' if settings.clean_kasi_api_key else '없음 (근사 변환만 가능)'}")
    logger.info("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
    if settings.day_pillar_source == "kasi" and not settings.clean_kasi_api_key:
        logger.warning("⚠️ KASI_API_KEY 없음: 일주 조회가 모두 실패합니다 (DAY_PILLAR_SOURCE=anchor 권장)")


@app.exception_handler(Exception)
async def error_handler(request: Request, exc: Exception):
    logger.error(f"Error: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)[:100]})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
