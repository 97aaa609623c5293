"""
Four Pillars Engine Settings
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- KASI(한국천문연구원) 음양력 API
- 일주 조회 소스 (kasi / anchor)
- 결과 캐시 (TTL 24시간)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
from pydantic_settings import BaseSettings
from typing import List, Literal, Optional


class Settings(BaseSettings):
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # KASI API
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    kasi_api_key: str = ""
    kasi_base_url: str = "http://apis.data.go.kr/B090041/openapi/service/LrsrCldInfoService"
    kasi_timeout_seconds: float = 2.0

    @property
    def clean_kasi_api_key(self) -> str:
        return self.kasi_api_key.strip().replace('\n', '').replace('\r', '')

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 계산 옵션
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # kasi: 일진(lunIljin) 조회 / anchor: 2000-01-01 무오일 기준 오프라인 계산
    day_pillar_source: Literal["kasi", "anchor"] = "kasi"

    # True면 입춘(2/4) 전 출생은 전년도 연주
    ipchun_year_boundary: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Cache
    cache_ttl_seconds: int = 86400
    cache_max_size: int = 10000

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
