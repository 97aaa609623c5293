"""
한국천문연구원(KASI) 음양력 API 연동 모듈
- getLunCalInfo: 양력 → 음력 + 세차/월건/일진
- getSolCalInfo: 음력(평/윤달) → 양력 + 세차/월건/일진
- 타임아웃 2초, 재시도 없음
- 실패는 전부 KasiApiError로 통일 (fallback 여부는 호출자가 결정)
"""
import httpx
from typing import Optional, Dict, Any
import logging

from fourpillars.config import get_settings
from fourpillars.services.errors import KasiApiError

logger = logging.getLogger(__name__)


def _extract_item(payload: Any) -> Dict[str, Any]:
    """response.body.items.item 추출 (단일 객체 / 배열 / 빈 문자열 모두 처리)"""
    if not isinstance(payload, dict):
        raise KasiApiError("KASI payload is not a JSON object")

    response = payload.get("response") or {}
    header = response.get("header") or {}
    result_code = str(header.get("resultCode", "00"))
    if result_code not in ("00", "0"):
        raise KasiApiError(f"KASI resultCode={result_code} ({header.get('resultMsg', '')})")

    body = response.get("body") or {}
    items = body.get("items") or {}
    if not isinstance(items, dict):
        raise KasiApiError("KASI returned no items")

    item = items.get("item")
    if isinstance(item, list):
        item = item[0] if item else None
    if not item or not isinstance(item, dict):
        raise KasiApiError("KASI returned empty item")
    return item


def _is_leap(value: Any) -> bool:
    # lunLeapmonth: "평" / "윤" (구버전 응답은 "0" / "1")
    return str(value).strip() in ("윤", "1")


class KasiApiClient:
    """KASI 음양력 API 클라이언트"""

    BASE_URL = "http://apis.data.go.kr/B090041/openapi/service/LrsrCldInfoService"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.clean_kasi_api_key
        self.base_url = (base_url or settings.kasi_base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.kasi_timeout_seconds
        self._transport = transport

    async def _get(self, operation: str, params: Dict[str, str]) -> Dict[str, Any]:
        if not self.api_key:
            raise KasiApiError("KASI API key not configured")

        url = f"{self.base_url}/{operation}"
        query = {"serviceKey": self.api_key, "_type": "json", **params}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            raise KasiApiError(f"KASI {operation} timeout") from e
        except httpx.HTTPError as e:
            raise KasiApiError(f"KASI {operation} HTTP error: {e}") from e
        except ValueError as e:
            # 인증키 오류 등은 JSON 요청에도 XML로 응답함
            raise KasiApiError(f"KASI {operation} returned non-JSON body") from e

        return _extract_item(payload)

    async def get_lunar_info(self, year: int, month: int, day: int) -> Dict[str, Any]:
        """
        양력 날짜로 음력 정보 조회

        Returns:
            {
                "lunar_year": 1990, "lunar_month": 4, "lunar_day": 21,
                "is_leap_month": False,
                "year_ganji": "경오(庚午)", "month_ganji": "신사(辛巳)", "day_ganji": "경진(庚辰)",
            }
        """
        ymd = f"{year}-{month:02d}-{day:02d}"
        item = await self._get("getLunCalInfo", {
            "solYear": str(year),
            "solMonth": str(month).zfill(2),
            "solDay": str(day).zfill(2),
        })

        try:
            out = {
                "lunar_year": int(item["lunYear"]),
                "lunar_month": int(item["lunMonth"]),
                "lunar_day": int(item["lunDay"]),
            }
        except (KeyError, TypeError, ValueError) as e:
            raise KasiApiError(f"KASI getLunCalInfo malformed for {ymd}: {e}") from e

        out.update({
            "is_leap_month": _is_leap(item.get("lunLeapmonth", "")),
            "year_ganji": item.get("lunSecha", ""),
            "month_ganji": item.get("lunWolgeon", ""),
            "day_ganji": item.get("lunIljin", ""),
        })
        logger.info(f"[KASI] getLunCalInfo {ymd} → {out['lunar_year']}-{out['lunar_month']:02d}-{out['lunar_day']:02d}")
        return out

    async def get_solar_info(self, year: int, month: int, day: int, is_leap_month: bool = False) -> Dict[str, Any]:
        """
        음력 날짜(평달/윤달)로 양력 정보 조회

        Returns:
            {
                "solar_year": 2020, "solar_month": 5, "solar_day": 23,
                "is_leap_month": True,
                "year_ganji": ..., "month_ganji": ..., "day_ganji": ...,
            }
        """
        ymd = f"{year}-{month:02d}-{day:02d}{' (윤)' if is_leap_month else ''}"
        item = await self._get("getSolCalInfo", {
            "lunYear": str(year),
            "lunMonth": str(month).zfill(2),
            "lunDay": str(day).zfill(2),
            "leapMonth": "윤" if is_leap_month else "평",
        })

        try:
            out = {
                "solar_year": int(item["solYear"]),
                "solar_month": int(item["solMonth"]),
                "solar_day": int(item["solDay"]),
            }
        except (KeyError, TypeError, ValueError) as e:
            raise KasiApiError(f"KASI getSolCalInfo malformed for {ymd}: {e}") from e

        out.update({
            "is_leap_month": _is_leap(item.get("lunLeapmonth", "윤" if is_leap_month else "평")),
            "year_ganji": item.get("lunSecha", ""),
            "month_ganji": item.get("lunWolgeon", ""),
            "day_ganji": item.get("lunIljin", ""),
        })
        logger.info(f"[KASI] getSolCalInfo {ymd} → {out['solar_year']}-{out['solar_month']:02d}-{out['solar_day']:02d}")
        return out
