"""
Runtime settings, read from the environment and an optional `.env` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[3]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


@dataclass(frozen=True)
class Settings:
    api_url: str
    ws_url: str
    db_path: str
    timeout: float
    ollama_model: str
    ollama_host: str
    free_shipping_threshold: float
    shipping_fee: float
    order_job_timeout: float
    order_job_interval: float


def load_settings() -> Settings:
    return Settings(
        api_url=(_get_env("STOREFRONT_API_URL", "API_URL", default="http://localhost:3000/api") or "").rstrip("/"),
        ws_url=_get_env("STOREFRONT_WS_URL", "API_WS_URL", default="http://localhost:3000") or "",
        db_path=_get_env("STOREFRONT_DB_PATH", "DB_PATH", default=str(ROOT_DIR / "data" / "storefront.db")) or "",
        timeout=_get_float("STOREFRONT_TIMEOUT", default=10.0),
        ollama_model=_get_env("OLLAMA_MODEL", default="qwen2.5:7b") or "qwen2.5:7b",
        ollama_host=_get_env("OLLAMA_HOST", default="http://localhost:11434") or "",
        free_shipping_threshold=_get_float("FREE_SHIPPING_THRESHOLD", default=300000),
        shipping_fee=_get_float("SHIPPING_FEE", default=15000),
        order_job_timeout=_get_float("ORDER_JOB_TIMEOUT", default=20.0),
        order_job_interval=_get_float("ORDER_JOB_INTERVAL", default=1.0),
    )


settings = load_settings()
