"""
Health checks for the local store, the backend API and the Ollama service.
"""

import logging
from typing import Dict, Optional

import ollama
import requests

from storefront.core.config import settings
from storefront.core.db import get_db_connection

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


def check_database(db_path: Optional[str] = None) -> bool:
    """Test local store connectivity."""
    try:
        conn = get_db_connection(db_path)
        try:
            count = conn.execute("SELECT COUNT(*) FROM local_storage").fetchone()[0]
        finally:
            conn.close()
        logger.info(f"✅ Local store OK: {count} records")
        return True
    except Exception as e:
        logger.error(f"❌ Local store failed: {e}")
        return False


def check_api_connectivity(base_url: Optional[str] = None) -> bool:
    """Test backend connectivity."""
    url = f"{(base_url or settings.api_url).rstrip('/')}/health"
    try:
        response = requests.get(url, timeout=5)
        if response.status_code == 200:
            logger.info("✅ Backend API OK")
            return True
        logger.error(f"❌ Backend API returned {response.status_code}")
        return False
    except requests.RequestException as e:
        logger.error(f"❌ Backend API failed: {e}")
        return False


def check_llm_connectivity() -> bool:
    """Test Ollama connectivity."""
    try:
        ollama.Client(host=settings.ollama_host or None).chat(
            model=settings.ollama_model,
            messages=[{"role": "user", "content": "Say OK"}],
            stream=False
        )
        logger.info("✅ Ollama OK")
        return True
    except Exception as e:
        logger.error(f"❌ Ollama failed: {e}")
        return False


def health_check(db_path: Optional[str] = None) -> Dict[str, bool]:
    """Run all health checks."""
    checks = {
        "Local store": check_database(db_path),
        "Backend API": check_api_connectivity(),
        "Ollama/LLM": check_llm_connectivity(),
    }
    for name, result in checks.items():
        logger.info(f"[HEALTH] {name}: {'PASS' if result else 'FAIL'}")
    return checks


if __name__ == "__main__":
    health_check()
