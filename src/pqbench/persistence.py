import json
import logging
from dataclasses import asdict

from .models import BenchmarkResult

logger = logging.getLogger(__name__)


def save_stats(result: BenchmarkResult, path: str) -> None:
    payload = {
        "stats": asdict(result.stats),
        "worker_count": result.worker_count,
        "failures": [
            {"worker_id": f.worker_id, "error": f.message} for f in result.failures
        ],
    }
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        logger.info(f"Stats saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save stats: {e}")
