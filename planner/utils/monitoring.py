"""Monitoring, logging, and error tracking utilities"""
import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from planner.config import settings

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger("planner")


class StructuredLogger:
    """Structured JSON logging"""

    @staticmethod
    def log_event(
        event_type: str,
        message: str,
        task_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ):
        """Log structured event"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "message": message,
            "level": level,
        }

        if task_id:
            log_data["task_id"] = task_id

        if metadata:
            log_data["metadata"] = metadata

        log_message = json.dumps(log_data, default=str)

        if level == "ERROR":
            logger.error(log_message)
        elif level == "WARNING":
            logger.warning(log_message)
        elif level == "DEBUG":
            logger.debug(log_message)
        else:
            logger.info(log_message)

    @staticmethod
    def log_error(
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        task_id: Optional[str] = None
    ):
        """Log error with full context"""
        StructuredLogger.log_event(
            event_type="error",
            message=str(error),
            task_id=task_id,
            metadata={
                "error_type": type(error).__name__,
                "traceback": traceback.format_exc(),
                "context": context or {},
            },
            level="ERROR"
        )


class PersistenceMetrics:
    """Track persistence save attempts"""

    def __init__(self):
        self.metrics: Dict[str, Any] = {
            "successful_saves": 0,
            "failed_saves": 0,
            "save_times": [],
            "last_save": None,
        }

    def record_save(self, success: bool, processing_time: float):
        """Record a save attempt"""
        if success:
            self.metrics["successful_saves"] += 1
            self.metrics["last_save"] = datetime.now(timezone.utc).isoformat()
        else:
            self.metrics["failed_saves"] += 1

        self.metrics["save_times"].append(processing_time)

        # Keep only last 100 save times
        if len(self.metrics["save_times"]) > 100:
            self.metrics["save_times"] = self.metrics["save_times"][-100:]

    def get_success_rate(self) -> float:
        """Calculate success rate"""
        total = self.metrics["successful_saves"] + self.metrics["failed_saves"]
        if total == 0:
            return 0.0
        return (self.metrics["successful_saves"] / total) * 100

    def get_avg_save_time(self) -> float:
        """Calculate average save time"""
        if not self.metrics["save_times"]:
            return 0.0
        return sum(self.metrics["save_times"]) / len(self.metrics["save_times"])

    def get_metrics(self) -> Dict[str, Any]:
        """Get all metrics"""
        return {
            **self.metrics,
            "success_rate": self.get_success_rate(),
            "avg_save_time": self.get_avg_save_time(),
        }


# Global metrics instance
persistence_metrics = PersistenceMetrics()
