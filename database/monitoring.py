"""
Logging and monitoring for store operations and record changes.
"""

import logging
import time
import json
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from pathlib import Path
from contextlib import asynccontextmanager

logger = logging.getLogger("database")
performance_logger = logging.getLogger("database.performance")
audit_logger = logging.getLogger("database.audit")


@dataclass
class DatabaseOperation:
    """Metadata for a single store operation."""
    operation_type: str  # 'SELECT', 'INSERT', 'UPDATE', 'DELETE'
    table_name: str
    guild_id: Optional[int] = None
    query: Optional[str] = None
    params: Optional[tuple] = None
    execution_time: Optional[float] = None
    rows_affected: Optional[int] = None
    success: bool = True
    error_message: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


@dataclass
class RecordChange:
    """Audit entry for a write to one of the bot's records."""
    guild_id: int
    record_type: str  # 'blacklist', 'welcome', 'goodbye', 'voice_stay'
    action: str  # 'SET', 'DELETE'
    details: Optional[Dict[str, Any]] = None
    user_id: Optional[int] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class PerformanceMonitor:
    """Track execution times per operation and flag slow queries."""

    def __init__(self, slow_query_threshold: float = 1.0):
        # Running totals per operation key; individual samples are not kept
        self.query_stats: Dict[str, Dict[str, float]] = {}
        self.slow_query_threshold = slow_query_threshold

    def record_query_time(self, query_type: str, execution_time: float):
        stats = self.query_stats.get(query_type)
        if stats is None:
            self.query_stats[query_type] = {
                'count': 1,
                'total_time': execution_time,
                'min_time': execution_time,
                'max_time': execution_time
            }
        else:
            stats['count'] += 1
            stats['total_time'] += execution_time
            stats['min_time'] = min(stats['min_time'], execution_time)
            stats['max_time'] = max(stats['max_time'], execution_time)

        if execution_time > self.slow_query_threshold:
            performance_logger.warning(
                f"Slow query detected: {query_type} took {execution_time:.3f}s "
                f"(threshold: {self.slow_query_threshold}s)"
            )

    def get_performance_stats(self) -> Dict[str, Dict[str, float]]:
        return {
            query_type: {
                'count': stats['count'],
                'avg_time': stats['total_time'] / stats['count'],
                'min_time': stats['min_time'],
                'max_time': stats['max_time'],
                'total_time': stats['total_time']
            }
            for query_type, stats in self.query_stats.items()
        }


class AuditLogger:
    """Writes record changes to the audit log and a JSON Lines file."""

    def __init__(self, audit_file: str = "logs/audit.jsonl"):
        self.audit_file = Path(audit_file)

    def log_change(self, change: RecordChange):
        audit_logger.info(
            f"Record change - Guild: {change.guild_id}, Record: {change.record_type}, "
            f"Action: {change.action}, Details: {change.details}, User: {change.user_id}"
        )

        try:
            record = asdict(change)
            if record['timestamp']:
                record['timestamp'] = record['timestamp'].isoformat()

            self.audit_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.audit_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(record, default=str) + '\n')
        except OSError as e:
            audit_logger.error(f"Failed to write audit record to file: {e}")


class DatabaseMonitoringManager:
    """Entry point for operation monitoring and auditing."""

    def __init__(self):
        self.performance_monitor = PerformanceMonitor()
        self.audit_logger = AuditLogger()

    @asynccontextmanager
    async def monitor_operation(self, operation: DatabaseOperation):
        """Time an operation and log its outcome."""
        start_time = time.time()
        logger.debug(
            f"Starting {operation.operation_type} operation on {operation.table_name} "
            f"for guild {operation.guild_id}"
        )

        try:
            yield operation
        except Exception as e:
            operation.execution_time = time.time() - start_time
            operation.success = False
            operation.error_message = str(e)

            logger.error(
                f"Failed {operation.operation_type} operation on {operation.table_name} "
                f"after {operation.execution_time:.3f}s: {e}"
            )
            self.performance_monitor.record_query_time(
                f"{operation.operation_type}_{operation.table_name}_FAILED",
                operation.execution_time
            )
            raise

        operation.execution_time = time.time() - start_time
        operation.success = True
        logger.debug(
            f"Completed {operation.operation_type} operation on {operation.table_name} "
            f"in {operation.execution_time:.3f}s"
        )
        self.performance_monitor.record_query_time(
            f"{operation.operation_type}_{operation.table_name}",
            operation.execution_time
        )


# Global monitoring instance
monitoring_manager = DatabaseMonitoringManager()
