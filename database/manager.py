"""
Database manager for the bot's persistent store.
"""

import sqlite3
import aiosqlite
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional
from pathlib import Path
from .monitoring import monitoring_manager, DatabaseOperation

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0


class DatabaseError(Exception):
    """Custom exception for database-related errors."""
    pass


class DatabaseManager:
    """Runs queries against the SQLite store, one connection per operation."""

    def __init__(self, db_path: str = "bot_data.db"):
        self.db_path = db_path

    async def initialize_database(self) -> None:
        """Open the store and create the record tables if they don't exist."""
        try:
            db_file = Path(self.db_path)
            db_file.parent.mkdir(parents=True, exist_ok=True)

            async with aiosqlite.connect(self.db_path) as db:
                await self._create_schema(db)
                await db.commit()
            logger.info(f"Database ready at {self.db_path}")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise DatabaseError(f"Could not open database at {self.db_path}: {e}") from e

    async def _create_schema(self, db: aiosqlite.Connection) -> None:
        # (guild, user) pairs barred from running commands
        await db.execute("""
            CREATE TABLE IF NOT EXISTS blacklist (
                guild_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, user_id)
            )
        """)

        # Welcome and goodbye embeds, one of each per guild
        await db.execute("""
            CREATE TABLE IF NOT EXISTS greeting_configs (
                guild_id INTEGER NOT NULL,
                kind TEXT NOT NULL CHECK (kind IN ('welcome', 'goodbye')),
                channel_id INTEGER NOT NULL,
                embed_color TEXT,
                title TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                image TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, kind)
            )
        """)

        # 24/7 voice channels rejoined on startup
        await db.execute("""
            CREATE TABLE IF NOT EXISTS voice_stays (
                guild_id INTEGER PRIMARY KEY,
                channel_id INTEGER NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        logger.info("Database schema created successfully")

    async def execute_query(self, query: str, params: tuple = ()) -> Any:
        """Execute a query that modifies data (INSERT, UPDATE, DELETE)."""
        operation_type = query.strip().split()[0].upper()
        operation = self._operation(operation_type, query, params)

        async def run() -> Any:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute(query, params)
                await db.commit()
                operation.rows_affected = cursor.rowcount
                return cursor.lastrowid

        return await self._run(operation, run)

    async def fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch a single row as a dict, or None."""
        operation = self._operation("SELECT", query, params)

        async def run() -> Optional[Dict[str, Any]]:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(query, params)
                row = await cursor.fetchone()
                operation.rows_affected = 1 if row else 0
                return dict(row) if row else None

        return await self._run(operation, run)

    async def fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows as dicts."""
        operation = self._operation("SELECT", query, params)

        async def run() -> List[Dict[str, Any]]:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(query, params)
                rows = await cursor.fetchall()
                operation.rows_affected = len(rows)
                return [dict(row) for row in rows]

        return await self._run(operation, run)

    async def _run(self, operation: DatabaseOperation, runner: Callable[[], Awaitable[Any]]) -> Any:
        """Run a query callable under monitoring, retrying while the file is locked."""
        async with monitoring_manager.monitor_operation(operation):
            retry_delay = INITIAL_RETRY_DELAY

            for attempt in range(MAX_RETRIES):
                try:
                    start_time = time.time()
                    result = await runner()
                    logger.debug(f"Executed {operation.operation_type} on {operation.table_name} - "
                                 f"Rows: {operation.rows_affected}, "
                                 f"Time: {time.time() - start_time:.3f}s")
                    return result

                except sqlite3.OperationalError as e:
                    if "database is locked" in str(e).lower() and attempt < MAX_RETRIES - 1:
                        logger.warning(f"Database locked, retrying in {retry_delay}s (attempt {attempt + 1}/{MAX_RETRIES})")
                        await asyncio.sleep(retry_delay)
                        retry_delay *= 2
                        continue
                    logger.error(f"Database operational error: {e}")
                    raise DatabaseError(f"Database operation failed: {e}") from e
                except sqlite3.IntegrityError as e:
                    logger.error(f"Database integrity error: {e}")
                    raise DatabaseError(f"Data integrity violation: {e}") from e
                except sqlite3.Error as e:
                    logger.error(f"SQLite error: {e}")
                    raise DatabaseError(f"Database error: {e}") from e
                except Exception as e:
                    logger.error(f"Unexpected error running {operation.operation_type} "
                                 f"with params {operation.params}: {e}")
                    raise DatabaseError(f"Unexpected database error: {e}") from e

            raise DatabaseError("Database operation failed after maximum retries")

    def _operation(self, operation_type: str, query: str, params: tuple) -> DatabaseOperation:
        return DatabaseOperation(
            operation_type=operation_type,
            table_name=self._extract_table_name(query, operation_type),
            guild_id=self._extract_guild_id(params),
            query=query,
            params=params
        )

    def _extract_table_name(self, query: str, operation_type: str) -> str:
        """Extract table name from SQL query for monitoring purposes."""
        query_lower = " ".join(query.lower().split())

        if operation_type in ("SELECT", "DELETE"):
            marker = " from "
        elif operation_type in ("INSERT", "REPLACE"):
            marker = " into "
        elif operation_type == "UPDATE":
            parts = query_lower.split()
            return parts[1] if len(parts) > 1 else "unknown"
        else:
            return "unknown"

        if marker in query_lower:
            parts = query_lower.split(marker, 1)[1].split()
            return parts[0] if parts else "unknown"
        return "unknown"

    def _extract_guild_id(self, params: tuple) -> Optional[int]:
        # Guild ID is the first parameter of every guild-scoped query
        if params:
            first_param = params[0]
            if isinstance(first_param, int) and not isinstance(first_param, bool) and first_param > 0:
                return first_param
        return None
