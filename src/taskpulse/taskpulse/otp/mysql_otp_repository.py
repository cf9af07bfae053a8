from __future__ import annotations

from datetime import datetime

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import OTPRecord
from .repository import OTPRepository


class MySQLOTPRepository(OTPRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def replace(self, record: OTPRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO email_otps(email, code, created_at, expires_at, used)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    code=VALUES(code),
                    created_at=VALUES(created_at),
                    expires_at=VALUES(expires_at),
                    used=VALUES(used)
                """,
                (record.email, record.code, record.created_at, record.expires_at, int(record.used)),
            )

    def consume(self, *, email: str, code: str, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE email_otps
                SET used=1
                WHERE email=%s AND code=%s AND used=0 AND expires_at>%s
                """,
                (email, code, now),
            )
            return cur.rowcount > 0

    def delete_expired(self, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM email_otps WHERE expires_at<=%s", (now,))
            return int(cur.rowcount or 0)
