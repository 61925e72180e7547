"""
Dev Email Adapter.

Logs outbound mail instead of sending it and keeps a copy of every message,
in the ``email_records`` table when a repo is given, in memory otherwise.
The admin email log reads back from the same place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from cgwise.domain.entities import EmailRecord

logger = logging.getLogger(__name__)


class EmailRecordStore(Protocol):
    def save(self, record: EmailRecord) -> EmailRecord: ...
    def list_recent(self, limit: int) -> list[EmailRecord]: ...


@dataclass
class DevEmailAdapter:
    store: EmailRecordStore | None = None

    # In-memory copy for test assertions
    sent_emails: list[EmailRecord] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    def send(self, record: EmailRecord) -> EmailRecord:
        self.sent_emails.append(record)
        if self.store is not None:
            self.store.save(record)
        self._log_email(record)
        return record

    def list_recent(self, limit: int) -> list[EmailRecord]:
        if self.store is not None:
            return self.store.list_recent(limit)
        return sorted(self.sent_emails, key=lambda e: e.sent_at, reverse=True)[:limit]

    def _log_email(self, record: EmailRecord) -> None:
        parts = [
            f"EMAIL (dev): To={record.to_email}",
            f"Subject={record.subject}",
            f"From={record.from_email}",
        ]

        if self.log_body and record.body:
            preview = record.body[: self.body_preview_length]
            if len(record.body) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview!r}")

        parts.append(f"Type={record.type}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> EmailRecord | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[EmailRecord]:
        return [e for e in self.sent_emails if e.to_email == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()
