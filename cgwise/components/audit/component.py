"""
Audit component - system log and outbound mail records.

Every account-affecting action (access requests, approvals, lockouts,
admin edits) leaves a SystemLog row readable by admins. Outbound mail is
handed to the mailer port, which records it instead of delivering it.
"""

from __future__ import annotations

import logging

from cgwise.domain.entities import EmailRecord, EmailType, LogType, SystemLog
from cgwise.domain.policy import PolicyEngine

from .models import EmailListOutput, ListEmailsInput, ListLogsInput, LogListOutput
from .ports import MailerPort, SystemLogRepoPort, TimePort

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


def record_log(
    repo: SystemLogRepoPort,
    time: TimePort,
    message: str,
    *,
    user: str,
    log_type: LogType = "info",
) -> SystemLog:
    entry = SystemLog(type=log_type, message=message, user=user, timestamp=time.now_utc())
    logger.log(_LOG_LEVELS[log_type], "%s [user=%s]", message, user)
    return repo.save(entry)


def record_email(
    mailer: MailerPort,
    time: TimePort,
    *,
    from_email: str,
    to_email: str,
    subject: str,
    body: str,
    email_type: EmailType,
) -> EmailRecord:
    record = EmailRecord(
        from_email=from_email,
        to_email=to_email,
        subject=subject,
        body=body,
        type=email_type,
        sent_at=time.now_utc(),
    )
    return mailer.send(record)


# --- Component Entry Points ---


def run_list_logs(
    inp: ListLogsInput, *, repo: SystemLogRepoPort, policy: PolicyEngine
) -> LogListOutput:
    if not policy.can_view_logs(inp.actor):
        return LogListOutput(success=False, error="Access denied")
    return LogListOutput(logs=repo.list_recent(max(1, inp.limit)))


def run_list_emails(
    inp: ListEmailsInput, *, mailer: MailerPort, policy: PolicyEngine
) -> EmailListOutput:
    if not policy.can_view_logs(inp.actor):
        return EmailListOutput(success=False, error="Access denied")
    return EmailListOutput(emails=mailer.list_recent(max(1, inp.limit)))
