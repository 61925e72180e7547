"""
Audit component - system log and recorded outbound email.
"""

from .component import (
    record_email,
    record_log,
    run_list_emails,
    run_list_logs,
)
from .models import EmailListOutput, ListEmailsInput, ListLogsInput, LogListOutput
from .ports import MailerPort, SystemLogRepoPort, TimePort

__all__ = [
    # Entry points
    "run_list_logs",
    "run_list_emails",
    # Recorders
    "record_log",
    "record_email",
    # Models
    "ListLogsInput",
    "ListEmailsInput",
    "LogListOutput",
    "EmailListOutput",
    # Ports
    "SystemLogRepoPort",
    "MailerPort",
    "TimePort",
]
