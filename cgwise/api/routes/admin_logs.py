from fastapi import APIRouter, Depends, HTTPException, Query

from cgwise.adapters.dev_email import DevEmailAdapter
from cgwise.adapters.sqlite.repos import SQLiteSystemLogRepo
from cgwise.api.deps import get_current_user, get_log_repo, get_mailer, get_policy
from cgwise.components.audit import ListEmailsInput, ListLogsInput, run_list_emails, run_list_logs
from cgwise.domain.entities import EmailRecord, SystemLog, User
from cgwise.domain.policy import PolicyEngine

router = APIRouter()


@router.get("/logs", response_model=list[SystemLog])
def list_logs(
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> list[SystemLog]:
    result = run_list_logs(ListLogsInput(actor=current_user, limit=limit), repo=repo, policy=policy)
    if not result.success:
        raise HTTPException(status_code=403, detail=result.error)
    return result.logs


@router.get("/emails", response_model=list[EmailRecord])
def list_emails(
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    mailer: DevEmailAdapter = Depends(get_mailer),
    policy: PolicyEngine = Depends(get_policy),
) -> list[EmailRecord]:
    result = run_list_emails(
        ListEmailsInput(actor=current_user, limit=limit), mailer=mailer, policy=policy
    )
    if not result.success:
        raise HTTPException(status_code=403, detail=result.error)
    return result.emails
