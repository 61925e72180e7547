"""
Bodies of the mails sent during the access-request workflow.
"""

from __future__ import annotations

from cgwise.domain.entities import AccessRequest


def _details(req: AccessRequest, *, with_units: bool = False) -> str:
    lines = [
        f"- Name: {req.name}",
        f"- Email: {req.email}",
        f"- Company: {req.company}",
        f"- Position: {req.position}",
        f"- Country: {req.country}",
    ]
    if with_units:
        lines.append(f"- Preferred Units: {req.preferred_units}")
    return "\n".join(lines)


def request_received(req: AccessRequest, *, upgrade: bool) -> tuple[str, str]:
    if upgrade:
        subject = "CGWise Account Upgrade Request Received"
        opening = (
            "Thank you for upgrading from guest access to a full CGWise account. "
            "Your request has been received and is currently under review."
        )
    else:
        subject = "CGWise Access Request Received"
        opening = (
            "Thank you for requesting access to CGWise. "
            "Your request has been received and is currently under review."
        )
    body = (
        f"Dear {req.name},\n\n{opening}\n\nRequest Details:\n{_details(req)}\n\n"
        "You will receive another email once your request has been reviewed by our "
        "administrators.\n\nBest regards,\nCGWise Team"
    )
    return subject, body


def admin_notification(req: AccessRequest, *, upgrade: bool) -> tuple[str, str]:
    if upgrade:
        subject = "Guest Upgrade Request - CGWise"
        opening = "A guest user has requested to upgrade to a full account:"
        note = (
            "This user was previously using guest access and has now requested "
            "a full account.\n\n"
        )
    else:
        subject = "New Access Request - CGWise"
        opening = "A new access request has been submitted:"
        note = ""
    body = (
        f"{opening}\n\nUser Details:\n{_details(req, with_units=True)}\n\n{note}"
        "Please review this request in the admin panel.\n\nCGWise Admin System"
    )
    return subject, body


def approved(req: AccessRequest, role: str) -> tuple[str, str]:
    body = (
        f"Dear {req.name},\n\nGreat news! Your access request for CGWise has been approved.\n\n"
        f"Account Details:\n- Email: {req.email}\n- Role: {role}\n- Company: {req.company}\n\n"
        "You can now log in to CGWise using your email and the password you provided "
        "during registration.\n\nWelcome to CGWise!\n\nBest regards,\nCGWise Team"
    )
    return "CGWise Access Approved", body


def rejected(req: AccessRequest, reason: str | None) -> tuple[str, str]:
    reason_block = f"Reason: {reason}\n\n" if reason else ""
    body = (
        f"Dear {req.name},\n\nThank you for your interest in CGWise. After reviewing your "
        "access request, we are unable to approve it at this time.\n\n"
        f"{reason_block}If you have any questions or would like to discuss this further, "
        "please contact our support team.\n\nBest regards,\nCGWise Team"
    )
    return "CGWise Access Request Update", body
