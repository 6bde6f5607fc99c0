"""
Email Service using Resend

Sends the "new application received" notification to the club's
recruiting inbox. Notification is best-effort: callers treat a False
return or an exception as a logged, non-fatal outcome.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from html import escape
from typing import Any

import resend

from recruit.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = settings.resend_api_key

TRACK_DISPLAY_NAMES = {
    "baby": "아기사자",
    "staff": "운영진",
}

ESSAY_QUESTIONS = {
    "baby": (
        "Q1. 지원 동기",
        "Q2. 몰입 경험",
        "Q3. 만들고 싶은 서비스",
    ),
    "staff": (
        "Q1. 지원 동기 및 기여 방안",
        "Q2. 문제 해결 및 협업",
        "Q3. 교육 및 운영 철학",
    ),
}

KST = timezone(timedelta(hours=9), name="KST")


def is_email_enabled() -> bool:
    """Notifications are only sent when a Resend API key is configured."""
    return bool(resend.api_key)


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def _text(value: Any) -> str:
    """Escape a free-text answer and keep its line breaks."""
    if value is None or value == "":
        return "-"
    return escape(str(value)).replace("\n", "<br>")


def _row(label: str, value: Any) -> str:
    return (
        f'<tr><td style="padding: 8px 0; color: #6c757d; width: 120px; vertical-align: top;">'
        f"{escape(label)}</td><td style=\"padding: 8px 0;\">{_text(value)}</td></tr>"
    )


def _section(title: str, body: str) -> str:
    return (
        f'<h2 style="color: #00467F; border-bottom: 2px solid #00467F; padding-bottom: 10px;">'
        f"{escape(title)}</h2>{body}"
    )


def format_application_email(
    track: str,
    form_data: dict[str, Any],
    application_id: str,
    submitted_at: datetime,
) -> str:
    """Render the notification body for a new application."""
    track_name = TRACK_DISPLAY_NAMES.get(track, track)
    submitted_local = submitted_at.astimezone(KST).strftime("%Y-%m-%d %H:%M:%S KST")

    activities = [a for a in form_data.get("activities") or [] if str(a).strip()]
    interview_dates = ", ".join(form_data.get("interviewDates") or [])

    profile_rows = [
        _row("성명", form_data.get("name")),
        _row("학번", form_data.get("studentId")),
        _row("학년/학기", form_data.get("currentYear")),
        _row("전공", form_data.get("major")),
    ]
    if form_data.get("doubleMajor"):
        profile_rows.append(_row("이중전공", form_data.get("doubleMajor")))
    profile_rows += [
        _row("연락처", form_data.get("phone")),
        _row("이메일", form_data.get("email")),
    ]

    schedule_rows = [
        _row("1학기", form_data.get("schedule1")),
        _row("여름방학", form_data.get("schedule2")),
        _row("2학기", form_data.get("schedule3")),
        _row("면접 가능일", interview_dates),
    ]

    if track == "baby":
        skill_rows = [
            _row("관심 분야", form_data.get("interestField")),
            _row("코딩 경험", form_data.get("codingExperience")),
        ]
    else:
        skill_rows = [
            _row("지원 직무", form_data.get("position")),
            _row("기술 스택", form_data.get("techStack")),
            _row("포트폴리오", form_data.get("portfolio")),
        ]
    skill_rows.append(_row("활동 경력", "\n".join(activities)))

    essays = ""
    for index, question in enumerate(ESSAY_QUESTIONS.get(track, ()), start=1):
        answer = _text(form_data.get(f"essay{index}"))
        essays += f"""
        <div style="margin-bottom: 20px;">
            <h3 style="color: #495057; font-size: 14px; margin-bottom: 10px;">{escape(question)}</h3>
            <p style="background-color: #f8f9fa; padding: 15px; border-radius: 5px; line-height: 1.6;">{answer}</p>
        </div>
        """

    def table(rows: list[str]) -> str:
        return f'<table style="width: 100%; margin-bottom: 30px;">{"".join(rows)}</table>'

    return f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937;">
        <div style="max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f8f9fa;">
            <div style="background-color: #00467F; color: white; padding: 30px; border-radius: 10px 10px 0 0; text-align: center;">
                <h1 style="margin: 0; font-size: 24px;">단국대 멋쟁이사자처럼 14기</h1>
                <p style="margin: 10px 0 0 0; font-size: 18px;">{escape(track_name)} 신규 지원서</p>
            </div>
            <div style="background-color: white; padding: 30px; border-radius: 0 0 10px 10px;">
                <p style="color: #6c757d;">지원서 ID: {escape(application_id)}</p>
                <p style="color: #6c757d; margin-bottom: 30px;">제출 시간: {submitted_local}</p>
                {_section("인적사항", table(profile_rows))}
                {_section("활동 가능 여부", table(schedule_rows))}
                {_section("역량 및 경험", table(skill_rows))}
                {_section("에세이", essays)}
            </div>
            <div style="text-align: center; padding: 20px; color: #6c757d; font-size: 12px;">
                <p>이 메일은 리크루팅 시스템에서 자동 발송되었습니다.</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_new_application_notification(
    track: str,
    form_data: dict[str, Any],
    application_id: str,
    submitted_at: datetime,
) -> bool:
    """Notify the recruiting inbox that a new application arrived."""
    track_name = TRACK_DISPLAY_NAMES.get(track, track)
    html_content = format_application_email(track, form_data, application_id, submitted_at)

    return await send_email(
        to_email=settings.admin_email,
        subject=f"[단국대 멋사 14기] {track_name} 신규 지원서 도착",
        html_content=html_content,
    )
