"""
Shared fixtures for the recruitment API tests.
"""

import copy

import pytest
import resend

from recruit.core.config import settings
from recruit.core.rate_limit import MemoryRateLimitStore, RateLimiter, set_rate_limiter
from recruit.core.store import MemoryKeyValueStore, set_store

BABY_FORM = {
    "name": "김사자",
    "studentId": "32201234",
    "major": "소프트웨어학과",
    "doubleMajor": "",
    "phone": "010-1234-5678",
    "email": "lion@dankook.ac.kr",
    "currentYear": "2학년",
    "schedule1": "가능",
    "schedule2": "가능",
    "schedule3": "가능",
    "interviewDates": ["2월 22일(토)"],
    "activities": ["교내 해커톤 참가", ""],
    "interestField": "frontend",
    "codingExperience": "class",
    "essay1": "웹 서비스를 직접 만들어 보고 싶습니다.",
    "essay2": "알고리즘 스터디에 몰입했던 경험이 있습니다.",
    "essay3": "학식 메뉴 알림 서비스를 만들고 싶습니다.",
}

STAFF_FORM = {
    "name": "이운영",
    "studentId": "32191111",
    "major": "컴퓨터공학과",
    "doubleMajor": "경영학과",
    "phone": "01098765432",
    "email": "staff@dankook.ac.kr",
    "currentYear": "3학년",
    "schedule1": "가능",
    "schedule2": "가능",
    "schedule3": "일부 가능",
    "interviewDates": ["2월 22일(토)", "2월 23일(일)"],
    "activities": ["멋사 13기 아기사자"],
    "position": "backend",
    "techStack": "Python, FastAPI, PostgreSQL",
    "portfolio": "https://github.com/example",
    "essay1": "13기 활동 경험을 후배들에게 나누고 싶습니다.",
    "essay2": "팀 프로젝트에서 일정 문제를 해결했습니다.",
    "essay3": "스스로 답을 찾도록 돕는 교육을 지향합니다.",
}


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def baby_form():
    return copy.deepcopy(BABY_FORM)


@pytest.fixture
def staff_form():
    return copy.deepcopy(STAFF_FORM)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemoryKeyValueStore()


@pytest.fixture
def rate_limiter(fake_clock):
    return RateLimiter(MemoryRateLimitStore(clock=fake_clock), limit=20, window_seconds=60)


@pytest.fixture
def installed_backends(memory_store, rate_limiter):
    """Install the memory store and limiter as the process-wide backends."""
    set_store(memory_store)
    set_rate_limiter(rate_limiter)
    yield memory_store, rate_limiter
    set_store(None)
    set_rate_limiter(None)


@pytest.fixture
def override_settings(monkeypatch):
    """Temporarily change settings values shared by every module."""

    def _override(**values):
        for name, value in values.items():
            monkeypatch.setattr(settings, name, value)

    return _override


@pytest.fixture(autouse=True)
def no_external_services(monkeypatch):
    """Challenge and email are disabled unless a test enables them."""
    monkeypatch.setattr(settings, "turnstile_secret", None)
    monkeypatch.setattr(resend, "api_key", None)
