"""역할(Role) 정의와 역할 기반 라우트 게이트 판정 헬퍼입니다."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from app.models.survey import Survey
from app.models.user import Profile


class Role(str, Enum):
    ADMINISTRATOR = "administrator"
    SURVEYOR = "surveyor"
    RESPONDENT = "respondent"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return None


ALL_ROLES = tuple(Role)
AUTHORING_ROLES = (Role.SURVEYOR, Role.ADMINISTRATOR)

SIGN_IN_PATH = "/auth"
DEFAULT_PATH = "/dashboard"

# 모든 Role 멤버가 키로 존재해야 한다(test_permissions에서 검증).
ROLE_HOMES = {
    Role.ADMINISTRATOR: "/admin/dashboard",
    Role.SURVEYOR: "/surveys/dashboard",
    Role.RESPONDENT: "/encuestas",
}


def home_path(role) -> str:
    parsed = Role.parse(role)
    if parsed is None:
        return ROLE_HOMES[Role.RESPONDENT]
    return ROLE_HOMES[parsed]


def is_administrator(user: Profile) -> bool:
    return Role.parse(user.role) == Role.ADMINISTRATOR


def is_surveyor(user: Profile) -> bool:
    return Role.parse(user.role) == Role.SURVEYOR


def is_respondent(user: Profile) -> bool:
    return Role.parse(user.role) == Role.RESPONDENT


def can_author_surveys(user: Profile) -> bool:
    return Role.parse(user.role) in AUTHORING_ROLES


def is_survey_owner(survey: Survey, user: Profile) -> bool:
    return int(survey.created_by) == int(user.user_id)


@dataclass(frozen=True)
class SessionSnapshot:
    user_id: Optional[int] = None
    role: Optional[Role] = None
    role_loading: bool = False


@dataclass(frozen=True)
class NavigationDecision:
    action: str  # admit/redirect/pending/not_found
    target: Optional[str] = None


def resolve_navigation(allowed_roles: Iterable, snapshot: SessionSnapshot) -> NavigationDecision:
    allowed = {Role.parse(value) for value in allowed_roles or ()}
    allowed.discard(None)
    if snapshot.role_loading:
        return NavigationDecision("pending")
    if snapshot.user_id is None:
        return NavigationDecision("redirect", SIGN_IN_PATH)
    if not allowed:
        return NavigationDecision("admit")
    if snapshot.role in allowed:
        return NavigationDecision("admit")
    return NavigationDecision("redirect", home_path(snapshot.role))


@dataclass(frozen=True)
class RouteRule:
    pattern: str
    requires_auth: bool = True
    allowed_roles: tuple = ()

    def matches(self, path: str) -> bool:
        regex = "^" + re.sub(r":[A-Za-z_]+", r"[^/]+", self.pattern) + "/?$"
        return re.match(regex, path) is not None


ROUTE_RULES = (
    RouteRule("/", requires_auth=False),
    RouteRule(SIGN_IN_PATH, requires_auth=False),
    RouteRule("/admin/dashboard", allowed_roles=(Role.ADMINISTRATOR,)),
    RouteRule("/surveys/dashboard", allowed_roles=(Role.SURVEYOR,)),
    RouteRule("/encuestas", allowed_roles=(Role.RESPONDENT,)),
    RouteRule("/create-survey", allowed_roles=AUTHORING_ROLES),
    RouteRule("/edit-survey/:id", allowed_roles=AUTHORING_ROLES),
    RouteRule("/reports/:id", allowed_roles=AUTHORING_ROLES),
    RouteRule(DEFAULT_PATH),
    RouteRule("/take-survey/:id"),
)


def find_route(path: str) -> Optional[RouteRule]:
    normalized = "/" + str(path or "").strip().strip("/")
    for rule in ROUTE_RULES:
        if rule.matches(normalized):
            return rule
    return None


def resolve_path(path: str, snapshot: SessionSnapshot) -> NavigationDecision:
    rule = find_route(path)
    if rule is None:
        return NavigationDecision("not_found")
    if not rule.requires_auth:
        return NavigationDecision("admit")
    return resolve_navigation(rule.allowed_roles, snapshot)
