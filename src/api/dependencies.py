"""Request-scoped dependencies: the authenticated user and service objects.

Routes receive services through these providers, which tests replace via
``app.dependency_overrides``.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.core.config import Settings, get_settings
from src.core.context import RequestContext
from src.core.exceptions import UnauthorizedError
from src.infrastructure.cache import CacheService, get_cache_service
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.security import JwtTokenService, get_token_service
from src.services.accounts import AccountService
from src.services.auth import AuthService
from src.services.billing import BillCommandService, BillQueryService
from src.services.budget import BudgetSummaryService
from src.services.transactions import TransactionService

bearer_scheme = HTTPBearer(auto_error=False, description="JWT access token")


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Identity carried by a verified access token."""

    id: int
    email: str
    roles: tuple[str, ...]


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    token_service: Annotated[JwtTokenService, Depends(get_token_service)],
) -> CurrentUser:
    """Resolve the bearer token into the calling user.

    Raises:
        UnauthorizedError: If the header is missing or the token is rejected.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    claims = token_service.decode_access_token(credentials.credentials)
    RequestContext.set_user_id(claims.user_id)
    return CurrentUser(id=claims.user_id, email=claims.email, roles=claims.roles)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def get_account_service(session: DatabaseSession) -> AccountService:
    return AccountService(session)


def get_transaction_service(session: DatabaseSession) -> TransactionService:
    return TransactionService(session)


def get_bill_command_service(session: DatabaseSession) -> BillCommandService:
    return BillCommandService(session)


def get_bill_query_service(
    session: DatabaseSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> BillQueryService:
    return BillQueryService(session, settings.billing_config)


def get_budget_summary_service(session: DatabaseSession) -> BudgetSummaryService:
    return BudgetSummaryService(session)


def get_auth_service(
    session: DatabaseSession,
    token_service: Annotated[JwtTokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(session, token_service)


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
TransactionServiceDep = Annotated[TransactionService, Depends(get_transaction_service)]
BillCommandServiceDep = Annotated[BillCommandService, Depends(get_bill_command_service)]
BillQueryServiceDep = Annotated[BillQueryService, Depends(get_bill_query_service)]
BudgetSummaryServiceDep = Annotated[
    BudgetSummaryService, Depends(get_budget_summary_service)
]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CacheServiceDep = Annotated[CacheService, Depends(get_cache_service)]
