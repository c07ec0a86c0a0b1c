"""Authentication application service for IAM bounded context.

Runs the login, registration and refresh state machines, password
changes, logout and the current-principal lookup. Expected refusals are
returned as ``AuthFailure`` values rather than raised; login refusals
never reveal whether the tenant, the principal or the password was at
fault.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import AuthServiceProbe, DefaultAuthServiceProbe
from iam.application.security import password_policy_errors
from iam.application.services.tenant_service import TenantService
from iam.application.value_objects import (
    INCORRECT_PASSWORD_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    INVALID_REFRESH_TOKEN_MESSAGE,
    LOCKED_OUT_MESSAGE,
    TENANT_UNRESOLVED_MESSAGE,
    TWO_FACTOR_REQUIRED_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
    AuthFailure,
    AuthResult,
    AuthState,
    AuthSuccess,
    CurrentUser,
    PrincipalView,
    RegistrationRequest,
)
from iam.domain.aggregates import RefreshToken, Tenant, User
from iam.ports.credentials import CredentialCheckOutcome, ICredentialVerifier
from iam.ports.exceptions import DuplicateUserError
from iam.ports.repositories import (
    IRefreshTokenRepository,
    IRoleRepository,
    IUserRepository,
)
from infrastructure.database import bind_tenant
from shared_kernel.auth import TokenIssuer, TokenSubject, hash_refresh_token
from shared_kernel.middleware import TenantContext


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AuthService:
    """Application service for authenticating principals.

    Every operation binds the session to the principal's tenant before
    touching users, roles or refresh tokens. Token issuance and the
    refresh token write share one transaction, so a cancelled request
    leaves neither a stored token nor a returned one.
    """

    def __init__(
        self,
        tenant_service: TenantService,
        user_repository: IUserRepository,
        role_repository: IRoleRepository,
        refresh_token_repository: IRefreshTokenRepository,
        credential_verifier: ICredentialVerifier,
        token_issuer: TokenIssuer,
        session: AsyncSession,
        probe: AuthServiceProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._tenant_service = tenant_service
        self._user_repository = user_repository
        self._role_repository = role_repository
        self._refresh_token_repository = refresh_token_repository
        self._credential_verifier = credential_verifier
        self._token_issuer = token_issuer
        self._session = session
        self._probe = probe or DefaultAuthServiceProbe()
        self._clock = clock

    async def login(
        self,
        tenant_context: TenantContext | None,
        email: str,
        password: str,
    ) -> AuthResult:
        """Authenticate a principal by email and password.

        Args:
            tenant_context: Tenant resolved from the request, if any
            email: Email address of the principal
            password: Submitted password

        Returns:
            ``AuthSuccess`` with fresh tokens, or ``AuthFailure``
        """
        if tenant_context is None:
            self._probe.login_failed(
                state=AuthState.TENANT_UNRESOLVED, reason="tenant_unresolved"
            )
            return AuthFailure(
                AuthState.TENANT_UNRESOLVED, (TENANT_UNRESOLVED_MESSAGE,)
            )

        tenant = await self._tenant_service.resolve_active_tenant(tenant_context)
        if tenant is None:
            return self._login_rejected("unknown_or_inactive_tenant")

        bind_tenant(self._session, tenant.id.value)
        async with self._session.begin():
            user = await self._user_repository.get_by_email(email)
            if user is None or not user.is_active:
                await self._credential_verifier.check_unknown_principal(password)
                return self._login_rejected("unknown_or_inactive_user")

            outcome = await self._credential_verifier.check(user, password)
            # Failure counters and lockout must be kept even on refusal
            await self._user_repository.save(user)

            if outcome is not CredentialCheckOutcome.OK:
                return self._login_refused(outcome)

            result = await self._issue_tokens(user, tenant)

        self._probe.login_succeeded(user_id=user.id.value, tenant_id=tenant.id.value)
        return result

    async def register(
        self,
        tenant_context: TenantContext | None,
        request: RegistrationRequest,
    ) -> AuthResult:
        """Register a principal in the resolved tenant and sign them in.

        Returns:
            ``AuthSuccess`` with fresh tokens, or ``AuthFailure`` listing
            what was wrong with the request
        """
        if tenant_context is None:
            self._probe.registration_failed(reason="tenant_unresolved")
            return AuthFailure(
                AuthState.TENANT_UNRESOLVED, (TENANT_UNRESOLVED_MESSAGE,)
            )

        tenant = await self._tenant_service.resolve_active_tenant(tenant_context)
        if tenant is None:
            self._probe.registration_failed(reason="unknown_or_inactive_tenant")
            return AuthFailure(AuthState.REJECTED, (INVALID_CREDENTIALS_MESSAGE,))

        errors = password_policy_errors(request.password)
        try:
            user = User.create(
                tenant_id=tenant.id,
                email=request.email,
                password_hash="",
                username=request.username,
                first_name=request.first_name,
                last_name=request.last_name,
            )
        except ValueError as e:
            errors.insert(0, str(e))
        if errors:
            self._probe.registration_failed(reason="invalid_input")
            return AuthFailure(AuthState.REJECTED, tuple(errors))

        user.password_hash = await self._credential_verifier.hash_password(
            request.password
        )

        bind_tenant(self._session, tenant.id.value)
        try:
            async with self._session.begin():
                await self._user_repository.save(user)
                result = await self._issue_tokens(user, tenant)
        except DuplicateUserError as e:
            self._probe.registration_failed(reason="duplicate_user")
            return AuthFailure(AuthState.REJECTED, (str(e),))

        self._probe.user_registered(user_id=user.id.value, tenant_id=tenant.id.value)
        return result

    async def refresh(
        self,
        tenant_context: TenantContext | None,
        refresh_token: str,
    ) -> AuthResult:
        """Exchange a refresh token for a new access and refresh token.

        The presented token is superseded by the new one and cannot be
        exchanged again.
        """
        if tenant_context is None:
            self._probe.refresh_failed(reason="tenant_unresolved")
            return AuthFailure(
                AuthState.TENANT_UNRESOLVED, (TENANT_UNRESOLVED_MESSAGE,)
            )

        tenant = await self._tenant_service.resolve_active_tenant(tenant_context)
        if tenant is None or not refresh_token:
            return self._refresh_rejected("unknown_tenant_or_empty_token")

        bind_tenant(self._session, tenant.id.value)
        async with self._session.begin():
            record = await self._refresh_token_repository.get_by_token_hash(
                hash_refresh_token(refresh_token)
            )
            if record is None:
                return self._refresh_rejected("unknown_token")
            if record.is_expired(self._clock()):
                return self._refresh_rejected("expired_token")

            user = await self._user_repository.get_by_id(record.user_id)
            if user is None or not user.is_active:
                return self._refresh_rejected("unknown_or_inactive_user")

            result = await self._issue_tokens(user, tenant)

        self._probe.token_refreshed(user_id=user.id.value)
        return result

    async def logout(self, current_user: CurrentUser) -> None:
        """Revoke the principal's refresh token. Safe to repeat."""
        bind_tenant(self._session, current_user.tenant_id.value)
        async with self._session.begin():
            revoked = await self._refresh_token_repository.revoke(
                current_user.user_id
            )
        self._probe.user_logged_out(
            user_id=current_user.user_id.value, token_revoked=revoked
        )

    async def change_password(
        self,
        current_user: CurrentUser,
        current_password: str,
        new_password: str,
    ) -> AuthFailure | None:
        """Replace the caller's password.

        The current password must match and the new one must satisfy the
        password policy. On success the refresh token is revoked, so other
        sessions have to sign in again once their access token expires.

        Returns:
            None on success, otherwise ``AuthFailure`` listing the problems
        """
        bind_tenant(self._session, current_user.tenant_id.value)
        async with self._session.begin():
            user = await self._user_repository.get_by_id(current_user.user_id)
            if user is None or not user.is_active:
                self._probe.password_change_failed(reason="unknown_or_inactive_user")
                return AuthFailure(AuthState.REJECTED, (USER_NOT_FOUND_MESSAGE,))

            if not await self._credential_verifier.verify(user, current_password):
                self._probe.password_change_failed(reason="bad_password")
                return AuthFailure(
                    AuthState.REJECTED, (INCORRECT_PASSWORD_MESSAGE,)
                )

            errors = password_policy_errors(new_password)
            if errors:
                self._probe.password_change_failed(reason="invalid_input")
                return AuthFailure(AuthState.REJECTED, tuple(errors))

            user.change_password(
                await self._credential_verifier.hash_password(new_password)
            )
            await self._user_repository.save(user)
            await self._refresh_token_repository.revoke(user.id)

        self._probe.password_changed(user_id=user.id.value)
        return None

    async def get_current_principal(
        self, current_user: CurrentUser
    ) -> PrincipalView | None:
        """Load the authenticated principal.

        Returns:
            The principal with its current roles, or None if it no longer
            exists or has been deactivated
        """
        bind_tenant(self._session, current_user.tenant_id.value)
        user = await self._user_repository.get_by_id(current_user.user_id)
        if user is None or not user.is_active:
            return None
        roles = await self._role_repository.role_names_for_user(user.id)
        return PrincipalView.from_user(user, roles)

    async def _issue_tokens(self, user: User, tenant: Tenant) -> AuthSuccess:
        roles = await self._role_repository.role_names_for_user(user.id)
        access_token = self._token_issuer.issue_access_token(
            TokenSubject(
                user_id=user.id.value,
                email=user.email,
                username=user.username,
                first_name=user.first_name,
                last_name=user.last_name,
            ),
            roles=roles,
            tenant_id=tenant.id.value,
        )
        refresh_token = self._token_issuer.issue_refresh_token()
        await self._refresh_token_repository.store(
            RefreshToken(
                user_id=user.id,
                tenant_id=tenant.id,
                token_hash=hash_refresh_token(refresh_token.token),
                expires_at=refresh_token.expires_at,
            )
        )
        return AuthSuccess(
            access_token=access_token.token,
            refresh_token=refresh_token.token,
            access_token_expiration=access_token.expires_at,
            refresh_token_expiration=refresh_token.expires_at,
            principal=PrincipalView.from_user(user, roles),
        )

    def _login_rejected(self, reason: str) -> AuthFailure:
        self._probe.login_failed(state=AuthState.REJECTED, reason=reason)
        return AuthFailure(AuthState.REJECTED, (INVALID_CREDENTIALS_MESSAGE,))

    def _login_refused(self, outcome: CredentialCheckOutcome) -> AuthFailure:
        if outcome is CredentialCheckOutcome.LOCKED:
            self._probe.login_failed(state=AuthState.LOCKED, reason="locked_out")
            return AuthFailure(AuthState.LOCKED, (LOCKED_OUT_MESSAGE,))
        if outcome is CredentialCheckOutcome.TWO_FACTOR_REQUIRED:
            self._probe.login_failed(
                state=AuthState.TWO_FACTOR_REQUIRED, reason="two_factor_required"
            )
            return AuthFailure(
                AuthState.TWO_FACTOR_REQUIRED, (TWO_FACTOR_REQUIRED_MESSAGE,)
            )
        return self._login_rejected("bad_password")

    def _refresh_rejected(self, reason: str) -> AuthFailure:
        self._probe.refresh_failed(reason=reason)
        return AuthFailure(AuthState.REJECTED, (INVALID_REFRESH_TOKEN_MESSAGE,))
