"""Repository for CredentialToken entity."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy import and_, delete, or_, update
from sqlmodel import col, select

from src.app.models import CredentialToken, TokenType
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class CredentialTokenRepository(BaseRepository[CredentialToken]):
    model = CredentialToken

    async def get_valid(
        self, token_hash: str, token_type: TokenType, for_update: bool = False
    ) -> CredentialToken | None:
        """Get an unused, unexpired token of the given type by hash.

        Args:
            token_hash: The hashed token to look up
            token_type: Required token purpose
            for_update: Lock the row so concurrent consumers cannot both use it
        """
        query = select(CredentialToken).where(
            CredentialToken.token_hash == token_hash,
            CredentialToken.token_type == token_type.value,
            CredentialToken.used == False,  # noqa: E712
            CredentialToken.expires_at > utc_now(),
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def mark_used(self, token: CredentialToken) -> None:
        """Mark token as consumed (no commit)."""
        token.used = True
        token.used_at = utc_now()
        self.session.add(token)

    async def revoke_all(self, account_id: UUID, token_type: TokenType) -> int:
        """Mark every unused token of a type for an account as used.

        Returns the number of tokens revoked.
        """
        stmt = (
            update(CredentialToken)
            .where(col(CredentialToken.account_id) == account_id)
            .where(col(CredentialToken.token_type) == token_type.value)
            .where(col(CredentialToken.used) == False)  # noqa: E712
            .values(used=True, used_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def cleanup(self, used_retention_hours: int) -> int:
        """Delete expired tokens and used tokens older than the retention window.

        Returns the number of tokens deleted.
        """
        now = utc_now()
        used_cutoff = now - timedelta(hours=used_retention_hours)
        stmt = delete(CredentialToken).where(
            or_(
                col(CredentialToken.expires_at) < now,
                and_(
                    col(CredentialToken.used) == True,  # noqa: E712
                    col(CredentialToken.used_at) < used_cutoff,
                ),
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
