import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auction_api.core.errors import DuplicateEmailError, VerificationTokenError
from auction_api.db.base import utcnow
from auction_api.models.user import EmailVerificationToken, User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, *, email: str, password_hash: str, name: str) -> User:
        user = User(email=normalize_email(email), password_hash=password_hash, name=name.strip())
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateEmailError(email) from exc
        self.db.refresh(user)
        return user

    def get_by_email(self, email: str) -> User | None:
        return self.db.scalar(select(User).where(User.email == normalize_email(email)))

    def get_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def create_verification_token(self, *, user_id: int, token: str, expires_at: datetime) -> EmailVerificationToken:
        record = EmailVerificationToken(user_id=user_id, token=token, expires_at=expires_at)
        self.db.add(record)
        self.db.commit()
        return record

    def verify_email(self, token: str) -> User:
        """Consume a verification token and mark its owner verified.

        The token must be unused and unexpired; both updates are committed
        together, so a failure leaves neither the token nor the user changed.
        """
        now = utcnow()
        record = self.db.scalar(
            select(EmailVerificationToken)
            .where(EmailVerificationToken.token == token)
            .where(EmailVerificationToken.used_at.is_(None))
            .where(EmailVerificationToken.expires_at > now)
        )
        if record is None:
            raise VerificationTokenError("invalid or expired token")

        user = self.db.get(User, record.user_id)
        if user is None:
            raise VerificationTokenError("invalid or expired token")

        record.used_at = now
        user.email_verified = True
        user.email_verified_at = now
        self.db.commit()
        logger.info("Email verified for user id=%s.", user.id)
        return user
