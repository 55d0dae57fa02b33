"""Authentication and user administration."""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
import logging

from insightstream.models.user import User, UserSession
from insightstream.models.schemas import UserCreate, UserUpdate
from insightstream.utils.security import hash_password, verify_password, create_access_token
from insightstream.utils.validators import normalize_email
from insightstream.config import settings

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Tuple[Optional[User], Optional[str]]:
        """
        Check an email/password pair against the stored user record.

        Args:
            db: Database session
            email: Login email
            password: Plaintext password

        Returns:
            Tuple of (user, error_message)
        """
        logger.info(f"Login attempt for {email}")
        user = db.query(User).filter(User.email == normalize_email(email)).first()

        if not user or not verify_password(password, user.password_hash):
            return None, "Invalid email or password"

        user.last_login = datetime.utcnow()
        db.commit()

        return user, None

    @staticmethod
    def create_user_session(
        db: Session,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> str:
        """
        Create a new user session and JWT token.

        Returns:
            JWT access token
        """
        access_token = create_access_token({"sub": user.id, "role": user.role})

        expires_at = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        session = UserSession(
            user_id=user.id,
            session_token=access_token,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=expires_at
        )

        db.add(session)
        db.commit()

        return access_token

    @staticmethod
    def validate_session(db: Session, token: str) -> Tuple[Optional[User], Optional[str]]:
        """
        Validate a session token.

        Returns:
            Tuple of (user, error_message)
        """
        session = db.query(UserSession).filter(UserSession.session_token == token).first()

        if not session:
            return None, "Invalid session"

        if session.expires_at < datetime.utcnow():
            db.delete(session)
            db.commit()
            return None, "Session expired"

        session.last_activity = datetime.utcnow()
        db.commit()

        user = db.query(User).filter(User.id == session.user_id).first()
        if not user:
            return None, "User not found"

        return user, None

    @staticmethod
    def logout_user(db: Session, token: str) -> bool:
        """Logout user by deleting the session. Returns False if it did not exist."""
        session = db.query(UserSession).filter(UserSession.session_token == token).first()
        if session:
            db.delete(session)
            db.commit()
            return True
        return False

    @staticmethod
    def cleanup_expired_sessions(db: Session) -> int:
        """Delete expired sessions and return how many were removed."""
        count = db.query(UserSession).filter(
            UserSession.expires_at < datetime.utcnow()
        ).delete()
        db.commit()
        return count

    # ============================================
    # User administration
    # ============================================

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.name).all()

    @staticmethod
    def create_user(db: Session, user_data: UserCreate) -> Tuple[Optional[User], Optional[str]]:
        """
        Create a user record.

        Returns:
            Tuple of (user, error_message)
        """
        email = normalize_email(user_data.email)

        if db.query(User).filter(User.email == email).first():
            return None, "Email already registered"

        user = User(
            email=email,
            name=user_data.name.strip(),
            role=user_data.role,
            password_hash=hash_password(user_data.password),
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return None, "Email already registered"
        db.refresh(user)

        logger.info(f"Created user {user.id} ({user.role})")
        return user, None

    @staticmethod
    def update_user(db: Session, user_id: str, user_data: UserUpdate) -> Optional[User]:
        """Update name, role or password. Returns None if the user does not exist."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return None

        if user_data.name is not None:
            user.name = user_data.name.strip()
        if user_data.role is not None:
            user.role = user_data.role
        if user_data.password:
            user.password_hash = hash_password(user_data.password)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete_user(db: Session, user_id: str) -> bool:
        """Delete a user and their sessions. Assigned links and snapshots are kept."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return False

        db.query(UserSession).filter(UserSession.user_id == user_id).delete()
        db.delete(user)
        db.commit()

        logger.warning(f"Deleted user {user_id}")
        return True
