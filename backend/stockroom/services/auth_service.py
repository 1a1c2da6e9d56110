# Overview: Service-layer operations for auth; encapsulates password hashing and user creation.

"""
Authentication Service

WHY: Every cart, order and inventory reading must be attributable. Uses
bcrypt for password hashing behind two narrow functions (hash_password,
verify_password) so nothing else in the codebase touches password material.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- 6 to 128 characters
- Emails are unique across the system and compared lower-cased
- Session tokens managed separately (see session_service.py)
"""

import bcrypt
import re
from flask import current_app

from ..errors import BadRequestError, ConflictError
from ..extensions import db
from ..models import User
from ..permissions import UserRole
from ..time_utils import utcnow

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(BadRequestError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    """
    Validate password meets length requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or not password:
        raise PasswordValidationError("The field password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise PasswordValidationError(
            f"The field password must have {PASSWORD_MIN_LENGTH} characters minimum"
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise PasswordValidationError(
            f"The field password must have {PASSWORD_MAX_LENGTH} characters maximum"
        )


def normalize_email(email) -> str:
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        raise BadRequestError("Invalid email", "Please enter a valid email")
    return email.strip().lower()


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in storage
        return False


def create_user(
    email: str,
    password: str,
    role: str = UserRole.CLERK,
    username: str | None = None,
    team_id: int | None = None,
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        BadRequestError: invalid email, role or password
        ConflictError: email already registered
    """
    email = normalize_email(email)
    if role not in UserRole.ALL:
        raise BadRequestError(f"Invalid role {role!r}", "Please enter a valid role")

    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise ConflictError(f"Email {email} already registered", "This email is already in use")

    password_hash = hash_password(password)

    user = User(
        email=email,
        username=username,
        password_hash=password_hash,
        role=role,
        team_id=team_id,
    )

    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Created user id=%s role=%s", user.id, role)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    if not isinstance(email, str):
        return None
    user = db.session.query(User).filter(
        User.email == email.strip().lower(),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None
