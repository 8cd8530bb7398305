from passlib.context import CryptContext
from jose import ExpiredSignatureError, JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from config.settings import settings
from core.exceptions import InvalidToken, ServerError, TokenExpired, Unauthenticated
from models.employee import Employee
from database.db import get_db
from services import credential_store
import logging

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# HTTP Bearer token scheme; a missing header is reported by the guard itself
security = HTTPBearer(auto_error=False)

# ============ Password Management ============

def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    A fresh salt is generated per call and embedded in the result, so the
    same password never hashes to the same string twice.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise (including unreadable hashes)
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.error("Stored password hash could not be parsed")
        return False

def dummy_verify() -> None:
    """Spend roughly one verification's worth of time when there is no hash to check."""
    pwd_context.dummy_verify()

# ============ JWT Token Management ============

def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    *,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary to encode in the token (typically {"sub": employee_id})
        expires_delta: Optional custom expiration time. If None, uses default from settings
        secret_key: Signing key override. Defaults to settings.SECRET_KEY
        algorithm: Signing algorithm override. Defaults to settings.ALGORITHM

    Returns:
        Encoded JWT token string

    Example:
        token = create_access_token(data={"sub": str(employee.id)})
    """
    to_encode = data.copy()

    # Calculate expiration time
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    # Add expiration to token data
    to_encode.update({"exp": expire})

    # Encode token
    try:
        return jwt.encode(
            to_encode,
            secret_key or settings.SECRET_KEY,
            algorithm=algorithm or settings.ALGORITHM,
        )
    except Exception as e:
        logger.error(f"Failed to create access token: {str(e)}")
        raise ServerError("Failed to create access token")

def issue_employee_token(employee_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a session token asserting the given employee id."""
    return create_access_token(data={"sub": str(employee_id)}, expires_delta=expires_delta)

def decode_token(
    token: str,
    *,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> dict:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload (dictionary)

    Raises:
        TokenExpired: If the exp claim is in the past
        InvalidToken: If the signature or format is wrong
    """
    try:
        return jwt.decode(
            token,
            secret_key or settings.SECRET_KEY,
            algorithms=[algorithm or settings.ALGORITHM],
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise TokenExpired()
    except JWTError as e:
        logger.warning(f"Invalid token: {str(e)}")
        raise InvalidToken()

def verify_employee_token(token: str) -> int:
    """
    Verify a session token and return the employee id it asserts.

    Raises:
        TokenExpired: If the token has expired
        InvalidToken: If the token is forged, malformed or lacks an employee id
    """
    payload = decode_token(token)

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token missing 'sub' claim")
        raise InvalidToken()

    try:
        return int(subject)
    except (TypeError, ValueError):
        logger.warning(f"Token 'sub' claim is not an employee id: {subject!r}")
        raise InvalidToken()

# ============ Employee Authentication ============

def resolve_employee(db: Session, token: Optional[str]) -> Employee:
    """
    Turn a bearer token into the employee it belongs to.

    The employee is looked up again on every call, so a token for a deleted
    account stops working immediately even though it has not expired.

    Raises:
        Unauthenticated: No token, or the employee no longer exists
        TokenExpired / InvalidToken: From token verification
    """
    if not token:
        raise Unauthenticated()

    employee_id = verify_employee_token(token)

    employee = credential_store.get_by_id(db, employee_id)
    if employee is None:
        logger.warning(f"Employee not found for token: {employee_id}")
        raise Unauthenticated("Invalid token. Employee not found.")

    return employee

def get_current_employee(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Employee:
    """
    Dependency function to get current authenticated employee.
    Validates JWT token and returns employee object.

    Usage in routes:
        @router.get("/profile")
        def profile(current_employee: Employee = Depends(get_current_employee)):
            return current_employee
    """
    token = credentials.credentials if credentials else None
    return resolve_employee(db, token)
