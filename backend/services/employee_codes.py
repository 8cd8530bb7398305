from sqlalchemy.orm import Session
from typing import Callable, Optional
from config.settings import settings
from core.exceptions import CodeSpaceExhausted
from services import credential_store
import logging
import secrets

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999

# ============ Code Generation ============

def generate_candidate() -> str:
    """Draw a 6-digit code uniformly from 100000-999999 (no leading zeros)."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))

def allocate_unique_code(
    db: Session,
    generate: Callable[[], str] = generate_candidate,
    max_attempts: Optional[int] = None,
) -> str:
    """
    Draw candidates until one is not held by any employee.

    The result is only free at the time of the check; a concurrent signup
    may still take it before our insert, which the registration flow
    handles by catching the constraint violation and calling this again.

    Raises:
        CodeSpaceExhausted: no free code within max_attempts draws
    """
    attempts = max_attempts or settings.EMPLOYEE_CODE_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        code = generate()
        if not credential_store.code_exists(db, code):
            if attempt > 1:
                logger.info(f"Employee code allocated after {attempt} draws")
            return code

    logger.error(f"No free employee code after {attempts} draws")
    raise CodeSpaceExhausted()
