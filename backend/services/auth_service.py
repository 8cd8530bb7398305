from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Callable, Optional, Tuple
from config.settings import settings
from core.exceptions import (
    CodeSpaceExhausted,
    DuplicateIdentification,
    DuplicatePhone,
    InvalidCredentials,
)
from models.employee import Employee
from schemas.employee import SignupRequest
from services import credential_store
from services.employee_codes import allocate_unique_code, generate_candidate
from utils.audit import record_login_attempt
from utils.security import dummy_verify, hash_password, issue_employee_token, verify_password
import logging

logger = logging.getLogger(__name__)

# ============ Registration Flow ============

def register_employee(
    db: Session,
    payload: SignupRequest,
    profile_image: Optional[str] = None,
    generate: Callable[[], str] = generate_candidate,
) -> Tuple[Employee, str]:
    """
    Create an employee account and issue its first session token.

    The payload has already passed SignupRequest validation. Duplicate
    phone/identification numbers are checked up front and again from the
    uniqueness violation if a concurrent signup wins the insert. A code
    taken between allocation and insert is replaced by a fresh one; any
    other constraint violation propagates unchanged.

    Returns:
        (new employee, token). The employee code is only ever handed out here.

    Raises:
        DuplicatePhone, DuplicateIdentification, CodeSpaceExhausted
        IntegrityError: Insert rejected for a reason other than a duplicate
    """
    if credential_store.phone_exists(db, payload.phone_number):
        logger.warning("Registration failed: phone number already registered")
        raise DuplicatePhone()

    if credential_store.identification_exists(db, payload.identification_number):
        logger.warning("Registration failed: identification number already registered")
        raise DuplicateIdentification()

    password_hash = hash_password(payload.password)

    for attempt in range(1, settings.EMPLOYEE_CODE_MAX_ATTEMPTS + 1):
        employee_code = allocate_unique_code(db, generate=generate)
        employee = Employee(
            full_names=payload.full_names,
            phone_number=payload.phone_number,
            identification_number=payload.identification_number,
            employee_code=employee_code,
            password_hash=password_hash,
            profile_image=profile_image,
        )

        try:
            credential_store.add_employee(db, employee)
        except IntegrityError:
            conflicts = credential_store.find_conflicts(
                db,
                phone_number=payload.phone_number,
                identification_number=payload.identification_number,
                employee_code=employee_code,
            )
            if "phone_number" in conflicts:
                logger.warning("Registration lost a race: phone number registered concurrently")
                raise DuplicatePhone()
            if "identification_number" in conflicts:
                logger.warning("Registration lost a race: identification number registered concurrently")
                raise DuplicateIdentification()
            if "employee_code" not in conflicts:
                logger.error("Employee insert rejected by a constraint other than a unique field")
                raise
            logger.info(f"Employee code collided on insert (attempt {attempt}), allocating another")
            continue

        logger.info(f"New employee registered: id={employee.id}")
        return employee, issue_employee_token(employee.id)

    logger.error("Registration gave up: every allocated employee code collided on insert")
    raise CodeSpaceExhausted()

# ============ Login Flow ============

def authenticate_employee(
    db: Session,
    employee_code: str,
    password: str,
    ip_address: Optional[str] = None,
) -> Tuple[Employee, str]:
    """
    Check an employee code and password, record the attempt, issue a token.

    Unknown codes and wrong passwords raise the same InvalidCredentials so
    callers cannot tell which codes exist.
    """
    employee = credential_store.get_by_code(db, employee_code)

    if employee is None:
        dummy_verify()
        logger.warning(f"Login failed: unknown employee code - {employee_code}")
        _log_failure(db, employee_code, ip_address)
        raise InvalidCredentials()

    if not verify_password(password, employee.password_hash):
        logger.warning(f"Login failed: invalid password - {employee_code}")
        _log_failure(db, employee_code, ip_address)
        raise InvalidCredentials()

    record_login_attempt(db, employee_code=employee_code, ip_address=ip_address, success=True)
    logger.info(f"Employee logged in successfully: {employee_code}")

    return employee, issue_employee_token(employee.id)

def _log_failure(db: Session, employee_code: str, ip_address: Optional[str]) -> None:
    if settings.LOG_FAILED_LOGIN_ATTEMPTS:
        record_login_attempt(db, employee_code=employee_code, ip_address=ip_address, success=False)
