from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional, Set
from models.employee import Employee
import logging

logger = logging.getLogger(__name__)

# The employees table's UNIQUE constraints enforce phone, identification and
# code uniqueness; the *_exists helpers are pre-checks only.

# ============ Lookups ============

def get_by_id(db: Session, employee_id: int) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.id == employee_id).first()

def get_by_code(db: Session, employee_code: str) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.employee_code == employee_code).first()

def phone_exists(db: Session, phone_number: str) -> bool:
    return db.query(Employee.id).filter(Employee.phone_number == phone_number).first() is not None

def identification_exists(db: Session, identification_number: str) -> bool:
    return db.query(Employee.id).filter(
        Employee.identification_number == identification_number
    ).first() is not None

def code_exists(db: Session, employee_code: str) -> bool:
    return db.query(Employee.id).filter(Employee.employee_code == employee_code).first() is not None

def find_conflicts(
    db: Session,
    *,
    phone_number: str,
    identification_number: str,
    employee_code: str,
) -> Set[str]:
    """
    Return the names of the unique columns already holding these values.

    Used after an insert was rejected by a uniqueness constraint, to turn
    the driver-specific IntegrityError into a domain error.
    """
    rows = db.query(
        Employee.phone_number,
        Employee.identification_number,
        Employee.employee_code,
    ).filter(
        or_(
            Employee.phone_number == phone_number,
            Employee.identification_number == identification_number,
            Employee.employee_code == employee_code,
        )
    ).all()

    conflicts = set()
    for row in rows:
        if row.phone_number == phone_number:
            conflicts.add("phone_number")
        if row.identification_number == identification_number:
            conflicts.add("identification_number")
        if row.employee_code == employee_code:
            conflicts.add("employee_code")
    return conflicts

# ============ Writes ============

def add_employee(db: Session, employee: Employee) -> Employee:
    """
    Insert and commit a new employee.

    Raises sqlalchemy.exc.IntegrityError on a constraint violation; the
    session is rolled back before the error propagates.
    """
    db.add(employee)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(employee)
    logger.debug(f"Employee row inserted: id={employee.id}")
    return employee
