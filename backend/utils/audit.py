from typing import Optional
from sqlalchemy.orm import Session
from models.login_attempt import LoginAttempt

def record_login_attempt(db: Session, *, employee_code: str, ip_address: Optional[str], success: bool) -> LoginAttempt:
    entry = LoginAttempt(employee_code=employee_code, ip_address=ip_address, success=success)
    db.add(entry)
    db.commit()
    return entry
