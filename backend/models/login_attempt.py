from sqlalchemy import Column, Integer, String, DateTime, Boolean
from database.db import Base
from datetime import datetime

class LoginAttempt(Base):
    """
    Append-only audit entry written by the login flow.
    The code is stored as submitted and may not belong to any employee.
    """
    __tablename__ = "login_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)

    employee_code = Column(String(6), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)  # IPv6-safe
    attempt_time = Column(DateTime, default=datetime.utcnow, index=True)
    success = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return (
            f"<LoginAttempt(employee_code={self.employee_code}, "
            f"success={self.success}, attempt_time={self.attempt_time})>"
        )
