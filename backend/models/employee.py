from sqlalchemy import Column, Integer, String, DateTime
from database.db import Base
from datetime import datetime

class Employee(Base):
    """
    Employee model for storing registered staff and their login credentials.
    The employee code is generated at signup and is the login username.
    """
    __tablename__ = "employees"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)
    """Surrogate employee ID, embedded in session tokens"""

    # Personal details
    full_names = Column(String(255), nullable=False)
    """Employee's full names"""

    phone_number = Column(String(20), unique=True, nullable=False, index=True)
    """Mobile phone number (unique)"""

    identification_number = Column(String(50), unique=True, nullable=False, index=True)
    """National ID or passport number (unique)"""

    # Credentials
    employee_code = Column(String(6), unique=True, nullable=False, index=True)
    """Generated 6-digit login code (unique, never reassigned)"""

    password_hash = Column(String(255), nullable=False)
    """Hashed password (bcrypt, includes cost and salt)"""

    profile_image = Column(String(255), nullable=True)
    """Public path of the uploaded profile image"""

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    """Account creation timestamp"""

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    """Last account update timestamp"""

    def __repr__(self):
        return f"<Employee(id={self.id}, employee_code={self.employee_code})>"
