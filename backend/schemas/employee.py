from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, List, Optional, Type, TypeVar
from core.exceptions import ValidationError
import re

# Kenyan mobile numbers: +2547XXXXXXXX / +2541XXXXXXXX or 07XXXXXXXX / 01XXXXXXXX
PHONE_PATTERN = re.compile(r"^(\+254|0)[17]\d{8}$")

ModelT = TypeVar("ModelT", bound=BaseModel)

def normalize_phone(phone_number: str) -> str:
    """Store every number in local form, so +254712345678 and 0712345678 are the same number."""
    if phone_number.startswith("+254"):
        return "0" + phone_number[len("+254"):]
    return phone_number

# ============ Request Models ============

class SignupRequest(BaseModel):
    """Employee registration form (profile image is handled separately)"""
    full_names: str
    phone_number: str
    identification_number: str
    password: str
    confirm_password: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "full_names": "Jane Doe",
                "phone_number": "0712345678",
                "identification_number": "ID12345",
                "password": "Passw0rd",
                "confirm_password": "Passw0rd",
            }
        }
    )

    @field_validator("full_names", "phone_number", "identification_number", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("full_names")
    @classmethod
    def check_full_names(cls, value: str) -> str:
        if not 2 <= len(value) <= 255:
            raise ValueError("Full names must be between 2 and 255 characters")
        return value

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid Kenyan phone number")
        return normalize_phone(value)

    @field_validator("identification_number")
    @classmethod
    def check_identification_number(cls, value: str) -> str:
        if not 5 <= len(value) <= 50:
            raise ValueError("Identification number must be between 5 and 50 characters")
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters long")
        if not (
            re.search(r"[a-z]", value)
            and re.search(r"[A-Z]", value)
            and re.search(r"\d", value)
        ):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value

    @field_validator("confirm_password")
    @classmethod
    def check_confirm_password(cls, value: str, info: ValidationInfo) -> str:
        # password is absent from info.data when it failed its own checks
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Password confirmation does not match password")
        return value

class LoginRequest(BaseModel):
    """Employee login credentials"""
    employee_code: str
    password: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "employee_code": "482913",
                "password": "Passw0rd",
            }
        }
    )

    @field_validator("employee_code", mode="before")
    @classmethod
    def normalize_code(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("employee_code")
    @classmethod
    def check_employee_code(cls, value: str) -> str:
        if len(value) != 6:
            raise ValueError("Employee code must be exactly 6 digits")
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value

# ============ Response Models ============

class EmployeeResponse(BaseModel):
    """Public employee fields (never includes the password hash)"""
    id: int
    full_names: str
    phone_number: str
    employee_code: str
    profile_image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class AuthResponse(BaseModel):
    """Signup/login response with the freshly issued session token"""
    success: bool = True
    message: str
    data: EmployeeResponse
    token: str

class ProfileResponse(BaseModel):
    """Authenticated employee profile"""
    success: bool = True
    data: EmployeeResponse

# ============ Validation Helpers ============

def field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into [{field, message}] items."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors

def validate_payload(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """
    Validate raw request data against a request model.

    Raises:
        ValidationError: With every failing field, before anything is mutated
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(field_errors(e))
