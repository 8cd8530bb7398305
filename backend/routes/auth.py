from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional
from database.db import get_db
from models.employee import Employee
from core.exceptions import AuthServiceError, ServerError, ValidationError
from schemas.employee import (
    AuthResponse,
    EmployeeResponse,
    LoginRequest,
    ProfileResponse,
    SignupRequest,
    validate_payload,
)
from services.auth_service import authenticate_employee, register_employee
from utils.security import get_current_employee
from utils.uploads import discard_profile_image, save_profile_image
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

# ============ Request Parsing ============

async def read_login_payload(request: Request) -> LoginRequest:
    """
    Accept login credentials as JSON or as a form post.

    Raises:
        ValidationError: Malformed body or invalid fields
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        else:
            data = dict(await request.form())
    except ValueError:
        raise ValidationError([{"field": "body", "message": "Malformed request body"}])

    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "message": "Request body must be an object"}])

    return validate_payload(LoginRequest, data)

def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None

# ============ Signup Endpoint ============

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    full_names: str = Form(""),
    phone_number: str = Form(""),
    identification_number: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    profile_image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """
    Employee registration endpoint.

    Validates the form, stores the optional profile image, creates the
    employee with a generated 6-digit code and returns a session token.
    The employee code in the response is the only way to log in later.

    Raises:
        400: Validation failed, phone or identification number already registered
        500: Registration failed
    """
    payload = validate_payload(SignupRequest, {
        "full_names": full_names,
        "phone_number": phone_number,
        "identification_number": identification_number,
        "password": password,
        "confirm_password": confirm_password,
    })

    image_path = None
    try:
        if profile_image is not None and profile_image.filename:
            image_path = save_profile_image(profile_image)

        employee, token = register_employee(db, payload, profile_image=image_path)

        return AuthResponse(
            message="Employee registered successfully",
            data=EmployeeResponse.model_validate(employee),
            token=token,
        )

    except AuthServiceError:
        discard_profile_image(image_path)
        raise
    except Exception:
        logger.exception("Signup error")
        discard_profile_image(image_path)
        db.rollback()
        raise ServerError("Server error during registration")

# ============ Login Endpoint ============

@router.post("/login", response_model=AuthResponse)
def login(
    request: Request,
    payload: LoginRequest = Depends(read_login_payload),
    db: Session = Depends(get_db)
):
    """
    Employee login endpoint.

    Authenticates with employee code and password.
    Returns the employee's public fields and a session token.

    Raises:
        400: Malformed input
        401: Invalid employee code or password
    """
    try:
        employee, token = authenticate_employee(
            db,
            payload.employee_code,
            payload.password,
            ip_address=client_ip(request),
        )

        return AuthResponse(
            message="Login successful",
            data=EmployeeResponse.model_validate(employee),
            token=token,
        )

    except AuthServiceError:
        raise
    except Exception:
        logger.exception("Login error")
        db.rollback()
        raise ServerError("Server error during login")

# ============ Get Current Employee Profile ============

@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    current_employee: Employee = Depends(get_current_employee)
):
    """
    Get current authenticated employee's profile.

    Requires valid JWT token in Authorization header.

    Raises:
        401: Missing, invalid or expired token, or the account no longer exists
    """
    return ProfileResponse(data=EmployeeResponse.model_validate(current_employee))
