from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import InvalidToken, TokenExpired, Unauthenticated
from utils.security import (
    create_access_token,
    decode_token,
    hash_password,
    issue_employee_token,
    resolve_employee,
    verify_employee_token,
    verify_password,
)


def test_hash_is_salted_and_verifiable():
    first = hash_password("Passw0rd")
    second = hash_password("Passw0rd")

    assert first != second
    assert first.startswith("$2")
    assert verify_password("Passw0rd", first)
    assert verify_password("Passw0rd", second)
    assert not verify_password("passw0rd", first)


def test_verify_password_rejects_unreadable_hash():
    assert not verify_password("Passw0rd", "not-a-bcrypt-hash")


def test_token_resolves_to_employee_id():
    token = issue_employee_token(42)
    assert verify_employee_token(token) == 42


def test_default_lifetime_is_seven_days():
    payload = decode_token(issue_employee_token(1))

    remaining = payload["exp"] - datetime.now(timezone.utc).timestamp()
    assert timedelta(days=7) - timedelta(minutes=1) < timedelta(seconds=remaining) <= timedelta(days=7)


def test_expired_token_is_rejected():
    token = issue_employee_token(42, expires_delta=timedelta(seconds=-10))

    with pytest.raises(TokenExpired):
        verify_employee_token(token)


def test_token_signed_with_another_secret_is_rejected():
    token = create_access_token({"sub": "42"}, secret_key="someone-elses-secret")

    with pytest.raises(InvalidToken):
        verify_employee_token(token)


def test_tampered_payload_is_rejected():
    header, _, signature = issue_employee_token(42).split(".")
    _, forged_payload, _ = issue_employee_token(1).split(".")

    with pytest.raises(InvalidToken):
        verify_employee_token(".".join([header, forged_payload, signature]))


def test_garbage_token_is_rejected():
    with pytest.raises(InvalidToken):
        verify_employee_token("not.a.token")


def test_token_without_subject_is_rejected():
    token = create_access_token({"scope": "profile"})

    with pytest.raises(InvalidToken):
        verify_employee_token(token)


def test_resolve_employee_returns_current_record(db, make_employee):
    employee = make_employee()

    resolved = resolve_employee(db, issue_employee_token(employee.id))

    assert resolved.id == employee.id
    assert resolved.employee_code == employee.employee_code


def test_resolve_employee_requires_a_token(db):
    with pytest.raises(Unauthenticated):
        resolve_employee(db, None)


def test_resolve_employee_rejects_deleted_account(db, make_employee):
    employee = make_employee()
    token = issue_employee_token(employee.id)
    db.delete(employee)
    db.commit()

    with pytest.raises(Unauthenticated) as exc_info:
        resolve_employee(db, token)

    assert type(exc_info.value) is Unauthenticated
