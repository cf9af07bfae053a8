from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from src.taskpulse.taskpulse.core.exceptions import ExpiredOrInvalidTokenError, ValidationError
from src.taskpulse.taskpulse.otp.service import OTPService
from src.taskpulse.taskpulse.users.verification_service import AccountVerificationService


@pytest.fixture
def otp(otp_repo, clock):
    return OTPService(otp_repo, clock=clock)


def _service(users_repo, otp, mailer, *, expose_codes=False):
    return AccountVerificationService(users_repo, otp, mailer, expose_codes=expose_codes)


def test_send_code_mails_and_hides_code_by_default(users_repo, otp, mailer):
    issued = _service(users_repo, otp, mailer).send_verification_code("New@Example.com")

    assert issued.to_dict() == {"email": "new@example.com", "expiresIn": "5 minutes"}
    assert mailer.sent[0][:2] == ("otp", "new@example.com")


def test_send_code_exposes_code_when_enabled(users_repo, otp, mailer):
    issued = _service(users_repo, otp, mailer, expose_codes=True).send_verification_code("new@example.com")
    assert issued.to_dict()["otp"] == mailer.sent[0][2]


def test_confirm_email_marks_account_verified(users_repo, otp, mailer, employee):
    svc = _service(users_repo, otp, mailer)
    svc.send_verification_code(employee.email)
    code = mailer.sent[-1][2]

    assert svc.confirm_email(employee.email, code) == employee.email
    assert users_repo.get_by_id(employee.user_id).is_email_verified is True

    with pytest.raises(ValidationError):
        svc.send_verification_code(employee.email)


def test_confirm_email_rejects_reused_code(users_repo, otp, mailer):
    svc = _service(users_repo, otp, mailer)
    svc.send_verification_code("x@example.com")
    code = mailer.sent[-1][2]
    svc.confirm_email("x@example.com", code)

    with pytest.raises(ExpiredOrInvalidTokenError):
        svc.confirm_email("x@example.com", code)


def test_password_reset_for_unknown_email_sends_nothing(users_repo, otp, mailer):
    svc = _service(users_repo, otp, mailer, expose_codes=True)
    assert svc.request_password_reset("ghost@example.com") is None
    assert mailer.sent == []


def test_password_reset_flow(users_repo, otp, mailer, employee):
    svc = _service(users_repo, otp, mailer, expose_codes=True)
    code = svc.request_password_reset(employee.email)
    assert mailer.sent[-1] == ("reset", employee.email, code)

    svc.reset_password(email=employee.email, token=code, new_password="brandnew1")
    assert check_password_hash(users_repo.get_by_id(employee.user_id).password_hash, "brandnew1")

    with pytest.raises(ExpiredOrInvalidTokenError, match="Invalid or expired reset token"):
        svc.reset_password(email=employee.email, token=code, new_password="another1")


def test_reset_code_expires(users_repo, otp, mailer, employee, clock):
    svc = _service(users_repo, otp, mailer, expose_codes=True)
    code = svc.request_password_reset(employee.email)
    clock.advance(minutes=6)

    with pytest.raises(ExpiredOrInvalidTokenError):
        svc.reset_password(email=employee.email, token=code, new_password="brandnew1")


def test_reset_requires_all_fields(users_repo, otp, mailer):
    with pytest.raises(ValidationError):
        _service(users_repo, otp, mailer).reset_password(email="a@example.com", token="", new_password="x")


def test_numeric_codes_are_rejected_instead_of_coerced(users_repo, otp, mailer, employee):
    svc = _service(users_repo, otp, mailer, expose_codes=True)
    code = svc.request_password_reset(employee.email)

    with pytest.raises(ValidationError, match="Token must be a string"):
        svc.reset_password(email=employee.email, token=123456, new_password="brandnew1")
    with pytest.raises(ValidationError, match="OTP must be a string"):
        svc.confirm_email(employee.email, 12345)

    # The string code is still usable afterwards.
    svc.reset_password(email=employee.email, token=code, new_password="brandnew1")
