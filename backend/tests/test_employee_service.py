"""Employee administration and credential rule tests."""

import pytest

from rentpos.errors import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from rentpos.models import EmployeeLog, SessionToken
from rentpos.services import auth_service, employee_service, session_service
from rentpos.services.auth_service import PasswordValidationError

PASSWORD = "Password123!"


class TestCredentialRules:

    @pytest.mark.parametrize("password", [
        "Short1!",          # too short
        "password123!",     # no uppercase
        "PASSWORD123!",     # no lowercase
        "Password!!!",      # no digit
        "Password123",      # no special character
    ])
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)

    @pytest.mark.parametrize("username", ["abc", "a" * 21, "bad-name", "123456", "Admin", "demo"])
    def test_bad_usernames(self, username):
        with pytest.raises(ValidationError):
            auth_service.validate_username(username)

    @pytest.mark.parametrize("name", ["J", "R2D2", "x" * 101])
    def test_bad_names(self, name):
        with pytest.raises(ValidationError):
            auth_service.validate_name(name)

    def test_password_hash_round_trip(self):
        hashed = auth_service.hash_password(PASSWORD)
        assert hashed != PASSWORD
        assert auth_service.verify_password(PASSWORD, hashed)
        assert not auth_service.verify_password("Password123?", hashed)
        assert not auth_service.verify_password(PASSWORD, "not-a-bcrypt-hash")


class TestEmployeeService:

    def test_create_and_authenticate(self):
        employee_service.create_employee("jane_doe", "Jane Doe", PASSWORD, "Cashier")
        employee = auth_service.authenticate("jane_doe", PASSWORD)
        assert employee.position == "Cashier"
        assert not employee.is_admin

    def test_authenticate_failure(self, cashier):
        with pytest.raises(AuthenticationError):
            auth_service.authenticate(cashier.username, "Nope123!!")

    def test_position_gate(self, admin, cashier):
        auth_service.require_position(admin, "Admin")
        auth_service.require_position(admin, "Cashier")
        auth_service.require_position(cashier, "Cashier")

        with pytest.raises(AuthorizationError) as exc:
            auth_service.require_position(cashier, "Admin")
        assert exc.value.status_code == 403
        assert exc.value.details == {"required_position": "Admin", "position": "Cashier"}

    def test_bad_position(self):
        with pytest.raises(ValidationError):
            employee_service.create_employee("jane_doe", "Jane Doe", PASSWORD, "Manager")

    def test_update_unknown(self):
        with pytest.raises(NotFoundError):
            employee_service.update_employee("ghost_user", name="Ghost")

    def test_delete_removes_sessions(self, admin, cashier, db_session):
        session_service.create_session(cashier.id)
        employee_service.delete_employee(cashier.username, actor=admin)

        assert db_session.query(SessionToken).count() == 0
        with pytest.raises(NotFoundError):
            employee_service.get_employee_by_username("debra_cashier")

    def test_sessions_validate_and_revoke(self, cashier):
        _, token = session_service.create_session(cashier.id)
        context = session_service.validate_session(token)
        assert context.employee_id == cashier.id
        assert context.position == "Cashier"

        assert session_service.revoke_session(token) is True
        assert session_service.validate_session(token) is None
        assert session_service.revoke_session(token) is False

    def test_log_action(self, cashier, db_session):
        employee_service.log_action(cashier.id, employee_service.ACTION_SALE, "Sale #1 total 2.862")
        entry = db_session.query(EmployeeLog).one()
        assert entry.action == "sale_committed"
        assert [e.id for e in employee_service.list_logs(employee_id=cashier.id)] == [entry.id]
