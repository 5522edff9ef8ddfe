"""Tests for the lookeracl exception hierarchy and registry."""

from __future__ import annotations

from lookeracl import (
    AccessControlError,
    AppliedOperation,
    NoInheritedGrantToOverride,
    OperationType,
    PartialApplyError,
    PreconditionFailedError,
    RemoteError,
    error_registry,
    register_error,
)


class TestAccessControlError:
    """Tests for AccessControlError and subclasses."""

    def test_details_from_kwargs(self) -> None:
        """Test extra keyword arguments become details."""
        err = RemoteError("500 Internal Server Error", endpoint="/groups/7")
        assert err.code == "REMOTE_ERROR"
        assert err.message == "500 Internal Server Error"
        assert err.details == {"endpoint": "/groups/7"}
        assert str(err) == "500 Internal Server Error"

    def test_default_message(self) -> None:
        """Test the class default message is used when none is given."""
        assert AccessControlError().message == "An internal error occurred"

    def test_no_inherited_grant(self) -> None:
        """Test the override precondition error names context and principal."""
        err = NoInheritedGrantToOverride("cm-1", "g-7")
        assert isinstance(err, PreconditionFailedError)
        assert "No inherited permission found" in err.message
        assert err.details == {"context_id": "cm-1", "principal_id": "g-7"}

    def test_partial_apply_details(self) -> None:
        """Test PartialApplyError exposes progress and the cause."""
        done = AppliedOperation(op=OperationType.ADD_MEMBER, target="g1", subject="u1")
        failed = AppliedOperation(op=OperationType.ADD_MEMBER, target="g1", subject="u2")
        cause = RemoteError("403")

        err = PartialApplyError("stopped", applied=[done], failed=failed, cause=cause, partial_state={"u1"})

        assert err.applied == [done]
        assert err.cause is cause
        assert err.partial_state == {"u1"}
        assert err.details == {
            "applied": ["add_member(g1, u1)"],
            "failed": "add_member(g1, u2)",
            "cause_code": "REMOTE_ERROR",
        }


class TestErrorRegistry:
    """Tests for ErrorRegistry."""

    def test_builtin_codes_registered(self) -> None:
        """Test every built-in code maps back to its class."""
        codes = error_registry.all()
        assert codes["NOT_FOUND"].__name__ == "NotFoundError"
        assert codes["NO_INHERITED_GRANT"] is NoInheritedGrantToOverride
        assert codes["PARTIAL_APPLY"] is PartialApplyError

    def test_register_custom_error(self) -> None:
        """Test the decorator registers a new code."""

        @register_error("RATE_LIMITED")
        class RateLimitedError(RemoteError):
            code = "RATE_LIMITED"

        assert error_registry.get("RATE_LIMITED") is RateLimitedError
        assert error_registry.get("UNKNOWN") is None
