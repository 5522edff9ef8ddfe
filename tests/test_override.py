"""Tests for the inherited-grant override workflow."""

from __future__ import annotations

import logging

import pytest
from lookeracl import NoInheritedGrantToOverride, PermissionLevel, PreconditionFailedError
from lookeracl.reconcile import OverrideStatus, OverrideWorkflow


class TestOverrideWorkflow:
    """Tests for OverrideWorkflow seek/override/verify/release."""

    def test_override_without_grant_fails_before_mutating(self, service) -> None:
        """Test no inherited grant raises a precondition failure with no mutation."""
        with pytest.raises(PreconditionFailedError) as exc_info:
            OverrideWorkflow(service).override("cm-1", "g-7", PermissionLevel.EDIT)
        assert isinstance(exc_info.value, NoInheritedGrantToOverride)
        assert exc_info.value.code == "NO_INHERITED_GRANT"
        assert service.mutations == []

    def test_override_view_to_edit(self, service) -> None:
        """Test one update call, same grant id, resulting level edit."""
        inherited = service.seed_grant("cm-1", "g-7", PermissionLevel.VIEW)

        grant = OverrideWorkflow(service).override("cm-1", "g-7", PermissionLevel.EDIT)

        assert grant.id == inherited.id
        assert grant.level == PermissionLevel.EDIT
        assert service.mutations == [("update_grant", (inherited.id, PermissionLevel.EDIT))]

    def test_override_same_level_still_writes(self, service) -> None:
        """Test converting at the current level still issues the update."""
        inherited = service.seed_grant("cm-1", "g-7", PermissionLevel.VIEW)
        OverrideWorkflow(service).override("cm-1", "g-7", PermissionLevel.VIEW)
        assert service.count("update_grant") == 1
        assert service.count("create_grant") == 0
        assert service.grants[inherited.id].level == PermissionLevel.VIEW

    def test_verify_in_place(self, service) -> None:
        """Test verify finds the grant at the applied level."""
        service.seed_grant("cm-1", "g-7", PermissionLevel.EDIT)
        check = OverrideWorkflow(service).verify("cm-1", "g-7", PermissionLevel.EDIT)
        assert check.status == OverrideStatus.IN_PLACE

    def test_verify_level_changed(self, service) -> None:
        """Test a level changed outside the system reads as reverted."""
        service.seed_grant("cm-1", "g-7", PermissionLevel.VIEW)
        check = OverrideWorkflow(service).verify("cm-1", "g-7", PermissionLevel.EDIT)
        assert check.status == OverrideStatus.REVERTED
        assert "view" in check.reason

    def test_verify_grant_gone(self, service) -> None:
        """Test a missing grant reads as reverted."""
        check = OverrideWorkflow(service).verify("cm-1", "g-7", PermissionLevel.EDIT)
        assert check.status == OverrideStatus.REVERTED
        assert check.grant is None

    def test_release_makes_no_remote_call(self, service, caplog) -> None:
        """Test release only logs the non-reversion warning."""
        grant = service.seed_grant("cm-1", "g-7", PermissionLevel.EDIT)
        with caplog.at_level(logging.WARNING, logger="lookeracl.reconcile.override"):
            OverrideWorkflow(service).release(grant.id, "cm-1", "g-7", PermissionLevel.EDIT)

        assert service.calls == []
        assert service.grants[grant.id].level == PermissionLevel.EDIT
        assert "does not revert" in caplog.text
