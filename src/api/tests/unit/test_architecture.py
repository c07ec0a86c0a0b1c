"""Architecture tests using pytest-archon.

These tests enforce the layering of the IAM bounded context and keep the
shared kernel independent of it.
"""

from pytest_archon import archrule


class TestIAMDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_infrastructure(self):
        """Domain layer should not depend on infrastructure.

        Aggregates are persisted by repositories; they never see the ORM.
        """
        (
            archrule("iam_domain_no_infrastructure")
            .match("iam.domain*")
            .should_not_import("iam.infrastructure*", "infrastructure*")
            .check("iam")
        )

    def test_domain_does_not_import_application(self):
        """Domain objects should be usable without application services."""
        (
            archrule("iam_domain_no_application")
            .match("iam.domain*")
            .should_not_import("iam.application*", "iam.ports*")
            .check("iam")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("iam_domain_no_frameworks")
            .match("iam.domain*")
            .should_not_import("fastapi*", "starlette*", "sqlalchemy*")
            .check("iam")
        )


class TestIAMPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports define interfaces, not their implementations."""
        (
            archrule("iam_ports_no_infrastructure")
            .match("iam.ports*")
            .should_not_import("iam.infrastructure*", "sqlalchemy*")
            .check("iam")
        )

    def test_ports_does_not_import_application(self):
        """Ports are used by the application layer, not the reverse."""
        (
            archrule("iam_ports_no_application")
            .match("iam.ports*")
            .should_not_import("iam.application*")
            .check("iam")
        )


class TestIAMApplicationLayerBoundaries:
    """Tests that application services stay behind their ports."""

    def test_application_does_not_import_presentation(self):
        (
            archrule("iam_application_no_presentation")
            .match("iam.application*")
            .should_not_import("iam.presentation*", "fastapi*")
            .check("iam")
        )

    def test_application_does_not_import_repositories(self):
        """Services receive repositories through their port interfaces."""
        (
            archrule("iam_application_no_repositories")
            .match("iam.application*")
            .should_not_import("iam.infrastructure*")
            .check("iam")
        )


class TestSharedKernelBoundaries:
    """The shared kernel must not depend on any bounded context."""

    def test_shared_kernel_does_not_import_iam(self):
        (
            archrule("shared_kernel_no_iam")
            .match("shared_kernel*")
            .should_not_import("iam*")
            .check("shared_kernel")
        )

    def test_shared_kernel_does_not_import_fastapi(self):
        """Token handling and tenant resolution work outside a web request."""
        (
            archrule("shared_kernel_no_fastapi")
            .match("shared_kernel*")
            .should_not_import("fastapi*", "starlette*")
            .check("shared_kernel")
        )
