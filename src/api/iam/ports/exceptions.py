"""Domain exceptions for IAM bounded context.

These exceptions represent domain-level errors that can occur during
repository operations. They should be caught and handled by the
application layer.
"""


class DuplicateTenantIdentifierError(Exception):
    """Raised when attempting to create a tenant whose identifier is taken.

    Tenant identifiers are globally unique. The application layer should
    handle this and provide appropriate feedback to the caller.
    """

    pass


class TenantHasUsersError(Exception):
    """Raised when attempting to delete a tenant that still has principals.

    Principals must be removed before their tenant can be deleted.
    """

    pass


class DuplicateUserError(Exception):
    """Raised when an email or username is already registered in the tenant.

    Email and username uniqueness is scoped to a tenant; the same email
    may exist in several tenants.
    """

    pass


class DuplicateRoleNameError(Exception):
    """Raised when a role name already exists in the tenant."""

    pass
