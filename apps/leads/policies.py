"""
Lead access rules

These mirror the row-level rules of the lead table. The services consult them
before every read scope and every write; a refused write is reported to the
caller as a denied mutation.

Access matrix:
Role      | See             | Create | Edit            | Assign | Delete
----------|-----------------|--------|-----------------|--------|-------
admin     | all leads       | yes    | all leads       | yes    | yes
manager   | all leads       | yes    | none            | no     | no
salesman  | assigned leads  | no     | assigned leads  | no     | no
user      | all leads       | no     | none            | no     | no
"""

from django.core.exceptions import PermissionDenied


class LeadPolicyError(PermissionDenied):
    """A mutation the lead table's access rules refuse."""
    pass


def can_view_all(context):
    return context.is_authenticated and not context.is_salesman()


def can_view(context, lead):
    if not context.is_authenticated:
        return False
    if context.is_salesman():
        return lead.assigned_to_id == context.user_id
    return True


def can_create(context):
    return context.is_admin() or context.is_manager()


def can_update(context, lead):
    if context.is_admin():
        return True
    return context.is_authenticated and lead.assigned_to_id == context.user_id


def can_assign(context):
    return context.is_admin()


def can_delete(context):
    return context.is_admin()


def check(allowed, message='Permission denied'):
    if not allowed:
        raise LeadPolicyError(message)
