"""
Subject Set Module.

Pure functions for building subject lists from command arguments and for
merging subjects into, or removing them from, a binding's subject list.
"""

from typing import Iterable, List, Optional

from ..core.constants import KubernetesConstants
from ..core.exceptions import ValidationError
from .models import Subject, SubjectKind

SERVICE_ACCOUNT_PREFIX = KubernetesConstants.SERVICE_ACCOUNT_USER_PREFIX


def merge_subjects(current: Iterable[Subject], to_add: Iterable[Subject]) -> List[Subject]:
    """
    Add subjects to a subject list.

    The existing order is kept and new subjects are appended in the order
    given. Subjects already present (or repeated within to_add) are skipped.

    Args:
        current: Subjects currently on the binding
        to_add: Subjects to grant the role to

    Returns:
        New subject list
    """
    merged = list(current)
    seen = set(merged)
    for subject in to_add:
        if subject not in seen:
            merged.append(subject)
            seen.add(subject)
    return merged


def subtract_subjects(current: Iterable[Subject], to_remove: Iterable[Subject]) -> List[Subject]:
    """
    Remove subjects from a subject list, keeping the order of the rest.

    Removing a subject that is not present is a no-op.
    """
    removed = set(to_remove)
    return [subject for subject in current if subject not in removed]


def parse_service_account(value: str, default_namespace: Optional[str]) -> Subject:
    """
    Parse a service account argument.

    Accepts 'name' (namespace defaults to default_namespace) or
    'namespace:name'.

    Raises:
        ValidationError: If the value is empty or names no namespace
    """
    namespace, sep, name = value.partition(':')
    if not sep:
        namespace, name = default_namespace, value
    if not name or ':' in name:
        raise ValidationError(f"Invalid service account '{value}': expected [namespace:]name")
    if not namespace:
        raise ValidationError(f"Invalid service account '{value}': a namespace is required")
    return Subject(SubjectKind.SERVICE_ACCOUNT, name, namespace)


def parse_user(value: str) -> Subject:
    """
    Parse a user argument.

    'system:serviceaccount:<namespace>:<name>' is the user name the API
    server assigns to service accounts and becomes a ServiceAccount subject.
    """
    if not value:
        raise ValidationError("User name cannot be empty")

    if value.startswith(SERVICE_ACCOUNT_PREFIX):
        namespace, sep, name = value[len(SERVICE_ACCOUNT_PREFIX):].partition(':')
        if not sep or not namespace or not name or ':' in name:
            raise ValidationError(
                f"Invalid service account user '{value}': expected "
                f"{SERVICE_ACCOUNT_PREFIX}<namespace>:<name>")
        return Subject(SubjectKind.SERVICE_ACCOUNT, name, namespace)

    return Subject(SubjectKind.USER, value)


def parse_group(value: str) -> Subject:
    """Parse a group argument"""
    if not value:
        raise ValidationError("Group name cannot be empty")
    return Subject(SubjectKind.GROUP, value)


def build_subjects(users: Iterable[str] = (),
                   groups: Iterable[str] = (),
                   service_accounts: Iterable[str] = (),
                   default_namespace: Optional[str] = None) -> List[Subject]:
    """
    Turn command line arguments into typed subjects.

    Args:
        users: User names
        groups: Group names
        service_accounts: Service accounts as 'name' or 'namespace:name'
        default_namespace: Namespace for service accounts given without one

    Returns:
        Deduplicated subjects: users, then groups, then service accounts

    Raises:
        ValidationError: If any argument cannot be parsed
    """
    parsed = [parse_user(user) for user in users]
    parsed.extend(parse_group(group) for group in groups)
    parsed.extend(parse_service_account(sa, default_namespace) for sa in service_accounts)
    return merge_subjects([], parsed)


def format_subject(subject: Subject) -> str:
    """Render a subject the way it is accepted on the command line"""
    if subject.kind == SubjectKind.SERVICE_ACCOUNT:
        return f"{SERVICE_ACCOUNT_PREFIX}{subject.namespace}:{subject.name}"
    return subject.name
