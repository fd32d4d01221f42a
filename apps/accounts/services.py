"""
Service layer for accounts app.

Services:
- create_user: Add a team member directly (no invitation)
- rename_user: Change a user's display name
- deactivate_user: Soft delete, vacate held posts, drop sessions
- invalidate_user_sessions: Log a user out everywhere
- create_invitation / validate_invitation / accept_invitation / delete_invitation
"""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.sessions.models import Session
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils import timezone

from apps.core.parsing import clean_text
from .models import Invitation

logger = logging.getLogger(__name__)

User = get_user_model()


def _clean_email(email):
    email = clean_text(email).lower()
    if not email:
        raise ValidationError('Email is required.')
    validate_email(email)
    return email


def _clean_role(role):
    role = role or User.Role.USER
    if role not in User.Role.values:
        raise ValidationError(f'Invalid role: {role}')
    return role


def create_user(email, name=None, role=None, password=None):
    """
    Create an active user directly.

    Raises:
        ValidationError: If the email is invalid or already taken
    """
    email = _clean_email(email)
    role = _clean_role(role)

    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError('A user with that email already exists.')

    if password is not None and not isinstance(password, str):
        raise ValidationError('Password must be a string.')
    if password:
        validate_password(password)

    user = User.objects.create_user(
        email=email,
        password=password,
        name=clean_text(name) or email.split('@')[0],
        role=role,
    )
    logger.info(f'User created: {user.email} ({user.role})')
    return user


def rename_user(user, name):
    name = clean_text(name)
    if not name:
        raise ValidationError('Name is required.')
    if len(name) > 100:
        raise ValidationError('Name cannot exceed 100 characters.')

    user.name = name
    user.save(update_fields=['name', 'updated_at'])
    return user


def invalidate_user_sessions(user):
    """
    Invalidate all sessions for a user.

    Returns:
        int: Number of sessions invalidated
    """
    count = 0
    for session in Session.objects.filter(expire_date__gte=timezone.now()):
        if session.get_decoded().get('_auth_user_id') == str(user.pk):
            session.delete()
            count += 1
    return count


def deactivate_user(user):
    """
    Deactivate a user account.

    Posts held by the user become vacant, so their work stays visible on
    the post instead of disappearing with the person.

    Returns:
        int: Number of sessions invalidated
    """
    from apps.departments.models import Post

    with transaction.atomic():
        user.is_active = False
        user.save(update_fields=['is_active', 'updated_at'])
        vacated = Post.objects.filter(user=user).update(user=None)

    logger.info(f'User deactivated: {user.email}, {vacated} post(s) vacated')
    return invalidate_user_sessions(user)


# =============================================================================
# Invitations
# =============================================================================

def create_invitation(email, invited_by=None, role=None, name=None):
    """
    Invite a team member by email.

    A pending User is created (or reused from an earlier, expired invitation)
    so the invitee can already be assigned to posts.

    Returns:
        tuple: (Invitation, pending User)

    Raises:
        ValidationError: If an active user or an open invitation already
            exists for the email
    """
    email = _clean_email(email)
    role = _clean_role(role)

    if User.objects.filter(email__iexact=email, is_pending=False).exists():
        raise ValidationError('User with this email already exists.')

    if Invitation.objects.filter(email__iexact=email, accepted_at__isnull=True).exists():
        raise ValidationError('Invitation already sent to this email.')

    with transaction.atomic():
        pending_user = User.objects.filter(email__iexact=email, is_pending=True).first()
        if pending_user is None:
            pending_user = User.objects.create_user(
                email=email,
                name=clean_text(name) or email.split('@')[0],
                role=role,
                is_pending=True,
            )

        invitation = Invitation.objects.create(
            email=email,
            role=role,
            invited_by=invited_by,
        )

    # Email delivery is not wired up; the invite URL is shared manually
    logger.info(f'Invitation created for {email} by {invited_by or "system"}')
    return invitation, pending_user


def validate_invitation(invitation):
    """
    Raises:
        ValidationError: If the invitation was accepted or has expired
    """
    if invitation.is_accepted:
        raise ValidationError('Invitation already accepted.')
    if invitation.is_expired:
        raise ValidationError('Invitation expired.')
    return invitation


def accept_invitation(invitation, name=None, password=None):
    """
    Activate the pending user behind an invitation.

    Returns:
        The activated User
    """
    validate_invitation(invitation)

    with transaction.atomic():
        user = User.objects.filter(email__iexact=invitation.email).first()
        if user is None:
            user = User.objects.create_user(email=invitation.email, role=invitation.role)

        if password is not None and not isinstance(password, str):
            raise ValidationError('Password must be a string.')
        if password:
            validate_password(password, user=user)
            user.set_password(password)

        name = clean_text(name)
        if name:
            user.name = name
        user.is_pending = False
        user.is_active = True
        user.role = invitation.role
        user.save()

        invitation.accepted_at = timezone.now()
        invitation.save(update_fields=['accepted_at'])

    logger.info(f'Invitation accepted by {user.email}')
    return user


def delete_invitation(invitation):
    logger.info(f'Invitation for {invitation.email} deleted')
    invitation.delete()
