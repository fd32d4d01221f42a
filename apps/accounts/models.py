"""
Custom User model and team invitations for ideal_scene.

CRITICAL: This file must be created and AUTH_USER_MODEL set before running
any migrations. Changing the User model after migrations is very complex.
"""

import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.conf import settings
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """
    Custom user manager where email is the unique identifier
    for authentication instead of username.
    """

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular user with the given email and password."""
        if not email:
            raise ValueError('The Email field must be set')

        email = self.normalize_email(email).lower()
        extra_fields.setdefault('name', email.split('@')[0])
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and save a SuperUser with the given email and password."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.CEO)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    A person in the company.

    Work is never assigned to a User directly: users hold Posts, and Posts
    carry tasks and hierarchy items.

    Roles:
    - CEO: owns the Main Goal, full management access
    - Executive: management access (departments, posts, ideal scene, dashboard)
    - User: works on tasks of the posts they hold
    """

    class Role(models.TextChoices):
        CEO = 'CEO', 'CEO'
        EXECUTIVE = 'EXECUTIVE', 'Executive'
        USER = 'USER', 'User'

    # Remove username field, use email instead
    username = None
    first_name = None
    last_name = None
    email = models.EmailField(
        'email address',
        unique=True,
        error_messages={
            'unique': 'A user with that email already exists.',
        },
    )
    name = models.CharField(max_length=100)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        db_index=True,
    )
    avatar_url = models.URLField(max_length=500, blank=True, default='')

    # Invited but has not accepted yet. Pending users can already hold posts.
    is_pending = models.BooleanField(default=False)

    # Directory (OAuth) identity, stored only
    microsoft_id = models.CharField(max_length=255, null=True, blank=True, unique=True)
    access_token = models.TextField(blank=True, default='')
    refresh_token = models.TextField(blank=True, default='')
    token_expires_at = models.DateTimeField(null=True, blank=True)

    # Security fields
    failed_login_attempts = models.PositiveSmallIntegerField(default=0)
    locked_until = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        verbose_name = 'user'
        verbose_name_plural = 'users'
        ordering = ['name']
        indexes = [
            models.Index(fields=['role']),
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return f"{self.name} ({self.email})"

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(' ')[0] if self.name else self.email.split('@')[0]

    @property
    def is_executive(self):
        """CEO and executives manage the organization."""
        return self.role in (self.Role.CEO, self.Role.EXECUTIVE)

    # ==========================================================================
    # Account Status Methods
    # ==========================================================================

    def is_locked(self):
        """Check if the account is currently locked."""
        if self.locked_until and self.locked_until > timezone.now():
            return True
        return False

    def lock_account(self, duration_seconds):
        """Lock the account for the specified duration."""
        self.locked_until = timezone.now() + timezone.timedelta(seconds=duration_seconds)
        self.save(update_fields=['locked_until'])

    def unlock_account(self):
        """Unlock the account and reset failed attempts."""
        self.locked_until = None
        self.failed_login_attempts = 0
        self.save(update_fields=['locked_until', 'failed_login_attempts'])

    def record_failed_login(self):
        """Increment failed login counter."""
        self.failed_login_attempts += 1
        self.save(update_fields=['failed_login_attempts'])

    def reset_failed_logins(self):
        """Reset failed login counter after successful login."""
        if self.failed_login_attempts > 0 or self.locked_until:
            self.failed_login_attempts = 0
            self.locked_until = None
            self.save(update_fields=['failed_login_attempts', 'locked_until'])


def default_invitation_expiry():
    return timezone.now() + timezone.timedelta(days=settings.INVITATION_EXPIRY_DAYS)


class Invitation(models.Model):
    """
    Email invitation to join the team.

    Creating an invitation also creates a pending User, so the invitee can be
    given posts before they accept.
    """

    email = models.EmailField()
    role = models.CharField(
        max_length=20,
        choices=User.Role.choices,
        default=User.Role.USER,
    )
    token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_invitations',
    )
    expires_at = models.DateTimeField(default=default_invitation_expiry)
    accepted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'invitation'
        verbose_name_plural = 'invitations'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['email']),
        ]

    def __str__(self):
        return f"Invitation for {self.email}"

    @property
    def is_accepted(self):
        return self.accepted_at is not None

    @property
    def is_expired(self):
        return self.expires_at < timezone.now()

    @property
    def invite_url(self):
        return f"{settings.INVITE_URL_PREFIX}{self.token}"
