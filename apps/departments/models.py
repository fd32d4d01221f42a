"""
Organizational structure: departments and the posts inside them.

Departments are flat (no nesting) and soft-deleted.
A Post is a position; work is assigned to posts, and a post is held by at
most one user at a time (no holder means the post is vacant).
"""

from django.db import models
from django.conf import settings


class Department(models.Model):
    """
    Represents an organizational department.

    Notes:
    - Ordered by sort_order on the org chart
    - Archived departments keep their rows (deleted_at + is_active=False)
    """

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    sort_order = models.IntegerField(default=0)
    head = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='headed_departments',
        help_text='Department head'
    )
    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'department'
        verbose_name_plural = 'departments'
        ordering = ['sort_order', 'name']
        indexes = [
            models.Index(fields=['is_active', 'sort_order']),
        ]

    def __str__(self):
        return self.name

    @property
    def is_archived(self):
        return not self.is_active or self.deleted_at is not None


class Post(models.Model):
    """A named position within a department."""

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='posts',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='posts',
        help_text='Current holder; empty means the post is vacant'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'post'
        verbose_name_plural = 'posts'
        ordering = ['department__sort_order', 'name']
        indexes = [
            models.Index(fields=['department', 'is_active']),
            models.Index(fields=['user']),
        ]

    def __str__(self):
        return f"{self.name} ({self.department})"

    @property
    def is_vacant(self):
        return self.user_id is None
