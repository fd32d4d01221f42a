"""
Operating policies attached to the company, departments or posts.

Models:
- Policy: title, content and scope; soft-deleted via is_active
- PolicyPost / PolicyDepartment: which posts / departments a policy covers
"""

from django.conf import settings
from django.db import models


class Policy(models.Model):

    class Scope(models.TextChoices):
        COMPANY = 'COMPANY', 'Company'
        DEPARTMENT = 'DEPARTMENT', 'Department'
        POST = 'POST', 'Post'

    title = models.CharField(max_length=500)
    content = models.TextField()
    scope = models.CharField(
        max_length=15,
        choices=Scope.choices,
        default=Scope.POST,
        db_index=True,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='policies',
    )
    posts = models.ManyToManyField(
        'departments.Post',
        through='PolicyPost',
        related_name='policies',
        blank=True,
    )
    departments = models.ManyToManyField(
        'departments.Department',
        through='PolicyDepartment',
        related_name='policies',
        blank=True,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'policy'
        verbose_name_plural = 'policies'
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class PolicyPost(models.Model):
    policy = models.ForeignKey(Policy, on_delete=models.CASCADE, related_name='policy_posts')
    post = models.ForeignKey('departments.Post', on_delete=models.CASCADE, related_name='policy_posts')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['policy', 'post'], name='unique_policy_post'),
        ]


class PolicyDepartment(models.Model):
    policy = models.ForeignKey(Policy, on_delete=models.CASCADE, related_name='policy_departments')
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, related_name='policy_departments'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['policy', 'department'], name='unique_policy_department'),
        ]
