"""
Activity log model for task audit trails.

Logs task changes:
- Task creation
- Field updates (with old/new values)
- Status changes
- Completion report submission
- Recurring instance generation (no user: done by the scheduler)
"""

from django.db import models
from django.conf import settings


class TaskActivity(models.Model):
    """
    Audit log for task activities.

    Access: read-only, through the task activity endpoint and the admin
    """

    class ActionType(models.TextChoices):
        CREATED = 'created', 'Created'
        UPDATED = 'updated', 'Updated'
        STATUS_CHANGED = 'status_changed', 'Status Changed'
        REPORT_SUBMITTED = 'report_submitted', 'Report Submitted'
        RECURRING_GENERATED = 'recurring_generated', 'Recurring Instance Generated'

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='activities',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='task_activities',
        help_text='User who performed the action; empty for scheduled jobs'
    )
    action_type = models.CharField(
        max_length=20,
        choices=ActionType.choices,
        db_index=True,
    )
    description = models.TextField(
        help_text='Human-readable description of the change'
    )

    # For field-level changes
    field_name = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text='Name of the field that was changed'
    )
    old_value = models.TextField(
        null=True,
        blank=True,
        help_text='Previous value (for field changes)'
    )
    new_value = models.TextField(
        null=True,
        blank=True,
        help_text='New value (for field changes)'
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'task activity'
        verbose_name_plural = 'task activities'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['task', '-created_at']),
            models.Index(fields=['user', '-created_at']),
            models.Index(fields=['action_type', '-created_at']),
        ]

    def __str__(self):
        actor = self.user or 'system'
        return f"Task #{self.task_id} - {self.get_action_type_display()} by {actor}"


def log_task_activity(task, user, action_type, description,
                      field_name=None, old_value=None, new_value=None):
    """
    Create an activity log entry.

    Args:
        task: Task instance
        user: User who performed the action, or None for system actions
        action_type: One of TaskActivity.ActionType choices
        description: Human-readable description
        field_name: Optional field name for field changes
        old_value: Optional previous value
        new_value: Optional new value

    Returns:
        Created TaskActivity instance
    """
    return TaskActivity.objects.create(
        task=task,
        user=user,
        action_type=action_type,
        description=description,
        field_name=field_name,
        old_value=old_value,
        new_value=new_value,
    )
