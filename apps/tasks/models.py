"""
Task models.

Models:
- Task: concrete work attached to one hierarchy item, owned by a Post,
  moving TODO -> DOING -> DONE, optionally recurring
- CompletionReport: evidence-backed report; a task can only be DONE with one
"""

from functools import reduce
from operator import or_

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.hierarchy.models import HierarchyLevel

# hierarchy_level -> name of the Task foreign key holding the parent item
PARENT_FIELDS = {level: level.lower() for level in HierarchyLevel.values}


def _single_parent_condition():
    """Exactly the foreign key matching hierarchy_level is set."""
    branches = []
    for level, field in PARENT_FIELDS.items():
        condition = Q(hierarchy_level=level, **{f'{field}__isnull': False})
        for other in PARENT_FIELDS.values():
            if other != field:
                condition &= Q(**{f'{other}__isnull': True})
        branches.append(condition)
    return reduce(or_, branches)


class Task(models.Model):
    """
    A unit of work.

    Status workflow: TODO <-> DOING -> DONE. DONE requires a CompletionReport;
    leaving DONE is allowed and clears completed_at.

    Recurring tasks form a chain: the first task is the template
    (parent_recurring_task is empty), every generated instance points back
    to it.
    """

    class Status(models.TextChoices):
        TODO = 'TODO', 'To do'
        DOING = 'DOING', 'Doing'
        DONE = 'DONE', 'Done'

    class RecurrenceType(models.TextChoices):
        NONE = 'NONE', 'None'
        DAILY = 'DAILY', 'Daily'
        WEEKLY = 'WEEKLY', 'Weekly'
        MONTHLY = 'MONTHLY', 'Monthly'
        YEARLY = 'YEARLY', 'Yearly'

    title = models.CharField(max_length=500)

    # Ownership
    responsible_post = models.ForeignKey(
        'departments.Post',
        on_delete=models.PROTECT,
        related_name='tasks',
        help_text='Position responsible for the task, not a person'
    )
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.PROTECT,
        related_name='tasks',
        help_text='Defaults to the responsible post\'s department'
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='created_tasks',
    )

    # Place in the Ideal Scene; only the field named by hierarchy_level is set
    hierarchy_level = models.CharField(
        max_length=15,
        choices=HierarchyLevel.choices,
        db_index=True,
    )
    subgoal = models.ForeignKey(
        'hierarchy.Subgoal', on_delete=models.PROTECT, null=True, blank=True, related_name='tasks'
    )
    plan = models.ForeignKey(
        'hierarchy.Plan', on_delete=models.PROTECT, null=True, blank=True, related_name='tasks'
    )
    program = models.ForeignKey(
        'hierarchy.Program', on_delete=models.PROTECT, null=True, blank=True, related_name='tasks'
    )
    project = models.ForeignKey(
        'hierarchy.Project', on_delete=models.PROTECT, null=True, blank=True, related_name='tasks'
    )
    instruction = models.ForeignKey(
        'hierarchy.Instruction', on_delete=models.PROTECT, null=True, blank=True, related_name='tasks'
    )

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.TODO,
        db_index=True,
    )
    due_date = models.DateTimeField(null=True, blank=True, db_index=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    last_updated_at = models.DateTimeField(
        default=timezone.now,
        help_text='Refreshed on every status change; drives stalled detection'
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    # Recurrence
    is_recurring = models.BooleanField(default=False)
    recurrence_type = models.CharField(
        max_length=10,
        choices=RecurrenceType.choices,
        default=RecurrenceType.NONE,
    )
    recurrence_interval = models.PositiveIntegerField(default=1)
    recurrence_day_of_week = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text='0 = Sunday ... 6 = Saturday'
    )
    recurrence_day_of_month = models.PositiveSmallIntegerField(null=True, blank=True)
    recurrence_end_date = models.DateTimeField(null=True, blank=True)
    parent_recurring_task = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recurring_instances',
        help_text='Template of the recurring chain'
    )
    occurrence_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', 'responsible_post']),
            models.Index(fields=['department', 'status']),
            models.Index(fields=['due_date', 'status']),
            models.Index(fields=['is_recurring', 'parent_recurring_task']),
        ]
        constraints = [
            models.CheckConstraint(
                check=_single_parent_condition(),
                name='task_single_hierarchy_parent',
            ),
        ]

    def __str__(self):
        return f"#{self.pk}: {self.title}"

    @property
    def parent_field(self):
        return PARENT_FIELDS[self.hierarchy_level]

    @property
    def parent_item(self):
        return getattr(self, self.parent_field)

    @property
    def parent_item_id(self):
        return getattr(self, f'{self.parent_field}_id')

    def set_parent_item(self, item):
        """Point the task at item and clear the other level references."""
        self.hierarchy_level = item.level
        for field in PARENT_FIELDS.values():
            setattr(self, field, None)
        setattr(self, PARENT_FIELDS[item.level], item)

    @property
    def is_done(self):
        return self.status == self.Status.DONE

    @property
    def is_overdue(self):
        if not self.due_date or self.is_done:
            return False
        return self.due_date < timezone.now()

    @property
    def has_completion_report(self):
        try:
            return self.completion_report is not None
        except CompletionReport.DoesNotExist:
            return False


class CompletionReport(models.Model):
    """
    Evidence that a task was done.

    One per task. URL evidence needs evidence_url; FILE, IMAGE and DOCUMENT
    evidence need evidence_file_id. RECEIPT and SIGNED_NOTE may carry either.
    """

    class EvidenceType(models.TextChoices):
        FILE = 'FILE', 'File'
        IMAGE = 'IMAGE', 'Image'
        URL = 'URL', 'URL'
        DOCUMENT = 'DOCUMENT', 'Document'
        RECEIPT = 'RECEIPT', 'Receipt'
        SIGNED_NOTE = 'SIGNED_NOTE', 'Signed note'

    task = models.OneToOneField(
        Task,
        on_delete=models.CASCADE,
        related_name='completion_report',
    )
    what_was_done = models.TextField()
    when_done = models.DateTimeField(default=timezone.now)
    where_context = models.CharField(max_length=500, help_text='Where the work was done or can be checked')
    evidence_type = models.CharField(max_length=15, choices=EvidenceType.choices)
    evidence_url = models.CharField(max_length=2000, blank=True, default='')
    evidence_file_id = models.CharField(
        max_length=255,
        blank=True,
        default='',
        help_text='Identifier of an uploaded file in external storage'
    )
    evidence_file_name = models.CharField(max_length=255, blank=True, default='')
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='completion_reports',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'completion report'
        verbose_name_plural = 'completion reports'
        ordering = ['-created_at']

    def __str__(self):
        return f"Report for task #{self.task_id}"

