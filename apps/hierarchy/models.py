"""
The Ideal Scene: one Main Goal broken down into a fixed five-level tree.

Models:
- MainGoal: the single active company goal (enforced by a unique constraint)
- Subgoal -> Plan -> Program -> Project -> Instruction: each level points
  at its immediate parent and carries its own department, optional
  assigned post and due date. Items are soft-deleted via is_active.

LEVEL_MODELS maps HierarchyLevel to the concrete model and is the one place
that turns a (level, id) pair into a typed row.
"""

from django.db import models
from django.db.models import Q


class HierarchyLevel(models.TextChoices):
    SUBGOAL = 'SUBGOAL', 'Subgoal'
    PLAN = 'PLAN', 'Plan'
    PROGRAM = 'PROGRAM', 'Program'
    PROJECT = 'PROJECT', 'Project'
    INSTRUCTION = 'INSTRUCTION', 'Instruction'


class MainGoal(models.Model):
    """
    Top of the hierarchy. Exactly one may be active at a time.
    """

    title = models.CharField(max_length=500)
    description = models.TextField(blank=True, default='')
    ideal_scene_content = models.TextField(
        blank=True,
        default='',
        help_text='Free-form description of the ideal scene'
    )
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='main_goals',
        help_text='Empty for a company-wide goal'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'main goal'
        verbose_name_plural = 'main goals'
        ordering = ['-is_active', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['is_active'],
                condition=Q(is_active=True),
                name='single_active_main_goal',
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def parent(self):
        return None


class HierarchyItem(models.Model):
    """
    Common fields of the five levels below the Main Goal.

    Subclasses set:
    - level: their HierarchyLevel
    - parent_field: name of the foreign key to the level above
    - children_field: reverse accessor of the level below (None for leaves)
    """

    level = None
    parent_field = None
    children_field = None

    title = models.CharField(max_length=500)
    description = models.TextField(blank=True, default='')
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.PROTECT,
        related_name='%(class)ss',
    )
    assigned_post = models.ForeignKey(
        'departments.Post',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_%(class)ss',
    )
    due_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['due_date', 'created_at']

    def __str__(self):
        return f"{self.get_level_display()}: {self.title}"

    @classmethod
    def get_level_display(cls):
        return HierarchyLevel(cls.level).label

    @property
    def parent(self):
        return getattr(self, self.parent_field)

    @property
    def parent_id(self):
        return getattr(self, f'{self.parent_field}_id')


class Subgoal(HierarchyItem):
    level = HierarchyLevel.SUBGOAL
    parent_field = 'main_goal'
    children_field = 'plans'

    main_goal = models.ForeignKey(MainGoal, on_delete=models.PROTECT, related_name='subgoals')

    class Meta(HierarchyItem.Meta):
        verbose_name = 'subgoal'
        verbose_name_plural = 'subgoals'
        indexes = [models.Index(fields=['main_goal', 'is_active'])]


class Plan(HierarchyItem):
    level = HierarchyLevel.PLAN
    parent_field = 'subgoal'
    children_field = 'programs'

    subgoal = models.ForeignKey(Subgoal, on_delete=models.PROTECT, related_name='plans')

    class Meta(HierarchyItem.Meta):
        verbose_name = 'plan'
        verbose_name_plural = 'plans'
        indexes = [models.Index(fields=['subgoal', 'is_active'])]


class Program(HierarchyItem):
    level = HierarchyLevel.PROGRAM
    parent_field = 'plan'
    children_field = 'projects'

    plan = models.ForeignKey(Plan, on_delete=models.PROTECT, related_name='programs')

    class Meta(HierarchyItem.Meta):
        verbose_name = 'program'
        verbose_name_plural = 'programs'
        indexes = [models.Index(fields=['plan', 'is_active'])]


class Project(HierarchyItem):
    level = HierarchyLevel.PROJECT
    parent_field = 'program'
    children_field = 'instructions'

    program = models.ForeignKey(Program, on_delete=models.PROTECT, related_name='projects')

    class Meta(HierarchyItem.Meta):
        verbose_name = 'project'
        verbose_name_plural = 'projects'
        indexes = [models.Index(fields=['program', 'is_active'])]


class Instruction(HierarchyItem):
    level = HierarchyLevel.INSTRUCTION
    parent_field = 'project'

    project = models.ForeignKey(Project, on_delete=models.PROTECT, related_name='instructions')

    class Meta(HierarchyItem.Meta):
        verbose_name = 'instruction'
        verbose_name_plural = 'instructions'
        indexes = [models.Index(fields=['project', 'is_active'])]


# Top-down order
LEVEL_MODELS = {
    HierarchyLevel.SUBGOAL: Subgoal,
    HierarchyLevel.PLAN: Plan,
    HierarchyLevel.PROGRAM: Program,
    HierarchyLevel.PROJECT: Project,
    HierarchyLevel.INSTRUCTION: Instruction,
}

# URL segment -> model, e.g. /api/ideal-scene/plans
URL_TYPES = {model._meta.verbose_name_plural: model for model in LEVEL_MODELS.values()}
