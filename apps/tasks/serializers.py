"""
Task serializers.

hierarchyPath and mainGoalTitle are resolved through a HierarchyPathBuilder
passed in the serializer context as 'path_builder', so a list of tasks
sharing ancestors resolves each ancestor once.
"""

from rest_framework import serializers

from apps.activity_log.serializers import TaskActivitySerializer
from apps.departments.serializers import PostReferenceSerializer
from apps.hierarchy.models import MainGoal
from apps.hierarchy.services import HierarchyPathBuilder
from .models import Task, CompletionReport


class CompletionReportSerializer(serializers.ModelSerializer):
    taskId = serializers.IntegerField(source='task_id', read_only=True)
    whatWasDone = serializers.CharField(source='what_was_done', read_only=True)
    whenDone = serializers.DateTimeField(source='when_done', read_only=True)
    whereContext = serializers.CharField(source='where_context', read_only=True)
    evidenceType = serializers.CharField(source='evidence_type', read_only=True)
    evidenceUrl = serializers.CharField(source='evidence_url', read_only=True)
    evidenceFileId = serializers.CharField(source='evidence_file_id', read_only=True)
    evidenceFileName = serializers.CharField(source='evidence_file_name', read_only=True)
    submittedById = serializers.IntegerField(source='submitted_by_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = CompletionReport
        fields = [
            'id', 'taskId', 'whatWasDone', 'whenDone', 'whereContext',
            'evidenceType', 'evidenceUrl', 'evidenceFileId', 'evidenceFileName',
            'submittedById', 'createdAt',
        ]


class TaskSerializer(serializers.ModelSerializer):
    hierarchyLevel = serializers.CharField(source='hierarchy_level', read_only=True)
    parentItemId = serializers.IntegerField(source='parent_item_id', read_only=True)
    responsiblePostId = serializers.IntegerField(source='responsible_post_id', read_only=True)
    responsiblePost = PostReferenceSerializer(source='responsible_post', read_only=True)
    departmentId = serializers.IntegerField(source='department_id', read_only=True)
    department = serializers.SerializerMethodField()
    creatorId = serializers.IntegerField(source='creator_id', read_only=True)
    dueDate = serializers.DateTimeField(source='due_date', read_only=True)
    lastUpdatedAt = serializers.DateTimeField(source='last_updated_at', read_only=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    isOverdue = serializers.BooleanField(source='is_overdue', read_only=True)
    isRecurring = serializers.BooleanField(source='is_recurring', read_only=True)
    recurrenceType = serializers.CharField(source='recurrence_type', read_only=True)
    recurrenceInterval = serializers.IntegerField(source='recurrence_interval', read_only=True)
    recurrenceDayOfWeek = serializers.IntegerField(source='recurrence_day_of_week', read_only=True)
    recurrenceDayOfMonth = serializers.IntegerField(source='recurrence_day_of_month', read_only=True)
    recurrenceEndDate = serializers.DateTimeField(source='recurrence_end_date', read_only=True)
    parentRecurringTaskId = serializers.IntegerField(source='parent_recurring_task_id', read_only=True)
    occurrenceDate = serializers.DateTimeField(source='occurrence_date', read_only=True)
    completionReport = serializers.SerializerMethodField()
    hierarchyPath = serializers.SerializerMethodField()
    mainGoalTitle = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'status', 'hierarchyLevel', 'parentItemId',
            'responsiblePostId', 'responsiblePost', 'departmentId', 'department',
            'creatorId', 'dueDate', 'lastUpdatedAt', 'completedAt', 'createdAt',
            'isOverdue', 'isRecurring', 'recurrenceType', 'recurrenceInterval',
            'recurrenceDayOfWeek', 'recurrenceDayOfMonth', 'recurrenceEndDate',
            'parentRecurringTaskId', 'occurrenceDate',
            'completionReport', 'hierarchyPath', 'mainGoalTitle',
        ]

    @property
    def path_builder(self):
        if 'path_builder' not in self.context:
            self.context['path_builder'] = HierarchyPathBuilder()
        return self.context['path_builder']

    def get_department(self, obj):
        return {'id': obj.department_id, 'name': obj.department.name}

    def get_completionReport(self, obj):
        if not obj.has_completion_report:
            return None
        return CompletionReportSerializer(obj.completion_report).data

    def get_hierarchyPath(self, obj):
        return self.path_builder.path(obj.parent_item)

    def get_mainGoalTitle(self, obj):
        goal = self.path_builder.main_goal(obj.parent_item)
        return goal.title if goal else None


class TaskDetailSerializer(TaskSerializer):
    """Single task: adds the per-level hierarchy context and recent activity."""

    RECENT_ACTIVITY = 20

    hierarchyContext = serializers.SerializerMethodField()
    activities = serializers.SerializerMethodField()

    class Meta(TaskSerializer.Meta):
        fields = TaskSerializer.Meta.fields + ['hierarchyContext', 'activities']

    def get_hierarchyContext(self, obj):
        context = {
            entry['level'].lower(): entry
            for entry in self.path_builder.path(obj.parent_item)
        }
        goal = self.path_builder.main_goal(obj.parent_item)
        context['mainGoal'] = {'id': goal.pk, 'title': goal.title} if isinstance(goal, MainGoal) else None
        return context

    def get_activities(self, obj):
        entries = obj.activities.select_related('user')[:self.RECENT_ACTIVITY]
        return TaskActivitySerializer(entries, many=True).data
