"""
Service layer for the executive dashboard.

Definitions:
- open: status TODO or DOING
- stalled: status DOING and last_updated_at older than the stalled threshold
- overdue: not DONE and due_date in the past

Services:
- get_summary: company-wide counters
- get_grid: per active user, counting tasks of the posts they hold
- classify_flow_status: normal / overload / stalled
- get_user_tasks: tasks of the posts a user holds
- get_department_health: per active department
"""

from collections import Counter
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models import Count, Q, Prefetch
from django.utils import timezone

from apps.departments.models import Department, Post
from apps.hierarchy.models import MainGoal, Subgoal, LEVEL_MODELS
from apps.system_settings.services import get_stalled_threshold_days, get_overload_threshold
from apps.tasks.models import Task
from apps.tasks.services import task_queryset

User = get_user_model()

OPEN_STATUSES = (Task.Status.TODO, Task.Status.DOING)


class FlowStatus:
    NORMAL = 'normal'
    OVERLOAD = 'overload'
    STALLED = 'stalled'


def stalled_cutoff(now=None):
    now = now or timezone.now()
    return now - timedelta(days=get_stalled_threshold_days())


def _stalled_q(cutoff, prefix=''):
    return Q(**{f'{prefix}status': Task.Status.DOING, f'{prefix}last_updated_at__lt': cutoff})


def _overdue_q(now, prefix=''):
    return Q(**{f'{prefix}status__in': OPEN_STATUSES, f'{prefix}due_date__lt': now})


def classify_flow_status(todo_count, doing_count, overdue_count, stalled_count, overload_threshold):
    """
    Stalled work wins over overload: any overdue or stalled task marks the
    person as stalled; otherwise more than overload_threshold open tasks is
    overload.
    """
    if overdue_count > 0 or stalled_count > 0:
        return FlowStatus.STALLED
    if todo_count + doing_count > overload_threshold:
        return FlowStatus.OVERLOAD
    return FlowStatus.NORMAL


def get_summary():
    """
    Returns:
        dict with totalActive, stalledTasks, overdueTasks, completedCycles
        and avgTasksPerPost (open tasks per post that has any, one decimal)
    """
    now = timezone.now()
    counts = Task.objects.aggregate(
        total_active=Count('id', filter=Q(status__in=OPEN_STATUSES)),
        stalled=Count('id', filter=_stalled_q(stalled_cutoff(now))),
        overdue=Count('id', filter=_overdue_q(now)),
        completed=Count('id', filter=Q(status=Task.Status.DONE)),
    )

    per_post = (
        Task.objects.filter(status__in=OPEN_STATUSES)
        .values('responsible_post')
        .annotate(open_count=Count('id'))
    )
    loads = [row['open_count'] for row in per_post]
    average = round(sum(loads) / len(loads), 1) if loads else 0

    return {
        'totalActive': counts['total_active'],
        'stalledTasks': counts['stalled'],
        'overdueTasks': counts['overdue'],
        'completedCycles': counts['completed'],
        'avgTasksPerPost': average,
    }


def _hierarchy_item_counts():
    """Active hierarchy items per holder of their active assigned post."""
    totals = Counter()
    for model in LEVEL_MODELS.values():
        rows = (
            model.objects.filter(
                is_active=True, assigned_post__is_active=True, assigned_post__user__isnull=False
            )
            .values('assigned_post__user')
            .annotate(item_count=Count('id'))
        )
        for row in rows:
            totals[row['assigned_post__user']] += row['item_count']
    return totals


def _held_task_count(condition):
    return Count('posts__tasks', filter=condition & Q(posts__is_active=True), distinct=True)


def get_grid():
    """
    One row per active user with task counts across the posts they hold.

    hierarchyItemCount (active hierarchy items owned through those posts) is
    reported on its own and does not feed todoCount or flowStatus.
    """
    now = timezone.now()
    cutoff = stalled_cutoff(now)
    overload_threshold = get_overload_threshold()

    users = (
        User.objects.filter(is_active=True)
        .annotate(
            todo_count=_held_task_count(Q(posts__tasks__status=Task.Status.TODO)),
            doing_count=_held_task_count(Q(posts__tasks__status=Task.Status.DOING)),
            done_count=_held_task_count(Q(posts__tasks__status=Task.Status.DONE)),
            overdue_count=_held_task_count(_overdue_q(now, 'posts__tasks__')),
            stalled_count=_held_task_count(_stalled_q(cutoff, 'posts__tasks__')),
        )
        .prefetch_related(Prefetch('posts', queryset=Post.objects.filter(is_active=True)))
        .order_by('name')
    )
    item_counts = _hierarchy_item_counts()

    grid = []
    for user in users:
        grid.append({
            'userId': user.pk,
            'userName': user.name,
            'userRole': user.role,
            'userAvatarUrl': user.avatar_url or None,
            'postNames': [post.name for post in user.posts.all()],
            'todoCount': user.todo_count,
            'doingCount': user.doing_count,
            'doneCount': user.done_count,
            'overdueCount': user.overdue_count,
            'stalledCount': user.stalled_count,
            'hierarchyItemCount': item_counts.get(user.pk, 0),
            'flowStatus': classify_flow_status(
                user.todo_count, user.doing_count,
                user.overdue_count, user.stalled_count,
                overload_threshold,
            ),
        })
    return grid


def get_user_tasks(user_id, status=None):
    """
    Tasks whose responsible post is active and held by the user, newest first.

    Raises:
        ValidationError: On an unknown status filter
    """
    tasks = task_queryset().filter(responsible_post__user_id=user_id, responsible_post__is_active=True)
    if status:
        if status not in Task.Status.values:
            raise ValidationError('Invalid status. Must be TODO, DOING, or DONE.')
        tasks = tasks.filter(status=status)
    return tasks.order_by('-created_at', '-id')


def get_department_health():
    """
    Per active department: todo, doing, done and stalled counts, and whether
    the department takes part in the Ideal Scene (an active Main Goal or
    subgoal assigned to it).
    """
    cutoff = stalled_cutoff()
    departments = (
        Department.objects.filter(is_active=True, deleted_at__isnull=True)
        .annotate(
            todo_count=Count('tasks', filter=Q(tasks__status=Task.Status.TODO), distinct=True),
            doing_count=Count('tasks', filter=Q(tasks__status=Task.Status.DOING), distinct=True),
            done_count=Count('tasks', filter=Q(tasks__status=Task.Status.DONE), distinct=True),
            stalled_count=Count('tasks', filter=_stalled_q(cutoff, 'tasks__'), distinct=True),
        )
    )

    in_scene = set(
        MainGoal.objects.filter(is_active=True, department__isnull=False)
        .values_list('department_id', flat=True)
    )
    in_scene.update(Subgoal.objects.filter(is_active=True).values_list('department_id', flat=True))

    return [
        {
            'departmentId': department.pk,
            'departmentName': department.name,
            'todoCount': department.todo_count,
            'doingCount': department.doing_count,
            'doneCount': department.done_count,
            'stalledCount': department.stalled_count,
            'hasIdealScene': department.pk in in_scene,
        }
        for department in departments
    ]
