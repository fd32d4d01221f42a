from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.utils import timezone

from apps.activity_log.models import TaskActivity
from apps.departments.services import deactivate_post
from apps.hierarchy.services import deactivate_item
from apps.tasks.jobs import generate_recurring_tasks
from apps.tasks.models import Task
from apps.tasks.recurring import (
    calculate_next_occurrence,
    generate_next_instance,
    generate_upcoming_recurring_tasks,
)


def _at(year, month, day):
    return datetime(year, month, day, 9, 0, tzinfo=dt_timezone.utc)


@pytest.mark.parametrize('current, recurrence_type, kwargs, expected', [
    (_at(2024, 1, 31), 'DAILY', {}, _at(2024, 2, 1)),
    (_at(2024, 1, 31), 'DAILY', {'interval': 3}, _at(2024, 2, 3)),
    # 2024-01-03 is a Wednesday
    (_at(2024, 1, 3), 'WEEKLY', {}, _at(2024, 1, 10)),
    (_at(2024, 1, 3), 'WEEKLY', {'day_of_week': 1}, _at(2024, 1, 15)),
    (_at(2024, 1, 3), 'WEEKLY', {'day_of_week': 3}, _at(2024, 1, 10)),
    (_at(2024, 1, 3), 'WEEKLY', {'day_of_week': 0, 'interval': 2}, _at(2024, 1, 21)),
    (_at(2024, 1, 31), 'MONTHLY', {}, _at(2024, 2, 29)),
    (_at(2023, 1, 31), 'MONTHLY', {}, _at(2023, 2, 28)),
    (_at(2024, 1, 31), 'MONTHLY', {'day_of_month': 15}, _at(2024, 2, 15)),
    (_at(2024, 11, 30), 'MONTHLY', {'interval': 2}, _at(2025, 1, 30)),
    (_at(2024, 12, 15), 'MONTHLY', {}, _at(2025, 1, 15)),
    (_at(2024, 2, 29), 'YEARLY', {}, _at(2025, 2, 28)),
    (_at(2024, 2, 29), 'YEARLY', {'interval': 4}, _at(2028, 2, 29)),
    (_at(2024, 5, 1), 'NONE', {}, _at(2024, 5, 1)),
])
def test_calculate_next_occurrence(current, recurrence_type, kwargs, expected):
    assert calculate_next_occurrence(current, recurrence_type, **kwargs) == expected


def test_zero_interval_counts_as_one():
    assert calculate_next_occurrence(_at(2024, 1, 1), 'DAILY', interval=0) == _at(2024, 1, 2)


@pytest.fixture
def daily_task(make_task):
    return make_task(
        'Check the loading dock',
        due_date=timezone.now() + timedelta(hours=2),
        is_recurring=True,
        recurrence_type='daily',
    )


@pytest.mark.django_db
class TestGenerateNextInstance:

    def test_copies_the_template(self, daily_task):
        instance = generate_next_instance(daily_task)

        assert instance.status == Task.Status.TODO
        assert instance.parent_recurring_task == daily_task
        assert instance.due_date == daily_task.due_date + timedelta(days=1)
        assert instance.occurrence_date == instance.due_date
        assert instance.parent_item == daily_task.parent_item
        assert instance.responsible_post_id == daily_task.responsible_post_id
        assert instance.completed_at is None

        entry = instance.activities.get()
        assert entry.action_type == TaskActivity.ActionType.RECURRING_GENERATED
        assert entry.user is None

    def test_instances_point_at_the_template(self, daily_task):
        first = generate_next_instance(daily_task)
        second = generate_next_instance(first)

        assert second.parent_recurring_task_id == daily_task.pk
        assert second.due_date == daily_task.due_date + timedelta(days=2)

    def test_same_occurrence_is_not_generated_twice(self, daily_task):
        generate_next_instance(daily_task)

        assert generate_next_instance(daily_task) is None
        assert daily_task.recurring_instances.count() == 1

    def test_deactivated_instruction_ends_the_chain(self, member_client, daily_task, scene, report_payload):
        deactivate_item(scene.instruction)

        response = member_client.post(f'/api/tasks/{daily_task.pk}/complete', report_payload, format='json')

        assert response.status_code == 201
        daily_task.refresh_from_db()
        assert daily_task.status == Task.Status.DONE
        assert not daily_task.recurring_instances.exists()

    def test_deactivated_post_ends_the_chain(self, daily_task, post):
        deactivate_post(post)

        assert generate_next_instance(daily_task) is None
        assert not daily_task.recurring_instances.exists()

    def test_non_recurring_task(self, task):
        assert generate_next_instance(task) is None

    def test_ended_recurrence(self, daily_task):
        daily_task.recurrence_end_date = timezone.now() - timedelta(minutes=1)

        assert generate_next_instance(daily_task) is None

    def test_next_occurrence_after_end_date(self, daily_task):
        daily_task.recurrence_end_date = daily_task.due_date + timedelta(hours=1)

        assert generate_next_instance(daily_task) is None

    def test_until_bound(self, daily_task):
        assert generate_next_instance(daily_task, until=daily_task.due_date) is None


@pytest.mark.django_db
class TestCompletionRollsForward:

    def test_completing_a_recurring_task_creates_the_next(self, member_client, daily_task, report_payload):
        response = member_client.post(f'/api/tasks/{daily_task.pk}/complete', report_payload, format='json')

        assert response.status_code == 201
        instance = daily_task.recurring_instances.get()
        assert instance.status == Task.Status.TODO
        assert instance.due_date == daily_task.due_date + timedelta(days=1)

    def test_reopening_and_completing_again_does_not_duplicate(self, member_client, daily_task, report_payload):
        member_client.post(f'/api/tasks/{daily_task.pk}/complete', report_payload, format='json')
        status_url = f'/api/tasks/{daily_task.pk}/status'
        member_client.put(status_url, {'status': 'DOING'}, format='json')
        member_client.put(status_url, {'status': 'DONE'}, format='json')

        assert daily_task.recurring_instances.count() == 1


@pytest.mark.django_db
class TestCreateRecurring:

    def _post(self, client, scene, post, **fields):
        payload = {
            'title': 'Weekly stock count',
            'responsiblePostId': post.pk,
            'hierarchyLevel': 'INSTRUCTION',
            'parentItemId': scene.instruction.pk,
            'isRecurring': True,
            'recurrenceType': 'WEEKLY',
            'dueDate': '2031-01-06T08:00:00Z',
        }
        payload.update(fields)
        return client.post('/api/tasks', payload, format='json')

    def test_create(self, ceo_client, scene, post):
        response = self._post(ceo_client, scene, post, recurrenceDayOfWeek=1)

        assert response.status_code == 201
        assert response.data['isRecurring'] is True
        assert response.data['recurrenceType'] == 'WEEKLY'
        assert response.data['recurrenceDayOfWeek'] == 1
        assert response.data['occurrenceDate'] == response.data['dueDate']

    def test_needs_due_date(self, ceo_client, scene, post):
        response = self._post(ceo_client, scene, post, dueDate=None)
        assert response.status_code == 400

    @pytest.mark.parametrize('fields', [
        {'recurrenceType': 'NONE'},
        {'recurrenceType': 'HOURLY'},
        {'recurrenceInterval': 0},
        {'recurrenceInterval': 400},
        {'recurrenceDayOfWeek': 7},
        {'recurrenceDayOfMonth': 32},
    ])
    def test_invalid_recurrence(self, ceo_client, scene, post, fields):
        response = self._post(ceo_client, scene, post, **fields)

        assert response.status_code == 400
        assert not Task.objects.exists()

    def test_recurrence_ignored_when_not_recurring(self, ceo_client, scene, post):
        response = self._post(ceo_client, scene, post, isRecurring=False, recurrenceType='HOURLY')

        assert response.status_code == 201
        assert response.data['recurrenceType'] == 'NONE'
        assert response.data['occurrenceDate'] is None


@pytest.mark.django_db
class TestUpcomingJob:

    def _template(self, make_task, due_in, recurrence_type, status=Task.Status.DONE):
        template = make_task(
            'Weekly supplier call',
            due_date=timezone.now() + due_in,
            is_recurring=True,
            recurrence_type=recurrence_type,
        )
        Task.objects.filter(pk=template.pk).update(status=status)
        return template

    def test_open_template_needs_nothing(self, make_task):
        self._template(make_task, timedelta(days=2), 'WEEKLY', status=Task.Status.TODO)

        assert generate_upcoming_recurring_tasks(30) == 0

    def test_generates_the_next_occurrence(self, make_task):
        template = self._template(make_task, -timedelta(days=2), 'WEEKLY')

        assert generate_upcoming_recurring_tasks(30) == 1
        instance = template.recurring_instances.get()
        assert instance.due_date == template.due_date + timedelta(weeks=1)

        # the new instance is open and ahead, so a second run does nothing
        assert generate_upcoming_recurring_tasks(30) == 0

    def test_continues_from_latest_instance(self, make_task):
        template = self._template(make_task, -timedelta(days=15), 'WEEKLY')
        first = generate_next_instance(template)
        Task.objects.filter(pk=first.pk).update(status=Task.Status.DONE)

        assert generate_upcoming_recurring_tasks(30) == 1
        latest = template.recurring_instances.order_by('-occurrence_date').first()
        assert latest.due_date == template.due_date + timedelta(weeks=2)

    def test_outside_lookahead(self, make_task):
        self._template(make_task, -timedelta(days=1), 'MONTHLY')

        assert generate_upcoming_recurring_tasks(7) == 0

    def test_ended_chain_is_skipped(self, make_task):
        template = self._template(make_task, -timedelta(days=2), 'DAILY')
        Task.objects.filter(pk=template.pk).update(recurrence_end_date=timezone.now() - timedelta(days=1))

        assert generate_upcoming_recurring_tasks(30) == 0

    def test_chain_under_inactive_project_is_skipped(self, make_task, scene):
        self._template(make_task, -timedelta(days=2), 'WEEKLY')
        deactivate_item(scene.project)

        assert generate_upcoming_recurring_tasks(30) == 0
        assert generate_upcoming_recurring_tasks(30) == 0

    def test_scheduled_job(self, make_task, settings):
        settings.RECURRING_LOOKAHEAD_DAYS = 30
        self._template(make_task, -timedelta(days=2), 'WEEKLY')

        assert generate_recurring_tasks() == 1
