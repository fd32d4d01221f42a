from datetime import timedelta

import pytest
from django.utils import timezone

from apps.activity_log.models import TaskActivity
from apps.departments.models import Department, Post
from apps.hierarchy.models import Plan, Project
from apps.tasks.models import Task, CompletionReport
from apps.tasks.services import TRIVIAL_RESPONSES

pytestmark = pytest.mark.django_db


def _task_payload(scene, post, **overrides):
    payload = {
        'title': 'Prepare renewal contracts',
        'responsiblePostId': post.pk,
        'hierarchyLevel': 'INSTRUCTION',
        'parentItemId': scene.instruction.pk,
        'dueDate': '2031-01-15T09:00:00Z',
    }
    payload.update(overrides)
    return payload


class TestCreateTask:

    def test_create(self, ceo_client, ceo, scene, post):
        response = ceo_client.post('/api/tasks', _task_payload(scene, post), format='json')

        assert response.status_code == 201
        data = response.data
        assert data['status'] == 'TODO'
        assert data['creatorId'] == ceo.pk
        assert data['departmentId'] == post.department_id
        assert data['parentItemId'] == scene.instruction.pk
        assert data['responsiblePost']['userName'] == 'Mia Member'
        assert [entry['id'] for entry in data['hierarchyPath']] == [
            scene.subgoal.pk, scene.plan.pk, scene.program.pk, scene.project.pk, scene.instruction.pk,
        ]
        assert data['mainGoalTitle'] == scene.main_goal.title
        assert data['completionReport'] is None

        activity = TaskActivity.objects.get(task_id=data['id'])
        assert activity.action_type == TaskActivity.ActionType.CREATED

    def test_any_level_can_hold_tasks(self, member_client, scene, post):
        response = member_client.post(
            '/api/tasks',
            _task_payload(scene, post, hierarchyLevel='subgoal', parentItemId=scene.subgoal.pk),
            format='json',
        )

        assert response.status_code == 201
        assert response.data['hierarchyLevel'] == 'SUBGOAL'
        assert len(response.data['hierarchyPath']) == 1

    def test_explicit_department(self, ceo_client, scene, post):
        finance = Department.objects.create(name='Finance')

        response = ceo_client.post(
            '/api/tasks', _task_payload(scene, post, departmentId=finance.pk), format='json'
        )

        assert response.data['departmentId'] == finance.pk

    @pytest.mark.parametrize('field, message', [
        ('title', 'Task title is required.'),
        ('responsiblePostId', 'responsiblePostId is required.'),
        ('hierarchyLevel', 'hierarchyLevel is required.'),
        ('parentItemId', 'parentItemId is required.'),
    ])
    def test_required_fields(self, ceo_client, scene, post, field, message):
        payload = _task_payload(scene, post)
        del payload[field]

        response = ceo_client.post('/api/tasks', payload, format='json')

        assert response.status_code == 400
        assert response.data == {'error': message}
        assert not Task.objects.exists()

    def test_unknown_level(self, ceo_client, scene, post):
        response = ceo_client.post(
            '/api/tasks', _task_payload(scene, post, hierarchyLevel='EPIC'), format='json'
        )

        assert response.status_code == 400
        assert response.data['error'].startswith('Invalid hierarchyLevel')

    def test_parent_of_another_level(self, ceo_client, scene, post):
        plan = scene.plan
        while Project.objects.filter(pk=plan.pk).exists():
            plan = Plan.objects.create(
                title='Filler plan', subgoal=scene.subgoal,
                department=scene.subgoal.department, due_date=scene.subgoal.due_date,
            )

        response = ceo_client.post(
            '/api/tasks',
            _task_payload(scene, post, hierarchyLevel='PROJECT', parentItemId=plan.pk),
            format='json',
        )

        assert response.status_code == 400
        assert response.data == {'error': 'Parent item not found.'}

    def test_inactive_parent(self, ceo_client, scene, post):
        scene.instruction.is_active = False
        scene.instruction.save()

        response = ceo_client.post('/api/tasks', _task_payload(scene, post), format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'Parent item not found.'}

    def test_inactive_post(self, ceo_client, scene, post):
        post.is_active = False
        post.save()

        response = ceo_client.post('/api/tasks', _task_payload(scene, post), format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'Post not found or inactive.'}

    def test_vacant_post_can_hold_tasks(self, ceo_client, scene, department):
        vacant = Post.objects.create(name='Open role', department=department)

        response = ceo_client.post('/api/tasks', _task_payload(scene, vacant), format='json')

        assert response.status_code == 201
        assert response.data['responsiblePost']['userId'] is None

    def test_anonymous_rejected(self, api_client, scene, post):
        response = api_client.post('/api/tasks', _task_payload(scene, post), format='json')
        assert response.status_code == 401


class TestStatus:

    def test_done_requires_report(self, member_client, task):
        response = member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'DONE'}, format='json')

        assert response.status_code == 400
        assert 'completion report' in response.data['error']
        task.refresh_from_db()
        assert task.status == Task.Status.TODO

    def test_invalid_status(self, member_client, task):
        response = member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'BLOCKED'}, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'Invalid status. Must be TODO, DOING, or DONE.'}

    def test_lowercase_status_accepted(self, member_client, task):
        response = member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'doing'}, format='json')

        assert response.status_code == 200
        assert response.data['status'] == 'DOING'

    def test_done_with_report_sets_completed_at(self, member_client, member, task, report_payload):
        member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        response = member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'DONE'}, format='json')

        assert response.status_code == 200
        assert response.data['status'] == 'DONE'
        assert response.data['completedAt'] is not None
        assert response.data['completionReport']['submittedById'] == member.pk

    def test_leaving_done_clears_completed_at(self, member_client, task, report_payload):
        member_client.post(f'/api/tasks/{task.pk}/complete', report_payload, format='json')

        response = member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'DOING'}, format='json')

        assert response.data['status'] == 'DOING'
        assert response.data['completedAt'] is None

    def test_every_status_call_refreshes_last_updated(self, member_client, task):
        stale = timezone.now() - timedelta(days=10)
        Task.objects.filter(pk=task.pk).update(last_updated_at=stale)

        member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'TODO'}, format='json')

        task.refresh_from_db()
        assert task.last_updated_at > stale
        assert not task.activities.filter(action_type=TaskActivity.ActionType.STATUS_CHANGED).exists()

    def test_status_change_is_logged(self, member_client, member, task):
        member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'DOING'}, format='json')

        entry = task.activities.get(action_type=TaskActivity.ActionType.STATUS_CHANGED)
        assert (entry.old_value, entry.new_value, entry.user) == ('TODO', 'DOING', member)


class TestCompletionReport:

    @pytest.mark.parametrize('answer', [
        *TRIVIAL_RESPONSES,
        'READY',
        '  Ok  ',
        'Done',
        'KÉSZ',
    ])
    def test_trivial_answers_rejected(self, member_client, task, report_payload, answer):
        report_payload['whatWasDone'] = answer

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 400
        assert 'meaningful' in response.data['error']
        assert not CompletionReport.objects.exists()

    def test_short_description_rejected(self, member_client, task, report_payload):
        report_payload['whatWasDone'] = 'Fixed it'

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'whatWasDone must be at least 10 characters.'}

    def test_short_where_context_rejected(self, member_client, task, report_payload):
        report_payload['whereContext'] = 'HQ'

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 400

    @pytest.mark.parametrize('where_context', [None, '', '   ', 42])
    def test_where_context_required(self, member_client, task, report_payload, where_context):
        if where_context is None:
            del report_payload['whereContext']
        else:
            report_payload['whereContext'] = where_context

        response = member_client.post(f'/api/tasks/{task.pk}/complete', report_payload, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'whereContext is required.'}
        task.refresh_from_db()
        assert task.status == Task.Status.TODO
        assert not CompletionReport.objects.filter(task=task).exists()

    def test_url_evidence_needs_url(self, member_client, task, report_payload):
        del report_payload['evidenceUrl']

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'URL evidence type requires evidenceUrl.'}

    @pytest.mark.parametrize('evidence_type', ['FILE', 'IMAGE', 'DOCUMENT'])
    def test_file_evidence_needs_file_id(self, member_client, task, report_payload, evidence_type):
        report_payload.update(evidenceType=evidence_type, evidenceUrl='')

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'File-based evidence type requires evidenceFileId.'}

    def test_file_evidence(self, member_client, task, report_payload):
        report_payload.update(
            evidenceType='document', evidenceFileId='drive-123', evidenceFileName='contract.pdf'
        )

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 201
        assert response.data['evidenceType'] == 'DOCUMENT'
        assert response.data['evidenceFileName'] == 'contract.pdf'

    def test_signed_note_needs_no_attachment(self, member_client, task):
        response = member_client.post(
            f'/api/tasks/{task.pk}/completion-report',
            {
                'whatWasDone': 'Customer signed the delivery note',
                'evidenceType': 'SIGNED_NOTE',
                'whereContext': 'Loading dock',
            },
            format='json',
        )

        assert response.status_code == 201

    def test_unknown_evidence_type(self, member_client, task, report_payload):
        report_payload['evidenceType'] = 'VIDEO'

        response = member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        assert response.status_code == 400

    def test_report_does_not_change_status(self, member_client, task, report_payload):
        member_client.post(f'/api/tasks/{task.pk}/completion-report', report_payload, format='json')

        task.refresh_from_db()
        assert task.status == Task.Status.TODO
        assert task.has_completion_report

    def test_second_report_rejected(self, member_client, task, report_payload):
        url = f'/api/tasks/{task.pk}/completion-report'
        member_client.post(url, report_payload, format='json')

        response = member_client.post(url, report_payload, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'A completion report already exists for this task.'}


class TestComplete:

    def test_complete_in_one_step(self, member_client, task, report_payload):
        response = member_client.post(f'/api/tasks/{task.pk}/complete', report_payload, format='json')

        assert response.status_code == 201
        task.refresh_from_db()
        assert task.status == Task.Status.DONE
        assert task.completed_at is not None
        assert set(task.activities.values_list('action_type', flat=True)) == {
            TaskActivity.ActionType.CREATED,
            TaskActivity.ActionType.REPORT_SUBMITTED,
            TaskActivity.ActionType.STATUS_CHANGED,
        }

    def test_invalid_report_leaves_task_untouched(self, member_client, task, report_payload):
        report_payload['whatWasDone'] = 'ok'

        response = member_client.post(f'/api/tasks/{task.pk}/complete', report_payload, format='json')

        assert response.status_code == 400
        task.refresh_from_db()
        assert task.status == Task.Status.TODO
        assert not CompletionReport.objects.filter(task=task).exists()


class TestListAndDetail:

    def test_list_newest_first(self, member_client, make_task):
        first = make_task('First')
        second = make_task('Second')

        response = member_client.get('/api/tasks')

        assert [row['id'] for row in response.data] == [second.pk, first.pk]

    def test_filters(self, member_client, ceo, make_task, department):
        other_post = Post.objects.create(name='Courier', department=department, user=ceo)
        mine = make_task('Mine')
        theirs = make_task('Theirs', responsible_post_id=other_post.pk)
        Task.objects.filter(pk=theirs.pk).update(status=Task.Status.DOING)

        by_user = member_client.get(f'/api/tasks?responsibleUserId={ceo.pk}')
        by_status = member_client.get('/api/tasks?status=TODO')
        by_post = member_client.get(f'/api/tasks?responsiblePostId={other_post.pk}')

        assert [row['id'] for row in by_user.data] == [theirs.pk]
        assert [row['id'] for row in by_status.data] == [mine.pk]
        assert [row['id'] for row in by_post.data] == [theirs.pk]

    def test_invalid_filter_value(self, member_client, task):
        response = member_client.get('/api/tasks?status=BLOCKED')

        assert response.status_code == 400
        assert 'status' in response.data['error']

    def test_detail_has_hierarchy_context(self, member_client, task, scene):
        response = member_client.get(f'/api/tasks/{task.pk}')

        assert response.status_code == 200
        context = response.data['hierarchyContext']
        assert context['instruction']['id'] == scene.instruction.pk
        assert context['subgoal']['id'] == scene.subgoal.pk
        assert context['mainGoal'] == {'id': scene.main_goal.pk, 'title': scene.main_goal.title}
        assert response.data['activities'][0]['actionType'] == 'created'

    def test_unknown_task(self, member_client):
        response = member_client.get('/api/tasks/999999')

        assert response.status_code == 404
        assert response.data == {'error': 'Task not found'}

    def test_update_logs_each_field(self, member_client, task, department):
        other_post = Post.objects.create(name='Courier', department=department)

        response = member_client.put(
            f'/api/tasks/{task.pk}',
            {'title': 'Prepare all renewal contracts', 'responsiblePostId': other_post.pk},
            format='json',
        )

        assert response.status_code == 200
        assert response.data['title'] == 'Prepare all renewal contracts'
        updates = task.activities.filter(action_type=TaskActivity.ActionType.UPDATED)
        assert set(updates.values_list('field_name', flat=True)) == {'title', 'responsible_post'}

    def test_activity_endpoint(self, member_client, task):
        member_client.put(f'/api/tasks/{task.pk}/status', {'status': 'DOING'}, format='json')

        response = member_client.get(f'/api/tasks/{task.pk}/activity')

        assert [row['actionType'] for row in response.data] == ['status_changed', 'created']


def test_contract_renewal_scenario(ceo_client, member, member_client):
    """Department, post, full chain, task, then the DONE gate."""
    department = ceo_client.post('/api/departments', {'name': 'Legal'}, format='json').data
    post = ceo_client.post(
        '/api/posts',
        {'name': 'Contracts Officer', 'departmentId': department['id'], 'userId': member.pk},
        format='json',
    ).data

    goal = ceo_client.post(
        '/api/main-goal', {'title': 'Zero lapsed contracts', 'departmentId': department['id']}, format='json'
    ).data
    parent_id = goal['id']
    for item_type, parent_key in (
        ('subgoals', 'mainGoalId'),
        ('plans', 'subgoalId'),
        ('programs', 'planId'),
        ('projects', 'programId'),
        ('instructions', 'projectId'),
    ):
        response = ceo_client.post(
            f'/api/ideal-scene/{item_type}',
            {'title': f'Renewals {item_type}', parent_key: parent_id, 'dueDate': '2031-09-30'},
            format='json',
        )
        assert response.status_code == 201, response.data
        parent_id = response.data['id']

    task = ceo_client.post(
        '/api/tasks',
        {
            'title': 'Renew Q3 contracts',
            'hierarchyLevel': 'INSTRUCTION',
            'parentItemId': parent_id,
            'responsiblePostId': post['id'],
        },
        format='json',
    ).data
    status_url = f'/api/tasks/{task["id"]}/status'

    assert member_client.put(status_url, {'status': 'DOING'}, format='json').status_code == 200
    assert member_client.put(status_url, {'status': 'DONE'}, format='json').status_code == 400

    report = member_client.post(
        f'/api/tasks/{task["id"]}/completion-report',
        {
            'whatWasDone': 'Reviewed and filed the Q3 contract renewal',
            'evidenceType': 'URL',
            'evidenceUrl': 'https://files.example.com/q3.pdf',
            'whereContext': 'Legal shared drive',
        },
        format='json',
    )
    assert report.status_code == 201

    response = member_client.put(status_url, {'status': 'DONE'}, format='json')
    assert response.status_code == 200
    assert response.data['status'] == 'DONE'
    assert response.data['departmentId'] == department['id']
