"""Shared fixtures: people, org chart and a complete Ideal Scene chain."""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from apps.departments.models import Department, Post
from apps.hierarchy.models import MainGoal, Subgoal, Plan, Program, Project, Instruction
from apps.tasks.services import create_task

User = get_user_model()

PASSWORD = 'Str0ng-Passw0rd!'


@pytest.fixture
def ceo(db):
    return User.objects.create_user(
        'ceo@example.com', PASSWORD, name='Clara Chief', role=User.Role.CEO
    )


@pytest.fixture
def executive(db):
    return User.objects.create_user(
        'exec@example.com', PASSWORD, name='Evan Exec', role=User.Role.EXECUTIVE
    )


@pytest.fixture
def member(db):
    return User.objects.create_user(
        'member@example.com', PASSWORD, name='Mia Member', role=User.Role.USER
    )


@pytest.fixture
def api_client():
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def ceo_client(ceo):
    return _client_for(ceo)


@pytest.fixture
def executive_client(executive):
    return _client_for(executive)


@pytest.fixture
def member_client(member):
    return _client_for(member)


@pytest.fixture
def department(db):
    return Department.objects.create(name='Operations', sort_order=0)


@pytest.fixture
def post(department, member):
    return Post.objects.create(name='Operations Manager', department=department, user=member)


@pytest.fixture
def due_soon():
    return timezone.now() + timedelta(days=30)


@pytest.fixture
def main_goal(db):
    return MainGoal.objects.create(title='Become the leading regional supplier')


@pytest.fixture
def scene(main_goal, department, due_soon):
    """MainGoal -> Subgoal -> Plan -> Program -> Project -> Instruction, all in department."""
    common = {'department': department, 'due_date': due_soon}
    subgoal = Subgoal.objects.create(title='Grow repeat orders', main_goal=main_goal, **common)
    plan = Plan.objects.create(title='Customer care plan', subgoal=subgoal, **common)
    program = Program.objects.create(title='Account reviews', plan=plan, **common)
    project = Project.objects.create(title='Q3 renewals', program=program, **common)
    instruction = Instruction.objects.create(title='Call every renewal', project=project, **common)
    return SimpleNamespace(
        main_goal=main_goal,
        subgoal=subgoal,
        plan=plan,
        program=program,
        project=project,
        instruction=instruction,
    )


@pytest.fixture
def make_task(scene, post, ceo):
    """Factory creating tasks through the service layer."""

    def _make(title='Prepare renewal contracts', item=None, **kwargs):
        item = item or scene.instruction
        return create_task(
            title=title,
            responsible_post_id=kwargs.pop('responsible_post_id', post.pk),
            hierarchy_level=item.level,
            parent_item_id=item.pk,
            creator=kwargs.pop('creator', ceo),
            **kwargs,
        )

    return _make


@pytest.fixture
def task(make_task):
    return make_task()


VALID_REPORT = {
    'whatWasDone': 'Reviewed and filed the Q3 contract renewal',
    'evidenceType': 'URL',
    'evidenceUrl': 'https://files.example.com/q3-renewal.pdf',
    'whereContext': 'Head office archive',
}


@pytest.fixture
def report_payload():
    return dict(VALID_REPORT)
