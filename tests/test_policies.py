import pytest

from apps.departments.models import Department, Post
from apps.policies.models import Policy

pytestmark = pytest.mark.django_db


@pytest.fixture
def policy(executive_client, post):
    response = executive_client.post(
        '/api/policies',
        {
            'title': 'Contract sign-off',
            'content': 'Contracts above 10k need two signatures.',
            'postIds': [post.pk],
        },
        format='json',
    )
    assert response.status_code == 201
    return Policy.objects.get(pk=response.data['id'])


def test_create_defaults_to_post_scope(policy, post, executive):
    assert policy.scope == Policy.Scope.POST
    assert policy.created_by == executive
    assert list(policy.posts.all()) == [post]


def test_create_requires_content(executive_client):
    response = executive_client.post('/api/policies', {'title': 'Empty'}, format='json')

    assert response.status_code == 400
    assert response.data == {'error': 'Content is required.'}


def test_unknown_post_rejected(executive_client):
    response = executive_client.post(
        '/api/policies',
        {'title': 'Rule', 'content': 'Text', 'postIds': [999999]},
        format='json',
    )

    assert response.status_code == 400
    assert not Policy.objects.exists()


def test_invalid_scope(executive_client):
    response = executive_client.post(
        '/api/policies', {'title': 'Rule', 'content': 'Text', 'scope': 'TEAM'}, format='json'
    )
    assert response.status_code == 400


def test_list_filtered_by_scope(member_client, policy, executive):
    Policy.objects.create(title='Dress code', content='Smart casual', scope='COMPANY', created_by=executive)

    response = member_client.get('/api/policies?scope=company')

    assert [row['title'] for row in response.data] == ['Dress code']


def test_detail_lists_posts(member_client, policy, post):
    response = member_client.get(f'/api/policies/{policy.pk}')

    assert response.data['posts'][0]['id'] == post.pk
    assert response.data['departments'] == []


def test_update(executive_client, policy):
    response = executive_client.put(
        f'/api/policies/{policy.pk}', {'scope': 'department'}, format='json'
    )

    assert response.status_code == 200
    assert response.data['scope'] == 'DEPARTMENT'


def test_archive_hides_policy(executive_client, member_client, policy):
    response = executive_client.delete(f'/api/policies/{policy.pk}')

    assert response.data == {'success': True, 'message': 'Policy archived'}
    assert member_client.get('/api/policies').data == []


def test_replace_and_remove_posts(executive_client, policy, post, department):
    other = Post.objects.create(name='Courier', department=department)

    response = executive_client.post(
        f'/api/policies/{policy.pk}/posts', {'postIds': [other.pk]}, format='json'
    )
    assert response.status_code == 200
    assert list(policy.posts.all()) == [other]

    executive_client.delete(f'/api/policies/{policy.pk}/posts/{other.pk}')
    assert not policy.posts.exists()


def test_assign_departments(executive_client, policy, department):
    response = executive_client.post(
        f'/api/policies/{policy.pk}/departments', {'departmentIds': [department.pk]}, format='json'
    )

    assert response.status_code == 200
    assert list(policy.departments.all()) == [department]


def test_post_ids_must_be_a_list(executive_client, policy):
    response = executive_client.post(f'/api/policies/{policy.pk}/posts', {'postIds': 5}, format='json')
    assert response.status_code == 400


def test_regular_user_cannot_assign(member_client, policy, post):
    response = member_client.post(f'/api/policies/{policy.pk}/posts', {'postIds': [post.pk]}, format='json')
    assert response.status_code == 403


def test_policies_for_post(member_client, policy, post, executive, department):
    company = Policy.objects.create(title='Safety first', content='Wear gloves', scope='COMPANY', created_by=executive)
    departmental = Policy.objects.create(title='Ops hours', content='8 to 4', scope='DEPARTMENT', created_by=executive)
    departmental.departments.add(department)
    elsewhere = Policy.objects.create(title='Finance rule', content='Receipts', scope='DEPARTMENT', created_by=executive)
    elsewhere.departments.add(Department.objects.create(name='Finance'))

    response = member_client.get(f'/api/posts/{post.pk}/policies')

    assert response.status_code == 200
    assert [row['id'] for row in response.data['postPolicies']] == [policy.pk]
    assert [row['id'] for row in response.data['departmentPolicies']] == [departmental.pk]
    assert [row['id'] for row in response.data['companyPolicies']] == [company.pk]
