from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import Invitation
from apps.departments.models import Post

User = get_user_model()

pytestmark = pytest.mark.django_db

PASSWORD = 'Str0ng-Passw0rd!'


@pytest.fixture
def invitation(executive_client):
    response = executive_client.post(
        '/api/invitations',
        {'email': 'new.hire@example.com', 'role': 'USER', 'name': 'Nora New'},
        format='json',
    )
    assert response.status_code == 201
    return Invitation.objects.get(pk=response.data['id'])


def test_invitation_creates_pending_user(executive_client, executive):
    response = executive_client.post(
        '/api/invitations', {'email': 'new.hire@example.com'}, format='json'
    )

    assert response.status_code == 201
    pending = User.objects.get(pk=response.data['pendingUserId'])
    assert pending.is_pending is True
    assert pending.is_active is True
    assert response.data['inviteUrl'].endswith(str(response.data['token']))
    assert response.data['invitedBy']['id'] == executive.pk


def test_pending_user_can_hold_a_post(invitation, department):
    pending = User.objects.get(email=invitation.email)
    post = Post.objects.create(name='Buyer', department=department, user=pending)

    assert post.user.is_pending


def test_duplicate_open_invitation_rejected(executive_client, invitation):
    response = executive_client.post(
        '/api/invitations', {'email': invitation.email}, format='json'
    )

    assert response.status_code == 400
    assert response.data == {'error': 'Invitation already sent to this email.'}


def test_existing_user_cannot_be_invited(executive_client, member):
    response = executive_client.post('/api/invitations', {'email': member.email}, format='json')
    assert response.status_code == 400


def test_regular_user_cannot_invite(member_client):
    response = member_client.post('/api/invitations', {'email': 'x@example.com'}, format='json')
    assert response.status_code == 403


def test_validate_open_invitation(api_client, invitation):
    response = api_client.get(f'/api/invitations/validate/{invitation.token}')

    assert response.status_code == 200
    assert response.data['valid'] is True
    assert response.data['email'] == 'new.hire@example.com'
    assert response.data['invitedBy'] == 'Evan Exec'


def test_validate_unknown_token(api_client):
    response = api_client.get('/api/invitations/validate/00000000-0000-4000-8000-000000000000')
    assert response.status_code == 404


def test_validate_expired_invitation(api_client, invitation):
    invitation.expires_at = timezone.now() - timedelta(minutes=1)
    invitation.save()

    response = api_client.get(f'/api/invitations/validate/{invitation.token}')

    assert response.status_code == 400
    assert response.data == {'error': 'Invitation expired.'}


def test_accept_activates_and_signs_in(api_client, invitation):
    response = api_client.post(
        f'/api/invitations/accept/{invitation.token}',
        {'name': 'Nora Newman', 'password': PASSWORD},
        format='json',
    )

    assert response.status_code == 200
    user = User.objects.get(email='new.hire@example.com')
    assert user.is_pending is False
    assert user.name == 'Nora Newman'
    assert user.check_password(PASSWORD)

    invitation.refresh_from_db()
    assert invitation.accepted_at is not None

    me = api_client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.data['email'] == 'new.hire@example.com'


def test_accept_rejects_weak_password(api_client, invitation):
    response = api_client.post(
        f'/api/invitations/accept/{invitation.token}', {'password': 'short'}, format='json'
    )

    assert response.status_code == 400
    assert User.objects.get(email=invitation.email).is_pending is True


def test_accept_rejects_non_text_password(api_client, invitation):
    response = api_client.post(
        f'/api/invitations/accept/{invitation.token}', {'password': 12345678901}, format='json'
    )

    assert response.status_code == 400
    assert response.data == {'error': 'Password must be a string.'}
    assert User.objects.get(email=invitation.email).is_pending is True


def test_accept_twice(api_client, invitation):
    url = f'/api/invitations/accept/{invitation.token}'
    api_client.post(url, {'password': PASSWORD}, format='json')

    response = api_client.post(url, {'password': PASSWORD}, format='json')

    assert response.status_code == 400
    assert response.data == {'error': 'Invitation already accepted.'}


def test_delete_invitation(executive_client, invitation):
    response = executive_client.delete(f'/api/invitations/{invitation.pk}')

    assert response.status_code == 200
    assert not Invitation.objects.filter(pk=invitation.pk).exists()
