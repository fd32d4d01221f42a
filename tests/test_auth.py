import pytest
from django.contrib.auth import get_user_model

from apps.departments.models import Post

User = get_user_model()

pytestmark = pytest.mark.django_db

PASSWORD = 'Str0ng-Passw0rd!'


def _login(client, email, password):
    return client.post('/api/auth/login', {'email': email, 'password': password}, format='json')


class TestLogin:

    def test_valid_credentials_start_a_session(self, api_client, member):
        response = _login(api_client, 'Member@Example.com', PASSWORD)

        assert response.status_code == 200
        assert response.data['email'] == 'member@example.com'

        me = api_client.get('/api/auth/me')
        assert me.status_code == 200
        assert me.data['id'] == member.pk

    def test_wrong_password(self, api_client, member):
        response = _login(api_client, member.email, 'not-the-password')

        assert response.status_code == 400
        assert response.data == {'error': 'Invalid email or password.'}
        member.refresh_from_db()
        assert member.failed_login_attempts == 1

    def test_missing_fields(self, api_client):
        response = _login(api_client, '', '')
        assert response.status_code == 400

    def test_non_text_credentials(self, api_client, member):
        assert _login(api_client, 42, PASSWORD).status_code == 400
        assert _login(api_client, member.email, 12345678901).status_code == 400

    def test_account_locks_after_repeated_failures(self, api_client, member):
        # LOCKOUT_THRESHOLD is 3 in test settings
        for _ in range(3):
            _login(api_client, member.email, 'wrong-password')

        response = _login(api_client, member.email, PASSWORD)

        assert response.status_code == 400
        assert 'locked' in response.data['error']
        member.refresh_from_db()
        assert member.is_locked()

    def test_successful_login_resets_failures(self, api_client, member):
        _login(api_client, member.email, 'wrong-password')
        _login(api_client, member.email, PASSWORD)

        member.refresh_from_db()
        assert member.failed_login_attempts == 0

    def test_pending_user_cannot_log_in(self, api_client):
        User.objects.create_user('invitee@example.com', PASSWORD, name='Ivy', is_pending=True)

        response = _login(api_client, 'invitee@example.com', PASSWORD)

        assert response.status_code == 400

    def test_logout_ends_session(self, api_client, member):
        _login(api_client, member.email, PASSWORD)
        api_client.post('/api/auth/logout')

        assert api_client.get('/api/auth/me').status_code == 401


def test_me_requires_session(api_client):
    response = api_client.get('/api/auth/me')

    assert response.status_code == 401
    assert 'error' in response.data


class TestUsers:

    def test_list_includes_posts(self, member_client, member, post):
        response = member_client.get('/api/users')

        assert response.status_code == 200
        row = next(user for user in response.data if user['id'] == member.pk)
        assert row['posts'] == [
            {'id': post.pk, 'name': post.name, 'departmentId': post.department_id}
        ]

    def test_executive_creates_user(self, executive_client):
        response = executive_client.post(
            '/api/users',
            {'email': 'New.Hire@example.com', 'name': 'Nora New', 'role': 'USER'},
            format='json',
        )

        assert response.status_code == 201
        assert response.data['email'] == 'new.hire@example.com'
        assert response.data['isPending'] is False

    def test_duplicate_email_rejected(self, executive_client, member):
        response = executive_client.post('/api/users', {'email': member.email}, format='json')
        assert response.status_code == 400

    def test_regular_user_cannot_create_users(self, member_client):
        response = member_client.post('/api/users', {'email': 'x@example.com'}, format='json')
        assert response.status_code == 403

    def test_rename(self, executive_client, member):
        response = executive_client.put(
            f'/api/users/{member.pk}/name', {'name': 'Mia Novak'}, format='json'
        )

        assert response.status_code == 200
        member.refresh_from_db()
        assert member.name == 'Mia Novak'

    def test_rename_rejects_non_text(self, executive_client, member):
        response = executive_client.put(f'/api/users/{member.pk}/name', {'name': 99}, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'Name is required.'}

    def test_create_rejects_non_text_email(self, executive_client):
        response = executive_client.post('/api/users', {'email': 7}, format='json')

        assert response.status_code == 400
        assert response.data == {'error': 'Email is required.'}

    def test_deactivate_vacates_posts(self, executive_client, member, post):
        response = executive_client.delete(f'/api/users/{member.pk}')

        assert response.status_code == 200
        member.refresh_from_db()
        assert member.is_active is False
        assert Post.objects.get(pk=post.pk).user is None

    def test_cannot_deactivate_self(self, executive_client, executive):
        response = executive_client.delete(f'/api/users/{executive.pk}')
        assert response.status_code == 400

    def test_unknown_user_is_404(self, executive_client):
        response = executive_client.delete('/api/users/999999')

        assert response.status_code == 404
        assert response.data == {'error': 'User not found'}
