"""
Views for accounts app.

Includes:
- Session authentication (login, logout, me)
- User management (executives only)
- Team invitations
"""

import logging

from django.contrib.auth import login, logout, authenticate, get_user_model
from django.core.exceptions import ValidationError
from django.db.models import Prefetch
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.core.parsing import clean_text, get_or_404
from apps.departments.models import Post
from .models import Invitation
from .permissions import IsExecutive
from .serializers import UserSerializer, InvitationSerializer
from .services import (
    create_user, rename_user, deactivate_user,
    create_invitation, validate_invitation, accept_invitation, delete_invitation,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def _user_queryset():
    return User.objects.prefetch_related(
        Prefetch('posts', queryset=Post.objects.filter(is_active=True))
    )


# =============================================================================
# Authentication Views
# =============================================================================

@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """Email/password login. Starts a cookie session."""
    email = clean_text(request.data.get('email')).lower()
    password = request.data.get('password')

    if not email or not isinstance(password, str) or not password:
        raise ValidationError('Email and password are required.')

    existing = User.objects.filter(email__iexact=email).first()
    if existing and existing.is_locked():
        raise ValidationError('Account is locked. Please try again later.')

    user = authenticate(request, username=email, password=password)
    if user is None:
        logger.info(f'Failed login for {email}')
        raise ValidationError('Invalid email or password.')

    login(request, user)
    return Response(UserSerializer(user).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    logout(request)
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(UserSerializer(request.user).data)


# =============================================================================
# User Management Views
# =============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def user_list_view(request):
    """
    GET: active users (pending invitees included, flagged)
    POST: create a user directly (executives only)
    """
    if request.method == 'GET':
        users = _user_queryset().filter(is_active=True).order_by('is_pending', 'name')
        return Response(UserSerializer(users, many=True).data)

    if not request.user.is_executive:
        raise PermissionDenied(IsExecutive.message)

    user = create_user(
        email=request.data.get('email'),
        name=request.data.get('name'),
        role=request.data.get('role'),
        password=request.data.get('password'),
    )
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([IsExecutive])
def user_rename_view(request, pk):
    user = get_or_404(User, pk=pk)
    rename_user(user, request.data.get('name'))
    return Response(UserSerializer(user).data)


@api_view(['DELETE'])
@permission_classes([IsExecutive])
def user_deactivate_view(request, pk):
    user = get_or_404(User, pk=pk)
    if user.pk == request.user.pk:
        raise ValidationError('You cannot deactivate your own account.')
    deactivate_user(user)
    return Response({'success': True, 'message': 'User deactivated'})


# =============================================================================
# Invitation Views
# =============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsExecutive])
def invitation_list_view(request):
    if request.method == 'GET':
        invitations = Invitation.objects.select_related('invited_by')
        return Response(InvitationSerializer(invitations, many=True).data)

    invitation, pending_user = create_invitation(
        email=request.data.get('email'),
        invited_by=request.user,
        role=request.data.get('role'),
        name=request.data.get('name'),
    )
    data = InvitationSerializer(invitation).data
    data['pendingUserId'] = pending_user.id
    data['message'] = (
        'Invitation created and pending user added. '
        'They can now be assigned to posts.'
    )
    return Response(data, status=status.HTTP_201_CREATED)


def _invitation_by_token(token):
    return get_or_404(Invitation, token=token)


@api_view(['GET'])
@permission_classes([AllowAny])
def invitation_validate_view(request, token):
    invitation = _invitation_by_token(token)
    validate_invitation(invitation)
    return Response({
        'email': invitation.email,
        'role': invitation.role,
        'invitedBy': invitation.invited_by.name if invitation.invited_by else 'Unknown',
        'valid': True,
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def invitation_accept_view(request, token):
    """Activate the invitee and sign them in."""
    invitation = _invitation_by_token(token)
    user = accept_invitation(
        invitation,
        name=request.data.get('name'),
        password=request.data.get('password'),
    )
    login(request, user, backend='apps.accounts.backends.EmailAuthBackend')
    return Response({
        'message': 'Invitation accepted! You are now logged in.',
        'user': UserSerializer(user).data,
    })


@api_view(['DELETE'])
@permission_classes([IsExecutive])
def invitation_delete_view(request, pk):
    delete_invitation(get_or_404(Invitation, pk=pk))
    return Response({'success': True})
