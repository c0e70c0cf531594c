from types import SimpleNamespace

import pytest

from portal.access import (
    FORBIDDEN, UNAUTHORIZED, Action, Requester, authorize, decide, is_publicly_visible,
)
from portal.errors import Forbidden, Unauthenticated

ROLES = ['student', 'supervisor', 'admin']
STATUSES = ['pending', 'approved', 'rejected']

OWNER = Requester(1, 'student')
STRANGER = Requester(2, 'student')
SUPERVISOR = Requester(3, 'supervisor')
ADMIN = Requester(4, 'admin')


def thesis(status='pending', is_public=True, owner_id=1):
    return SimpleNamespace(owner_id=owner_id, status=status, is_public=is_public)


def user(id, role):
    return SimpleNamespace(id=id, role=role)


class TestView:

    @pytest.mark.parametrize('requester', [None, OWNER, STRANGER, SUPERVISOR, ADMIN])
    def test_approved_public_thesis_is_visible_to_everyone(self, requester):
        assert decide(requester, Action.VIEW, thesis=thesis('approved', True))

    @pytest.mark.parametrize('status,is_public', [
        ('pending', True), ('rejected', True), ('pending', False), ('rejected', False), ('approved', False),
    ])
    def test_hidden_thesis_is_denied_to_anonymous_and_strangers(self, status, is_public):
        hidden = thesis(status, is_public)
        assert decide(None, Action.VIEW, thesis=hidden) == (False, FORBIDDEN)
        assert decide(STRANGER, Action.VIEW, thesis=hidden) == (False, FORBIDDEN)

    @pytest.mark.parametrize('requester', [OWNER, SUPERVISOR, ADMIN])
    @pytest.mark.parametrize('status', STATUSES)
    def test_owner_and_privileged_see_everything(self, requester, status):
        assert decide(requester, Action.VIEW, thesis=thesis(status, False))

    def test_is_publicly_visible(self):
        assert is_publicly_visible(thesis('approved', True))
        assert not is_publicly_visible(thesis('approved', False))
        assert not is_publicly_visible(thesis('pending', True))


class TestOwnerActions:

    @pytest.mark.parametrize('action', [Action.EDIT, Action.DELETE, Action.RUN_CHECK])
    @pytest.mark.parametrize('status', STATUSES)
    @pytest.mark.parametrize('is_public', [True, False])
    def test_owner_or_privileged_only_regardless_of_state(self, action, status, is_public):
        resource = thesis(status, is_public)
        assert decide(OWNER, action, thesis=resource)
        assert decide(SUPERVISOR, action, thesis=resource)
        assert decide(ADMIN, action, thesis=resource)
        assert decide(STRANGER, action, thesis=resource) == (False, FORBIDDEN)
        assert decide(None, action, thesis=resource) == (False, UNAUTHORIZED)

    def test_owner_match_ignores_id_type(self):
        assert decide(Requester('1', 'student'), Action.EDIT, thesis=thesis(owner_id=1))

    def test_action_accepts_plain_strings(self):
        assert decide(OWNER, 'runCheck', thesis=thesis())
        with pytest.raises(ValueError):
            decide(OWNER, 'publish', thesis=thesis())


class TestReviewActions:

    @pytest.mark.parametrize('action', [Action.APPROVE, Action.REJECT, Action.LIST_PENDING, Action.LIST_ALL])
    def test_only_privileged_roles(self, action):
        resource = thesis()
        assert decide(SUPERVISOR, action, thesis=resource)
        assert decide(ADMIN, action, thesis=resource)
        assert decide(OWNER, action, thesis=resource) == (False, FORBIDDEN)
        assert decide(None, action, thesis=resource) == (False, FORBIDDEN)


class TestChangeRole:

    def test_nobody_changes_their_own_role(self):
        assert not decide(ADMIN, Action.CHANGE_ROLE, target=user(4, 'admin'))
        assert not decide(SUPERVISOR, Action.CHANGE_ROLE, target=user(3, 'supervisor'))

    def test_supervisor_cannot_touch_admins(self):
        assert decide(SUPERVISOR, Action.CHANGE_ROLE, target=user(9, 'admin')) == (False, FORBIDDEN)

    @pytest.mark.parametrize('target_role', ROLES)
    def test_admin_can_change_any_other_user(self, target_role):
        assert decide(ADMIN, Action.CHANGE_ROLE, target=user(9, target_role))

    @pytest.mark.parametrize('target_role', ['student', 'supervisor'])
    def test_supervisor_can_change_non_admins(self, target_role):
        assert decide(SUPERVISOR, Action.CHANGE_ROLE, target=user(9, target_role))

    def test_students_and_anonymous_cannot_change_roles(self):
        assert not decide(STRANGER, Action.CHANGE_ROLE, target=user(9, 'student'))
        assert not decide(None, Action.CHANGE_ROLE, target=user(9, 'student'))


class TestAuthorize:

    def test_permit_returns_decision(self):
        assert authorize(OWNER, Action.DELETE, thesis=thesis())

    def test_anonymous_denial_is_unauthenticated(self):
        with pytest.raises(Unauthenticated):
            authorize(None, Action.VIEW, thesis=thesis('pending'))

    def test_known_user_denial_is_forbidden(self):
        with pytest.raises(Forbidden):
            authorize(STRANGER, Action.DELETE, thesis=thesis())
