"""Who may do what with theses and user accounts.

Every route asks :func:`authorize` (or :func:`decide` when it only needs the
answer) instead of checking roles or ownership itself. The rules, first match
wins:

* ``view``: anyone when the thesis is approved and public, otherwise the
  owner or a privileged user.
* ``edit``, ``delete``, ``runCheck``: the owner or a privileged user.
* ``approve``, ``reject``, ``listPending``, ``listAll``: privileged users.
* ``changeRole``: privileged users, never on themselves, and a supervisor
  never on an admin.

"Privileged" means the admin or supervisor role.
"""
from collections import namedtuple
from enum import Enum

from portal.errors import Forbidden, Unauthenticated

PRIVILEGED_ROLES = frozenset(['admin', 'supervisor'])

UNAUTHORIZED = 'Unauthorized'
FORBIDDEN = 'Forbidden'


class Action(Enum):
    VIEW = 'view'
    EDIT = 'edit'
    DELETE = 'delete'
    APPROVE = 'approve'
    REJECT = 'reject'
    RUN_CHECK = 'runCheck'
    CHANGE_ROLE = 'changeRole'
    LIST_ALL = 'listAll'
    LIST_PENDING = 'listPending'


OWNER_ACTIONS = frozenset([Action.EDIT, Action.DELETE, Action.RUN_CHECK])
REVIEW_ACTIONS = frozenset([Action.APPROVE, Action.REJECT, Action.LIST_PENDING])


class Requester(namedtuple('Requester', ['id', 'role'])):
    """Identity taken from a verified token. ``id`` is always a string."""

    __slots__ = ()

    def __new__(cls, id, role):
        return super().__new__(cls, str(id), role)

    @property
    def is_privileged(self):
        return self.role in PRIVILEGED_ROLES


class Decision(namedtuple('Decision', ['permitted', 'reason'])):
    __slots__ = ()

    def __bool__(self):
        return self.permitted


PERMIT = Decision(True, None)


def deny(reason):
    return Decision(False, reason)


def is_publicly_visible(thesis):
    return thesis.status == 'approved' and bool(thesis.is_public)


def _is_owner(requester, thesis):
    return requester is not None and requester.id == str(thesis.owner_id)


def _is_privileged(requester):
    return requester is not None and requester.is_privileged


def decide(requester, action, thesis=None, target=None):
    """Return a :class:`Decision` for ``requester`` doing ``action``.

    ``requester`` is a :class:`Requester` or ``None`` for anonymous calls.
    ``thesis`` must carry ``owner_id``, ``status`` and ``is_public`` for the
    thesis actions; ``target`` must carry ``id`` and ``role`` for
    ``changeRole``. Pure: nothing is read or written.
    """
    action = Action(action)

    if action is Action.VIEW:
        if is_publicly_visible(thesis):
            return PERMIT
        if _is_owner(requester, thesis) or _is_privileged(requester):
            return PERMIT
        return deny(FORBIDDEN)

    if action in OWNER_ACTIONS:
        if requester is None:
            return deny(UNAUTHORIZED)
        if _is_owner(requester, thesis) or _is_privileged(requester):
            return PERMIT
        return deny(FORBIDDEN)

    if action in REVIEW_ACTIONS or action is Action.LIST_ALL:
        return PERMIT if _is_privileged(requester) else deny(FORBIDDEN)

    # Action.CHANGE_ROLE
    if not _is_privileged(requester):
        return deny(FORBIDDEN)
    if requester.id == str(target.id):
        return deny(FORBIDDEN)
    if requester.role == 'supervisor' and target.role == 'admin':
        return deny(FORBIDDEN)
    return PERMIT


def authorize(requester, action, thesis=None, target=None):
    """Raise unless :func:`decide` permits the action.

    Anonymous callers get :class:`Unauthenticated` (401), known users that
    are not allowed get :class:`Forbidden` (403).
    """
    decision = decide(requester, action, thesis=thesis, target=target)
    if decision:
        return decision
    if requester is None:
        raise Unauthenticated('Authentication required')
    raise Forbidden()
