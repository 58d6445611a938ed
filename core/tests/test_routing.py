import pytest

from core import roles
from core.services.routing import RoleRouter, Session, SessionUser, effective_role, resolve_route


class RecordingNavigator:
    def __init__(self):
        self.calls = []

    def __call__(self, path, replace=False):
        self.calls.append((path, replace))


def session(roles_, current=None, loading=False, user_id=1):
    return Session(user=SessionUser(id=user_id, roles=tuple(roles_)), current_role=current, is_loading=loading)


@pytest.mark.parametrize("roles_,current,expected", [
    (["doctor"], None, "/dashboard/doctor"),
    (["admin", "nurse"], "nurse", "/dashboard/nurse"),
    (["admin", "nurse"], None, "/dashboard/admin"),
    (["reception"], None, "/dashboard/reception"),
    (["unknown_role"], None, "/dashboard/reception"),
    ([], None, "/dashboard/reception"),
    (["doctor"], "janitor", "/dashboard/reception"),
])
def test_resolution_table(roles_, current, expected):
    nav = RecordingNavigator()
    decision = RoleRouter(nav).resolve(session(roles_, current))
    assert decision.pending is False
    assert decision.route == expected
    assert nav.calls == [(expected, True)]


def test_unknown_role_is_flagged_as_fallback():
    decision = resolve_route(["unknown_role"])
    assert decision.fallback is True
    assert decision.role == "unknown_role"
    assert resolve_route(["nurse"]).fallback is False


def test_loading_session_issues_no_navigation():
    nav = RecordingNavigator()
    router = RoleRouter(nav)
    decision = router.resolve(session(["doctor"], loading=True))
    assert decision.pending is True
    assert decision.route is None
    assert nav.calls == []


def test_missing_user_is_pending():
    nav = RecordingNavigator()
    decision = RoleRouter(nav).resolve(Session(user=None))
    assert decision.pending is True
    assert nav.calls == []


def test_same_inputs_give_same_route():
    router = RoleRouter()
    s = session(["admin", "nurse"], "nurse")
    assert {router.resolve(s).route for _ in range(5)} == {"/dashboard/nurse"}


def test_sync_navigates_once_per_input_change():
    nav = RecordingNavigator()
    router = RoleRouter(nav)

    router.sync(session(["doctor"], loading=True))
    router.sync(session(["doctor"]))
    router.sync(session(["doctor"]))
    assert nav.calls == [("/dashboard/doctor", True)]

    router.sync(session(["doctor", "nurse"], "nurse"))
    assert nav.calls[-1] == ("/dashboard/nurse", True)
    assert len(nav.calls) == 2


def test_effective_role():
    assert effective_role(["doctor", "nurse"]) == "doctor"
    assert effective_role(["doctor", "nurse"], "nurse") == "nurse"
    assert effective_role([]) is None
    assert effective_role(None) is None


def test_route_table_is_read_only():
    with pytest.raises(TypeError):
        roles.DASHBOARD_ROUTES["admin"] = "/elsewhere"  # type: ignore[index]
    assert roles.dashboard_route_for(None) == roles.DEFAULT_DASHBOARD_ROUTE
    assert roles.dashboard_route_for(["admin"]) == roles.DEFAULT_DASHBOARD_ROUTE  # type: ignore[arg-type]


def test_permission_matrix():
    assert roles.has_permission("admin", "manageUsers") is True
    assert roles.has_permission("doctor", "assignBed") is False
    assert roles.has_permission("nurse", "dischargeBed") is True
    assert roles.has_permission("unknown", "viewBeds") is False
    assert roles.has_permission("admin", "noSuchFeature") is False
    assert roles.permissions_for("unknown") == {f: False for f in roles.ROLE_PERMISSIONS}


@pytest.mark.django_db
def test_session_from_user():
    from core.models import User

    user = User.objects.create_user(username="multi", password="P@ssw0rd1", roles=["doctor", "nurse"])
    s = Session.from_user(user)
    assert s.user.roles == ("doctor", "nurse")
    assert s.current_role is None
    assert RoleRouter().decide(s).route == "/dashboard/doctor"

    user.current_role = "nurse"
    assert RoleRouter().decide(Session.from_user(user)).route == "/dashboard/nurse"
    assert Session.from_user(None).user is None
