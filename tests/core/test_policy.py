import pytest

from src.teamops.teamops.core.exceptions import AuthorizationError
from src.teamops.teamops.core.policy import POLICY, authorizer


@pytest.mark.parametrize(
    "resource, expected",
    [
        (("attendance", "confirm"), {"admin": True, "manager": True, "member": False}),
        (("member", "delete"), {"admin": True, "manager": False, "member": False}),
        (("evaluation", "write"), {"admin": True, "manager": False, "member": False}),
        (("member", "read"), {"admin": True, "manager": True, "member": False}),
    ],
)
def test_role_rules(request, resource, expected):
    for fixture, allowed in expected.items():
        user = request.getfixturevalue(fixture)
        assert authorizer.allows(user, *resource) is allowed, (fixture, resource)


def test_owner_may_act_on_own_record(member):
    assert authorizer.allows(member, "attendance", "read", owner_member_id=member.member_id)
    assert not authorizer.allows(member, "attendance", "read", owner_member_id=99)
    assert not authorizer.allows(member, "attendance", "confirm", owner_member_id=member.member_id)


def test_member_profile_readable_by_owner(member):
    assert authorizer.allows(member, "member", "read", owner_member_id=member.member_id)
    assert not authorizer.allows(member, "member", "read", owner_member_id=4)


def test_password_change_is_owner_only(admin):
    assert not authorizer.allows(admin, "member", "password", owner_member_id=99)
    assert authorizer.allows(admin, "member", "password", owner_member_id=admin.member_id)


def test_require_raises_forbidden(member):
    with pytest.raises(AuthorizationError) as exc:
        authorizer.require(member, "system_config", "read")
    assert exc.value.message == "権限がありません"


def test_unknown_pair_is_a_programming_error(admin):
    with pytest.raises(KeyError):
        authorizer.allows(admin, "nothing", "here")


def test_contract_access_is_admin_or_owner():
    assert POLICY[("contract", "download")].owner
    assert not POLICY[("contract", "write")].owner
