import uuid
import pytest

from app.auth_deps import Identity, identity_from_claims, normalize_roles, require_roles
from app.errors import PermissionDenied, Unauthenticated


def test_normalize_roles_merges_both_claims():
    assert normalize_roles({}) == frozenset()
    assert normalize_roles({"role": "mod"}) == {"mod"}
    assert normalize_roles({"roles": ["admin", "mod"]}) == {"admin", "mod"}
    assert normalize_roles({"role": "mod", "roles": ["admin", ""]}) == {"admin", "mod"}
    assert normalize_roles({"role": None, "roles": None}) == frozenset()


def test_identity_from_claims():
    uid = uuid.uuid4()
    ident = identity_from_claims({"sub": str(uid), "type": "access", "roles": ["mod"]})
    assert ident == Identity(uid=uid, roles=frozenset({"mod"}))

    with pytest.raises(Unauthenticated):
        identity_from_claims({"sub": str(uid), "type": "refresh"})
    with pytest.raises(Unauthenticated):
        identity_from_claims({"sub": "not-a-uuid", "type": "access"})


@pytest.mark.asyncio
async def test_require_roles_guard():
    guard = require_roles("mod", "admin")
    mod = Identity(uid=uuid.uuid4(), roles=frozenset({"mod"}))
    assert await guard(identity=mod) is mod

    with pytest.raises(PermissionDenied) as exc:
        await guard(identity=Identity(uid=uuid.uuid4(), roles=frozenset({"skater"})))
    assert exc.value.message == "Access denied. Required roles: mod, admin. User roles: skater"
    assert exc.value.status_code == 403
