import pytest

from catalog_site import schemas
from catalog_site.core.errors import AuthorizationError
from catalog_site.core.permissions import ProtectedAccount, can_manage_account, ensure_can_manage_account

ROOT = schemas.User(id=1, username="root", password="x", role="super_admin")
GUARDED = schemas.User(id=2, username="guarded", password="x", role="super_admin")
EDITOR = schemas.User(id=3, username="editor", password="x", role="manager")


@pytest.fixture()
def protected():
    return ProtectedAccount(user_id=2, username="guarded")


def test_super_admin_may_manage_ordinary_accounts(protected):
    assert can_manage_account(ROOT, protected, target_id=3)
    assert can_manage_account(ROOT, protected, target_username="newcomer")


def test_other_super_admin_cannot_touch_protected_account(protected):
    assert not can_manage_account(ROOT, protected, target_id=2)
    assert not can_manage_account(ROOT, protected, target_username="guarded")


def test_protected_account_may_manage_itself(protected):
    assert can_manage_account(GUARDED, protected, target_id=2)
    assert can_manage_account(GUARDED, protected, target_username="guarded")


def test_manager_is_never_allowed(protected):
    assert not can_manage_account(EDITOR, protected, target_id=3)


def test_protection_by_username_only():
    protected = ProtectedAccount(username="guarded")
    assert can_manage_account(ROOT, protected, target_id=2)
    assert not can_manage_account(ROOT, protected, target_username="guarded")


def test_no_protected_account_configured():
    assert can_manage_account(ROOT, ProtectedAccount(), target_id=2, target_username="guarded")


def test_ensure_raises_authorization_error(protected):
    with pytest.raises(AuthorizationError) as denied:
        ensure_can_manage_account(ROOT, protected, target_id=2)
    assert denied.value.status_code == 403
    assert denied.value.message == "Cannot modify super admin account"
