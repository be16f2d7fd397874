"""BDD tests for failed-login lockout."""

from datetime import UTC, datetime, timedelta

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.identity.user.authentication import AuthenticateUser, LoginOutcome
from storefront.identity.user.user import User

scenarios("features/lockout.feature")


def _user(email):
    return current_domain.repository_for(User).find_by_email(email)


def _login(email, password):
    return current_domain.process(AuthenticateUser(email=email, password=password), asynchronous=False)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a registered user "{email}" with password "{password}"'),
    target_fixture="email",
)
def registered_user(make_user, email, password):
    make_user(name="Jane", email=email, password=password)
    return email


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the wrong password is tried {times:d} time"))
@when(parsers.cfparse("the wrong password is tried {times:d} times"))
def wrong_password(email, times):
    for _ in range(times):
        _login(email, "not-the-password")


@when(parsers.cfparse('logging in with "{password}" succeeds'))
def successful_login(email, password):
    assert _login(email, password)["outcome"] == LoginOutcome.SUCCESS.value


@when("the lock runs out")
def lock_runs_out(email):
    repo = current_domain.repository_for(User)
    user = repo.find_by_email(email)
    user.lock_until = datetime.now(UTC) - timedelta(minutes=1)
    repo.add(user)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the account is locked")
def account_locked(email):
    assert _user(email).is_locked() is True


@then("the account is not locked")
def account_not_locked(email):
    assert _user(email).is_locked() is False


@then(parsers.cfparse("the failed attempt count is {count:d}"))
def attempt_count(email, count):
    assert _user(email).login_attempts == count


@then(parsers.cfparse('logging in with "{password}" reports "{outcome}"'))
def login_reports(email, password, outcome):
    assert _login(email, password)["outcome"] == outcome
