from __future__ import annotations

import json

import pytest

from subsync import main as main_module
from subsync.app import UserNotFoundError
from subsync.config import MissingConfigurationError
from subsync.domain.model import User, UserMode
from subsync.domain.reconciliation import ReconciliationResult, ReconciliationStartupError


def test_reconcile_defaults(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_run(**kwargs: object) -> ReconciliationResult:
        captured.update(kwargs)
        return ReconciliationResult(expired_grace_periods=2, synced_subscriptions=3, errors=1)

    monkeypatch.setattr(main_module, "run_reconciliation", fake_run)

    main_module.main(["reconcile"])

    assert captured == {"concurrency": None, "deadline_seconds": None, "grace_mode": None}
    assert json.loads(capsys.readouterr().out) == {
        "expiredGracePeriods": 2,
        "syncedSubscriptions": 3,
        "errors": 1,
    }


def test_reconcile_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_run(**kwargs: object) -> ReconciliationResult:
        captured.update(kwargs)
        return ReconciliationResult()

    monkeypatch.setattr(main_module, "run_reconciliation", fake_run)

    main_module.main(
        [
            "reconcile",
            "--concurrency",
            "4",
            "--deadline-seconds",
            "30.5",
            "--grace-mode",
            "restricted",
        ]
    )

    assert captured == {
        "concurrency": 4,
        "deadline_seconds": 30.5,
        "grace_mode": UserMode.RESTRICTED,
    }


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["reconcile", "--concurrency", "0"],
        ["reconcile", "--concurrency", "many"],
        ["reconcile", "--deadline-seconds", "-5"],
        ["reconcile", "--grace-mode", "PARTIAL"],
        ["user", "set-mode", "--email", "a@example.com"],
    ],
)
def test_invalid_arguments_exit_with_2(
    monkeypatch: pytest.MonkeyPatch,
    argv: list[str],
) -> None:
    def fake_run(**_: object) -> ReconciliationResult:
        raise AssertionError("should not run")

    monkeypatch.setattr(main_module, "run_reconciliation", fake_run)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "error",
    [
        MissingConfigurationError("Missing configuration for: STRIPE_SECRET_KEY"),
        ReconciliationStartupError("Billing provider is unreachable"),
    ],
)
def test_fatal_failures_exit_with_1(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    error: Exception,
) -> None:
    def fake_run(**_: object) -> ReconciliationResult:
        raise error

    monkeypatch.setattr(main_module, "run_reconciliation", fake_run)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["reconcile"])

    assert excinfo.value.code == 1
    assert str(error) in capsys.readouterr().err


def test_per_item_errors_do_not_fail_the_command(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(**_: object) -> ReconciliationResult:
        return ReconciliationResult(synced_subscriptions=5, errors=2)

    monkeypatch.setattr(main_module, "run_reconciliation", fake_run)

    main_module.main(["reconcile"])


def test_user_set_mode(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    calls: list[tuple[str, UserMode]] = []

    def fake_set_mode(email: str, mode: UserMode) -> User:
        calls.append((email, mode))
        return User(email=email, mode=mode)

    monkeypatch.setattr(main_module, "set_user_mode", fake_set_mode)

    main_module.main(["user", "set-mode", "--email", "pat@example.com", "--mode", "full"])

    assert calls == [("pat@example.com", UserMode.FULL)]
    assert "pat@example.com is now FULL" in capsys.readouterr().out


def test_user_set_mode_unknown_user(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_set_mode(email: str, mode: UserMode) -> User:
        _ = mode
        raise UserNotFoundError(email)

    monkeypatch.setattr(main_module, "set_user_mode", fake_set_mode)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["user", "set-mode", "--email", "x@example.com", "--mode", "FULL"])

    assert excinfo.value.code == 1
