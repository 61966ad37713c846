import logging
import pytest
from unittest.mock import MagicMock

from server_helpers.db.retry import check_and_retry, validate_conn_or_fail


class ProbeFailure(Exception):
    pass


@pytest.fixture
def sleep(mocker):
    return mocker.patch("server_helpers.db.retry.time.sleep")


@pytest.mark.parametrize("max_tries", [0, 1, 2, 5])
def test_always_failing_probe_raises_last_failure(max_tries, sleep):
    errors = [ProbeFailure(f"attempt {i}") for i in range(max_tries + 1)]
    probe = MagicMock(side_effect=errors)

    with pytest.raises(ProbeFailure) as exc:
        check_and_retry(probe, max_tries, 3)

    assert probe.call_count == max_tries + 1
    assert exc.value is errors[-1]
    assert sleep.call_count == max_tries


@pytest.mark.parametrize("max_tries,succeed_on", [(0, 1), (2, 1), (2, 2), (2, 3), (4, 3)])
def test_probe_stops_after_first_success(max_tries, succeed_on, sleep):
    effects = [ProbeFailure("down")] * (succeed_on - 1) + [True, True, True]
    probe = MagicMock(side_effect=effects)

    check_and_retry(probe, max_tries, 1)

    assert probe.call_count == succeed_on
    assert sleep.call_count == succeed_on - 1


def test_zero_delay_still_makes_every_attempt():
    probe = MagicMock(side_effect=ProbeFailure("down"))

    with pytest.raises(ProbeFailure):
        check_and_retry(probe, 3, 0)

    assert probe.call_count == 4


def test_waits_between_attempts(sleep):
    probe = MagicMock(side_effect=[ProbeFailure("down"), None])

    check_and_retry(probe, 2, 7)

    sleep.assert_called_once_with(7)


def test_debug_logs_each_wait(sleep, caplog):
    probe = MagicMock(side_effect=ProbeFailure("down"))

    with caplog.at_level(logging.WARNING, logger="server_helpers.db.retry"):
        with pytest.raises(ProbeFailure):
            check_and_retry(probe, 2, 3, debug=True)

    waits = [r for r in caplog.records if "trying again in 3 seconds" in r.getMessage()]
    assert len(waits) == 2


def test_no_wait_logs_without_debug(sleep, caplog):
    probe = MagicMock(side_effect=ProbeFailure("down"))

    with caplog.at_level(logging.WARNING, logger="server_helpers.db.retry"):
        with pytest.raises(ProbeFailure):
            check_and_retry(probe, 2, 3)

    assert not [r for r in caplog.records if "trying again" in r.getMessage()]


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        check_and_retry(MagicMock(), -1, 0)


def test_validate_conn_or_fail_passes_when_probe_recovers(sleep):
    probe = MagicMock(side_effect=[ProbeFailure("down"), None])

    validate_conn_or_fail(probe)

    assert probe.call_count == 2


def test_validate_conn_or_fail_exits_after_default_budget(sleep):
    last = ProbeFailure("still down")
    probe = MagicMock(side_effect=[ProbeFailure("down"), ProbeFailure("down"), last])

    with pytest.raises(SystemExit) as exc:
        validate_conn_or_fail(probe, name="DB connection")

    assert probe.call_count == 3
    assert exc.value.__cause__ is last
    assert "DB connection" in str(exc.value.code)
    sleep.assert_called_with(3)
