import sys
import threading
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from commit_clock.core.github_service import GithubFetchError, PullRequest, PullRequestSummary
from commit_clock.core.pr_poller import ConnectionStatus, PrOverlayState, PrPoller


class FakeService:
    """Returns (or raises) queued outcomes; optionally blocks until released"""

    def __init__(self, outcomes, gate=None):
        self.outcomes = list(outcomes)
        self.gate = gate
        self.calls = 0
        self.closed = False

    def fetch(self):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


def _summary(count):
    return PullRequestSummary(count, [PullRequest(f"PR #{count}", f"https://github.com/o/r/pull/{count}")])


class PrPollerTests(unittest.TestCase):
    def _poller(self, service, token='token', interval=300):
        self.tokens = [token]
        self.built = []

        def factory(tok):
            self.built.append(tok)
            return service

        return PrPoller(lambda: self.tokens[-1], factory, interval=interval, monotonic=lambda: 0.0)

    def _fetch(self, poller, now):
        self.assertTrue(poller.poll_due(now))
        poller.join(5)
        self.assertTrue(poller.drain())

    def test_success_updates_count_and_titles(self):
        poller = self._poller(FakeService([_summary(4)]))
        self.assertTrue(poller.start())
        self.assertEqual(poller.state.label, 'PR ?')

        self._fetch(poller, now=0.0)

        state = poller.state
        self.assertEqual(state.count, 4)
        self.assertEqual(state.label, 'PR 4')
        self.assertEqual(state.status, ConnectionStatus.CONNECTED)
        self.assertEqual(state.pull_requests[0].title, 'PR #4')
        self.assertIsNotNone(state.fetched_at)
        self.assertFalse(state.in_flight)

    def test_failure_then_success(self):
        poller = self._poller(FakeService([GithubFetchError("offline"), _summary(2)]), interval=10)
        poller.start()

        self._fetch(poller, now=0.0)
        self.assertIsNone(poller.state.count)
        self.assertEqual(poller.state.label, 'PR ?')
        self.assertEqual(poller.state.status, ConnectionStatus.DISCONNECTED)
        self.assertEqual(poller.state.last_error, "offline")

        # no retry before the interval elapses
        self.assertFalse(poller.poll_due(5.0))

        self._fetch(poller, now=10.0)
        self.assertEqual(poller.state.count, 2)
        self.assertIsNone(poller.state.last_error)

    def test_unexpected_errors_are_reported_as_failures(self):
        poller = self._poller(FakeService([RuntimeError("boom")]))
        poller.start()
        self._fetch(poller, now=0.0)
        self.assertEqual(poller.state.status, ConnectionStatus.DISCONNECTED)
        self.assertEqual(poller.state.last_error, "boom")

    def test_only_one_fetch_in_flight(self):
        gate = threading.Event()
        service = FakeService([_summary(1), _summary(9)], gate=gate)
        poller = self._poller(service, interval=1)
        poller.start()

        self.assertTrue(poller.poll_due(0.0))
        self.assertTrue(poller.state.in_flight)
        self.assertFalse(poller.poll_due(100.0))
        self.assertFalse(poller.request_refresh(100.0))

        gate.set()
        poller.join(5)
        poller.drain()
        self.assertEqual(service.calls, 1)
        self.assertEqual(poller.state.count, 1)
        self.assertFalse(poller.state.in_flight)

    def test_drain_without_results(self):
        poller = self._poller(FakeService([]))
        poller.start()
        self.assertFalse(poller.drain())

    def test_refresh_fetches_immediately(self):
        poller = self._poller(FakeService([_summary(1), _summary(3)]))
        poller.start()
        self._fetch(poller, now=0.0)

        self.assertFalse(poller.poll_due(1.0))
        self.assertTrue(poller.request_refresh(1.0))
        poller.join(5)
        poller.drain()
        self.assertEqual(poller.state.count, 3)

    def test_refresh_rereads_token(self):
        poller = self._poller(FakeService([_summary(1)]))
        poller.start()
        self.tokens.append('rotated')
        self.assertTrue(poller.request_refresh(0.0))
        poller.join(5)
        self.assertEqual(self.built, ['token', 'rotated'])

    def test_no_token_disables_overlay(self):
        service = FakeService([_summary(1)])
        poller = self._poller(service, token=None)
        self.assertFalse(poller.start())
        self.assertFalse(poller.state.enabled)
        self.assertEqual(poller.state.label, '')
        self.assertFalse(poller.poll_due(0.0))
        self.assertFalse(poller.request_refresh(0.0))
        self.assertEqual(service.calls, 0)
        self.assertEqual(self.built, [])

    def test_result_after_token_removed_is_ignored(self):
        poller = self._poller(FakeService([_summary(6)]))
        poller.start()
        self.assertTrue(poller.poll_due(0.0))
        poller.join(5)

        self.tokens.append(None)
        poller.request_refresh(1.0)
        poller.drain()
        self.assertFalse(poller.state.in_flight)
        self.assertIsNone(poller.state.count)


class ServiceLifetimeTests(unittest.TestCase):
    def setUp(self):
        self.tokens = ["first"]
        self.services = {}

    def _factory(self, token):
        self.services[token] = FakeService([_summary(len(self.services) + 1)], gate=self.gate)
        return self.services[token]

    def _poller(self, gate=None):
        self.gate = gate
        poller = PrPoller(lambda: self.tokens[-1], self._factory, monotonic=lambda: 0.0)
        poller.start()
        return poller

    def test_rotated_token_closes_idle_service(self):
        poller = self._poller()
        self.tokens.append("second")
        poller.request_refresh(0.0)
        poller.join(5)
        poller.drain()

        self.assertTrue(self.services["first"].closed)
        self.assertFalse(self.services["second"].closed)
        poller.stop()
        self.assertTrue(self.services["second"].closed)

    def test_service_in_use_is_closed_after_its_result(self):
        gate = threading.Event()
        poller = self._poller(gate)
        self.assertTrue(poller.poll_due(0.0))

        self.tokens.append(None)
        poller.request_refresh(1.0)
        self.assertFalse(self.services["first"].closed)

        gate.set()
        poller.join(5)
        poller.drain()
        self.assertTrue(self.services["first"].closed)


class PrOverlayStateTests(unittest.TestCase):
    def test_label(self):
        self.assertEqual(PrOverlayState().label, '')
        self.assertEqual(PrOverlayState(enabled=True).label, 'PR ?')
        self.assertEqual(PrOverlayState(enabled=True, count=0).label, 'PR 0')


if __name__ == "__main__":
    unittest.main()
