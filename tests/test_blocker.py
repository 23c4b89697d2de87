import time

import pytest

from website_blocker.blocker import WebsiteBlocker
from website_blocker.errors import InvalidFormatError, PermissionDeniedError, SyncError
from website_blocker.hosts_manager import BLOCK_END, BLOCK_START, HostsManager
from website_blocker.state_store import StateStore

NOW = 1_700_000_000.0
BASE_HOSTS = "127.0.0.1 localhost\n"


class FakeGate:
    def __init__(self, allowed=True):
        self.allowed = allowed
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.allowed


@pytest.fixture
def hosts_file(tmp_path):
    path = tmp_path / "hosts"
    path.write_text(BASE_HOSTS)
    return path


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "data" / "blocked_sites.json"


@pytest.fixture
def gate():
    return FakeGate()


@pytest.fixture
def blocker(hosts_file, state_path, gate):
    store = StateStore(state_path)
    return WebsiteBlocker(store, HostsManager(hosts_file, flush_dns_cache=False), gate)


def region_lines(path):
    lines = path.read_text().splitlines()
    return lines[lines.index(BLOCK_START) + 1:lines.index(BLOCK_END)]


def test_add_permanent_site_persists(blocker, state_path):
    result = blocker.add_site("https://www.Example.com/page")
    assert result.ok
    assert result.message == "Site example.com blocked permanently"
    assert StateStore.load(state_path).permanent_sites == {"example.com"}


def test_add_site_with_duration(blocker, state_path):
    result = blocker.add_site("example.com", "2h", now=NOW)
    assert result.ok
    assert "blocked until" in result.message
    assert StateStore.load(state_path).timed_sites == {"example.com": NOW + 7200}


def test_add_site_unparsable_duration_is_permanent(blocker):
    assert blocker.add_site("example.com", "soon").ok
    assert blocker.store.permanent_sites == {"example.com"}


def test_add_invalid_site_changes_nothing(blocker, hosts_file, state_path, gate):
    result = blocker.add_site("exa mple.com")
    assert not result.ok
    assert isinstance(result.error, InvalidFormatError)
    assert result.message.startswith("Invalid URL:")
    assert blocker.store.blocked_domains() == []
    assert not state_path.exists()
    assert hosts_file.read_text() == BASE_HOSTS
    assert gate.calls == 0


def test_add_timed_on_permanent_site_is_refused(blocker):
    blocker.add_site("example.com")
    result = blocker.add_site("example.com", "1h")
    assert not result.ok
    assert "already blocked permanently" in result.message


def test_enable_with_two_sites_writes_sixteen_lines(blocker, hosts_file):
    blocker.add_site("example.com")
    blocker.add_site("other.org")
    assert BLOCK_START not in hosts_file.read_text()

    result = blocker.toggle_blocking()
    assert result.ok
    assert result.message == "Blocking enabled"
    assert len(region_lines(hosts_file)) == 16


def test_disable_cleans_hosts_file(blocker, hosts_file):
    blocker.add_site("example.com")
    blocker.toggle_blocking()
    result = blocker.toggle_blocking()
    assert result.ok
    assert result.message == "Blocking disabled and hosts file cleaned"
    content = hosts_file.read_text()
    assert BLOCK_START not in content and BLOCK_END not in content
    assert "example.com" not in content


def test_remove_site_updates_hosts(blocker, hosts_file, state_path):
    blocker.add_site("example.com")
    blocker.add_site("timed.com", "1d")
    blocker.toggle_blocking()

    assert blocker.remove_site("timed.com").ok
    assert "timed.com" not in hosts_file.read_text()
    assert len(region_lines(hosts_file)) == 8
    assert StateStore.load(state_path).timed_sites == {}


def test_remove_unknown_site(blocker):
    result = blocker.remove_site("nothing.com")
    assert not result.ok
    assert result.message == "Site nothing.com is not blocked"


@pytest.mark.parametrize(
    "action",
    [
        lambda b: b.toggle_blocking(),
        lambda b: b.add_site("new.com"),
        lambda b: b.remove_site("example.com"),
        lambda b: b.sync(),
    ],
)
def test_permission_denied_changes_nothing(blocker, hosts_file, state_path, gate, action):
    blocker.add_site("example.com")
    blocker.toggle_blocking()
    hosts_before = hosts_file.read_text()
    state_before = state_path.read_text()
    gate.allowed = False

    result = action(blocker)

    assert not result.ok
    assert isinstance(result.error, PermissionDeniedError)
    assert "Insufficient permissions" in result.message
    assert blocker.store.permanent_sites == {"example.com"}
    assert blocker.store.is_blocking_enabled is True
    assert hosts_file.read_text() == hosts_before
    assert state_path.read_text() == state_before


def test_expire_due_lifts_lapsed_blocks(blocker, hosts_file, state_path):
    now = time.time()
    blocker.add_site("example.com", "60s", now=now)
    blocker.toggle_blocking()
    assert blocker.expire_due(now + 30) is None

    result = blocker.expire_due(now + 60)
    assert result.ok
    assert result.message == "Expired blocks removed"
    assert "example.com" not in hosts_file.read_text()
    assert StateStore.load(state_path).timed_sites == {}


def test_sync_failure_keeps_memory_state(blocker, hosts_file):
    hosts_file.unlink()
    result = blocker.add_site("example.com")
    assert not result.ok
    assert isinstance(result.error, SyncError)
    assert result.message.startswith("Error: Failed to back up hosts file")
    # Not rolled back; a later sync reconciles.
    assert blocker.store.permanent_sites == {"example.com"}

    hosts_file.write_text(BASE_HOSTS)
    assert blocker.sync().ok


def test_add_site_with_huge_duration_blocks_permanently(blocker, state_path):
    result = blocker.add_site("example.com", "99999999999999999d")
    assert result.ok
    assert result.message == "Site example.com blocked permanently"
    assert StateStore.load(state_path).permanent_sites == {"example.com"}


def test_expire_due_pauses_after_permission_denial(blocker, hosts_file, gate):
    now = time.time()
    blocker.add_site("example.com", "60s", now=now)
    blocker.toggle_blocking()
    gate.allowed = False
    calls = gate.calls

    result = blocker.expire_due(now + 60)
    assert not result.ok
    assert isinstance(result.error, PermissionDeniedError)
    assert blocker.expire_due(now + 61) is None
    assert blocker.expire_due(now + 62) is None
    assert gate.calls == calls + 1
    assert "example.com" in hosts_file.read_text()

    # A permitted user action resumes expiry handling.
    gate.allowed = True
    assert blocker.sync(now + 63).ok
    assert "example.com" not in hosts_file.read_text()
    blocker.store.add_timed("later.com", now + 100)
    assert blocker.expire_due(now + 100).ok
