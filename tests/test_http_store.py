"""
Tests for the HTTP store gateway, driven against the app in-process
"""
import httpx
import pytest

from enigma import state
from enigma.core.access import register_or_join_team, validate_access_code
from enigma.core.http_store import HttpStore
from enigma.core.sync import GroupSynchronizer, SyncState
from enigma.errors import TransientStoreError
from enigma.main import app
from enigma.models import SessionDescriptor, SubmissionOutcome


@pytest.fixture
def http_store(store):
    state.STORE = store
    yield HttpStore(base_url="http://enigma.test", transport=httpx.ASGITransport(app=app))
    state.STORE = None


@pytest.mark.asyncio
async def test_access_and_registration_over_http(http_store):
    """Resolver works unchanged over the HTTP gateway"""
    async with http_store:
        assert not (await validate_access_code(http_store, "NOPE")).valid
        first = await register_or_join_team(http_store, "BSIT3A", "Alpha", ["Bo"])
        second = await register_or_join_team(http_store, "BSIT3A", "Alpha", ["Cy"])
        assert first.team_id == second.team_id

        team = await http_store.get_team(first.team_id)
        assert team.members == ["Bo", "Cy"]
        assert await http_store.get_team("missing") is None
        assert await http_store.find_team("BSIT3A", "Nobody") is None
        assert len(await http_store.list_teams()) == 1


@pytest.mark.asyncio
async def test_questions_over_http(http_store):
    """Questions, verification and hints round-trip"""
    async with http_store:
        questions = await http_store.list_active_questions()
        assert len(questions) == 20
        assert all(q.answer is None for q in questions)
        assert (await http_store.get_question("e01")).prompt == "easy 1"
        assert await http_store.get_question("zzz") is None
        assert await http_store.check_answer("e01", "EASY1")
        assert not await http_store.check_answer("e01", "no")
        assert not await http_store.check_answer("zzz", "no")
        assert await http_store.get_hint("e01", 2) == "third"
        assert await http_store.get_hint("h01", 0) is None
        assert await http_store.validate_admin_credentials("admin", "changeme")
        assert not await http_store.validate_admin_credentials("admin", "")


@pytest.mark.asyncio
async def test_update_rejects_immutable_fields(http_store):
    """Immutable fields are refused before any request is sent"""
    async with http_store:
        reg = await register_or_join_team(http_store, "BSIT3A", "Alpha", ["Bo"])
        with pytest.raises(ValueError):
            await http_store.update_team(reg.team_id, {"question_seed": 7})


@pytest.mark.asyncio
async def test_game_over_http(http_store, clock):
    """Full submit flow through the gateway"""
    async with http_store:
        reg = await register_or_join_team(http_store, "BSIT3A", "Alpha", ["Bo"])
        descriptor = SessionDescriptor(team_id=reg.team_id, member_display_name="Bo",
                                       section="BSIT-3A", access_code="BSIT3A", team_name="Alpha")
        sync = GroupSynchronizer(http_store, descriptor, clock=clock)
        await sync.initialize()
        assert sync.state is SyncState.ACTIVE

        result = await sync.submit_answer("m02", "Medium2")
        assert result.outcome is SubmissionOutcome.CORRECT
        assert (await http_store.get_team(reg.team_id)).points == 100

        await sync.end_game_early()
        board = await sync.final_leaderboard()
        assert [(e.team_name, e.points) for e in board] == [("Alpha", 100)]


class FailingTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request):
        raise httpx.ConnectError("connection refused", request=request)


class ErrorTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request):
        return httpx.Response(503, request=request)


@pytest.mark.asyncio
async def test_transport_errors_are_transient():
    """Network failures surface as TransientStoreError"""
    async with HttpStore(base_url="http://enigma.test", transport=FailingTransport()) as store:
        with pytest.raises(TransientStoreError):
            await store.get_team("abc")


@pytest.mark.asyncio
async def test_server_errors_are_transient():
    """5xx responses surface as TransientStoreError"""
    async with HttpStore(base_url="http://enigma.test", transport=ErrorTransport()) as store:
        with pytest.raises(TransientStoreError):
            await store.list_active_questions()


class StatusTransport(httpx.AsyncBaseTransport):
    def __init__(self, status_code):
        self.status_code = status_code

    async def handle_async_request(self, request):
        return httpx.Response(self.status_code, request=request)


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [408, 429])
async def test_rate_limit_and_timeout_are_transient(status_code):
    """408 and 429 are retryable like a 5xx"""
    async with HttpStore(base_url="http://enigma.test", transport=StatusTransport(status_code)) as store:
        with pytest.raises(TransientStoreError):
            await store.get_team("abc")


@pytest.mark.asyncio
async def test_client_errors_are_not_transient():
    """Other 4xx responses are the caller's mistake"""
    async with HttpStore(base_url="http://enigma.test", transport=StatusTransport(400)) as store:
        with pytest.raises(ValueError):
            await store.get_team("abc")
