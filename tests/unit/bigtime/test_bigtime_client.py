"""Tests for autotime/bigtime/client.py (HTTP faked with httpx.MockTransport)."""

import json
from datetime import date

import httpx
import pytest

from autotime.bigtime.client import BigTimeClient
from autotime.errors import BigTimeAPIError, ConfigurationError
from autotime.generation.models import TimeEntry

BASE = "https://bigtime.test/api/v2"


def make_client(handler) -> BigTimeClient:
    return BigTimeClient("dev@example.com", "hunter2", base_url=BASE, transport=httpx.MockTransport(handler))


def session_ok(request: httpx.Request) -> httpx.Response | None:
    if request.url.path.endswith("/session"):
        return httpx.Response(200, json={"token": "tok-1", "firm": "firm-9", "staffsid": 42})
    return None


class TestFromEnv:
    def test_reads_credentials(self):
        client = BigTimeClient.from_env(environ={"BIGTIME_USERNAME": "u", "BIGTIME_PASSWORD": "p"})
        assert isinstance(client, BigTimeClient)

    def test_missing_username(self):
        with pytest.raises(ConfigurationError, match="BIGTIME_USERNAME"):
            BigTimeClient.from_env(environ={"BIGTIME_PASSWORD": "p"})

    def test_missing_password(self):
        with pytest.raises(ConfigurationError, match="BIGTIME_PASSWORD"):
            BigTimeClient.from_env(environ={"BIGTIME_USERNAME": "u"})


class TestSession:
    @pytest.mark.asyncio
    async def test_create_session_sends_credentials(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return session_ok(request)

        async with make_client(handler) as client:
            data = await client.create_session()

        assert seen["body"] == {"UserId": "dev@example.com", "Pwd": "hunter2"}
        assert data["token"] == "tok-1"
        assert client.staff_sid == 42
        assert client.has_session

    @pytest.mark.asyncio
    async def test_session_without_token_fails(self):
        def handler(request):
            return httpx.Response(200, json={"firm": "firm-9"})

        async with make_client(handler) as client:
            with pytest.raises(BigTimeAPIError):
                await client.create_session()

    @pytest.mark.asyncio
    async def test_bad_credentials(self):
        def handler(request):
            return httpx.Response(401, text="invalid login")

        async with make_client(handler) as client:
            with pytest.raises(BigTimeAPIError) as excinfo:
                await client.create_session()

        assert excinfo.value.status_code == 401
        assert excinfo.value.body == "invalid login"

    @pytest.mark.asyncio
    async def test_calls_require_session(self):
        async with make_client(lambda request: httpx.Response(200, json=[])) as client:
            with pytest.raises(BigTimeAPIError, match="create_session"):
                await client.get_time_sheet_range(date(2024, 3, 1))


class TestTimeSheetRange:
    @pytest.mark.asyncio
    async def test_fetch_range_with_session_headers(self):
        seen = {}
        records = [{"ProjectSID": 1, "ProjectNm": "A", "Dt": "2024-03-01", "Hours_IN": 2}]

        def handler(request):
            response = session_ok(request)
            if response is not None:
                return response
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["token"] = request.headers.get("X-Auth-Token")
            seen["realm"] = request.headers.get("X-Auth-Realm")
            return httpx.Response(200, json=records)

        async with make_client(handler) as client:
            await client.create_session()
            result = await client.get_time_sheet_range(date(2024, 3, 1), date(2024, 3, 5))

        assert result == records
        assert seen["path"].endswith("/time/Sheet/42")
        assert seen["params"] == {"StartDt": "2024-03-01", "EndDt": "2024-03-05", "View": "Detailed"}
        assert seen["token"] == "tok-1"
        assert seen["realm"] == "firm-9"

    @pytest.mark.asyncio
    async def test_open_ended_range(self):
        seen = {}

        def handler(request):
            response = session_ok(request)
            if response is not None:
                return response
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[])

        async with make_client(handler) as client:
            await client.create_session()
            assert await client.get_time_sheet_range(date(2024, 1, 1)) == []

        assert "EndDt" not in seen["params"]

    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request):
            response = session_ok(request)
            return response if response is not None else httpx.Response(503, text="maintenance")

        async with make_client(handler) as client:
            await client.create_session()
            with pytest.raises(BigTimeAPIError) as excinfo:
                await client.get_time_sheet_range(date(2024, 3, 1))

        assert excinfo.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            response = session_ok(request)
            if response is not None:
                return response
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            await client.create_session()
            with pytest.raises(BigTimeAPIError, match="request error"):
                await client.get_time_sheet_range(date(2024, 3, 1))

    @pytest.mark.asyncio
    async def test_non_list_payload(self):
        def handler(request):
            response = session_ok(request)
            return response if response is not None else httpx.Response(200, json={"error": "nope"})

        async with make_client(handler) as client:
            await client.create_session()
            with pytest.raises(BigTimeAPIError):
                await client.get_time_sheet_range(date(2024, 3, 1))


class TestCreateTimeEntry:
    @pytest.mark.asyncio
    async def test_payload(self):
        seen = {}

        def handler(request):
            response = session_ok(request)
            if response is not None:
                return response
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"SID": 1001})

        entry = TimeEntry(
            date=date(2024, 3, 8),
            project_id=555,
            project_name="Acme:Platform",
            client_name="Acme Corp",
            client_id=900,
            hours=2.75,
        )

        async with make_client(handler) as client:
            await client.create_session()
            result = await client.create_time_entry(entry, budget_category_id=129171)

        assert result == {"SID": 1001}
        assert seen["method"] == "POST"
        assert seen["path"].endswith("/time")
        assert seen["body"] == {
            "Dt": "2024-03-08",
            "ProjectSID": 555,
            "BudgCatID": 129171,
            "Hours_IN": 2.75,
            "StaffSID": 42,
        }
