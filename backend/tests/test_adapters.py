"""
Tests for gym platform adapters.

Covers the shared filters, native record mapping, the sample data sources,
the HTTP clients and the adapter factory.
"""

from datetime import date, datetime, timedelta, timezone

import httpx
import pytest

from conftest import make_member, make_visit
from app.core.config import Settings
from app.core.interfaces.gym_software import FetchOptions
from app.integrations.base import (
    AdapterConfigError,
    as_utc,
    filter_members,
    filter_visits,
    parse_iso_date,
    parse_iso_datetime,
)
from app.integrations.glofox import (
    GlofoxAdapter,
    GlofoxAPIError,
    GlofoxClient,
    GlofoxSampleDataSource,
)
from app.integrations.glofox.client import pick_list
from app.integrations.glofox.processors import process_glofox_member, process_glofox_visit
from app.integrations.mindbody import (
    MindbodyAdapter,
    MindbodyAPIError,
    MindbodyClient,
    MindbodySampleDataSource,
    generate_sample_mindbody_data,
)
from app.integrations.mindbody.processors import (
    map_client_status,
    process_mindbody_client,
    process_mindbody_visit,
)
from app.models.integration import ExternalMemberStatus, VisitType
from app.services import adapter_factory
from app.services.adapter_factory import (
    UnknownProviderError,
    build_gym_adapter,
    clear_adapter_cache,
    get_gym_adapter,
)

TODAY = date(2024, 6, 1)


def _mindbody_client(client_id=1000, **overrides):
    record = {
        "Id": client_id,
        "UniqueId": client_id,
        "FirstName": "Sarah",
        "LastName": "Johnson",
        "Email": "sarah@example.com",
        "MobilePhone": "+441234567890",
        "CreationDate": "2023-01-15T00:00:00",
        "LastVisitDate": "2024-05-30",
        "LastModifiedDateTime": "2024-05-31T10:00:00Z",
        "Status": "Active",
    }
    record.update(overrides)
    return record


def _mock_transport_client(client, handler):
    """Swaps the client's httpx transport for a MockTransport."""
    client._client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        headers=client._client.headers,
    )
    return client


class TestTimeHelpers:
    """Tests for timestamp normalization."""

    def test_as_utc_from_date(self):
        """Test that dates become midnight UTC."""
        assert as_utc(date(2024, 1, 5)) == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_as_utc_naive_assumed_utc(self):
        """Test that naive datetimes are treated as UTC."""
        assert as_utc(datetime(2024, 1, 5, 12)).tzinfo == timezone.utc

    def test_parse_iso_datetime_with_z(self):
        """Test the trailing Z form."""
        parsed = parse_iso_datetime("2024-05-31T10:00:00Z")
        assert parsed == datetime(2024, 5, 31, 10, tzinfo=timezone.utc)

    def test_parse_invalid_returns_none(self):
        """Test that garbage yields None instead of raising."""
        assert parse_iso_datetime("not a date") is None
        assert parse_iso_date("") is None

    def test_parse_iso_date_from_datetime_string(self):
        """Test that datetime strings are cut to the date."""
        assert parse_iso_date("2024-01-15T07:00:00") == date(2024, 1, 15)


class TestFilters:
    """Tests for the shared since/limit/offset semantics."""

    def test_since_is_inclusive_on_updated_at(self):
        """Test that a member updated exactly at `since` is kept."""
        cutoff = datetime(2024, 3, 1, tzinfo=timezone.utc)
        members = [
            make_member("A", metadata={"updated_at": cutoff - timedelta(seconds=1)}),
            make_member("B", metadata={"updated_at": cutoff}),
        ]

        result = filter_members(members, FetchOptions(since=cutoff))

        assert [m.external_id for m in result] == ["B"]

    def test_since_falls_back_to_joined_date(self):
        """Test that members without updated_at are filtered on joined date."""
        members = [
            make_member("OLD", joined_date=date(2024, 1, 1)),
            make_member("NEW", joined_date=date(2024, 3, 1)),
        ]

        result = filter_members(members, FetchOptions(since=datetime(2024, 3, 1)))

        assert [m.external_id for m in result] == ["NEW"]

    def test_offset_and_limit_after_filtering(self):
        """Test that pagination applies to the filtered list."""
        members = [make_member(f"M-{i}", joined_date=date(2024, 1, i + 1)) for i in range(6)]

        result = filter_members(
            members,
            FetchOptions(since=datetime(2024, 1, 3), offset=1, limit=2),
        )

        assert [m.external_id for m in result] == ["M-3", "M-4"]

    def test_visits_filtered_on_visit_date(self):
        """Test that visits use their date for `since`."""
        visits = [
            make_visit("V-1", "X", date(2024, 1, 4)),
            make_visit("V-2", "X", date(2024, 1, 5)),
        ]

        result = filter_visits(visits, FetchOptions(since=datetime(2024, 1, 5)))

        assert [v.external_id for v in result] == ["V-2"]

    def test_no_options_returns_everything(self):
        """Test that None options means no filtering."""
        members = [make_member("A"), make_member("B")]
        assert len(filter_members(members, None)) == 2


class TestMindbodyProcessors:
    """Tests for Mindbody record mapping."""

    def test_process_client(self):
        """Test mapping of a full client record."""
        member = process_mindbody_client(_mindbody_client())

        assert member.external_id == "MB-1000"
        assert member.first_name == "Sarah"
        assert member.phone == "+441234567890"
        assert member.joined_date == date(2023, 1, 15)
        assert member.last_visit_date == date(2024, 5, 30)
        assert member.status == ExternalMemberStatus.ACTIVE
        assert member.updated_at == datetime(2024, 5, 31, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw, expected", [
        ("Active", ExternalMemberStatus.ACTIVE),
        ("On Hold", ExternalMemberStatus.SUSPENDED),
        ("Terminated", ExternalMemberStatus.CANCELLED),
        ("Expired", ExternalMemberStatus.CANCELLED),
        ("Non-Member", ExternalMemberStatus.INACTIVE),
        ("Something New", ExternalMemberStatus.ACTIVE),
        (None, ExternalMemberStatus.ACTIVE),
    ])
    def test_status_mapping(self, raw, expected):
        """Test Mindbody status vocabulary."""
        assert map_client_status(raw) == expected

    def test_client_without_creation_date_rejected(self):
        """Test that a client without a join date cannot be mapped."""
        with pytest.raises(ValueError):
            process_mindbody_client(_mindbody_client(CreationDate=None))

    def test_visit_types(self):
        """Test appointment/class/plain visit detection."""
        base = {"Id": 1, "ClientId": "1000", "StartDateTime": "2024-01-05T07:00:00"}

        assert process_mindbody_visit({**base, "AppointmentId": 9}).visit_type == VisitType.APPOINTMENT
        assert process_mindbody_visit({**base, "ClassId": 101}).visit_type == VisitType.CLASS
        plain = process_mindbody_visit(base)
        assert plain.visit_type == VisitType.VISIT
        assert plain.external_id == "MB-VISIT-1"
        assert plain.member_external_id == "MB-1000"
        assert plain.visit_date == date(2024, 1, 5)


@pytest.mark.asyncio
class TestMindbodyAdapter:
    """Tests for the Mindbody adapter on sample data."""

    async def test_sample_data_is_deterministic(self):
        """Test that the same seed yields the same snapshot."""
        first = generate_sample_mindbody_data(seed=7, today=TODAY)
        second = generate_sample_mindbody_data(seed=7, today=TODAY)

        assert first == second
        assert len(first[0]) == 20

    async def test_fetch_members_offline(self):
        """Test fetching generated members through the adapter."""
        adapter = MindbodyAdapter(MindbodySampleDataSource(seed=1, today=TODAY), offline_mode=True)

        members = await adapter.fetch_members()

        assert adapter.get_name() == "Mindbody"
        assert len(members) == 20
        assert all(m.external_id.startswith("MB-") for m in members)

    async def test_visits_belong_to_members(self):
        """Test that every sample visit references a generated member."""
        adapter = MindbodyAdapter(MindbodySampleDataSource(seed=3, today=TODAY), offline_mode=True)

        member_ids = {m.external_id for m in await adapter.fetch_members()}
        visits = await adapter.fetch_all_visits()

        assert visits
        assert {v.member_external_id for v in visits} <= member_ids

    async def test_fetch_member_visits_only_for_that_member(self):
        """Test per-member visit fetching."""
        source = MindbodySampleDataSource(
            clients=[_mindbody_client(1), _mindbody_client(2)],
            visits=[
                {"Id": 10, "ClientId": "1", "StartDateTime": "2024-01-05T07:00:00"},
                {"Id": 11, "ClientId": "2", "StartDateTime": "2024-01-06T07:00:00"},
                {"Id": 12, "ClientId": "1", "StartDateTime": "2024-01-07T07:00:00"},
            ],
        )
        adapter = MindbodyAdapter(source, offline_mode=True)

        visits = await adapter.fetch_member_visits("MB-1", FetchOptions(limit=1))

        assert [v.external_id for v in visits] == ["MB-VISIT-10"]

    async def test_malformed_records_skipped(self):
        """Test that a bad native record is dropped instead of failing the fetch."""
        source = MindbodySampleDataSource(
            clients=[_mindbody_client(1), {"FirstName": "No id"}],
            visits=[],
        )
        adapter = MindbodyAdapter(source, offline_mode=True)

        members = await adapter.fetch_members()

        assert [m.external_id for m in members] == ["MB-1"]

    async def test_connection_requires_credentials_outside_offline_mode(self):
        """Test the connectivity check rules."""
        source = MindbodySampleDataSource(clients=[], visits=[])

        assert await MindbodyAdapter(source).test_connection() is False
        assert await MindbodyAdapter(source, credentials_configured=True).test_connection() is True
        assert await MindbodyAdapter(source, offline_mode=True).test_connection() is True


class TestGlofoxProcessors:
    """Tests for Glofox record mapping."""

    def test_process_member(self):
        """Test mapping of a Glofox member with a combined name field."""
        member = process_glofox_member({
            "_id": "abc-123",
            "name": "Jessica White",
            "email": "jess@example.com",
            "join_date": "2023-02-01",
            "last_check_in": "2024-05-20",
            "status": "PAUSED",
            "updated_at": "2024-05-21T08:00:00Z",
        })

        assert member.external_id == "GF-abc-123"
        assert (member.first_name, member.last_name) == ("Jessica", "White")
        assert member.status == ExternalMemberStatus.SUSPENDED
        assert member.last_visit_date == date(2024, 5, 20)

    def test_canceled_spelling(self):
        """Test that both spellings of cancelled are recognised."""
        record = {"_id": "1", "join_date": "2023-02-01", "status": "canceled"}
        assert process_glofox_member(record).status == ExternalMemberStatus.CANCELLED

    def test_attendance_is_check_in(self):
        """Test that a plain attendance maps to a check-in."""
        visit = process_glofox_visit({"_id": "v1", "member_id": "abc", "date": "2024-01-05"})

        assert visit.external_id == "GF-CHECKIN-v1"
        assert visit.member_external_id == "GF-abc"
        assert visit.visit_type == VisitType.CHECK_IN

    def test_booking_is_class(self):
        """Test that bookings map to class visits."""
        visit = process_glofox_visit({
            "_id": "b1",
            "member_id": "GF-abc",
            "timestamp": "2024-01-05T18:00:00Z",
            "record_kind": "booking",
        })

        assert visit.external_id == "GF-BOOKING-b1"
        assert visit.member_external_id == "GF-abc"
        assert visit.visit_type == VisitType.CLASS

    def test_pick_list_variants(self):
        """Test list extraction from the different response shapes."""
        assert pick_list([{"a": 1}], ["data"]) == [{"a": 1}]
        assert pick_list({"members": [{"a": 1}]}, ["data", "members"]) == [{"a": 1}]
        assert pick_list({"unexpected": 1}, ["data"]) == []


@pytest.mark.asyncio
class TestGlofoxAdapter:
    """Tests for the Glofox adapter on sample data."""

    async def test_fetch_offline(self):
        """Test generated members and check-ins."""
        adapter = GlofoxAdapter(GlofoxSampleDataSource(seed=5, today=TODAY), offline_mode=True)

        members = await adapter.fetch_members()
        visits = await adapter.fetch_all_visits()

        assert adapter.get_name() == "Glofox"
        assert len(members) == 20
        assert all(m.external_id.startswith("GF-") for m in members)
        assert all(v.visit_type == VisitType.CHECK_IN for v in visits)

    async def test_fetch_member_visits(self):
        """Test per-member visits resolve through the native id."""
        adapter = GlofoxAdapter(GlofoxSampleDataSource(seed=5, today=TODAY), offline_mode=True)
        visits = await adapter.fetch_all_visits()
        target = visits[0].member_external_id

        member_visits = await adapter.fetch_member_visits(target)

        assert member_visits
        assert all(v.member_external_id == target for v in member_visits)


@pytest.mark.asyncio
class TestApiClients:
    """Tests for the live HTTP clients against a mock transport."""

    async def test_mindbody_paginates_until_short_page(self):
        """Test offset pagination and authentication headers."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            offset = int(request.url.params["offset"])
            clients = [{"Id": i} for i in range(offset, min(offset + 2, 5))]
            return httpx.Response(200, json={"Clients": clients})

        client = _mock_transport_client(
            MindbodyClient(api_key="key", site_id="-99", access_token="token"),
            handler,
        )

        records = await client.fetch_all("/client/clients", "Clients", page_size=2)
        await client.close()

        assert [r["Id"] for r in records] == [0, 1, 2, 3, 4]
        assert len(requests) == 3
        assert requests[0].headers["Api-Key"] == "key"
        assert requests[0].headers["Site-ID"] == "-99"
        assert requests[0].headers["Authorization"] == "Bearer token"

    async def test_mindbody_error_status_raises(self):
        """Test that HTTP errors surface as MindbodyAPIError."""
        client = _mock_transport_client(
            MindbodyClient(api_key="key", site_id="1", access_token="token"),
            lambda request: httpx.Response(401, text="unauthorized"),
        )

        with pytest.raises(MindbodyAPIError, match="401"):
            await client.get("/client/clients")
        await client.close()

    async def test_glofox_sends_branch_id(self):
        """Test that the business id is sent as branch_id."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            return httpx.Response(200, json={"data": [{"_id": "m1"}]})

        client = _mock_transport_client(
            GlofoxClient(access_token="token", business_id="branch-1"),
            handler,
        )

        records = await client.fetch_all("/members", ["data", "members"], page_size=100)
        await client.close()

        assert records == [{"_id": "m1"}]
        assert seen[0]["branch_id"] == "branch-1"

    async def test_glofox_network_error(self):
        """Test that transport errors surface as GlofoxAPIError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        client = _mock_transport_client(GlofoxClient(access_token="token"), handler)

        with pytest.raises(GlofoxAPIError, match="Network error"):
            await client.get("/members")
        await client.close()


class TestAdapterFactory:
    """Tests for provider resolution."""

    def test_offline_mode_uses_sample_data(self):
        """Test that offline mode builds sample-backed adapters."""
        settings = Settings(integrations_offline_mode=True, sample_data_seed=1)

        adapter = build_gym_adapter("Mindbody", settings)

        assert isinstance(adapter, MindbodyAdapter)
        assert isinstance(adapter.data_source, MindbodySampleDataSource)

    def test_unknown_provider(self):
        """Test that unsupported providers are rejected."""
        with pytest.raises(UnknownProviderError):
            build_gym_adapter("zenplanner", Settings(integrations_offline_mode=True))

    def test_live_mode_requires_credentials(self):
        """Test that live mode without credentials is a configuration error."""
        settings = Settings(integrations_offline_mode=False, glofox_access_token=None)

        with pytest.raises(AdapterConfigError, match="GLOFOX_ACCESS_TOKEN"):
            build_gym_adapter("glofox", settings)


class TestCachedAdapters:
    """Tests for the process-wide adapter cache."""

    @pytest.fixture(autouse=True)
    def offline_settings(self, monkeypatch):
        settings = Settings(integrations_offline_mode=True)
        monkeypatch.setattr(adapter_factory, "get_settings", lambda: settings)
        clear_adapter_cache()
        yield
        clear_adapter_cache()

    def test_provider_name_is_case_insensitive(self):
        """Test that differently cased names share one adapter."""
        first = get_gym_adapter("Mindbody")
        second = get_gym_adapter(" mindbody ")

        assert first is second
        assert first.data_source is second.data_source
        assert adapter_factory._open_adapters == [first]

    def test_providers_are_cached_separately(self):
        """Test that each provider gets its own adapter."""
        mindbody = get_gym_adapter("mindbody")
        glofox = get_gym_adapter("GLOFOX")

        assert isinstance(mindbody, MindbodyAdapter)
        assert isinstance(glofox, GlofoxAdapter)
        assert len(adapter_factory._open_adapters) == 2

    def test_clear_cache_builds_new_adapter(self):
        """Test that clearing the cache drops the old adapter."""
        first = get_gym_adapter("glofox")
        clear_adapter_cache()

        assert get_gym_adapter("glofox") is not first

    def test_unknown_provider_not_cached(self):
        """Test that a rejected name leaves nothing open."""
        with pytest.raises(UnknownProviderError):
            get_gym_adapter("ZenPlanner")

        assert adapter_factory._open_adapters == []
