"""
Tests for the reservation tool handlers.

Each handler runs against a scripted backend; assertions cover the
envelope messages, error kinds and the number of backend calls made.
"""

import httpx
import pytest
import structlog

from reservations.client import ReservationsClient
from reservations.schemas import NO_OP_UPDATE_MESSAGE
from reservations.service import ReservationService
from reservations.settings import BackendSettings
from tool_server.context import NullCallContext, TracingCallContext, UserIdentity
from tool_server.tools import (
    CreateReservationTool,
    DeleteReservationTool,
    GetReservationTool,
    UpdateReservationTool,
)
from tool_server.tools.base import describe_guest

from conftest import ADA

LOCATOR = {"mobile": "+1234567890", "name": "Ada Lovelace"}


@pytest.fixture
def context():
    return NullCallContext()


class TestDescribeGuest:
    def test_name_and_mobile(self):
        assert describe_guest(LOCATOR) == "Ada Lovelace (+1234567890)"

    def test_placeholders(self):
        assert describe_guest({}) == "unknown guest (unknown mobile)"
        assert describe_guest({"name": "", "mobile": 42}) == "unknown guest (unknown mobile)"
        assert describe_guest(None) == "unknown guest (unknown mobile)"


class TestCreateReservationTool:
    @pytest.mark.asyncio
    async def test_created_reservation(self, service, backend, context):
        backend.reply(201, [ADA])

        response = await CreateReservationTool(service).execute(dict(ADA), context)

        assert response["status"] == "success"
        assert "Created reservation for Ada Lovelace" in response["message"]
        assert response["message"] == "Created reservation for Ada Lovelace on 2025-05-01 at 19:00."
        assert response["data"] == ADA
        assert backend.calls == 1
        assert backend.body() == [ADA]

    @pytest.mark.asyncio
    async def test_empty_response_is_not_success(self, service, backend, context):
        backend.reply(201, [])

        response = await CreateReservationTool(service).execute(dict(ADA), context)

        assert response["status"] == "error"
        assert response["error_kind"] == "empty_result"
        assert "no data" in response["message"]
        assert "Ada Lovelace (+1234567890)" in response["message"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["0", "\"created\"", "[0]"])
    async def test_non_record_response_is_not_success(self, service, backend, context, body):
        backend.reply(201, text=body)

        response = await CreateReservationTool(service).execute(dict(ADA), context)

        assert response["status"] == "error"
        assert response["error_kind"] == "empty_result"
        assert "no data" in response["message"]

    @pytest.mark.asyncio
    async def test_validation_failure_makes_no_call(self, service, backend, context):
        response = await CreateReservationTool(service).execute(
            {"name": "Ada Lovelace", "nb_people": 0}, context
        )

        assert response["status"] == "error"
        assert response["error_kind"] == "validation"
        assert response["message"].startswith(
            "Failed to create the reservation for Ada Lovelace (unknown mobile):"
        )
        fields = {issue["field"] for issue in response["details"]["issues"]}
        assert fields == {"mobile", "nb_people", "date", "time"}
        assert backend.calls == 0


class TestUpdateReservationTool:
    @pytest.mark.asyncio
    async def test_no_op_update_makes_no_call(self, service, backend, context):
        response = await UpdateReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "error"
        assert response["error_kind"] == "validation"
        assert NO_OP_UPDATE_MESSAGE in response["message"]
        assert backend.calls == 0

    @pytest.mark.asyncio
    async def test_backend_rejection(self, service, backend, context):
        backend.reply(400, {"message": "duplicate key value violates unique constraint"})

        response = await UpdateReservationTool(service).execute(
            {**LOCATOR, "new_mobile": "+1987654321"}, context
        )

        assert response["status"] == "error"
        assert "Failed to update the reservation" in response["message"]
        assert "duplicate key value" in response["message"]
        assert response["error_kind"] == "backend_rejection"
        assert response["details"] == {"message": "duplicate key value violates unique constraint"}

    @pytest.mark.asyncio
    async def test_updated_reservation_reports_changed_fields(self, service, backend, context):
        backend.reply(200, [{**ADA, "nb_people": 6, "time": "20:00"}])

        response = await UpdateReservationTool(service).execute(
            {**LOCATOR, "nb_people": 6, "time": "20:00"}, context
        )

        assert response["status"] == "success"
        assert response["message"] == (
            "Updated reservation for Ada Lovelace (+1234567890). 2 fields changed."
        )
        assert backend.body() == {"nb_people": 6, "time": "20:00"}

    @pytest.mark.asyncio
    async def test_single_field_phrasing(self, service, backend, context):
        backend.reply(200, [{**ADA, "notes": "Birthday"}])

        response = await UpdateReservationTool(service).execute(
            {**LOCATOR, "notes": "Birthday"}, context
        )
        assert response["message"].endswith("1 field changed.")

    @pytest.mark.asyncio
    async def test_no_matching_reservation(self, service, backend, context):
        backend.reply(200, [])

        response = await UpdateReservationTool(service).execute(
            {**LOCATOR, "nb_people": 2}, context
        )

        assert response["status"] == "error"
        assert response["error_kind"] == "empty_result"
        assert response["message"] == (
            "No reservation for Ada Lovelace (+1234567890) was updated. It may not exist."
        )


class TestDeleteReservationTool:
    @pytest.mark.asyncio
    async def test_empty_result_is_failure(self, service, backend, context):
        backend.reply(200, [])

        response = await DeleteReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "error"
        assert "No reservation for Ada Lovelace" in response["message"]
        assert response["error_kind"] == "empty_result"

    @pytest.mark.asyncio
    async def test_repeated_delete(self, service, backend, context):
        backend.reply(200, [ADA])
        backend.reply(200, [])
        tool = DeleteReservationTool(service)

        first = await tool.execute(dict(LOCATOR), context)
        second = await tool.execute(dict(LOCATOR), context)

        assert first["status"] == "success"
        assert first["message"] == "Deleted reservation for Ada Lovelace (+1234567890)."
        assert second["status"] == "error"
        assert "No reservation for Ada Lovelace" in second["message"]
        assert backend.calls == 2

    @pytest.mark.asyncio
    async def test_missing_input_uses_placeholders(self, service, backend, context):
        response = await DeleteReservationTool(service).execute({}, context)

        assert response["status"] == "error"
        assert "unknown guest (unknown mobile)" in response["message"]
        assert backend.calls == 0


class TestGetReservationTool:
    @pytest.mark.asyncio
    async def test_single_match(self, service, backend, context):
        backend.reply(200, [ADA])

        response = await GetReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "success"
        assert response["message"] == (
            "Found reservation for Ada Lovelace (+1234567890) on 2025-05-01 at 19:00."
        )
        assert response["data"] == ADA

    @pytest.mark.asyncio
    async def test_multiple_matches_report_count(self, service, backend, context):
        backend.reply(200, [ADA, {**ADA, "date": "2025-05-08"}])

        response = await GetReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "success"
        assert "2 reservations" in response["message"]
        assert len(response["data"]) == 2

    @pytest.mark.asyncio
    async def test_not_found_names_qualifiers(self, service, backend, context):
        backend.reply(200, [])

        response = await GetReservationTool(service).execute(
            {**LOCATOR, "date": "2025-05-01", "time": "19:00"}, context
        )

        assert response["status"] == "error"
        assert response["message"] == (
            "No reservation for Ada Lovelace (+1234567890) on 2025-05-01 at 19:00 was found."
        )

    @pytest.mark.asyncio
    async def test_transport_failure(self, service, backend, context):
        backend.fail(httpx.ConnectTimeout("timed out"))

        response = await GetReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "error"
        assert response["error_kind"] == "transport"
        assert response["message"] == (
            "Failed to look up the reservation for Ada Lovelace (+1234567890): timed out"
        )


class TestConfigurationFailures:
    @pytest.mark.asyncio
    async def test_missing_settings_reported_without_a_call(self, backend, context):
        settings = BackendSettings(url="", api_key="")
        service = ReservationService(ReservationsClient(settings, transport=backend.transport()))

        response = await DeleteReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "error"
        assert response["error_kind"] == "configuration"
        assert backend.calls == 0


class TestTracingContext:
    @pytest.mark.asyncio
    async def test_error_envelope_carries_trace_id(self, service, backend):
        backend.reply(200, [])
        context = TracingCallContext(UserIdentity(login="octocat"))

        response = await DeleteReservationTool(service).execute(dict(LOCATOR), context)

        assert response["status"] == "error"
        assert len(response["trace_id"]) == 32

    @pytest.mark.asyncio
    async def test_success_has_no_trace_id(self, service, backend):
        backend.reply(200, [ADA])

        response = await GetReservationTool(service).execute(dict(LOCATOR), TracingCallContext())

        assert response["status"] == "success"
        assert "trace_id" not in response

    @pytest.mark.asyncio
    async def test_same_messages_in_every_variant(self, service, backend, context):
        backend.reply(200, [])
        backend.reply(200, [])
        tool = DeleteReservationTool(service)

        plain = await tool.execute(dict(LOCATOR), context)
        traced = await tool.execute(dict(LOCATOR), TracingCallContext())

        assert plain["message"] == traced["message"]

    @pytest.mark.asyncio
    async def test_user_identity_is_bound_to_the_log_context(self):
        user = UserIdentity(login="octocat", email="octocat@github.com")

        async with TracingCallContext(user).span("getReservation") as span:
            bound = structlog.contextvars.get_contextvars()

        assert bound["user_login"] == "octocat"
        assert bound["user_email"] == "octocat@github.com"
        assert bound["trace_id"] == span.trace_id
        assert "user_email" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_anonymous_span_binds_no_user(self):
        async with TracingCallContext().span("getReservation"):
            bound = structlog.contextvars.get_contextvars()

        assert "user_login" not in bound
        assert "user_email" not in bound
