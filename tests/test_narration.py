"""Tests for decision narration."""

import asyncio

import openai
import pytest

from sgpt_floor.engine import AuditTrail
from sgpt_floor.errors import NarrationUnavailableError
from sgpt_floor.models import EquipmentUsage, TriggerType
from sgpt_floor.services import NarrationService, describe_equipment
from sgpt_floor.services.narration import SYSTEM_INSTRUCTIONS, build_user_message


class TestBuildUserMessage:
    """Tests for prompt assembly."""

    def test_full_message(self):
        message = build_user_message(
            "Rack is busy", client_name="Alex", equipment_status="Squat Rack 1/1 in use", time_remaining=20
        )

        assert message.startswith("Client: Alex")
        assert "Scenario:\nRack is busy" in message
        assert "Equipment Status: Squat Rack 1/1 in use" in message
        assert "Time Remaining: 20 minutes" in message

    def test_scenario_only(self):
        assert build_user_message("Rack is busy") == "Scenario:\nRack is busy\n"

    def test_describe_equipment(self):
        usage = [
            EquipmentUsage(name="Trap Bar", total=1, in_use=1),
            EquipmentUsage(name="Olympic Barbell", total=2, in_use=0),
        ]
        assert describe_equipment(usage) == "Trap Bar 1/1 in use"
        assert describe_equipment([]) == "All equipment free"


class TestNarrate:
    """Tests for NarrationService.narrate."""

    def test_narrate_records_manual_decision(self, floor, stub_openai):
        client, completions = stub_openai()
        service = NarrationService(AuditTrail(floor.store), client=client)

        text, warnings = asyncio.run(service.narrate("Squat rack taken", client_name="Alex"))

        assert text == "Switch to DB Bench - rack is in use."
        assert warnings == []
        request = completions.requests[0]
        assert request["model"] == "gpt-4o-mini"
        assert request["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTIONS}
        assert "Client: Alex" in request["messages"][1]["content"]

        (decision,) = floor.decisions()
        assert decision.trigger_type == TriggerType.MANUAL
        assert decision.scenario == "Squat rack taken"
        assert decision.decision == text

    def test_not_configured(self, floor):
        service = NarrationService(AuditTrail(floor.store))

        assert not service.available
        with pytest.raises(NarrationUnavailableError):
            asyncio.run(service.narrate("Squat rack taken"))

    def test_api_failure(self, floor, stub_openai):
        client, _ = stub_openai(error=openai.OpenAIError("rate limited"))
        service = NarrationService(AuditTrail(floor.store), client=client)

        with pytest.raises(NarrationUnavailableError):
            asyncio.run(service.narrate("Squat rack taken"))
        assert floor.decisions() == []

    def test_empty_scenario(self, floor, stub_openai):
        client, completions = stub_openai()
        service = NarrationService(AuditTrail(floor.store), client=client)

        with pytest.raises(ValueError):
            asyncio.run(service.narrate("  "))
        assert completions.requests == []
