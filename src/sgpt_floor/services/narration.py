"""Decision narration through an external language model.

Optional enrichment for coaches: turns a free-text floor scenario into short
coaching guidance. The automated sequencing path never depends on it.
"""

import logging

import openai
from openai import AsyncOpenAI

from ..engine.audit import AuditTrail
from ..errors import NarrationUnavailableError
from ..models.audit import DecisionRecord, TriggerType
from ..models.equipment import EquipmentUsage

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS = """You are a logic assistant for small group personal training (SGPT).

ROLE
- Interpret live session inputs and respond with a coaching decision.
- Do not generate workouts or plans.
- If input is unclear or rules conflict, escalate to the coach.

ESCALATION
- Pain combined with client insistence: always escalate, never prescribe.
- Two or more safety signals (injury history, pain, fatigue): always escalate.
- Vague pain descriptors ("tight", "weird", "off"): ask clarifying questions.
- Start escalations with "COACH OVERRIDE REQUIRED" or "CLARIFICATION NEEDED".

OUTPUT
- Format: decision plus a one-sentence rationale.
- Be concise, direct and coaching-relevant.

EQUIPMENT CONTEXT (6-client session)
- 2 Olympic Barbells, 1 Trap Bar, 1 Squat Rack, 1 Lifting Platform, 1 Landmine
- Dumbbell pairs: 10kg, 12.5kg, 15kg, 17.5kg
- Kettlebells: 16kg, 20kg, 24kg

EXAMPLES
- Equipment conflict: "Switch to DB Bench - rack is in use."
- Injury flag: "Client has knee pain - swap lunges for split squat to box."
"""


def build_user_message(
    scenario: str,
    client_name: str | None = None,
    equipment_status: str | None = None,
    time_remaining: int | None = None,
) -> str:
    """Assemble the scenario prompt sent to the model."""
    message = ""
    if client_name:
        message += f"Client: {client_name}\n\n"
    message += f"Scenario:\n{scenario}\n"
    if equipment_status:
        message += f"\nEquipment Status: {equipment_status}\n"
    if time_remaining:
        message += f"\nTime Remaining: {time_remaining} minutes\n"
    return message


def describe_equipment(usage: list[EquipmentUsage]) -> str:
    """Summarize occupied equipment for the prompt, e.g. "Trap Bar 1/1 in use"."""
    busy = [f"{u.name} {u.in_use}/{u.total} in use" for u in usage if u.in_use]
    return "; ".join(busy) if busy else "All equipment free"


class NarrationService:
    """Asks the language model for coaching guidance and logs the answer.

    Args:
        audit: Audit trail the answer is recorded to as a manual decision
        client: OpenAI-compatible async client; created from ``api_key``
            when omitted
        api_key: OpenAI API key
        model: Chat model name
    """

    def __init__(
        self,
        audit: AuditTrail,
        client: AsyncOpenAI | None = None,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        self.audit = audit
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        if client is None and api_key:
            client = AsyncOpenAI(api_key=api_key)
        self.client = client

    @property
    def available(self) -> bool:
        return self.client is not None

    async def narrate(
        self,
        scenario: str,
        client_name: str | None = None,
        equipment_status: str | None = None,
        time_remaining: int | None = None,
        session_id: int | None = None,
        client_id: int | None = None,
    ) -> tuple[str, list[str]]:
        """Get guidance for a scenario.

        Returns:
            The guidance text and any audit warnings

        Raises:
            ValueError: If the scenario is empty
            NarrationUnavailableError: If no client is configured or the
                API call fails
        """
        if not scenario or not scenario.strip():
            raise ValueError("Scenario is required")
        if self.client is None:
            raise NarrationUnavailableError(
                "Decision narration is not configured (set OPENAI_API_KEY)"
            )

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTIONS},
                    {
                        "role": "user",
                        "content": build_user_message(
                            scenario, client_name, equipment_status, time_remaining
                        ),
                    },
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            logger.warning("Narration request failed: %s", e)
            raise NarrationUnavailableError(f"Narration request failed: {e}") from e

        decision = completion.choices[0].message.content or "No response generated"

        warning = await self.audit.record(
            DecisionRecord(
                session_id=session_id,
                client_id=client_id,
                trigger_type=TriggerType.MANUAL,
                scenario=scenario,
                decision=decision,
                requires_approval=False,
                approved=True,
            )
        )
        return decision, [warning] if warning else []
