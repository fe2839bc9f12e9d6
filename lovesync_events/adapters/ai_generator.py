"""AI generation adapter: synthetic local events from Groq."""

import json
import uuid
from datetime import datetime, timezone, tzinfo
from typing import Annotated, Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from lovesync_events.adapters import register_adapter
from lovesync_events.adapters.base import BaseAdapter, FetchRequest
from lovesync_events.config.regions import find_city
from lovesync_events.core.event_model import AiCandidate
from lovesync_events.core.exceptions import InvalidBatchError, JSONParseError
from lovesync_events.core.llm_client import LLMClient

AiCategory = Literal["music", "food", "art", "sports", "social", "outdoor", "learning", "entertainment"]

SYSTEM_PROMPT = (
    "You are an expert event curator who creates realistic, engaging local events. "
    "Always respond with valid JSON only."
)

GENERATION_PROMPT = """Generate exactly {count} realistic local events for {city}. Include a mix of:
- Cultural events (concerts, art shows, theater)
- Food & dining (restaurant openings, food festivals, farmers markets)
- Outdoor activities (hiking meetups, sports, park events)
- Entertainment (comedy shows, live music, trivia nights)
- Community events (workshops, classes, networking)
- Family-friendly activities
- Date night options

For each event, provide:
- title: Clear, engaging event name
- description: 2-3 sentences describing the event
- start_date: Date/time in the next 2 weeks after {today} (format: YYYY-MM-DDTHH:MM:SS)
- location_name: Specific venue or area in {city}
- category: One of: music, food, art, sports, social, outdoor, learning, entertainment
- price: Realistic price (Free, $5, $10-20, etc.)
- organizer: Realistic business/organization name

Make events feel authentic to {city} culture and venues. Vary times throughout the week including evenings and weekends.
Respond with a JSON array of events and nothing else."""


class GeneratedEvent(BaseModel):
    """One item of a generated batch, as the model must return it."""

    title: Annotated[str, Field(min_length=1, max_length=500)]
    description: str | None = None
    start_date: datetime
    location_name: str | None = None
    category: AiCategory | None = None
    price: str | None = None
    organizer: str | None = None


_batch_adapter = TypeAdapter(list[GeneratedEvent])


def _localize(value: datetime, tz: tzinfo) -> datetime:
    return value.replace(tzinfo=tz) if value.tzinfo is None else value


def strip_code_fence(content: str) -> str:
    """Remove a surrounding ``` or ```json fence, if any."""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
    return content.strip()


def parse_batch(content: str) -> list[GeneratedEvent]:
    """Validate a raw completion as a whole batch.

    Raises:
        JSONParseError: not JSON at all
        InvalidBatchError: top level is not an array, or any item is invalid
    """
    cleaned = strip_code_fence(content)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise JSONParseError(f"Invalid JSON from model: {e}", raw_data=cleaned, source="ai_generated") from e

    if not isinstance(data, list):
        raise InvalidBatchError(
            f"Expected a JSON array, got {type(data).__name__}", source="ai_generated"
        )
    try:
        return _batch_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidBatchError(
            f"{e.error_count()} invalid field(s) in batch", source="ai_generated"
        ) from e


@register_adapter("ai_generated")
class AiGeneratorAdapter(BaseAdapter):
    """Asks the LLM for a batch of events for one city."""

    source_id = "ai_generated"
    source_name = "AI generated"
    api_key_env = "GROQ_API_KEY"

    def __init__(self, *args, llm: LLMClient | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.llm = llm or LLMClient(api_key=self.settings.groq_api_key, model=self.settings.groq_model)

    @property
    def api_key(self) -> str | None:
        return self.llm.api_key

    async def fetch_events(self, request: FetchRequest) -> list[AiCandidate]:
        city = request.city or request.region or request.country
        batch_id = request.generation_batch_id or str(uuid.uuid4())
        known = find_city(request.city)
        tz = ZoneInfo(known.timezone) if known else timezone.utc

        self.api_calls += 1
        content = await self.llm.complete(
            GENERATION_PROMPT.format(
                count=request.count,
                city=city,
                today=datetime.now(tz).date().isoformat(),
            ),
            system=SYSTEM_PROMPT,
        )
        generated = parse_batch(content)

        self.logger.info("batch_generated", city=city, batch_id=batch_id, count=len(generated))
        return [
            AiCandidate(
                external_id=f"ai_{batch_id}_{i}",
                title=item.title,
                description=item.description,
                start=_localize(item.start_date, tz),
                city=request.city,
                region=request.region,
                country=request.country,
                location_name=item.location_name or f"{city} Area",
                category=item.category,
                price=item.price,
                organizer=item.organizer,
                generation_batch_id=batch_id,
            )
            for i, item in enumerate(generated)
        ]
