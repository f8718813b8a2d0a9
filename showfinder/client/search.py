"""
Search form controller.

Holds the state behind the event search form: keyword suggestions, field
validation, location auto-detection and the search results list.

Suggestions are debounced and sequence-guarded: each fetch takes a number
from a RequestSequencer and its result is applied only if no newer fetch,
selection or clear happened meanwhile. Searches are guarded the same way.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from showfinder.errors import ConfigurationError, ShowfinderError
from showfinder.models import Coordinates, Event, SearchParams
from showfinder.client.sequencing import DEFAULT_DEBOUNCE_SECONDS, Debouncer, RequestSequencer

logger = logging.getLogger(__name__)

# Results shown after a search
MAX_RESULTS = 20

KEYWORD_REQUIRED = "Please enter some keywords."
LOCATION_REQUIRED = "Location is required when auto-detect is disabled."
DISTANCE_INVALID = "Please enter a distance greater than 0."
LOCATION_NOT_FOUND = "Unable to find the specified location. Please try again."
SEARCH_FAILED = "Unable to fetch events. Please try again."


class EventsBackend(Protocol):
    async def get_suggestions(self, keyword: str) -> list[str]: ...

    async def search_events(self, params: SearchParams) -> list[Event]: ...


class Geocoder(Protocol):
    async def geocode(self, address: str) -> Coordinates | None: ...


class LocationDetector(Protocol):
    async def detect_location(self) -> str | None: ...


@dataclass
class SearchForm:
    """Raw form input, as typed."""

    keyword: str = ""
    category: str = "All"
    location: str = ""
    auto_detect: bool = False
    distance: str = "10"


def _parse_distance(value: str) -> float | None:
    try:
        distance = float(value.strip())
    except ValueError:
        return None
    return distance if math.isfinite(distance) and distance > 0 else None


def _start_key(event: Event) -> tuple[int, datetime]:
    # Events whose date cannot be parsed go last, in their original order
    try:
        return (0, datetime.fromisoformat(f"{event.date}T{event.time or '00:00:00'}"))
    except ValueError:
        return (1, datetime.min)


def sort_results(events: list[Event], limit: int = MAX_RESULTS) -> list[Event]:
    """Drop id-less events, order by local start date/time, cap the list."""
    with_ids = [event for event in events if event and event.id]
    return sorted(with_ids, key=_start_key)[:limit]


class SearchController:
    """State machine for the search form."""

    def __init__(
        self,
        backend: EventsBackend,
        geocoder: Geocoder | None = None,
        location_detector: LocationDetector | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.backend = backend
        self.geocoder = geocoder
        self.location_detector = location_detector

        self.form = SearchForm()
        self.errors: dict[str, str] = {}

        self.suggestions: list[str] = []
        self.show_suggestions = False
        self.is_fetching_suggestions = False
        self._last_suggestion_query = ""
        self._suggestion_sequence = RequestSequencer()
        self._debouncer = Debouncer(debounce_seconds)

        self.results: list[Event] = []
        self.is_loading = False
        self.error_message: str | None = None
        self.has_searched = False
        self._search_sequence = RequestSequencer()

    # Keyword and suggestions

    def _reset_suggestions(self) -> None:
        self._debouncer.cancel()
        self._suggestion_sequence.invalidate()
        self.suggestions = []
        self.show_suggestions = False
        self.is_fetching_suggestions = False

    def clear_error(self, field: str) -> None:
        self.errors.pop(field, None)

    def set_keyword(self, value: str) -> None:
        """Update the keyword and schedule a debounced suggestion fetch."""
        self.form.keyword = value
        if value.strip():
            self._debouncer.call(self.fetch_suggestions, value)
            self.clear_error("keyword")
        else:
            self._reset_suggestions()
            self._last_suggestion_query = ""

    async def wait_for_suggestions(self) -> None:
        """Wait for the pending debounced fetch to complete."""
        await self._debouncer.flush()

    async def fetch_suggestions(self, value: str) -> None:
        """Fetch suggestions for `value` now, applying them only if still current."""
        query = value.strip()
        if not query:
            self._reset_suggestions()
            self._last_suggestion_query = ""
            return

        if query == self._last_suggestion_query:
            return

        sequence = self._suggestion_sequence.issue()
        self.is_fetching_suggestions = True
        try:
            items = await self.backend.get_suggestions(query)
        except ShowfinderError as e:
            logger.warning("Error fetching suggestions for '%s': %s", query, e)
            if self._suggestion_sequence.is_current(sequence):
                # Still offer what was typed
                self.suggestions = [query]
                self.show_suggestions = True
        else:
            if self._suggestion_sequence.is_current(sequence):
                lowered = query.lower()
                self.suggestions = [query] + [item for item in items if item.lower() != lowered]
                self.show_suggestions = bool(self.suggestions)
                self._last_suggestion_query = query
            else:
                logger.debug("Discarding stale suggestions for '%s'", query)
        finally:
            if self._suggestion_sequence.is_current(sequence):
                self.is_fetching_suggestions = False

    def select_suggestion(self, suggestion: str) -> None:
        self._reset_suggestions()
        self._last_suggestion_query = suggestion.strip()
        self.form.keyword = suggestion
        self.clear_error("keyword")

    def clear_keyword(self) -> None:
        self._reset_suggestions()
        self._last_suggestion_query = ""
        self.form.keyword = ""
        self.clear_error("keyword")

    # Other fields

    def set_category(self, value: str) -> None:
        self.form.category = value or "All"

    def set_location(self, value: str) -> None:
        self.form.location = value
        if value.strip():
            self.clear_error("location")

    def set_distance(self, value: str) -> None:
        self.form.distance = value
        if _parse_distance(value) is not None:
            self.clear_error("distance")

    async def set_auto_detect(self, enabled: bool) -> None:
        self.form.auto_detect = enabled
        if enabled:
            await self.detect_location()

    async def detect_location(self) -> str | None:
        """Fill the location field from the caller's IP address."""
        if self.location_detector is None:
            logger.warning("No location detector configured")
            return None
        try:
            location = await self.location_detector.detect_location()
        except ConfigurationError as e:
            logger.warning("Location auto-detect unavailable: %s", e)
            return None

        if location:
            self.form.location = location
            self.clear_error("location")
        return location

    def validate(self) -> bool:
        """Check the form, recording a message per invalid field."""
        errors: dict[str, str] = {}
        if not self.form.keyword.strip():
            errors["keyword"] = KEYWORD_REQUIRED
        if not self.form.auto_detect and not self.form.location.strip():
            errors["location"] = LOCATION_REQUIRED
        if _parse_distance(self.form.distance) is None:
            errors["distance"] = DISTANCE_INVALID
        self.errors = errors
        return not errors

    # Search

    async def _geocode(self, address: str) -> Coordinates | None:
        if self.geocoder is None:
            logger.warning("No geocoder configured")
            return None
        try:
            return await self.geocoder.geocode(address)
        except ConfigurationError as e:
            logger.warning("Geocoding unavailable: %s", e)
            return None

    async def search(self) -> list[Event]:
        """
        Validate, geocode the location, search and store sorted results.

        An empty `results` with no `error_message` means nothing matched;
        failures set `error_message` instead.
        """
        self.show_suggestions = False
        if not self.validate():
            return self.results

        sequence = self._search_sequence.issue()
        self.is_loading = True
        self.error_message = None
        self.has_searched = True
        self.results = []

        try:
            if self.form.auto_detect and not self.form.location.strip():
                await self.detect_location()

            coords = await self._geocode(self.form.location.strip())
            if coords is None:
                if self._search_sequence.is_current(sequence):
                    self.error_message = LOCATION_NOT_FOUND
                return []

            params = SearchParams(
                keyword=self.form.keyword.strip(),
                category=self.form.category,
                lat=coords.lat,
                lng=coords.lng,
                distance=max(1, round(_parse_distance(self.form.distance))),
            )
            events = await self.backend.search_events(params)
        except ShowfinderError as e:
            logger.error("Error searching events: %s", e)
            if self._search_sequence.is_current(sequence):
                self.error_message = SEARCH_FAILED
            return []
        finally:
            if self._search_sequence.is_current(sequence):
                self.is_loading = False

        if not self._search_sequence.is_current(sequence):
            logger.debug("Discarding stale search results for '%s'", params.keyword)
            return []

        self.results = sort_results(events)
        return self.results
