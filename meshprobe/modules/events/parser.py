"""
Parser for `kubectl get events -o json` output.
"""

import logging
from typing import List

from pydantic import ValidationError

from meshprobe.errors import EventDecodeError, NoEventsFoundError
from meshprobe.modules.events.models import Event, EventList

logger = logging.getLogger("meshprobe.events")


def parse_events(out: str) -> List[Event]:
    """
    Parse a core/v1 List of events.

    Args:
        out: JSON text shaped like {"items": [...]}

    Returns:
        Events in the order they appear in the list

    Raises:
        EventDecodeError: The envelope is not a list document, or an item
            does not decode as an event (``index`` names the item)
        NoEventsFoundError: The list decoded but holds no items
    """
    try:
        envelope = EventList.model_validate_json(out)
    except ValidationError as e:
        raise EventDecodeError(f"error unmarshaling list from `kubectl get events`: {e}") from e

    items = envelope.items or []
    if len(items) == 0:
        raise NoEventsFoundError()

    events = []
    for index, item in enumerate(items):
        try:
            events.append(Event.model_validate(item))
        except ValidationError as e:
            raise EventDecodeError(
                f"error unmarshaling list event [{index}] from `kubectl get events`: {e}",
                index=index,
            ) from e

    logger.debug(f"Parsed {len(events)} events")
    return events
