"""
Event models.

These mirror the fields of a Kubernetes core/v1 Event that tests assert on.
Fields are read from their camelCase JSON names; anything else in the
payload is kept on the model as an extra attribute.
"""

from datetime import datetime
from typing import Any, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


class ObjectMeta(BaseModel):
    """Subset of metadata carried by an event."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""
    namespace: str = ""
    uid: str = ""
    resource_version: str = Field("", alias="resourceVersion")
    creation_timestamp: Optional[datetime] = Field(None, alias="creationTimestamp")


class InvolvedObject(BaseModel):
    """The object an event is about."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = Field("", alias="apiVersion")
    resource_version: str = Field("", alias="resourceVersion")
    field_path: str = Field("", alias="fieldPath")


class EventSource(BaseModel):
    """Component that reported the event."""

    model_config = ConfigDict(extra="allow")

    component: str = ""
    host: str = ""


class Event(BaseModel):
    """A single cluster event."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_version: str = Field("v1", alias="apiVersion")
    kind: str = "Event"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    involved_object: InvolvedObject = Field(default_factory=InvolvedObject, alias="involvedObject")
    reason: str = ""
    message: str = ""
    source: EventSource = Field(default_factory=EventSource)
    first_timestamp: Optional[datetime] = Field(None, alias="firstTimestamp")
    last_timestamp: Optional[datetime] = Field(None, alias="lastTimestamp")
    event_time: Optional[datetime] = Field(None, alias="eventTime")
    count: int = 0
    type: str = ""
    reporting_component: str = Field("", alias="reportingComponent")
    reporting_instance: str = Field("", alias="reportingInstance")

    @property
    def is_warning(self) -> bool:
        return self.type == EVENT_TYPE_WARNING


class EventList(BaseModel):
    """Envelope of `kubectl get events -o json`; items are decoded one by one."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_version: str = Field("v1", alias="apiVersion")
    kind: str = "List"
    items: Optional[List[Any]] = None


class EventLister(Protocol):
    """Capability that fetches the raw event list for a namespace.

    Implementations return the JSON text of a core/v1 List, the same
    document `kubectl get events -o json` prints.
    """

    def list_events_json(self, namespace: str) -> str:
        ...
