"""
Typed request builders, one per service operation.

Each builder serializes to the exact body the service documents, so key
names live in one place instead of in ad-hoc dicts at every call site.
"""

from dataclasses import dataclass, field
from typing import Any

from tc_cli.core.envelope import RequestEnvelope, stateful_state, wrap
from tc_cli.core.types import ObjectRef

# =============================================================================
# Session
# =============================================================================


@dataclass
class LoginRequest:
    """Credentials for Core-2011-06-Session/login."""

    user: str
    password: str
    role: str = ""
    group: str = ""
    locale: str = ""
    # Spelling is the service's
    descrimator: str = ""

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "credentials": {
                    "user": self.user,
                    "password": self.password,
                    "role": self.role,
                    "descrimator": self.descrimator,
                    "locale": self.locale,
                    "group": self.group,
                }
            }
        )


# =============================================================================
# Data Management
# =============================================================================


@dataclass
class GetPropertiesRequest:
    """Properties of one or more objects."""

    objects: list[ObjectRef]
    attributes: list[str]

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "objects": [obj.to_dict() for obj in self.objects],
                "attributes": list(self.attributes),
            }
        )


@dataclass
class ExpandFoldersRequest:
    """Folder expansion preferences for expandFoldersForCAD."""

    folder: ObjectRef
    expand_item_revisions: bool = False
    latest_n_revisions: int = 0
    info: list[dict[str, Any]] = field(default_factory=list)
    content_types_filter: list[str] = field(default_factory=list)

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "folders": [self.folder.to_dict()],
                "pref": {
                    "expItemRev": self.expand_item_revisions,
                    "latestNRevs": self.latest_n_revisions,
                    "info": self.info,
                    "contentTypesFilter": self.content_types_filter,
                },
            }
        )


@dataclass
class CreateItemRequest:
    """A single item to create under a container."""

    name: str
    type: str
    container: ObjectRef
    description: str = ""
    item_id: str = ""
    rev_id: str = ""
    uom: str = ""
    client_id: str = ""
    relation_type: str = ""

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "properties": [
                    {
                        "clientId": self.client_id,
                        "itemId": self.item_id,
                        "name": self.name,
                        "type": self.type,
                        "revId": self.rev_id,
                        "uom": self.uom,
                        "description": self.description,
                        "extendedAttributes": [],
                    }
                ],
                "container": self.container.to_dict(),
                "relationType": self.relation_type,
            }
        )


@dataclass
class CreateFolderRequest:
    """A single folder to create under a container."""

    name: str
    container: ObjectRef
    description: str = ""
    client_id: str = ""
    relation_type: str = "contents"

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "folders": [{"clientId": self.client_id, "name": self.name, "desc": self.description}],
                "container": self.container.to_dict(),
                "relationType": self.relation_type,
            }
        )


@dataclass
class CreateRelationRequest:
    """A relation between a primary and a secondary object."""

    primary: ObjectRef
    secondary: ObjectRef
    relation_type: str
    client_id: str = ""

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "input": [
                    {
                        "primaryObject": {"uid": self.primary.uid, "type": self.primary.type},
                        "secondaryObject": {"uid": self.secondary.uid, "type": self.secondary.type},
                        "relationType": self.relation_type,
                        "clientId": self.client_id,
                        "userData": {"uid": "", "type": ""},
                    }
                ]
            }
        )


@dataclass
class GetItemFromIdRequest:
    """Look up an item (and revisions) by item id."""

    item_id: str
    rev_ids: list[str] = field(default_factory=list)
    n_rev: int = 1

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "infos": [{"itemId": self.item_id, "revIds": list(self.rev_ids)}],
                "nRev": self.n_rev,
                "pref": {},
            }
        )


# =============================================================================
# Saved Queries
# =============================================================================


@dataclass
class FindSavedQueriesRequest:
    """Saved query search criteria; "*" wildcards are allowed."""

    name: str = "*"
    description: str = "*"
    query_type: int = 0
    properties: list[str] = field(default_factory=lambda: ["query_name", "query_desc"])

    def to_envelope(self) -> RequestEnvelope:
        return wrap(
            {
                "inputCriteria": [
                    {
                        "queryNames": [self.name],
                        "queryDescs": [self.description],
                        "queryType": self.query_type,
                    }
                ]
            },
            policy={
                "types": [
                    {"name": "ImanQuery", "properties": [{"name": prop} for prop in self.properties]},
                ]
            },
        )


# =============================================================================
# Structure Management
# =============================================================================


def revision_rules_envelope(locale: str) -> RequestEnvelope:
    """getRevisionRules takes no body, only a state and an object_name policy."""
    return wrap(
        state=stateful_state(locale),
        policy={"types": [{"name": "RevisionRule", "properties": [{"name": "object_name"}]}]},
    )


@dataclass
class CreateBOMWindowRequest:
    """Open a BOM window on an item with a revision rule configuration."""

    item_uid: str
    rev_rule: str = ""
    unit_no: int = 0
    date: str = ""
    today: bool = True
    end_item: str = ""
    end_item_revision: str = ""
    client_id: str = ""

    def to_envelope(self, locale: str) -> RequestEnvelope:
        return wrap(
            {
                "info": [
                    {
                        "clientId": self.client_id,
                        "item": self.item_uid,
                        "revRuleConfigInfo": {
                            "clientId": "",
                            "revRule": self.rev_rule,
                            "props": {
                                "unitNo": self.unit_no,
                                "date": self.date,
                                "today": self.today,
                                "endItem": self.end_item,
                                "endItemRevision": self.end_item_revision,
                            },
                        },
                    }
                ]
            },
            state=stateful_state(locale),
        )


@dataclass
class AddChildrenRequest:
    """Add an item revision as a child line under a parent BOM line."""

    parent_line: str
    item_rev_uid: str
    view_type: str = ""
    occ_type: str = ""
    line_properties: dict[str, str] = field(default_factory=dict)

    def to_envelope(self, locale: str) -> RequestEnvelope:
        return wrap(
            {
                "inputs": [
                    {
                        "parentLine": self.parent_line,
                        "viewType": self.view_type,
                        "items": [
                            {
                                "clientId": "",
                                "item": "",
                                "itemRev": self.item_rev_uid,
                                "occType": self.occ_type,
                                "bomline": "",
                                "itemLineProperties": dict(self.line_properties),
                            }
                        ],
                        "itemElements": [],
                    }
                ]
            },
            state=stateful_state(locale),
        )


def bom_windows_envelope(windows: list[ObjectRef], locale: str) -> RequestEnvelope:
    """Body shared by saveBOMWindows and closeBOMWindows."""
    return wrap({"bomWindows": [window.to_dict() for window in windows]}, state=stateful_state(locale))
