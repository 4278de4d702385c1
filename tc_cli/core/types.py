"""
Core types for the Teamcenter JSON REST responses.

These dataclasses provide type safety and IDE support for API responses.
Required fields are read with data["key"] so that a structure mismatch
surfaces as a DecodeError in the envelope codec.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tc_cli.core.jsonvalue import JSONValue


def _expect(value: Any, kind: type | tuple[type, ...], name: str) -> Any:
    """Check a decoded value's type."""
    if not isinstance(value, kind):
        raise TypeError(f"{name}: expected {getattr(kind, '__name__', kind)}, got {type(value).__name__}")
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    values = data.get(key) or []
    _expect(values, list, key)
    return [_expect(v, str, key) for v in values]


def _records(data: dict[str, Any], key: str, parser: Any) -> list:
    values = data.get(key) or []
    _expect(values, list, key)
    return [parser(_expect(v, dict, key)) for v in values]


# =============================================================================
# Object references and model objects
# =============================================================================


@dataclass
class ObjectRef:
    """A lightweight object reference (uid + class/type)."""

    uid: str
    class_name: str = ""
    type: str = ""
    object_id: str | None = None

    @property
    def stable_id(self) -> str:
        """objectID when present, else uid."""
        return self.object_id or self.uid

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectRef":
        """Create from API response dict."""
        _expect(data, dict, "object")
        return cls(
            uid=_expect(data["uid"], str, "uid"),
            class_name=data.get("className") or "",
            type=data.get("type") or "",
            object_id=data.get("objectID") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"uid": self.uid, "className": self.class_name, "type": self.type}


@dataclass
class PropertyValue:
    """Database and display values of one (possibly multi-valued) property."""

    database_values: list[str] = field(default_factory=list)
    display_values: list[str] = field(default_factory=list)

    @property
    def first_display(self) -> str | None:
        return self.display_values[0] if self.display_values else None

    @property
    def first_database(self) -> str | None:
        return self.database_values[0] if self.database_values else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertyValue":
        """Create from API response dict."""
        _expect(data, dict, "property")
        return cls(
            database_values=_str_list(data, "dbValues"),
            display_values=_str_list(data, "uiValues"),
        )


@dataclass
class ModelObject:
    """A UID-keyed object record with optional property values."""

    uid: str
    class_name: str = ""
    type: str = ""
    object_id: str | None = None
    props: dict[str, PropertyValue] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], uid: str | None = None) -> "ModelObject":
        """Create from API response dict; uid falls back to the side-map key."""
        _expect(data, dict, "modelObject")
        raw_props = data.get("props") or {}
        _expect(raw_props, dict, "props")
        return cls(
            uid=_expect(data.get("uid") or uid, str, "uid"),
            class_name=data.get("className") or "",
            type=data.get("type") or "",
            object_id=data.get("objectID") or None,
            props={name: PropertyValue.from_dict(value) for name, value in raw_props.items()},
        )

    def ref(self) -> ObjectRef:
        return ObjectRef(uid=self.uid, class_name=self.class_name, type=self.type, object_id=self.object_id)


# =============================================================================
# ServiceData
# =============================================================================


@dataclass
class ErrorValue:
    """One error entry for a partial failure."""

    message: str
    code: int = 0
    level: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorValue":
        """Create from API response dict."""
        return cls(
            message=data.get("message") or "",
            code=data.get("code", 0),
            level=data.get("level", 0),
        )


@dataclass
class PartialError:
    """Errors reported against a single UID."""

    uid: str
    error_values: list[ErrorValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PartialError":
        """Create from API response dict."""
        return cls(
            uid=data.get("uid") or "",
            error_values=_records(data, "errorValues", ErrorValue.from_dict),
        )


@dataclass
class ServiceData:
    """The server's side channel: UID lists, object side-map and partial errors."""

    plain: list[str] = field(default_factory=list)
    model_objects: dict[str, ModelObject] = field(default_factory=dict)
    updated: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    partial_errors: list[PartialError] = field(default_factory=list)

    def get(self, uid: str) -> ModelObject | None:
        """Look up a model object by UID; None on a miss."""
        return self.model_objects.get(uid)

    def resolve(self, uids: list[str]) -> list[ModelObject]:
        """Model objects for the given UIDs, skipping misses."""
        return [self.model_objects[uid] for uid in uids if uid in self.model_objects]

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ServiceData":
        """Create from API response dict (None gives an empty ServiceData)."""
        if data is None:
            return cls()
        _expect(data, dict, "ServiceData")
        raw_objects = data.get("modelObjects") or {}
        _expect(raw_objects, dict, "modelObjects")
        return cls(
            plain=_str_list(data, "plain"),
            model_objects={uid: ModelObject.from_dict(obj, uid=uid) for uid, obj in raw_objects.items()},
            updated=_str_list(data, "updated"),
            created=_str_list(data, "created"),
            deleted=_str_list(data, "deleted"),
            partial_errors=_records(data, "partialErrors", PartialError.from_dict),
        )


def _service_data(data: dict[str, Any]) -> ServiceData | None:
    raw = data.get("ServiceData")
    return ServiceData.from_dict(raw) if raw is not None else None


# =============================================================================
# Session Types
# =============================================================================


@dataclass
class ServerInfo:
    """Server information returned by login."""

    display_version: str | None = None
    host_name: str | None = None
    locale: str | None = None
    log_file: str | None = None
    site_locale: str | None = None
    server_id: str | None = None
    user_id: str | None = None
    version: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerInfo":
        """Create from API response dict."""
        return cls(
            display_version=data.get("DisplayVersion"),
            host_name=data.get("HostName"),
            locale=data.get("Locale"),
            log_file=data.get("LogFile"),
            site_locale=data.get("SiteLocale"),
            server_id=data.get("TcServerID"),
            user_id=data.get("UserID"),
            version=data.get("Version"),
        )


@dataclass
class LoginResponse:
    """Login response: qualified name and server info."""

    qname: str | None = None
    server_info: ServerInfo | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoginResponse":
        """Create from API response dict."""
        info = data.get("serverInfo")
        return cls(
            qname=data.get(".QName"),
            server_info=ServerInfo.from_dict(info) if isinstance(info, dict) else None,
        )


@dataclass
class Session:
    """An authenticated session handle."""

    token: str
    established_at: datetime = field(default_factory=datetime.now)
    server_info: ServerInfo | None = None
    reused: bool = False


@dataclass
class SessionInfo:
    """Response of getTCSessionInfo."""

    server_version: str
    user: ObjectRef
    group: ObjectRef
    role: ObjectRef
    site: ObjectRef
    project: ObjectRef | None = None
    work_context: ObjectRef | None = None
    tc_volume: ObjectRef | None = None
    transient_vol_root_dir: str = ""
    is_in_v7_mode: bool = False
    module_number: int = 0
    bypass: bool = False
    journaling: bool = False
    app_journaling: bool = False
    sec_journaling: bool = False
    adm_journaling: bool = False
    privileged: bool = False
    is_part_bom_usage_enabled: bool = False
    is_subscription_mgr_enabled: bool = False
    text_infos: list[str] = field(default_factory=list)
    extra_info: dict[str, str] = field(default_factory=dict)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionInfo":
        """Create from API response dict."""

        def optional_ref(key: str) -> ObjectRef | None:
            raw = data.get(key)
            return ObjectRef.from_dict(raw) if isinstance(raw, dict) else None

        return cls(
            server_version=_expect(data["serverVersion"], str, "serverVersion"),
            user=ObjectRef.from_dict(data["user"]),
            group=ObjectRef.from_dict(data["group"]),
            role=ObjectRef.from_dict(data["role"]),
            site=ObjectRef.from_dict(data["site"]),
            project=optional_ref("project"),
            work_context=optional_ref("workContext"),
            tc_volume=optional_ref("tcVolume"),
            transient_vol_root_dir=data.get("transientVolRootDir", ""),
            is_in_v7_mode=data.get("isInV7Mode", False),
            module_number=data.get("moduleNumber", 0),
            bypass=data.get("bypass", False),
            journaling=data.get("journaling", False),
            app_journaling=data.get("appJournaling", False),
            sec_journaling=data.get("secJournaling", False),
            adm_journaling=data.get("admJournaling", False),
            privileged=data.get("privileged", False),
            is_part_bom_usage_enabled=data.get("isPartBOMUsageEnabled", False),
            is_subscription_mgr_enabled=data.get("isSubscriptionMgrEnabled", False),
            text_infos=_str_list(data, "textInfos"),
            extra_info=dict(data.get("extraInfo") or {}),
            service_data=_service_data(data),
        )


# =============================================================================
# Data Management Types
# =============================================================================


@dataclass
class GetPropertiesResponse:
    """getProperties returns a ServiceData at the top level."""

    qname: str | None
    service_data: ServiceData

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetPropertiesResponse":
        """Create from API response dict."""
        return cls(qname=data.get(".QName"), service_data=ServiceData.from_dict(data))


@dataclass
class ExpandFolderOutput:
    """One expanded folder and its first-level subfolders."""

    input_folder: ObjectRef
    first_level_folders: list[ObjectRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExpandFolderOutput":
        """Create from API response dict."""
        return cls(
            input_folder=ObjectRef.from_dict(data["inputFolder"]),
            first_level_folders=_records(data, "fstlvlFolders", ObjectRef.from_dict),
        )


@dataclass
class ExpandFolderResponse:
    """Response of expandFoldersForCAD."""

    qname: str | None = None
    output: list[ExpandFolderOutput] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExpandFolderResponse":
        """Create from API response dict."""
        return cls(
            qname=data.get(".QName"),
            output=_records(data, "output", ExpandFolderOutput.from_dict),
            service_data=_service_data(data),
        )


@dataclass
class CreatedItem:
    """UIDs of a newly created item and its first revision."""

    item_uid: str
    item_rev_uid: str


@dataclass
class CreateItemsResponse:
    """Response of createItems."""

    output: list[CreatedItem] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateItemsResponse":
        """Create from API response dict."""

        def created(entry: dict[str, Any]) -> CreatedItem:
            return CreatedItem(
                item_uid=ObjectRef.from_dict(entry["item"]).uid,
                item_rev_uid=ObjectRef.from_dict(entry["itemRev"]).uid,
            )

        return cls(output=_records(data, "output", created), service_data=_service_data(data))


@dataclass
class CreateFoldersResponse:
    """Response of createFolders."""

    output: list[ObjectRef] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateFoldersResponse":
        """Create from API response dict."""
        return cls(
            output=_records(data, "output", lambda entry: ObjectRef.from_dict(entry["folder"])),
            service_data=_service_data(data),
        )


@dataclass
class CreatedRelation:
    """One createRelations output entry."""

    client_id: str
    relation: ObjectRef

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreatedRelation":
        """Create from API response dict."""
        return cls(client_id=data.get("clientId", ""), relation=ObjectRef.from_dict(data["relation"]))


@dataclass
class CreateRelationsResponse:
    """Response of createRelations."""

    output: list[CreatedRelation] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateRelationsResponse":
        """Create from API response dict."""
        return cls(
            output=_records(data, "output", CreatedRelation.from_dict),
            service_data=_service_data(data),
        )


@dataclass
class ItemLookup:
    """An item and (optionally) its first matching revision."""

    item_uid: str
    item_rev_uid: str | None = None


@dataclass
class GetItemFromIdOutput:
    """One item with its revisions."""

    item: ObjectRef
    revisions: list[ObjectRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetItemFromIdOutput":
        """Create from API response dict."""
        return cls(
            item=ObjectRef.from_dict(data["item"]),
            revisions=_records(data, "itemRevOutput", lambda rev: ObjectRef.from_dict(rev["itemRevision"])),
        )


@dataclass
class GetItemFromIdResponse:
    """Response of getItemFromId."""

    qname: str | None = None
    output: list[GetItemFromIdOutput] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetItemFromIdResponse":
        """Create from API response dict."""
        return cls(qname=data.get(".QName"), output=_records(data, "output", GetItemFromIdOutput.from_dict))


# =============================================================================
# Saved Query Types
# =============================================================================


@dataclass
class SavedQueryEntry:
    """One entry of getSavedQueries."""

    name: str
    description: str
    query: ObjectRef

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SavedQueryEntry":
        """Create from API response dict."""
        return cls(
            name=_expect(data["name"], str, "name"),
            description=data.get("description") or "",
            query=ObjectRef.from_dict(data["query"]),
        )


@dataclass
class GetSavedQueriesResponse:
    """Response of getSavedQueries."""

    qname: str | None = None
    queries: list[SavedQueryEntry] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetSavedQueriesResponse":
        """Create from API response dict."""
        return cls(
            qname=data.get(".QName"),
            queries=_records(data, "queries", SavedQueryEntry.from_dict),
            service_data=_service_data(data),
        )


@dataclass
class FindSavedQueriesResponse:
    """Response of findSavedQueries: references plus a side-map."""

    qname: str | None = None
    saved_queries: list[ObjectRef] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FindSavedQueriesResponse":
        """Create from API response dict."""
        return cls(
            qname=data.get(".QName"),
            saved_queries=_records(data, "savedQueries", ObjectRef.from_dict),
            service_data=_service_data(data),
        )


@dataclass
class SavedQueryInfo:
    """Flattened saved query."""

    name: str
    description: str
    uid: str
    object_id: str
    class_name: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "uid": self.uid,
            "objectID": self.object_id,
            "className": self.class_name,
            "type": self.type,
        }


# =============================================================================
# Structure Management Types
# =============================================================================


@dataclass
class RevisionRuleEntry:
    """One revision rule."""

    rev_rule: ObjectRef
    has_value_status: dict[str, bool] = field(default_factory=dict)
    override_folders: list[JSONValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RevisionRuleEntry":
        """Create from API response dict."""
        status = data.get("hasValueStatus") or {}
        _expect(status, dict, "hasValueStatus")
        folders = data.get("overrideFolders") or []
        _expect(folders, list, "overrideFolders")
        return cls(
            rev_rule=ObjectRef.from_dict(data["revRule"]),
            has_value_status={key: _expect(value, bool, key) for key, value in status.items()},
            override_folders=[JSONValue.from_python(folder) for folder in folders],
        )


@dataclass
class GetRevisionRulesResponse:
    """Response of getRevisionRules."""

    qname: str | None = None
    output: list[RevisionRuleEntry] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetRevisionRulesResponse":
        """Create from API response dict."""
        return cls(
            qname=data.get(".QName"),
            output=_records(data, "output", RevisionRuleEntry.from_dict),
            service_data=_service_data(data),
        )


@dataclass
class BOMWindow:
    """A created BOM window and its top line."""

    window: ObjectRef
    top_line: ObjectRef
    client_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BOMWindow":
        """Create from API response dict."""
        return cls(
            window=ObjectRef.from_dict(data["bomWindow"]),
            top_line=ObjectRef.from_dict(data["bomLine"]),
            client_id=data.get("clientId", ""),
        )


@dataclass
class CreateBOMWindowsResponse:
    """Response of createBOMWindows."""

    qname: str | None = None
    output: list[BOMWindow] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateBOMWindowsResponse":
        """Create from API response dict."""
        return cls(
            qname=data.get(".QName"),
            output=_records(data, "output", BOMWindow.from_dict),
            service_data=_service_data(data),
        )


@dataclass
class ClientLine:
    """A created or updated child line, echoed with its client id."""

    client_id: str
    line: ObjectRef


@dataclass
class AddChildrenResponse:
    """Response of addOrUpdateChildrenToParentLine."""

    qname: str | None = None
    item_lines: list[ClientLine] = field(default_factory=list)
    item_element_lines: list[ClientLine] = field(default_factory=list)
    service_data: ServiceData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AddChildrenResponse":
        """Create from API response dict."""
        return cls(
            qname=data.get(".QName"),
            item_lines=_records(
                data,
                "itemLines",
                lambda entry: ClientLine(entry.get("clientId", ""), ObjectRef.from_dict(entry["bomline"])),
            ),
            item_element_lines=_records(
                data,
                "itemelementLines",
                lambda entry: ClientLine(entry.get("clientId", ""), ObjectRef.from_dict(entry["itemelementLine"])),
            ),
            service_data=_service_data(data),
        )


@dataclass
class ServiceDataResponse:
    """A response that only carries ServiceData (saveBOMWindows, closeBOMWindows)."""

    qname: str | None = None
    service_data: ServiceData = field(default_factory=ServiceData)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceDataResponse":
        """Create from API response dict."""
        return cls(qname=data.get(".QName"), service_data=_service_data(data) or ServiceData())
