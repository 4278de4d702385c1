"""
TC SDK - High-level client with typed results.

This layer provides a clean, typed interface for the Teamcenter operations.
Built on top of the core APIClient and SessionManager. Every public
operation returns a Result: failures are values, so batch callers can skip
and continue instead of unwinding.
"""

import builtins
import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from tc_cli.core import endpoints, normalize
from tc_cli.core.client import DEFAULT_COOKIE_NAME, APIClient, CLIError, DecodeError, RawExchange
from tc_cli.core.envelope import DEFAULT_LOCALE, RequestEnvelope, unwrap, wrap
from tc_cli.core.requests import (
    AddChildrenRequest,
    CreateBOMWindowRequest,
    CreateFolderRequest,
    CreateItemRequest,
    CreateRelationRequest,
    ExpandFoldersRequest,
    FindSavedQueriesRequest,
    GetItemFromIdRequest,
    GetPropertiesRequest,
    bom_windows_envelope,
    revision_rules_envelope,
)
from tc_cli.core.result import Result
from tc_cli.core.session import SessionManager
from tc_cli.core.types import (
    AddChildrenResponse,
    BOMWindow,
    CreatedItem,
    CreateBOMWindowsResponse,
    CreateFoldersResponse,
    CreateItemsResponse,
    CreateRelationsResponse,
    ExpandFolderResponse,
    FindSavedQueriesResponse,
    GetItemFromIdResponse,
    GetPropertiesResponse,
    GetRevisionRulesResponse,
    GetSavedQueriesResponse,
    ItemLookup,
    ModelObject,
    ObjectRef,
    RevisionRuleEntry,
    SavedQueryInfo,
    ServiceData,
    ServiceDataResponse,
    Session,
    SessionInfo,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 4
HOME_FOLDER = "home_folder"


class TCClient:
    """
    High-level Teamcenter client with typed methods.

    Example:
        client = TCClient("http://plm:7001/tc")
        client.session.login("user", "secret").unwrap()

        props = client.data.get_properties(uid, "ItemRevision", "ItemRevision", ["object_name"])
        if props.ok:
            print(props.value["object_name"])

        for query in client.queries.find("Item*").value_or([]):
            print(query.name)

    """

    def __init__(
        self,
        base_url: str | None = None,
        session_id: str | None = None,
        timeout: float | None = None,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        locale: str | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        allow_session_reuse: bool = True,
        on_raw: Callable[[RawExchange], None] | None = None,
    ):
        """
        Initialize the TC client.

        Args:
            base_url: Web tier base URL (or TC_BASE_URL env var)
            session_id: Existing session token to reuse (or TC_SESSION_ID env var)
            timeout: Request timeout in seconds (or TC_TIMEOUT env var)
            cookie_name: Session cookie name
            locale: Locale for stateful headers (or TC_LOCALE env var)
            max_workers: Parallel child fetches during folder expansion
            allow_session_reuse: Keep the prior session when login sets no cookie
            on_raw: Subscriber notified after every HTTP exchange

        """
        self._client = APIClient(base_url=base_url, timeout=timeout, cookie_name=cookie_name, on_raw=on_raw)

        token = session_id or os.environ.get("TC_SESSION_ID")
        self._sessions = SessionManager(
            self._client,
            allow_reuse=allow_session_reuse,
            session=Session(token=token) if token else None,
        )
        self.locale = locale or os.environ.get("TC_LOCALE") or DEFAULT_LOCALE

        # Sub-clients for different service areas
        self.session = SessionOperations(self._client, self._sessions, self.locale)
        self.data = DataManagementOperations(self._client, self._sessions, self.locale, max_workers)
        self.queries = QueryOperations(self._client, self._sessions, self.locale)
        self.structure = StructureOperations(self._client, self._sessions, self.locale)

    @property
    def base_url(self) -> str:
        return self._client.base_url

    @property
    def current_session(self) -> Session | None:
        """The session used when an operation is given none."""
        return self._sessions.current

    @property
    def is_authenticated(self) -> bool:
        return self._sessions.is_authenticated

    @property
    def last_raw(self) -> RawExchange | None:
        """The most recent HTTP exchange (diagnostics only)."""
        return self._client.last_raw

    @property
    def on_raw(self) -> Callable[[RawExchange], None] | None:
        return self._client.on_raw

    @on_raw.setter
    def on_raw(self, subscriber: Callable[[RawExchange], None] | None) -> None:
        self._client.on_raw = subscriber


# =============================================================================
# Shared call machinery
# =============================================================================


class _Operations:
    def __init__(self, client: APIClient, sessions: SessionManager, locale: str):
        self._client = client
        self._sessions = sessions
        self._locale = locale

    def _call(
        self,
        path: str,
        envelope: RequestEnvelope,
        parser: Callable[[dict[str, Any]], T],
        session: Session | None = None,
    ) -> T:
        """Send one authenticated request and decode the response."""
        token = self._sessions.require(session).token
        exchange = self._client.send(self._client.build_url(path), envelope.encode(), token)
        exchange.raise_for_status()
        return unwrap(exchange.body, parser)


def _log_partial_errors(service_data: ServiceData | None) -> None:
    if service_data is None:
        return
    for partial in service_data.partial_errors:
        messages = "; ".join(value.message for value in partial.error_values)
        logger.warning(f"Partial error for {partial.uid or '<no uid>'}: {messages}")


# =============================================================================
# Session Operations
# =============================================================================


class SessionOperations(_Operations):
    """Login and session information."""

    def login(self, username: str, password: str, endpoint: str | None = None, **credentials: str) -> Result[Session]:
        """
        Log in and make the session current.

        Args:
            username: Login name
            password: Password
            endpoint: Full login URL override
            credentials: Optional role, group, locale

        Returns:
            Result with the Session

        """
        try:
            session = self._sessions.authenticate(username, password, endpoint=endpoint, **credentials)
        except CLIError as e:
            logger.debug(f"Login failed: {e.kind}: {e.message}")
            return Result.failure(e)
        return Result.success(session)

    def info(self, session: Session | None = None) -> Result[SessionInfo]:
        """Fetch getTCSessionInfo for the session."""
        try:
            info = self._call(endpoints.SESSION_INFO, wrap(), SessionInfo.from_dict, session)
        except CLIError as e:
            return Result.failure(e)
        return Result.success(info)

    def logout(self) -> None:
        """Forget the current session locally."""
        self._sessions.logout()


# =============================================================================
# Data Management Operations
# =============================================================================


class DataManagementOperations(_Operations):
    """Properties, folders, items and relations."""

    def __init__(self, client: APIClient, sessions: SessionManager, locale: str, max_workers: int):
        super().__init__(client, sessions, locale)
        self._max_workers = max(1, max_workers)

    def _fetch_record(self, ref: ObjectRef, attributes: Sequence[str], session: Session | None) -> ModelObject:
        """
        Fetch one object's properties.

        Raises:
            DecodeError: If the object is missing from the response's model objects

        """
        request = GetPropertiesRequest(objects=[ref], attributes=list(attributes))
        response = self._call(endpoints.GET_PROPERTIES, request.to_envelope(), GetPropertiesResponse.from_dict, session)
        record = response.service_data.get(ref.uid)
        if record is None:
            raise DecodeError(f"getProperties returned no model object for {ref.uid}", details={"uid": ref.uid})
        return record

    def get_properties(
        self,
        uid: str,
        class_name: str,
        type: str,
        attributes: Sequence[str],
        session: Session | None = None,
    ) -> Result[dict[str, str]]:
        """
        Get the first display value of each attribute of one object.

        Args:
            uid: Object UID
            class_name: Object class name
            type: Object type
            attributes: Attribute names to fetch

        Returns:
            Result with attribute -> display value ("" when the attribute is
            absent); a DecodeError failure when the object itself was not returned

        """
        try:
            record = self._fetch_record(ObjectRef(uid, class_name, type), attributes, session)
        except CLIError as e:
            return Result.failure(e)
        return Result.success(normalize.display_properties(record, attributes))

    def get_user_home_folder(self, user_uid: str, session: Session | None = None) -> Result[str | None]:
        """
        Get the UID of a user's home folder.

        Returns:
            Result with the first database value of home_folder, or None when
            the user has none; a DecodeError failure when the user was not returned

        """
        try:
            record = self._fetch_record(ObjectRef(user_uid, "User", "User"), [HOME_FOLDER], session)
        except CLIError as e:
            return Result.failure(e)
        return Result.success(normalize.database_value(record, HOME_FOLDER))

    def expand_folder(
        self,
        folder_uid: str,
        class_name: str = "Folder",
        type: str = "Fnd0HomeFolder",
        attributes: Sequence[str] = ("object_name",),
        expand_item_revisions: bool = False,
        latest_n_revisions: int = 0,
        info: list[dict[str, Any]] | None = None,
        content_types_filter: list[str] | None = None,
        session: Session | None = None,
    ) -> Result[list[dict[str, Any]]]:
        """
        Expand a folder, then fetch properties for every returned object.

        One getProperties call is made per object in the expansion's
        ServiceData. Objects whose fetch fails, including a
        response that omits the object, are left out. Result order is not
        guaranteed.

        Args:
            folder_uid: Folder UID
            class_name: Folder class name
            type: Folder type
            attributes: Attributes to fetch for each child
            expand_item_revisions: Also expand item revisions
            latest_n_revisions: Number of latest revisions to include
            info: Extra expansion info entries
            content_types_filter: Restrict to these content types

        Returns:
            Result with one {"uid", "className", "type", <attributes>} per child

        """
        request = ExpandFoldersRequest(
            folder=ObjectRef(folder_uid, class_name, type),
            expand_item_revisions=expand_item_revisions,
            latest_n_revisions=latest_n_revisions,
            info=info or [],
            content_types_filter=content_types_filter or [],
        )
        try:
            resolved = self._sessions.require(session)
            response = self._call(
                endpoints.EXPAND_FOLDERS, request.to_envelope(), ExpandFolderResponse.from_dict, resolved
            )
        except CLIError as e:
            return Result.failure(e)

        children = normalize.side_map_records(response.service_data)
        if not children:
            return Result.success([])

        def fetch(child) -> tuple[Any, Result[dict[str, str]]]:
            return child, self.get_properties(child.uid, child.class_name, child.type, attributes, session=resolved)

        merged: list[dict[str, Any]] = []
        workers = min(self._max_workers, len(children))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for child, result in pool.map(fetch, children):
                if not result.ok:
                    logger.warning(f"Skipping {child.uid}: {result.kind}: {result.error.message}")
                    continue
                merged.append(normalize.merge_record(child, result.value))
        return Result.success(merged)

    def create_item(
        self,
        name: str,
        type: str,
        container: ObjectRef,
        description: str = "",
        item_id: str = "",
        rev_id: str = "",
        session: Session | None = None,
    ) -> Result[CreatedItem | None]:
        """
        Create an item under a container.

        Returns:
            Result with the created item/revision UIDs, or None if nothing was created

        """
        request = CreateItemRequest(
            name=name,
            type=type,
            container=container,
            description=description,
            item_id=item_id,
            rev_id=rev_id,
        )
        try:
            response = self._call(endpoints.CREATE_ITEMS, request.to_envelope(), CreateItemsResponse.from_dict, session)
        except CLIError as e:
            return Result.failure(e)
        _log_partial_errors(response.service_data)
        return Result.success(normalize.first_output(response.output))

    def create_folder(
        self,
        name: str,
        container: ObjectRef,
        description: str = "",
        session: Session | None = None,
    ) -> Result[ObjectRef | None]:
        """
        Create a folder under a container (contents relation).

        Returns:
            Result with the new folder reference, or None if nothing was created

        """
        request = CreateFolderRequest(name=name, container=container, description=description)
        try:
            response = self._call(
                endpoints.CREATE_FOLDERS, request.to_envelope(), CreateFoldersResponse.from_dict, session
            )
        except CLIError as e:
            return Result.failure(e)
        _log_partial_errors(response.service_data)
        return Result.success(normalize.first_output(response.output))

    def create_relation(
        self,
        primary: ObjectRef,
        secondary: ObjectRef,
        relation_type: str,
        session: Session | None = None,
    ) -> Result[ObjectRef | None]:
        """
        Relate two objects.

        Returns:
            Result with the relation reference, or None if nothing was created

        """
        request = CreateRelationRequest(primary=primary, secondary=secondary, relation_type=relation_type)
        try:
            response = self._call(
                endpoints.CREATE_RELATIONS, request.to_envelope(), CreateRelationsResponse.from_dict, session
            )
        except CLIError as e:
            return Result.failure(e)
        _log_partial_errors(response.service_data)
        created = normalize.first_output(response.output)
        return Result.success(created.relation if created else None)

    def get_item_from_id(
        self,
        item_id: str,
        rev_ids: Sequence[str] = (),
        session: Session | None = None,
    ) -> Result[ItemLookup | None]:
        """
        Find an item and its revision by item id.

        Returns:
            Result with item/revision UIDs, or None when no item matched

        """
        request = GetItemFromIdRequest(item_id=item_id, rev_ids=list(rev_ids))
        try:
            response = self._call(
                endpoints.GET_ITEM_FROM_ID, request.to_envelope(), GetItemFromIdResponse.from_dict, session
            )
        except CLIError as e:
            return Result.failure(e)
        first = normalize.first_output(response.output)
        if first is None:
            return Result.success(None)
        revision = normalize.first_output(first.revisions)
        return Result.success(ItemLookup(item_uid=first.item.uid, item_rev_uid=revision.uid if revision else None))


# =============================================================================
# Saved Query Operations
# =============================================================================


class QueryOperations(_Operations):
    """Saved query discovery."""

    def list(self, session: Session | None = None) -> Result[builtins.list[SavedQueryInfo]]:
        """
        List all saved queries.

        Returns:
            Result with flattened saved queries (empty when none)

        """
        try:
            response = self._call(endpoints.GET_SAVED_QUERIES, wrap(), GetSavedQueriesResponse.from_dict, session)
        except CLIError as e:
            return Result.failure(e)
        return Result.success(
            [
                SavedQueryInfo(
                    name=entry.name,
                    description=entry.description,
                    uid=entry.query.uid,
                    object_id=entry.query.stable_id,
                    class_name=entry.query.class_name,
                    type=entry.query.type,
                )
                for entry in response.queries
            ]
        )

    def find(
        self,
        name: str = "*",
        description: str = "*",
        session: Session | None = None,
    ) -> Result[builtins.list[SavedQueryInfo]]:
        """
        Search saved queries by name/description pattern.

        Queries whose side-map record lacks a name or description are left out.

        Returns:
            Result with matching saved queries (empty when none)

        """
        request = FindSavedQueriesRequest(name=name, description=description)
        try:
            response = self._call(
                endpoints.FIND_SAVED_QUERIES, request.to_envelope(), FindSavedQueriesResponse.from_dict, session
            )
        except CLIError as e:
            return Result.failure(e)
        return Result.success(normalize.saved_query_infos(response.saved_queries, response.service_data))


# =============================================================================
# Structure Management Operations
# =============================================================================


class StructureOperations(_Operations):
    """Revision rules and the BOM window lifecycle."""

    def revision_rules(self, session: Session | None = None) -> Result[list[RevisionRuleEntry]]:
        """List all revision rules."""
        try:
            response = self._call(
                endpoints.GET_REVISION_RULES,
                revision_rules_envelope(self._locale),
                GetRevisionRulesResponse.from_dict,
                session,
            )
        except CLIError as e:
            return Result.failure(e)
        return Result.success(response.output)

    def create_bom_window(
        self,
        item_uid: str,
        rev_rule: str = "",
        unit_no: int = 0,
        date: str = "",
        today: bool = True,
        end_item: str = "",
        end_item_revision: str = "",
        session: Session | None = None,
    ) -> Result[BOMWindow | None]:
        """
        Open a BOM window on an item.

        Returns:
            Result with the window and its top line, or None if none was opened

        """
        request = CreateBOMWindowRequest(
            item_uid=item_uid,
            rev_rule=rev_rule,
            unit_no=unit_no,
            date=date,
            today=today,
            end_item=end_item,
            end_item_revision=end_item_revision,
        )
        try:
            response = self._call(
                endpoints.CREATE_BOM_WINDOWS,
                request.to_envelope(self._locale),
                CreateBOMWindowsResponse.from_dict,
                session,
            )
        except CLIError as e:
            return Result.failure(e)
        return Result.success(normalize.first_output(response.output))

    def add_children(
        self,
        parent_line: str,
        item_rev_uid: str,
        session: Session | None = None,
    ) -> Result[AddChildrenResponse]:
        """Add an item revision under a parent BOM line."""
        request = AddChildrenRequest(parent_line=parent_line, item_rev_uid=item_rev_uid)
        try:
            response = self._call(
                endpoints.ADD_OR_UPDATE_CHILDREN,
                request.to_envelope(self._locale),
                AddChildrenResponse.from_dict,
                session,
            )
        except CLIError as e:
            return Result.failure(e)
        _log_partial_errors(response.service_data)
        return Result.success(response)

    def save_bom_windows(self, windows: Sequence[ObjectRef], session: Session | None = None) -> Result[ServiceData]:
        """
        Save BOM windows.

        Returns:
            Result with the ServiceData (updated UIDs and their model objects)

        """
        try:
            response = self._call(
                endpoints.SAVE_BOM_WINDOWS,
                bom_windows_envelope(list(windows), self._locale),
                ServiceDataResponse.from_dict,
                session,
            )
        except CLIError as e:
            return Result.failure(e)
        _log_partial_errors(response.service_data)
        return Result.success(response.service_data)

    def close_bom_windows(
        self,
        windows: Sequence[ObjectRef] = (),
        session: Session | None = None,
    ) -> Result[list[str]]:
        """
        Close BOM windows.

        Returns:
            Result with the UIDs the server reports as deleted

        """
        try:
            response = self._call(
                endpoints.CLOSE_BOM_WINDOWS,
                bom_windows_envelope(list(windows), self._locale),
                ServiceDataResponse.from_dict,
                session,
            )
        except CLIError as e:
            return Result.failure(e)
        return Result.success(response.service_data.deleted)
