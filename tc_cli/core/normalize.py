"""
Flatten nested service responses into stable domain results.

Rules shared by every operation:
- single-valued reads take index 0 of display values or of database values,
  never a mix of the two
- a UID missing from the model object side-map is a miss, not an error
- a missing ServiceData or side-map yields an empty result
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from tc_cli.core.types import ModelObject, ObjectRef, SavedQueryInfo, ServiceData

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

QUERY_NAME = "query_name"
QUERY_DESC = "query_desc"


def display_properties(record: ModelObject | None, attributes: Iterable[str]) -> dict[str, str]:
    """
    First display value of each requested attribute.

    Attributes absent from the record map to "". A missing record yields an
    empty mapping.
    """
    if record is None:
        return {}
    result: dict[str, str] = {}
    for attribute in attributes:
        value = record.props.get(attribute)
        first = value.first_display if value else None
        result[attribute] = first if first is not None else ""
    return result


def database_value(record: ModelObject | None, attribute: str) -> str | None:
    """First database value of an attribute, or None."""
    if record is None:
        return None
    value = record.props.get(attribute)
    return value.first_database if value else None


def side_map_records(service_data: ServiceData | None) -> list[ModelObject]:
    """All model objects of a ServiceData, in side-map order."""
    if service_data is None:
        return []
    return list(service_data.model_objects.values())


def merge_record(ref: ModelObject | ObjectRef, properties: dict[str, str]) -> dict[str, Any]:
    """Combine an object's identity with its fetched properties."""
    merged: dict[str, Any] = {"uid": ref.uid, "className": ref.class_name, "type": ref.type}
    merged.update(properties)
    return merged


def first_output(output: Sequence[T] | None) -> T | None:
    """First created/returned element; None when the service returned nothing."""
    if not output:
        return None
    return output[0]


def join_side_map(
    refs: Iterable[ObjectRef],
    service_data: ServiceData | None,
    project: Callable[[ObjectRef, ModelObject], R | None],
) -> list[R]:
    """
    Resolve each reference against the side-map and project it.

    References with no side-map record, or for which project returns None
    (required fields missing), are skipped.
    """
    if service_data is None:
        return []
    results: list[R] = []
    for ref in refs:
        record = service_data.get(ref.uid)
        if record is None:
            logger.debug(f"No model object for {ref.uid}; skipping")
            continue
        projected = project(ref, record)
        if projected is not None:
            results.append(projected)
    return results


def project_saved_query(ref: ObjectRef, record: ModelObject) -> SavedQueryInfo | None:
    """Saved query name/description from the side-map record."""
    props = record.props
    name = props[QUERY_NAME].first_display if QUERY_NAME in props else None
    description = props[QUERY_DESC].first_display if QUERY_DESC in props else None
    if name is None or description is None:
        return None
    return SavedQueryInfo(
        name=name,
        description=description,
        uid=ref.uid,
        object_id=ref.stable_id,
        class_name=ref.class_name,
        type=ref.type,
    )


def saved_query_infos(refs: Iterable[ObjectRef], service_data: ServiceData | None) -> list[SavedQueryInfo]:
    """Join findSavedQueries references against their side-map."""
    return join_side_map(refs, service_data, project_saved_query)
