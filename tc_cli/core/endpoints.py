"""
Service endpoint paths, relative to the web tier base URL.

Each path is <service>-<version>-<port>/<operation>.
"""

import urllib.parse

JSON_REST_ROOT = "/JsonRestServices"


def _op(service: str, operation: str) -> str:
    return f"{JSON_REST_ROOT}/{service}/{operation}"


# Session
LOGIN = _op("Core-2011-06-Session", "login")
SESSION_INFO = _op("Core-2007-01-Session", "getTCSessionInfo")

# Data management
GET_PROPERTIES = _op("Core-2006-03-DataManagement", "getProperties")
EXPAND_FOLDERS = _op("Cad-2008-06-DataManagement", "expandFoldersForCAD")
CREATE_ITEMS = _op("Core-2006-03-DataManagement", "createItems")
CREATE_FOLDERS = _op("Core-2006-03-DataManagement", "createFolders")
CREATE_RELATIONS = _op("Core-2006-03-DataManagement", "createRelations")
GET_ITEM_FROM_ID = _op("Core-2007-01-DataManagement", "getItemFromId")

# Saved queries
GET_SAVED_QUERIES = _op("Query-2006-03-SavedQuery", "getSavedQueries")
FIND_SAVED_QUERIES = _op("Query-2010-04-SavedQuery", "findSavedQueries")

# Structure management
GET_REVISION_RULES = _op("Cad-2007-01-StructureManagement", "getRevisionRules")
CREATE_BOM_WINDOWS = _op("Cad-2007-01-StructureManagement", "createBOMWindows")
ADD_OR_UPDATE_CHILDREN = _op("Bom-2008-06-StructureManagement", "addOrUpdateChildrenToParentLine")
SAVE_BOM_WINDOWS = _op("Cad-2008-06-StructureManagement", "saveBOMWindows")
CLOSE_BOM_WINDOWS = _op("Cad-2007-01-StructureManagement", "closeBOMWindows")


def object_url(awc_url: str, uid: str) -> str:
    """Active Workspace deep link that opens an object by UID."""
    base = awc_url.rstrip("/")
    return f"{base}/#/com.siemens.splm.clientfx.tcui.xrt.showObject?uid={urllib.parse.quote(uid, safe='')}"
