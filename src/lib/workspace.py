"""
Workspace file and launch-config index

Populated from the editor client (the server issues two custom requests
after initialization) and refreshed from watched-file events. Queried by
go-to-definition; never touches the file system itself.
"""

from typing import Any, Iterable, List, Mapping, Optional

from lsprotocol.types import Location
from pydantic import ValidationError

from ..models.document import range_make
from ..models.workspace import CachedFile, CachedLaunchConfig
from .log import LOG


def payload_toDict(entry: Any) -> Mapping[str, Any]:
    """
    Plain mapping view of one client payload entry

    pygls hands untyped responses over as mappings or as generated
    namedtuple-like objects depending on its converter.
    """
    if isinstance(entry, Mapping):
        return entry
    if hasattr(entry, '_asdict'):
        return entry._asdict()
    return vars(entry)


def path_normalize(relative_path: str) -> str:
    return relative_path.replace('\\', '/')


class WorkspaceFileIndex:
    """
    Cached workspace listing

    Attributes:
        workspace_uri: Root folder URI, always ending with '/'
        files: Known workspace files
        launch_configs: Known launch configurations
    """

    def __init__(self, workspace_uri: str) -> None:
        self.workspace_uri = workspace_uri if workspace_uri.endswith('/') else workspace_uri + '/'
        self.files: List[CachedFile] = []
        self.launch_configs: List[CachedLaunchConfig] = []

    def files_set(self, files: Iterable[CachedFile]) -> None:
        """Replace the whole file listing"""
        self.files = list(files)

    def launchConfigs_set(self, configs: Iterable[CachedLaunchConfig]) -> None:
        """Replace the whole launch configuration listing"""
        self.launch_configs = list(configs)

    def filesPayload_load(self, payload: Optional[Iterable[Any]]) -> int:
        """
        Replace the file listing from a raw client response

        Invalid entries are logged and skipped.

        Returns:
            Number of files accepted
        """
        files: List[CachedFile] = []
        for entry in payload or []:
            try:
                files.append(CachedFile.model_validate(payload_toDict(entry)))
            except (ValidationError, TypeError) as e:
                LOG(f"Skipping invalid workspace file entry {entry!r}: {e}", level=2)
        self.files_set(files)
        return len(files)

    def launchConfigsPayload_load(self, payload: Optional[Iterable[Any]]) -> int:
        """Replace the launch configurations from a raw client response; returns the count accepted"""
        configs: List[CachedLaunchConfig] = []
        for entry in payload or []:
            try:
                configs.append(CachedLaunchConfig.model_validate(payload_toDict(entry)))
            except (ValidationError, TypeError) as e:
                LOG(f"Skipping invalid launch config entry {entry!r}: {e}", level=2)
        self.launchConfigs_set(configs)
        return len(configs)

    def files_filterByPrefix(self, prefix: str) -> List[CachedFile]:
        """Files whose relative path starts with *prefix*, case-insensitive"""
        lower = prefix.lower()
        return [f for f in self.files if f.relative_path.lower().startswith(lower)]

    def files_filterBySubstring(self, query: str) -> List[CachedFile]:
        """Files whose relative path contains *query*, case-insensitive"""
        lower = query.lower()
        return [f for f in self.files if lower in f.relative_path.lower()]

    def uri_resolve(self, relative_path: str) -> Optional[str]:
        """URI of a workspace-relative path, or None if not indexed"""
        normalized = path_normalize(relative_path)
        for cached in self.files:
            if cached.relative_path == normalized:
                return cached.uri
        return None

    def file_has(self, relative_path: str) -> bool:
        return self.uri_resolve(relative_path) is not None

    def file_add(self, cached: CachedFile) -> None:
        """Add a file unless its URI is already indexed"""
        if not any(f.uri == cached.uri for f in self.files):
            self.files.append(cached)

    def file_remove(self, uri: str) -> None:
        self.files = [f for f in self.files if f.uri != uri]

    def relativePath_fromUri(self, uri: str) -> Optional[str]:
        """Workspace-relative path of a URI under the workspace root"""
        if not uri.startswith(self.workspace_uri):
            return None
        return uri[len(self.workspace_uri):]

    def launchConfig_resolve(self, name: str) -> Optional[Location]:
        """Location of the named launch configuration inside its launch.json"""
        for config in self.launch_configs:
            if config.name == name:
                return Location(uri=config.uri, range=range_make(config.line, 0, config.line, 0))
        return None

    def launchConfigs_filterByPrefix(self, prefix: str) -> List[CachedLaunchConfig]:
        lower = prefix.lower()
        return [c for c in self.launch_configs if c.name.lower().startswith(lower)]

    def dispose(self) -> None:
        self.files = []
        self.launch_configs = []
