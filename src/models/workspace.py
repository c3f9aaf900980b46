"""
Workspace index entries

Shapes of the entries the editor client sends in answer to the
`executableTalk/workspaceFiles` and `executableTalk/launchConfigs` requests.
Field aliases follow the client's camelCase wire names.
"""

from pydantic import BaseModel, ConfigDict, Field


class CachedFile(BaseModel):
    """A workspace file known to the client"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    relative_path: str = Field(alias="relativePath", description="Workspace-relative, forward-slash separated")
    uri: str = Field(description="Full file URI")


class CachedLaunchConfig(BaseModel):
    """A named debug launch configuration"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    uri: str = Field(description="URI of the launch.json holding the configuration")
    line: int = Field(default=0, ge=0, description="0-based line where the configuration starts")
