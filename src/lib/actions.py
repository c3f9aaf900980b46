"""
Action catalog for deckls

The registry maps action type identifiers to ActionSpec objects describing
their parameters. Diagnostics, completion, hover, quick-fixes and
go-to-definition all consult it; none of them execute anything.
"""

from typing import Dict, List, Optional

from ..models.actions import ActionSpec, CompletionKind, ParameterSpec, ParameterType


class ActionRegistry:
    """
    Registry of action type specifications

    Maps action type identifiers (e.g. "file.open") to ActionSpec objects.
    Iteration order is registration order, which is also the order in which
    type completions are offered.
    """

    def __init__(self) -> None:
        """Initialize the registry and register all built-in action types"""
        self.specs: Dict[str, ActionSpec] = {}
        self.editorActions_register()
        self.terminalActions_register()
        self.debugActions_register()
        self.workflowActions_register()

    def register(self, spec: ActionSpec) -> None:
        """Register an action specification"""
        self.specs[spec.type] = spec

    def spec_get(self, action_type: str) -> Optional[ActionSpec]:
        """Get the full specification for an action type, or None if unknown"""
        return self.specs.get(action_type)

    def known_is(self, action_type: str) -> bool:
        """Check if an action type is in the catalog"""
        return action_type in self.specs

    def types_list(self) -> List[str]:
        """All known action type identifiers, in registration order"""
        return list(self.specs.keys())

    def requiredParams_get(self, action_type: str) -> List[str]:
        """
        Names of the required parameters of an action type

        Args:
            action_type: Action type identifier

        Returns:
            Required parameter names; empty for unknown types
        """
        spec = self.specs.get(action_type)
        return spec.requiredNames_get() if spec else []

    def paramNames_get(self, action_type: str) -> List[str]:
        """All declared parameter names of an action type; empty for unknown types"""
        spec = self.specs.get(action_type)
        return spec.names_get() if spec else []

    def editorActions_register(self) -> None:
        """Register editor-facing actions"""

        self.register(ActionSpec(
            type='file.open',
            description='Opens a file in the VS Code editor at an optional line and column.',
            requires_trust=False,
            parameters=[
                ParameterSpec(
                    name='path',
                    type=ParameterType.STRING,
                    required=True,
                    description='Workspace-relative file path to open.',
                    completion_kind=CompletionKind.FILE,
                ),
                ParameterSpec(
                    name='line',
                    type=ParameterType.NUMBER,
                    description='1-based line number to reveal after opening.',
                ),
                ParameterSpec(
                    name='column',
                    type=ParameterType.NUMBER,
                    description='1-based column number to position the cursor.',
                ),
                ParameterSpec(
                    name='range',
                    type=ParameterType.STRING,
                    description='Line range to select (e.g., "10-20").',
                ),
                ParameterSpec(
                    name='viewColumn',
                    type=ParameterType.NUMBER,
                    description='Editor view column to open in (1 = first, 2 = second, etc.).',
                ),
                ParameterSpec(
                    name='preview',
                    type=ParameterType.BOOLEAN,
                    description='Whether to open as a preview tab (default: false).',
                ),
            ],
        ))

        self.register(ActionSpec(
            type='editor.highlight',
            description='Highlights a range of lines in an already-open file with a configurable style.',
            requires_trust=False,
            parameters=[
                ParameterSpec(
                    name='path',
                    type=ParameterType.STRING,
                    required=True,
                    description='Workspace-relative file path.',
                    completion_kind=CompletionKind.FILE,
                ),
                ParameterSpec(
                    name='lines',
                    type=ParameterType.STRING,
                    required=True,
                    description='Line range to highlight (e.g., "10-20" or "10").',
                ),
                ParameterSpec(
                    name='color',
                    type=ParameterType.STRING,
                    description='CSS color for the highlight decoration.',
                ),
                ParameterSpec(
                    name='style',
                    type=ParameterType.STRING,
                    description='Highlight style.',
                    enum=['subtle', 'prominent'],
                    completion_kind=CompletionKind.ENUM,
                ),
                ParameterSpec(
                    name='duration',
                    type=ParameterType.NUMBER,
                    description='Duration in ms (0 = until slide exit).',
                ),
            ],
        ))

    def terminalActions_register(self) -> None:
        """Register actions that run shell commands"""

        self.register(ActionSpec(
            type='terminal.run',
            description='Runs a shell command in the integrated terminal.',
            requires_trust=True,
            parameters=[
                ParameterSpec(
                    name='command',
                    type=ParameterType.STRING,
                    required=True,
                    description=(
                        'Command to execute in the terminal. Can be a plain string or a '
                        'platform command map object with keys: macos, windows, linux, '
                        'default. Supports placeholders: ${pathSep}, ${home}, ${shell}, '
                        '${pathDelimiter}.'
                    ),
                ),
                ParameterSpec(
                    name='name',
                    type=ParameterType.STRING,
                    description='Name for the terminal instance.',
                ),
                ParameterSpec(
                    name='background',
                    type=ParameterType.BOOLEAN,
                    description='Run in background without waiting for completion.',
                ),
                ParameterSpec(
                    name='timeout',
                    type=ParameterType.NUMBER,
                    description='Timeout in ms (default: 30000).',
                ),
                ParameterSpec(
                    name='clear',
                    type=ParameterType.BOOLEAN,
                    description='Clear terminal before execution.',
                ),
                ParameterSpec(
                    name='reveal',
                    type=ParameterType.BOOLEAN,
                    description='Show the terminal panel.',
                ),
                ParameterSpec(
                    name='cwd',
                    type=ParameterType.STRING,
                    description='Working directory (workspace-relative).',
                    completion_kind=CompletionKind.FILE,
                ),
            ],
        ))

    def debugActions_register(self) -> None:
        """Register debugger actions"""

        self.register(ActionSpec(
            type='debug.start',
            description='Starts a debug session using a named launch configuration.',
            requires_trust=True,
            parameters=[
                ParameterSpec(
                    name='configName',
                    type=ParameterType.STRING,
                    required=True,
                    description='Name of the launch configuration.',
                    completion_kind=CompletionKind.LAUNCH_CONFIG,
                ),
                ParameterSpec(
                    name='workspaceFolder',
                    type=ParameterType.STRING,
                    description='Workspace folder for multi-root workspaces.',
                ),
                ParameterSpec(
                    name='stopOnEntry',
                    type=ParameterType.BOOLEAN,
                    description='Stop at the entry point after launch.',
                ),
            ],
        ))

    def workflowActions_register(self) -> None:
        """Register composite and command-dispatch actions"""
        from ..config import appsettings

        self.register(ActionSpec(
            type=appsettings.sequence_type,
            description='Executes multiple actions in order with configurable delay between steps.',
            requires_trust=False,
            parameters=[
                ParameterSpec(
                    name='steps',
                    type=ParameterType.ARRAY,
                    required=True,
                    description='Non-empty array of action definitions to execute in order.',
                ),
                ParameterSpec(
                    name='delay',
                    type=ParameterType.NUMBER,
                    description='Delay in ms between steps (default: 500).',
                ),
                ParameterSpec(
                    name='stopOnError',
                    type=ParameterType.BOOLEAN,
                    description='Stop on first failure (default: true).',
                ),
            ],
        ))

        self.register(ActionSpec(
            type='vscode.command',
            description='Executes an arbitrary VS Code command by ID.',
            requires_trust=False,
            parameters=[
                ParameterSpec(
                    name='id',
                    type=ParameterType.STRING,
                    required=True,
                    description='VS Code command ID (e.g., "workbench.action.openSettings").',
                ),
                ParameterSpec(
                    name='args',
                    type=ParameterType.ARRAY,
                    description='Arguments to pass to the command.',
                ),
            ],
        ))
