from pathlib import Path


class ToolgateError(Exception):
    """Base user-facing application error."""


class ConfigFileError(ToolgateError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidJsonFormatError(ConfigFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidConfigSchemaError(ConfigFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid config schema ({detail})")


class DecodeError(ToolgateError, ValueError):
    """Raised when a payload does not match the expected wire shape."""


class PermissionDecodeError(DecodeError):
    pass


class AgentDecodeError(DecodeError):
    pass


class McpConfigDecodeError(DecodeError):
    pass


class AgentNotFoundError(ToolgateError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No agent with name {name} found")


class NoActiveAgentError(ToolgateError):
    def __init__(self) -> None:
        super().__init__("No active agent. Agent not published")


class UnknownToolError(ToolgateError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: '{name}'")


class HookNameRequiredError(ToolgateError):
    def __init__(self) -> None:
        super().__init__("Hook name is required")


class HookExistsError(ToolgateError):
    def __init__(self, name: str, scope: str) -> None:
        self.name = name
        self.scope = scope
        super().__init__(f"Hook '{name}' already exists in {scope} hooks")


class HookNotFoundError(ToolgateError):
    def __init__(self, name: str, scope: str) -> None:
        self.name = name
        self.scope = scope
        super().__init__(f"Hook '{name}' not found in {scope} hooks")


class ContextPathError(ToolgateError):
    pass


class InvalidHookTriggerError(ToolgateError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid trigger '{value}'. Expected 'per_prompt' or 'conversation_start'"
        )


class InvalidAgentNameError(ToolgateError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Agent name '{name}' cannot be used as a persona file name"
        )
