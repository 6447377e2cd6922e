from typing import Final


WILDCARD: Final[str] = "*"
MCP_PREFIX: Final[str] = "@"

LOCAL_CONFIG_DIRNAME: Final[str] = ".amazonq"
GLOBAL_CONFIG_RELPATH: Final[tuple[str, ...]] = (".aws", "amazonq")

MCP_CONFIG_FILENAME: Final[str] = "mcp.json"
PERSONAS_DIRNAME: Final[str] = "personas"
PERSONA_FILE_SUFFIX: Final[str] = ".json"
GLOBAL_CONTEXT_FILENAME: Final[str] = "global_context.json"

DEFAULT_AGENT_NAME: Final[str] = "Default"
DEFAULT_AGENT_DESCRIPTION: Final[str] = "Default persona"

DEFAULT_CONTEXT_FILES: Final[tuple[str, ...]] = (
    "AmazonQ.md",
    "README.md",
    ".amazonq/rules/**/*.md",
)

FS_READ: Final[str] = "fs_read"
FS_WRITE: Final[str] = "fs_write"
EXECUTE_BASH: Final[str] = "execute_bash"
USE_AWS: Final[str] = "use_aws"
REPORT_ISSUE: Final[str] = "report_issue"

BUILT_IN_TOOLS: Final[tuple[str, ...]] = (
    FS_READ,
    FS_WRITE,
    EXECUTE_BASH,
    USE_AWS,
    REPORT_ISSUE,
)

DEFAULT_ALLOWED_BUILT_INS: Final[tuple[str, ...]] = (FS_READ, REPORT_ISSUE)

DEFAULT_MCP_TIMEOUT_MS: Final[int] = 120_000
DEFAULT_HOOK_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_HOOKS_TOTAL_TIMEOUT_SECONDS: Final[float] = 60.0
HOOK_OUTPUT_MAX_CHARS: Final[int] = 10_000
