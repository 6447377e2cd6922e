from enum import Enum

from toolgate.agents.models import Trigger
from toolgate.models import PermissionEvalResult


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


DECISION_STYLE = {
    PermissionEvalResult.ALLOW: UIStyle.GREEN.value,
    PermissionEvalResult.ASK: UIStyle.YELLOW.value,
    PermissionEvalResult.DENY: UIStyle.RED.value,
}

PERMISSION_STYLE = {
    "alwaysAllow": UIStyle.GREEN.value,
    "deny": UIStyle.RED.value,
    "detailed": UIStyle.CYAN.value,
}

TRIGGER_STYLE = {
    Trigger.PER_PROMPT: UIStyle.CYAN.value,
    Trigger.CONVERSATION_START: UIStyle.MAGENTA.value,
}
