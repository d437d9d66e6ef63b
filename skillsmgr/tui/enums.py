from enum import Enum

from skillsmgr.models import DeployMethod, OutcomeStatus, SyncStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


OUTCOME_STATUS_STYLE = {
    OutcomeStatus.ADDED: UIStyle.GREEN.value,
    OutcomeStatus.KEPT: UIStyle.DIM.value,
    OutcomeStatus.REMOVED: UIStyle.MAGENTA.value,
    OutcomeStatus.FAILED: UIStyle.RED.value,
    OutcomeStatus.MISSING: UIStyle.YELLOW.value,
}

SYNC_STATUS_STYLE = {
    SyncStatus.UP_TO_DATE: UIStyle.GREEN.value,
    SyncStatus.DRIFTED: UIStyle.YELLOW.value,
    SyncStatus.ORPHANED: UIStyle.RED.value,
}

DEPLOY_METHOD_STYLE = {
    DeployMethod.LINK: UIStyle.CYAN.value,
    DeployMethod.COPY: UIStyle.MAGENTA.value,
}
