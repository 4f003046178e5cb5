from enum import Enum

from skill_bundles.models import FileInstallStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    DIM = "dim"
    WHITE = "white"


INSTALL_STATUS_STYLE = {
    FileInstallStatus.WRITTEN: UIStyle.GREEN.value,
    FileInstallStatus.OVERWRITTEN: UIStyle.CYAN.value,
    FileInstallStatus.FAILED: UIStyle.RED.value,
}
