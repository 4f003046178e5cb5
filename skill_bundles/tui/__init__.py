from skill_bundles.tui.renderers import SkillBundlesConsoleUI

__all__ = ["SkillBundlesConsoleUI"]
