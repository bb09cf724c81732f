"""Version-control integration - changed test file discovery."""

from flakehunter.vcs.changeset import ChangeSetResolver, VersionControlError

__all__ = ["ChangeSetResolver", "VersionControlError"]
