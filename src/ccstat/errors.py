from pathlib import Path


class CcstatError(Exception):
    """
    base class for every error raised by ccstat.
    """


class DirectoryAccessError(CcstatError):
    """
    DirectoryAccessError is raised when an existing directory cannot
    be enumerated. It is fatal for the whole load: a partially listed
    tree would silently under-count usage.
    """

    def __init__(self, path: "Path") -> "None":
        super().__init__(f"Failed to access directory: {path}")
        self.path = path


class RecordParseError(CcstatError, ValueError):
    """
    raised when a single JSONL line is not a valid usage record.
    """


class DataDirectoryNotFoundError(CcstatError):
    """
    raised when none of the candidate data directories exist.
    """

    def __init__(self, candidates: "list[Path]") -> "None":
        listed = ", ".join(str(c) for c in candidates) or "<none>"
        super().__init__(f"No usage data directory found (checked: {listed})")
        self.candidates = candidates
