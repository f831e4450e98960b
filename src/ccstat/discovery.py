from dataclasses import dataclass
from pathlib import Path

import structlog

from ccstat.errors import DirectoryAccessError
from ccstat.ids import SessionId

logger = structlog.get_logger()

USAGE_FILE_SUFFIX = ".jsonl"
PROJECTS_DIR = "projects"


@dataclass(frozen=True, slots=True)
class UsageFile:
    path: "Path"
    # file name without the .jsonl extension
    session_id: "SessionId"


def _list_dir(path: "Path") -> "list[Path]":
    try:
        return sorted(path.iterdir())
    except OSError as e:
        raise DirectoryAccessError(path) from e


def discover_usage_files(base_dir: "Path") -> "list[UsageFile]":
    """
    lists every usage log under <base_dir>/projects/<project>/.

    A base directory without a projects/ directory contributes nothing.
    Failing to enumerate a directory that does exist raises
    DirectoryAccessError rather than returning a partial listing.
    """
    projects = Path(base_dir) / PROJECTS_DIR
    if not projects.exists():
        logger.debug("projects_dir_missing", path=str(projects))
        return []

    files: "list[UsageFile]" = []
    for project in _list_dir(projects):
        if not project.is_dir():
            continue

        for entry in _list_dir(project):
            if entry.name.endswith(USAGE_FILE_SUFFIX):
                session = entry.name[: -len(USAGE_FILE_SUFFIX)]
                files.append(UsageFile(path=entry, session_id=SessionId(session)))

    logger.debug("usage_files_discovered", base_dir=str(base_dir), count=len(files))
    return files
