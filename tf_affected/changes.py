"""Change detection: which files changed between two revisions."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

logger = logging.getLogger(__name__)

_VALID_REF = re.compile(r"^[a-zA-Z0-9._\-/^~]+$")
_DANGEROUS_TOKENS = (";", "&&", "||", "|", "$", "`", "(", ")")


class InvalidReferenceError(ValueError):
    """A revision identifier failed validation."""


class ChangeDetectionError(RuntimeError):
    """Git could not produce the list of changed files."""


def sanitize_ref(ref: str) -> str:
    if not ref or not isinstance(ref, str) or not ref.strip():
        raise InvalidReferenceError("Invalid git reference: must be a non-empty string")

    sanitized = ref.strip()
    if not _VALID_REF.match(sanitized):
        raise InvalidReferenceError(
            f'Invalid git reference format: "{ref}". Only alphanumeric characters, dots, '
            "hyphens, underscores, slashes, carets, and tildes are allowed."
        )
    if any(token in sanitized for token in _DANGEROUS_TOKENS):
        raise InvalidReferenceError(f'Git reference contains potentially dangerous characters: "{ref}"')
    return sanitized


def _split_lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class ChangeSource(ABC):
    @abstractmethod
    def changed_files(self, base: str, head: str) -> List[str]:
        ...

    @abstractmethod
    def changed_files_for_current_commit(self) -> List[str]:
        ...


class GitChangeSource(ChangeSource):
    """Changed files from a local git repository."""

    def __init__(self, repo_path: Path = Path("."), repo: Optional[Repo] = None) -> None:
        self.repo_path = Path(repo_path)
        self._repo = repo

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            try:
                self._repo = Repo(self.repo_path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError) as exc:
                raise ChangeDetectionError(f"Not a git repository: {self.repo_path}") from exc
        return self._repo

    def changed_files(self, base: str, head: str) -> List[str]:
        revision_range = f"{sanitize_ref(base)}..{sanitize_ref(head)}"
        logger.debug("Running git diff --name-only %s", revision_range)
        try:
            output = self.repo.git.diff("--name-only", revision_range)
        except GitCommandError as exc:
            logger.debug("Git diff command failed: %s", exc)
            raise ChangeDetectionError(f"Git diff failed: {exc}") from exc

        files = _split_lines(output)
        logger.debug("Git diff returned %d files", len(files))
        return files

    def changed_files_for_current_commit(self) -> List[str]:
        try:
            return self.changed_files("HEAD^", "HEAD")
        except ChangeDetectionError as exc:
            logger.debug("HEAD^..HEAD failed, trying git show: %s", exc)

        try:
            output = self.repo.git.show("--name-only", "--format=", "HEAD")
        except (GitCommandError, ChangeDetectionError) as exc:
            logger.debug("git show also failed: %s", exc)
            return []

        files = _split_lines(output)
        logger.debug("git show returned %d files", len(files))
        return files


class ChangeDetector:
    """Pick the change list from explicit input, a revision range, or the last commit."""

    def __init__(self, source: ChangeSource) -> None:
        self.source = source

    def detect_changed_files(
        self,
        files: Optional[Sequence[str]] = None,
        base: Optional[str] = None,
        head: Optional[str] = None,
    ) -> List[str]:
        if files:
            logger.debug("Using manually provided files: %d files", len(files))
            return list(files)

        if base and head:
            logger.debug('Using git diff with base="%s" and head="%s"', base, head)
            return self.source.changed_files(base, head)

        logger.debug("Using default git detection for current commit")
        return self.source.changed_files_for_current_commit()
