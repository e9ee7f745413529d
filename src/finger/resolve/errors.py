from typing import Tuple


class BuildError(Exception):
    """
    Base exception for failures while building the WebFinger index.

    Build errors are raised at startup only. Any of them aborts the whole build, so a
    partially built index is never served.
    """


class InvalidSubject(BuildError):
    """A resource key is neither an email address nor an absolute URI."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"error-finger-build-1000 Invalid resource subject ({key}): "
            "must be an email address or an absolute URI"
        )


class InvalidAliasURI(BuildError):
    """An entry of the URN alias table does not map to an absolute URI."""

    def __init__(self, alias: str, value: str) -> None:
        self.alias = alias
        self.value = value
        super().__init__(
            f"error-finger-build-1001 Invalid URN alias ({alias}): "
            f"{value!r} is not an absolute URI"
        )


class DuplicateSubject(BuildError):
    """Two resource keys normalize to the same subject."""

    def __init__(self, subject: str, keys: Tuple[str, str]) -> None:
        self.subject = subject
        self.keys = keys
        super().__init__(
            f"error-finger-build-1002 Duplicate resource subject ({subject}) "
            f"defined by keys {', '.join(keys)}"
        )


class DefinitionFileError(BuildError):
    """A definition file could not be read or parsed."""

    @staticmethod
    def unreadable(path: str, reason: str) -> "DefinitionFileError":
        """The file does not exist at a non-default path, or cannot be opened."""
        return DefinitionFileError(
            f"error-finger-build-1003 Error opening definition file {path}: {reason}"
        )

    @staticmethod
    def malformed(path: str, reason: str) -> "DefinitionFileError":
        """The file is not valid YAML or does not have the expected shape."""
        return DefinitionFileError(
            f"error-finger-build-1004 Error parsing definition file {path}: {reason}"
        )
