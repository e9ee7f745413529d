"""Reading of the YAML definition files.

Two files feed the index: the URN alias file (`name: urn`) and the finger file
(`resource: {name: value}`). A missing file is only tolerated at its default path, so a typo in
an explicitly configured path fails startup instead of silently serving nothing.
"""

import logging
from typing import Dict, Optional

import yaml
from pydantic import TypeAdapter, ValidationError

from finger.model.webfinger import Resources, URNAliases, WebFingers
from finger.resolve.errors import DefinitionFileError
from finger.resolve.fingers import build_webfingers

logger = logging.getLogger(__name__)

DEFAULT_URN_FILE = "urns.yml"
DEFAULT_FINGER_FILE = "fingers.yml"

URNAliasesAdapter = TypeAdapter(Dict[str, str])
ResourcesAdapter = TypeAdapter(Dict[str, Dict[str, str]])


def read_definition_file(path: str, default_path: str) -> str:
    """Return the content of a definition file, or "" if it is missing from its default path."""
    try:
        with open(path, encoding="utf-8") as fd:
            return fd.read()
    except FileNotFoundError as e:
        if path == default_path:
            logger.debug("Definition file %s not found, using an empty definition", path)
            return ""
        raise DefinitionFileError.unreadable(path, str(e)) from e
    except OSError as e:
        raise DefinitionFileError.unreadable(path, str(e)) from e


def parse_definition(path: str, content: str, adapter: TypeAdapter) -> dict:
    try:
        # BaseLoader resolves no implicit types: every scalar stays the literal text.
        data = yaml.load(content, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise DefinitionFileError.malformed(path, str(e)) from e

    if data is None:
        return {}

    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise DefinitionFileError.malformed(path, str(e)) from e


class FingerReader:
    """Loads the alias and finger files and builds the WebFinger index from them."""

    def __init__(
        self,
        urn_file: str = DEFAULT_URN_FILE,
        finger_file: str = DEFAULT_FINGER_FILE,
    ) -> None:
        self.urn_file = urn_file
        self.finger_file = finger_file
        self.urns_content: Optional[str] = None
        self.fingers_content: Optional[str] = None

    def read_files(self) -> None:
        self.urns_content = read_definition_file(self.urn_file, DEFAULT_URN_FILE)
        self.fingers_content = read_definition_file(self.finger_file, DEFAULT_FINGER_FILE)

    def parse_urn_aliases(self) -> URNAliases:
        aliases = parse_definition(self.urn_file, self.urns_content or "", URNAliasesAdapter)
        logger.debug("URNs file parsed successfully: %d aliases", len(aliases))
        return aliases

    def parse_resources(self) -> Resources:
        resources = parse_definition(
            self.finger_file, self.fingers_content or "", ResourcesAdapter
        )
        logger.debug("Fingers file parsed successfully: %d resources", len(resources))
        return resources

    def read_finger_file(self, strict: bool = False) -> WebFingers:
        """
        Parse the loaded files and build the WebFinger index.

        `read_files` is called first if the files have not been loaded yet.

        Raises:
            DefinitionFileError: If a file cannot be read or parsed
            BuildError: If the definitions do not produce a valid index
        """
        if self.urns_content is None or self.fingers_content is None:
            self.read_files()

        aliases = self.parse_urn_aliases()
        resources = self.parse_resources()
        return build_webfingers(resources, aliases, strict=strict)
