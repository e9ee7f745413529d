"""Construction of the WebFinger index from raw resource definitions.

Each resource attribute is resolved through the URN alias table and then classified: values
that are URIs become links, anything else becomes a property. The build is all or nothing.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from finger.model.webfinger import Link, Resources, URNAliases, WebFinger, WebFingers
from finger.resolve.errors import DuplicateSubject, InvalidAliasURI
from finger.resolve.subject import normalize_subject
from finger.resolve.uri import is_absolute_uri, is_request_uri

logger = logging.getLogger(__name__)


def validate_urn_aliases(aliases: URNAliases) -> None:
    """Raise InvalidAliasURI for the first alias that does not map to an absolute URI."""
    for alias, urn in aliases.items():
        if not is_absolute_uri(urn):
            raise InvalidAliasURI(alias, urn)


def resolve_alias(name: str, aliases: URNAliases) -> str:
    """Return the URN aliased by `name`, or `name` itself when there is no alias for it."""
    return aliases.get(name, name)


def classify_attribute(rel: str, value: str) -> Union[Link, Tuple[str, str]]:
    """Classify an attribute as a link or a property.

    Returns a Link when the value is a URI reference, otherwise a `(key, value)` property pair.
    Values are never escaped or rewritten.
    """
    if is_request_uri(value):
        return Link(rel=rel, href=value)
    return rel, value


def build_webfinger(subject: str, attributes: Dict[str, str], aliases: URNAliases) -> WebFinger:
    links: List[Link] = []
    properties: Dict[str, str] = {}

    for name, value in attributes.items():
        attribute = classify_attribute(resolve_alias(name, aliases), value)
        if isinstance(attribute, Link):
            links.append(attribute)
        else:
            key, prop = attribute
            properties[key] = prop

    return WebFinger(subject=subject, links=links, properties=properties)


def build_webfingers(
    resources: Resources,
    aliases: Optional[URNAliases] = None,
    *,
    strict: bool = False,
) -> WebFingers:
    """
    Build the WebFinger index from raw resource definitions and an optional alias table.

    The alias table is validated before any resource is looked at. Every resource key must
    normalize into a valid subject; the first failure aborts the build and nothing is returned.

    Two keys that normalize to the same subject (`alice@example.com` and
    `acct:alice@example.com`) are resolved by keeping the last one, unless `strict` is set.

    Args:
        resources: Resource key -> attribute name -> value
        aliases: Attribute name -> URN. Missing means no aliases.
        strict: Raise on subject collisions instead of keeping the last definition

    Returns:
        WebFingers: Canonical subject -> WebFinger

    Raises:
        InvalidAliasURI: If an alias does not map to an absolute URI
        InvalidSubject: If a resource key is neither an email address nor an absolute URI
        DuplicateSubject: If `strict` is set and two keys normalize to the same subject
    """
    if aliases is None:
        aliases = {}

    validate_urn_aliases(aliases)

    webfingers: WebFingers = {}
    keys_by_subject: Dict[str, str] = {}

    for key, attributes in resources.items():
        subject = normalize_subject(key)

        if subject in keys_by_subject:
            previous_key = keys_by_subject[subject]
            if strict:
                raise DuplicateSubject(subject, (previous_key, key))
            logger.warning(
                "Resource %s overrides %s: both define subject %s", key, previous_key, subject
            )

        keys_by_subject[subject] = key
        webfingers[subject] = build_webfinger(subject, attributes, aliases)

    logger.debug("Webfinger map built successfully: %d entries", len(webfingers))
    return webfingers
