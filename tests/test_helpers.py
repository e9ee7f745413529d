"""
Common testing utilities for finger tests.

Link order follows the iteration order of the source definitions and is not part of the
contract, so comparisons sort links by `rel` first.
"""

from typing import Any, Dict, List

from finger.model.webfinger import Link, WebFinger


def sorted_links(links: List[Link]) -> List[Link]:
    """Return links sorted by rel, then href."""
    return sorted(links, key=lambda link: (link.rel, link.href))


def assert_webfinger_equal(got: WebFinger, want: WebFinger) -> None:
    """Assert two WebFingers are equal regardless of link order."""
    assert got.subject == want.subject
    assert sorted_links(got.links) == sorted_links(want.links)
    assert got.properties == want.properties


def normalize_jrd(document: Dict[str, Any]) -> Dict[str, Any]:
    """Return a JRD document with its links sorted by rel, then href."""
    normalized = dict(document)
    if "links" in normalized:
        normalized["links"] = sorted(
            normalized["links"], key=lambda link: (link["rel"], link["href"])
        )
    return normalized
