"""Read-only heuristics report for a page.

Answers "would the automation find its controls here?" without clicking
anything. Used by scripts/probe_snapshot.py against saved HTML, which is
the quickest way to check a webmail redesign.
"""

from typing import Any, Dict
from loguru import logger

from readall.browser.document import DomDocument
from readall.providers.base import SelectScope
from readall.providers.registry import ProviderRegistry
from readall.providers.toolbar import CHECKBOX_SELECTOR, find_master_checkbox


async def probe_document(
    document: DomDocument,
    gmail_scope: SelectScope = SelectScope.UNREAD_ONLY
) -> Dict[str, Any]:
    """
    Report which provider matches and which of its controls can be located.

    Args:
        document: Document to inspect (never mutated)
        gmail_scope: Scope the Gmail provider would be configured with

    Returns:
        {
            "location": str,
            "provider": str | None,
            "ready": bool,
            "checkbox_candidates": int,
            "master_checkbox": {"aria_label", "aria_checked", "top"} | None,
            "controls": {group_name: {selector: match_count}}
        }
    """
    registry = ProviderRegistry(document, gmail_scope=gmail_scope)
    provider = registry.resolve()

    report: Dict[str, Any] = {
        "location": document.location,
        "provider": provider.name if provider else None,
        "ready": False,
        "checkbox_candidates": len(await document.query_all(CHECKBOX_SELECTOR)),
        "master_checkbox": None,
        "controls": {},
    }

    if provider is None:
        logger.info("No matching provider found for this page.")
        return report

    for selector in provider.ready_selectors:
        if await document.query(selector) is not None:
            report["ready"] = True
            break

    master = await find_master_checkbox(document)
    if master is not None:
        report["master_checkbox"] = {
            "aria_label": await master.get_attribute("aria-label"),
            "aria_checked": await master.get_attribute("aria-checked"),
            "top": await master.top(),
        }

    for group, selectors in provider.probe_selectors.items():
        report["controls"][group] = {
            selector: len(await document.query_all(selector)) for selector in selectors
        }

    return report
