"""Router: classify a question into a non-empty set of source routes with one model call."""

import json
import logging
import re

from evidence_agent.agent.llm import ChatModel, extract_text
from evidence_agent.agent.prompts import SYSTEM_ROUTER_MULTI
from evidence_agent.schemas.evidence import ROUTE_ORDER, Route

logger = logging.getLogger(__name__)

DEFAULT_ROUTES: tuple[Route, ...] = (Route.WEB,)
_ROUTE_VALUES = frozenset(r.value for r in Route)


def parse_routes(raw: str) -> list[Route]:
    """
    Parse a router response. A JSON array keeps the items that name a route;
    anything else falls back to case-insensitive substring matching. Result is
    deduplicated in SQL, DOCS, WEB order and defaults to [WEB] when empty.
    """
    found: set[Route] = set()
    try:
        parsed = json.loads(raw)
    except (ValueError, TypeError):
        parsed = None
    if isinstance(parsed, list):
        for item in parsed:
            label = str(item).strip().upper()
            if label in _ROUTE_VALUES:
                found.add(Route(label))
    else:
        for route in ROUTE_ORDER:
            if re.search(route.value, raw or "", re.IGNORECASE):
                found.add(route)
    routes = [r for r in ROUTE_ORDER if r in found]
    return routes or list(DEFAULT_ROUTES)


def route_question(question: str, model: ChatModel) -> list[Route]:
    """One model call, no retries. Model errors propagate."""
    logger.info("[router] IN  question=%r", question)
    content = model([
        {"role": "system", "content": SYSTEM_ROUTER_MULTI},
        {"role": "user", "content": question},
    ])
    raw = extract_text(content).strip()
    logger.info("[router] llm_raw=%r", raw)
    routes = parse_routes(raw)
    logger.info("[router] OUT routes=%s", [r.value for r in routes])
    return routes
