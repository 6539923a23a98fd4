"""Answer synthesis: serialize the evidence, one model call, normalized final text."""

import json
import logging
from typing import Sequence

from evidence_agent.agent.llm import ChatModel, extract_text
from evidence_agent.agent.prompts import SYSTEM_ANSWERER
from evidence_agent.schemas.evidence import Evidence

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer generated."


def serialize_evidence(evidences: Sequence[Evidence]) -> str:
    return json.dumps(
        [e.model_dump(mode="json") for e in evidences],
        indent=2,
        ensure_ascii=False,
        default=str,
    )


def synthesize_answer(
    question: str,
    evidences: Sequence[Evidence],
    citations: Sequence[str],
    model: ChatModel,
) -> str:
    """Ask the model to answer from all evidence and cite sources. Not retried; errors propagate."""
    context = serialize_evidence(evidences)
    logger.info("[synthesizer] IN  evidences=%d citations=%s context_len=%d", len(evidences), list(citations), len(context))
    user = (
        f"Question: {question}\n\n"
        f"Evidence:\n{context}\n\n"
        f"Sources: {', '.join(citations) if citations else 'none'}\n\n"
        "Answer:"
    )
    content = model([
        {"role": "system", "content": SYSTEM_ANSWERER},
        {"role": "user", "content": user},
    ])
    answer = extract_text(content).strip()
    logger.info("[synthesizer] OUT answer_len=%d", len(answer))
    return answer or NO_ANSWER
