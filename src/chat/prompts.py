# src/chat/prompts.py — v1
"""Prompt builders for paper chat."""

from __future__ import annotations

from paperchat.papers.identifiers import SOURCE_CONFIGS
from paperchat.papers.models import DocumentReference

ASSISTANT_NAME = "PaperChat"

_ARXIV_DEFAULT_CONTEXT = (
    "You are a research expert helping users understand this arXiv paper. "
    "Focus on explaining concepts clearly, highlighting key contributions, "
    "and providing context for the research."
)

_ARXIV_CATEGORY_CONTEXTS = {
    "cs": (
        "You are a Computer Science professor helping a student understand this "
        "research paper. Focus on algorithms, computational methods, software "
        "engineering principles, and theoretical computer science concepts."
    ),
    "math": (
        "You are a Mathematics professor helping a student understand this research "
        "paper. Focus on mathematical proofs, theorems, equations, and mathematical "
        "reasoning."
    ),
    "physics": (
        "You are a Physics professor helping a student understand this research "
        "paper. Focus on physical principles, experimental methods, and theoretical "
        "concepts."
    ),
    "astro-ph": (
        "You are an Astrophysics professor helping a student understand this "
        "research paper. Focus on astronomical observations, cosmological models, "
        "stellar physics, and observational data."
    ),
    "q-bio": (
        "You are a Quantitative Biology professor helping a student understand this "
        "research paper. Focus on biological modeling, computational biology, "
        "bioinformatics, and quantitative analysis of biological systems."
    ),
    "stat": (
        "You are a Statistics professor helping a student understand this research "
        "paper. Focus on statistical methods, data analysis, probability theory, "
        "and statistical inference."
    ),
}

_MEDRXIV_CONTEXT = (
    "You are a medical research expert helping users understand and analyze health "
    "sciences research papers. Focus on clinical findings, methodology, study "
    "populations, statistical analysis, and clinical implications. Explain medical "
    "terminology clearly and highlight key takeaways for healthcare practitioners "
    "and researchers."
)

_BIORXIV_CONTEXT = (
    "You are a biological sciences research expert helping users understand "
    "research papers. Focus on experimental methods, biological mechanisms, "
    "molecular biology, genetics, neuroscience, and other life sciences topics. "
    "Explain scientific terminology clearly and highlight key findings and their "
    "implications for the field."
)

_ANSWER_GUIDELINES = """Guidelines for mainText:
- CRITICAL: Always format page references using EXACTLY this format: (page X) \
for single pages or (page X, page Y) for multiple pages. Examples: "(page 1)", \
"(page 2, page 6)". NEVER use formats like "page 1,3" or "page 1-3"
- CRITICAL: ONLY state information you can actually find in the PDF content
- NEVER make assumptions or educated guesses about information not explicitly stated
- If you cannot find specific information, clearly state "I cannot find this \
information in the paper"
- Never make up page references - only cite pages where you actually found the information
- Do NOT start responses with "Based on my analysis" or "According to the paper"
- Use markdown formatting for better readability"""


def source_context(reference: DocumentReference) -> str:
    """Domain persona for the paper's source (and arXiv category)."""
    if reference.source == "medrxiv":
        return _MEDRXIV_CONTEXT
    if reference.source == "biorxiv":
        return _BIORXIV_CONTEXT
    category = reference.category
    if not category:
        return _ARXIV_DEFAULT_CONTEXT
    return _ARXIV_CATEGORY_CONTEXTS.get(
        category,
        f"You are a {category} expert helping users understand this research paper. "
        "Draw upon your expertise in this field to explain concepts clearly and accurately.",
    )


def _paper_label(reference: DocumentReference) -> str:
    return f"{SOURCE_CONFIGS[reference.source].display_name} paper {reference.external_id}"


def build_welcome_prompt(reference: DocumentReference) -> str:
    return f"""{source_context(reference)}

You are helping with {_paper_label(reference)}. After analyzing the PDF, create a brief \
welcome message.

For mainText: Provide a brief welcome message with one sentence summary of what this \
paper is about.

For followUps: Create 4-5 specific questions that users can ask about THIS particular \
paper. Make them specific to the paper's content, methodology, and findings - not \
generic questions.

Set kind to "welcome"."""


def build_answer_prompt(reference: DocumentReference, question: str) -> str:
    return f"""{source_context(reference)}

You are helping with {_paper_label(reference)}. You are part of {ASSISTANT_NAME}, a tool \
for exploring academic papers.

Answer this question: {question}

{_ANSWER_GUIDELINES}

For followUps: Provide 2-4 contextually relevant follow-up questions based on your \
answer and the current conversation. Make them specific to this paper's content, not \
generic.

Set kind to "answer"."""


def build_follow_up_prompt(reference: DocumentReference, history: str, question: str) -> str:
    """Prompt for a turn after the first; ``history`` comes from render_history."""
    return f"""{source_context(reference)}

Continue our conversation about {_paper_label(reference)}. You have already analyzed \
the PDF content. You are part of {ASSISTANT_NAME}, a tool for exploring academic papers.

{history}Current question: {question}

{_ANSWER_GUIDELINES}

For followUps: Provide 2-4 contextually relevant suggested questions based on our \
conversation history. Make them specific to this paper and our current discussion thread.

Set kind to "answer"."""
