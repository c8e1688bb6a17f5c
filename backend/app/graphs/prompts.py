"""
Instruction templates sent to the text-generation service.

The critique template names the canonical sections in the same order the
assembler emits them; keep CANONICAL_SECTIONS and CRITIQUE_PROMPT in sync.
"""

CANONICAL_SECTIONS = [
    "Opening Hook",
    "Impact Statement",
    "Mission Statement",
    "Goals & Objectives",
    "Budget Justification",
]

CRITIQUE_PROMPT = """You are an expert grant writer who helps to connect small non-profits and startups led by powerful, strong, BIPOC women with financial abundance that allows the grant recipients to do tremendous good in the world.

Analyze the grant proposal and provide feedback in the following format:

# Section Analysis
For each section below, indicate if it needs improvement (YES/NO) and provide specific feedback:

## Opening Hook
Status: [YES/NO]
Feedback: [Your specific feedback here]

## Impact Statement
Status: [YES/NO]
Feedback: [Your specific feedback here]

## Mission Statement
Status: [YES/NO]
Feedback: [Your specific feedback here]

## Goals & Objectives
Status: [YES/NO]
Feedback: [Your specific feedback here]

## Budget Justification
Status: [YES/NO]
Feedback: [Your specific feedback here]

Be specific in your feedback, explaining exactly what isn't working and why."""

# {section} and {content} are substituted with str.replace, drafts may contain braces
IMPROVEMENT_PROMPT = """Based on the critique provided, generate two distinctly different approaches for improving this section: {section}.

For context, here is the full draft:
{content}

Format your response exactly like this:

Option 1:
[Complete rewrite with first approach - focus on being direct and impactful]

Option 2:
[Complete rewrite with second approach - focus on being descriptive and detailed]

Make each option distinctly different in tone and emphasis. Each option should be complete and ready to use.
Each option should maintain proper formatting and structure."""

FINAL_REVIEW_PROMPT = """Review this draft holistically and provide actionable feedback. Consider how well it flows and if it presents a compelling narrative.

Format your response like this:

## Overall Assessment
[Provide a brief evaluation of the draft's effectiveness and potential impact]

## Key Strengths
- [Specific strength with explanation]
- [Specific strength with explanation]
- [Specific strength with explanation]

## Recommended Improvements
- [Specific, actionable improvement suggestion]
- [Specific, actionable improvement suggestion]
- [Specific, actionable improvement suggestion]

## Final Recommendations
[Concrete next steps and suggestions for strengthening the proposal further]"""


def build_improvement_prompt(section: str, draft: str) -> str:
    return IMPROVEMENT_PROMPT.replace("{section}", section).replace("{content}", draft)
