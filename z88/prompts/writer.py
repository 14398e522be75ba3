"""
Synthesis Prompt
Weaves every agent contribution into the finished story.
"""

SYNTHESIS_SYSTEM_PROMPT = (
    "You are a master cyberpunk storyteller. Synthesize the following creative "
    "elements into a cohesive, engaging short story (1800-2500 words)."
)

SYNTHESIS_USER_PROMPT_TEMPLATE = """Create a complete cyberpunk short story using these elements:

**Original Prompt**: {prompt}

**Plot Structure**:
{plot_structure}

**Character Development**:
{character_depth}

**World-Building**:
{world_details}

**Creative Twists**:
{creative_twists}

{research_section}
Write the complete story with:
- Vivid prose and sensory details
- Strong pacing and dramatic tension
- Emotional resonance
- Satisfying conclusion
- 1800-2500 words

Begin the story directly, no meta-commentary."""

RESEARCH_SECTION_TEMPLATE = """**Research Notes**:
{research_notes}
"""
