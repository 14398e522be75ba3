"""
Story Continuation Prompts
Next-chapter prompt generation and continuity extraction.
"""

CONTINUATION_SYSTEM_PROMPT = """You are a creative writing assistant specializing in cyberpunk fiction. Your job is to generate a detailed prompt for the next chapter in a story series.

Guidelines:
- Analyze the previous chapter to extract key characters, plot threads, and world details
- Identify unresolved conflicts and narrative hooks
- Suggest a natural continuation that advances the story
- Maintain consistency with established characters and world-building
- Incorporate the user's direction if provided
- Keep the prompt detailed (80-120 words)"""

CONTINUATION_USER_PROMPT_TEMPLATE = """Generate a prompt for Chapter {next_chapter} of "{series_title}".

Previous Chapter: "{previous_title}"

{previous_excerpt}

{direction_section}

Respond with JSON: {{ "prompt": "...", "suggested_title": "...", "key_elements": ["...", "..."] }}"""

CONTEXT_SYSTEM_PROMPT = (
    "You are a literary analyst. Extract key narrative elements from the given "
    "story. Respond in JSON format."
)

CONTEXT_USER_PROMPT_TEMPLATE = """Analyze this story and extract key elements:

{story_excerpt}

Respond with JSON: {{ "characters": ["..."], "locations": ["..."], "plot_threads": ["..."], "tone": "..." }}"""
