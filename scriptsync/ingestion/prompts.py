TAGGING_PROMPT = """These are frames sampled evenly from a video clip, in temporal order. Analyze the visual content and respond with a JSON object in this exact format (raw JSON only, no markdown fences):

{
  "description": "A 2-4 sentence natural-language description covering the subjects, setting, action, and mood of the clip.",
  "tags": ["tag1", "tag2", "tag3"]
}

For tags: provide 5-15 lowercase keywords (1-3 words each) covering subjects, actions, setting, lighting conditions, mood, camera angle, and any notable visual elements."""
