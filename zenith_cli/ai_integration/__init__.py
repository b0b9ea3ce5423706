"""
AI integration package.
Turns a goal into suggested tasks via OpenAI or Anthropic.
"""
