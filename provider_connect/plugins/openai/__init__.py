"""OpenAI provider plugin."""
