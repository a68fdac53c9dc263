"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build prompts from client criteria and the top-ranked packages.
- Call Groq to write a short, friendly explanation per package.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
