"""Ostinato - ReAct agent control loop with planning and resumable sessions.

Key modules:

- :mod:`ostinato.agent` - Reason/act loop, planning, controller and trace state
- :mod:`ostinato.intercept` - Built-in interceptors (HITL, loop breaker, context window)
- :mod:`ostinato.llm` - OpenAI-compatible LLM clients (Ollama, OpenAI API)
- :mod:`ostinato.tools` - Tool decorator and registry
- :mod:`ostinato.sessions` - SQLite persistence of suspended sessions
"""

__version__ = "0.1.0"
