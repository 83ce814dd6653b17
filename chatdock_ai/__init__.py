"""ChatDock-AI.

Control core of a local LLM agent that may act on the user's machine.

High-level architecture
-----------------------

Every tool call the model asks for passes one shared safety policy before it
runs:

- ``chatdock_ai.agent_core``:

  - ``capabilities``: enabled flags, the global execution mode and execution
    profiles, persisted to ``<workspace>/config/runtime.json``.
  - ``policy``: allow/deny decisions for classified tool calls.
  - ``planning``: normalization of the tool-call shapes models emit.
  - ``tools``/``specialists``: tool catalogue scoped by specialist role.
  - ``runtime``: the LangGraph turn engine.
  - ``subagents``/``heartbeat``: background and proactive entry points.

- ``chatdock_ai.server``: FastAPI control API around one ``AgentRuntime``.

Typical workflow
----------------

Build the runtime with ``chatdock_ai.agent_core.factory.build_runtime`` and
send user messages through ``runtime.service.handle_message``.
"""
