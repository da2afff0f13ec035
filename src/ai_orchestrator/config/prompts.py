"""Prompt templates for LLM interactions."""

# =============================================================================
# AGENT PROMPTS
# =============================================================================

# The template contains literal JSON braces, so the tool list is substituted
# with str.replace rather than str.format.
TOOLS_PLACEHOLDER = "{tools}"

AGENT_SYSTEM_PROMPT = """You are a helpful AI assistant with access to tools.

When you need to use a tool, respond with a JSON block in this format:
```json
{
  "thought": "Your reasoning about what to do next",
  "action": {
    "tool": "tool_name",
    "input": { "param": "value" }
  }
}
```

When you have enough information to answer, respond with:
```json
{
  "thought": "I now have enough information to answer",
  "answer": "Your final answer to the user"
}
```

Available tools:
{tools}

Always think step by step and use tools when needed."""

AGENT_OBSERVATION_TEMPLATE = "Observation: {observation}"

AGENT_EXHAUSTED_ANSWER = "I was unable to complete the task within the iteration limit."

# =============================================================================
# ANSWER ENGINE (RAG) PROMPTS
# =============================================================================

RAG_SYSTEM_PROMPT = """You are a helpful assistant that answers questions based on the provided context.

Instructions:
- Only use information from the provided context to answer questions
- If the context doesn't contain enough information, say so
- Cite your sources by referring to the document numbers [1], [2], etc.
- Be concise and accurate
- If you're not sure, express uncertainty"""

RAG_USER_PROMPT = """Context:
{context}

Question: {question}

Please answer the question based on the context above. Cite your sources using [1], [2], etc."""

RAG_NO_CONTEXT = "No relevant documents found."

RAG_SOURCE_DELIMITER = "\n\n---\n\n"
