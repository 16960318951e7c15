# unified-intelligence

A library of parts for a server that stores and recalls structured thoughts:

- **Workflow states and thinking modes** (`unified_intelligence.frameworks`).
  `WorkflowState` has five members: conversation, debug, build, stuck and review.
  `WorkflowState.parse` accepts loose input. It handles synonyms such as `"dbg"` or
  `"blocked"`, prefixes such as `"Debugging"`, and near misses within an edit distance
  of 2. Anything it cannot match becomes `CONVERSATION`. `ThinkingMode` covers
  first principles, Socratic, systems, OODA, root cause and SWOT, and gives each
  mode's title, description, colour and priority. `StuckTracker` rotates through
  thinking modes while a chain stays stuck. It converts to and from a plain dict with
  `to_dict` and `from_dict`.
- **Framework processing** (`unified_intelligence.framework_processor`).
  `FrameworkProcessor(mode).process_thought(thought, number)` returns a
  `FrameworkResult` that holds prompts, insights and metadata. The functions
  `display_framework_start`, `display_prompts` and `display_insights` print coloured
  output to stderr, or to another stream you pass in.
- **Rate limiting** (`unified_intelligence.rate_limit`). `RateLimiter` is an async
  sliding-window limiter that counts each instance separately. Its methods are
  `check_rate_limit`, `usage_stats` and `clear_instance`.
- **Models** (`unified_intelligence.models`). This module holds thought records,
  think parameters, chain metadata, knowledge-graph nodes and relations, and chat
  completion request and response records. Most of them have `to_dict` and
  `from_dict` methods. Bad input raises `SerializationError`.
- **Recall** (`unified_intelligence.recall`). `RecallHandler` fetches one thought
  (`mode="thought"`) or a whole chain (`mode="chain"`) from a `ThoughtRepository` that
  you implement. It returns the result as JSON text in a `ToolResult`.
- **Knowledge graph** (`unified_intelligence.knowledge`). `KnowledgeHandler.handle`
  supports the modes create, search, set_active, get_entity, create_relation,
  get_relations, update_entity and delete_entity. It works against a
  `KnowledgeRepository` that you implement. You can also pass an async indexer hook.
  The handler calls it with each created or updated entity and its
  `entity_embedding_text`.
- **Errors** (`unified_intelligence.errors`). Every error derives from
  `UnifiedIntelligenceError`, for example `ValidationError`, `RateLimitError` and
  `NotFoundError`.

## Installation

```
pip install unified-intelligence
```

## Example

```python
from unified_intelligence.frameworks import WorkflowState, StuckTracker
from unified_intelligence.framework_processor import FrameworkProcessor

state = WorkflowState.parse("Debugging")        # WorkflowState.DEBUG
mode = state.thinking_modes()[0]                # ThinkingMode.ROOT_CAUSE
result = FrameworkProcessor(mode).process_thought("API is slow", 2)
print(result.prompts)

tracker = StuckTracker("chain-1")
print(tracker.next_approach())                  # first_principles
```

Rate limiting:

```python
import asyncio
from unified_intelligence.rate_limit import RateLimiter
from unified_intelligence.errors import RateLimitError

async def main():
    limiter = RateLimiter(3, 60)
    for _ in range(3):
        await limiter.check_rate_limit("CC")
    try:
        await limiter.check_rate_limit("CC")
    except RateLimitError:
        print("limited")

asyncio.run(main())
```

## What this package does not do

The package has no storage backend. `ThoughtRepository` and `KnowledgeRepository` are
abstract, and you must supply their implementations. The package does not run a
server and has no command-line entry point. It does not generate embeddings or call
any language-model API. The knowledge handler's indexer hook only passes the
embedding text on to your own code.

## Tests

```
pip install -e ".[test]"
pytest
```