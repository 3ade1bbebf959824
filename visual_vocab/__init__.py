"""Visual flashcard enrichment library.

Subpackages:
- visual_vocab.common: Shared utilities (config, logging, errors, env loading)
- visual_vocab.schema: Data model (flashcards, dictionary records, image candidates)
- visual_vocab.spider: Remote fetchers (HTTP client, Google Images, SpanishDict)
- visual_vocab.ranking: Embedding reranker and keyword extraction
- visual_vocab.input: Flashcard loading from YAML/JSON/CSV/text files
- visual_vocab.output: Enrichment orchestrator and markdown card rendering
"""
