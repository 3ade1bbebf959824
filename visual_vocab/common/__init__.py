"""Common utilities shared across fetching, ranking and output."""

from visual_vocab.common.utils import (
    unique_preserve_order,
    clean_text,
    sanitize_filename,
    _load_env_file,
    _clean_value,
    ensure_dir,
)
from visual_vocab.common.logging import (
    log_debug,
    set_thread_log_context,
    clear_thread_log_context,
    setup_thread_prefixed_stdout,
)
from visual_vocab.common.config import (
    CONFIG_FILENAME,
    DEFAULT_MODEL_NAME,
    PipelineConfig,
    load_config,
    write_config,
    get_output_dir,
)
from visual_vocab.common.errors import (
    VisualVocabError,
    TransportError,
    PayloadNotFound,
    PayloadMalformed,
    NoCandidates,
    ModelError,
    ModelLoadError,
    PipelineError,
)

__all__ = [
    # utils
    "unique_preserve_order",
    "clean_text",
    "sanitize_filename",
    "_load_env_file",
    "_clean_value",
    "ensure_dir",
    # logging
    "log_debug",
    "set_thread_log_context",
    "clear_thread_log_context",
    "setup_thread_prefixed_stdout",
    # config
    "CONFIG_FILENAME",
    "DEFAULT_MODEL_NAME",
    "PipelineConfig",
    "load_config",
    "write_config",
    "get_output_dir",
    # errors
    "VisualVocabError",
    "TransportError",
    "PayloadNotFound",
    "PayloadMalformed",
    "NoCandidates",
    "ModelError",
    "ModelLoadError",
    "PipelineError",
]
